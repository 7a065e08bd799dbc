"""
Reviewer claim coordination.

A claim is a compare-and-set on reviewer_id: the UPDATE only matches rows whose
reviewer_id is still NULL, so when reviewers race for the same request exactly
one UPDATE affects a row. No status change happens here; moving the request
into review is a lifecycle transition.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.database_types import utcnow
from naming_review.errors import AlreadyClaimedError, InvalidTransitionError, NotFoundError
from naming_review.models.naming_request import NamingRequest, TERMINAL_STATUSES
from naming_review.models.request_event import RequestEvent
from naming_review.services.storage import storage_errors

logger = logging.getLogger(__name__)

_TERMINAL_VALUES = [status.value for status in TERMINAL_STATUSES]


async def _reload(db: AsyncSession, request_id: UUID) -> NamingRequest:
    request = await db.get(NamingRequest, request_id, populate_existing=True)
    if request is None:
        raise NotFoundError("NamingRequest", request_id)
    return request


def _refuse_terminal(request: NamingRequest, action: str) -> None:
    if request.is_terminal:
        raise InvalidTransitionError(request.id, request.status, action)


async def claim_request(
    db: AsyncSession,
    request_id: UUID,
    reviewer_id: str,
    reviewer_name: Optional[str] = None,
) -> NamingRequest:
    """
    Assign an unclaimed request to a reviewer.

    Claiming a request the same reviewer already holds is a no-op.

    Raises:
        AlreadyClaimedError: Another reviewer already holds it
        InvalidTransitionError: The request is in a terminal status
        NotFoundError: Unknown request
    """
    async with storage_errors(db, "claim_request"):
        now = utcnow()
        result = await db.execute(
            update(NamingRequest)
            .where(
                NamingRequest.id == request_id,
                NamingRequest.reviewer_id.is_(None),
                NamingRequest.status.not_in(_TERMINAL_VALUES),
            )
            .values(reviewer_id=reviewer_id, reviewer_name=reviewer_name, claimed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            await db.rollback()
            request = await _reload(db, request_id)
            _refuse_terminal(request, "claim")
            if is_claimed_by(request, reviewer_id):
                return request
            logger.info(
                f"Claim lost on request {request_id}",
                extra={"request_id": str(request_id), "reviewer_id": reviewer_id, "holder": request.reviewer_id},
            )
            raise AlreadyClaimedError(request_id, request.reviewer_id)

        request = await _reload(db, request_id)
        db.add(RequestEvent(
            request_id=request_id,
            event="claim",
            from_status=request.status,
            to_status=request.status,
            actor_id=reviewer_id,
            actor_name=reviewer_name,
            created_at=now,
        ))
        await db.commit()

    logger.info(f"Request {request_id} claimed by {reviewer_id}", extra={"request_id": str(request_id)})
    return request


async def unclaim_request(
    db: AsyncSession,
    request_id: UUID,
    actor_id: str,
    notes: Optional[str] = None,
) -> NamingRequest:
    """Admin operation: release the reviewer so the request can be claimed again."""
    async with storage_errors(db, "unclaim_request"):
        request = await _reload(db, request_id)
        _refuse_terminal(request, "unclaim")
        previous = request.reviewer_id

        now = utcnow()
        request.reviewer_id = None
        request.reviewer_name = None
        request.claimed_at = None
        request.updated_at = now
        db.add(RequestEvent(
            request_id=request_id,
            event="unclaim",
            from_status=request.status,
            to_status=request.status,
            actor_id=actor_id,
            notes=notes or (f"Released from {previous}" if previous else None),
            created_at=now,
        ))
        await db.commit()

    logger.info(f"Request {request_id} unclaimed (was {previous})", extra={"request_id": str(request_id)})
    return request


async def reassign_request(
    db: AsyncSession,
    request_id: UUID,
    reviewer_id: str,
    reviewer_name: Optional[str],
    actor_id: str,
    notes: Optional[str] = None,
) -> NamingRequest:
    """Admin operation: hand the request to another reviewer regardless of the current claim."""
    async with storage_errors(db, "reassign_request"):
        request = await _reload(db, request_id)
        _refuse_terminal(request, "reassign")
        previous = request.reviewer_id

        now = utcnow()
        request.reviewer_id = reviewer_id
        request.reviewer_name = reviewer_name
        request.claimed_at = now
        request.updated_at = now
        db.add(RequestEvent(
            request_id=request_id,
            event="reassign",
            from_status=request.status,
            to_status=request.status,
            actor_id=actor_id,
            notes=notes or f"Reassigned from {previous or 'nobody'} to {reviewer_id}",
            created_at=now,
        ))
        await db.commit()

    logger.info(
        f"Request {request_id} reassigned {previous} → {reviewer_id}",
        extra={"request_id": str(request_id), "actor_id": actor_id},
    )
    return request


def is_claimed_by(request: NamingRequest, reviewer_id: str) -> bool:
    return request.reviewer_id == reviewer_id
