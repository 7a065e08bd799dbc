"""
Naming request API endpoints.

Role rules:
- submitters submit, read their own requests and cancel them
- reviewers query the queue, claim, and drive requests they hold
- admins may act on any request and manage claims
"""
import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.api.auth import get_current_actor, require_admin, require_reviewer
from naming_review.database import get_db
from naming_review.models.naming_request import NamingRequest, RequestStatus
from naming_review.schemas.auth import Actor
from naming_review.schemas.request import (
    ReassignBody,
    RequestEventResponse,
    RequestResponse,
    ReviewQueryResponse,
    SortDirection,
    SortKey,
    SubmitRequest,
    TransitionRequest,
)
from naming_review.services import claims, lifecycle, review_query

logger = logging.getLogger(__name__)
router = APIRouter()


def _ensure_can_read(request: NamingRequest, actor: Actor) -> None:
    if not actor.can_review() and request.requestor_id != actor.id:
        raise HTTPException(status_code=403, detail="Not authorized to view this request")


def _ensure_can_transition(request: NamingRequest, actor: Actor, to_status: RequestStatus) -> None:
    if actor.is_admin():
        return
    if actor.can_review():
        if not claims.is_claimed_by(request, actor.id):
            raise HTTPException(status_code=403, detail="Claim the request before changing its status")
        return
    # Submitters may only withdraw their own request
    if request.requestor_id != actor.id or to_status != RequestStatus.CANCELED:
        raise HTTPException(status_code=403, detail="Not authorized to change this request")


# Endpoints
@router.post("/", response_model=RequestResponse, status_code=201)
async def submit_request(
    data: SubmitRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """
    Submit a naming request.

    Values are validated against the given form configuration, or the active
    one when form_config_id is omitted. A 422 lists every failing field.
    """
    return await lifecycle.submit_request(
        db,
        form_config_id=data.form_config_id,
        values=data.values,
        requestor_id=actor.id,
        requestor_name=actor.name,
    )


@router.get("/", response_model=ReviewQueryResponse)
async def query_requests(
    status: Optional[str] = Query(None, description="Status filter, or 'all'"),
    requestor_name: Optional[str] = None,
    reviewer_name: Optional[str] = None,
    search: Optional[str] = None,
    sort: SortKey = "submitted_at",
    direction: SortDirection = "desc",
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1),
    db: AsyncSession = Depends(get_db),
    reviewer: Actor = Depends(require_reviewer)
):
    """Review queue with filters, sorting, pagination and statistics."""
    result = await review_query.query_requests(
        db,
        status=status,
        requestor_name=requestor_name,
        reviewer_name=reviewer_name,
        search=search,
        sort=sort,
        direction=direction,
        page=page,
        page_size=page_size,
    )
    return ReviewQueryResponse(
        items=[RequestResponse.model_validate(item) for item in result.items],
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        pages=result.pages,
        metrics=result.metrics,
    )


@router.get("/mine", response_model=List[RequestResponse])
async def list_my_requests(
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Requests submitted by the caller, newest first."""
    return await review_query.list_requests_for_requestor(db, actor.id)


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    request = await lifecycle.get_request(db, request_id)
    _ensure_can_read(request, actor)
    return request


@router.get("/{request_id}/events", response_model=List[RequestEventResponse])
async def list_request_events(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Audit trail, oldest first."""
    request = await lifecycle.get_request(db, request_id)
    _ensure_can_read(request, actor)
    return await lifecycle.list_request_events(db, request_id)


@router.patch("/{request_id}/transition", response_model=RequestResponse)
async def transition_request(
    request_id: UUID,
    data: TransitionRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """
    Move a request along the review lifecycle.

    Reviewers must hold the claim; admins may act on any request; submitters
    may only cancel their own. Disallowed edges return 409.
    """
    request = await lifecycle.get_request(db, request_id)
    _ensure_can_transition(request, actor, data.status)

    return await lifecycle.transition_request(
        db,
        request_id,
        data.status,
        actor_id=actor.id,
        notes=data.notes,
        actor_name=actor.name,
        approval=data.approval,
    )


@router.post("/{request_id}/claim", response_model=RequestResponse)
async def claim_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    reviewer: Actor = Depends(require_reviewer)
):
    """
    Take ownership of an unclaimed request. 409 when someone else holds it.

    The recorded reviewer name always comes from the caller's identity headers.
    """
    return await claims.claim_request(db, request_id, reviewer.id, reviewer.name)


@router.post("/{request_id}/unclaim", response_model=RequestResponse)
async def unclaim_request(
    request_id: UUID,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    return await claims.unclaim_request(db, request_id, actor_id=admin.id)


@router.post("/{request_id}/reassign", response_model=RequestResponse)
async def reassign_request(
    request_id: UUID,
    data: ReassignBody,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """Hand the request to another reviewer regardless of the current claim."""
    return await claims.reassign_request(
        db,
        request_id,
        reviewer_id=data.reviewer_id,
        reviewer_name=data.reviewer_name,
        actor_id=admin.id,
        notes=data.notes,
    )
