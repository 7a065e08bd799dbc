"""
State machine for naming requests.
ALL status changes must go through this module.
"""
import logging
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.database_types import utcnow
from naming_review.errors import InvalidTransitionError, NotFoundError, ValidationError
from naming_review.models.approved_name import ApprovedName, ApprovedNameSource
from naming_review.models.form_configuration import FormConfiguration
from naming_review.models.naming_request import NamingRequest, RequestStatus
from naming_review.models.request_event import RequestEvent
from naming_review.schemas.request import ApprovalDetails
from naming_review.services.form_validation import validate_submission
from naming_review.services.storage import storage_errors

# Configure logger
logger = logging.getLogger(__name__)


# Define allowed status transitions
ALLOWED_TRANSITIONS: Dict[RequestStatus, list[RequestStatus]] = {
    RequestStatus.SUBMITTED: [
        RequestStatus.UNDER_REVIEW,
        RequestStatus.ON_HOLD,
        RequestStatus.CANCELED,
    ],
    RequestStatus.UNDER_REVIEW: [
        RequestStatus.FINAL_REVIEW,
        RequestStatus.ON_HOLD,
        RequestStatus.CANCELED,
    ],
    RequestStatus.FINAL_REVIEW: [
        RequestStatus.APPROVED,
        RequestStatus.REJECTED,
        RequestStatus.ON_HOLD,
        RequestStatus.CANCELED,
    ],
    RequestStatus.ON_HOLD: [RequestStatus.UNDER_REVIEW, RequestStatus.CANCELED],  # Resume review
    RequestStatus.APPROVED: [],  # Terminal state
    RequestStatus.REJECTED: [],  # Terminal state
    RequestStatus.CANCELED: [],  # Terminal state
}

# Timestamp column stamped on entering each status
STATUS_TIMESTAMPS: Dict[RequestStatus, tuple[str, ...]] = {
    RequestStatus.UNDER_REVIEW: ("review_started_at",),
    RequestStatus.FINAL_REVIEW: ("final_review_started_at",),
    RequestStatus.ON_HOLD: ("held_at",),
    RequestStatus.APPROVED: ("approved_at", "reviewed_at"),
    RequestStatus.REJECTED: ("rejected_at", "reviewed_at"),
    RequestStatus.CANCELED: ("canceled_at",),
}

# Value keys read from dynamic forms, first non-empty wins
TITLE_KEYS = ("requestTitle", "request_title", "title", "proposedName", "proposed_name", "proposed_name_1")
DESCRIPTION_KEYS = ("description", "assetDescription", "asset_description")
PROPOSED_NAME_KEYS = ("proposedName", "proposed_name", "proposed_name_1", "requestTitle", "request_title", "title")
FACET_KEYS = {
    "service_line": ("serviceLine", "service_line", "businessUnit", "business_unit"),
    "ipr": ("ipr", "IPR"),
    "category": ("category", "assetType", "asset_type"),
    "name_class": ("class", "nameClass", "name_class"),
    "contact_person": ("contactPerson", "contact_person"),
}


def _first_value(values: Dict[str, Any], keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = values.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return None


def can_transition(from_status: RequestStatus, to_status: RequestStatus) -> bool:
    """Check if a transition is allowed without touching the database"""
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


async def _fetch_request(db: AsyncSession, request_id: UUID) -> NamingRequest:
    request = await db.get(NamingRequest, request_id, populate_existing=True)
    if request is None:
        raise NotFoundError("NamingRequest", request_id)
    return request


async def get_request(db: AsyncSession, request_id: UUID) -> NamingRequest:
    async with storage_errors(db, "get_request"):
        return await _fetch_request(db, request_id)


async def list_request_events(db: AsyncSession, request_id: UUID) -> list[RequestEvent]:
    """Audit trail for a request, oldest first."""
    async with storage_errors(db, "list_request_events"):
        await _fetch_request(db, request_id)
        result = await db.execute(
            select(RequestEvent)
            .where(RequestEvent.request_id == request_id)
            .order_by(RequestEvent.sequence.asc())
        )
        return list(result.scalars().all())


async def submit_request(
    db: AsyncSession,
    form_config_id: Optional[UUID],
    values: Dict[str, Any],
    requestor_id: str,
    requestor_name: Optional[str] = None,
) -> NamingRequest:
    """
    Validate values against a form configuration and create a submitted request.

    Args:
        db: Database session
        form_config_id: Configuration to submit against. None means the active one.
        values: Field name -> submitted value
        requestor_id: Caller identity
        requestor_name: Display name for queries and the directory contact

    Returns:
        The new NamingRequest in SUBMITTED state

    Raises:
        ValidationError: Per-field violations, or no active configuration
        NotFoundError: Unknown or deleted configuration
    """
    async with storage_errors(db, "submit_request"):
        if form_config_id is None:
            result = await db.execute(
                select(FormConfiguration)
                .where(FormConfiguration.is_active.is_(True), FormConfiguration.deleted_at.is_(None))
                .limit(1)
            )
            config = result.scalars().first()
            if config is None:
                raise ValidationError.single("form_config_id", "No active form configuration")
        else:
            config = await db.get(FormConfiguration, form_config_id, populate_existing=True)
            if config is None or config.is_deleted:
                raise NotFoundError("FormConfiguration", form_config_id)
            if not config.is_active:
                logger.warning(f"Submission against inactive form configuration {config.id}")

        # Freeze the schema as it is right now
        snapshot = [dict(field) for field in config.fields]
        accepted = validate_submission(snapshot, values)

        now = utcnow()
        request = NamingRequest(
            requestor_id=requestor_id,
            requestor_name=requestor_name,
            form_config_id=config.id,
            form_snapshot=snapshot,
            values=accepted,
            title=_first_value(accepted, TITLE_KEYS) or "",
            description=_first_value(accepted, DESCRIPTION_KEYS),
            status=RequestStatus.SUBMITTED.value,
            submitted_at=now,
            created_at=now,
            updated_at=now,
        )
        db.add(request)
        await db.flush()

        db.add(RequestEvent(
            request_id=request.id,
            event="submitted",
            from_status=None,
            to_status=RequestStatus.SUBMITTED.value,
            actor_id=requestor_id,
            actor_name=requestor_name,
            created_at=now,
        ))
        await db.commit()
        await db.refresh(request)

    logger.info(
        f"Request submitted: {request.id}",
        extra={"request_id": str(request.id), "form_config_id": str(config.id), "requestor_id": requestor_id},
    )
    return request


async def transition_request(
    db: AsyncSession,
    request_id: UUID,
    to_status: RequestStatus,
    actor_id: str,
    notes: Optional[str] = None,
    actor_name: Optional[str] = None,
    approval: Optional[ApprovalDetails] = None,
) -> NamingRequest:
    """
    Move a request to a new status with validation.

    The status write is conditional on the status just read, so two concurrent
    transitions from the same status cannot both apply. Entering APPROVED
    creates the directory entry in the same transaction.

    Args:
        db: Database session
        request_id: ID of the request to transition
        to_status: Target status
        actor_id: Who is performing the transition
        notes: Free text stored on the audit event
        actor_name: Display name for the audit event
        approval: Overrides for the directory entry (APPROVED only)

    Returns:
        Updated NamingRequest

    Raises:
        InvalidTransitionError: If the edge is not allowed
        NotFoundError: If the request does not exist
    """
    to_status = RequestStatus(to_status)

    async with storage_errors(db, "transition_request"):
        request = await _fetch_request(db, request_id)
        current_status = RequestStatus(request.status)

        if not can_transition(current_status, to_status):
            raise InvalidTransitionError(request_id, current_status.value, to_status.value)

        now = utcnow()
        changes: Dict[str, Any] = {"status": to_status.value, "updated_at": now}
        for column in STATUS_TIMESTAMPS.get(to_status, ()):
            changes[column] = now

        # Optimistic lock on the status we validated against
        result = await db.execute(
            update(NamingRequest)
            .where(NamingRequest.id == request_id, NamingRequest.status == current_status.value)
            .values(**changes)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            latest = await _fetch_request(db, request_id)
            raise InvalidTransitionError(request_id, latest.status, to_status.value)

        db.add(RequestEvent(
            request_id=request_id,
            event="transition",
            from_status=current_status.value,
            to_status=to_status.value,
            actor_id=actor_id,
            actor_name=actor_name,
            notes=notes,
            created_at=now,
        ))

        if to_status == RequestStatus.APPROVED:
            db.add(_build_approved_name(request, approval, now))

        try:
            await db.commit()
        except IntegrityError:
            # Unique request_id on approved_names: the request was approved concurrently
            await db.rollback()
            latest = await _fetch_request(db, request_id)
            raise InvalidTransitionError(request_id, latest.status, to_status.value)

        request = await _fetch_request(db, request_id)

    # Log transition with metadata
    log_data = {
        "request_id": str(request_id),
        "from_status": current_status.value,
        "to_status": to_status.value,
        "actor_id": actor_id,
    }
    if notes:
        log_data["notes"] = notes

    logger.info(f"Request status transition: {current_status.value} → {to_status.value}", extra=log_data)

    return request


def _build_approved_name(
    request: NamingRequest,
    approval: Optional[ApprovalDetails],
    approved_at,
) -> ApprovedName:
    """
    Project an approved request into the directory.
    Explicit approval details win over values read from the submission.
    """
    values = request.values or {}
    details = approval.model_dump(exclude_none=True) if approval else {}

    facets = {key: details.get(key) or _first_value(values, keys) for key, keys in FACET_KEYS.items()}
    if not facets["contact_person"]:
        facets["contact_person"] = request.requestor_name

    return ApprovedName(
        source=ApprovedNameSource.REQUEST.value,
        request_id=request.id,
        approved_name=details.get("approved_name") or _first_value(values, PROPOSED_NAME_KEYS) or request.title,
        description=details.get("description") or request.description,
        approval_date=approved_at,
        created_at=approved_at,
        **facets,
    )
