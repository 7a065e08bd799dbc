"""
Reviewer-facing listing of naming requests: filter, sort, paginate, and the
statistics shown above the queue.
"""
import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.config import settings
from naming_review.database_types import utcnow
from naming_review.errors import ValidationError
from naming_review.models.naming_request import NamingRequest, RequestStatus
from naming_review.schemas.request import ReviewMetrics
from naming_review.services.storage import storage_errors

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "submitted_at": NamingRequest.submitted_at,
    "title": NamingRequest.title,
}

SECONDS_PER_DAY = 86400


@dataclass
class ReviewPage:
    items: list[NamingRequest]
    total: int
    page: int
    page_size: int
    pages: int
    metrics: ReviewMetrics


def _parse_status(status: Union[RequestStatus, str, None]) -> Optional[RequestStatus]:
    if status is None or status == "all":
        return None
    try:
        return RequestStatus(status)
    except ValueError:
        raise ValidationError.single("status", f"Unknown status '{status}'")


def _build_filters(
    status: Optional[RequestStatus],
    requestor_name: Optional[str],
    reviewer_name: Optional[str],
    search: Optional[str],
) -> list:
    filters = []
    if status is not None:
        filters.append(NamingRequest.status == status.value)
    if requestor_name and requestor_name.strip():
        filters.append(NamingRequest.requestor_name.icontains(requestor_name.strip(), autoescape=True))
    if reviewer_name and reviewer_name.strip():
        filters.append(NamingRequest.reviewer_name.icontains(reviewer_name.strip(), autoescape=True))
    if search and search.strip():
        term = search.strip()
        filters.append(or_(
            NamingRequest.title.icontains(term, autoescape=True),
            NamingRequest.description.icontains(term, autoescape=True),
            NamingRequest.requestor_name.icontains(term, autoescape=True),
            NamingRequest.requestor_id.icontains(term, autoescape=True),
        ))
    return filters


async def query_requests(
    db: AsyncSession,
    status: Union[RequestStatus, str, None] = None,
    requestor_name: Optional[str] = None,
    reviewer_name: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "submitted_at",
    direction: str = "desc",
    page: int = 1,
    page_size: Optional[int] = None,
) -> ReviewPage:
    """
    List requests for review.

    All filters are AND-ed; search is a case-insensitive substring match OR-ed
    across title, description, requestor name and requestor id. Ties in the sort key are
    broken by id ascending so pages are stable.

    Args:
        db: Database session
        status: A RequestStatus, "all", or None
        requestor_name: Substring of the requestor's name
        reviewer_name: Substring of the assigned reviewer's name
        search: Free text
        sort: "submitted_at" (default) or "title"
        direction: "asc" or "desc" (default)
        page: 1-based page number
        page_size: Items per page, capped at settings.max_page_size

    Raises:
        ValidationError: Bad status, sort key, direction or paging values
    """
    status_filter = _parse_status(status)

    if sort not in SORT_COLUMNS:
        raise ValidationError.single("sort", f"Sort must be one of: {', '.join(SORT_COLUMNS)}")
    if direction not in ("asc", "desc"):
        raise ValidationError.single("direction", "Direction must be 'asc' or 'desc'")
    if page < 1:
        raise ValidationError.single("page", "Page must be 1 or greater")

    size = page_size if page_size is not None else settings.default_page_size
    if size < 1:
        raise ValidationError.single("page_size", "Page size must be 1 or greater")
    size = min(size, settings.max_page_size)

    filters = _build_filters(status_filter, requestor_name, reviewer_name, search)
    column = SORT_COLUMNS[sort]
    ordering = column.asc() if direction == "asc" else column.desc()

    async with storage_errors(db, "query_requests"):
        total = (await db.execute(
            select(func.count()).select_from(NamingRequest).where(*filters)
        )).scalar_one()

        result = await db.execute(
            select(NamingRequest)
            .where(*filters)
            .order_by(ordering, NamingRequest.id.asc())
            .offset((page - 1) * size)
            .limit(size)
        )
        items = list(result.scalars().all())

        metrics = await _collect_metrics(db)

    logger.debug(f"Review query returned {len(items)} of {total} (page {page})")
    return ReviewPage(
        items=items,
        total=total,
        page=page,
        page_size=size,
        pages=math.ceil(total / size),
        metrics=metrics,
    )


async def compute_metrics(db: AsyncSession, now: Optional[datetime] = None) -> ReviewMetrics:
    """
    Statistics over the whole request collection, independent of any filter.

    average_days_to_approval is None when nothing has been approved yet.
    """
    async with storage_errors(db, "compute_metrics"):
        return await _collect_metrics(db, now)


async def _collect_metrics(db: AsyncSession, now: Optional[datetime] = None) -> ReviewMetrics:
    now = now or utcnow()
    month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

    rows = await db.execute(
        select(NamingRequest.status, func.count()).group_by(NamingRequest.status)
    )
    by_status = {status.value: 0 for status in RequestStatus}
    for status, count in rows.all():
        by_status[status] = count

    this_month = (await db.execute(
        select(func.count()).select_from(NamingRequest).where(NamingRequest.submitted_at >= month_start)
    )).scalar_one()

    approved = await db.execute(
        select(NamingRequest.submitted_at, NamingRequest.approved_at).where(
            NamingRequest.status == RequestStatus.APPROVED.value,
            NamingRequest.approved_at.is_not(None),
        )
    )
    durations = [
        (approved_at - submitted_at).total_seconds() / SECONDS_PER_DAY
        for submitted_at, approved_at in approved.all()
    ]
    average = round(sum(durations) / len(durations), 2) if durations else None

    return ReviewMetrics(
        total_requests=sum(by_status.values()),
        average_days_to_approval=average,
        requests_this_month=this_month,
        by_status=by_status,
    )


async def list_requests_for_requestor(db: AsyncSession, requestor_id: str) -> list[NamingRequest]:
    """A submitter's own requests, newest first."""
    async with storage_errors(db, "list_requests_for_requestor"):
        result = await db.execute(
            select(NamingRequest)
            .where(NamingRequest.requestor_id == requestor_id)
            .order_by(NamingRequest.submitted_at.desc(), NamingRequest.id.asc())
        )
        return list(result.scalars().all())
