"""
Approved-name directory: keyword search, facet listing and the legacy sheet import.

Entries are never updated. Request-derived rows are written by the lifecycle
engine on approval; legacy rows only by import_legacy_names.
"""
import logging
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.config import settings
from naming_review.database_types import utcnow
from naming_review.errors import ValidationError
from naming_review.models.approved_name import ApprovedName, ApprovedNameSource
from naming_review.schemas.approved_name import LegacyImportResult
from naming_review.services.storage import storage_errors

logger = logging.getLogger(__name__)

# Public facet name -> mapped column
FACETS = {
    "service_line": ApprovedName.service_line,
    "ipr": ApprovedName.ipr,
    "category": ApprovedName.category,
    "class": ApprovedName.name_class,
}

KEYWORD_COLUMNS = (
    ApprovedName.approved_name,
    ApprovedName.description,
    ApprovedName.service_line,
    ApprovedName.contact_person,
)

# Legacy spreadsheet header -> model attribute
LEGACY_HEADERS = {
    "Approved name": "approved_name",
    "Service Line": "service_line",
    "IPR": "ipr",
    "Approval date": "approval_date",
    "Description": "description",
    "Contact person": "contact_person",
    "Trademark": "trademark",
    "Notes": "notes",
    "Previously Known As / AKA": "previously_known_as",
    "Class": "name_class",
    "IPR Asset Status": "ipr_asset_status",
    "Year list": "year_list",
    "Category": "category",
}
LEGACY_ATTRIBUTES = set(LEGACY_HEADERS.values())
LEGACY_ALIASES = {"class": "name_class"}

DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%m/%d/%y", "%d %B %Y", "%B %d, %Y", "%Y")


def _facet_column(facet: str):
    column = FACETS.get(facet)
    if column is None:
        raise ValidationError.single("facet", f"Facet must be one of: {', '.join(FACETS)}")
    return column


async def search_approved_names(
    db: AsyncSession,
    keyword: Optional[str] = None,
    filters: Optional[Mapping[str, Optional[str]]] = None,
    limit: Optional[int] = None,
) -> list[ApprovedName]:
    """
    Search the directory.

    Every whitespace-separated keyword token must appear (case-insensitive)
    in at least one of approved name, description, service line or contact
    person. Facet filters are exact matches. Results are ordered by approved
    name and capped at settings.directory_search_limit.

    Raises:
        ValidationError: Unknown facet filter
    """
    cap = min(limit or settings.directory_search_limit, settings.directory_search_limit)
    conditions = []

    for facet, value in (filters or {}).items():
        if value is None or value == "":
            continue
        conditions.append(_facet_column(facet) == value)

    for token in (keyword or "").split():
        conditions.append(or_(*(column.icontains(token, autoescape=True) for column in KEYWORD_COLUMNS)))

    async with storage_errors(db, "search_approved_names"):
        result = await db.execute(
            select(ApprovedName)
            .where(*conditions)
            .order_by(ApprovedName.approved_name.asc(), ApprovedName.id.asc())
            .limit(cap)
        )
        return list(result.scalars().all())


async def list_facet_values(db: AsyncSession, facet: str) -> list[str]:
    """Distinct non-empty values of a facet, sorted."""
    column = _facet_column(facet)
    async with storage_errors(db, "list_facet_values"):
        result = await db.execute(
            select(column).where(column.is_not(None), column != "").distinct().order_by(column.asc())
        )
        return list(result.scalars().all())


def parse_legacy_date(raw: Optional[str]) -> Optional[datetime]:
    """Best-effort parse of the sheet's free-form approval date."""
    if not raw or not raw.strip():
        return None
    text = raw.strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    logger.warning(f"Unparseable legacy approval date: {text!r}")
    return None


def _normalize_row(row: Mapping[str, Any]) -> dict[str, Optional[str]]:
    """Map sheet headers or snake_case keys onto model attributes."""
    normalized: dict[str, Optional[str]] = {}
    for key, value in row.items():
        if key is None:
            continue
        key = key.strip()
        attribute = LEGACY_HEADERS.get(key) or LEGACY_ALIASES.get(key) or (key if key in LEGACY_ATTRIBUTES else None)
        if attribute is None:
            continue
        text = str(value).strip() if value is not None else ""
        normalized[attribute] = text or None
    return normalized


async def import_legacy_names(
    db: AsyncSession,
    rows: Iterable[Mapping[str, Any]],
    replace: bool = False,
) -> LegacyImportResult:
    """
    Bulk-load rows exported from the legacy approved-names sheet.

    Args:
        db: Database session
        rows: Dicts keyed by sheet headers ("Approved name", "Service Line", ...)
            or by snake_case attribute names
        replace: Remove previously imported legacy rows first. Request-derived
            entries are never touched.

    Returns:
        Counts of imported, skipped (no approved name) and removed rows
    """
    async with storage_errors(db, "import_legacy_names"):
        removed = 0
        if replace:
            result = await db.execute(
                delete(ApprovedName).where(ApprovedName.source == ApprovedNameSource.LEGACY.value)
            )
            removed = result.rowcount

        imported = 0
        skipped = 0
        now = utcnow()
        for row in rows:
            data = _normalize_row(row)
            if not data.get("approved_name"):
                skipped += 1
                continue
            data["approval_date"] = parse_legacy_date(data.get("approval_date"))
            db.add(ApprovedName(source=ApprovedNameSource.LEGACY.value, created_at=now, **data))
            imported += 1

        await db.commit()

    logger.info(
        f"Legacy import finished: {imported} imported, {skipped} skipped, {removed} removed",
        extra={"imported": imported, "skipped": skipped, "removed": removed, "replace": replace},
    )
    return LegacyImportResult(imported=imported, skipped=skipped, removed=removed)
