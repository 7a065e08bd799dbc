"""
Approved-name directory API endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from naming_review.api.auth import get_current_actor, require_admin
from naming_review.config import settings
from naming_review.database import get_db
from naming_review.schemas.approved_name import (
    ApprovedNameResponse,
    ApprovedNameSearchResponse,
    FacetValuesResponse,
    LegacyImportRequest,
    LegacyImportResult,
)
from naming_review.schemas.auth import Actor
from naming_review.services import approved_names

logger = logging.getLogger(__name__)
router = APIRouter()


# Endpoints
@router.get("/search", response_model=ApprovedNameSearchResponse)
async def search_names(
    q: Optional[str] = Query(None, description="Keywords; every token must match"),
    service_line: Optional[str] = None,
    ipr: Optional[str] = None,
    category: Optional[str] = None,
    name_class: Optional[str] = Query(None, alias="class"),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """
    Search approved names.

    Keyword tokens are AND-ed across approved name, description, service line
    and contact person. Facets are exact matches.
    """
    results = await approved_names.search_approved_names(
        db,
        keyword=q,
        filters={"service_line": service_line, "ipr": ipr, "category": category, "class": name_class},
    )
    return ApprovedNameSearchResponse(
        results=[ApprovedNameResponse.model_validate(r) for r in results],
        count=len(results),
        limit=settings.directory_search_limit,
    )


@router.get("/facets/{facet}", response_model=FacetValuesResponse)
async def facet_values(
    facet: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor)
):
    """Distinct values for service_line, ipr, category or class."""
    values = await approved_names.list_facet_values(db, facet)
    return FacetValuesResponse(facet=facet, values=values)


@router.post("/import", response_model=LegacyImportResult)
async def import_legacy(
    data: LegacyImportRequest,
    db: AsyncSession = Depends(get_db),
    admin: Actor = Depends(require_admin)
):
    """Bulk-load rows from the legacy approved-names sheet."""
    result = await approved_names.import_legacy_names(db, data.rows, replace=data.replace)
    logger.info(f"Admin {admin.id} imported {result.imported} legacy names")
    return result
