"""Approved-name directory Pydantic schemas."""
from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict


class ApprovedNameResponse(BaseModel):
    id: UUID
    source: str
    request_id: Optional[UUID] = None
    approved_name: str
    description: Optional[str] = None
    service_line: Optional[str] = None
    ipr: Optional[str] = None
    category: Optional[str] = None
    name_class: Optional[str] = None
    contact_person: Optional[str] = None
    approval_date: Optional[datetime] = None
    trademark: Optional[str] = None
    notes: Optional[str] = None
    previously_known_as: Optional[str] = None
    year_list: Optional[str] = None
    ipr_asset_status: Optional[str] = None
    
    model_config = ConfigDict(from_attributes=True)


class ApprovedNameSearchResponse(BaseModel):
    results: list[ApprovedNameResponse]
    count: int
    limit: int


class FacetValuesResponse(BaseModel):
    facet: str
    values: list[str]


class LegacyImportRequest(BaseModel):
    """Rows keyed by legacy sheet headers or snake_case names."""
    rows: list[dict[str, Optional[str]]]
    replace: bool = False


class LegacyImportResult(BaseModel):
    imported: int
    skipped: int
    removed: int = 0
