"""Naming request Pydantic schemas."""
from datetime import datetime
from typing import Any, Literal, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field

from naming_review.models.naming_request import RequestStatus
from naming_review.schemas.form_configuration import FieldDefinition


class SubmitRequest(BaseModel):
    """Submission against a form configuration (the active one when omitted)."""
    form_config_id: Optional[UUID] = None
    values: dict[str, Any]


class ApprovalDetails(BaseModel):
    """Optional overrides for the directory entry created on approval."""
    approved_name: Optional[str] = None
    description: Optional[str] = None
    service_line: Optional[str] = None
    ipr: Optional[str] = None
    category: Optional[str] = None
    name_class: Optional[str] = None
    contact_person: Optional[str] = None


class TransitionRequest(BaseModel):
    status: RequestStatus
    notes: Optional[str] = None
    approval: Optional[ApprovalDetails] = None


class ReassignBody(BaseModel):
    reviewer_id: str = Field(..., min_length=1)
    reviewer_name: Optional[str] = None
    notes: Optional[str] = None


class RequestResponse(BaseModel):
    """Schema for naming request response."""
    id: UUID
    requestor_id: str
    requestor_name: Optional[str] = None
    form_config_id: UUID
    form_snapshot: list[FieldDefinition]
    values: dict[str, Any]
    title: str
    description: Optional[str] = None
    status: RequestStatus
    reviewer_id: Optional[str] = None
    reviewer_name: Optional[str] = None
    submitted_at: datetime
    claimed_at: Optional[datetime] = None
    review_started_at: Optional[datetime] = None
    final_review_started_at: Optional[datetime] = None
    held_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    canceled_at: Optional[datetime] = None
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class RequestEventResponse(BaseModel):
    sequence: int
    event: str
    from_status: Optional[str] = None
    to_status: Optional[str] = None
    actor_id: str
    actor_name: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class ReviewMetrics(BaseModel):
    total_requests: int
    average_days_to_approval: Optional[float] = None
    requests_this_month: int
    by_status: dict[str, int]


class ReviewQueryResponse(BaseModel):
    items: list[RequestResponse]
    total: int
    page: int
    page_size: int
    pages: int
    metrics: ReviewMetrics


SortKey = Literal["submitted_at", "title"]
SortDirection = Literal["asc", "desc"]
