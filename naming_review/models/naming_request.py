from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship
import uuid

from naming_review.database import Base
from naming_review.database_types import GUID, JSONDocument, utcnow


class RequestStatus(str, Enum):
    """Lifecycle states of a naming request"""
    SUBMITTED = "submitted"
    UNDER_REVIEW = "under_review"
    FINAL_REVIEW = "final_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    ON_HOLD = "on_hold"
    CANCELED = "canceled"


TERMINAL_STATUSES = frozenset({
    RequestStatus.APPROVED,
    RequestStatus.REJECTED,
    RequestStatus.CANCELED,
})


class NamingRequest(Base):
    __tablename__ = "naming_requests"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    
    # Requestor
    requestor_id = Column(String, nullable=False, index=True)
    requestor_name = Column(String, nullable=True)
    
    # Form the request was submitted against, plus a frozen copy of its fields
    form_config_id = Column(GUID, ForeignKey("form_configurations.id"), nullable=False, index=True)
    form_snapshot = Column(JSONDocument, nullable=False, default=list)
    values = Column(JSONDocument, nullable=False, default=dict)
    
    # Derived from values for search and sorting
    title = Column(String, nullable=False, default="")
    description = Column(Text, nullable=True)
    
    # State machine
    status = Column(String, nullable=False, default=RequestStatus.SUBMITTED.value)
    
    # Claim
    reviewer_id = Column(String, nullable=True, index=True)
    reviewer_name = Column(String, nullable=True)
    
    # Stage timestamps
    submitted_at = Column(DateTime, default=utcnow, nullable=False)
    claimed_at = Column(DateTime, nullable=True)
    review_started_at = Column(DateTime, nullable=True)
    final_review_started_at = Column(DateTime, nullable=True)
    held_at = Column(DateTime, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)  # set on approve or reject
    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    canceled_at = Column(DateTime, nullable=True)
    
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    
    # Relationships
    events = relationship(
        "RequestEvent",
        back_populates="request",
        order_by="RequestEvent.sequence",
        cascade="all, delete-orphan",
    )
    
    __table_args__ = (
        Index('idx_requests_status_submitted', 'status', 'submitted_at'),
    )
    
    @property
    def is_terminal(self) -> bool:
        return RequestStatus(self.status) in TERMINAL_STATUSES
