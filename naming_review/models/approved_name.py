"""Approved-name directory entries (request-derived and legacy imports)."""
from enum import Enum
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
import uuid

from naming_review.database import Base
from naming_review.database_types import GUID, utcnow


class ApprovedNameSource(str, Enum):
    REQUEST = "request"  # projected when a request is approved
    LEGACY = "legacy"    # bulk-imported from the legacy spreadsheet


class ApprovedName(Base):
    __tablename__ = "approved_names"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    source = Column(String, nullable=False, default=ApprovedNameSource.REQUEST.value, index=True)
    
    # One directory entry per approved request
    request_id = Column(GUID, ForeignKey("naming_requests.id"), nullable=True, unique=True)
    
    approved_name = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    
    # Facets
    service_line = Column(String, nullable=True)
    ipr = Column(String, nullable=True)
    category = Column(String, nullable=True)
    name_class = Column("class", String, nullable=True)
    
    contact_person = Column(String, nullable=True)
    approval_date = Column(DateTime, nullable=True)
    
    # Legacy sheet columns
    trademark = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    previously_known_as = Column(String, nullable=True)
    year_list = Column(String, nullable=True)
    ipr_asset_status = Column(String, nullable=True)
    
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    __table_args__ = (
        Index('idx_approved_names_facets', 'service_line', 'ipr', 'category', 'class'),
    )
