from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from naming_review.database import Base
from naming_review.database_types import GUID, utcnow


class RequestEvent(Base):
    """Append-only audit trail entry for a naming request."""
    __tablename__ = "request_events"
    
    sequence = Column(Integer, primary_key=True, autoincrement=True)
    request_id = Column(GUID, ForeignKey("naming_requests.id", ondelete="CASCADE"), nullable=False, index=True)
    
    # submitted | transition | claim | unclaim | reassign
    event = Column(String, nullable=False)
    from_status = Column(String, nullable=True)
    to_status = Column(String, nullable=True)
    
    actor_id = Column(String, nullable=False)
    actor_name = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    request = relationship("NamingRequest", back_populates="events")
