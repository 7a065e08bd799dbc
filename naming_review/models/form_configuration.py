from sqlalchemy import Boolean, Column, DateTime, String, Text, Index, text
import uuid

from naming_review.database import Base
from naming_review.database_types import GUID, JSONDocument, utcnow


class FormConfiguration(Base):
    __tablename__ = "form_configurations"
    
    id = Column(GUID, primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)  # unique among non-deleted rows
    description = Column(Text, nullable=True)
    
    # Ordered list of field definitions (see schemas.form_configuration.FieldDefinition)
    fields = Column(JSONDocument, nullable=False, default=list)
    
    # At most one row is active, enforced by uq_form_configurations_single_active;
    # only changed through services.form_configs
    is_active = Column(Boolean, nullable=False, default=False)
    
    # Timestamps
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)
    deleted_at = Column(DateTime, nullable=True)  # soft delete when referenced by requests
    
    __table_args__ = (
        Index('idx_form_configurations_active', 'is_active', 'deleted_at'),
        Index(
            'uq_form_configurations_name_live',
            'name',
            unique=True,
            postgresql_where=text('deleted_at IS NULL'),
            sqlite_where=text('deleted_at IS NULL'),
        ),
        Index(
            'uq_form_configurations_single_active',
            'is_active',
            unique=True,
            postgresql_where=text('is_active'),
            sqlite_where=text('is_active'),
        ),
    )
    
    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
