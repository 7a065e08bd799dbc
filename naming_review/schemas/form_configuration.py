"""Form configuration Pydantic schemas."""
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict, Field


class FieldType(str, Enum):
    """Closed set of field kinds a form can declare."""
    TEXT = "text"
    TEXTAREA = "textarea"
    SELECT = "select"
    CHECKBOX = "checkbox"
    RADIO = "radio"
    FILE = "file"
    CONTENT_BLOCK = "content-block"
    DATE = "date"
    NUMBER = "number"


class FieldDefinition(BaseModel):
    """A single intake field. Constraints that do not apply to a kind are ignored."""
    name: Optional[str] = None
    label: Optional[str] = None
    field_type: FieldType = FieldType.TEXT
    required: bool = False
    options: Optional[list[str]] = None
    placeholder: Optional[str] = None
    default_value: Optional[Any] = None
    content: Optional[str] = None  # content-block body
    
    # Text constraints
    min_length: Optional[int] = Field(None, ge=0)
    max_length: Optional[int] = Field(None, ge=1)
    pattern: Optional[str] = None
    
    # Passed through to the suggestion service
    ai_suggest: bool = False
    ai_evaluate: bool = False
    ai_helper_text: Optional[str] = None


class FormConfigurationCreate(BaseModel):
    """Schema for creating a form configuration."""
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    fields: list[FieldDefinition]
    is_active: bool = False


class FormConfigurationUpdate(BaseModel):
    """Partial update; omitted attributes are left unchanged."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    fields: Optional[list[FieldDefinition]] = None
    is_active: Optional[bool] = None


class FormConfigurationResponse(BaseModel):
    """Schema for form configuration response."""
    id: UUID
    name: str
    description: Optional[str] = None
    fields: list[FieldDefinition]
    is_active: bool
    created_at: datetime
    updated_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class FormConfigurationDeleteResponse(BaseModel):
    id: UUID
    soft_deleted: bool
    message: str
