"""AI suggestion relay schemas."""
from typing import Literal, Optional
from uuid import UUID
from pydantic import BaseModel


class SuggestionRequest(BaseModel):
    field_name: str
    value: Optional[str] = None
    mode: Literal["suggest", "evaluate"] = "suggest"
    form_config_id: Optional[UUID] = None  # active configuration when omitted


class SuggestionResponse(BaseModel):
    """Advisory only. available=False when the collaborator is down or disabled."""
    available: bool
    text: Optional[str] = None
    score: Optional[float] = None
