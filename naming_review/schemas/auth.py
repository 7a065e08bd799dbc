"""Caller identity schemas."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel


class Role(str, Enum):
    SUBMITTER = "submitter"
    REVIEWER = "reviewer"
    ADMIN = "admin"


class Actor(BaseModel):
    """Identity resolved upstream and trusted by the core."""
    id: str
    role: Role
    name: Optional[str] = None
    
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
    
    def can_review(self) -> bool:
        return self.role in (Role.REVIEWER, Role.ADMIN)
