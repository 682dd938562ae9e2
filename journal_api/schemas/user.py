from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class UserSummary(BaseModel):
    """Public author/actor info embedded in other responses."""

    id: UUID
    handle: str
    name: Optional[str] = None
    avatar_url: Optional[str] = None
    identifier: str  # name if set, else handle

    class Config:
        from_attributes = True  # Allow creating from ORM model
