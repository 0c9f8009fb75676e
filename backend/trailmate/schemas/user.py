from datetime import datetime
from uuid import UUID

from .base import CamelModel


class UserSummary(CamelModel):
    """Creator details embedded in post listings."""

    id: UUID
    name: str
    email: str


class UserResponse(CamelModel):
    """User response model."""

    id: UUID
    name: str
    email: str
    username: str | None = None
    bio: str | None = None
    profile_image: str | None = None
    created_at: datetime
    updated_at: datetime
