from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime
from typing import Optional

from .base import TimestampField, utc_now


class User(SQLModel, table=True):
    """User model for authentication and profile management."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(unique=True, index=True, max_length=255)

    # Authentication
    hashed_password: str

    # Timestamps
    created_at: datetime = TimestampField(default_factory=utc_now)
    updated_at: datetime = TimestampField(default_factory=utc_now)

    # Profile
    username: Optional[str] = Field(default=None, unique=True, index=True, max_length=50)
    bio: Optional[str] = Field(default=None, max_length=500)
    profile_image: Optional[str] = Field(default=None, max_length=1024)


class AuthSession(SQLModel, table=True):
    """Server-side login session, keyed by the token stored in the session cookie."""

    __tablename__ = "auth_session"

    token: str = Field(primary_key=True, max_length=128)
    user_id: UUID = Field(foreign_key="user.id", index=True)

    created_at: datetime = TimestampField(default_factory=utc_now)
    expires_at: datetime = TimestampField()
