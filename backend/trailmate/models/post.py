from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime
from typing import Optional

from .base import TimestampField, utc_now


class Post(SQLModel, table=True):
    """A trek listing created by a user."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    title: str = Field(max_length=200)
    description: str
    location: str = Field(max_length=255)
    image: str = Field(default="", max_length=1024)

    # Post admin
    created_by: UUID = Field(foreign_key="user.id", index=True)

    # Paired group; plain column because group.post_id already references post
    group_id: Optional[UUID] = Field(default=None, index=True)

    # Timestamps
    created_at: datetime = TimestampField(default_factory=utc_now)
    updated_at: Optional[datetime] = TimestampField(default=None)
