from sqlmodel import SQLModel, Field
from uuid import UUID, uuid4
from datetime import datetime
from typing import Optional

from .base import TimestampField, utc_now


class Group(SQLModel, table=True):
    """Chat/membership companion of a Post, mirroring the Post's members."""

    id: UUID = Field(default_factory=uuid4, primary_key=True)

    # Back-link to the post this group belongs to (exactly one group per post)
    post_id: UUID = Field(foreign_key="post.id", unique=True, index=True)
    group_name: str = Field(max_length=255)

    # Always equal to Post.created_by
    admin_id: UUID = Field(foreign_key="user.id", index=True)

    # Timestamps
    created_at: datetime = TimestampField(default_factory=utc_now)
    updated_at: Optional[datetime] = TimestampField(default=None)
