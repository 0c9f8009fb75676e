from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field
from uuid import UUID
from datetime import datetime
from typing import Optional

from .base import TimestampField, utc_now


class PostMember(SQLModel, table=True):
    """Membership of a user in a post. Row id order is join order."""

    __tablename__ = "post_member"
    __table_args__ = (UniqueConstraint("post_id", "user_id", name="uq_post_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    post_id: UUID = Field(foreign_key="post.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)

    joined_at: datetime = TimestampField(default_factory=utc_now)


class GroupMember(SQLModel, table=True):
    """Membership of a user in a group; mirrors PostMember for the paired post."""

    __tablename__ = "group_member"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: UUID = Field(foreign_key="group.id", index=True)
    user_id: UUID = Field(foreign_key="user.id", index=True)

    joined_at: datetime = TimestampField(default_factory=utc_now)
