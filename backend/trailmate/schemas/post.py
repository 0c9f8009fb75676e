from datetime import datetime
from typing import List
from uuid import UUID

from .base import CamelModel
from .group import GroupResponse
from .user import UserSummary


class PostCreate(CamelModel):
    """Post creation request. Required fields are checked by the service."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    image: str | None = None


class PostUpdate(PostCreate):
    """Partial post update; omitted fields are left unchanged."""


class PostResponse(CamelModel):
    """Post response model."""

    id: UUID
    title: str
    description: str
    location: str
    image: str
    created_by: UUID
    group_id: UUID | None = None
    members: List[UUID]
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_view(cls, view) -> "PostResponse":
        post = view.post
        return cls(
            id=post.id,
            title=post.title,
            description=post.description,
            location=post.location,
            image=post.image,
            created_by=post.created_by,
            group_id=post.group_id,
            members=view.members,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )


class PostDetail(PostResponse):
    """Post with its creator and group resolved, as returned by listings."""

    creator: UserSummary | None = None
    group: GroupResponse | None = None

    @classmethod
    def from_listing(cls, listing) -> "PostDetail":
        detail = cls.from_view(listing)
        if listing.creator is not None:
            detail.creator = UserSummary.model_validate(listing.creator)
        if listing.group is not None:
            detail.group = GroupResponse.from_view(listing.group)
        return detail


class PostWriteResponse(CamelModel):
    message: str
    post: PostResponse
    group: GroupResponse | None = None


class JoinResponse(CamelModel):
    message: str
    group_id: UUID | None = None
