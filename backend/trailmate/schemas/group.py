from datetime import datetime
from typing import List
from uuid import UUID

from .base import CamelModel


class GroupResponse(CamelModel):
    """Group response model."""

    id: UUID
    post_id: UUID
    group_name: str
    admin: UUID
    members: List[UUID]
    created_at: datetime
    updated_at: datetime | None = None

    @classmethod
    def from_view(cls, view) -> "GroupResponse":
        group = view.group
        return cls(
            id=group.id,
            post_id=group.post_id,
            group_name=group.group_name,
            admin=group.admin_id,
            members=view.members,
            created_at=group.created_at,
            updated_at=group.updated_at,
        )
