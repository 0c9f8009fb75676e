from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..core.database import get_db
from ..schemas.group import GroupResponse
from ..services import posts as post_service

router = APIRouter()


@router.get("/listGroups", response_model=List[GroupResponse])
async def list_groups(db: Session = Depends(get_db)):
    """List all groups."""
    return [GroupResponse.from_view(view) for view in post_service.list_groups(db)]


@router.get("/{group_id}", response_model=GroupResponse)
async def get_group(group_id: UUID, db: Session = Depends(get_db)):
    """Get group information."""
    return GroupResponse.from_view(post_service.get_group(db, group_id))
