from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from ..core.database import get_db
from ..core.deps import get_current_user
from ..models.user import User
from ..schemas.base import MessageResponse
from ..schemas.group import GroupResponse
from ..schemas.post import (
    JoinResponse,
    PostCreate,
    PostDetail,
    PostResponse,
    PostUpdate,
    PostWriteResponse,
)
from ..services import posts as post_service
from ..services.posts import LeaveOutcome

router = APIRouter()

DELETED_MESSAGE = "Post and associated group deleted successfully"


@router.post("/createPost", response_model=PostWriteResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create a post and its trekking group."""
    post, group = post_service.create_post(db, current_user.id, **post_data.model_dump())
    return PostWriteResponse(
        message="Post created successfully",
        post=PostResponse.from_view(post),
        group=GroupResponse.from_view(group),
    )


@router.get("/listPosts", response_model=List[PostDetail])
async def list_posts(db: Session = Depends(get_db)):
    """List all posts with their creator and group."""
    return [PostDetail.from_listing(listing) for listing in post_service.list_posts(db)]


@router.patch("/{post_id}", response_model=PostWriteResponse)
async def update_post(
    post_id: UUID,
    post_data: PostUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update a post's details (creator only)."""
    post, group = post_service.update_post(
        db, current_user.id, post_id, **post_data.model_dump(exclude_none=True)
    )
    return PostWriteResponse(
        message="Post updated successfully",
        post=PostResponse.from_view(post),
        group=GroupResponse.from_view(group) if group else None,
    )


@router.post("/join/{post_id}", response_model=JoinResponse)
async def join_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Join a post and its group."""
    group_id = post_service.join_post(db, current_user.id, post_id)
    return JoinResponse(message="Joined post successfully", group_id=group_id)


@router.post("/leave/{post_id}", response_model=MessageResponse)
async def leave_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Leave a post and its group. The creator leaving deletes both."""
    outcome = post_service.leave_post(db, current_user.id, post_id)
    if outcome is LeaveOutcome.DELETED:
        return MessageResponse(message=DELETED_MESSAGE)
    return MessageResponse(message="You have left the post and group successfully")


@router.delete("/delete/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: UUID,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete a post and its group (creator only)."""
    post_service.delete_post(db, current_user.id, post_id)
    return MessageResponse(message=DELETED_MESSAGE)
