from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import EmailStr
from sqlmodel import Session

from ..core.database import get_db
from ..core.deps import get_current_user
from ..core.errors import TrailMateError
from ..core.storage import delete_stored_file, save_profile_image
from ..models.user import User
from ..schemas.user import UserResponse
from ..services.users import update_profile

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: User = Depends(get_current_user)):
    """Get current user information."""
    return current_user


@router.put("/profile", response_model=UserResponse)
def put_profile(
    name: Optional[str] = Form(None),
    username: Optional[str] = Form(None),
    email: Optional[EmailStr] = Form(None),
    bio: Optional[str] = Form(None),
    profile_image: Optional[UploadFile] = File(None, alias="profileImage"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update the current user's profile from a multipart form, with an optional new image."""
    previous_image = current_user.profile_image
    image_url = save_profile_image(profile_image) if profile_image is not None else None

    try:
        user = update_profile(
            db,
            current_user,
            name=name,
            username=username,
            email=email,
            bio=bio,
            profile_image=image_url,
        )
    except TrailMateError:
        delete_stored_file(image_url)
        raise

    if image_url and previous_image != image_url:
        delete_stored_file(previous_image)
    return user
