import logging
import re
from typing import Optional

from sqlmodel import Session, select

from ..core.database import write_transaction
from ..core.errors import ConflictError, ValidationError
from ..models.base import utc_now
from ..models.user import User

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_.]+$")


def _taken(db: Session, user: User, column, value: str) -> bool:
    other = db.exec(select(User).where(column == value, User.id != user.id)).first()
    return other is not None


def update_profile(
    db: Session,
    user: User,
    name: Optional[str] = None,
    username: Optional[str] = None,
    email: Optional[str] = None,
    bio: Optional[str] = None,
    profile_image: Optional[str] = None,
) -> User:
    """
    Change a user's profile.

    Only the fields passed are touched. An empty ``bio`` clears it; name,
    username and email cannot be blanked.
    """
    if all(value is None for value in (name, username, email, bio, profile_image)):
        raise ValidationError("No fields to update")

    updates = {}

    if name is not None:
        name = name.strip()
        if not name:
            raise ValidationError("Name cannot be empty")
        updates["name"] = name

    if username is not None:
        username = username.strip()
        if not username:
            raise ValidationError("Username cannot be empty")
        if not USERNAME_PATTERN.match(username):
            raise ValidationError(
                "Username can only contain letters, numbers, underscores, and periods"
            )
        if _taken(db, user, User.username, username):
            raise ConflictError("Username already taken")
        updates["username"] = username

    if email is not None:
        email = email.strip().lower()
        if not email:
            raise ValidationError("Email cannot be empty")
        if _taken(db, user, User.email, email):
            raise ConflictError("Email already registered")
        updates["email"] = email

    if bio is not None:
        updates["bio"] = bio.strip() or None

    if profile_image is not None:
        updates["profile_image"] = profile_image.strip() or None

    with write_transaction(db, "update profile", conflict_message="Email or username already in use"):
        for field_name, value in updates.items():
            setattr(user, field_name, value)
        user.updated_at = utc_now()
        db.add(user)

    db.refresh(user)
    logger.info(f"User {user.id} updated their profile: {', '.join(updates)}")
    return user
