from typing import Optional

from fastapi import Depends
from fastapi.security import APIKeyCookie
from sqlmodel import Session

from .config import settings
from .database import get_db
from ..models.user import User
from ..services.auth import resolve_session

session_cookie = APIKeyCookie(name=settings.SESSION_COOKIE_NAME, auto_error=False)


def get_session_token(token: Optional[str] = Depends(session_cookie)) -> Optional[str]:
    """Raw session token from the cookie, if any."""
    return token


def get_current_user(
    db: Session = Depends(get_db),
    token: Optional[str] = Depends(get_session_token),
) -> User:
    """Get the current authenticated user."""
    return resolve_session(db, token)
