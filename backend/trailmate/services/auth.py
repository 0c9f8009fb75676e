"""Signup, login and the server-side session store."""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID

from sqlmodel import Session, select

from ..core.config import settings
from ..core.database import write_transaction
from ..core.errors import AuthenticationError, ConflictError, ValidationError
from ..core.security import generate_session_token, get_password_hash, verify_password
from ..models.base import as_utc, utc_now
from ..models.user import AuthSession, User

logger = logging.getLogger(__name__)


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def signup(
    db: Session,
    name: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """Register a new user."""
    name = (name or "").strip()
    email = _normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("All fields are required")

    existing_user = db.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise ConflictError("Email already registered")

    user = User(name=name, email=email, hashed_password=get_password_hash(password))
    with write_transaction(db, "register user", conflict_message="Email already registered"):
        db.add(user)

    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate(db: Session, email: Optional[str], password: Optional[str]) -> User:
    """Return the user owning these credentials."""
    email = _normalize_email(email)
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = db.exec(select(User).where(User.email == email)).first()
    if not user or not verify_password(password, user.hashed_password):
        raise AuthenticationError("Invalid credentials")
    return user


def open_session(db: Session, user_id: UUID) -> AuthSession:
    """Start a session for a logged-in user."""
    now = utc_now()
    auth_session = AuthSession(
        token=generate_session_token(),
        user_id=user_id,
        created_at=now,
        expires_at=now + timedelta(seconds=settings.SESSION_MAX_AGE_SECONDS),
    )
    with write_transaction(db, "open session"):
        db.add(auth_session)

    db.refresh(auth_session)
    logger.info(f"User {user_id} logged in")
    return auth_session


def resolve_session(db: Session, token: Optional[str]) -> User:
    """The user behind a session token; expired sessions are removed."""
    if not token:
        raise AuthenticationError("Not authenticated")

    auth_session = db.exec(select(AuthSession).where(AuthSession.token == token)).first()
    if not auth_session:
        raise AuthenticationError("Not authenticated")

    if as_utc(auth_session.expires_at) <= utc_now():
        with write_transaction(db, "expire session"):
            db.delete(auth_session)
        raise AuthenticationError("Session expired")

    user = db.exec(select(User).where(User.id == auth_session.user_id)).first()
    if not user:
        raise AuthenticationError("Not authenticated")
    return user


def close_session(db: Session, token: Optional[str]) -> None:
    """End a session. Unknown tokens are ignored."""
    if not token:
        return

    auth_session = db.exec(select(AuthSession).where(AuthSession.token == token)).first()
    if auth_session:
        user_id = auth_session.user_id
        with write_transaction(db, "close session"):
            db.delete(auth_session)
        logger.info(f"User {user_id} logged out")
