from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from ..core.config import settings
from ..core.database import get_db
from ..core.deps import get_session_token
from ..schemas.auth import UserSignup, UserLogin, LoginResponse
from ..schemas.base import MessageResponse
from ..schemas.user import UserResponse
from ..services import auth as auth_service

router = APIRouter()


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(user_data: UserSignup, db: Session = Depends(get_db)):
    """Register a new user."""
    return auth_service.signup(
        db, name=user_data.name, email=user_data.email, password=user_data.password
    )


@router.post("/login", response_model=LoginResponse)
async def login(user_data: UserLogin, response: Response, db: Session = Depends(get_db)):
    """Log in and start a cookie-backed session."""
    user = auth_service.authenticate(db, user_data.email, user_data.password)
    auth_session = auth_service.open_session(db, user.id)

    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=auth_session.token,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )

    return LoginResponse(message="Login successful", user=UserResponse.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    db: Session = Depends(get_db),
    token: str | None = Depends(get_session_token),
):
    """End the current session, if there is one."""
    auth_service.close_session(db, token)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out successfully")
