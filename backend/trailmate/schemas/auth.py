from pydantic import EmailStr

from .base import CamelModel
from .user import UserResponse


class UserSignup(CamelModel):
    """User registration request."""

    name: str | None = None
    email: EmailStr | None = None
    password: str | None = None


class UserLogin(CamelModel):
    """User login request."""

    email: str | None = None
    password: str | None = None


class LoginResponse(CamelModel):
    message: str
    user: UserResponse
