"""Auth API response schemas."""

from typing import Any

from pydantic import BaseModel


class SessionCookie(BaseModel):
    """Cookie the HTTP layer should set (or clear, when max_age is 0)."""

    name: str
    value: str
    max_age: int
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str = "lax"


class LoginResponse(BaseModel):
    """Successful login."""

    user: dict[str, Any]
    cookie: SessionCookie


class LogoutResponse(BaseModel):
    """Logout result."""

    message: str
    cookie: SessionCookie


class AuthCheckResponse(BaseModel):
    """Session status."""

    status: str
    message: str | None = None
    user: dict[str, Any] | None = None
