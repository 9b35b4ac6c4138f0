"""Auth API views - thin layer over AuthService."""

import os
from typing import Any

from loguru import logger

from app.container import container
from app.errors import DatabaseError
from app.models.auth import AuthFailure
from web.api.errors import ServerError, UnauthorizedError, ValidationError

from .schemas import AuthCheckResponse, LoginResponse, LogoutResponse, SessionCookie


def _session_cookie(value: str, max_age: int) -> SessionCookie:
    return SessionCookie(
        name=container.auth.cookie_name,
        value=value,
        max_age=max_age,
        secure=os.getenv("AGENCY_ENV", "development") == "production",
    )


async def require_user(request: Any) -> dict[str, Any]:
    """Authenticated user for request, or raise."""
    result = await container.auth.authenticate(request)
    if result.success:
        return result.user
    logger.debug("Request rejected: {}", result.to_dict(exclude=("user",)))
    if result.reason is AuthFailure.CONNECTION_ERROR:
        raise ServerError("Database connection error")
    raise UnauthorizedError()


async def login(email: str, password: str) -> LoginResponse:
    """Check credentials and issue a session cookie."""
    if not email or not password:
        raise ValidationError("Email and password are required")

    try:
        result = await container.auth.login(email, password)
    except DatabaseError as e:
        logger.error("Login error: {}", e)
        raise ServerError("Authentication failed") from e

    if result is None:
        raise UnauthorizedError("Invalid email or password")

    token, user = result
    max_age = int(container.auth.expires_in.total_seconds())
    return LoginResponse(user=user, cookie=_session_cookie(token, max_age))


async def logout() -> LogoutResponse:
    """Clear the session cookie."""
    return LogoutResponse(message="Logged out successfully", cookie=_session_cookie("", 0))


async def check(request: Any) -> AuthCheckResponse:
    """Report whether request carries a valid session."""
    result = await container.auth.authenticate(request)
    if result.success:
        return AuthCheckResponse(status="authenticated", user=result.user)
    if result.reason is AuthFailure.CONNECTION_ERROR:
        raise ServerError("Database connection error")
    return AuthCheckResponse(status="unauthenticated", message="Not authenticated")
