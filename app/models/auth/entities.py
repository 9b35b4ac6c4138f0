"""Authentication results."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from app.models.common import BaseEntity


class AuthFailure(StrEnum):
    """Why a request was rejected. Server-side detail only."""

    TOKEN_MISSING = "token_missing"
    TOKEN_INVALID = "token_invalid"
    IDENTITY_MALFORMED = "identity_malformed"
    CONNECTION_ERROR = "connection_error"
    USER_NOT_FOUND = "user_not_found"
    UNEXPECTED = "unexpected"


@dataclass
class AuthResult(BaseEntity):
    """Outcome of authenticating one request."""

    success: bool
    user: dict[str, Any] | None = None
    message: str | None = None
    error: str | None = None
    reason: AuthFailure | None = None

    @classmethod
    def ok(cls, user: dict[str, Any]) -> "AuthResult":
        return cls(success=True, user=user)

    @classmethod
    def failed(cls, reason: AuthFailure, error: str | None = None) -> "AuthResult":
        return cls(success=False, message="Authentication failed", error=error, reason=reason)
