"""Auth models - users and authentication results."""

from app.models.auth.entities import AuthFailure, AuthResult
from app.models.auth.user import ROLES, SECRET_FIELDS, Skill, User

__all__ = [
    "AuthFailure",
    "AuthResult",
    "ROLES",
    "SECRET_FIELDS",
    "Skill",
    "User",
]
