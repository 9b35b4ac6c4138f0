"""Auth API."""

from web.api.auth.views import check, login, logout, require_user

__all__ = [
    "check",
    "login",
    "logout",
    "require_user",
]
