"""Services package - service class exports."""

from app.services.auth import AuthService, check_role, hash_password, sanitize_user, verify_password
from app.services.cache import CacheService
from app.services.dashboard import DashboardService

__all__ = [
    "AuthService",
    "CacheService",
    "DashboardService",
    "check_role",
    "hash_password",
    "sanitize_user",
    "verify_password",
]
