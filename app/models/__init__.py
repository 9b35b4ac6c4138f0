"""Models package - DDL and entities for all domains."""

from app.models.auth import AuthFailure, AuthResult, User
from app.models.common import (
    CACHE_DDL,
    DASHBOARD_KEY,
    DOCUMENT_DDL,
    DOCUMENT_INDEXES,
    ENTITY_TYPES,
    BaseEntity,
    CacheEntry,
)

ALL_DDL = [
    DOCUMENT_DDL,
    *DOCUMENT_INDEXES,
    CACHE_DDL,
]

__all__ = [
    # Common
    "BaseEntity",
    "CacheEntry",
    "CACHE_DDL",
    "DOCUMENT_DDL",
    "DOCUMENT_INDEXES",
    "ENTITY_TYPES",
    "DASHBOARD_KEY",
    # Auth
    "AuthFailure",
    "AuthResult",
    "User",
    # All DDL
    "ALL_DDL",
]
