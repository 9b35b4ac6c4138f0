"""Common models - base classes, ids and shared tables."""

from app.models.common.base import BaseEntity
from app.models.common.cache import CACHE_DDL, CacheEntry
from app.models.common.document import DASHBOARD_KEY, DOCUMENT_DDL, DOCUMENT_INDEXES, ENTITY_TYPES
from app.models.common.ids import is_valid_id, new_id

__all__ = [
    "BaseEntity",
    "CACHE_DDL",
    "CacheEntry",
    "DOCUMENT_DDL",
    "DOCUMENT_INDEXES",
    "ENTITY_TYPES",
    "DASHBOARD_KEY",
    "is_valid_id",
    "new_id",
]
