"""Repositories package - data access layer for our database."""

from app.repositories.base import BaseRepository, utcnow
from app.repositories.common import CacheRepository
from app.repositories.db import ConnectionManager, init_tables
from app.repositories.documents import DocumentRepository
from app.repositories.hooks import CacheInvalidatingRepository, add_cache_invalidation_hooks

__all__ = [
    # DB
    "ConnectionManager",
    "init_tables",
    # Base
    "BaseRepository",
    "utcnow",
    # Common
    "CacheRepository",
    # Documents
    "DocumentRepository",
    # Invalidation
    "CacheInvalidatingRepository",
    "add_cache_invalidation_hooks",
]
