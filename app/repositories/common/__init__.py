"""Common repositories - storage shared across entity types."""

from app.repositories.common.cache import CacheRepository, to_jsonable

__all__ = [
    "CacheRepository",
    "to_jsonable",
]
