"""Cache repository - query result storage with per-entry expiry."""

import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

from loguru import logger
from pydantic import TypeAdapter

from app.models.common import CacheEntry
from app.repositories.base import BaseRepository, utcnow
from settings import CACHE_TTL

_json_values = TypeAdapter(Any)


def to_jsonable(value: Any) -> Any:
    """JSON-native copy of value, the exact form a cache hit returns.

    Datetimes become ISO strings and tuples become lists. Raises
    pydantic_core.PydanticSerializationError for values JSON cannot hold.
    """
    return _json_values.dump_python(value, mode="json")


class CacheRepository(BaseRepository):
    """Repository for cache entries.

    Freshness is checked on every read, so an expired row is never returned
    even if it has not been purged yet.
    """

    def __init__(self, db, ttl: int = CACHE_TTL, clock: Callable[[], datetime] = utcnow):
        super().__init__(db)
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> int:
        return self._ttl

    def get(self, key: str) -> CacheEntry | None:
        """Load a fresh entry, or None on miss or expiry."""
        row = self.fetchone(
            "SELECT value, created_at, ttl_seconds FROM cache_entry WHERE key = ?",
            [key],
        )
        if row is None:
            return None

        entry = CacheEntry(key=key, value=None, created_at=row[1], ttl_seconds=row[2])
        if not entry.is_fresh(self._clock()):
            # Compare created_at so a concurrent refresh is not deleted
            self.execute(
                "DELETE FROM cache_entry WHERE key = ? AND created_at = ?",
                [key, row[1]],
            )
            logger.debug("Cache expired: {}", key)
            return None

        entry.value = json.loads(row[0])
        logger.debug("Cache hit: {}", key)
        return entry

    def put(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Insert or overwrite the entry for key."""
        self.execute(
            """
            INSERT OR REPLACE INTO cache_entry (key, value, created_at, ttl_seconds)
            VALUES (?, ?, ?, ?)
            """,
            [key, json.dumps(to_jsonable(value)), self._clock(), ttl or self._ttl],
        )
        logger.debug("Cache saved: {}", key)

    def delete(self, key: str) -> None:
        """Remove one entry. Missing keys are fine."""
        self.execute("DELETE FROM cache_entry WHERE key = ?", [key])

    def delete_all(self) -> None:
        """Remove every entry."""
        self.execute("DELETE FROM cache_entry")

    def purge_expired(self) -> int:
        """Physically delete all expired entries. Returns the number removed."""
        row = self.fetchone(
            "DELETE FROM cache_entry WHERE created_at + to_seconds(ttl_seconds) <= ?",
            [self._clock()],
        )
        removed = row[0] if row else 0
        if removed:
            logger.info("Purged {} expired cache entries", removed)
        return removed

    def count(self) -> int:
        """Number of stored rows, fresh or not."""
        return self.fetchone("SELECT COUNT(*) FROM cache_entry")[0]
