"""Read-through cache service."""

import asyncio
import functools
import inspect
from collections.abc import Callable
from typing import Any

from loguru import logger

from app.repositories.common import CacheRepository, to_jsonable


async def _run(query_fn: Callable[[], Any]) -> Any:
    result = query_fn()
    if inspect.isawaitable(result):
        result = await result
    return result


class CacheService:
    """Read-through cache with graceful degradation.

    A broken store never blocks a query: lookups that fail fall back to
    running the query directly, and failed writes are only logged.
    Concurrent misses on the same key share one query (single-flight).

    Results are returned in their JSON-native form, so a miss and the hit
    it fills are equal. Every invalidation bumps the key's generation; a
    query that started under an older generation is returned to its
    waiters but never stored.
    """

    def __init__(self, store: CacheRepository):
        self._store = store
        self._in_flight: dict[str, asyncio.Task] = {}
        self._generations: dict[str, int] = {}
        self._epoch = 0
        logger.debug("CacheService initialized (ttl={}s)", store.ttl)

    @property
    def store(self) -> CacheRepository:
        return self._store

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    def _generation(self, key: str) -> tuple[int, int]:
        return self._epoch, self._generations.get(key, 0)

    async def get_cached_data(self, key: str, query_fn: Callable[[], Any], ttl: int | None = None) -> Any:
        """Return the cached value for key, or run query_fn and cache its result."""
        if not isinstance(key, str) or not key:
            raise ValueError("Cache key must be a non-empty string")
        if ttl is not None and (isinstance(ttl, bool) or not isinstance(ttl, int) or ttl <= 0):
            raise ValueError(f"Cache ttl must be a positive number of seconds, got {ttl!r}")

        try:
            entry = self._store.get(key)
        except Exception as e:
            logger.error("Cache error on lookup of {}: {}", key, e)
            return await _run(query_fn)

        if entry is not None:
            return entry.value

        task = self._in_flight.get(key)
        if task is None:
            logger.debug("Cache miss: {}", key)
            task = asyncio.ensure_future(self._load(key, query_fn, ttl, self._generation(key)))
            self._in_flight[key] = task
            task.add_done_callback(functools.partial(self._forget, key))
        else:
            logger.debug("Cache miss joined in-flight query: {}", key)

        return await asyncio.shield(task)

    async def _load(self, key: str, query_fn: Callable[[], Any], ttl: int | None, generation: tuple[int, int]) -> Any:
        result = await _run(query_fn)
        try:
            value = to_jsonable(result)
        except Exception as e:
            logger.error("Not caching {}: result is not JSON serializable ({})", key, e)
            return result

        if self._generation(key) != generation:
            logger.debug("Discarding result for {}: invalidated while the query ran", key)
            return value

        try:
            self._store.put(key, value, ttl)
        except Exception as e:
            logger.error("Cache error on write of {}: {}", key, e)
        return value

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]

    async def invalidate_cache(self, key: str) -> None:
        """Drop one entry. Best effort: errors are logged, never raised."""
        # Queries already running for key must neither be joined nor stored
        self._generations[key] = self._generations.get(key, 0) + 1
        self._in_flight.pop(key, None)
        try:
            self._store.delete(key)
            logger.debug("Cache invalidated: {}", key)
        except Exception as e:
            logger.error("Error invalidating cache {}: {}", key, e)

    async def clear_cache(self) -> None:
        """Drop every entry. Best effort: errors are logged, never raised."""
        self._epoch += 1
        self._generations.clear()
        self._in_flight.clear()
        try:
            self._store.delete_all()
            logger.info("All cache cleared")
        except Exception as e:
            logger.error("Error clearing cache: {}", e)

    async def sweep(self) -> int:
        """Purge expired rows from the store. Returns the number removed."""
        try:
            return self._store.purge_expired()
        except Exception as e:
            logger.error("Error purging expired cache entries: {}", e)
            return 0
