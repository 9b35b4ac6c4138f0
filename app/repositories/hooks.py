"""Cache invalidation for repository writes.

Wraps a repository instead of registering callbacks on it, so the
invalidation is visible wherever the repository is built.
"""

from typing import TYPE_CHECKING, Any

from loguru import logger

from app.models.common import DASHBOARD_KEY

if TYPE_CHECKING:
    from app.services.cache import CacheService


class CacheInvalidatingRepository:
    """Repository wrapper that busts related cache keys after every write.

    Reads pass straight through to the wrapped repository. After a write
    succeeds, the per-document key (when the id is known), the entity list
    key and the dashboard key are invalidated. Invalidation problems are
    logged and never reach the caller.
    """

    def __init__(self, repo: Any, entity: str, cache: "CacheService"):
        self._repo = repo
        self._cache = cache
        self.entity = entity

    def __getattr__(self, name: str) -> Any:
        # Private helpers (e.g. _write) would bypass invalidation
        if name.startswith("_"):
            raise AttributeError(f"{self.__class__.__name__} does not expose {name}")
        return getattr(self._repo, name)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._repo!r})"

    @property
    def wrapped(self) -> Any:
        return self._repo

    def document_key(self, doc_id: Any) -> str:
        return f"{self.entity}-{doc_id}"

    def affected_keys(self, doc_id: Any = None) -> list[str]:
        """Keys a write can make stale."""
        keys = [self.document_key(doc_id)] if doc_id else []
        return [*keys, self.entity, DASHBOARD_KEY]

    async def _invalidate(self, operation: str, doc_id: Any = None) -> None:
        for key in self.affected_keys(doc_id):
            try:
                await self._cache.invalidate_cache(key)
            except Exception as e:
                logger.error("Error invalidating cache on {} for {}: {}", operation, self.entity, e)

    async def create(self, doc: dict[str, Any]) -> dict[str, Any]:
        created = await self._repo.create(doc)
        await self._invalidate("create", created["id"])
        return created

    async def update_one(self, doc_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        updated = await self._repo.update_one(doc_id, changes)
        await self._invalidate("update", doc_id)
        return updated

    async def delete_one(self, doc_id: str) -> bool:
        deleted = await self._repo.delete_one(doc_id)
        await self._invalidate("delete", doc_id)
        return deleted

    # Bulk writes: affected ids are unknown, only list and dashboard keys go

    async def update_many(self, filters: dict[str, Any] | None, changes: dict[str, Any]) -> int:
        updated = await self._repo.update_many(filters, changes)
        await self._invalidate("update_many")
        return updated

    async def delete_many(self, filters: dict[str, Any] | None = None) -> int:
        deleted = await self._repo.delete_many(filters)
        await self._invalidate("delete_many")
        return deleted


def add_cache_invalidation_hooks(repo: Any, entity: str, cache: "CacheService") -> Any:
    """Return repo with cache invalidation composed into its write methods.

    Binding an already wrapped repository returns it unchanged.
    """
    if isinstance(repo, CacheInvalidatingRepository):
        logger.debug("Cache invalidation already bound for {}", entity)
        return repo
    logger.debug("Cache invalidation bound for {}", entity)
    return CacheInvalidatingRepository(repo, entity, cache)
