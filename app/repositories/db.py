"""DuckDB connection management."""

import asyncio
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

import duckdb
from loguru import logger

from app.errors import DatabaseConnectionError, DatabaseConnectionTimeout, DatabaseNotConnected
from app.models import ALL_DDL, ENTITY_TYPES
from app.repositories.documents import DocumentRepository
from app.repositories.hooks import add_cache_invalidation_hooks
from settings import CONNECT_TIMEOUT, DB_PATH

if TYPE_CHECKING:
    from app.services.cache import CacheService


def init_tables(conn: duckdb.DuckDBPyConnection) -> None:
    """Initialize all tables from DDL statements (idempotent - uses IF NOT EXISTS)."""
    for ddl in ALL_DDL:
        conn.execute(ddl)
    logger.info("DB tables initialized")


class ConnectionManager:
    """Owns the single DuckDB connection of a process.

    The connection is opened lazily by the first connect() call. Concurrent
    callers during that first attempt share it; a failed attempt is
    forgotten so the next call starts over. Entity repositories are built
    and wrapped with cache invalidation once, on the first success.
    """

    def __init__(
        self,
        db_path: str = DB_PATH,
        *,
        connect_timeout: float = CONNECT_TIMEOUT,
        entity_types: Iterable[str] = ENTITY_TYPES,
        connect_fn: Callable[[str], duckdb.DuckDBPyConnection] = duckdb.connect,
    ):
        self._db_path = db_path
        self._connect_timeout = connect_timeout
        self._entity_types = tuple(entity_types)
        self._connect_fn = connect_fn
        self._conn: duckdb.DuckDBPyConnection | None = None
        self._pending: asyncio.Task | None = None
        self._cache: "CacheService | None" = None
        self._repositories: dict[str, Any] = {}
        self._hooks_applied = False

    @property
    def db_path(self) -> str:
        return self._db_path

    @property
    def connected(self) -> bool:
        return self._conn is not None

    @property
    def hooks_applied(self) -> bool:
        return self._hooks_applied

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        if self._conn is None:
            raise DatabaseNotConnected()
        return self._conn

    def bind_invalidation(self, cache: "CacheService") -> None:
        """Use cache for write invalidation. Must be called before the first connect."""
        if self._hooks_applied:
            logger.warning("Cache invalidation already applied, ignoring rebind")
            return
        self._cache = cache

    async def connect(self) -> duckdb.DuckDBPyConnection:
        """Get the shared connection, opening it if needed."""
        if self._conn is not None:
            return self._conn

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._open())
        else:
            logger.debug("Awaiting in-flight DB connection")

        # Shielded so one cancelled caller does not abort the shared attempt
        return await asyncio.shield(self._pending)

    async def _open(self) -> duckdb.DuckDBPyConnection:
        logger.info("Connecting to DuckDB: {}", self._db_path)
        try:
            conn = await asyncio.wait_for(
                asyncio.to_thread(self._connect_fn, self._db_path),
                timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError as e:
            self._pending = None
            logger.error("DB connection timed out after {}s", self._connect_timeout)
            raise DatabaseConnectionTimeout(f"Connection to {self._db_path} timed out") from e
        except Exception as e:
            self._pending = None
            logger.error("Error connecting to DuckDB: {}", e)
            raise DatabaseConnectionError(str(e)) from e

        self._conn = conn
        try:
            await self._setup(conn)
        except Exception as e:
            self._conn = None
            self._pending = None
            conn.close()
            logger.error("DB setup failed: {}", e)
            raise DatabaseConnectionError(f"Database setup failed: {e}") from e

        self._pending = None
        logger.info("Connected to DuckDB: {}", self._db_path)
        return conn

    async def _setup(self, conn: duckdb.DuckDBPyConnection) -> None:
        init_tables(conn)
        if self._cache is not None:
            await self._cache.sweep()
        self._apply_hooks()

    def _apply_hooks(self) -> None:
        """Build entity repositories, wrapped for invalidation, exactly once."""
        if self._hooks_applied:
            return

        for entity in self._entity_types:
            repo = DocumentRepository(self, entity)
            if self._cache is not None:
                repo = add_cache_invalidation_hooks(repo, entity, self._cache)
            self._repositories[entity] = repo

        self._hooks_applied = True
        logger.info(
            "Repositories ready for {} entity types (cache invalidation: {})",
            len(self._repositories),
            "on" if self._cache is not None else "off",
        )

    def repository(self, entity: str) -> Any:
        """Repository for an entity type. Requires a live connection."""
        if self._conn is None:
            raise DatabaseNotConnected()
        try:
            return self._repositories[entity]
        except KeyError:
            raise KeyError(f"Unknown entity type: {entity}") from None

    def close(self) -> None:
        """Close the connection. Repositories stay bound for the next connect."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("DB connection closed")
