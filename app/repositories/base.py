"""Base repository class."""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import duckdb
from loguru import logger

if TYPE_CHECKING:
    from app.repositories.db import ConnectionManager


def utcnow() -> datetime:
    """Naive UTC timestamp, the form DuckDB TIMESTAMP columns round-trip."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseRepository:
    """Base repository with common functionality.

    Holds the connection manager rather than a connection, so a repository
    outlives reconnects and fails with DatabaseNotConnected before connect.
    """

    def __init__(self, db: "ConnectionManager"):
        self._db = db
        logger.debug("{} initialized", self.__class__.__name__)

    @property
    def connection(self) -> duckdb.DuckDBPyConnection:
        return self._db.connection

    def execute(self, query: str, params: list | None = None) -> Any:
        """Execute SQL query."""
        if params:
            return self.connection.execute(query, params)
        return self.connection.execute(query)

    def fetchall(self, query: str, params: list | None = None) -> list:
        """Execute and fetch all rows."""
        return self.execute(query, params).fetchall()

    def fetchone(self, query: str, params: list | None = None) -> Any:
        """Execute and fetch one row."""
        return self.execute(query, params).fetchone()
