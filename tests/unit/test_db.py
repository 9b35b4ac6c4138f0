"""Tests for the connection manager."""

import asyncio
import time

import duckdb
import pytest

from app.errors import DatabaseConnectionError, DatabaseConnectionTimeout, DatabaseNotConnected
from app.repositories import ConnectionManager


class SlowConnect:
    """duckdb.connect stand-in that counts attempts and can fail or stall."""

    def __init__(self, delay: float = 0.05, failures: int = 0):
        self.delay = delay
        self.failures = failures
        self.attempts = 0

    def __call__(self, path):
        self.attempts += 1
        time.sleep(self.delay)
        if self.attempts <= self.failures:
            raise duckdb.IOException("database is locked")
        return duckdb.connect(path)


class TestConnect:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_attempt(self):
        connect = SlowConnect()
        db = ConnectionManager(":memory:", connect_fn=connect)

        conns = await asyncio.gather(*(db.connect() for _ in range(10)))

        assert connect.attempts == 1
        assert all(c is conns[0] for c in conns)
        db.close()

    @pytest.mark.asyncio
    async def test_cached_connection_is_reused(self):
        connect = SlowConnect(delay=0)
        db = ConnectionManager(":memory:", connect_fn=connect)
        first = await db.connect()
        second = await db.connect()
        assert first is second
        assert connect.attempts == 1
        db.close()

    @pytest.mark.asyncio
    async def test_failure_propagates_and_next_call_retries(self):
        connect = SlowConnect(delay=0, failures=1)
        db = ConnectionManager(":memory:", connect_fn=connect)

        with pytest.raises(DatabaseConnectionError):
            await db.connect()
        assert not db.connected

        await db.connect()
        assert db.connected
        assert connect.attempts == 2
        db.close()

    @pytest.mark.asyncio
    async def test_concurrent_callers_all_see_failure(self):
        connect = SlowConnect(failures=1)
        db = ConnectionManager(":memory:", connect_fn=connect)

        results = await asyncio.gather(*(db.connect() for _ in range(3)), return_exceptions=True)

        assert connect.attempts == 1
        assert all(isinstance(r, DatabaseConnectionError) for r in results)

    @pytest.mark.asyncio
    async def test_timeout(self):
        connect = SlowConnect(delay=0.5)
        db = ConnectionManager(":memory:", connect_fn=connect, connect_timeout=0.05)

        with pytest.raises(DatabaseConnectionTimeout):
            await db.connect()
        assert not db.connected


class TestRepositories:
    def test_not_connected(self):
        db = ConnectionManager(":memory:")
        with pytest.raises(DatabaseNotConnected):
            db.repository("project")
        with pytest.raises(DatabaseNotConnected):
            _ = db.connection

    @pytest.mark.asyncio
    async def test_unknown_entity(self, connected):
        with pytest.raises(KeyError):
            connected.repository("spaceship")

    @pytest.mark.asyncio
    async def test_every_entity_type_bound(self, connected):
        for entity in ("project", "task", "invoice", "expense", "client", "user", "time_entry", "calendar_event", "file"):
            assert connected.repository(entity).entity == entity
        assert connected.hooks_applied

    @pytest.mark.asyncio
    async def test_tables_created(self, connected):
        tables = {r[0] for r in connected.connection.execute("SELECT table_name FROM information_schema.tables").fetchall()}
        assert {"document", "cache_entry"} <= tables

    @pytest.mark.asyncio
    async def test_without_cache_repositories_are_plain(self):
        db = ConnectionManager(":memory:")
        await db.connect()
        assert type(db.repository("task")).__name__ == "DocumentRepository"
        db.close()
