"""Shared fixtures: in-memory DuckDB, cache with a manual clock, auth."""

from datetime import timedelta
from types import SimpleNamespace

import pytest
import pytest_asyncio

from app.repositories import CacheRepository, ConnectionManager, utcnow
from app.services import AuthService, CacheService

TEST_SECRET = "test-secret-0123456789abcdef0123456789abcdef"


class Clock:
    """Manually advanced clock for expiry tests."""

    def __init__(self):
        self.now = utcnow()

    def __call__(self):
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


def make_request(token: str | None = None) -> SimpleNamespace:
    """Minimal stand-in for an HTTP request with cookies."""
    return SimpleNamespace(cookies={"token": token} if token is not None else {})


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def db():
    manager = ConnectionManager(":memory:")
    yield manager
    manager.close()


@pytest.fixture
def cache(db, clock):
    service = CacheService(CacheRepository(db, clock=clock))
    db.bind_invalidation(service)
    return service


@pytest.fixture
def auth(db, cache):
    return AuthService(db, TEST_SECRET)


@pytest_asyncio.fixture
async def connected(db, cache):
    await db.connect()
    return db
