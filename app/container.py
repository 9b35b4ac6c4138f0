"""Dependency Injection container - initialized at app startup."""

from app.repositories.common import CacheRepository
from app.repositories.db import ConnectionManager
from app.services.auth import AuthService
from app.services.cache import CacheService
from app.services.dashboard import DashboardService
from settings import CACHE_TTL, CONNECT_TIMEOUT, DB_PATH, require_jwt_secret


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(
        self,
        db_path: str | None = None,
        jwt_secret: str | None = None,
        cache_ttl: int = CACHE_TTL,
        connect_timeout: float = CONNECT_TIMEOUT,
    ) -> None:
        """Initialize all dependencies. Call once at app startup."""
        if self._initialized:
            return

        # Connection (opened lazily on first use)
        self.db = ConnectionManager(db_path or DB_PATH, connect_timeout=connect_timeout)

        # Cache, wired into every entity repository's writes
        self.cache = CacheService(CacheRepository(self.db, ttl=cache_ttl))
        self.db.bind_invalidation(self.cache)

        # Services
        self.auth = AuthService(self.db, jwt_secret or require_jwt_secret())
        self.dashboard = DashboardService(db=self.db, cache=self.cache)

        self._initialized = True

    def reset(self) -> None:
        """Close the connection and forget all instances."""
        if self._initialized:
            self.db.close()
        self._initialized = False


# Global container instance
container = Container()
