"""Query result cache table - shared by every entity type."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from app.models.common.base import BaseEntity

CACHE_DDL = """
CREATE TABLE IF NOT EXISTS cache_entry (
    key VARCHAR PRIMARY KEY,
    value JSON NOT NULL,
    created_at TIMESTAMP NOT NULL,
    ttl_seconds INTEGER NOT NULL
)
"""


@dataclass
class CacheEntry(BaseEntity):
    """A memoized query result."""

    key: str
    value: Any
    created_at: datetime
    ttl_seconds: int

    def is_fresh(self, now: datetime) -> bool:
        return now - self.created_at < timedelta(seconds=self.ttl_seconds)
