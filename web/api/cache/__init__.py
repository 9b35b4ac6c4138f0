"""Cache API."""

from web.api.cache.views import clear_cache

__all__ = [
    "clear_cache",
]
