"""Health API."""

from web.api.health.views import health

__all__ = [
    "health",
]
