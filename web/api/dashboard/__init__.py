"""Dashboard API."""

from web.api.dashboard.views import get_overview

__all__ = [
    "get_overview",
]
