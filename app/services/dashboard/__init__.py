"""Dashboard services."""

from app.services.dashboard.service import DashboardService

__all__ = [
    "DashboardService",
]
