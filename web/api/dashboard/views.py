"""Dashboard API views - thin layer over services."""

from typing import Any

from loguru import logger

from app.container import container
from app.errors import DatabaseError
from web.api.auth.views import require_user
from web.api.errors import ServerError

from .schemas import OverviewResponse


async def get_overview(request: Any, skip_cache: bool = False) -> OverviewResponse:
    """Get dashboard overview."""
    await require_user(request)
    try:
        data = await container.dashboard.get_overview(skip_cache=skip_cache)
    except DatabaseError as e:
        logger.error("Error fetching dashboard data: {}", e)
        raise ServerError("Error fetching dashboard data") from e

    return OverviewResponse.model_validate(data)
