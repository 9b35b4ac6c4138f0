"""Cache API views."""

from datetime import datetime, timezone
from typing import Any

from app.container import container
from app.services.auth import check_role
from web.api.auth.views import require_user
from web.api.errors import ForbiddenError

from .schemas import ClearCacheResponse


async def clear_cache(request: Any) -> ClearCacheResponse:
    """Drop every cached query result. Admins only."""
    user = await require_user(request)
    if not check_role(user, ["admin"]):
        raise ForbiddenError("Only administrators can clear the cache")

    await container.cache.clear_cache()
    return ClearCacheResponse(message="Cache cleared successfully", timestamp=datetime.now(timezone.utc))
