"""Cache API response schemas."""

from datetime import datetime

from pydantic import BaseModel


class ClearCacheResponse(BaseModel):
    """Cache cleared."""

    message: str
    timestamp: datetime
