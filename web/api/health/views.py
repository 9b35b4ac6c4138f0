"""Health API view. No authentication."""

from datetime import datetime, timezone

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime


def health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
