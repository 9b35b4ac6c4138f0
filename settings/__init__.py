"""Application settings."""

import os
from pathlib import Path

from app.errors import ConfigError

# Database
DB_PATH = os.getenv("AGENCY_DB_PATH", "agency.duckdb")
CONNECT_TIMEOUT = float(os.getenv("AGENCY_CONNECT_TIMEOUT", "10"))

# Logging
LOG_DIR = Path(os.getenv("AGENCY_LOG_DIR", "logs"))
LOG_LEVEL = os.getenv("AGENCY_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("AGENCY_LOG_JSON", "").lower() in ("1", "true", "yes")

# Cache
CACHE_TTL = 300

# Auth
AUTH_COOKIE = "token"
JWT_SECRET = os.getenv("AGENCY_JWT_SECRET")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_HOURS = 24


def require_jwt_secret() -> str:
    """Return the JWT signing secret, failing loudly when it is not configured."""
    secret = os.getenv("AGENCY_JWT_SECRET") or JWT_SECRET
    if not secret:
        raise ConfigError("AGENCY_JWT_SECRET is not set")
    return secret
