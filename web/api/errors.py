"""API errors and validation helpers."""

from typing import Any

from app.models.common import ENTITY_TYPES, is_valid_id


class APIError(Exception):
    """Base API error, rendered as {"message": ...} with status_code."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(APIError):
    """Validation error."""

    status_code = 400
    default_message = "Validation error"


class UnauthorizedError(APIError):
    """Request is not authenticated. Deliberately says nothing about why."""

    status_code = 401
    default_message = "Not authenticated"


class ForbiddenError(APIError):
    """Authenticated, but not allowed."""

    status_code = 403
    default_message = "Forbidden"


class NotFoundError(APIError):
    """Resource not found."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(APIError):
    """Resource already exists."""

    status_code = 409
    default_message = "Resource already exists"


class ServerError(APIError):
    """Backend failure, e.g. the database is unreachable."""


def to_response(error: APIError) -> tuple[int, dict[str, Any]]:
    """HTTP status and JSON body for an API error."""
    return error.status_code, {"message": error.message}


def validate_entity(entity: str) -> None:
    """Validate entity is a known entity type."""
    if entity not in ENTITY_TYPES:
        raise NotFoundError(f"Unknown resource: {entity}")


def validate_id(doc_id: str) -> None:
    """Validate doc_id is a well-formed entity id."""
    if not is_valid_id(doc_id):
        raise ValidationError(f"Invalid id: {doc_id}")
