"""Entity API."""

from web.api.entities.views import (
    ENTITY_ROLES,
    allowed_roles,
    create_document,
    delete_document,
    get_document,
    list_documents,
    update_document,
)

__all__ = [
    "ENTITY_ROLES",
    "allowed_roles",
    "list_documents",
    "get_document",
    "create_document",
    "update_document",
    "delete_document",
]
