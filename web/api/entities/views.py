"""Entity API views - generic CRUD for every entity type.

Reads go through the cache under "<entity>" and "<entity>-<id>"; writes go
through the invalidating repositories, which bust those keys.
"""

from typing import Any

from loguru import logger

from app.container import container
from app.errors import DatabaseError, DocumentExists
from app.models.auth import SECRET_FIELDS
from app.repositories.common import to_jsonable
from app.services.auth import check_role, hash_password
from web.api.auth.views import require_user
from web.api.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ServerError,
    ValidationError,
    validate_entity,
    validate_id,
)

from .schemas import DeleteResponse, DocumentListResponse, DocumentResponse

# Roles allowed per entity and action. Anything not listed is open to every signed-in user.
ENTITY_ROLES: dict[str, dict[str, tuple[str, ...]]] = {
    "expense": {
        "read": ("admin", "finance", "manager"),
        "create": ("admin", "finance", "manager"),
        "update": ("admin", "finance"),
        "delete": ("admin", "finance"),
    },
    "user": {
        "create": ("admin",),
        "update": ("admin",),
        "delete": ("admin",),
    },
}


def _exclude(entity: str) -> tuple[str, ...]:
    return SECRET_FIELDS if entity == "user" else ()


def allowed_roles(entity: str, action: str) -> tuple[str, ...] | None:
    """Roles that may perform action on entity, or None when any user may."""
    return ENTITY_ROLES.get(entity, {}).get(action)


async def _repository(request: Any, entity: str, action: str) -> Any:
    validate_entity(entity)
    user = await require_user(request)

    roles = allowed_roles(entity, action)
    if roles is not None and not check_role(user, roles):
        logger.info("User {} ({}) denied {} on {}", user.get("id"), user.get("role"), action, entity)
        raise ForbiddenError("Insufficient permissions")

    try:
        await container.db.connect()
    except DatabaseError as e:
        logger.error("Database connection error: {}", e)
        raise ServerError("Database connection error") from e
    return container.db.repository(entity)


async def list_documents(request: Any, entity: str) -> DocumentListResponse:
    """List all documents of an entity type."""
    repo = await _repository(request, entity, "read")

    items = await container.cache.get_cached_data(entity, lambda: repo.find(exclude=_exclude(entity)))
    return DocumentListResponse(entity=entity, items=items, total=len(items))


async def get_document(request: Any, entity: str, doc_id: str) -> DocumentResponse:
    """Get one document."""
    validate_id(doc_id)
    repo = await _repository(request, entity, "read")

    item = await container.cache.get_cached_data(
        f"{entity}-{doc_id}", lambda: repo.find_by_id(doc_id, exclude=_exclude(entity))
    )
    if item is None:
        raise NotFoundError(f"{entity} not found")
    return DocumentResponse(entity=entity, item=item)


async def create_document(request: Any, entity: str, payload: dict[str, Any]) -> DocumentResponse:
    """Create a document. Users are created through registration."""
    repo = await _repository(request, entity, "create")
    try:
        if entity == "user":
            data = dict(payload)
            item = await container.auth.register_user(
                data.pop("email", ""), data.pop("name", ""), data.pop("password", ""), data.pop("role", "developer"), **data
            )
        else:
            item = to_jsonable(await repo.create(payload))
    except DocumentExists as e:
        raise ConflictError(str(e)) from e
    except ValueError as e:
        raise ValidationError(str(e)) from e
    return DocumentResponse(entity=entity, item=item)


async def update_document(request: Any, entity: str, doc_id: str, changes: dict[str, Any]) -> DocumentResponse:
    """Shallow-merge changes into a document."""
    validate_id(doc_id)
    repo = await _repository(request, entity, "update")

    changes = dict(changes)
    if entity == "user" and changes.get("password"):
        changes["password"] = hash_password(changes["password"])

    updated = await repo.update_one(doc_id, changes)
    if updated is None:
        raise NotFoundError(f"{entity} not found")
    for name in _exclude(entity):
        updated.pop(name, None)
    return DocumentResponse(entity=entity, item=to_jsonable(updated))


async def delete_document(request: Any, entity: str, doc_id: str) -> DeleteResponse:
    """Delete a document."""
    validate_id(doc_id)
    repo = await _repository(request, entity, "delete")

    if not await repo.delete_one(doc_id):
        raise NotFoundError(f"{entity} not found")
    return DeleteResponse(message=f"{entity} deleted successfully", id=doc_id)
