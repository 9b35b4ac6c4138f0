"""Entity API response schemas."""

from typing import Any

from pydantic import BaseModel


class DocumentResponse(BaseModel):
    """A single document."""

    entity: str
    item: dict[str, Any]


class DocumentListResponse(BaseModel):
    """All documents of one entity type."""

    entity: str
    items: list[dict[str, Any]]
    total: int


class DeleteResponse(BaseModel):
    """Document removed."""

    message: str
    id: str
