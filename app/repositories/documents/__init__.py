"""Document repositories - business entities stored as JSON."""

from app.repositories.documents.repository import DocumentRepository

__all__ = [
    "DocumentRepository",
]
