"""Document repository - one instance per entity type."""

import json
import re
from typing import Any

import duckdb
from loguru import logger

from app.errors import DocumentExists
from app.models.common import is_valid_id, new_id
from app.repositories.base import BaseRepository, utcnow

_FIELD_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

# Stored in their own columns, never inside the JSON body
_RESERVED = ("id", "_id", "created_at", "updated_at")

_COLUMNS = "id, data, created_at, updated_at"


def _scalar(value: Any) -> str:
    """Text form json_extract_string produces for a JSON scalar."""
    return value if isinstance(value, str) else json.dumps(value)


def _body(doc: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in doc.items() if k not in _RESERVED}


class DocumentRepository(BaseRepository):
    """CRUD over the document table for a single entity type.

    Filters are equality matches on top-level fields; a list value matches
    any of its members. Methods are coroutines so callers treat every data
    access as a suspension point.
    """

    def __init__(self, db, entity: str):
        self.entity = entity
        super().__init__(db)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.entity!r})"

    # --- helpers -------------------------------------------------------------

    def _where(self, filters: dict[str, Any] | None) -> tuple[str, list]:
        clauses = ["entity = ?"]
        params: list = [self.entity]

        for field, value in (filters or {}).items():
            if not _FIELD_RE.fullmatch(field):
                raise ValueError(f"Invalid filter field: {field!r}")
            column = "id" if field == "id" else f"json_extract_string(data, '$.{field}')"

            if value is None:
                clauses.append(f"{column} IS NULL")
                continue

            values = list(value) if isinstance(value, (list, tuple, set)) else [value]
            if not values:
                clauses.append("FALSE")
                continue
            clauses.append(f"{column} IN ({', '.join('?' for _ in values)})")
            params.extend(_scalar(v) for v in values)

        return " AND ".join(clauses), params

    @staticmethod
    def _to_doc(row, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
        doc_id, data, created_at, updated_at = row
        doc = {"id": doc_id, **json.loads(data), "created_at": created_at, "updated_at": updated_at}
        for name in exclude:
            doc.pop(name, None)
        return doc

    def _select(self, filters: dict[str, Any] | None, limit: int | None = None) -> list:
        where, params = self._where(filters)
        query = f"SELECT {_COLUMNS} FROM document WHERE {where} ORDER BY created_at, id"
        if limit is not None:
            query += f" LIMIT {int(limit)}"
        return self.fetchall(query, params)

    # --- reads ---------------------------------------------------------------

    async def find_by_id(self, doc_id: str, exclude: tuple[str, ...] = ()) -> dict[str, Any] | None:
        """Get one document, dropping excluded fields. Invalid ids never match."""
        if not is_valid_id(doc_id):
            return None
        row = self.fetchone(
            f"SELECT {_COLUMNS} FROM document WHERE entity = ? AND id = ?",
            [self.entity, doc_id],
        )
        return self._to_doc(row, exclude) if row else None

    async def find_one(self, filters: dict[str, Any], exclude: tuple[str, ...] = ()) -> dict[str, Any] | None:
        rows = self._select(filters, limit=1)
        return self._to_doc(rows[0], exclude) if rows else None

    async def find(
        self,
        filters: dict[str, Any] | None = None,
        exclude: tuple[str, ...] = (),
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        return [self._to_doc(r, exclude) for r in self._select(filters, limit)]

    async def count(self, filters: dict[str, Any] | None = None) -> int:
        where, params = self._where(filters)
        return self.fetchone(f"SELECT COUNT(*) FROM document WHERE {where}", params)[0]

    # --- writes --------------------------------------------------------------

    async def create(self, doc: dict[str, Any]) -> dict[str, Any]:
        """Insert a document, assigning an id unless a valid one is supplied."""
        doc_id = doc.get("id") or doc.get("_id")
        if doc_id is None:
            doc_id = new_id()
        elif not is_valid_id(str(doc_id)):
            raise ValueError(f"Invalid {self.entity} id: {doc_id!r}")
        doc_id = str(doc_id)

        body = _body(doc)
        now = utcnow()
        try:
            self.execute(
                "INSERT INTO document (entity, id, data, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                [self.entity, doc_id, json.dumps(body, default=str), now, now],
            )
        except duckdb.ConstraintException as e:
            raise DocumentExists(f"{self.entity} {doc_id} already exists") from e
        logger.debug("Created {} {}", self.entity, doc_id)
        return {"id": doc_id, **json.loads(json.dumps(body, default=str)), "created_at": now, "updated_at": now}

    async def update_one(self, doc_id: str, changes: dict[str, Any]) -> dict[str, Any] | None:
        """Shallow-merge changes into one document. Returns None if it does not exist."""
        current = await self.find_by_id(doc_id)
        if current is None:
            return None
        return self._write(current, changes)

    async def update_many(self, filters: dict[str, Any] | None, changes: dict[str, Any]) -> int:
        """Apply the same changes to every matching document."""
        rows = self._select(filters)
        for row in rows:
            self._write(self._to_doc(row), changes)
        logger.debug("Updated {} {} documents", len(rows), self.entity)
        return len(rows)

    def _write(self, current: dict[str, Any], changes: dict[str, Any]) -> dict[str, Any]:
        body = {**_body(current), **_body(changes)}
        data = json.dumps(body, default=str)
        now = utcnow()
        self.execute(
            "UPDATE document SET data = ?, updated_at = ? WHERE entity = ? AND id = ?",
            [data, now, self.entity, current["id"]],
        )
        return {"id": current["id"], **json.loads(data), "created_at": current["created_at"], "updated_at": now}

    async def delete_one(self, doc_id: str) -> bool:
        """Delete one document. Returns whether anything was removed."""
        if not is_valid_id(doc_id):
            return False
        row = self.fetchone(
            "DELETE FROM document WHERE entity = ? AND id = ?",
            [self.entity, doc_id],
        )
        deleted = bool(row and row[0])
        if deleted:
            logger.debug("Deleted {} {}", self.entity, doc_id)
        return deleted

    async def delete_many(self, filters: dict[str, Any] | None = None) -> int:
        """Delete every matching document. Returns the count removed."""
        where, params = self._where(filters)
        row = self.fetchone(f"DELETE FROM document WHERE {where}", params)
        removed = row[0] if row else 0
        logger.debug("Deleted {} {} documents", removed, self.entity)
        return removed
