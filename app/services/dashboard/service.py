"""Dashboard service."""

import math
from datetime import date, timedelta
from typing import Any

import polars as pl
from loguru import logger

from app.models.common import DASHBOARD_KEY
from app.repositories.base import utcnow
from app.repositories.db import ConnectionManager
from app.services.cache import CacheService

PROJECT_STATUSES = {"active": "in-progress", "completed": "completed", "on_hold": "on-hold"}
TASK_STATUSES = {"todo": "todo", "in_progress": "in-progress", "review": "review", "completed": "done"}
OPEN_PROJECT_STATUSES = ["planning", "in-progress", "review"]
OUTSTANDING_INVOICE_STATUSES = ["sent", "overdue"]

DEADLINE_WINDOW_DAYS = 14
TASKS_PER_MEMBER = 3
LIST_LIMIT = 5


def _as_date(value: Any) -> date | None:
    """Parse the date part of an ISO date or datetime string."""
    if value is None:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


class DashboardService:
    """Dashboard business logic.

    The overview aggregates several entity types, so it is cached under the
    single dashboard key that every write invalidates.
    """

    def __init__(self, db: ConnectionManager, cache: CacheService):
        self._db = db
        self._cache = cache

    async def get_overview(self, skip_cache: bool = False) -> dict:
        """Get dashboard overview, from cache unless skip_cache is set."""
        if skip_cache:
            return await self._compute_overview()
        return await self._cache.get_cached_data(DASHBOARD_KEY, self._compute_overview)

    async def _compute_overview(self) -> dict:
        await self._db.connect()
        today = utcnow().date()

        projects = await self._status_counts("project", PROJECT_STATUSES)
        tasks = await self._status_counts("task", TASK_STATUSES)
        members = await self._db.repository("user").count({"status": "active"})

        in_progress = tasks["in_progress"]
        capacity = members * TASKS_PER_MEMBER
        team = {
            "total": members,
            "utilization": min(100, round(in_progress / capacity * 100)) if capacity else 0,
            "overallocated": math.ceil((in_progress - capacity) / TASKS_PER_MEMBER) if in_progress > capacity else 0,
        }

        overview = {
            "projects": projects,
            "tasks": tasks,
            "revenue": await self._revenue(today),
            "team": team,
            "upcoming_deadlines": await self._upcoming_deadlines(today),
            "recent_activities": await self._recent_activities(),
        }
        logger.info("Computed dashboard overview: {} projects, {} tasks", projects["total"], tasks["total"])
        return overview

    async def _status_counts(self, entity: str, statuses: dict[str, str]) -> dict[str, int]:
        repo = self._db.repository(entity)
        counts = {"total": await repo.count()}
        for name, status in statuses.items():
            counts[name] = await repo.count({"status": status})
        return counts

    async def _revenue(self, today: date) -> dict[str, float]:
        invoices = await self._db.repository("invoice").find({"status": ["paid", *OUTSTANDING_INVOICE_STATUSES]})
        df = pl.DataFrame(
            [
                {
                    "status": i.get("status"),
                    "total": float(i.get("total") or 0),
                    "payment_date": _as_date(i.get("payment_date")),
                }
                for i in invoices
            ],
            schema={"status": pl.Utf8, "total": pl.Float64, "payment_date": pl.Date},
        )

        month_start = today.replace(day=1)
        last_month_end = month_start - timedelta(days=1)
        last_month_start = last_month_end.replace(day=1)
        paid = df.filter(pl.col("status") == "paid")

        def paid_between(start: date, end: date) -> float:
            window = paid.filter((pl.col("payment_date") >= start) & (pl.col("payment_date") <= end))
            return float(window["total"].sum())

        outstanding = df.filter(pl.col("status").is_in(OUTSTANDING_INVOICE_STATUSES))
        return {
            "this_month": paid_between(month_start, today),
            "last_month": paid_between(last_month_start, last_month_end),
            "outstanding": float(outstanding["total"].sum()),
        }

    async def _upcoming_deadlines(self, today: date) -> list[dict]:
        projects = await self._db.repository("project").find({"status": OPEN_PROJECT_STATUSES})
        df = pl.DataFrame(
            [
                {
                    "id": p["id"],
                    "name": p.get("name"),
                    "client": p.get("client"),
                    "deadline": _as_date(p.get("deadline")),
                    "status": p.get("status"),
                }
                for p in projects
            ],
            schema={"id": pl.Utf8, "name": pl.Utf8, "client": pl.Utf8, "deadline": pl.Date, "status": pl.Utf8},
        )
        upcoming = (
            df.filter(
                (pl.col("deadline") >= today) & (pl.col("deadline") <= today + timedelta(days=DEADLINE_WINDOW_DAYS))
            )
            .sort("deadline")
            .head(LIST_LIMIT)
            .to_dicts()
        )

        client_names = await self._names("client", [p["client"] for p in upcoming])
        return [
            {
                "id": p["id"],
                "name": p["name"],
                "client": client_names.get(p["client"], "Unknown Client"),
                "deadline": p["deadline"].isoformat(),
                "status": p["status"],
            }
            for p in upcoming
        ]

    async def _recent_activities(self) -> list[dict]:
        tasks = await self._db.repository("task").find()
        recent = sorted(tasks, key=lambda t: t["updated_at"], reverse=True)[:LIST_LIMIT]

        people = await self._names("user", [t.get("assignee") or t.get("created_by") for t in recent])
        project_names = await self._names("project", [t.get("project") for t in recent])

        actions = {"done": "completed task", "in-progress": "started working on", "review": "submitted for review"}
        return [
            {
                "id": t["id"],
                "user": people.get(t.get("assignee") or t.get("created_by"), "System"),
                "action": actions.get(t.get("status"), "updated"),
                "target": t.get("title"),
                "project": project_names.get(t.get("project"), "Unknown Project"),
                "time": t["updated_at"].isoformat(),
            }
            for t in recent
        ]

    async def _names(self, entity: str, ids: list[str | None]) -> dict[str, str]:
        wanted = sorted({i for i in ids if i})
        if not wanted:
            return {}
        docs = await self._db.repository(entity).find({"id": wanted})
        # Unnamed documents fall back to the caller's placeholder
        return {d["id"]: str(d["name"]) for d in docs if d.get("name")}
