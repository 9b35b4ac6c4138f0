"""Dashboard API response schemas."""

from pydantic import BaseModel


class ProjectStats(BaseModel):
    total: int
    active: int
    completed: int
    on_hold: int


class TaskStats(BaseModel):
    total: int
    todo: int
    in_progress: int
    review: int
    completed: int


class RevenueStats(BaseModel):
    this_month: float
    last_month: float
    outstanding: float


class TeamStats(BaseModel):
    total: int
    utilization: int
    overallocated: int


class DeadlineItem(BaseModel):
    """Project due within the deadline window."""

    id: str
    name: str | None
    client: str
    deadline: str
    status: str | None


class ActivityItem(BaseModel):
    """Recently touched task."""

    id: str
    user: str
    action: str
    target: str | None
    project: str
    time: str


class OverviewResponse(BaseModel):
    """Dashboard overview response."""

    projects: ProjectStats
    tasks: TaskStats
    revenue: RevenueStats
    team: TeamStats
    upcoming_deadlines: list[DeadlineItem]
    recent_activities: list[ActivityItem]
