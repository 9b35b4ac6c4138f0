"""User schema - the sanitized shape handed to request handlers."""

from datetime import datetime

from pydantic import BaseModel

# Never leave the repository layer through authentication
SECRET_FIELDS = ("password", "reset_password_token", "reset_password_expiry")

ROLES = ("admin", "manager", "developer", "designer", "marketer", "support")


class Skill(BaseModel):
    """A team member skill."""

    name: str
    proficiency: int = 70
    years_of_experience: int = 1


class User(BaseModel):
    """Authenticated user without credentials."""

    id: str
    name: str
    email: str
    role: str = "developer"
    department: str = "development"
    status: str = "active"
    title: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar: str | None = None
    skills: list[Skill] = []
    projects: list[str] = []
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
