from sqlmodel import SQLModel, Field
from datetime import datetime, timezone
from uuid import uuid4
import enum


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class User(SQLModel, table=True):
    """User model for authentication and role-based access.

    The role is fixed at registration; its permissions live in
    ``taskmanager.permissions``.
    """
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    username: str = Field(unique=True, index=True)
    email: str = Field(unique=True, index=True)
    hashed_password: str
    role: Role = Field(default=Role.USER)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
