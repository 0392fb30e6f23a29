from sqlmodel import SQLModel, Field, Relationship
from datetime import datetime
from typing import Optional
from uuid import uuid4
import enum

from .user import User, utc_now


class TaskStatus(str, enum.Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class TaskPriority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class Task(SQLModel, table=True):
    """Task model with a creator and an optional assignee."""
    __tablename__ = "tasks"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    title: str
    description: Optional[str] = None
    status: TaskStatus = Field(default=TaskStatus.TODO, index=True)
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    creator_id: str = Field(foreign_key="users.id", index=True)
    assignee_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)

    # Two foreign keys to users, so each relationship names its own column
    creator: User = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.creator_id]"}
    )
    assignee: Optional[User] = Relationship(
        sa_relationship_kwargs={"foreign_keys": "[Task.assignee_id]"}
    )
