from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import List, Optional

from ..models.task import Task as TaskModel, TaskPriority, TaskStatus


class TaskBase(BaseModel):
    title: str
    description: Optional[str] = None
    priority: TaskPriority
    assignee_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title is required")
        return value


class TaskCreate(TaskBase):
    """New tasks start in TODO unless told otherwise."""
    status: TaskStatus = TaskStatus.TODO


class TaskUpdate(TaskBase):
    """Full replacement of a task; the status must be given explicitly."""
    status: TaskStatus


class TaskUser(BaseModel):
    id: str
    username: str
    email: str

    class Config:
        from_attributes = True


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    status: TaskStatus
    priority: TaskPriority
    assignee: Optional[TaskUser] = None
    creator: TaskUser
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @classmethod
    def from_task(cls, task: TaskModel) -> "TaskResponse":
        return cls.model_validate(task)


class TaskPage(BaseModel):
    content: List[TaskResponse]
    total: int
    skip: int = Field(ge=0)
    limit: int = Field(ge=1)
