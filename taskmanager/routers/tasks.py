from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..models import TaskStatus, User
from ..schemas.task import TaskCreate, TaskPage, TaskResponse, TaskUpdate
from ..security import get_current_user
from ..services import tasks as task_service

router = APIRouter()


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task: TaskCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a task owned by the caller."""
    created = task_service.create_task(db, task, current_user)
    return TaskResponse.from_task(created)


@router.get("", response_model=TaskPage)
def get_tasks(
    status: Optional[TaskStatus] = None,
    assignee: Optional[str] = None,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List tasks filtered by status and assignee.

    Users without ``task:read:all`` must pass their own id as ``assignee``.
    """
    items, total = task_service.get_tasks(
        db, current_user, status=status, assignee_id=assignee, skip=skip, limit=limit
    )
    return TaskPage(
        content=[TaskResponse.from_task(task) for task in items],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/my-tasks", response_model=List[TaskResponse])
def get_my_tasks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [TaskResponse.from_task(task) for task in task_service.get_tasks_by_assignee(db, current_user)]


@router.get("/created-by-me", response_model=List[TaskResponse])
def get_tasks_created_by_me(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [TaskResponse.from_task(task) for task in task_service.get_tasks_by_creator(db, current_user)]


@router.get("/status/{task_status}", response_model=List[TaskResponse])
def get_tasks_by_status(
    task_status: TaskStatus,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tasks = task_service.get_tasks_by_status(db, task_status, current_user)
    return [TaskResponse.from_task(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TaskResponse.from_task(task_service.get_task(db, task_id, current_user))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    task_update: TaskUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Replace all editable fields of a task."""
    updated = task_service.update_task(db, task_id, task_update, current_user)
    return TaskResponse.from_task(updated)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    task_service.delete_task(db, task_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/assign", response_model=TaskResponse)
def assign_task(
    task_id: str,
    assignee_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Hand a task to another user; only its creator may do this."""
    updated = task_service.assign_task(db, task_id, assignee_id, current_user)
    return TaskResponse.from_task(updated)


@router.put("/{task_id}/status", response_model=TaskResponse)
def update_task_status(
    task_id: str,
    status: TaskStatus,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Move a task along TODO -> IN_PROGRESS -> DONE."""
    updated = task_service.update_task_status(db, task_id, status, current_user)
    return TaskResponse.from_task(updated)
