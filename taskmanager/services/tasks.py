"""Task mutations, queries and the status state machine.

Each function takes the requesting user explicitly and checks it against the
rules in ``taskmanager.permissions``: capability first (403), then lookup
(404), then ownership (403).
"""
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from .. import permissions
from ..errors import AssigneeNotFoundError, InvalidTransitionError, NotFoundError
from ..logging import get_logger
from ..models import Task, TaskStatus, User, utc_now
from ..schemas.task import TaskCreate, TaskUpdate

logger = get_logger(__name__)

ALLOWED_TRANSITIONS = {
    TaskStatus.TODO: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.DONE}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.DONE}),
    TaskStatus.DONE: frozenset(),
}


def is_valid_status_transition(current: TaskStatus, new: TaskStatus) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def _get_task_or_404(db: Session, task_id: str) -> Task:
    task = db.get(Task, task_id)
    if task is None:
        raise NotFoundError("Task not found")
    return task


def _resolve_assignee(db: Session, assignee_id: Optional[str]) -> Optional[User]:
    if assignee_id is None:
        return None
    assignee = db.get(User, assignee_id)
    if assignee is None:
        raise AssigneeNotFoundError("Assignee not found")
    return assignee


def _save(db: Session, task: Task) -> Task:
    task.updated_at = utc_now()
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def create_task(db: Session, request: TaskCreate, creator: User) -> Task:
    permissions.authorize(creator, permissions.CREATE_TASK)
    assignee = _resolve_assignee(db, request.assignee_id)

    task = Task(
        title=request.title,
        description=request.description,
        status=request.status,
        priority=request.priority,
        assignee_id=assignee.id if assignee else None,
        creator_id=creator.id,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("task_created", task_id=task.id, creator_id=creator.id, assignee_id=task.assignee_id)
    return task


def update_task(db: Session, task_id: str, request: TaskUpdate, user: User) -> Task:
    """Replace every editable field of a task.

    Status is written as given; transition rules only apply to
    :func:`update_task_status`.
    """
    permissions.require_capability(user, permissions.UPDATE_TASK)
    task = _get_task_or_404(db, task_id)
    permissions.authorize(user, permissions.UPDATE_TASK, task)

    assignee = _resolve_assignee(db, request.assignee_id)
    task.title = request.title
    task.description = request.description
    task.status = request.status
    task.priority = request.priority
    task.assignee_id = assignee.id if assignee else None
    return _save(db, task)


def update_task_status(db: Session, task_id: str, new_status: TaskStatus, user: User) -> Task:
    permissions.require_capability(user, permissions.UPDATE_TASK)
    task = _get_task_or_404(db, task_id)
    permissions.authorize(user, permissions.UPDATE_TASK, task)

    if not is_valid_status_transition(task.status, new_status):
        raise InvalidTransitionError(
            f"Invalid status transition from {task.status.value} to {TaskStatus(new_status).value}"
        )

    previous = task.status
    task.status = new_status
    task = _save(db, task)
    logger.info("task_status_changed", task_id=task.id, from_status=previous.value, to_status=task.status.value)
    return task


def assign_task(db: Session, task_id: str, assignee_id: str, user: User) -> Task:
    permissions.require_capability(user, permissions.ASSIGN_TASK)
    task = _get_task_or_404(db, task_id)
    permissions.authorize(user, permissions.ASSIGN_TASK, task)

    assignee = _resolve_assignee(db, assignee_id)
    task.assignee_id = assignee.id
    return _save(db, task)


def delete_task(db: Session, task_id: str, user: User) -> None:
    permissions.authorize(user, permissions.DELETE_TASK)
    task = _get_task_or_404(db, task_id)
    db.delete(task)
    db.commit()
    logger.info("task_deleted", task_id=task_id, user_id=user.id)


def get_task(db: Session, task_id: str, user: User) -> Task:
    permissions.require_capability(user, permissions.READ_TASK)
    task = _get_task_or_404(db, task_id)
    permissions.authorize(user, permissions.READ_TASK, task)
    return task


def get_tasks(
    db: Session,
    user: User,
    status: Optional[TaskStatus] = None,
    assignee_id: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
) -> Tuple[List[Task], int]:
    """Return one page of tasks matching the optional filters, and the total."""
    permissions.authorize(user, permissions.LIST_TASKS, assignee_id)
    assignee = _resolve_assignee(db, assignee_id)

    query = db.query(Task)
    if status is not None:
        query = query.filter(Task.status == status)
    if assignee is not None:
        query = query.filter(Task.assignee_id == assignee.id)

    total = query.count()
    items = query.order_by(Task.created_at.desc()).offset(skip).limit(limit).all()
    return items, total


def get_tasks_by_assignee(db: Session, user: User) -> List[Task]:
    permissions.authorize(user, permissions.READ_OWN_TASKS)
    return db.query(Task).filter(Task.assignee_id == user.id).order_by(Task.created_at.desc()).all()


def get_tasks_by_creator(db: Session, user: User) -> List[Task]:
    permissions.authorize(user, permissions.READ_OWN_TASKS)
    return db.query(Task).filter(Task.creator_id == user.id).order_by(Task.created_at.desc()).all()


def get_tasks_by_status(db: Session, status: TaskStatus, user: User) -> List[Task]:
    permissions.authorize(user, permissions.READ_TASKS_BY_STATUS)
    return db.query(Task).filter(Task.status == status).order_by(Task.created_at.desc()).all()
