"""Startup seeding of demo users and tasks.

Users go through the normal registration path and tasks through the normal
create path. A failing item is logged and skipped; the rest still load.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .errors import ServiceError
from .logging import get_logger
from .models import Role, TaskPriority, TaskStatus, User
from .schemas.task import TaskCreate
from .schemas.user import RegisterRequest
from .services import auth as auth_service
from .services import tasks as task_service

logger = get_logger(__name__)


class SeedUser(BaseModel):
    username: str
    email: str
    password: str
    role: Role = Role.USER


class SeedTask(BaseModel):
    title: str
    description: Optional[str] = None
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    creator_email: str
    assignee_email: Optional[str] = None


class SeedData(BaseModel):
    users: List[SeedUser] = []
    tasks: List[SeedTask] = []


DEFAULT_SEED = SeedData(
    users=[
        SeedUser(username="admin", email="admin@example.com", password="admin123", role=Role.ADMIN),
        SeedUser(username="john", email="john@example.com", password="password123"),
        SeedUser(username="jane", email="jane@example.com", password="password123"),
    ],
    tasks=[
        SeedTask(
            title="Set up project board",
            description="Create the initial columns and invite the team",
            priority=TaskPriority.HIGH,
            creator_email="admin@example.com",
            assignee_email="john@example.com",
        ),
        SeedTask(
            title="Write onboarding guide",
            status=TaskStatus.IN_PROGRESS,
            creator_email="jane@example.com",
            assignee_email="jane@example.com",
        ),
        SeedTask(
            title="Review API error codes",
            priority=TaskPriority.LOW,
            creator_email="john@example.com",
        ),
    ],
)


def _create_users(db: Session, seed_users: List[SeedUser]) -> Dict[str, User]:
    users: Dict[str, User] = {}
    for seed_user in seed_users:
        try:
            existing = auth_service.find_user_by_email(db, seed_user.email)
            if existing is not None:
                logger.info("seed_user_exists", email=seed_user.email)
                users[seed_user.email] = existing
                continue

            auth_service.register(
                db,
                RegisterRequest(
                    username=seed_user.username,
                    email=seed_user.email,
                    password=seed_user.password,
                    role=seed_user.role,
                ),
            )
            users[seed_user.email] = auth_service.find_user_by_email(db, seed_user.email)
            logger.info("seed_user_created", username=seed_user.username, role=seed_user.role.value)
        except (ServiceError, ValueError, SQLAlchemyError) as exc:
            db.rollback()
            logger.error("seed_user_failed", email=seed_user.email, error=str(exc))
    return users


def _create_tasks(db: Session, seed_tasks: List[SeedTask], users: Dict[str, User]) -> int:
    created = 0
    for seed_task in seed_tasks:
        creator = users.get(seed_task.creator_email)
        if creator is None:
            logger.error("seed_task_skipped", title=seed_task.title, reason="creator_not_found")
            continue

        assignee_id = None
        if seed_task.assignee_email is not None:
            assignee = users.get(seed_task.assignee_email)
            if assignee is None:
                logger.error("seed_task_skipped", title=seed_task.title, reason="assignee_not_found")
                continue
            assignee_id = assignee.id

        try:
            task_service.create_task(
                db,
                TaskCreate(
                    title=seed_task.title,
                    description=seed_task.description,
                    status=seed_task.status,
                    priority=seed_task.priority,
                    assignee_id=assignee_id,
                ),
                creator,
            )
            created += 1
        except (ServiceError, ValueError, SQLAlchemyError) as exc:
            db.rollback()
            logger.error("seed_task_failed", title=seed_task.title, error=str(exc))
    return created


def load_seed_data(db: Session, seed: SeedData = DEFAULT_SEED) -> int:
    """Load ``seed`` into the store and return the number of tasks created."""
    logger.info("seed_started", users=len(seed.users), tasks=len(seed.tasks))
    users = _create_users(db, seed.users)
    created = _create_tasks(db, seed.tasks, users)
    logger.info("seed_finished", users=len(users), tasks_created=created)
    return created
