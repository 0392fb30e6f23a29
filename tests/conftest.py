import os
import sys
import tempfile
from pathlib import Path

# Point the app at a throwaway database before anything imports taskmanager
_test_tmp_dir = tempfile.mkdtemp(prefix="taskmanager_test_")
os.environ["DATABASE_URL"] = f"sqlite:///{Path(_test_tmp_dir) / 'test.db'}"
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing-only")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from taskmanager.database import SessionLocal, create_tables, drop_tables  # noqa: E402
from taskmanager.main import app  # noqa: E402
from taskmanager.models import Role, TaskPriority, TaskStatus  # noqa: E402
from taskmanager.schemas.task import TaskCreate, TaskUpdate  # noqa: E402
from taskmanager.schemas.user import RegisterRequest  # noqa: E402
from taskmanager.services import auth as auth_service  # noqa: E402


@pytest.fixture(autouse=True)
def reset_database():
    drop_tables()
    create_tables()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def register_user(db, username, role=Role.USER, password="secret-pass"):
    """Register through the auth service and return the stored user."""
    auth_service.register(
        db,
        RegisterRequest(
            username=username,
            email=f"{username}@example.com",
            password=password,
            role=role,
        ),
    )
    return auth_service.find_user_by_username(db, username)


@pytest.fixture
def alice(db):
    return register_user(db, "alice")


@pytest.fixture
def bob(db):
    return register_user(db, "bob")


@pytest.fixture
def admin(db):
    return register_user(db, "admin", role=Role.ADMIN)


@pytest.fixture
def task_request():
    def _build(**overrides):
        fields = {"title": "Fix bug", "priority": TaskPriority.HIGH}
        fields.update(overrides)
        return TaskCreate(**fields)
    return _build


@pytest.fixture
def task_update():
    def _build(**overrides):
        fields = {"title": "Fix bug", "priority": TaskPriority.HIGH, "status": TaskStatus.TODO}
        fields.update(overrides)
        return TaskUpdate(**fields)
    return _build
