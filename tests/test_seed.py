from taskmanager.models import Role, Task, User
from taskmanager.seed import DEFAULT_SEED, SeedData, SeedTask, SeedUser, load_seed_data


def test_default_seed_loads(db):
    created = load_seed_data(db, DEFAULT_SEED)

    assert created == len(DEFAULT_SEED.tasks)
    assert db.query(User).count() == len(DEFAULT_SEED.users)
    admin = db.query(User).filter(User.username == "admin").one()
    assert admin.role == Role.ADMIN


def test_seed_is_idempotent_for_users(db):
    load_seed_data(db, DEFAULT_SEED)
    load_seed_data(db, DEFAULT_SEED)
    assert db.query(User).count() == len(DEFAULT_SEED.users)


def test_bad_items_are_skipped(db):
    seed = SeedData(
        users=[
            SeedUser(username="alice", email="alice@example.com", password="pw"),
            # Username clash: rejected, the rest still loads
            SeedUser(username="alice", email="other@example.com", password="pw"),
        ],
        tasks=[
            SeedTask(title="ok", creator_email="alice@example.com"),
            SeedTask(title="orphan", creator_email="nobody@example.com"),
            SeedTask(title="bad assignee", creator_email="alice@example.com", assignee_email="nobody@example.com"),
            SeedTask(title="   ", creator_email="alice@example.com"),
        ],
    )

    assert load_seed_data(db, seed) == 1
    assert [task.title for task in db.query(Task).all()] == ["ok"]
    assert db.query(User).count() == 1
