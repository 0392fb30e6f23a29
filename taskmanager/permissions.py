"""Role permissions and the allow/deny rule for task operations.

Every operation is described by an :class:`AccessRule`. A request is allowed
when the user's role holds the rule's all-scope permission, or holds its
own-scope permission and the ownership predicate accepts the resource.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Mapping, Optional
import enum

from .errors import ForbiddenError
from .models import Role, Task, User


class Permission(str, enum.Enum):
    # Admin permissions
    TASK_READ_ALL = "task:read:all"
    TASK_UPDATE_ALL = "task:update:all"
    TASK_CREATE_ALL = "task:create:all"
    TASK_DELETE_ALL = "task:delete:all"
    TASK_ASSIGN = "task:assign"

    # User permissions
    TASK_READ_OWN = "task:read:own"
    TASK_UPDATE_OWN = "task:update:own"
    TASK_CREATE = "task:create"

    USER_READ_ALL = "user:read:all"


ROLE_PERMISSIONS: Mapping[Role, FrozenSet[Permission]] = {
    Role.USER: frozenset(
        {
            Permission.TASK_READ_OWN,
            Permission.TASK_UPDATE_OWN,
            Permission.TASK_CREATE,
            Permission.USER_READ_ALL,
        }
    ),
    Role.ADMIN: frozenset(
        {
            Permission.TASK_READ_ALL,
            Permission.TASK_UPDATE_ALL,
            Permission.TASK_DELETE_ALL,
            Permission.TASK_CREATE_ALL,
            Permission.TASK_ASSIGN,
            Permission.USER_READ_ALL,
        }
    ),
}


def permissions_for(role: Role) -> FrozenSet[Permission]:
    return ROLE_PERMISSIONS[Role(role)]


def authorities_for(role: Role) -> List[str]:
    """Permission tags of a role followed by its ``ROLE_<NAME>`` authority."""
    role = Role(role)
    authorities = sorted(permission.value for permission in permissions_for(role))
    authorities.append(f"ROLE_{role.value}")
    return authorities


def has_permission(user: User, permission: Optional[Permission]) -> bool:
    if permission is None:
        return False
    return permission in permissions_for(user.role)


# Ownership predicates receive the requester and the resource the rule guards.

def is_creator(user: User, task: Task) -> bool:
    return task.creator_id == user.id


def is_assignee(user: User, task: Task) -> bool:
    return task.assignee_id is not None and task.assignee_id == user.id


def is_creator_or_assignee(user: User, task: Task) -> bool:
    return is_creator(user, task) or is_assignee(user, task)


def is_self(user: User, user_id: Optional[str]) -> bool:
    return user_id is not None and user_id == user.id


def _always(user: User, resource: object) -> bool:
    return True


def _never(user: User, resource: object) -> bool:
    return False


@dataclass(frozen=True)
class AccessRule:
    name: str
    all_scope: Optional[Permission] = None
    own_scope: Optional[Permission] = None
    ownership: Callable[[User, object], bool] = _never

    def allows(self, user: User, resource: object = None) -> bool:
        if has_permission(user, self.all_scope):
            return True
        return has_permission(user, self.own_scope) and self.ownership(user, resource)

    def could_allow(self, user: User) -> bool:
        """True if some resource could satisfy the rule for this user."""
        return has_permission(user, self.all_scope) or has_permission(user, self.own_scope)


CREATE_TASK = AccessRule(
    "create_task", Permission.TASK_CREATE_ALL, Permission.TASK_CREATE, _always
)
LIST_TASKS = AccessRule(
    "list_tasks", Permission.TASK_READ_ALL, Permission.TASK_READ_OWN, is_self
)
READ_TASK = AccessRule(
    "read_task", Permission.TASK_READ_ALL, Permission.TASK_READ_OWN, is_assignee
)
UPDATE_TASK = AccessRule(
    "update_task", Permission.TASK_UPDATE_ALL, Permission.TASK_UPDATE_OWN, is_creator_or_assignee
)
ASSIGN_TASK = AccessRule("assign_task", None, Permission.TASK_ASSIGN, is_creator)
DELETE_TASK = AccessRule("delete_task", Permission.TASK_DELETE_ALL)
READ_OWN_TASKS = AccessRule(
    "read_own_tasks", Permission.TASK_READ_ALL, Permission.TASK_READ_OWN, _always
)
READ_TASKS_BY_STATUS = AccessRule("read_tasks_by_status", Permission.TASK_READ_ALL)
READ_USERS = AccessRule("read_users", Permission.USER_READ_ALL)


def authorize(user: User, rule: AccessRule, resource: object = None) -> None:
    """Raise :class:`ForbiddenError` unless ``rule`` allows ``user``."""
    if not rule.allows(user, resource):
        raise ForbiddenError(f"Not permitted to {rule.name.replace('_', ' ')}")


def require_capability(user: User, rule: AccessRule) -> None:
    """Reject users that hold neither scope of ``rule``, before any lookup."""
    if not rule.could_allow(user):
        raise ForbiddenError(f"Not permitted to {rule.name.replace('_', ' ')}")
