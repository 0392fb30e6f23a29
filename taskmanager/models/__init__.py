from .user import Role, User, utc_now
from .token import Token, TokenType
from .task import Task, TaskPriority, TaskStatus

# Export all models for easy importing
__all__ = ["Role", "User", "Token", "TokenType", "Task", "TaskPriority", "TaskStatus", "utc_now"]
