"""
Tasks API integration.

Exposes a task tracker (tasks, comments, current user) as tools. Shared
types live in types.py; normalize.py is the only module that reads
external records.
"""

from conduit.integrations.tasks import tools
from conduit.integrations.tasks.service import TaskService
from conduit.integrations.tasks.types import (
    AddCommentParams,
    Comment,
    CreateTaskParams,
    GetCurrentUserParams,
    GetTaskParams,
    ListCommentsParams,
    ListTasksParams,
    Task,
    UpdateTaskParams,
    User,
)

__all__ = [
    "AddCommentParams",
    "Comment",
    "CreateTaskParams",
    "GetCurrentUserParams",
    "GetTaskParams",
    "ListCommentsParams",
    "ListTasksParams",
    "Task",
    "TaskService",
    "UpdateTaskParams",
    "User",
    "tools",
]
