"""
Tasks API tools.

Thin @tool wrappers: each forwards one validated request to exactly one
TaskService operation.
"""

from conduit.core.tools.decorator import tool

from .service import TaskService
from .types import (
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


@tool(
    name="list_tasks",
    description="List tasks, optionally filtered by state, assignee and label.",
    category="tasks",
    tags=["read"],
)
async def list_tasks(service: TaskService, params: ListTasksParams) -> list[Task]:
    return await service.list_tasks(params)


@tool(name="get_task", description="Fetch one task by id.", category="tasks", tags=["read"])
async def get_task(service: TaskService, params: GetTaskParams) -> Task:
    return await service.get_task(params)


@tool(
    name="create_task",
    description="Create a new task. Not retried automatically.",
    category="tasks",
    tags=["write"],
)
async def create_task(service: TaskService, params: CreateTaskParams) -> Task:
    return await service.create_task(params)


@tool(
    name="update_task",
    description="Change the title, description, state, assignee or labels of a task.",
    category="tasks",
    tags=["write"],
)
async def update_task(service: TaskService, params: UpdateTaskParams) -> Task:
    return await service.update_task(params)


@tool(
    name="list_comments",
    description="List the comments on a task.",
    category="comments",
    tags=["read"],
)
async def list_comments(service: TaskService, params: ListCommentsParams) -> list[Comment]:
    return await service.list_comments(params)


@tool(name="add_comment", description="Comment on a task.", category="comments", tags=["write"])
async def add_comment(service: TaskService, params: AddCommentParams) -> Comment:
    return await service.add_comment(params)


@tool(
    name="get_current_user",
    description="Return the account the adapter is authenticated as.",
    category="account",
    tags=["read"],
)
async def get_current_user(service: TaskService, params: GetCurrentUserParams) -> User:
    return await service.get_current_user()
