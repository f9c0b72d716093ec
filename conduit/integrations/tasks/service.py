"""
Tasks API service layer.

One coroutine per logical operation. Each takes a validated request model,
makes its calls through the injected ApiClient, and returns internal
records. Failures leave this module as AdapterError subclasses only.
"""

import logging
from typing import Any
from urllib.parse import quote

from conduit.errors import ExternalServiceError
from conduit.integrations.base import call_checked, paginate_checked
from conduit.transport import ApiClient

from .normalize import (
    INVALID_PAYLOAD_STATUS,
    comment_from_external,
    task_from_external,
    task_to_external,
    user_from_external,
)
from .types import (
    AddCommentParams,
    Comment,
    CreateTaskParams,
    GetTaskParams,
    ListCommentsParams,
    ListTasksParams,
    Task,
    UpdateTaskParams,
    User,
)

logger = logging.getLogger(__name__)


def _task_path(task_id: str) -> str:
    return f"/tasks/{quote(task_id, safe='')}"


class TaskService:
    """
    Tasks API operations.

    The client is injected so the service never resolves configuration or
    opens connections itself; tests pass a client over httpx.MockTransport.

    Example:
        >>> async with ApiClient(settings) as client:
        ...     service = TaskService(client)
        ...     tasks = await service.list_tasks(ListTasksParams(state="open", label="bug"))
    """

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_tasks(self, params: ListTasksParams) -> list[Task]:
        """
        List tasks across all pages.

        ``state`` and ``assignee`` are sent to the API; ``label`` and
        ``limit`` are applied here, after all pages are fetched.
        """
        records = await paginate_checked(
            self._client,
            "/tasks",
            params={"state": params.state, "assignee": params.assignee},
        )
        tasks = [task_from_external(record) for record in records]

        if params.label is not None:
            tasks = [task for task in tasks if params.label in task.labels]
        if params.limit is not None:
            tasks = tasks[: params.limit]

        logger.debug(
            f"Listed {len(tasks)} task(s) from {len(records)} record(s)",
            extra={"state": params.state, "label": params.label},
        )
        return tasks

    async def get_task(self, params: GetTaskParams) -> Task:
        response = await call_checked(self._client, "GET", _task_path(params.task_id))
        return task_from_external(response.body)

    async def create_task(self, params: CreateTaskParams) -> Task:
        """Create a task. Sent once; never retried automatically."""
        body = task_to_external(params.model_dump())
        response = await call_checked(self._client, "POST", "/tasks", body=body)
        task = task_from_external(response.body)
        logger.info(f"Created task {task.id}", extra={"task_id": task.id})
        return task

    async def update_task(self, params: UpdateTaskParams) -> Task:
        """Apply the caller's explicitly set fields to a task. Never retried."""
        body = task_to_external(params.changes())
        response = await call_checked(
            self._client, "PATCH", _task_path(params.task_id), body=body
        )
        task = task_from_external(response.body)
        logger.info(
            f"Updated task {task.id}",
            extra={"task_id": task.id, "fields": sorted(body)},
        )
        return task

    async def list_comments(self, params: ListCommentsParams) -> list[Comment]:
        records = await paginate_checked(self._client, f"{_task_path(params.task_id)}/comments")
        comments = [comment_from_external(record, params.task_id) for record in records]
        if params.limit is not None:
            comments = comments[: params.limit]
        return comments

    async def add_comment(self, params: AddCommentParams) -> Comment:
        response = await call_checked(
            self._client,
            "POST",
            f"{_task_path(params.task_id)}/comments",
            body={"body": params.body},
        )
        return comment_from_external(response.body, params.task_id)

    async def get_current_user(self) -> User:
        """Return the account behind the configured credential."""
        response = await call_checked(self._client, "GET", "/me")
        return user_from_external(_unwrap(response.body, "user"))


def _unwrap(body: Any, key: str) -> Any:
    """Accept both a bare record and one wrapped as {"<key>": {...}}."""
    if isinstance(body, dict) and isinstance(body.get(key), dict):
        return body[key]
    if body is None:
        raise ExternalServiceError(
            f"external system returned an empty {key} payload", status=INVALID_PAYLOAD_STATUS
        )
    return body
