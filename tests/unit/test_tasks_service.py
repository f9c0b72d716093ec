"""
Unit tests for conduit.integrations.tasks.service - TaskService

Runs the real ApiClient against the simulated Tasks API.
"""

import json

import httpx
import pytest

from conduit.errors import ExternalServiceError, TransportError, UserInputError
from conduit.integrations.tasks import (
    AddCommentParams,
    CreateTaskParams,
    GetTaskParams,
    ListCommentsParams,
    ListTasksParams,
    TaskService,
    UpdateTaskParams,
)
from conduit.transport import ApiClient
from tests.simulation import SimulatedTasksApi, make_task


@pytest.fixture
def seeded_api() -> SimulatedTasksApi:
    return SimulatedTasksApi.with_tasks(
        make_task("T-1", labels=["bug"]),
        make_task("T-2", state="closed", labels=["bug"]),
        make_task("T-3", assigneeLogin="bob", labels=[{"name": "feature"}]),
        make_task("T-4", labels=[{"name": "bug"}, {"name": "ui"}]),
        make_task("T-5", assigneeLogin="bob", labels=["bug"]),
    )


# ============================================================================
# Reads
# ============================================================================


class TestListTasks:
    @pytest.mark.asyncio
    async def test_fetches_across_pages(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            tasks = await TaskService(client).list_tasks(ListTasksParams())

        assert [t.id for t in tasks] == ["T-1", "T-2", "T-3", "T-4", "T-5"]
        assert len(seeded_api.requests) == 3

    @pytest.mark.asyncio
    async def test_state_and_assignee_filter_server_side(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            tasks = await TaskService(client).list_tasks(
                ListTasksParams(state="open", assignee="bob")
            )

        assert [t.id for t in tasks] == ["T-3", "T-5"]
        assert seeded_api.requests[0].url.params["state"] == "open"
        assert seeded_api.requests[0].url.params["assignee"] == "bob"

    @pytest.mark.asyncio
    async def test_label_filter_applies_across_all_pages(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            tasks = await TaskService(client).list_tasks(ListTasksParams(label="bug"))

        assert [t.id for t in tasks] == ["T-1", "T-2", "T-4", "T-5"]
        assert all("label" not in r.url.params for r in seeded_api.requests)

    @pytest.mark.asyncio
    async def test_limit_applies_after_filtering(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            tasks = await TaskService(client).list_tasks(ListTasksParams(label="bug", limit=3))

        assert [t.id for t in tasks] == ["T-1", "T-2", "T-4"]

    @pytest.mark.asyncio
    async def test_record_without_id_fails_the_listing(self, settings, api):
        api.fail_next(httpx.Response(200, json={"items": [{"title": "ghost"}], "next_page": None}))

        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(ExternalServiceError, match="without `id`"):
                await TaskService(client).list_tasks(ListTasksParams())


class TestGetTask:
    @pytest.mark.asyncio
    async def test_returns_task(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            task = await TaskService(client).get_task(GetTaskParams(task_id="T-3"))

        assert task.id == "T-3"
        assert task.assignee == "bob"
        assert task.labels == ("feature",)

    @pytest.mark.asyncio
    async def test_not_found_is_user_input_error_with_status(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            with pytest.raises(UserInputError) as exc_info:
                await TaskService(client).get_task(GetTaskParams(task_id="T-404"))

        assert exc_info.value.status == 404
        assert "task T-404 not found" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_server_error_after_retries(self, settings, sleep, api):
        api.fail_next(*(httpx.Response(500, text="internal error") for _ in range(3)))

        async with ApiClient(settings, transport=api.transport(), sleep=sleep) as client:
            with pytest.raises(ExternalServiceError) as exc_info:
                await TaskService(client).get_task(GetTaskParams(task_id="T-1"))

        assert exc_info.value.status == 500
        assert exc_info.value.message == "GET /tasks/T-1 failed with status 500: internal error"
        assert len(api.requests) == 3

    @pytest.mark.asyncio
    async def test_unauthorized_is_external_service_error(self, settings, api):
        api.fail_next(httpx.Response(401, json={"message": "bad token"}))

        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(ExternalServiceError) as exc_info:
                await TaskService(client).get_task(GetTaskParams(task_id="T-1"))

        assert exc_info.value.status == 401

    @pytest.mark.asyncio
    async def test_network_failure_is_transport_error(self, settings, sleep, api):
        api.fail_next(*(httpx.ConnectError("dns failure") for _ in range(3)))

        async with ApiClient(settings, transport=api.transport(), sleep=sleep) as client:
            with pytest.raises(TransportError) as exc_info:
                await TaskService(client).get_task(GetTaskParams(task_id="T-1"))

        assert exc_info.value.status is None
        assert "dns failure" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_task_id_is_path_quoted(self, settings, api):
        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(UserInputError):
                await TaskService(client).get_task(GetTaskParams(task_id="../me"))

        assert api.requests[0].url.raw_path == b"/api/tasks/..%2Fme"


# ============================================================================
# Writes
# ============================================================================


class TestCreateTask:
    @pytest.mark.asyncio
    async def test_creates_task(self, settings, api):
        async with ApiClient(settings, transport=api.transport()) as client:
            task = await TaskService(client).create_task(
                CreateTaskParams(title="Write docs", assignee="ada", labels=["docs"])
            )

        assert task.id == "T-101"
        assert task.title == "Write docs"
        assert task.assignee == "ada"
        assert task.labels == ("docs",)
        assert api.tasks["T-101"]["assigneeLogin"] == "ada"

    @pytest.mark.asyncio
    async def test_server_error_is_not_retried(self, settings, sleep, api):
        api.fail_next(httpx.Response(500, text="internal error"))

        async with ApiClient(settings, transport=api.transport(), sleep=sleep) as client:
            with pytest.raises(ExternalServiceError) as exc_info:
                await TaskService(client).create_task(CreateTaskParams(title="Once"))

        assert exc_info.value.status == 500
        assert len(api.requests_to("POST", "/tasks")) == 1
        assert api.tasks == {}
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_validation_rejection_is_user_input_error(self, settings, api):
        api.fail_next(httpx.Response(422, json={"message": "title too vague"}))

        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(UserInputError) as exc_info:
                await TaskService(client).create_task(CreateTaskParams(title="x"))

        assert exc_info.value.status == 422
        assert exc_info.value.message.endswith("title too vague")


class TestUpdateTask:
    @pytest.mark.asyncio
    async def test_sends_only_changed_fields(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            task = await TaskService(client).update_task(
                UpdateTaskParams(task_id="T-1", state="closed", assignee=None)
            )

        patch = seeded_api.requests_to("PATCH", "/tasks/T-1")
        assert len(patch) == 1
        assert json.loads(patch[0].content) == {"state": "closed", "assigneeLogin": None}
        assert task.state == "closed"
        assert task.assignee is None
        assert task.title == "Task T-1"

    def test_requires_at_least_one_change(self):
        with pytest.raises(ValueError, match="at least one of"):
            UpdateTaskParams(task_id="T-1")


class TestComments:
    @pytest.mark.asyncio
    async def test_add_then_list(self, settings, seeded_api):
        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            service = TaskService(client)
            for body in ("first", "second", "third"):
                await service.add_comment(AddCommentParams(task_id="T-2", body=body))
            comments = await service.list_comments(ListCommentsParams(task_id="T-2"))

        assert [c.body for c in comments] == ["first", "second", "third"]
        assert {c.task_id for c in comments} == {"T-2"}
        assert {c.author for c in comments} == {"ada"}

    @pytest.mark.asyncio
    async def test_list_comments_limit(self, settings, seeded_api):
        seeded_api.comments["T-1"] = [{"id": f"c-{i}", "body": str(i)} for i in range(5)]

        async with ApiClient(settings, transport=seeded_api.transport()) as client:
            comments = await TaskService(client).list_comments(
                ListCommentsParams(task_id="T-1", limit=2)
            )

        assert [c.id for c in comments] == ["c-0", "c-1"]

    @pytest.mark.asyncio
    async def test_comment_on_missing_task(self, settings, api):
        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(UserInputError) as exc_info:
                await TaskService(client).add_comment(AddCommentParams(task_id="T-9", body="hi"))

        assert exc_info.value.status == 404


class TestCurrentUser:
    @pytest.mark.asyncio
    async def test_returns_user(self, settings, api):
        async with ApiClient(settings, transport=api.transport()) as client:
            user = await TaskService(client).get_current_user()

        assert user.login == "ada"
        assert user.display_name == "Ada Lovelace"

    @pytest.mark.asyncio
    async def test_accepts_wrapped_user(self, settings, api):
        api.fail_next(httpx.Response(200, json={"user": {"id": "u-2", "login": "bob"}}))

        async with ApiClient(settings, transport=api.transport()) as client:
            user = await TaskService(client).get_current_user()

        assert user.id == "u-2"
        assert user.display_name == "bob"

    @pytest.mark.asyncio
    async def test_empty_payload(self, settings, api):
        api.fail_next(httpx.Response(200))

        async with ApiClient(settings, transport=api.transport()) as client:
            with pytest.raises(ExternalServiceError, match="empty user payload"):
                await TaskService(client).get_current_user()
