"""
conduit.runner.main - Adapter Process Entry Point

Builds the pipeline once and hosts the tool dispatcher:
1. Resolves configuration (fails fast before serving anything)
2. Opens one ApiClient for the lifetime of the process
3. Builds the registry, service layer and dispatcher with explicit wiring
4. Answers invocations (one-shot, or JSON lines on stdin)
5. Closes the ApiClient on every exit path
"""

import asyncio
import json
import logging
import sys
from collections.abc import AsyncIterator, Callable
from typing import Any, TextIO

from conduit.core.tools import ToolDispatcher, ToolRegistry, ToolResult
from conduit.errors import UserInputError
from conduit.integrations.tasks import TaskService
from conduit.integrations.tasks import tools as task_tools
from conduit.settings import ConduitSettings
from conduit.transport import ApiClient

logger = logging.getLogger(__name__)


def build_registry() -> ToolRegistry:
    """Registry holding every tool this adapter exposes."""
    registry = ToolRegistry()
    registry.register_module(task_tools)
    return registry


def build_dispatcher(client: ApiClient) -> ToolDispatcher:
    """Wire registry, service layer and an open client into a dispatcher."""
    return ToolDispatcher(build_registry(), TaskService(client))


def _rejected(tool_name: str, message: str) -> ToolResult:
    return ToolResult(
        tool_name=tool_name,
        success=False,
        error=UserInputError(message).to_tool_error(),
    )


async def handle_line(dispatcher: ToolDispatcher, line: str) -> dict[str, Any]:
    """
    Answer one JSON-lines request.

    Request:  {"id": 1, "tool": "get_task", "arguments": {"task_id": "T-1"}}
    Response: {"id": 1, "result": {...ToolResult...}}
    """
    try:
        message = json.loads(line)
    except json.JSONDecodeError as e:
        return {"id": None, "result": _rejected("", f"Invalid JSON: {e}").model_dump(mode="json")}

    if not isinstance(message, dict):
        result = _rejected("", "Request must be a JSON object")
        return {"id": None, "result": result.model_dump(mode="json")}

    request_id = message.get("id")
    tool_name = message.get("tool")
    if not isinstance(tool_name, str) or not tool_name:
        result = _rejected("", "Request is missing 'tool'")
        return {"id": request_id, "result": result.model_dump(mode="json")}

    result = await dispatcher.invoke(tool_name, message.get("arguments"))
    return {"id": request_id, "result": result.model_dump(mode="json")}


async def serve(
    dispatcher: ToolDispatcher,
    lines: AsyncIterator[str],
    write: Callable[[str], None],
) -> int:
    """
    Dispatch every request line as its own task and write one response line each.

    Responses are written as invocations complete, so they may come back
    in a different order than the requests; callers match them by ``id``.

    Returns:
        Number of requests answered
    """
    pending: set[asyncio.Task[None]] = set()
    answered = 0

    async def respond(line: str) -> None:
        nonlocal answered
        response = await handle_line(dispatcher, line)
        write(json.dumps(response))
        answered += 1

    try:
        async for line in lines:
            if not line.strip():
                continue
            task = asyncio.create_task(respond(line))
            pending.add(task)
            task.add_done_callback(pending.discard)

        if pending:
            await asyncio.gather(*pending)
    finally:
        for task in list(pending):
            task.cancel()

    return answered


async def stdin_lines(stream: TextIO = sys.stdin) -> AsyncIterator[str]:
    """Yield lines from a blocking text stream without blocking the event loop."""
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            return
        yield line


def _write_stdout(text: str) -> None:
    sys.stdout.write(text + "\n")
    sys.stdout.flush()


async def run_invoke(settings: ConduitSettings, tool_name: str, arguments: dict[str, Any]) -> int:
    """Run a single invocation, print its result, return the process exit status."""
    async with ApiClient(settings) as client:
        result = await build_dispatcher(client).invoke(tool_name, arguments)
    _write_stdout(result.model_dump_json(indent=2))
    return 0 if result.success else 1


async def run_server(settings: ConduitSettings) -> int:
    """Serve JSON-lines requests from stdin until EOF."""
    logger.info("Serving tool invocations on stdin")
    async with ApiClient(settings) as client:
        answered = await serve(build_dispatcher(client), stdin_lines(), _write_stdout)
    logger.info(f"Stdin closed after {answered} request(s)", extra={"answered": answered})
    return 0
