"""
conduit.core.tools.dispatcher - Tool Dispatcher

The single entry point visible to the agent runtime: validates a request,
calls exactly one service-layer operation, and returns a ToolResult.
"""

import logging
from time import time
from typing import Any

from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from conduit.errors import AdapterError, ExternalServiceError, UserInputError

from .base import ToolResult
from .registry import ToolRegistry

logger = logging.getLogger(__name__)


def _format_validation_error(tool_name: str, error: ValidationError) -> str:
    """One clause per failing field, e.g. "task_id: Field required"."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        problems.append(f"{location}: {item.get('msg', 'invalid value')}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)


class ToolDispatcher:
    """
    Dispatches tool invocations to the service layer.

    The dispatcher never talks to the transport client or the configuration
    resolver; it only knows the registry and the injected context object
    (the service layer), which keeps it testable without network access.

    invoke() NEVER raises for a failed invocation: every path returns a
    ToolResult carrying either a JSON-ready payload or one categorized
    ToolError. Task cancellation still propagates.

    Example:
        >>> dispatcher = ToolDispatcher(registry, TaskService(client))
        >>> result = await dispatcher.invoke("get_task", {"task_id": "T-1"})
        >>> if result.success:
        ...     print(result.output["title"])
        ... else:
        ...     print(f"{result.error.category} ({result.error.code}): {result.error.message}")
    """

    def __init__(self, registry: ToolRegistry, context: Any) -> None:
        """
        Initialize the dispatcher.

        Args:
            registry: Tools this dispatcher can invoke
            context: Service-layer object passed to every tool implementation
        """
        self._registry = registry
        self._context = context

    def list_tools(self) -> list[dict[str, Any]]:
        """Schemas of every invocable tool."""
        return self._registry.get_all_tool_schemas()

    async def invoke(self, tool_name: str, arguments: dict[str, Any] | None = None) -> ToolResult:
        """
        Invoke one tool.

        Args:
            tool_name: Registered tool name
            arguments: Raw caller-supplied parameters

        Returns:
            ToolResult with output on success, or a ToolError preserving the
            failure's category, message and status code
        """
        start_time = time()

        try:
            output = await self._invoke(tool_name, arguments)
        except AdapterError as e:
            return self._failure(str(tool_name), e, start_time)
        except Exception as e:
            # Reaching here means a mapping gap below the dispatcher
            logger.error(
                f"Tool {tool_name} raised an unclassified error: {e}",
                exc_info=True,
                extra={"tool_name": tool_name},
            )
            error = ExternalServiceError(f"{type(e).__name__}: {e}")
            return self._failure(str(tool_name), error, start_time)

        duration_ms = (time() - start_time) * 1000
        logger.info(
            f"Tool {tool_name} executed successfully",
            extra={"tool_name": tool_name, "duration_ms": duration_ms},
        )
        return ToolResult(
            tool_name=tool_name,
            success=True,
            output=output,
            duration_ms=duration_ms,
        )

    async def _invoke(self, tool_name: str, arguments: dict[str, Any] | None) -> Any:
        if not isinstance(tool_name, str):
            raise UserInputError(f"Tool name must be a string, got {type(tool_name).__name__}")

        implementation = self._registry.get_implementation(tool_name)
        if implementation is None:
            raise UserInputError(f"Unknown tool '{tool_name}'")

        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise UserInputError(
                f"Arguments for {tool_name} must be an object, got {type(arguments).__name__}"
            )

        try:
            params = implementation.params_model.model_validate(arguments)
        except ValidationError as e:
            raise UserInputError(_format_validation_error(tool_name, e)) from e

        output = await implementation._execute(self._context, params)
        return to_jsonable_python(output)

    def _failure(self, tool_name: str, error: AdapterError, start_time: float) -> ToolResult:
        duration_ms = (time() - start_time) * 1000
        logger.warning(
            f"Tool {tool_name} failed: {error.message}",
            extra={
                "tool_name": tool_name,
                "category": error.category,
                "status": error.status,
                "duration_ms": duration_ms,
            },
        )
        return ToolResult(
            tool_name=tool_name,
            success=False,
            error=error.to_tool_error(),
            duration_ms=duration_ms,
        )
