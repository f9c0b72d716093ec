"""
conduit.core.tools.decorator - @tool Decorator

Turn async service-layer wrappers into tools. The request model is read
from the ``params`` annotation and its JSON schema becomes the tool's
parameters_schema.

Example:
    >>> @tool(name="get_task", description="Fetch one task by id")
    ... async def get_task(service: TaskService, params: GetTaskParams) -> Task:
    ...     return await service.get_task(params)
    >>>
    >>> # Collect all @tool-decorated functions from a module
    >>> tools = collect_tools(my_module)
"""

import inspect
import logging
import types
from collections.abc import Callable
from typing import Any, get_type_hints

from pydantic import BaseModel

from .base import Tool

logger = logging.getLogger(__name__)

# Attribute name stored on decorated functions
_TOOL_META_ATTR = "_tool_meta"

_PARAMS_ARG = "params"


def _params_model(func: Callable[..., Any]) -> type[BaseModel]:
    """Return the pydantic model annotated on the function's ``params`` argument."""
    sig = inspect.signature(func)
    names = list(sig.parameters)
    if len(names) != 2 or names[1] != _PARAMS_ARG:
        raise TypeError(f"@tool functions take (service, params), got {func.__name__}{sig}")

    model = get_type_hints(func).get(_PARAMS_ARG)
    if not (isinstance(model, type) and issubclass(model, BaseModel)):
        raise TypeError(
            f"@tool function {func.__name__} must annotate '{_PARAMS_ARG}' with a pydantic model"
        )
    return model


def _build_parameters_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Build a JSON schema for function calling from a request model.

    Returns a dict compatible with OpenAI/Anthropic function-calling format:
    {"type": "object", "properties": {...}, "required": [...]}
    """
    schema = model.model_json_schema()
    schema.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return schema


class _FuncToolImplementation:
    """Wraps an async (service, params) function as a ToolImplementation."""

    def __init__(self, func: Callable[..., Any], params_model: type[BaseModel]) -> None:
        self._func = func
        self.params_model = params_model

    async def _execute(self, context: Any, params: Any) -> Any:
        return await self._func(context, params)


def tool(
    name: str | None = None,
    description: str = "",
    category: str | None = None,
    tags: list[str] | None = None,
) -> Callable[..., Any]:
    """Decorator that turns an async function into a tool.

    Args:
        name: Tool name (defaults to function name)
        description: Human-readable description (defaults to the docstring)
        category: Optional category for grouping
        tags: Optional tags for discovery

    Returns:
        Decorator that attaches _tool_meta to the function

    Example:
        >>> @tool(name="list_tasks", description="List tasks", category="tasks")
        ... async def list_tasks(service: TaskService, params: ListTasksParams) -> list[Task]:
        ...     return await service.list_tasks(params)
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"@tool can only decorate async functions, got {func.__name__}")

        tool_name = name or func.__name__
        tool_desc = description or inspect.getdoc(func) or f"Tool: {tool_name}"
        params_model = _params_model(func)

        tool_model = Tool(
            name=tool_name,
            description=tool_desc,
            parameters_schema=_build_parameters_schema(params_model),
            category=category,
            tags=tags or [],
        )

        # Store metadata on the function for later collection
        setattr(
            func,
            _TOOL_META_ATTR,
            {
                "tool": tool_model,
                "implementation": _FuncToolImplementation(func, params_model),
            },
        )

        return func

    return decorator


def get_tool_meta(func: Callable[..., Any]) -> dict[str, Any] | None:
    """Get tool metadata from a @tool-decorated function.

    Returns:
        Dict with 'tool' (Tool model) and 'implementation' (_FuncToolImplementation),
        or None if the function is not decorated with @tool.
    """
    return getattr(func, _TOOL_META_ATTR, None)


def collect_tools(module: types.ModuleType) -> list[dict[str, Any]]:
    """Find all @tool-decorated functions in a module.

    Args:
        module: Python module to scan

    Returns:
        List of dicts with 'tool' and 'implementation' keys, in name order

    Example:
        >>> from conduit.integrations.tasks import tools as task_tools
        >>> for t in collect_tools(task_tools):
        ...     registry.register_tool(t["tool"], t["implementation"])
    """
    results: list[dict[str, Any]] = []

    for attr_name in dir(module):
        obj = getattr(module, attr_name, None)
        if callable(obj):
            meta = get_tool_meta(obj)
            if meta is not None:
                results.append(meta)

    return results
