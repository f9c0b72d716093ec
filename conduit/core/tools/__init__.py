"""
conduit.core.tools - Tool Boundary

The surface the agent runtime talks to.

Architecture:
- base.py: Tool, ToolError, ToolResult, ToolImplementation protocol
- decorator.py: @tool decorator and collect_tools()
- registry.py: ToolRegistry for managing available tools
- dispatcher.py: ToolDispatcher, the single invoke() entry point

Example Usage:
    >>> from conduit.core.tools import ToolDispatcher, ToolRegistry
    >>> from conduit.integrations.tasks import TaskService, tools as task_tools
    >>>
    >>> registry = ToolRegistry()
    >>> registry.register_module(task_tools)
    >>> dispatcher = ToolDispatcher(registry, TaskService(client))
    >>> result = await dispatcher.invoke("list_tasks", {"label": "bug"})
"""

from .base import Tool, ToolError, ToolImplementation, ToolResult
from .decorator import collect_tools, tool
from .dispatcher import ToolDispatcher
from .registry import ToolRegistry

__all__ = [
    # Base types
    "Tool",
    "ToolError",
    "ToolImplementation",
    "ToolResult",
    # Implementations
    "ToolDispatcher",
    "ToolRegistry",
    "collect_tools",
    "tool",
]
