"""
conduit.core.tools.registry - Tool Registry

Manages the tools an adapter exposes.
"""

import logging
import types

from .base import Tool, ToolImplementation
from .decorator import collect_tools

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry of available tools and their implementations.

    Features:
    - Tool registration and lookup by name
    - Bulk registration from a module of @tool functions
    - Discovery by category and tag

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register_module(task_tools)
        >>> tool = registry.get_tool("list_tasks")
        >>> schemas = registry.get_all_tool_schemas()
    """

    def __init__(self) -> None:
        """Initialize empty tool registry."""
        self._tools: dict[str, Tool] = {}
        self._implementations: dict[str, ToolImplementation] = {}

    def register_tool(self, tool: Tool, implementation: ToolImplementation) -> None:
        """
        Register a tool with its implementation.

        Raises:
            ValueError: If a tool with the same name is already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool with name '{tool.name}' already registered")

        self._tools[tool.name] = tool
        self._implementations[tool.name] = implementation

        logger.info(
            f"Registered tool: {tool.name}",
            extra={"tool_name": tool.name, "category": tool.category},
        )

    def register_module(self, module: types.ModuleType) -> list[str]:
        """Register every @tool function found in *module*. Returns the registered names."""
        names = []
        for meta in collect_tools(module):
            self.register_tool(meta["tool"], meta["implementation"])
            names.append(meta["tool"].name)
        return names

    def get_tool(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def get_implementation(self, name: str) -> ToolImplementation | None:
        return self._implementations.get(name)

    def list_tools(self, category: str | None = None, tag: str | None = None) -> list[Tool]:
        """
        List available tools with optional filtering.

        Example:
            >>> task_tools = registry.list_tools(category="tasks")
            >>> writes = registry.list_tools(tag="write")
        """
        tools = list(self._tools.values())

        if category:
            tools = [t for t in tools if t.category == category]

        if tag:
            tools = [t for t in tools if tag in t.tags]

        return tools

    def get_all_tool_schemas(self) -> list[dict]:
        """Return function-calling schemas for all registered tools."""
        return [t.to_schema() for t in self._tools.values()]

    def clear(self) -> None:
        """Clear all registered tools."""
        self._tools.clear()
        self._implementations.clear()

        logger.info("Tool registry cleared")

    def __len__(self) -> int:
        """Return number of registered tools."""
        return len(self._tools)

    def __contains__(self, tool_name: str) -> bool:
        """Check if tool with given name is registered."""
        return tool_name in self._tools
