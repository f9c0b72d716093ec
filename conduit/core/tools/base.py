"""
conduit.core.tools.base - Base Tool Definitions

Core interfaces and data models for the tool boundary.
"""

from typing import Any, Literal, Protocol

from pydantic import BaseModel, ConfigDict, Field, model_validator

ErrorCategory = Literal[
    "configuration_error",
    "user_input_error",
    "external_service_error",
    "transport_error",
]


class Tool(BaseModel):
    """
    Tool definition exposed to the agent runtime.

    Example:
        >>> get_task_tool = Tool(
        ...     name="get_task",
        ...     description="Fetch one task by id",
        ...     parameters_schema=GetTaskParams.model_json_schema(),
        ...     category="tasks",
        ... )
    """

    name: str = Field(..., description="Tool name (e.g., 'list_tasks')")
    description: str = Field(..., description="What this tool does")
    parameters_schema: dict[str, Any] = Field(
        ..., description="JSON schema for tool parameters"
    )
    category: str | None = Field(
        default=None, description="Tool category (e.g., 'tasks')"
    )
    tags: list[str] = Field(default_factory=list, description="Tags for discovery")

    def to_schema(self) -> dict[str, Any]:
        """Schema in the function-calling shape agent runtimes expect."""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.parameters_schema,
        }


class ToolError(BaseModel):
    """Boundary representation of a categorized failure."""

    model_config = ConfigDict(frozen=True)

    category: ErrorCategory
    message: str
    code: int | None = None


class ToolResult(BaseModel):
    """
    Result of one tool invocation.

    Exactly one of a success payload or a ToolError is populated.

    Example:
        >>> result = ToolResult(
        ...     tool_name="get_task",
        ...     success=False,
        ...     error=ToolError(category="user_input_error", message="not found", code=404),
        ...     duration_ms=12.5,
        ... )
    """

    model_config = ConfigDict(frozen=True)

    tool_name: str = Field(..., description="Name of the invoked tool")
    success: bool = Field(..., description="Whether the invocation succeeded")
    output: Any | None = Field(default=None, description="JSON-ready payload if successful")
    error: ToolError | None = Field(default=None, description="Categorized failure")
    duration_ms: float = Field(default=0.0, ge=0, description="Invocation duration in milliseconds")

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "ToolResult":
        if self.success and self.error is not None:
            raise ValueError("a successful result cannot carry an error")
        if not self.success:
            if self.error is None:
                raise ValueError("a failed result must carry an error")
            if self.output is not None:
                raise ValueError("a failed result cannot carry output")
        return self


class ToolImplementation(Protocol):
    """
    Protocol for concrete tool implementations.

    The dispatcher calls _execute() with its injected context (the service
    layer object) and an already validated request model.

    Example:
        >>> class GetTaskTool:
        ...     params_model = GetTaskParams
        ...     async def _execute(self, context: TaskService, params: GetTaskParams) -> Task:
        ...         return await context.get_task(params)
    """

    params_model: type[BaseModel]

    async def _execute(self, context: Any, params: Any) -> Any:
        """
        Execute the tool's core logic.

        Raises:
            AdapterError subclasses for categorized failures
        """
        ...
