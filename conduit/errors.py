"""
conduit.errors - Error Taxonomy

The closed set of failure categories shared by every layer above the
transport client. Anything that reaches the tool dispatcher is one of the
four concrete classes below.

Example:
    >>> from conduit.errors import UserInputError
    >>>
    >>> try:
    ...     await service.get_task(params)
    ... except UserInputError as e:
    ...     logger.warning(f"Bad request ({e.status}): {e}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from conduit.core.tools.base import ToolError


class AdapterError(Exception):
    """
    Base exception for all pipeline failures.

    Carries a category tag, an optional numeric status code from the layer
    that detected the failure, and a human-readable message. Do not raise
    this class directly; use one of the four categories.
    """

    category: ClassVar[str] = "adapter_error"

    def __init__(self, message: str, *, status: int | None = None) -> None:
        self.message = message
        self.status = status
        super().__init__(message)

    def to_tool_error(self) -> ToolError:
        """Convert to the dispatcher's boundary error representation.

        Errors outside the four categories surface as external_service_error.
        """
        from conduit.core.tools.base import ToolError

        category = self.category
        if category not in ERROR_CATEGORIES:
            category = ExternalServiceError.category
        return ToolError(category=category, message=self.message, code=self.status)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self.status!r}, message={self.message!r})"


class ConfigurationError(AdapterError):
    """
    Raised when a required operating parameter is missing or invalid.

    Fixed by the operator. Never retried: retrying cannot supply a
    missing environment variable.
    """

    category: ClassVar[str] = "configuration_error"

    def __init__(self, message: str, *, parameters: tuple[str, ...] = ()) -> None:
        super().__init__(message)
        self.parameters = parameters


class UserInputError(AdapterError):
    """
    Raised when the caller supplied an invalid request.

    This covers both local validation failures (no status) and 4xx
    responses attributable to the request itself (400, 404, 409, 422, ...).
    """

    category: ClassVar[str] = "user_input_error"


class ExternalServiceError(AdapterError):
    """
    Raised when the third-party API returned an error or an unexpected payload.

    This can occur due to:
    - 5xx responses
    - Authorization or quota problems (401, 403, 429)
    - Records missing a required field
    """

    category: ClassVar[str] = "external_service_error"


class TransportError(AdapterError):
    """Raised when a call never reached the external system (network, timeout, DNS)."""

    category: ClassVar[str] = "transport_error"


ERROR_CATEGORIES: tuple[str, ...] = (
    ConfigurationError.category,
    UserInputError.category,
    ExternalServiceError.category,
    TransportError.category,
)


__all__ = [
    "ERROR_CATEGORIES",
    "AdapterError",
    "ConfigurationError",
    "ExternalServiceError",
    "TransportError",
    "UserInputError",
]
