"""
Transport-level result types.

These stay below the error taxonomy: the service layer turns them into
AdapterError subclasses. Plain dataclasses rather than pydantic models,
since they never cross the tool boundary.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class CallOutcome(StrEnum):
    """Classification of a call that received a status code."""

    SUCCESS = "success"  # 2xx
    CLIENT_ERROR = "client_error"  # 4xx
    SERVER_ERROR = "server_error"  # 5xx and anything else unexpected


@dataclass(frozen=True)
class RawResponse:
    """One logical response from the external API.

    For paginated calls ``body`` holds the concatenated item list and
    ``pages`` the number of pages fetched. ``truncated`` is set when more
    pages existed past ``max_pages``.
    """

    method: str
    path: str
    status: int
    body: Any = None
    attempts: int = 1
    pages: int = 1
    truncated: bool = False

    @property
    def outcome(self) -> CallOutcome:
        if 200 <= self.status < 300:
            return CallOutcome.SUCCESS
        if 400 <= self.status < 500:
            return CallOutcome.CLIENT_ERROR
        return CallOutcome.SERVER_ERROR

    @property
    def ok(self) -> bool:
        return self.outcome is CallOutcome.SUCCESS


class TransportFailure(Exception):
    """Raised when a call never received a status (connect error, timeout, DNS)."""

    def __init__(self, method: str, path: str, cause: Exception, attempts: int = 1) -> None:
        self.method = method
        self.path = path
        self.cause = cause
        self.attempts = attempts
        super().__init__(f"{method} {path}: {type(cause).__name__}: {cause}")
