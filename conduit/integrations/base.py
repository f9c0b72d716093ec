"""
Shared service-layer plumbing for integrations.

Re-tags transport outcomes into the error taxonomy. Every integration's
service goes through call_checked() / paginate_checked(), so the mapping
lives in exactly one place.
"""

import logging
from typing import Any

from conduit.errors import AdapterError, ExternalServiceError, TransportError, UserInputError
from conduit.transport import ApiClient, CallOutcome, RawResponse, TransportFailure

logger = logging.getLogger(__name__)

# 4xx statuses that describe the adapter's standing with the external
# system (credentials, permissions, quota) rather than the caller's input.
SERVICE_SIDE_CLIENT_STATUSES = frozenset({401, 403, 407, 429})

_DETAIL_KEYS = ("message", "error", "detail", "error_description")
_MAX_DETAIL_LENGTH = 500


def _detail(body: Any) -> str:
    """Extract a human-readable detail from an error body."""
    if isinstance(body, dict):
        for key in _DETAIL_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
            if isinstance(value, dict) and isinstance(value.get("message"), str):
                return value["message"]
        return str(body)[:_MAX_DETAIL_LENGTH]
    if body is None:
        return "no response body"
    return str(body).strip()[:_MAX_DETAIL_LENGTH] or "no response body"


def error_for_response(response: RawResponse) -> AdapterError | None:
    """
    Map a non-success RawResponse to its taxonomy error.

    Returns None for 2xx responses. The status code is always preserved.

    Example:
        >>> error_for_response(RawResponse("GET", "/tasks/T-9", 404, {"message": "not found"}))
        UserInputError(status=404, message='GET /tasks/T-9 failed with status 404: not found')
    """
    outcome = response.outcome
    if outcome is CallOutcome.SUCCESS:
        return None

    message = (
        f"{response.method} {response.path} failed with status {response.status}: "
        f"{_detail(response.body)}"
    )
    if outcome is CallOutcome.CLIENT_ERROR and response.status not in SERVICE_SIDE_CLIENT_STATUSES:
        return UserInputError(message, status=response.status)
    return ExternalServiceError(message, status=response.status)


def raise_for_outcome(response: RawResponse) -> RawResponse:
    """Return *response* unchanged if it succeeded, otherwise raise its taxonomy error."""
    error = error_for_response(response)
    if error is not None:
        logger.warning(
            f"{type(error).__name__}: {error.message}",
            extra={"status": response.status, "path": response.path, "category": error.category},
        )
        raise error
    return response


def map_transport_failure(failure: TransportFailure) -> TransportError:
    """Re-tag a transport failure (no status received) as TransportError."""
    return TransportError(
        f"{failure.method} {failure.path} did not reach the external service after "
        f"{failure.attempts} attempt(s): {type(failure.cause).__name__}: {failure.cause}"
    )


async def call_checked(
    client: ApiClient,
    method: str,
    path: str,
    *,
    body: Any = None,
    params: dict[str, Any] | None = None,
) -> RawResponse:
    """ApiClient.call() with every failure re-typed into the taxonomy."""
    try:
        response = await client.call(method, path, body=body, params=params)
    except TransportFailure as e:
        raise map_transport_failure(e) from e
    return raise_for_outcome(response)


async def paginate_checked(
    client: ApiClient,
    path: str,
    *,
    params: dict[str, Any] | None = None,
    items_key: str = "items",
) -> list[Any]:
    """
    ApiClient.call_paginated() with failures re-typed; returns the item list.

    A collection longer than ``max_pages`` pages is an error rather than a
    partial list, so filters and limits never run over incomplete data.
    """
    try:
        response = await client.call_paginated(path, params=params, items_key=items_key)
    except TransportFailure as e:
        raise map_transport_failure(e) from e
    response = raise_for_outcome(response)
    if response.truncated:
        raise ExternalServiceError(
            f"GET {path} has more than {response.pages} page(s); "
            f"narrow the request or raise CONDUIT_MAX_PAGES"
        )
    return response.body
