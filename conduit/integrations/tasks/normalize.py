"""
Tasks API normalizers.

The single narrow point where untyped external records become internal
records. Field mapping is explicit: optional fields fall back to the
internal model's defaults, a missing identifier is an ExternalServiceError.
"""

import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from conduit.errors import ExternalServiceError

from .types import Comment, Task, User

logger = logging.getLogger(__name__)

# Status reported when a 2xx payload is unusable
INVALID_PAYLOAD_STATUS = 502


def _require_mapping(record: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(record, Mapping):
        raise ExternalServiceError(
            f"external system returned a {kind} that is not an object: {type(record).__name__}",
            status=INVALID_PAYLOAD_STATUS,
        )
    return record


def _require_id(record: Mapping[str, Any], field: str = "id") -> str:
    value = record.get(field)
    if value is None or value == "":
        raise ExternalServiceError(
            f"external system returned a record without `{field}`",
            status=INVALID_PAYLOAD_STATUS,
        )
    return str(value)


def _optional_str(record: Mapping[str, Any], field: str) -> str | None:
    value = record.get(field)
    if value is None or value == "":
        return None
    return str(value)


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; unparseable values become None."""
    if not isinstance(value, str) or not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug(f"Ignoring unparseable timestamp {value!r}")
        return None


def _labels(value: Any) -> tuple[str, ...]:
    """Accept ["bug", ...] or [{"name": "bug"}, ...]."""
    if not isinstance(value, list):
        return ()
    labels: list[str] = []
    for item in value:
        if isinstance(item, str):
            labels.append(item)
        elif isinstance(item, Mapping) and isinstance(item.get("name"), str):
            labels.append(item["name"])
    return tuple(labels)


def task_from_external(record: Any) -> Task:
    """Map an external task record to a Task."""
    record = _require_mapping(record, "task")
    return Task(
        id=_require_id(record),
        title=str(record.get("title") or ""),
        state=str(record.get("state") or "open"),
        description=str(record.get("description") or ""),
        assignee=_optional_str(record, "assigneeLogin"),
        labels=_labels(record.get("labels")),
        created_at=_parse_timestamp(record.get("createdAt")),
        updated_at=_parse_timestamp(record.get("updatedAt")),
        url=_optional_str(record, "htmlUrl"),
    )


def comment_from_external(record: Any, task_id: str) -> Comment:
    """Map an external comment record to a Comment on *task_id*."""
    record = _require_mapping(record, "comment")
    return Comment(
        id=_require_id(record),
        task_id=task_id,
        body=str(record.get("body") or ""),
        author=_optional_str(record, "authorLogin"),
        created_at=_parse_timestamp(record.get("createdAt")),
    )


def user_from_external(record: Any) -> User:
    """Map an external user record to a User. display_name defaults to the login."""
    record = _require_mapping(record, "user")
    login = str(record.get("login") or "")
    return User(
        id=_require_id(record),
        login=login,
        display_name=str(record.get("displayName") or login),
        email=_optional_str(record, "email"),
    )


def task_to_external(changes: Mapping[str, Any]) -> dict[str, Any]:
    """Map internal field names of a create/update request to the external casing."""
    renames = {"assignee": "assigneeLogin"}
    return {renames.get(name, name): value for name, value in changes.items()}
