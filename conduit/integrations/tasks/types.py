"""
Tasks API types: internal records and operation requests.

Internal records are the adapter's stable shape, decoupled from the
external API's camelCase fields. Operation requests are validated by the
tool dispatcher before the service layer sees them.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ============================================================================
# Internal records
# ============================================================================


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class Task(_Record):
    """A task as seen by tool callers."""

    id: str
    title: str = ""
    state: str = "open"
    description: str = ""
    assignee: str | None = None
    labels: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None
    url: str | None = None


class Comment(_Record):
    """A comment on a task."""

    id: str
    task_id: str
    body: str = ""
    author: str | None = None
    created_at: datetime | None = None


class User(_Record):
    """The account the adapter's credential belongs to."""

    id: str
    login: str = ""
    display_name: str = ""
    email: str | None = None


# ============================================================================
# Operation requests
# ============================================================================

TaskState = Literal["open", "in_progress", "closed"]


class _Request(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", str_strip_whitespace=True)


class ListTasksParams(_Request):
    state: TaskState | None = Field(default=None, description="Only tasks in this state")
    assignee: str | None = Field(default=None, description="Only tasks assigned to this login")
    label: str | None = Field(default=None, description="Only tasks carrying this label")
    limit: int | None = Field(default=None, ge=1, le=1000, description="Maximum tasks returned")


class GetTaskParams(_Request):
    task_id: str = Field(..., min_length=1, description="Task identifier (e.g. 'T-42')")


class CreateTaskParams(_Request):
    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: str = Field(default="", description="Longer description")
    assignee: str | None = Field(default=None, description="Login of the assignee")
    labels: list[str] = Field(default_factory=list, description="Labels to apply")


class UpdateTaskParams(_Request):
    task_id: str = Field(..., min_length=1, description="Task identifier")
    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = None
    state: TaskState | None = None
    assignee: str | None = None
    labels: list[str] | None = None

    @field_validator("title", "description", "state", "labels")
    @classmethod
    def _not_null(cls, value: object) -> object:
        # Only assignee may be cleared; None there unassigns the task
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @model_validator(mode="after")
    def _has_changes(self) -> "UpdateTaskParams":
        if not self.changes():
            raise ValueError("at least one of title, description, state, assignee, labels is required")
        return self

    def changes(self) -> dict[str, object]:
        """Fields explicitly set by the caller, excluding the task id."""
        return {
            name: getattr(self, name)
            for name in ("title", "description", "state", "assignee", "labels")
            if name in self.model_fields_set
        }


class ListCommentsParams(_Request):
    task_id: str = Field(..., min_length=1, description="Task identifier")
    limit: int | None = Field(default=None, ge=1, le=1000, description="Maximum comments returned")


class AddCommentParams(_Request):
    task_id: str = Field(..., min_length=1, description="Task identifier")
    body: str = Field(..., min_length=1, description="Comment text")


class GetCurrentUserParams(_Request):
    pass
