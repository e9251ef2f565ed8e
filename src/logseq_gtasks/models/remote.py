"""Typed records for the Google Tasks service."""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from logseq_gtasks.codec.dates import parse_remote_timestamp
from logseq_gtasks.exceptions import MalformedRecordError


class TaskStatus(StrEnum):
    NEEDS_ACTION = "needsAction"
    COMPLETED = "completed"


def _describe(exc: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())


class RemoteTaskList(BaseModel):
    """A task list; read-only to this system."""

    id: str
    title: str = ""

    model_config = ConfigDict(frozen=True, extra="ignore")

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> RemoteTaskList:
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MalformedRecordError(f"invalid task list record: {_describe(exc)}") from exc


class TaskLink(BaseModel):
    type: str = ""
    description: str = ""
    url: str = Field(default="", alias="link")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class RemoteTask(BaseModel):
    """A task as returned by ``tasks.list`` / ``tasks.get``.

    ``updated`` is kept as the raw string the service sent: it is the linkage
    key and is compared verbatim against the value recorded at last sync.
    Unknown resource fields (etag, parent, position, ...) are retained so a
    full-resource update can send them back untouched.
    """

    id: str
    title: str = ""
    status: TaskStatus = TaskStatus.NEEDS_ACTION
    updated: str | None = None
    due: str | None = None
    completed: str | None = None
    notes: str | None = None
    links: list[TaskLink] = Field(default_factory=list)
    deleted: bool = False
    hidden: bool = False
    web_view_link: str | None = Field(default=None, alias="webViewLink")

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator("updated", "due", "completed")
    @classmethod
    def _rfc3339(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                parse_remote_timestamp(value)
            except ValueError as exc:
                raise ValueError(f"not an RFC 3339 timestamp: {value!r}") from exc
        return value

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> RemoteTask:
        """Parse a wire record, failing loudly on missing or mistyped fields."""
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise MalformedRecordError(f"invalid task record: {_describe(exc)}") from exc

    def to_api(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    @property
    def updated_at(self) -> datetime | None:
        return parse_remote_timestamp(self.updated) if self.updated else None

    @property
    def due_date(self) -> date | None:
        return parse_remote_timestamp(self.due).date() if self.due else None

    @property
    def completed_date(self) -> date | None:
        return parse_remote_timestamp(self.completed).date() if self.completed else None


class TaskPatch(BaseModel):
    """Field mutations pushed back to the remote service.

    Only fields explicitly set are sent; ``completed=None`` set explicitly
    clears the completion timestamp.
    """

    title: str | None = None
    status: TaskStatus | None = None
    completed: str | None = None
    due: str | None = None

    def is_empty(self) -> bool:
        return not self.model_fields_set

    def to_body(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)
