"""Models for reconciliation decisions and sync results."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

from logseq_gtasks.models.local import BlockDraft, LocalBlock
from logseq_gtasks.models.remote import RemoteTask, RemoteTaskList, TaskPatch


class Classification(StrEnum):
    """What the reconciler decided for one (list, task) pair."""

    NEW = "new"
    SKIP_DELETED = "skip-deleted"
    UNCHANGED = "unchanged"
    REMOTE_CHANGED = "remote-changed"
    LOCAL_CHANGED = "local-changed"


class TaskRef(BaseModel):
    task_list: RemoteTaskList
    task: RemoteTask


class NewBlocks(BaseModel):
    """Blocks inserted together under one container page."""

    page_name: str
    refs: list[TaskRef] = Field(default_factory=list)
    drafts: list[BlockDraft] = Field(default_factory=list)


class Overwrite(BaseModel):
    ref: TaskRef
    block: LocalBlock
    draft: BlockDraft


class PushBack(BaseModel):
    ref: TaskRef
    block: LocalBlock
    patch: TaskPatch


class SyncPlan(BaseModel):
    """Every side effect one run will perform, grouped by kind."""

    new_pages: list[NewBlocks] = Field(default_factory=list)
    overwrites: list[Overwrite] = Field(default_factory=list)
    push_backs: list[PushBack] = Field(default_factory=list)
    counts: dict[Classification, int] = Field(default_factory=lambda: {c: 0 for c in Classification})

    @property
    def is_empty(self) -> bool:
        return not (self.new_pages or self.overwrites or self.push_backs)


class SyncResult(BaseModel):
    """Value returned by :meth:`SyncEngine.sync`."""

    counts: dict[Classification, int] = Field(default_factory=dict)
    pages_touched: list[str] = Field(default_factory=list)
    duplicates: dict[str, list[str]] = Field(default_factory=dict)
    dry_run: bool = False

    @property
    def total_tasks(self) -> int:
        return sum(self.counts.values())
