"""Typed records exchanged between the fetcher, codec, reconciler and writer."""

from logseq_gtasks.models.local import BlockDraft, LocalBlock, Page, UserConfig
from logseq_gtasks.models.remote import RemoteTask, RemoteTaskList, TaskLink, TaskPatch, TaskStatus
from logseq_gtasks.models.sync import (
    Classification,
    NewBlocks,
    Overwrite,
    PushBack,
    SyncPlan,
    SyncResult,
    TaskRef,
)

__all__ = [
    "BlockDraft",
    "Classification",
    "LocalBlock",
    "NewBlocks",
    "Overwrite",
    "Page",
    "PushBack",
    "RemoteTask",
    "RemoteTaskList",
    "SyncPlan",
    "SyncResult",
    "TaskLink",
    "TaskPatch",
    "TaskRef",
    "TaskStatus",
    "UserConfig",
]
