"""Pure decision procedure: remote snapshot + local lookups -> sync plan.

Nothing in this module performs I/O, so every branch can be exercised with
plain records.
"""

from __future__ import annotations

import logging
from typing import Any

from logseq_gtasks.codec.block import (
    PROP_UPDATED,
    block_deadline,
    completion_date,
    derive_title,
    encode,
    is_done,
)
from logseq_gtasks.codec.dates import format_date, to_remote_date
from logseq_gtasks.exceptions import MalformedRecordError
from logseq_gtasks.models.local import LocalBlock, UserConfig
from logseq_gtasks.models.remote import RemoteTask, TaskPatch, TaskStatus
from logseq_gtasks.models.sync import (
    Classification,
    NewBlocks,
    Overwrite,
    PushBack,
    SyncPlan,
    TaskRef,
)

logger = logging.getLogger(__name__)


class Reconciler:
    def __init__(self, user_config: UserConfig) -> None:
        self._user_config = user_config

    @property
    def user_config(self) -> UserConfig:
        return self._user_config

    def container_page(self, task: RemoteTask) -> str:
        """Journal page a new task lands on: the earlier of its updated and due dates.

        Raises:
            MalformedRecordError: If the task carries neither date.
        """
        updated_at = task.updated_at
        candidates = [d for d in (updated_at.date() if updated_at else None, task.due_date) if d is not None]
        if not candidates:
            raise MalformedRecordError(f"task {task.id} has neither 'updated' nor 'due'")
        return format_date(min(candidates), self._user_config.preferred_date_format)

    def local_edits(self, block: LocalBlock, task: RemoteTask) -> TaskPatch:
        """Fields the block changed relative to *task*, as a remote patch.

        Notes are never compared: local escaping makes them unreliable to
        round-trip.
        """
        changes: dict[str, Any] = {}

        title = derive_title(block.content)
        if title and title != task.title.strip():
            changes["title"] = title

        done = is_done(block)
        if done and task.status == TaskStatus.NEEDS_ACTION:
            changes["status"] = TaskStatus.COMPLETED
            completed = completion_date(block, self._user_config.preferred_date_format)
            if completed is not None:
                changes["completed"] = to_remote_date(completed)
        elif not done and task.status == TaskStatus.COMPLETED:
            changes["status"] = TaskStatus.NEEDS_ACTION
            changes["completed"] = None

        deadline = block_deadline(block)
        if deadline is not None and deadline != task.due_date:
            changes["due"] = to_remote_date(deadline)

        return TaskPatch(**changes)

    def classify(self, task: RemoteTask, existing: LocalBlock | None) -> Classification:
        if existing is None:
            return Classification.SKIP_DELETED if task.deleted else Classification.NEW
        if (existing.prop(PROP_UPDATED) or "") != (task.updated or ""):
            return Classification.REMOTE_CHANGED
        if self.local_edits(existing, task).is_empty():
            return Classification.UNCHANGED
        return Classification.LOCAL_CHANGED

    def plan(self, refs: list[TaskRef], existing: dict[str, LocalBlock | None]) -> SyncPlan:
        """Classify every pair and collect the resulting operations.

        New tasks are grouped by container page, pages in first-seen order.
        """
        sync_plan = SyncPlan()
        pages: dict[str, NewBlocks] = {}

        for ref in refs:
            task = ref.task
            block = existing.get(task.id)
            classification = self.classify(task, block)
            sync_plan.counts[classification] += 1
            logger.debug("Task %s (%s): %s", task.id, task.title, classification)

            if classification == Classification.NEW:
                name = self.container_page(task)
                group = pages.setdefault(name, NewBlocks(page_name=name))
                group.refs.append(ref)
                group.drafts.append(encode(ref.task_list, task, self._user_config))
            elif classification == Classification.REMOTE_CHANGED and block is not None:
                sync_plan.overwrites.append(
                    Overwrite(ref=ref, block=block, draft=encode(ref.task_list, task, self._user_config))
                )
            elif classification == Classification.LOCAL_CHANGED and block is not None:
                sync_plan.push_backs.append(PushBack(ref=ref, block=block, patch=self.local_edits(block, task)))

        sync_plan.new_pages = list(pages.values())
        return sync_plan
