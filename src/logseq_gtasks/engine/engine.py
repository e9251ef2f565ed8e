"""Sync engine orchestrating the Google Tasks -> Logseq pipeline."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from logseq_gtasks.codec.block import encode
from logseq_gtasks.engine.progress import NullSyncProgress, SyncPhase, SyncProgress
from logseq_gtasks.engine.reconciler import Reconciler
from logseq_gtasks.local.index import LocalIndex
from logseq_gtasks.local.writer import LocalWriter
from logseq_gtasks.models.local import LocalBlock
from logseq_gtasks.models.sync import PushBack, SyncPlan, SyncResult, TaskRef
from logseq_gtasks.remote.client import GoogleTasksClient
from logseq_gtasks.remote.fetcher import RemoteFetcher

logger = logging.getLogger(__name__)


class SyncEngine:
    """Runs one sync.

    The sync runs in five phases:
    1. Fetch: every task list and every task, gathered before anything else
    2. Index: resolve each task id to its linked block, if any
    3. Create: insert new tasks, one batch per container page
    4. Update: overwrite blocks whose remote task changed
    5. Push: send local edits upstream, then rewrite the block from the
       canonical record the service returns

    Planning happens between Index and Create and is pure, so a malformed
    record aborts the run before any write.

    Args:
        fetcher: Remote snapshot source.
        client: Remote client used for push-back updates.
        index: Task id -> block lookup.
        writer: Local mutations.
        reconciler: Decision procedure bound to the user's date/marker settings.
        dry_run: Plan only; perform no local writes and no remote updates.
        progress: Phase observer.
    """

    def __init__(
        self,
        *,
        fetcher: RemoteFetcher,
        client: GoogleTasksClient,
        index: LocalIndex,
        writer: LocalWriter,
        reconciler: Reconciler,
        dry_run: bool = False,
        progress: SyncProgress | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._client = client
        self._index = index
        self._writer = writer
        self._reconciler = reconciler
        self._dry_run = dry_run
        self._progress: SyncProgress = progress or NullSyncProgress()

    @contextmanager
    def _phase(self, name: SyncPhase, total: int | None = None) -> Iterator[None]:
        self._progress.phase_start(name, total=total)
        try:
            yield
        except BaseException as exc:
            self._progress.phase_error(name, exc)
            raise
        self._progress.phase_done(name)

    async def sync(self) -> SyncResult:
        with self._phase(SyncPhase.FETCH):
            refs = await self._fetcher.fetch_all()
        logger.info("Fetched %d task(s)", len(refs))

        existing = await self._resolve(refs)
        plan = self._reconciler.plan(refs, existing)
        self._progress.plan_ready(plan.counts)
        result = SyncResult(
            counts=dict(plan.counts),
            pages_touched=[group.page_name for group in plan.new_pages],
            duplicates=dict(self._index.duplicates),
            dry_run=self._dry_run,
        )

        if self._dry_run:
            self._log_plan(plan)
            return result

        await self._create(plan)
        await self._update(plan)
        await self._push(plan)
        return result

    async def _resolve(self, refs: list[TaskRef]) -> dict[str, LocalBlock | None]:
        existing: dict[str, LocalBlock | None] = {}
        with self._phase(SyncPhase.INDEX, total=len(refs)):
            for ref in refs:
                existing[ref.task.id] = await self._index.find_block_by_remote_id(ref.task.id)
                self._progress.item_done(SyncPhase.INDEX)
        return existing

    async def _create(self, plan: SyncPlan) -> None:
        total = sum(len(group.refs) for group in plan.new_pages)
        with self._phase(SyncPhase.CREATE, total=total):
            for group in plan.new_pages:
                await self._writer.insert_batch(group.page_name, group.drafts)
                self._progress.item_done(SyncPhase.CREATE, label=group.page_name, count=len(group.refs))

    async def _update(self, plan: SyncPlan) -> None:
        with self._phase(SyncPhase.UPDATE, total=len(plan.overwrites)):
            for op in plan.overwrites:
                logger.info("Remote changed, overwriting block for %r", op.ref.task.title)
                await self._writer.overwrite(op.block, op.draft)
                self._progress.item_done(SyncPhase.UPDATE, label=op.ref.task.title)

    async def _push(self, plan: SyncPlan) -> None:
        with self._phase(SyncPhase.PUSH, total=len(plan.push_backs)):
            for op in plan.push_backs:
                await self._push_one(op)
                self._progress.item_done(SyncPhase.PUSH, label=op.ref.task.title)

    async def _push_one(self, op: PushBack) -> None:
        task_list, task = op.ref.task_list, op.ref.task
        logger.info("Pushing local edits of %r: %s", task.title, sorted(op.patch.model_fields_set))
        # The PUT reply is not trusted as canonical state; read it back.
        await self._client.update_task(task_list.id, task, op.patch)
        canonical = await self._client.get_task(task_list.id, task.id)
        await self._writer.overwrite(op.block, encode(task_list, canonical, self._reconciler.user_config))

    def _log_plan(self, plan: SyncPlan) -> None:
        logger.info("[dry-run] No changes will be made")
        for group in plan.new_pages:
            for ref in group.refs:
                logger.info("[dry-run] create on %s: %s", group.page_name, ref.task.title)
        for overwrite in plan.overwrites:
            logger.info("[dry-run] overwrite from remote: %s", overwrite.ref.task.title)
        for push in plan.push_backs:
            logger.info("[dry-run] push %s: %s", push.ref.task.title, push.patch.to_body())
