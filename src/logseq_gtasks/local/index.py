"""Lookup from remote task id to the local block linked to it."""

from __future__ import annotations

import logging
import warnings

from logseq_gtasks.codec.block import PROP_TASK_ID
from logseq_gtasks.exceptions import ConsistencyWarning
from logseq_gtasks.local.store import LocalStore
from logseq_gtasks.models.local import LocalBlock

logger = logging.getLogger(__name__)


class LocalIndex:
    """Read-only view over the store's property index.

    Duplicate linkage (several blocks carrying one task id) is not fatal: the
    first block the store returns is used and the others are recorded in
    :attr:`duplicates`, keyed by task id.
    """

    def __init__(self, store: LocalStore) -> None:
        self._store = store
        self.duplicates: dict[str, list[str]] = {}

    async def find_block_by_remote_id(self, task_id: str) -> LocalBlock | None:
        matches = await self._store.query_blocks_by_property(PROP_TASK_ID, task_id)
        if not matches:
            return None
        if len(matches) > 1:
            ignored = [block.id for block in matches[1:]]
            self.duplicates[task_id] = ignored
            logger.warning(
                "Task %s is linked from %d blocks; using %s, ignoring %s",
                task_id,
                len(matches),
                matches[0].id,
                ", ".join(ignored),
            )
            warnings.warn(f"duplicate blocks for task {task_id}", ConsistencyWarning, stacklevel=2)
        return matches[0]
