"""Applies insert and overwrite operations against the local store."""

from __future__ import annotations

import logging

from logseq_gtasks.codec.block import is_managed_child
from logseq_gtasks.local.store import LocalStore
from logseq_gtasks.models.local import BlockDraft, LocalBlock, Page

logger = logging.getLogger(__name__)


class LocalWriter:
    def __init__(self, store: LocalStore) -> None:
        self._store = store

    async def ensure_page(self, name: str) -> tuple[Page, bool]:
        """Return the page named *name*, creating it as a journal page if absent."""
        page = await self._store.get_page(name)
        if page is not None:
            return page, False
        logger.info("Creating page %s", name)
        return await self._store.create_page(name, journal=True), True

    async def insert_batch(self, page_name: str, drafts: list[BlockDraft]) -> Page:
        """Insert *drafts* together at the end of *page_name*."""
        page, _ = await self.ensure_page(page_name)
        await self._store.insert_batch_block(page.id, drafts, sibling=False)
        logger.info("Inserted %d task block(s) on %s", len(drafts), page.name)
        return page

    async def overwrite(self, block: LocalBlock, draft: BlockDraft) -> None:
        """Replace *block* with *draft* in place.

        Content and properties are replaced wholesale. Notes/links children
        written by an earlier sync are removed and the draft's children are
        appended after whatever children the user added by hand.
        """
        await self._store.update_block(block.id, draft.content, draft.properties)

        for child in await self._store.get_children(block.id):
            if is_managed_child(child):
                await self._store.remove_block(child.id)

        if draft.children:
            await self._store.insert_batch_block(block.id, draft.children, sibling=False)
        logger.debug("Overwrote block %s", block.id)
