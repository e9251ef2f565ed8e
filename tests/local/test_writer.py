from __future__ import annotations

import pytest

from logseq_gtasks.codec.block import CONTEXT_NOTES, PROP_CONTEXT, PROP_TASK_ID, PROP_UPDATED
from logseq_gtasks.local.writer import LocalWriter
from logseq_gtasks.models.local import BlockDraft
from tests.fakes.store import FakeStore


def _draft(title: str, task_id: str, *, notes: str | None = None) -> BlockDraft:
    children = [BlockDraft(content=notes, properties={PROP_CONTEXT: CONTEXT_NOTES})] if notes else []
    return BlockDraft(content=f"LATER {title}", properties={PROP_TASK_ID: task_id}, children=children)


@pytest.mark.asyncio
async def test_ensure_page_creates_missing_journal_page(store: FakeStore) -> None:
    writer = LocalWriter(store)

    page, created = await writer.ensure_page("2024-01-05")
    again, created_again = await writer.ensure_page("2024-01-05")

    assert created
    assert not created_again
    assert again == page
    assert ("create_page", ("2024-01-05", True)) in store.calls


@pytest.mark.asyncio
async def test_insert_batch_appends_after_existing_content(store: FakeStore) -> None:
    page = store.add_page("2024-01-05")
    store.add_block(page.id, "Morning notes")

    await LocalWriter(store).insert_batch("2024-01-05", [_draft("A", "t1"), _draft("B", "t2", notes="n")])

    blocks = store.page_blocks("2024-01-05")
    assert [block.content for block in blocks] == ["Morning notes", "LATER A", "LATER B"]
    assert [child.content for child in blocks[2].children] == ["n"]
    assert [call[0] for call in store.writes] == ["insert"]


@pytest.mark.asyncio
async def test_overwrite_replaces_managed_children_and_keeps_manual_ones(store: FakeStore) -> None:
    page = store.add_page("2024-01-05")
    block_id = store.add_block(page.id, "LATER Old", {PROP_TASK_ID: "t1", PROP_UPDATED: "old", "custom": "x"})
    store.add_block(block_id, "old notes", {PROP_CONTEXT: CONTEXT_NOTES})
    store.add_block(block_id, "my own thoughts")

    await LocalWriter(store).overwrite(store.block(block_id), _draft("New", "t1", notes="new notes"))

    block = store.block(block_id)
    assert block.content == "LATER New"
    assert block.properties == {PROP_TASK_ID: "t1"}
    assert [child.content for child in block.children] == ["my own thoughts", "new notes"]


@pytest.mark.asyncio
async def test_overwrite_without_children_only_removes_stale_ones(store: FakeStore) -> None:
    page = store.add_page("2024-01-05")
    block_id = store.add_block(page.id, "LATER Old", {PROP_TASK_ID: "t1"})
    store.add_block(block_id, "old notes", {PROP_CONTEXT: CONTEXT_NOTES})

    await LocalWriter(store).overwrite(store.block(block_id), _draft("New", "t1"))

    assert store.block(block_id).children == []
    assert [call[0] for call in store.writes] == ["update", "remove"]
