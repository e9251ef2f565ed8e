from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from logseq_gtasks.exceptions import LocalStoreError
from logseq_gtasks.local.logseq import LogseqApiStore, block_from_entity, order_children
from logseq_gtasks.models.local import BlockDraft

API_URL = "http://logseq.test/api"


class FakeLogseqApi:
    """Answers Logseq API calls from a method -> result table."""

    def __init__(self, results: dict[str, Any] | None = None) -> None:
        self.results = results or {}
        self.calls: list[tuple[str, list[Any]]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.calls.append((payload["method"], payload["args"]))
        result = self.results.get(payload["method"])
        if callable(result):
            result = result(*payload["args"])
        return httpx.Response(200, json=result)

    def store(self) -> LogseqApiStore:
        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler), headers={"Authorization": "Bearer tok"}
        )
        return LogseqApiStore(http_client, api_url=API_URL)


def _child(entity_id: int, uuid: str, left: int, parent: int = 1, **extra: Any) -> dict[str, Any]:
    return {"id": entity_id, "uuid": uuid, "left": {"id": left}, "parent": {"id": parent}, "content": uuid, **extra}


@pytest.mark.asyncio
async def test_call_posts_method_and_args() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), headers={"Authorization": "Bearer tok"})
    async with LogseqApiStore(http_client, api_url=API_URL) as store:
        assert await store.call("logseq.Editor.getBlock", "uuid-1") == {"ok": True}

    assert str(seen[0].url) == API_URL
    assert seen[0].headers["Authorization"] == "Bearer tok"
    assert json.loads(seen[0].content) == {"method": "logseq.Editor.getBlock", "args": ["uuid-1"]}


@pytest.mark.asyncio
async def test_get_page_returns_none_for_missing_page() -> None:
    api = FakeLogseqApi({"logseq.Editor.getPage": None})

    async with api.store() as store:
        assert await store.get_page("2024-01-05") is None


@pytest.mark.asyncio
async def test_get_page_prefers_original_name() -> None:
    entity = {"uuid": "p1", "name": "mar 1st, 2024", "originalName": "Mar 1st, 2024"}
    api = FakeLogseqApi({"logseq.Editor.getPage": entity})

    async with api.store() as store:
        page = await store.get_page("mar 1st, 2024")

    assert page is not None
    assert (page.id, page.name) == ("p1", "Mar 1st, 2024")


@pytest.mark.asyncio
async def test_create_page_as_journal_without_redirect() -> None:
    api = FakeLogseqApi({"logseq.Editor.createPage": {"uuid": "p9", "originalName": "2024-01-05"}})

    async with api.store() as store:
        page = await store.create_page("2024-01-05", journal=True)

    assert page.id == "p9"
    method, args = api.calls[0]
    assert method == "logseq.Editor.createPage"
    assert args == ["2024-01-05", {}, {"redirect": False, "createFirstBlock": False, "journal": True}]


@pytest.mark.asyncio
async def test_create_page_that_logseq_refuses_raises() -> None:
    api = FakeLogseqApi({"logseq.Editor.createPage": None})

    async with api.store() as store:
        with pytest.raises(LocalStoreError, match="did not create"):
            await store.create_page("x")


@pytest.mark.asyncio
async def test_query_blocks_by_property_normalizes_property_keys() -> None:
    api = FakeLogseqApi(
        {
            "logseq.DB.q": [
                {
                    "uuid": "b1",
                    "content": "LATER Buy milk",
                    "marker": "LATER",
                    "deadline": 20240301,
                    "properties": {"googleTaskId": "abc", "googleTaskUpdated": "2024-01-01T00:00:00.000Z"},
                },
                {"content": "no uuid"},
            ]
        }
    )

    async with api.store() as store:
        blocks = await store.query_blocks_by_property("google-task-id", 'a"bc')

    assert api.calls[0] == ("logseq.DB.q", ['(property google-task-id "a\\"bc")'])
    assert len(blocks) == 1
    assert blocks[0].id == "b1"
    assert blocks[0].prop("google-task-id") == "abc"
    assert blocks[0].prop("google-task-updated") == "2024-01-01T00:00:00.000Z"
    assert blocks[0].deadline == 20240301
    assert blocks[0].marker == "LATER"


@pytest.mark.asyncio
@pytest.mark.parametrize("reverse", [False, True])
async def test_query_blocks_by_property_orders_duplicates_oldest_first(reverse: bool) -> None:
    duplicates = [
        {"id": 12, "uuid": "b-1", "content": "LATER Buy milk", "properties": {"googleTaskId": "abc"}},
        {"id": 40, "uuid": "b-2", "content": "LATER Buy milk", "properties": {"googleTaskId": "abc"}},
    ]
    if reverse:
        duplicates.reverse()
    api = FakeLogseqApi({"logseq.DB.q": duplicates})

    async with api.store() as store:
        blocks = await store.query_blocks_by_property("google-task-id", "abc")

    assert [block.id for block in blocks] == ["b-1", "b-2"]


@pytest.mark.asyncio
async def test_get_children_returns_document_order() -> None:
    rows = [[_child(12, "c", left=11)], [_child(10, "a", left=1)], [_child(11, "b", left=10)]]
    api = FakeLogseqApi({"logseq.DB.datascriptQuery": rows})

    async with api.store() as store:
        children = await store.get_children("parent-uuid")

    assert [child.id for child in children] == ["a", "b", "c"]
    assert "parent-uuid" in api.calls[0][1][0]


def test_order_children_keeps_unlinked_entities_at_the_end() -> None:
    entities = [_child(11, "b", left=10), _child(99, "orphan", left=50), _child(10, "a", left=1)]

    assert [e["uuid"] for e in order_children(entities)] == ["a", "b", "orphan"]
    assert order_children([]) == []


def test_block_from_entity_defaults() -> None:
    block = block_from_entity({"uuid": "b1"})

    assert block.content == ""
    assert block.properties == {}
    assert block.deadline is None


@pytest.mark.asyncio
async def test_insert_batch_appends_after_the_last_existing_child() -> None:
    rows = [[_child(10, "first", left=1)], [_child(11, "last", left=10)]]
    api = FakeLogseqApi({"logseq.DB.datascriptQuery": rows, "logseq.Editor.insertBatchBlock": []})

    async with api.store() as store:
        await store.insert_batch_block("page-1", [BlockDraft(content="LATER x")], sibling=False)

    method, args = api.calls[-1]
    assert method == "logseq.Editor.insertBatchBlock"
    assert args == ["last", [{"content": "LATER x", "properties": {}}], {"sibling": True}]


@pytest.mark.asyncio
async def test_insert_batch_into_empty_target_inserts_as_children() -> None:
    api = FakeLogseqApi({"logseq.DB.datascriptQuery": [], "logseq.Editor.insertBatchBlock": []})

    async with api.store() as store:
        await store.insert_batch_block("page-1", [BlockDraft(content="LATER x")], sibling=False)
        await store.insert_batch_block("page-1", [], sibling=False)

    assert api.calls[-1][1][0] == "page-1"
    assert api.calls[-1][1][2] == {"sibling": False}
    assert [method for method, _ in api.calls].count("logseq.Editor.insertBatchBlock") == 1


@pytest.mark.asyncio
async def test_update_block_writes_properties_into_content() -> None:
    api = FakeLogseqApi({"logseq.Editor.updateBlock": None})

    async with api.store() as store:
        await store.update_block("b1", "LATER Buy milk\n", {"google-task-id": "abc", "tags": ["a", "b"]})

    assert api.calls[0] == (
        "logseq.Editor.updateBlock",
        ["b1", "LATER Buy milk\ngoogle-task-id:: abc\ntags:: a, b"],
    )


@pytest.mark.asyncio
async def test_get_user_configs_falls_back_to_defaults() -> None:
    api = FakeLogseqApi({"logseq.App.getUserConfigs": {"preferredDateFormat": "yyyy-MM-dd", "preferredTodo": ""}})

    async with api.store() as store:
        config = await store.get_user_configs()

    assert config.preferred_date_format == "yyyy-MM-dd"
    assert config.preferred_todo == "LATER"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("response", "match"),
    [
        (httpx.Response(401), "rejected the token"),
        (httpx.Response(500, text="boom"), "HTTP 500"),
        (httpx.Response(200, content=b"not json"), "invalid JSON"),
        (httpx.Response(200, json={"error": "MethodNotExist"}), "MethodNotExist"),
    ],
)
async def test_call_failures_raise_local_store_error(response: httpx.Response, match: str) -> None:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: response))

    async with LogseqApiStore(http_client, api_url=API_URL) as store:
        with pytest.raises(LocalStoreError, match=match):
            await store.remove_block("b1")


@pytest.mark.asyncio
async def test_unreachable_server_raises_local_store_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with LogseqApiStore(httpx.AsyncClient(transport=httpx.MockTransport(handler)), api_url=API_URL) as store:
        with pytest.raises(LocalStoreError, match="unreachable"):
            await store.get_user_configs()
