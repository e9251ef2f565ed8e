from __future__ import annotations

import asyncio
from pathlib import Path

import httpx
import pytest

from logseq_gtasks.auth.tokens import TokenSet
from logseq_gtasks.config import SyncConfig
from logseq_gtasks.exceptions import AuthorizationExpired, SyncError
from logseq_gtasks.models.local import UserConfig
from logseq_gtasks.models.sync import Classification
from logseq_gtasks.sdk import TaskSync, resolve_user_config
from tests.fakes.store import FakeStore
from tests.fakes.tasks_api import FakeTasksApi, task_payload


class GatedStore(FakeStore):
    """Blocks the first call until :attr:`gate` is set."""

    def __init__(self, user_config: UserConfig) -> None:
        super().__init__(user_config)
        self.gate = asyncio.Event()

    async def get_user_configs(self) -> UserConfig:
        await self.gate.wait()
        return await super().get_user_configs()


def test_resolve_user_config_applies_overrides(sample_config: SyncConfig) -> None:
    store_config = UserConfig(preferred_date_format="MMM do, yyyy", preferred_todo="LATER")

    assert resolve_user_config(store_config, sample_config) == store_config

    overridden = sample_config.model_copy(update={"date_format": "yyyy-MM-dd", "todo_marker": "TODO"})
    assert resolve_user_config(store_config, overridden) == UserConfig(
        preferred_date_format="yyyy-MM-dd", preferred_todo="TODO"
    )


@pytest.mark.asyncio
async def test_sync_with_uses_logseq_settings_plus_overrides(
    sample_config: SyncConfig, api: FakeTasksApi
) -> None:
    store = FakeStore(UserConfig(preferred_date_format="MMM do, yyyy", preferred_todo="LATER"))
    api.add_list("l1", "Inbox", [task_payload("t1", "Buy milk")])
    config = sample_config.model_copy(update={"todo_marker": "TODO"})

    async with api.client() as client:
        result = await TaskSync(config).sync_with(client, store)

    assert result.counts[Classification.NEW] == 1
    assert [block.content for block in store.page_blocks("Jan 5th, 2024")] == ["TODO Buy milk"]


@pytest.mark.asyncio
async def test_overlapping_sync_is_rejected(
    sample_config: SyncConfig, api: FakeTasksApi, user_config: UserConfig
) -> None:
    store = GatedStore(user_config)
    task_sync = TaskSync(sample_config)

    async with api.client() as client:
        first = asyncio.create_task(task_sync.sync_with(client, store))
        await asyncio.sleep(0)

        with pytest.raises(SyncError, match="already running"):
            await task_sync.sync_with(client, store)

        store.gate.set()
        await first
        await task_sync.sync_with(client, store)


@pytest.mark.asyncio
async def test_sync_without_stored_token_requires_authentication(sample_config: SyncConfig) -> None:
    with pytest.raises(AuthorizationExpired, match="authenticate"):
        await TaskSync(sample_config).sync()


@pytest.mark.asyncio
async def test_sync_opens_and_closes_both_sides(
    sample_config: SyncConfig, api: FakeTasksApi, store: FakeStore, monkeypatch: pytest.MonkeyPatch
) -> None:
    api.add_list("l1", "Inbox", [task_payload("t1", "Buy milk")])
    task_sync = TaskSync(sample_config.model_copy(update={"date_format": "yyyy-MM-dd"}))
    client = api.client()
    monkeypatch.setattr(task_sync, "_open_client", lambda: client)
    monkeypatch.setattr(task_sync, "_open_store", lambda: store)

    result = await task_sync.sync(dry_run=True)

    assert result.dry_run
    assert result.pages_touched == ["2024-01-05"]
    assert client._http.is_closed


def test_open_client_uses_the_stored_access_token(sample_config: SyncConfig) -> None:
    task_sync = TaskSync(sample_config)
    task_sync.tokens.write(TokenSet(access_token="tok"))

    client = task_sync._open_client()

    assert client._http.headers["Authorization"] == "Bearer tok"


def test_receive_tokens_writes_token_file(sample_config: SyncConfig) -> None:
    tokens = TaskSync(sample_config).receive_tokens({"access_token": "a", "refresh_token": "r"})

    assert tokens.refresh_token == "r"
    assert Path(sample_config.token_path).exists()


@pytest.mark.asyncio
async def test_refresh_tokens_posts_to_configured_endpoint(
    sample_config: SyncConfig, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"access_token": "fresh"})

    real_client = httpx.AsyncClient
    monkeypatch.setattr(
        "logseq_gtasks.sdk.httpx.AsyncClient",
        lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
    )
    task_sync = TaskSync(sample_config)
    task_sync.tokens.write(TokenSet(access_token="old", client_id="c", client_secret="s", refresh_token="r"))

    tokens = await task_sync.refresh_tokens()

    assert tokens.access_token == "fresh"
    assert str(seen[0].url) == sample_config.token_url
