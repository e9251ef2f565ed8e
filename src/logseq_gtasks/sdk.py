"""SDK composition root: wires config, credentials, clients and the engine."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from logseq_gtasks.auth import TokenSet, TokenStore, refresh_access_token
from logseq_gtasks.config import SyncConfig
from logseq_gtasks.engine import Reconciler, SyncEngine, SyncProgress
from logseq_gtasks.exceptions import AuthorizationExpired, SyncError
from logseq_gtasks.local import LocalIndex, LocalStore, LocalWriter, LogseqApiStore
from logseq_gtasks.models.local import UserConfig
from logseq_gtasks.models.sync import SyncResult
from logseq_gtasks.remote import GoogleTasksClient, RemoteFetcher

logger = logging.getLogger(__name__)


def resolve_user_config(store_config: UserConfig, config: SyncConfig) -> UserConfig:
    """Logseq's own settings, with any overrides from the config file applied."""
    overrides: dict[str, Any] = {}
    if config.date_format:
        overrides["preferred_date_format"] = config.date_format
    if config.todo_marker:
        overrides["preferred_todo"] = config.todo_marker
    return store_config.model_copy(update=overrides)


class TaskSync:
    """Public API: one object per configured Logseq graph / Google account pair."""

    def __init__(self, config: SyncConfig, *, progress: SyncProgress | None = None) -> None:
        self._config = config
        self._progress = progress
        self.tokens = TokenStore(config.token_path)
        self._running = False

    @property
    def config(self) -> SyncConfig:
        return self._config

    def _open_client(self) -> GoogleTasksClient:
        access_token = self.tokens.read().access_token
        if not access_token:
            raise AuthorizationExpired("no Google access token stored; authenticate first")
        return GoogleTasksClient.create(
            access_token,
            base_url=self._config.tasks_api_url,
            timeout=self._config.timeout,
            max_retries=self._config.max_retries,
        )

    def _open_store(self) -> LocalStore:
        return LogseqApiStore.create(
            self._config.logseq_token, api_url=self._config.logseq_api_url, timeout=self._config.timeout
        )

    async def sync(self, *, dry_run: bool = False) -> SyncResult:
        """Run one full reconciliation ("sync now")."""
        async with self._open_client() as client, self._open_store() as store:
            return await self.sync_with(client, store, dry_run=dry_run)

    async def sync_with(self, client: GoogleTasksClient, store: LocalStore, *, dry_run: bool = False) -> SyncResult:
        if self._running:
            raise SyncError("a sync is already running")
        self._running = True
        try:
            return await self._run(client, store, dry_run=dry_run)
        finally:
            self._running = False

    async def _run(self, client: GoogleTasksClient, store: LocalStore, *, dry_run: bool) -> SyncResult:
        user_config = resolve_user_config(await store.get_user_configs(), self._config)
        logger.debug(
            "Using date format %r, todo marker %r", user_config.preferred_date_format, user_config.preferred_todo
        )
        engine = SyncEngine(
            fetcher=RemoteFetcher(client, max_concurrent=self._config.max_concurrent),
            client=client,
            index=LocalIndex(store),
            writer=LocalWriter(store),
            reconciler=Reconciler(user_config),
            dry_run=dry_run,
            progress=self._progress,
        )
        return await engine.sync()

    def receive_tokens(self, payload: dict[str, Any]) -> TokenSet:
        """Token-received event: merge a fresh token pair into storage."""
        return self.tokens.on_token_received(payload)

    async def refresh_tokens(self) -> TokenSet:
        async with httpx.AsyncClient(timeout=self._config.timeout) as http_client:
            return await refresh_access_token(self.tokens, token_url=self._config.token_url, client=http_client)
