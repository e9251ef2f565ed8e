"""Async Google Tasks REST client."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx

from logseq_gtasks.exceptions import AuthorizationExpired, TransportError
from logseq_gtasks.models.remote import RemoteTask, TaskPatch
from logseq_gtasks.remote._retrying_transport import RetryingTransport

logger = logging.getLogger(__name__)

PAGE_SIZE = 100


def _seg(value: str) -> str:
    return quote(value, safe="")


class GoogleTasksClient:
    """Thin wrapper over the ``tasklists`` and ``tasks`` resources.

    The client owns its ``httpx.AsyncClient`` only when built through
    :meth:`create`; use it as an async context manager in that case.
    """

    def __init__(self, http_client: httpx.AsyncClient, *, base_url: str) -> None:
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    @classmethod
    def create(
        cls,
        access_token: str,
        *,
        base_url: str = "https://tasks.googleapis.com/tasks/v1",
        timeout: float = 30.0,
        max_retries: int = 3,
    ) -> GoogleTasksClient:
        http_client = httpx.AsyncClient(
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
            timeout=timeout,
            transport=RetryingTransport(max_retries=max_retries),
        )
        return cls(http_client, base_url=base_url)

    async def __aenter__(self) -> GoogleTasksClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._http.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s %s", method, path, params or "")
        try:
            response = await self._http.request(method, url, params=params, json=json, headers=headers)
        except httpx.HTTPError as exc:
            raise TransportError(f"{method} {path} failed: {exc}") from exc

        if response.status_code == 401:
            raise AuthorizationExpired(f"{method} {path}: Google rejected the access token (401)")
        if response.is_error:
            raise TransportError(
                f"{method} {path} failed: HTTP {response.status_code} {response.text[:200]}",
                status_code=response.status_code,
            )
        if not response.content:
            return {}
        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportError(f"{method} {path}: response is not JSON", status_code=response.status_code) from exc
        if not isinstance(payload, dict):
            raise TransportError(f"{method} {path}: unexpected response body", status_code=response.status_code)
        return payload

    async def list_task_lists(self, page_token: str | None = None) -> dict[str, Any]:
        """One page of ``tasklists.list``."""
        params: dict[str, Any] = {"maxResults": PAGE_SIZE}
        if page_token:
            params["pageToken"] = page_token
        return await self._request("GET", "/users/@me/lists", params=params)

    async def list_tasks(
        self, list_id: str, page_token: str | None = None, *, nonce: str | None = None
    ) -> dict[str, Any]:
        """One page of ``tasks.list``, including completed, deleted and hidden tasks.

        Shortly after a single-task mutation the list endpoint can serve stale
        data. *nonce* is sent as ``quotaUser`` (a standard Google API parameter
        that accepts any short string) so every fetch has a distinct URL.
        """
        params: dict[str, Any] = {
            "maxResults": PAGE_SIZE,
            "showCompleted": "true",
            "showDeleted": "true",
            "showHidden": "true",
        }
        if page_token:
            params["pageToken"] = page_token
        if nonce:
            params["quotaUser"] = nonce
        return await self._request(
            "GET", f"/lists/{_seg(list_id)}/tasks", params=params, headers={"Cache-Control": "no-cache"}
        )

    async def get_task(self, list_id: str, task_id: str) -> RemoteTask:
        payload = await self._request("GET", f"/lists/{_seg(list_id)}/tasks/{_seg(task_id)}")
        return RemoteTask.from_api(payload)

    async def update_task(self, list_id: str, task: RemoteTask, patch: TaskPatch) -> RemoteTask:
        """``tasks.update``: PUT the full resource with *patch* applied.

        Returns the record from the PUT reply. The sync engine does not rely on
        it and re-reads the task with :meth:`get_task`, because the list and
        update endpoints can lag behind the canonical record.
        """
        body = task.to_api()
        body.update(patch.to_body())
        payload = await self._request("PUT", f"/lists/{_seg(list_id)}/tasks/{_seg(task.id)}", json=body)
        return RemoteTask.from_api(payload)
