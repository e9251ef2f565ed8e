"""Paginated retrieval of task lists and their tasks."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable

from logseq_gtasks.exceptions import TaskSyncError
from logseq_gtasks.models.remote import RemoteTask, RemoteTaskList
from logseq_gtasks.models.sync import TaskRef
from logseq_gtasks.remote.client import GoogleTasksClient

logger = logging.getLogger(__name__)


class RemoteFetcher:
    """Follows ``nextPageToken`` until exhausted and accumulates every page.

    Args:
        client: The Google Tasks client.
        max_concurrent: Upper bound on per-list task fetches in flight.
        clock: Nonce source for cache busting; ``time.time_ns`` by default.
    """

    def __init__(
        self,
        client: GoogleTasksClient,
        *,
        max_concurrent: int = 4,
        clock: Callable[[], int] = time.time_ns,
    ) -> None:
        self._client = client
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._clock = clock

    async def fetch_task_lists(self) -> list[RemoteTaskList]:
        lists: list[RemoteTaskList] = []
        page_token: str | None = None
        while True:
            page = await self._client.list_task_lists(page_token)
            lists.extend(RemoteTaskList.from_api(item) for item in page.get("items") or [])
            page_token = page.get("nextPageToken")
            if not page_token:
                break
        logger.debug("Fetched %d task lists", len(lists))
        return lists

    async def fetch_tasks(self, list_id: str) -> list[RemoteTask]:
        tasks: list[RemoteTask] = []
        page_token: str | None = None
        nonce = f"lgt-{self._clock()}"
        async with self._semaphore:
            while True:
                page = await self._client.list_tasks(list_id, page_token, nonce=nonce)
                tasks.extend(RemoteTask.from_api(item) for item in page.get("items") or [])
                page_token = page.get("nextPageToken")
                if not page_token:
                    break
        logger.debug("Fetched %d tasks from list %s", len(tasks), list_id)
        return tasks

    async def fetch_all(self) -> list[TaskRef]:
        """Every (list, task) pair, in list order then service order."""
        task_lists = await self.fetch_task_lists()
        try:
            async with asyncio.TaskGroup() as tg:
                pending = [(task_list, tg.create_task(self.fetch_tasks(task_list.id))) for task_list in task_lists]
        except* TaskSyncError as error_group:
            first_error = error_group.exceptions[0]
            raise first_error from error_group

        return [TaskRef(task_list=task_list, task=task) for task_list, job in pending for task in job.result()]
