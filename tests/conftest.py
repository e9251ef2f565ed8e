"""Shared test fixtures for logseq-gtasks tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from logseq_gtasks.config import SyncConfig
from logseq_gtasks.models.local import UserConfig
from logseq_gtasks.models.remote import RemoteTask, RemoteTaskList
from tests.fakes.store import FakeStore
from tests.fakes.tasks_api import FakeTasksApi


@pytest.fixture
def user_config() -> UserConfig:
    """ISO dates and LATER, so journal page names are easy to assert on."""
    return UserConfig(preferred_date_format="yyyy-MM-dd", preferred_todo="LATER")


@pytest.fixture
def inbox() -> RemoteTaskList:
    return RemoteTaskList(id="list-1", title="Inbox")


@pytest.fixture
def sample_task() -> RemoteTask:
    """An open task with a due date, notes and one link."""
    return RemoteTask.from_api(
        {
            "id": "task-1",
            "title": "Buy milk",
            "status": "needsAction",
            "updated": "2024-02-27T10:11:12.000Z",
            "due": "2024-03-01T00:00:00.000Z",
            "notes": "2% fat",
            "links": [{"type": "email", "description": "Re: groceries", "link": "https://mail.google.com/1"}],
            "webViewLink": "https://tasks.google.com/task/task-1",
            "etag": '"abc"',
        }
    )


@pytest.fixture
def store(user_config: UserConfig) -> FakeStore:
    return FakeStore(user_config)


@pytest.fixture
def api() -> FakeTasksApi:
    return FakeTasksApi()


@pytest.fixture
def sample_config(tmp_path: Path) -> SyncConfig:
    """A minimal valid SyncConfig."""
    return SyncConfig(logseq_token="secret", token_path=tmp_path / "tokens.json")
