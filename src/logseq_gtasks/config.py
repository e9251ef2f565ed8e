"""Application-level configuration for a sync run.

:class:`SyncConfig` is loaded from a JSON file and carries every setting the
remote client, the Logseq store and the sync engine need.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from logseq_gtasks.exceptions import ConfigError

DEFAULT_CONFIG_PATH = "./logseq-gtasks.json"


class SyncConfig(BaseModel):
    """Top-level configuration for a ``logseq-gtasks`` run.

    Attributes:
        logseq_api_url: Logseq HTTP API server endpoint.
        logseq_token: Authorization token configured in Logseq's API server.
        tasks_api_url: Base URL of the Google Tasks REST API.
        token_url: OAuth2 token endpoint used by ``auth refresh``.
        token_path: JSON file holding the Google OAuth tokens.
        max_concurrent: Upper bound on simultaneous per-list task fetches.
        max_retries: Retries for transient HTTP failures.
        timeout: HTTP timeout in seconds.
        date_format: Overrides Logseq's preferred date format when set.
        todo_marker: Overrides Logseq's preferred "not done" marker when set.
    """

    logseq_api_url: str = "http://127.0.0.1:12315/api"
    logseq_token: str
    tasks_api_url: str = "https://tasks.googleapis.com/tasks/v1"
    token_url: str = "https://oauth2.googleapis.com/token"
    token_path: Path = Path("tokens.json")
    max_concurrent: int = Field(default=4, ge=1, le=10)
    max_retries: int = Field(default=3, ge=0)
    timeout: float = Field(default=30.0, gt=0)
    date_format: str | None = None
    todo_marker: str | None = None

    model_config = {"frozen": True}

    @field_validator("logseq_token")
    @classmethod
    def _token_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("logseq_token must not be empty")
        return value.strip()

    @field_validator("todo_marker")
    @classmethod
    def _known_marker(cls, value: str | None) -> str | None:
        if value is not None and value not in {"TODO", "LATER"}:
            raise ValueError("todo_marker must be TODO or LATER")
        return value


def _resolve_path(value: Path, *, base_dir: Path) -> Path:
    if value.is_absolute():
        return value
    return (base_dir / value).resolve()


def load_config(path: str | Path) -> SyncConfig:
    """Load and validate config from JSON, resolving relative paths against the config directory."""
    config_path = Path(path).expanduser().resolve()

    try:
        raw_payload: Any = json.loads(config_path.read_text(encoding="utf-8"))
        parsed = SyncConfig.model_validate(raw_payload)
    except OSError as exc:
        raise ConfigError(f"failed reading config file: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"invalid JSON in config file: {config_path}") from exc
    except ValidationError as exc:
        raise ConfigError(f"invalid config: {exc}") from exc

    return parsed.model_copy(update={"token_path": _resolve_path(parsed.token_path, base_dir=config_path.parent)})
