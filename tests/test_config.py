from __future__ import annotations

import json
from pathlib import Path

import pytest

from logseq_gtasks.config import SyncConfig, load_config
from logseq_gtasks.exceptions import ConfigError


def _write(tmp_path: Path, payload: object) -> Path:
    path = tmp_path / "logseq-gtasks.json"
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_defaults(sample_config: SyncConfig) -> None:
    assert sample_config.logseq_api_url == "http://127.0.0.1:12315/api"
    assert sample_config.tasks_api_url == "https://tasks.googleapis.com/tasks/v1"
    assert sample_config.max_concurrent == 4
    assert sample_config.max_retries == 3
    assert sample_config.date_format is None
    assert sample_config.todo_marker is None


def test_load_config_resolves_token_path_against_config_dir(tmp_path: Path) -> None:
    path = _write(tmp_path, {"logseq_token": " secret ", "token_path": "creds/tokens.json", "todo_marker": "TODO"})

    config = load_config(path)

    assert config.logseq_token == "secret"
    assert config.token_path == (tmp_path / "creds" / "tokens.json").resolve()
    assert config.todo_marker == "TODO"


def test_load_config_keeps_absolute_token_path(tmp_path: Path) -> None:
    absolute = tmp_path / "elsewhere" / "tokens.json"
    config = load_config(_write(tmp_path, {"logseq_token": "t", "token_path": str(absolute)}))

    assert config.token_path == absolute


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="failed reading config file"):
        load_config(tmp_path / "missing.json")


def test_load_config_invalid_json(tmp_path: Path) -> None:
    path = tmp_path / "logseq-gtasks.json"
    path.write_text("{", encoding="utf-8")

    with pytest.raises(ConfigError, match="invalid JSON"):
        load_config(path)


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"logseq_token": "   "},
        {"logseq_token": "t", "todo_marker": "NOW"},
        {"logseq_token": "t", "max_concurrent": 0},
        {"logseq_token": "t", "max_concurrent": 11},
        {"logseq_token": "t", "timeout": 0},
    ],
)
def test_load_config_rejects_invalid_settings(tmp_path: Path, payload: dict) -> None:
    with pytest.raises(ConfigError, match="invalid config"):
        load_config(_write(tmp_path, payload))
