"""Persistent storage for the Google OAuth token set."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from logseq_gtasks.exceptions import ConfigError

logger = logging.getLogger(__name__)


class TokenSet(BaseModel):
    access_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""

    model_config = {"extra": "ignore"}


class TokenStore:
    """Reads/writes the OAuth token set to a local JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> TokenSet:
        if not self.path.exists():
            return TokenSet()
        try:
            return TokenSet.model_validate(json.loads(self.path.read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            raise ConfigError(f"unreadable token file: {self.path}") from exc

    def write(self, tokens: TokenSet) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(tokens.model_dump_json(indent=2))
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def on_token_received(self, payload: dict[str, Any]) -> TokenSet:
        """Merge a newly obtained token pair into the stored set.

        A refresh response usually omits ``refresh_token``; the previously
        stored one is kept in that case.
        """
        current = self.read()
        access_token = str(payload.get("access_token") or "").strip()
        if not access_token:
            raise ConfigError("token payload carries no access_token")
        refresh_token = str(payload.get("refresh_token") or "").strip() or current.refresh_token
        merged = current.model_copy(update={"access_token": access_token, "refresh_token": refresh_token})
        self.write(merged)
        refresh_state = "updated" if refresh_token != current.refresh_token else "kept"
        logger.info("Stored new Google access token (refresh token %s)", refresh_state)
        return merged
