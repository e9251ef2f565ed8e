"""Local store backed by the Logseq desktop HTTP API server.

Every call is ``POST <api_url>`` with ``{"method": ..., "args": [...]}``,
mirroring the plugin API (``logseq.Editor.*``, ``logseq.DB.*``,
``logseq.App.*``).
"""

from __future__ import annotations

import json
import logging
import re
from types import TracebackType
from typing import Any

import httpx

from logseq_gtasks.exceptions import LocalStoreError
from logseq_gtasks.local.store import LocalStore
from logseq_gtasks.models.local import BlockDraft, LocalBlock, Page, PropertyValue, UserConfig

logger = logging.getLogger(__name__)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

_CHILDREN_QUERY = """
[:find (pull ?c [*])
 :where
 [?p :block/uuid #uuid "{uuid}"]
 [?c :block/parent ?p]]
"""


def _kebab(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("-", key).lower()


def _render_property(value: PropertyValue) -> str:
    if isinstance(value, list):
        return ", ".join(value)
    return value


def _content_with_properties(content: str, properties: dict[str, PropertyValue]) -> str:
    lines = [content.rstrip("\n")]
    lines.extend(f"{key}:: {_render_property(value)}" for key, value in properties.items())
    return "\n".join(lines)


def _ref_id(value: Any) -> Any:
    return value.get("id") if isinstance(value, dict) else None


def _creation_order(entity: dict[str, Any]) -> tuple[bool, int, str]:
    db_id = entity.get("id")
    has_id = isinstance(db_id, int)
    return (not has_id, db_id if has_id else 0, str(entity["uuid"]))


def block_from_entity(entity: dict[str, Any]) -> LocalBlock:
    """Build a :class:`LocalBlock` from a Logseq block entity."""
    properties = {_kebab(str(k)): v for k, v in (entity.get("properties") or {}).items()}
    return LocalBlock(
        id=str(entity["uuid"]),
        content=entity.get("content") or "",
        properties=properties,
        deadline=entity.get("deadline"),
        marker=entity.get("marker"),
    )


def order_children(entities: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Sort sibling entities by following their ``left`` links.

    The first child's ``left`` points at the parent; every later child's
    ``left`` points at its predecessor. Entities outside the chain keep their
    query order at the end.
    """
    if not entities:
        return []
    by_left = {_ref_id(e.get("left")): e for e in entities}
    parent_id = _ref_id(entities[0].get("parent"))
    ordered: list[dict[str, Any]] = []
    current = by_left.get(parent_id)
    while current is not None and current not in ordered:
        ordered.append(current)
        current = by_left.get(current.get("id"))
    ordered.extend(e for e in entities if e not in ordered)
    return ordered


class LogseqApiStore(LocalStore):
    """:class:`~logseq_gtasks.local.store.LocalStore` over the Logseq HTTP API."""

    def __init__(self, http_client: httpx.AsyncClient, *, api_url: str) -> None:
        self._http = http_client
        self._api_url = api_url

    @classmethod
    def create(cls, token: str, *, api_url: str, timeout: float = 30.0) -> LogseqApiStore:
        http_client = httpx.AsyncClient(headers={"Authorization": f"Bearer {token}"}, timeout=timeout)
        return cls(http_client, api_url=api_url)

    async def __aenter__(self) -> LogseqApiStore:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self._http.aclose()

    async def call(self, method: str, *args: Any) -> Any:
        logger.debug("logseq %s %s", method, args)
        try:
            response = await self._http.post(self._api_url, json={"method": method, "args": list(args)})
        except httpx.HTTPError as exc:
            raise LocalStoreError(f"Logseq API unreachable ({method}): {exc}") from exc

        if response.status_code == 401:
            raise LocalStoreError("Logseq API rejected the token; check logseq_token in the config")
        if response.is_error:
            raise LocalStoreError(f"Logseq API {method} failed: HTTP {response.status_code} {response.text[:200]}")
        if not response.content:
            return None
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            raise LocalStoreError(f"Logseq API {method} returned invalid JSON") from exc
        if isinstance(payload, dict) and "error" in payload and len(payload) == 1:
            raise LocalStoreError(f"Logseq API {method} failed: {payload['error']}")
        return payload

    async def get_page(self, name: str) -> Page | None:
        entity = await self.call("logseq.Editor.getPage", name)
        if not entity:
            return None
        return Page(id=str(entity["uuid"]), name=entity.get("originalName") or entity.get("name") or name)

    async def create_page(self, name: str, *, journal: bool = False) -> Page:
        entity = await self.call(
            "logseq.Editor.createPage",
            name,
            {},
            {"redirect": False, "createFirstBlock": False, "journal": journal},
        )
        if not entity:
            raise LocalStoreError(f"Logseq did not create page {name!r}")
        return Page(id=str(entity["uuid"]), name=entity.get("originalName") or name)

    async def query_blocks_by_property(self, key: str, value: str) -> list[LocalBlock]:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        entities = await self.call("logseq.DB.q", f'(property {key} "{escaped}")') or []
        matches = [e for e in entities if isinstance(e, dict) and e.get("uuid")]
        # Query results are an unordered set; oldest block (lowest db id) first.
        matches.sort(key=_creation_order)
        return [block_from_entity(e) for e in matches]

    async def get_children(self, block_id: str) -> list[LocalBlock]:
        rows = await self.call("logseq.DB.datascriptQuery", _CHILDREN_QUERY.format(uuid=block_id)) or []
        entities = [row[0] if isinstance(row, list) else row for row in rows]
        return [block_from_entity(e) for e in order_children(entities)]

    async def insert_batch_block(self, target_id: str, drafts: list[BlockDraft], *, sibling: bool) -> None:
        if not drafts:
            return
        batch = [draft.to_batch() for draft in drafts]
        if not sibling:
            # Logseq inserts non-sibling batches as the first children; anchor
            # on the current last child to append instead.
            existing = await self.get_children(target_id)
            if existing:
                target_id, sibling = existing[-1].id, True
        await self.call("logseq.Editor.insertBatchBlock", target_id, batch, {"sibling": sibling})

    async def update_block(self, block_id: str, content: str, properties: dict[str, PropertyValue]) -> None:
        await self.call("logseq.Editor.updateBlock", block_id, _content_with_properties(content, properties))

    async def remove_block(self, block_id: str) -> None:
        await self.call("logseq.Editor.removeBlock", block_id)

    async def get_user_configs(self) -> UserConfig:
        configs = await self.call("logseq.App.getUserConfigs") or {}
        defaults = UserConfig()
        return UserConfig(
            preferred_date_format=configs.get("preferredDateFormat") or defaults.preferred_date_format,
            preferred_todo=configs.get("preferredTodo") or defaults.preferred_todo,
        )
