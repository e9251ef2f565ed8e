"""Local store adapter contract.

Every concrete store (the Logseq HTTP API, the in-memory fake used in tests)
implements this interface so the index and the writer never need to know
which one they talk to.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType

from logseq_gtasks.models.local import BlockDraft, LocalBlock, Page, PropertyValue, UserConfig


class LocalStore(ABC):
    @abstractmethod
    async def __aenter__(self) -> LocalStore: ...  # pragma: no cover

    @abstractmethod
    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_page(self, name: str) -> Page | None: ...  # pragma: no cover

    @abstractmethod
    async def create_page(self, name: str, *, journal: bool = False) -> Page: ...  # pragma: no cover

    @abstractmethod
    async def query_blocks_by_property(self, key: str, value: str) -> list[LocalBlock]:
        """Blocks whose property *key* equals *value*, in a stable order."""

    @abstractmethod
    async def get_children(self, block_id: str) -> list[LocalBlock]:
        """Direct children of *block_id*, in document order."""

    @abstractmethod
    async def insert_batch_block(self, target_id: str, drafts: list[BlockDraft], *, sibling: bool) -> None:
        """Insert *drafts* (with their children) under or after *target_id*.

        With ``sibling=False`` the drafts become the last children of the
        target (a page or a block); with ``sibling=True`` they follow it.
        """

    @abstractmethod
    async def update_block(self, block_id: str, content: str, properties: dict[str, PropertyValue]) -> None:
        """Replace content and properties; properties absent from *properties* are dropped."""

    @abstractmethod
    async def remove_block(self, block_id: str) -> None: ...  # pragma: no cover

    @abstractmethod
    async def get_user_configs(self) -> UserConfig: ...  # pragma: no cover
