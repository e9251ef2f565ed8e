"""Progress events emitted by :class:`~logseq_gtasks.engine.engine.SyncEngine`.

A run goes Fetch -> Index -> (plan) -> Create -> Update -> Push. Between
Index and Create the observer receives the per-classification tally, so a
display can say what the run is about to do before any write happens.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from enum import StrEnum

from logseq_gtasks.models.sync import Classification


class SyncPhase(StrEnum):
    FETCH = "Fetch"
    INDEX = "Index"
    CREATE = "Create"
    UPDATE = "Update"
    PUSH = "Push"


class SyncProgress(ABC):
    """Observer for one sync run."""

    @abstractmethod
    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        """*phase* is starting. *total* counts tasks; ``None`` when unknown (Fetch)."""
        ...  # pragma: no cover

    @abstractmethod
    def plan_ready(self, counts: Mapping[Classification, int]) -> None:
        """Every fetched task has been classified; no write has happened yet."""
        ...  # pragma: no cover

    @abstractmethod
    def item_done(self, phase: SyncPhase, *, label: str = "", count: int = 1) -> None:
        """*count* tasks of *phase* were applied.

        *label* names what was written: the container page for Create, the
        task title for Update and Push.
        """
        ...  # pragma: no cover

    @abstractmethod
    def phase_done(self, phase: SyncPhase) -> None:
        ...  # pragma: no cover

    @abstractmethod
    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        """*phase* was interrupted by *error*; the run is aborting."""
        ...  # pragma: no cover


class NullSyncProgress(SyncProgress):
    def phase_start(self, phase: SyncPhase, total: int | None = None) -> None:
        pass

    def plan_ready(self, counts: Mapping[Classification, int]) -> None:
        pass

    def item_done(self, phase: SyncPhase, *, label: str = "", count: int = 1) -> None:
        pass

    def phase_done(self, phase: SyncPhase) -> None:
        pass

    def phase_error(self, phase: SyncPhase, error: BaseException) -> None:
        pass
