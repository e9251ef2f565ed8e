"""Custom exception hierarchy for logseq-gtasks.

All library exceptions inherit from :class:`TaskSyncError`, making it easy
to catch any library error with a single ``except`` clause while still allowing
callers to handle specific failure modes.
"""

from __future__ import annotations


class TaskSyncError(Exception):
    """Base exception for all logseq-gtasks errors."""


class ConfigError(TaskSyncError):
    """Configuration loading or validation failure."""


class TransportError(TaskSyncError):
    """Raised when a call to the remote task service fails.

    Attributes:
        status_code: HTTP status of the failed response, or ``None`` when the
            request never produced one (connection reset, timeout, ...).
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthorizationExpired(TransportError):
    """Raised on HTTP 401 from the remote service; the user must re-authenticate."""

    def __init__(self, message: str = "Google credentials expired or revoked", *, status_code: int = 401) -> None:
        super().__init__(message, status_code=status_code)


class MalformedRecordError(TaskSyncError):
    """Raised when a remote record lacks fields the sync cannot do without."""


class LocalStoreError(TaskSyncError):
    """Raised when the local Logseq store rejects or fails a call."""


class SyncError(TaskSyncError):
    """Raised when the sync engine encounters a non-recoverable failure."""


class ConsistencyWarning(UserWarning):
    """More than one local block carries the same remote task id."""
