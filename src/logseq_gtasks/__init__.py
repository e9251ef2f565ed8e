"""Public API surface for logseq-gtasks."""

__version__ = "0.4.0"

from logseq_gtasks.auth import TokenSet, TokenStore
from logseq_gtasks.config import SyncConfig, load_config
from logseq_gtasks.engine import NullSyncProgress, Reconciler, SyncEngine, SyncProgress
from logseq_gtasks.exceptions import (
    AuthorizationExpired,
    ConfigError,
    ConsistencyWarning,
    LocalStoreError,
    MalformedRecordError,
    SyncError,
    TaskSyncError,
    TransportError,
)
from logseq_gtasks.models import Classification, RemoteTask, RemoteTaskList, SyncResult
from logseq_gtasks.sdk import TaskSync

__all__ = [
    "AuthorizationExpired",
    "Classification",
    "ConfigError",
    "ConsistencyWarning",
    "LocalStoreError",
    "MalformedRecordError",
    "NullSyncProgress",
    "Reconciler",
    "RemoteTask",
    "RemoteTaskList",
    "SyncConfig",
    "SyncEngine",
    "SyncError",
    "SyncProgress",
    "SyncResult",
    "TaskSync",
    "TaskSyncError",
    "TokenSet",
    "TokenStore",
    "TransportError",
    "__version__",
    "load_config",
]
