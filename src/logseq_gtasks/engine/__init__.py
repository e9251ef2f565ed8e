"""Sync engine and decision procedure."""

from logseq_gtasks.engine.engine import SyncEngine
from logseq_gtasks.engine.progress import NullSyncProgress, SyncPhase, SyncProgress
from logseq_gtasks.engine.reconciler import Reconciler

__all__ = ["NullSyncProgress", "Reconciler", "SyncEngine", "SyncPhase", "SyncProgress"]
