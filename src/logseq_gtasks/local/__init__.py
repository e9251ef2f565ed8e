"""Logseq side of the sync."""

from logseq_gtasks.local.index import LocalIndex
from logseq_gtasks.local.logseq import LogseqApiStore
from logseq_gtasks.local.store import LocalStore
from logseq_gtasks.local.writer import LocalWriter

__all__ = ["LocalIndex", "LocalStore", "LocalWriter", "LogseqApiStore"]
