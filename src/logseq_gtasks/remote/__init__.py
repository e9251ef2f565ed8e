"""Google Tasks side of the sync."""

from logseq_gtasks.remote.client import GoogleTasksClient
from logseq_gtasks.remote.fetcher import RemoteFetcher

__all__ = ["GoogleTasksClient", "RemoteFetcher"]
