"""Google OAuth token storage and refresh."""

from logseq_gtasks.auth.refresh import refresh_access_token
from logseq_gtasks.auth.tokens import TokenSet, TokenStore

__all__ = ["TokenSet", "TokenStore", "refresh_access_token"]
