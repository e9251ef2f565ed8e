"""OAuth2 refresh-token exchange."""

from __future__ import annotations

import logging

import httpx

from logseq_gtasks.auth.tokens import TokenSet, TokenStore
from logseq_gtasks.exceptions import AuthorizationExpired, TransportError

logger = logging.getLogger(__name__)


async def refresh_access_token(store: TokenStore, *, token_url: str, client: httpx.AsyncClient) -> TokenSet:
    """Exchange the stored refresh token for a new access token.

    Raises:
        AuthorizationExpired: If credentials are missing or the grant is rejected;
            the user must go through the consent flow again.
        TransportError: On any other failure talking to the token endpoint.
    """
    tokens = store.read()
    if not (tokens.client_id and tokens.client_secret and tokens.refresh_token):
        raise AuthorizationExpired("client_id, client_secret and refresh_token are required to refresh")

    form = {
        "grant_type": "refresh_token",
        "client_id": tokens.client_id,
        "client_secret": tokens.client_secret,
        "refresh_token": tokens.refresh_token,
    }
    try:
        response = await client.post(token_url, data=form)
    except httpx.HTTPError as exc:
        raise TransportError(f"token refresh failed: {exc}") from exc

    if response.status_code in (400, 401):
        raise AuthorizationExpired(
            f"refresh token rejected ({response.status_code}); re-authenticate with Google",
            status_code=response.status_code,
        )
    if response.status_code != 200:
        raise TransportError(f"token refresh failed: HTTP {response.status_code}", status_code=response.status_code)

    try:
        payload = response.json()
    except ValueError as exc:
        raise TransportError("token endpoint returned a non-JSON body", status_code=response.status_code) from exc
    if not isinstance(payload, dict):
        raise TransportError("token endpoint returned an unexpected body", status_code=response.status_code)

    logger.debug("Token endpoint granted a new access token")
    return store.on_token_received(payload)
