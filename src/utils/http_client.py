"""Shared persistent httpx client for GitHub API calls.

A single pooled client avoids a new TCP connection + TLS handshake for
every branch and commit request fanned out by the collector.
"""

import httpx

from src.constants import (
    API_TIMEOUT_EXTERNAL,
    POOL_KEEPALIVE_EXPIRY,
    POOL_MAX_CONNECTIONS,
    POOL_MAX_KEEPALIVE,
)

_POOL_LIMITS = httpx.Limits(
    max_connections=POOL_MAX_CONNECTIONS,
    max_keepalive_connections=POOL_MAX_KEEPALIVE,
    keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
)

_github_client: httpx.AsyncClient | None = None


def get_github_client() -> httpx.AsyncClient:
    """Get persistent httpx client for GitHub API calls."""
    global _github_client
    if _github_client is None or _github_client.is_closed:
        _github_client = httpx.AsyncClient(
            timeout=API_TIMEOUT_EXTERNAL,
            limits=_POOL_LIMITS,
            http2=False,
        )
    return _github_client


async def close_all_clients() -> None:
    """Close all persistent httpx clients. Call during app shutdown."""
    global _github_client
    if _github_client is not None:
        await _github_client.aclose()
        _github_client = None
