"""Shared httpx client factory — one connection pool for upstream API calls."""

import httpx

from config.settings import settings

_http_client: httpx.AsyncClient | None = None


async def get_http_client() -> httpx.AsyncClient:
    """Get or create the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is None or _http_client.is_closed:
        _http_client = httpx.AsyncClient(
            base_url=settings.OFFERS_API_BASE_URL,
            timeout=settings.OFFERS_API_TIMEOUT_SECONDS,
        )
    return _http_client


async def close_http_client() -> None:
    """Close the shared AsyncClient."""
    global _http_client  # noqa: PLW0603
    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
