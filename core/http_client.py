from typing import Optional

import httpx

from core.config import settings

_async_client: Optional[httpx.AsyncClient] = None

def _build_timeout() -> httpx.Timeout:
    seconds = settings.line_http_timeout_seconds
    return httpx.Timeout(seconds, connect=min(5.0, seconds))

def init_async_client() -> None:
    global _async_client
    if _async_client is None:
        _async_client = httpx.AsyncClient(
            base_url=settings.line_api_base,
            timeout=_build_timeout(),
            headers={"Content-Type": "application/json"},
        )

def get_async_client() -> httpx.AsyncClient:
    if _async_client is None:
        init_async_client()
    return _async_client

async def close_async_client() -> None:
    global _async_client
    if _async_client is not None:
        await _async_client.aclose()
        _async_client = None
