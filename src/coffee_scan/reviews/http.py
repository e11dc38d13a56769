"""Timed outbound HTTP requests."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from coffee_scan.config import Settings

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
BROWSER_HEADERS = {
    "User-Agent": BROWSER_USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Upgrade-Insecure-Requests": "1",
}


def build_client(settings: Settings, **kwargs: Any) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_sec),
        follow_redirects=True,
        **kwargs,
    )


async def timed_get(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
) -> httpx.Response | None:
    """GET with a per-request timeout; transport failures are logged and return None."""
    started = time.monotonic()
    try:
        if timeout is None:
            response = await client.get(url, params=params, headers=headers)
        else:
            response = await client.get(url, params=params, headers=headers, timeout=timeout)
    except httpx.TimeoutException as exc:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.warning("HTTP FAIL %s (%dms): timeout %s", url, elapsed_ms, exc)
        return None
    except httpx.RequestError as exc:
        elapsed_ms = int((time.monotonic() - started) * 1000)
        logger.warning("HTTP FAIL %s (%dms): %s", url, elapsed_ms, exc)
        return None
    elapsed_ms = int((time.monotonic() - started) * 1000)
    logger.info("HTTP %s %s (%dms)", response.status_code, url, elapsed_ms)
    return response
