from __future__ import annotations

import asyncio
import logging
from typing import Optional

import aiohttp
from aiohttp import ClientSession, ClientTimeout

from ..fetchers.base import FetchBlockedError, FetchError, FetchNetworkError, FetchTimeoutError

logger = logging.getLogger(__name__)

BLOCKED_STATUSES = frozenset({403, 429})


async def fetch_html(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 30.0,
    user_agent: Optional[str] = None,
) -> str:
    """
    Fetch a URL and return its body text.
    Raises a typed ``FetchError`` so the caller can apply its retry policy.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        async with session.get(url, headers=headers, timeout=ClientTimeout(total=timeout)) as resp:
            if resp.status in BLOCKED_STATUSES:
                raise FetchBlockedError(f"HTTP {resp.status} (blocked) for {url}", status=resp.status)
            if resp.status >= 400:
                raise FetchError(f"HTTP {resp.status} for {url}", status=resp.status)
            return await resp.text()
    except asyncio.TimeoutError as exc:
        raise FetchTimeoutError(f"timeout after {timeout}s fetching {url}") from exc
    except aiohttp.ClientError as exc:
        logger.debug("client error for %s: %r", url, exc)
        raise FetchNetworkError(f"network error fetching {url}: {exc}") from exc


def create_session() -> ClientSession:
    """
    Create a shared aiohttp ClientSession.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    connector = aiohttp.TCPConnector(limit=0)  # unlimited; concurrency is bounded by batch size
    return aiohttp.ClientSession(connector=connector)
