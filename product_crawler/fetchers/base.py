from __future__ import annotations

import asyncio
import enum
import re
from abc import ABC, abstractmethod
from typing import List, Optional


class FailureKind(str, enum.Enum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    BLOCKED = "blocked"
    OTHER = "other"


class FetchError(Exception):
    """A failed fetch, tagged with the failure kind the engine's policy keys on."""

    kind = FailureKind.OTHER

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class FetchTimeoutError(FetchError):
    kind = FailureKind.TIMEOUT


class FetchNetworkError(FetchError):
    kind = FailureKind.NETWORK


class FetchBlockedError(FetchError):
    kind = FailureKind.BLOCKED


_NETWORK_MARKER = re.compile(r"net::|econnrefused|econnreset|enotfound|connection (refused|reset)", re.I)
_BLOCKED_MARKER = re.compile(r"blocked|forbidden|\b429\b", re.I)


def classify_message(message: str) -> FailureKind:
    """
    Fallback classification by sniffing an error message, for fetchers that
    raise untyped exceptions (e.g. browser navigation errors).
    """
    text = message or ""
    if "timeout" in text.lower() or "timed out" in text.lower():
        return FailureKind.TIMEOUT
    if _NETWORK_MARKER.search(text):
        return FailureKind.NETWORK
    if _BLOCKED_MARKER.search(text):
        return FailureKind.BLOCKED
    return FailureKind.OTHER


def classify_failure(exc: BaseException) -> FailureKind:
    if isinstance(exc, FetchError):
        return exc.kind
    if isinstance(exc, asyncio.TimeoutError):
        return FailureKind.TIMEOUT
    return classify_message(str(exc))


class LinkFetcher(ABC):
    """
    Resolves a page URL to the raw href strings found on it.

    Implementations honor ``config.request_timeout`` and ``config.user_agent``
    and raise ``FetchError`` subclasses on failure. Resources (sessions,
    browsers) are acquired in ``open`` and released in ``close``; the engine
    drives both through ``async with``.
    """

    def __init__(self, config) -> None:
        self.config = config

    async def open(self) -> None:
        return None

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> "LinkFetcher":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    @abstractmethod
    async def fetch_links(self, url: str) -> List[str]:  # pragma: no cover - interface
        ...
