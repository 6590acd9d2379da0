from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional


def app_data_dir() -> Path:
    base = os.getenv("LOCALAPPDATA") or str(Path.home() / ".product-crawler")
    p = Path(base) / "product-crawler"
    p.mkdir(parents=True, exist_ok=True)
    return p


BROWSERS_DIR = app_data_dir() / "ms-playwright"
os.environ.setdefault("PLAYWRIGHT_BROWSERS_PATH", str(BROWSERS_DIR))

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright  # noqa: E402
from playwright.async_api import Error as PlaywrightError  # noqa: E402
from playwright.async_api import TimeoutError as PlaywrightTimeoutError  # noqa: E402

from .base import (  # noqa: E402
    FailureKind,
    FetchBlockedError,
    FetchError,
    FetchNetworkError,
    FetchTimeoutError,
    LinkFetcher,
    classify_message,
)
from ..utils.http import BLOCKED_STATUSES  # noqa: E402

logger = logging.getLogger(__name__)

_LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

_KIND_TO_ERROR = {
    FailureKind.TIMEOUT: FetchTimeoutError,
    FailureKind.NETWORK: FetchNetworkError,
    FailureKind.BLOCKED: FetchBlockedError,
    FailureKind.OTHER: FetchError,
}


class BrowserLinkFetcher(LinkFetcher):
    """
    Headless Chromium fetcher for storefronts that render their navigation with JavaScript.
    One browser per crawl; one page per fetch, always closed.
    """

    def __init__(self, config) -> None:
        super().__init__(config)
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None

    async def open(self) -> None:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=True, args=_LAUNCH_ARGS)
            self._context = await self._browser.new_context(user_agent=self.config.user_agent)
            self._context.set_default_timeout(self.config.request_timeout * 1000)
        except BaseException:
            # __aexit__ does not run when __aenter__ fails.
            await self.close()
            raise
        logger.info("Launched headless browser (%s)", BROWSERS_DIR)

    async def close(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._context = None
            self._browser = None
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None

    async def fetch_links(self, url: str) -> List[str]:
        if self._context is None:
            raise RuntimeError("BrowserLinkFetcher used before open()")
        page = await self._context.new_page()
        try:
            response = await page.goto(url, wait_until="networkidle")
            if response is not None and response.status in BLOCKED_STATUSES:
                raise FetchBlockedError(f"HTTP {response.status} (blocked) for {url}", status=response.status)
            links = await page.eval_on_selector_all(
                "a[href]", "els => els.map(a => a.getAttribute('href')).filter(Boolean)"
            )
        except PlaywrightTimeoutError as exc:
            raise FetchTimeoutError(f"timeout navigating to {url}: {exc}") from exc
        except PlaywrightError as exc:
            # Navigation errors only carry a message such as "net::ERR_NAME_NOT_RESOLVED".
            kind = classify_message(str(exc))
            raise _KIND_TO_ERROR[kind](f"{url}: {exc}") from exc
        finally:
            await page.close()
        return list(links)
