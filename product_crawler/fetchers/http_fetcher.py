from __future__ import annotations

import logging
from typing import List, Optional

from aiohttp import ClientSession

from .base import LinkFetcher
from ..utils.http import create_session, fetch_html
from ..utils.parsing import extract_hrefs

logger = logging.getLogger(__name__)


class HttpLinkFetcher(LinkFetcher):
    """
    Lightweight fetcher: one aiohttp session per crawl, HTML parsed with BeautifulSoup.
    No JavaScript is executed, so links injected client-side are not seen.
    """

    def __init__(self, config, session: Optional[ClientSession] = None) -> None:
        super().__init__(config)
        self._session = session
        self._owns_session = session is None

    async def open(self) -> None:
        if self._session is None:
            self._session = create_session()

    async def close(self) -> None:
        if self._session is not None and self._owns_session:
            await self._session.close()
            self._session = None

    async def fetch_links(self, url: str) -> List[str]:
        if self._session is None:
            raise RuntimeError("HttpLinkFetcher used before open()")
        html = await fetch_html(
            self._session,
            url,
            timeout=self.config.request_timeout,
            user_agent=self.config.user_agent,
        )
        links = extract_hrefs(html)
        logger.debug("Fetched %s: %d links", url, len(links))
        return links
