import asyncio

import aiohttp
import pytest

from product_crawler.config import CrawlConfig
from product_crawler.fetchers.base import FailureKind, FetchBlockedError, FetchError, FetchNetworkError, FetchTimeoutError
from product_crawler.fetchers.http_fetcher import HttpLinkFetcher
from product_crawler.utils.http import fetch_html
from product_crawler.utils.parsing import extract_hrefs

PAGE = """
<html><body>
  <a href="/product/abc-123">Shirt</a>
  <a href=" /about ">About</a>
  <a>no href</a>
  <a href="">empty</a>
  <a href="https://other.example.org/x">Elsewhere</a>
</body></html>
"""


class _Response:
    def __init__(self, status, body=""):
        self.status = status
        self._body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def text(self):
        return self._body


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.requests.append((url, headers, timeout))
        if self.error is not None:
            raise self.error
        return self.response

    async def close(self):
        self.closed = True


def test_extract_hrefs_keeps_raw_values_in_order():
    assert extract_hrefs(PAGE) == ["/product/abc-123", "/about", "https://other.example.org/x"]


def test_fetch_html_returns_body_and_sends_user_agent():
    session = _Session(_Response(200, "<html></html>"))
    body = asyncio.run(fetch_html(session, "https://a.com", timeout=5, user_agent="TestAgent/1.0"))
    assert body == "<html></html>"
    assert session.requests[0][1] == {"User-Agent": "TestAgent/1.0"}


@pytest.mark.parametrize("status", [403, 429])
def test_fetch_html_blocked_statuses(status):
    with pytest.raises(FetchBlockedError) as info:
        asyncio.run(fetch_html(_Session(_Response(status)), "https://a.com"))
    assert info.value.status == status


def test_fetch_html_other_http_errors():
    with pytest.raises(FetchError) as info:
        asyncio.run(fetch_html(_Session(_Response(500)), "https://a.com"))
    assert info.value.kind is FailureKind.OTHER


def test_fetch_html_maps_timeouts_and_network_errors():
    with pytest.raises(FetchTimeoutError):
        asyncio.run(fetch_html(_Session(error=asyncio.TimeoutError()), "https://a.com"))
    with pytest.raises(FetchNetworkError):
        asyncio.run(fetch_html(_Session(error=aiohttp.ClientConnectionError("refused")), "https://a.com"))


def test_http_link_fetcher_uses_config():
    session = _Session(_Response(200, PAGE))
    cfg = CrawlConfig(request_timeout=7, user_agent="TestAgent/1.0")

    async def go():
        async with HttpLinkFetcher(cfg, session=session) as fetcher:
            return await fetcher.fetch_links("https://shop.example.com/")

    links = asyncio.run(go())

    assert links[0] == "/product/abc-123"
    url, headers, timeout = session.requests[0]
    assert headers["User-Agent"] == "TestAgent/1.0"
    assert timeout.total == 7
    # Injected sessions belong to the caller.
    assert not session.closed


def test_http_link_fetcher_requires_open():
    fetcher = HttpLinkFetcher(CrawlConfig())
    with pytest.raises(RuntimeError):
        asyncio.run(fetcher.fetch_links("https://a.com"))
