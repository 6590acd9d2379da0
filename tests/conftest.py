from typing import Dict, List, Optional

import pytest

from product_crawler.adapters.registry import PatternRegistry
from product_crawler.config import CrawlConfig
from product_crawler.fetchers.base import LinkFetcher

SEED = "https://shop.example.com/"


class FakeFetcher(LinkFetcher):
    """Serves canned links per URL; ``errors`` holds exceptions raised in order before succeeding."""

    def __init__(self, pages: Dict[str, List[str]], errors: Optional[Dict[str, list]] = None, open_error=None):
        super().__init__(config=None)
        self.pages = pages
        self.errors = {k: list(v) for k, v in (errors or {}).items()}
        self.open_error = open_error
        self.calls: List[str] = []
        self.opened = False
        self.closed = False

    async def open(self):
        if self.open_error is not None:
            raise self.open_error
        self.opened = True

    async def close(self):
        self.closed = True

    async def fetch_links(self, url):
        self.calls.append(url)
        pending = self.errors.get(url)
        if pending:
            raise pending.pop(0)
        return list(self.pages.get(url, []))


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = dict(
            domains=[SEED],
            concurrency=1,
            max_depth=1,
            request_delay=0,
            retry_backoff=0,
            max_urls_to_crawl=100,
            output_dir=str(tmp_path / "output"),
        )
        values.update(overrides)
        return CrawlConfig(**values)
    return _make


@pytest.fixture
def registry():
    return PatternRegistry()
