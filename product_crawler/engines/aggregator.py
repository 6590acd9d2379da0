from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, List, Optional, Set

from .base import CrawlState
from .health import CrawlHealth, HealthSnapshot

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CrawlResult:
    """Immutable snapshot of one finished crawl. ``duration`` is in milliseconds."""

    domain: str
    product_urls: FrozenSet[str]
    total_urls_crawled: int
    start_time: datetime
    end_time: datetime
    duration: int
    crawl_health: HealthSnapshot
    state: CrawlState = CrawlState.COMPLETED
    abort_reason: Optional[str] = None

    @property
    def aborted(self) -> bool:
        return self.state is CrawlState.ABORTED

    def sorted_product_urls(self) -> List[str]:
        return sorted(self.product_urls)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "domain": self.domain,
            "productUrls": self.sorted_product_urls(),
            "totalUrlsCrawled": self.total_urls_crawled,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "duration": self.duration,
            "crawlHealth": self.crawl_health.to_dict(),
            "state": self.state.value,
            "abortReason": self.abort_reason,
        }


@dataclass
class ResultAggregator:
    """
    Collects product URLs during a run and freezes them into a CrawlResult.
    ``finalize`` may be called once.
    """

    domain: str
    start_time: datetime = field(default_factory=_utcnow)
    _product_urls: Set[str] = field(default_factory=set, init=False, repr=False)
    _result: Optional[CrawlResult] = field(default=None, init=False, repr=False)

    def add_product(self, url: str) -> bool:
        if url in self._product_urls:
            return False
        self._product_urls.add(url)
        return True

    def finalize(
        self,
        total_urls_crawled: int,
        health: CrawlHealth,
        state: CrawlState = CrawlState.COMPLETED,
        abort_reason: Optional[str] = None,
    ) -> CrawlResult:
        if self._result is not None:
            raise RuntimeError(f"crawl result for {self.domain} already finalized")
        end_time = _utcnow()
        duration = int((end_time - self.start_time).total_seconds() * 1000)
        self._result = CrawlResult(
            domain=self.domain,
            product_urls=frozenset(self._product_urls),
            total_urls_crawled=total_urls_crawled,
            start_time=self.start_time,
            end_time=end_time,
            duration=duration,
            crawl_health=health.snapshot(),
            state=state,
            abort_reason=abort_reason,
        )
        logger.info(
            "Crawler finished for %s (%s): %d product URLs, %d URLs crawled in %dms",
            self.domain, state.value, len(self._product_urls), total_urls_crawled, duration,
        )
        return self._result
