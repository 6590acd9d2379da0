from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .aggregator import CrawlResult, ResultAggregator
from .base import CrawlEngine, CrawlState
from .frontier import CrawlItem, Frontier, VisitedSet
from .health import CrawlHealth, HaltThresholds
from ..adapters.classifier import ProductClassifier
from ..adapters.registry import PatternRegistry, build_registry
from ..config import CrawlConfig
from ..fetchers.base import FailureKind, LinkFetcher, classify_failure
from ..utils.loader import load_symbol
from ..utils.urls import clean_url, ensure_scheme, normalize_url, resolve_url, same_domain

logger = logging.getLogger(__name__)


@dataclass
class _ItemOutcome:
    item: CrawlItem
    # None when the item was not fetched (depth bound) or every attempt failed.
    links: Optional[List[str]] = None
    failures: List[Tuple[FailureKind, str]] = field(default_factory=list)


class BatchCrawlEngine(CrawlEngine):
    """
    Breadth-limited crawl of a single domain.

    The frontier is drained in batches of ``config.concurrency`` items. Every item
    in a batch is marked visited before its fetch is dispatched, fetches run
    concurrently, and all shared state (visited set, frontier, health counters,
    product URLs) is updated only after the whole batch has been joined. Health
    thresholds are checked between batches; in-flight fetches are never cancelled.

    One instance crawls once.
    """

    def __init__(
        self,
        domain: str,
        config: CrawlConfig,
        fetcher: Optional[LinkFetcher] = None,
        registry: Optional[PatternRegistry] = None,
    ) -> None:
        self.domain = ensure_scheme(domain)
        self.config = config
        self._fetcher = fetcher
        if registry is None:
            registry = build_registry(config.domain_patterns)
        self.classifier = ProductClassifier(self.domain, registry)
        self.thresholds = HaltThresholds(
            max_network_errors=config.max_network_errors,
            max_timeout_errors=config.max_timeout_errors,
            max_blocked=config.max_blocked,
        )
        self.state = CrawlState.IDLE
        self.frontier = Frontier()
        self.visited = VisitedSet()
        self.health = CrawlHealth()
        self._aggregator: Optional[ResultAggregator] = None

    async def crawl(self) -> CrawlResult:
        if self.state is not CrawlState.IDLE:
            raise RuntimeError(f"crawl of {self.domain} already started")

        self._aggregator = ResultAggregator(self.domain)
        self.state = CrawlState.RUNNING
        logger.info("Starting crawler for domain: %s", self.domain)
        self.frontier.push(CrawlItem(url=self.domain, depth=0))

        abort_reason: Optional[str] = None
        try:
            fetcher = self._fetcher or load_symbol(self.config.fetcher_path)(self.config)
            async with fetcher:
                abort_reason = await self._run(fetcher)
        except Exception as exc:
            logger.exception("Crawl of %s stopped by an unexpected error", self.domain)
            self.health.last_error = f"{type(exc).__name__}: {exc}"
            abort_reason = f"unrecovered error: {exc!r}"

        self.state = CrawlState.ABORTED if abort_reason else CrawlState.COMPLETED
        return self._aggregator.finalize(len(self.visited), self.health, self.state, abort_reason)

    # ---- Loop ---------------------------------------------------------------

    async def _run(self, fetcher: LinkFetcher) -> Optional[str]:
        """Drain the frontier. Returns the halt reason if a health threshold tripped."""
        cfg = self.config
        while not self.frontier.is_empty() and len(self.visited) < cfg.max_urls_to_crawl:
            reason = self._halt_reason()
            if reason:
                return reason

            batch = self._claim(self.frontier.take_batch(cfg.concurrency))
            if not batch:
                continue

            outcomes = await asyncio.gather(*(self._process(fetcher, item) for item in batch))
            for outcome in outcomes:
                self._apply(outcome)

            if cfg.request_delay > 0 and not self.frontier.is_empty() and len(self.visited) < cfg.max_urls_to_crawl:
                await asyncio.sleep(cfg.request_delay)
        # The final batch can saturate a counter too.
        return self._halt_reason()

    def _halt_reason(self) -> Optional[str]:
        reason = self.thresholds.halt_reason(self.health)
        if reason:
            logger.warning("Aborting crawl of %s: %s", self.domain, reason)
        return reason

    def _claim(self, items: List[CrawlItem]) -> List[CrawlItem]:
        """Mark items visited before dispatch; drop duplicates and anything past the URL cap."""
        claimed: List[CrawlItem] = []
        for item in items:
            if len(self.visited) >= self.config.max_urls_to_crawl:
                break
            if not self.visited.mark(normalize_url(item.url)):
                logger.debug("Already visited: %s", item.url)
                continue
            claimed.append(item)
        return claimed

    async def _process(self, fetcher: LinkFetcher, item: CrawlItem) -> _ItemOutcome:
        """Fetch one item's links, retrying timeouts with exponential backoff. Never raises."""
        outcome = _ItemOutcome(item)
        logger.debug("Processing URL: %s (depth: %d)", item.url, item.depth)
        if item.depth >= self.config.max_depth:
            return outcome

        retries = 0
        while True:
            try:
                outcome.links = await fetcher.fetch_links(item.url)
                return outcome
            except Exception as exc:
                kind = classify_failure(exc)
                outcome.failures.append((kind, f"{item.url}: {exc}"))
                if kind is not FailureKind.TIMEOUT or retries >= self.config.max_timeout_retries:
                    return outcome
                delay = self.config.retry_backoff * (2 ** retries)
                retries += 1
                logger.info(
                    "Timeout on %s, retry %d/%d in %.1fs",
                    item.url, retries, self.config.max_timeout_retries, delay,
                )
                await asyncio.sleep(delay)

    def _apply(self, outcome: _ItemOutcome) -> None:
        item = outcome.item
        # Classification comes first and applies to every item, including the seed
        # and items at the depth bound.
        if self.classifier.is_product(item.url) and self._aggregator.add_product(item.url):
            logger.info("Found product URL: %s", item.url)

        for kind, message in outcome.failures:
            self.health.record_failure(kind, message)
            logger.warning("Fetch failed (%s): %s", kind.value, message)

        if outcome.links is None:
            return
        self.health.record_success(item.url)

        queued = 0
        for link in outcome.links:
            if self._enqueue(link, item):
                queued += 1
        logger.debug("Queued %d of %d links from %s", queued, len(outcome.links), item.url)

    def _enqueue(self, link: str, parent: CrawlItem) -> bool:
        absolute = clean_url(resolve_url(link, parent.url))
        if not same_domain(absolute, self.domain):
            return False
        canonical = normalize_url(absolute)
        if canonical in self.visited:
            return False
        self.frontier.push(CrawlItem(url=canonical, depth=parent.depth + 1, parent_url=parent.url))
        return True
