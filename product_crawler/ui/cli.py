from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List

from ..config import CrawlConfig
from ..engines.aggregator import CrawlResult
from ..engines.batch_engine import BatchCrawlEngine
from ..export.base import Exporter
from ..utils.loader import load_symbol
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Discover product page URLs on e-commerce sites")
    p.add_argument("domains", nargs="*", help="Seed URLs or bare domains (space-separated)")
    p.add_argument("--config", type=str, help="Path to config JSON", default=None)
    p.add_argument("--max-depth", type=int, default=None, help="Max crawl depth (default from config)")
    p.add_argument("--concurrency", type=int, default=None, help="Fetches per batch (default from config)")
    p.add_argument("--max-urls", type=int, default=None, help="Stop after this many URLs per domain")
    p.add_argument("--request-delay", type=float, default=None, help="Seconds to pause between batches")
    p.add_argument("--timeout", type=float, default=None, help="Per-request timeout in seconds")
    p.add_argument("--headless", action="store_true", help="Render pages with a headless browser")
    p.add_argument("--fetcher", type=str, default=None, help="Fetcher dotted path (module:ClassName)")
    p.add_argument("--exporter", type=str, default=None, help="Exporter dotted path (module:ClassName)")
    p.add_argument("--output-dir", type=str, default=None, help="Directory for result files")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    p.add_argument("--log-dir", type=str, default=None, help="Also write rotating log files here")
    return p


def _load_config(args: argparse.Namespace) -> CrawlConfig:
    if args.config:
        cfg = CrawlConfig.from_file(args.config)
    else:
        cfg = CrawlConfig.from_env()

    if args.domains:
        cfg.domains = list(args.domains)
    if args.max_depth is not None:
        cfg.max_depth = args.max_depth
    if args.concurrency is not None:
        cfg.concurrency = args.concurrency
    if args.max_urls is not None:
        cfg.max_urls_to_crawl = args.max_urls
    if args.request_delay is not None:
        cfg.request_delay = args.request_delay
    if args.timeout is not None:
        cfg.request_timeout = args.timeout
    if args.headless:
        cfg.use_headless_browser = True
    if args.fetcher:
        cfg.fetcher = args.fetcher
    if args.exporter:
        cfg.exporter = args.exporter
    if args.output_dir:
        cfg.output_dir = args.output_dir
    if args.log_dir:
        cfg.log_dir = args.log_dir

    cfg.validate()
    return cfg


def crawl_domain(domain: str, cfg: CrawlConfig) -> CrawlResult:
    engine = BatchCrawlEngine(domain, cfg)
    return asyncio.run(engine.crawl())


def run_cli(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    try:
        cfg = _load_config(args)
    except (ValueError, TypeError) as exc:
        parser.error(str(exc))

    setup_logging(args.log_level, cfg.log_dir)

    # Dynamic exporter loading so output formats can be swapped from config.
    exporter: Exporter = load_symbol(cfg.exporter)()

    aborted = 0
    for domain in cfg.domains:
        result = crawl_domain(domain, cfg)
        exporter.export(result, cfg.output_dir)
        if result.aborted:
            aborted += 1
            logger.warning("Crawl of %s aborted early: %s", domain, result.abort_reason)

    logger.info("Crawled %d domain(s), %d aborted early | Output: %s", len(cfg.domains), aborted, cfg.output_dir)
    return 0


def main() -> int:
    # Console-script entry point: delegate to the CLI layer.
    return run_cli(sys.argv[1:])
