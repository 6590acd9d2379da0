from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
from pathlib import Path
import os
import json

from .version import CONFIG_SCHEMA_VERSION

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36"
)
HTTP_FETCHER = "product_crawler.fetchers.http_fetcher:HttpLinkFetcher"
BROWSER_FETCHER = "product_crawler.fetchers.browser_fetcher:BrowserLinkFetcher"

# Start with less aggressive sites first.
DEFAULT_DOMAINS = [
    "https://nykaafashion.com/",
    "https://www.westside.com/",
    "https://www.virgio.com/",
    "https://www.tatacliq.com/",
]


@dataclass
class CrawlConfig:
    """
    Canonical configuration object passed throughout the system.
    Durations are in seconds.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    domains: List[str] = field(default_factory=lambda: list(DEFAULT_DOMAINS))
    # Keep concurrency low to avoid rate limiting.
    concurrency: int = 1
    max_depth: int = 3
    # Politeness pause between batches.
    request_delay: float = 2.0
    request_timeout: float = 30.0
    max_urls_to_crawl: int = 1000
    user_agent: str = DEFAULT_USER_AGENT
    # Timeouts are retried with retry_backoff * 2**n seconds before retry n.
    max_timeout_retries: int = 2
    retry_backoff: float = 1.0
    max_network_errors: int = 8
    max_timeout_errors: int = 10
    max_blocked: int = 5
    # {domain substring: [path regex, ...]} added to the common product patterns.
    domain_patterns: Dict[str, List[str]] = field(default_factory=dict)
    use_headless_browser: bool = False
    # Dotted path for the fetcher; empty means pick from use_headless_browser.
    fetcher: str = ""
    exporter: str = "product_crawler.export.json_exporter:JSONExporter"
    output_dir: str = "output"
    log_dir: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def fetcher_path(self) -> str:
        if self.fetcher:
            return self.fetcher
        return BROWSER_FETCHER if self.use_headless_browser else HTTP_FETCHER

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        defaults = cls()
        domains = [d.strip() for d in _get("CRAWLER_DOMAINS", "").split(",") if d.strip()]

        return cls(
            domains=domains or defaults.domains,
            concurrency=int(_get("CRAWLER_CONCURRENCY", str(defaults.concurrency))),
            max_depth=int(_get("CRAWLER_MAX_DEPTH", str(defaults.max_depth))),
            request_delay=float(_get("CRAWLER_REQUEST_DELAY", str(defaults.request_delay))),
            request_timeout=float(_get("CRAWLER_REQUEST_TIMEOUT", str(defaults.request_timeout))),
            max_urls_to_crawl=int(_get("CRAWLER_MAX_URLS", str(defaults.max_urls_to_crawl))),
            user_agent=_get("CRAWLER_USER_AGENT", defaults.user_agent),
            use_headless_browser=_get("CRAWLER_HEADLESS", "0").lower() in ("1", "true", "yes"),
            fetcher=_get("CRAWLER_FETCHER", ""),
            exporter=_get("CRAWLER_EXPORTER", defaults.exporter),
            output_dir=_get("CRAWLER_OUTPUT_DIR", defaults.output_dir),
            log_dir=_get("CRAWLER_LOG_DIR", "") or None,
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Supports schema migration from older versions.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if not self.domains:
            raise ValueError("domains cannot be empty; provide at least one URL.")
        if self.concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.request_delay < 0:
            raise ValueError("request_delay must be >= 0")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be > 0")
        if self.max_urls_to_crawl < 1:
            raise ValueError("max_urls_to_crawl must be >= 1")
        if self.max_timeout_retries < 0:
            raise ValueError("max_timeout_retries must be >= 0")
        # Validate output dir exists or is creatable
        Path(self.output_dir).mkdir(parents=True, exist_ok=True)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    raw = dict(raw)
    schema = raw.get("schema_version", 1)

    if schema < 2:
        # v1 used the multi-site engine's names.
        if "start_urls" in raw:
            raw.setdefault("domains", raw.pop("start_urls"))
        if "max_concurrency" in raw:
            raw.setdefault("concurrency", raw.pop("max_concurrency"))
        if "retries" in raw:
            raw.setdefault("max_timeout_retries", raw.pop("retries"))
        for dropped in ("allowed_domains", "engine", "extra_adapters", "output_path", "keywords"):
            raw.pop(dropped, None)

    raw["schema_version"] = CONFIG_SCHEMA_VERSION
    return raw
