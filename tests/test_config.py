import json

import pytest

from product_crawler.config import BROWSER_FETCHER, DEFAULT_DOMAINS, HTTP_FETCHER, CrawlConfig, migrate_config
from product_crawler.version import CONFIG_SCHEMA_VERSION


@pytest.fixture
def clean_env(monkeypatch):
    for name in ("CRAWLER_DOMAINS", "CRAWLER_CONCURRENCY", "CRAWLER_MAX_DEPTH", "CRAWLER_REQUEST_DELAY",
                 "CRAWLER_REQUEST_TIMEOUT", "CRAWLER_MAX_URLS", "CRAWLER_USER_AGENT", "CRAWLER_HEADLESS",
                 "CRAWLER_FETCHER", "CRAWLER_EXPORTER", "CRAWLER_OUTPUT_DIR", "CRAWLER_LOG_DIR"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults():
    cfg = CrawlConfig()
    assert cfg.domains == DEFAULT_DOMAINS
    assert (cfg.concurrency, cfg.max_depth, cfg.max_timeout_retries) == (1, 3, 2)
    assert (cfg.max_network_errors, cfg.max_timeout_errors, cfg.max_blocked) == (8, 10, 5)
    assert cfg.fetcher_path == HTTP_FETCHER


def test_from_env(clean_env):
    clean_env.setenv("CRAWLER_DOMAINS", "a.com, https://b.com/")
    clean_env.setenv("CRAWLER_CONCURRENCY", "3")
    clean_env.setenv("CRAWLER_REQUEST_DELAY", "0.5")
    clean_env.setenv("CRAWLER_HEADLESS", "true")

    cfg = CrawlConfig.from_env()

    assert cfg.domains == ["a.com", "https://b.com/"]
    assert cfg.concurrency == 3
    assert cfg.request_delay == 0.5
    assert cfg.fetcher_path == BROWSER_FETCHER


def test_from_env_defaults(clean_env):
    cfg = CrawlConfig.from_env()
    assert cfg.domains == DEFAULT_DOMAINS
    assert cfg.log_dir is None


def test_explicit_fetcher_wins():
    cfg = CrawlConfig(use_headless_browser=True, fetcher="my.module:Fetcher")
    assert cfg.fetcher_path == "my.module:Fetcher"


def test_from_file_migrates_v1(tmp_path):
    path = tmp_path / "cfg.json"
    path.write_text(json.dumps({
        "start_urls": ["https://www.virgio.com/"],
        "max_concurrency": 4,
        "retries": 1,
        "engine": "engines.simple_engine:SimpleCrawlEngine",
        "output_path": "output/product_urls.json",
    }))

    cfg = CrawlConfig.from_file(path)

    assert cfg.domains == ["https://www.virgio.com/"]
    assert cfg.concurrency == 4
    assert cfg.max_timeout_retries == 1
    assert cfg.schema_version == CONFIG_SCHEMA_VERSION


def test_migrate_keeps_current_schema_untouched():
    raw = {"schema_version": CONFIG_SCHEMA_VERSION, "domains": ["https://a.com"], "domain_patterns": {"a": ["/x"]}}
    assert migrate_config(raw) == raw


@pytest.mark.parametrize("field, value", [
    ("domains", []),
    ("concurrency", 0),
    ("max_depth", -1),
    ("request_delay", -0.1),
    ("request_timeout", 0),
    ("max_urls_to_crawl", 0),
    ("max_timeout_retries", -1),
])
def test_validate_rejects(tmp_path, field, value):
    cfg = CrawlConfig(output_dir=str(tmp_path / "out"))
    setattr(cfg, field, value)
    with pytest.raises(ValueError):
        cfg.validate()


def test_validate_creates_output_dir(tmp_path):
    cfg = CrawlConfig(output_dir=str(tmp_path / "nested" / "out"))
    cfg.validate()
    assert (tmp_path / "nested" / "out").is_dir()
