from __future__ import annotations

from typing import Iterable, Optional
from urllib.parse import unquote_plus, urljoin, urlsplit, urlunsplit

# Substrings that mark a query parameter as tracking/analytics noise.
TRACKING_PARAMS = (
    "utm_",
    "ref",
    "affiliate",
    "track",
    "source",
    "campaign",
    "medium",
    "mc_",
    "_ga",
    "fbclid",
    "gclid",
    "msclkid",
    "zanpid",
    "cid",
    "sid",
)

# Generic identifiers that mark a path as a product detail page on most storefronts.
PRODUCT_IDENTIFIERS = ("product", "item", "pd", "details", "buy")


def _split(url: str):
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    if not parts.scheme or not parts.netloc:
        return None
    return parts


def is_valid_url(url: str) -> bool:
    """True for absolute URLs with both a scheme and a host."""
    return _split(url) is not None


def extract_hostname(url: str) -> str:
    parts = _split(url)
    if parts is None:
        return ""
    try:
        return parts.hostname or ""
    except ValueError:
        return ""


def normalize_url(url: str) -> str:
    """
    Canonical form used as the dedup key: lower-cased, fragment dropped,
    trailing slashes stripped. Unparsable input is returned unchanged.
    """
    parts = _split(url)
    if parts is None:
        return url
    normalized = urlunsplit((parts.scheme, parts.netloc, parts.path, parts.query, "")).lower()
    if not parts.query:
        normalized = normalized.rstrip("/")
    return normalized


def same_domain(url: str, base_domain: str) -> bool:
    """Compare hostnames only; scheme, port and path are ignored."""
    host = extract_hostname(url)
    base = extract_hostname(base_domain)
    return bool(host) and host == base


def resolve_url(relative_url: str, base_url: str) -> str:
    try:
        return urljoin(base_url, relative_url.strip())
    except ValueError:
        return relative_url


def is_tracking_param(name: str, tracking: Iterable[str] = TRACKING_PARAMS) -> bool:
    lowered = name.lower()
    return any(t in lowered for t in tracking)


def clean_url(url: str) -> str:
    """
    Drop tracking query parameters. Every other ``k=v`` segment is kept
    byte-for-byte, in its original order.
    """
    parts = _split(url)
    if parts is None or not parts.query:
        return url
    segments = parts.query.split("&")
    kept = [s for s in segments if not is_tracking_param(unquote_plus(s.partition("=")[0]))]
    if len(kept) == len(segments):
        return url
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "&".join(kept), parts.fragment))


def is_product_url(url: str, patterns: Optional[Iterable] = None) -> bool:
    """
    Pure check: the lower-cased path contains a generic product identifier,
    or matches any of ``patterns`` (objects exposing ``matches(path)``).
    """
    if not is_valid_url(url):
        return False
    path = urlsplit(url).path.lower()
    if any(ident in path for ident in PRODUCT_IDENTIFIERS):
        return True
    return any(p.matches(path) for p in (patterns or ()))


def ensure_scheme(url: str, default: str = "https") -> str:
    """Bare domains such as ``example.com`` become ``https://example.com``."""
    url = url.strip()
    if "://" in url:
        return url
    return f"{default}://{url}"
