from __future__ import annotations

import logging
from importlib import metadata
from typing import Dict, Iterable, List, Mapping, Optional

from .patterns import COMMON_PRODUCT_PATTERNS, ProductUrlPattern, compile_patterns

logger = logging.getLogger(__name__)


class PatternRegistry:
    """
    Registry of product URL patterns: the common set plus extra patterns keyed
    by a domain substring (e.g. ``"myntra"`` or ``"www.tatacliq.com"``).
    Supports built-ins, config-defined regexes, and entry-point plugins.
    """

    def __init__(self, common: Optional[Iterable[ProductUrlPattern]] = None) -> None:
        self._common: List[ProductUrlPattern] = list(COMMON_PRODUCT_PATTERNS if common is None else common)
        self._by_domain: Dict[str, List[ProductUrlPattern]] = {}

    # ---- Introspection / Management ----

    def register(self, domain_substring: str, patterns: Iterable[ProductUrlPattern]) -> None:
        self._by_domain.setdefault(domain_substring.lower(), []).extend(patterns)

    def register_regexes(self, mapping: Mapping[str, Iterable[str]]) -> None:
        for domain_substring, regexes in mapping.items():
            self.register(domain_substring, compile_patterns(regexes))

    @property
    def common(self) -> List[ProductUrlPattern]:
        return list(self._common)

    def patterns_for(self, domain: str) -> List[ProductUrlPattern]:
        """Common patterns followed by every domain-specific set whose key occurs in ``domain``."""
        domain = domain.lower()
        out = list(self._common)
        for key, patterns in self._by_domain.items():
            if key in domain:
                out.extend(patterns)
        return out

    # ---- Discovery ----

    def discover_entry_points(self, group: str = "product_crawler.patterns") -> int:
        """
        Discover third-party pattern sets installed as entry points.
        Each entry point loads to a mapping ``{domain_substring: [regex or ProductUrlPattern, ...]}``.
        Returns count of newly registered domain keys.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                mapping = ep.load()
            except Exception as exc:
                logger.warning("Failed to load pattern plugin %s: %r", ep.name, exc)
                continue
            for domain_substring, items in mapping.items():
                patterns = [p if isinstance(p, ProductUrlPattern) else ProductUrlPattern.compile(p) for p in items]
                self.register(domain_substring, patterns)
                added += 1
        return added


def build_registry(domain_patterns: Optional[Mapping[str, Iterable[str]]] = None, discover: bool = True) -> PatternRegistry:
    """Registry with the common patterns, installed plugins, and config-defined regexes."""
    registry = PatternRegistry()
    if discover:
        registry.discover_entry_points()
    if domain_patterns:
        registry.register_regexes(domain_patterns)
    return registry
