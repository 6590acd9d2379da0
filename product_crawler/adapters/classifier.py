from __future__ import annotations

from typing import Optional, Tuple

from .patterns import ProductUrlPattern
from .registry import PatternRegistry
from ..utils.urls import is_product_url


class ProductClassifier:
    """
    Decides whether a URL is a product detail page for one crawl.
    The pattern set is resolved once, at construction, from the registry.
    """

    def __init__(self, domain: str, registry: Optional[PatternRegistry] = None) -> None:
        self.domain = domain
        registry = registry or PatternRegistry()
        self._patterns: Tuple[ProductUrlPattern, ...] = tuple(registry.patterns_for(domain))

    def is_product(self, url: str) -> bool:
        return is_product_url(url, self._patterns)
