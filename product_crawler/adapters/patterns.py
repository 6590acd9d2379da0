from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Pattern, Union


@dataclass(frozen=True)
class ProductUrlPattern:
    """
    A rule over a URL path. ``priority`` is kept for ranking/explainability;
    matching itself treats all patterns alike (any match suffices).
    """

    pattern: Pattern[str]
    priority: float = 1.0
    description: str = ""

    @classmethod
    def compile(cls, regex: Union[str, Pattern[str]], priority: float = 1.0, description: str = "") -> "ProductUrlPattern":
        if isinstance(regex, str):
            regex = re.compile(regex, re.IGNORECASE)
        return cls(pattern=regex, priority=priority, description=description or regex.pattern)

    def matches(self, path: str) -> bool:
        return self.pattern.search(path) is not None


COMMON_PRODUCT_PATTERNS: List[ProductUrlPattern] = [
    ProductUrlPattern.compile(r"/p(roducts?)/[\w-]+", 1, "Generic /product/ or /products/ prefix"),
    ProductUrlPattern.compile(r"/items?/[\w-]+", 1, "Generic /item/ or /items/ prefix"),
    ProductUrlPattern.compile(r"/dp/[a-z0-9]{10}", 1, "Amazon-style /dp/ ASIN"),
    ProductUrlPattern.compile(r"/[\w-]+/[\w-]+-p-\d+", 1, "Slug with -p-<id> suffix"),
    ProductUrlPattern.compile(r"/c(ategory)?/[\w-]+", 0.5, "Category pages with /c/ or /category/ prefix"),
    ProductUrlPattern.compile(r"/[\w-]+/[\w-]+/[\w-]+$", 0.4, "Three-level deep paths"),
]


def compile_patterns(regexes: Iterable[str], priority: float = 1.0) -> List[ProductUrlPattern]:
    return [ProductUrlPattern.compile(r, priority) for r in regexes]
