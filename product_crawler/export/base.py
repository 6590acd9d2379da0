from __future__ import annotations

from typing import List, Protocol

from ..engines.aggregator import CrawlResult


class Exporter(Protocol):
    def export(self, result: CrawlResult, output_dir: str) -> List[str]:
        """Persist one domain's result; return the written paths."""
        ...
