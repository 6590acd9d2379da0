from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List

from ..engines.aggregator import CrawlResult
from ..utils.urls import extract_hostname

logger = logging.getLogger(__name__)


class JSONExporter:
    """
    Writes two documents per domain:
    ``<host_with_underscores>.json`` with the full result, and
    ``<hostname>_product_urls.json`` with just the product URL list.
    Write failures propagate to the caller.
    """

    def export(self, result: CrawlResult, output_dir: str) -> List[str]:
        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        hostname = extract_hostname(result.domain) or result.domain.strip("/").replace("/", "_")

        result_path = out / f"{hostname.replace('.', '_')}.json"
        urls_path = out / f"{hostname}_product_urls.json"
        self._write(result_path, result.to_dict())
        self._write(urls_path, result.sorted_product_urls())

        logger.info("Results saved to %s and %s", result_path, urls_path)
        return [str(result_path), str(urls_path)]

    @staticmethod
    def _write(path: Path, payload: Any) -> None:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
