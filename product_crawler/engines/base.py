from __future__ import annotations

import enum
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .aggregator import CrawlResult


class CrawlState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle for one domain.
    """

    @abstractmethod
    async def crawl(self) -> "CrawlResult":  # pragma: no cover - interface
        ...
