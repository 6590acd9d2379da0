from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterator, List, Optional, Set


@dataclass(frozen=True)
class CrawlItem:
    url: str
    depth: int = 0
    parent_url: Optional[str] = None


class Frontier:
    """
    FIFO work queue. No dedup on push: items queued from concurrent fetches are
    filtered against the VisitedSet when a batch is dispatched.
    Shallower items are queued first, so dequeue order approximates BFS.
    """

    def __init__(self) -> None:
        self._queue: Deque[CrawlItem] = deque()

    def push(self, item: CrawlItem) -> None:
        self._queue.append(item)

    def take_batch(self, n: int) -> List[CrawlItem]:
        batch: List[CrawlItem] = []
        while self._queue and len(batch) < n:
            batch.append(self._queue.popleft())
        return batch

    def is_empty(self) -> bool:
        return not self._queue

    def __len__(self) -> int:
        return len(self._queue)


class VisitedSet:
    """Canonical URLs scheduled during one run. Grows monotonically."""

    def __init__(self) -> None:
        self._urls: Set[str] = set()

    def mark(self, canonical_url: str) -> bool:
        """Insert if absent. Returns True when the URL was not visited before."""
        if canonical_url in self._urls:
            return False
        self._urls.add(canonical_url)
        return True

    def __contains__(self, canonical_url: object) -> bool:
        return canonical_url in self._urls

    def __len__(self) -> int:
        return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        return iter(self._urls)
