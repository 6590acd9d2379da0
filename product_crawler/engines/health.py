from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from ..fetchers.base import FailureKind


@dataclass
class CrawlHealth:
    """Run-scoped failure counters. Only the engine's control loop mutates these."""

    timeout_errors: int = 0
    network_errors: int = 0
    blocked_count: int = 0
    other_errors: int = 0
    last_error: Optional[str] = None
    last_successful_url: Optional[str] = None

    def record_failure(self, kind: FailureKind, message: str) -> None:
        if kind is FailureKind.TIMEOUT:
            self.timeout_errors += 1
        elif kind is FailureKind.NETWORK:
            self.network_errors += 1
        elif kind is FailureKind.BLOCKED:
            self.blocked_count += 1
        else:
            self.other_errors += 1
        self.last_error = message

    def record_success(self, url: str) -> None:
        self.last_successful_url = url

    def snapshot(self) -> "HealthSnapshot":
        return HealthSnapshot(**asdict(self))

    def to_dict(self) -> Dict[str, Any]:
        return self.snapshot().to_dict()


@dataclass(frozen=True)
class HealthSnapshot:
    """Read-only copy of the counters, as frozen into a CrawlResult."""

    timeout_errors: int = 0
    network_errors: int = 0
    blocked_count: int = 0
    other_errors: int = 0
    last_error: Optional[str] = None
    last_successful_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        return {
            "timeoutErrors": d["timeout_errors"],
            "networkErrors": d["network_errors"],
            "blockedCount": d["blocked_count"],
            "otherErrors": d["other_errors"],
            "lastError": d["last_error"],
            "lastSuccessfulUrl": d["last_successful_url"],
        }


@dataclass(frozen=True)
class HaltThresholds:
    max_network_errors: int = 8
    max_timeout_errors: int = 10
    max_blocked: int = 5

    def halt_reason(self, health: CrawlHealth) -> Optional[str]:
        """Name of the first saturated counter, or None while the crawl is healthy."""
        if health.network_errors >= self.max_network_errors:
            return f"network_errors={health.network_errors} >= {self.max_network_errors}"
        if health.timeout_errors >= self.max_timeout_errors:
            return f"timeout_errors={health.timeout_errors} >= {self.max_timeout_errors}"
        if health.blocked_count >= self.max_blocked:
            return f"blocked_count={health.blocked_count} >= {self.max_blocked}"
        return None
