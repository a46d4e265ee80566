"""
TableTalk Metrics Store.

In-process metrics collection for observability without external dependencies.
Tracks:
- Reasoning-service latencies (per intent, percentiles)
- Interpretation outcomes (parsed vs fallback, per intent) to monitor model compliance
- Error counts by code (TableTalkException.code)

Thread-safe via locks. Singleton pattern for global access.
"""

from __future__ import annotations

import statistics
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any


@dataclass
class IntentMetrics:
    """Metrics for a single model intent."""

    latencies_ms: list[float] = field(default_factory=list)
    error_counts: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    call_count: int = 0
    parsed_count: int = 0
    fallback_count: int = 0
    last_called: datetime | None = None

    # Keep last N latencies to avoid unbounded memory
    MAX_LATENCIES = 1000

    def record_latency(self, ms: float) -> None:
        self.latencies_ms.append(ms)
        if len(self.latencies_ms) > self.MAX_LATENCIES:
            self.latencies_ms = self.latencies_ms[-self.MAX_LATENCIES :]
        self.call_count += 1
        self.last_called = datetime.now(timezone.utc)

    def record_outcome(self, used_fallback: bool) -> None:
        if used_fallback:
            self.fallback_count += 1
        else:
            self.parsed_count += 1

    def record_error(self, code: str) -> None:
        self.error_counts[code] += 1

    def get_percentiles(self) -> dict[str, float]:
        if not self.latencies_ms:
            return {}
        sorted_latencies = sorted(self.latencies_ms)
        n = len(sorted_latencies)
        return {
            "p50_ms": sorted_latencies[int(n * 0.5)],
            "p90_ms": sorted_latencies[int(n * 0.9)],
            "p99_ms": sorted_latencies[int(n * 0.99)] if n > 1 else sorted_latencies[-1],
            "mean_ms": statistics.mean(sorted_latencies),
            "max_ms": max(sorted_latencies),
        }

    def to_dict(self) -> dict[str, Any]:
        interpreted = self.parsed_count + self.fallback_count
        return {
            "call_count": self.call_count,
            "last_called": self.last_called.isoformat() if self.last_called else None,
            **self.get_percentiles(),
            "parsed_count": self.parsed_count,
            "fallback_count": self.fallback_count,
            "fallback_rate": round(self.fallback_count / interpreted, 3) if interpreted else 0.0,
            "errors": dict(self.error_counts),
        }


class MetricsStore:
    """
    Central metrics store for TableTalk observability.

    Thread-safe singleton for collecting metrics across the application.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._intents: dict[str, IntentMetrics] = defaultdict(IntentMetrics)
        self._global_errors: dict[str, int] = defaultdict(int)
        self._started_at = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Intent Metrics
    # -------------------------------------------------------------------------

    def record_latency(self, intent: str, ms: float) -> None:
        """Record a reasoning-service round trip."""
        with self._lock:
            self._intents[intent].record_latency(ms)

    def record_interpretation(self, intent: str, used_fallback: bool) -> None:
        """Record whether the model output honoured the contract."""
        with self._lock:
            self._intents[intent].record_outcome(used_fallback)

    def record_intent_error(self, intent: str, code: str) -> None:
        """Record an error for a specific intent."""
        with self._lock:
            self._intents[intent].record_error(code)

    # -------------------------------------------------------------------------
    # Global Errors
    # -------------------------------------------------------------------------

    def record_error(self, code: str) -> None:
        """Record an error that reached the API boundary."""
        with self._lock:
            self._global_errors[code] += 1

    # -------------------------------------------------------------------------
    # Summary / Export
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of all metrics.

        Returns a dict suitable for JSON serialization and /metrics endpoint.
        """
        with self._lock:
            now = datetime.now(timezone.utc)
            uptime_seconds = (now - self._started_at).total_seconds()
            return {
                "uptime_seconds": round(uptime_seconds, 1),
                "collected_at": now.isoformat(),
                "intents": {name: metrics.to_dict() for name, metrics in self._intents.items()},
                "global_errors": dict(self._global_errors),
            }

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        with self._lock:
            self._intents.clear()
            self._global_errors.clear()
            self._started_at = datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Singleton accessor
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_metrics_store() -> MetricsStore:
    """Get the global MetricsStore singleton."""
    return MetricsStore()
