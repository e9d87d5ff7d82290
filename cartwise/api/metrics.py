"""Metrics service for tracking API performance.

Singleton service tracking recommendation calls and their latency, per
listing kind (personalized, popular, trending, new_arrivals, similar).
"""

import threading
from typing import Dict


class _LatencyStats:
    def __init__(self) -> None:
        self.count = 0
        self.empty_count = 0
        self.total_latency_ms = 0.0
        self.min_latency_ms = float("inf")
        self.max_latency_ms = 0.0

    def record(self, latency_ms: float, num_results: int) -> None:
        self.count += 1
        if num_results == 0:
            self.empty_count += 1
        self.total_latency_ms += latency_ms
        self.min_latency_ms = min(self.min_latency_ms, latency_ms)
        self.max_latency_ms = max(self.max_latency_ms, latency_ms)

    def as_dict(self) -> Dict:
        avg_latency = self.total_latency_ms / self.count if self.count > 0 else 0.0
        return {
            "count": self.count,
            "empty_count": self.empty_count,
            "average_latency_ms": round(avg_latency, 2),
            "min_latency_ms": (
                round(self.min_latency_ms, 2)
                if self.min_latency_ms != float("inf")
                else 0.0
            ),
            "max_latency_ms": round(self.max_latency_ms, 2),
        }


class MetricsService:
    """Singleton service for tracking API metrics.

    Thread-safe counters and latency tracking for recommendation calls.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._stats: Dict[str, _LatencyStats] = {}
        self._initialized = True

    def record_request(self, kind: str, latency_ms: float, num_results: int) -> None:
        """Record a recommendation call.

        Args:
            kind: Listing kind that was served
            latency_ms: Latency in milliseconds
            num_results: Number of products returned
        """
        with self._lock:
            self._stats.setdefault(kind, _LatencyStats()).record(latency_ms, num_results)

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with the total request count and, per listing kind,
            count, empty_count, average/min/max latency in milliseconds.
        """
        with self._lock:
            return {
                "request_count": sum(s.count for s in self._stats.values()),
                "by_kind": {kind: s.as_dict() for kind, s in sorted(self._stats.items())},
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._stats = {}


# Global singleton instance
metrics_service = MetricsService()
