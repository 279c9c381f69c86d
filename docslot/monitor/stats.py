"""Rolling health statistics shared between the monitor thread and readers."""

import threading

from .types import StatisticsSnapshot


class RollingStatistics:
    """Check count, latency sum and current failure streak under one lock."""

    def __init__(self):
        self._lock = threading.Lock()
        self._total_checks = 0
        self._total_latency_ms = 0
        self._consecutive_failures = 0

    def record_success(self, latency_ms: int) -> StatisticsSnapshot:
        with self._lock:
            self._total_checks += 1
            self._total_latency_ms += latency_ms
            self._consecutive_failures = 0
            return self._snapshot()

    def record_failure(self) -> StatisticsSnapshot:
        with self._lock:
            self._total_checks += 1
            self._consecutive_failures += 1
            return self._snapshot()

    def reset(self) -> None:
        with self._lock:
            self._total_checks = 0
            self._total_latency_ms = 0
            self._consecutive_failures = 0

    def snapshot(self) -> StatisticsSnapshot:
        with self._lock:
            return self._snapshot()

    def _snapshot(self) -> StatisticsSnapshot:
        return StatisticsSnapshot(
            total_checks=self._total_checks,
            total_latency_ms=self._total_latency_ms,
            consecutive_failures=self._consecutive_failures,
        )

    @property
    def total_checks(self) -> int:
        return self.snapshot().total_checks

    @property
    def consecutive_failures(self) -> int:
        return self.snapshot().consecutive_failures

    def __repr__(self) -> str:
        snap = self.snapshot()
        return (
            f"RollingStatistics(total_checks={snap.total_checks}, "
            f"total_latency_ms={snap.total_latency_ms}, "
            f"consecutive_failures={snap.consecutive_failures})"
        )
