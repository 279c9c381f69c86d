"""
Health monitor type definitions.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class HealthCheckResult:
    """Outcome of one probe. Built once per tick and not retained."""
    target_url: str
    timestamp: datetime
    success: bool
    latency_ms: Optional[int] = None
    status_code: Optional[int] = None
    content_length: int = -1
    content_type: Optional[str] = None
    server_header: Optional[str] = None
    is_local: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class StatisticsSnapshot:
    """Consistent copy of the rolling counters at one instant."""
    total_checks: int
    total_latency_ms: int
    consecutive_failures: int

    @property
    def average_latency_ms(self) -> Optional[float]:
        """Latency sum over all checks, failures included. None before the first check."""
        if self.total_checks == 0:
            return None
        return self.total_latency_ms / self.total_checks

    @property
    def success_rate(self) -> Optional[float]:
        """
        ``(total - consecutive_failures) / total * 100``.

        Only failures in the current streak are subtracted, so any failure
        followed by a success stops counting. This is the figure the report
        has always shown, kept for compatibility; it is not the lifetime
        success rate.
        """
        if self.total_checks == 0:
            return None
        return (self.total_checks - self.consecutive_failures) / self.total_checks * 100
