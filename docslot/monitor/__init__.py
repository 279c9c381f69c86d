"""
docslot health monitoring.
"""

from .monitor import HealthMonitor, normalize_target
from .report import render_report
from .stats import RollingStatistics
from .types import HealthCheckResult, StatisticsSnapshot

__all__ = [
    "HealthMonitor",
    "HealthCheckResult",
    "RollingStatistics",
    "StatisticsSnapshot",
    "normalize_target",
    "render_report",
]
