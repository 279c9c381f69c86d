"""Human-readable rendering of a health check and the running totals."""

from http import HTTPStatus
from typing import List

from .types import HealthCheckResult, StatisticsSnapshot

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def status_text(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown"


def format_size(num_bytes: int) -> str:
    """Render a byte count as B, KB or MB."""
    if num_bytes < 1024:
        return f"{num_bytes} B"
    if num_bytes < 1024 * 1024:
        return f"{num_bytes / 1024:.2f} KB"
    return f"{num_bytes / (1024 * 1024):.2f} MB"


def render_report(result: HealthCheckResult, stats: StatisticsSnapshot) -> str:
    """
    Build the report block for one tick.

    Args:
        result: Outcome of the tick being reported
        stats: Totals taken right after ``result`` was recorded

    Returns:
        Multi-line report text
    """
    lines: List[str] = ["=== Web Status Report ==="]
    lines.append(f"Time: {result.timestamp.strftime(TIMESTAMP_FORMAT)}")
    target = f"Target: {result.target_url}"
    if result.is_local:
        target += " (local server)"
    lines.append(target)

    if result.success:
        lines.append("Status: OK")
        lines.append(f"Response code: {result.status_code} {status_text(result.status_code)}")
        lines.append(f"Response time: {result.latency_ms}ms")
        if result.content_length >= 0:
            lines.append(f"Content length: {format_size(result.content_length)}")
        if result.content_type is not None:
            lines.append(f"Content type: {result.content_type}")
        if result.server_header is not None:
            lines.append(f"Server: {result.server_header}")
    else:
        lines.append("Status: DOWN")
        lines.append("Error: connection failed or timed out")
        lines.append(f"Consecutive failures: {stats.consecutive_failures}")

    if stats.total_checks > 0:
        lines.append("--- Statistics ---")
        lines.append(f"Total checks: {stats.total_checks}")
        lines.append(f"Average response time: {stats.average_latency_ms:.2f}ms")
        lines.append(f"Success rate: {stats.success_rate:.2f}%")

    lines.append("=" * 25)
    return "\n".join(lines)


__all__ = ["format_size", "render_report", "status_text"]
