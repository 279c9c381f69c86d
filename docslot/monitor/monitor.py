"""
Health monitor

Probes an HTTP target on a fixed 5 second rate from a single worker
thread and folds each outcome into rolling statistics.
"""

import logging
import threading
import time
from datetime import datetime
from typing import Callable, Optional, Union

import requests

from ..exceptions import ProbeFailure
from .report import render_report
from .stats import RollingStatistics
from .types import HealthCheckResult

logger = logging.getLogger(__name__)

CHECK_INTERVAL_SECS = 5.0
CONNECT_TIMEOUT_SECS = 5.0
READ_TIMEOUT_SECS = 5.0
STOP_JOIN_TIMEOUT_SECS = 3.0
USER_AGENT = "WebServerMonitor/1.0"

TargetSource = Union[str, Callable[[], str], None]


def normalize_target(target: str) -> str:
    """Prefix ``http://`` when the target carries no http(s) scheme."""
    if not target.startswith("http://") and not target.startswith("https://"):
        return "http://" + target
    return target


class HealthMonitor:
    """
    Periodic availability and latency probe.

    Stopped -> start() -> Running -> stop() -> Stopped. ``start`` and
    ``stop`` are no-ops when already in the target state.

    Statistics belong to a monitoring session. ``start`` from Stopped opens
    a new session and zeroes them; ``restart`` keeps them.
    """

    def __init__(
        self,
        server=None,
        target: TargetSource = None,
        interval: float = CHECK_INTERVAL_SECS,
        connect_timeout: float = CONNECT_TIMEOUT_SECS,
        read_timeout: float = READ_TIMEOUT_SECS,
        report_sink: Optional[Callable[[str], None]] = None,
    ):
        """
        Create a health monitor.

        Args:
            server: Local docslot Server, probed when no target is configured
            target: Fixed target, or a callable read on every tick so
                configuration changes apply without a restart
            interval: Seconds between tick starts
            connect_timeout: Probe connect timeout in seconds
            read_timeout: Probe read timeout in seconds
            report_sink: Receives each rendered report (default: log at INFO)
        """
        self.server = server
        self._target = target
        self.interval = interval
        self.connect_timeout = connect_timeout
        self.read_timeout = read_timeout
        self.report_sink = report_sink or logger.info
        self.statistics = RollingStatistics()

        self._monitoring = False
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None
        self._lifecycle_lock = threading.RLock()

    # -- lifecycle ---------------------------------------------------------

    def start(self, reset_statistics: bool = True) -> None:
        """Start ticking immediately, then every ``interval`` seconds."""
        with self._lifecycle_lock:
            if self._monitoring:
                logger.info("Web status monitor is already running")
                return

            if reset_statistics:
                self.statistics.reset()

            self._monitoring = True
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="docslot-monitor",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Web status monitor started (interval: {self.interval:g}s)")

    def stop(self) -> None:
        """
        Stop ticking. Waits up to 3 seconds for an in-flight probe; a probe
        still running after that is left to finish on its own and its
        result is discarded.
        """
        with self._lifecycle_lock:
            if not self._monitoring:
                return
            self._monitoring = False
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            if thread is not None:
                thread.join(STOP_JOIN_TIMEOUT_SECS)
                if thread.is_alive():
                    logger.warning("Monitor probe still in flight after stop timeout")
        logger.info("Web status monitor stopped")

    def restart(self) -> None:
        """Stop then start, keeping the current statistics."""
        logger.info("Restarting web status monitor...")
        with self._lifecycle_lock:
            self.stop()
            self.start(reset_statistics=False)

    def is_monitoring(self) -> bool:
        return self._monitoring

    def _run(self, stop_event: threading.Event) -> None:
        next_run = time.monotonic()
        while not stop_event.is_set():
            try:
                self.check(stop_event)
            except Exception:
                logger.exception("Health check tick failed")

            next_run += self.interval
            delay = next_run - time.monotonic()
            if delay < 0:
                # Overran the period: run again right away, no catch-up burst
                next_run = time.monotonic()
                delay = 0
            if stop_event.wait(delay):
                break

    # -- probing -----------------------------------------------------------

    def resolve_target(self) -> tuple:
        """
        Returns:
            (url, is_local). The local server is used when no target is set.
        """
        configured = self._target() if callable(self._target) else self._target
        configured = (configured or "").strip()
        if not configured:
            if self.server is None:
                raise ValueError("No monitor target configured and no local server to probe")
            return f"http://{self.server.local_ip}:{self.server.get_port()}", True
        return normalize_target(configured), False

    def probe(self, url: str) -> requests.Response:
        """
        Issue one GET. Returns once the status line and headers are in.

        Raises:
            ProbeFailure: Timeout, refused connection, DNS failure, bad URL.
        """
        try:
            response = requests.get(
                url,
                headers={"User-Agent": USER_AGENT},
                timeout=(self.connect_timeout, self.read_timeout),
                stream=True,
            )
        except requests.RequestException as e:
            raise ProbeFailure(f"Unable to reach {url}", detail=str(e)) from e
        response.close()
        return response

    def check(self, stop_event: Optional[threading.Event] = None) -> Optional[HealthCheckResult]:
        """
        Run one tick: probe, update statistics, emit the report.

        Args:
            stop_event: Stop flag of the calling worker. A probe that
                completes after it is set belongs to a stopped session and
                is dropped without touching the statistics.

        Returns:
            The check result, or None if it was dropped.
        """
        url, is_local = self.resolve_target()
        timestamp = datetime.now()

        start = time.perf_counter()
        response = None
        error = None
        try:
            response = self.probe(url)
        except ProbeFailure as e:
            logger.debug(f"Probe failed: {e.message} ({e.detail})")
            error = e.detail
        latency_ms = int((time.perf_counter() - start) * 1000)

        if stop_event is not None and stop_event.is_set():
            logger.debug(f"Dropping check of {url}: monitor stopped while it was in flight")
            return None

        if response is None:
            stats = self.statistics.record_failure()
            result = HealthCheckResult(
                target_url=url,
                timestamp=timestamp,
                success=False,
                is_local=is_local,
                error=error,
            )
        else:
            stats = self.statistics.record_success(latency_ms)
            result = HealthCheckResult(
                target_url=url,
                timestamp=timestamp,
                success=True,
                latency_ms=latency_ms,
                status_code=response.status_code,
                content_length=_content_length(response),
                content_type=response.headers.get("Content-Type"),
                server_header=response.headers.get("Server"),
                is_local=is_local,
            )

        self.report_sink(render_report(result, stats))
        return result

    def __repr__(self) -> str:
        return f"HealthMonitor(monitoring={self._monitoring}, statistics={self.statistics!r})"


def _content_length(response: requests.Response) -> int:
    try:
        return int(response.headers.get("Content-Length", -1))
    except ValueError:
        return -1
