"""pytest configuration and fixtures shared by the docslot tests."""

import time
from pathlib import Path

import pytest
import requests

from docslot.http import DocumentSlot, Server


DOCUMENT_BODY = b"<!DOCTYPE html><html><body>original</body></html>"


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: test binds a real loopback socket"
    )


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll ``predicate`` until it returns truthy or ``timeout`` elapses."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return bool(predicate())


def get_when_ready(url: str, timeout: float = 5.0) -> requests.Response:
    """GET ``url``, retrying while the listener is down (e.g. mid-restart)."""
    deadline = time.monotonic() + timeout
    while True:
        try:
            return requests.get(url, timeout=2)
        except requests.ConnectionError:
            if time.monotonic() > deadline:
                raise
            time.sleep(0.05)


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Working directory holding the served document."""
    (tmp_path / "index.html").write_bytes(DOCUMENT_BODY)
    return tmp_path


@pytest.fixture
def slot(site: Path) -> DocumentSlot:
    return DocumentSlot(site / "index.html")


@pytest.fixture
def server(site: Path, slot: DocumentSlot):
    """Running server on an ephemeral loopback port.

    Yields:
        Started Server; stopped on teardown.
    """
    srv = Server(
        port=0,
        host="127.0.0.1",
        root=site,
        slot=slot,
        restart_delay=0.05,
        local_ip="127.0.0.1",
    )
    assert srv.start()
    yield srv
    srv.stop()


@pytest.fixture
def base_url(server: Server) -> str:
    return f"http://127.0.0.1:{server.get_port()}"
