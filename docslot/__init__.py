"""
docslot - embeddable single-document HTTP server

Serves one mutable HTML document (plus static files beside it), lets
clients replace it with a multipart upload, and watches a target's
availability from a background health monitor.

Features:
- Static file server with a fixed suffix to MIME table
- POST /upload document swap with deferred server restart
- Fixed-rate health monitor with rolling latency statistics
- server.conf configuration, companion script runner, operator shell
"""

__version__ = "0.1.0"

from .exceptions import (
    DocslotError,
    StartupError,
    RequestInputError,
    SwapFailure,
    SwapWriteError,
    SwapDeleteError,
    SwapRenameError,
    ProbeFailure,
    ConfigError,
    ScriptError,
)
from .http import Server, Request, Response, DocumentSlot, UploadHandler
from .monitor import HealthMonitor, HealthCheckResult, RollingStatistics
from .config import ConfigManager, ServerConfig
from .runner import ScriptRunner


# Export main classes and functions
__all__ = [
    '__version__',
    'Server',
    'Request',
    'Response',
    'DocumentSlot',
    'UploadHandler',
    'HealthMonitor',
    'HealthCheckResult',
    'RollingStatistics',
    'ConfigManager',
    'ServerConfig',
    'ScriptRunner',
    # Errors
    'DocslotError',
    'StartupError',
    'RequestInputError',
    'SwapFailure',
    'SwapWriteError',
    'SwapDeleteError',
    'SwapRenameError',
    'ProbeFailure',
    'ConfigError',
    'ScriptError',
]
