"""
HTTP Server

Static file server for the Document Slot and its working directory, plus
the upload route. Built on the standard library's threading HTTP server:
one thread per connection, no shared per-request state.
"""

import logging
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple, Union
from urllib.parse import unquote

from ..exceptions import StartupError
from .document import DEFAULT_DOCUMENT, DocumentSlot
from .mime import get_mime_type
from .request import Request
from .response import Response, Status
from .upload import RESTART_DELAY_SECS, UPLOAD_PATH, UploadHandler

logger = logging.getLogger(__name__)

DEFAULT_PORT = 11000
NOT_FOUND_BODY = "404 - File not found"


def detect_local_ip() -> str:
    """Best-effort LAN address of this host, 127.0.0.1 if it cannot be resolved."""
    try:
        return socket.gethostbyname(socket.gethostname())
    except OSError:
        logger.warning("Unable to resolve local IP address, using 127.0.0.1")
        return "127.0.0.1"


class _ThreadingServer(ThreadingHTTPServer):
    """Listener whose connection threads never hold up shutdown."""

    daemon_threads = True
    block_on_close = False
    allow_reuse_address = True

    def __init__(self, address, handler_class, app: "Server"):
        self.app = app
        super().__init__(address, handler_class)


class _RequestHandler(BaseHTTPRequestHandler):
    """Translate a raw exchange into Request/Response and back."""

    server_version = "docslot/0.1"

    def _dispatch(self) -> None:
        raw_length = self.headers.get('Content-Length') or '0'
        try:
            length = int(raw_length)
        except ValueError:
            length = -1

        if length < 0:
            # Body size unknown, so the connection cannot be reused
            self.close_connection = True
            res = self.server.app.reject_length(self.path.partition('?')[0], raw_length)
        else:
            req = Request.from_target(
                self.command,
                self.path,
                headers=dict(self.headers.items()),
                body_bytes=self.rfile.read(length) if length > 0 else b'',
                client_ip=self.client_address[0],
            )
            res = self.server.app.handle(req)

        self.send_response(res.status_code.value)
        for name, value in res.headers.items():
            self.send_header(name, value)
        self.send_header('Content-Length', str(len(res.body)))
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(res.body)

    do_GET = _dispatch
    do_HEAD = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_DELETE = _dispatch
    do_PATCH = _dispatch
    do_OPTIONS = _dispatch

    def log_message(self, format, *args):
        logger.debug(f"{self.address_string()} - {format % args}")


class Server:
    """
    Document server with start/stop/restart lifecycle.

    ``GET /`` serves the Document Slot; ``GET /X`` serves ``X`` relative to
    ``root``. Request paths are not sanitized, so ``..`` segments reach
    outside ``root``; this server is meant for trusted networks only.
    """

    def __init__(
        self,
        port: int = DEFAULT_PORT,
        host: str = "0.0.0.0",
        root: Union[str, Path] = ".",
        slot: Optional[DocumentSlot] = None,
        restart_delay: float = RESTART_DELAY_SECS,
        local_ip: Optional[str] = None,
    ):
        """
        Create a new document server.

        Args:
            port: TCP port (0 picks a free port on first start and keeps it)
            host: Bind address
            root: Directory that request paths resolve against
            slot: Document served for ``/`` (default: ``root/index.html``)
            restart_delay: Seconds between a successful upload and the restart
            local_ip: Address advertised to clients and the health monitor
        """
        self.port = port
        self.host = host
        self.root = Path(root)
        self.slot = slot if slot is not None else DocumentSlot(self.root / DEFAULT_DOCUMENT)
        self.local_ip = local_ip or detect_local_ip()

        self._routes: Dict[str, Callable[[Request, Response], Response]] = {}
        self.upload_handler = UploadHandler(self.slot, self.restart, restart_delay)
        self.add_route(UPLOAD_PATH, self.upload_handler)

        self._httpd: Optional[_ThreadingServer] = None
        self._thread: Optional[threading.Thread] = None
        self._lifecycle_lock = threading.RLock()
        self._stats_lock = threading.Lock()
        self._stats = {
            'total_requests': 0,
            'files_served': 0,
            'not_found': 0,
            'bytes_sent': 0,
        }

    def add_route(self, path: str, handler: Callable[[Request, Response], Response]) -> None:
        """Route every method on ``path`` to ``handler`` instead of the file server."""
        self._routes[path] = handler

    # -- lifecycle ---------------------------------------------------------

    def start(self) -> bool:
        """
        Start serving on a background thread.

        Returns:
            True if the server is running afterwards. False if the document
            is missing or the port cannot be bound; the caller may retry.
        """
        with self._lifecycle_lock:
            if self._httpd is not None:
                logger.info("Web server is already running")
                return True

            try:
                self._bind()
            except StartupError as e:
                logger.error(f"Failed to start web server: {e.message}")
                return False

            self._thread = threading.Thread(
                target=self._httpd.serve_forever,
                name=f"docslot-http-{self.port}",
                daemon=True,
            )
            self._thread.start()

        logger.info(f"Web server started: http://{self.local_ip}:{self.port}")
        logger.info(f"Also reachable at http://localhost:{self.port}")
        logger.info(f"Uploads enabled: http://{self.local_ip}:{self.port}{UPLOAD_PATH}")
        return True

    def _bind(self) -> None:
        if not self.slot.exists():
            raise StartupError(f"{self.slot.name} not found in {self.slot.path.parent.resolve()}")
        try:
            self._httpd = _ThreadingServer((self.host, self.port), _RequestHandler, self)
        except OSError as e:
            raise StartupError(f"Unable to bind {self.host}:{self.port}", detail=str(e)) from e
        self.port = self._httpd.server_address[1]

    def stop(self) -> None:
        """Stop listening. Requests already admitted finish on their own threads."""
        with self._lifecycle_lock:
            if self._httpd is None:
                return
            httpd, thread = self._httpd, self._thread
            self._httpd = None
            self._thread = None
            httpd.shutdown()
            httpd.server_close()
            if thread is not None:
                thread.join(timeout=5)
        logger.info("Web server stopped")

    def restart(self) -> bool:
        """Stop then start. Start fails cleanly if the document is missing."""
        logger.info("Restarting web server...")
        with self._lifecycle_lock:
            self.stop()
            return self.start()

    def is_running(self) -> bool:
        """Check if server is running."""
        return self._httpd is not None

    def get_port(self) -> int:
        return self.port

    @property
    def address(self) -> Tuple[str, int]:
        return (self.local_ip, self.port)

    @property
    def url(self) -> str:
        return f"http://{self.local_ip}:{self.port}"

    # -- request handling --------------------------------------------------

    def handle(self, req: Request) -> Response:
        """Produce the response for one request. Never raises."""
        res = Response()
        self._count('total_requests')
        try:
            handler = self._routes.get(req.get_path())
            if handler is not None:
                return handler(req, res)
            if req.get_method().value != "GET":
                return res.status(Status.METHOD_NOT_ALLOWED).text("405 - Method not allowed")
            return self.serve_file(req, res)
        except Exception as e:
            logger.exception(f"Error handling {req!r}")
            return Response().status(Status.INTERNAL_SERVER_ERROR).text(f"500 - {e}")

    def reject_length(self, path: str, raw_length: str) -> Response:
        """400 for a request whose Content-Length is not a non-negative integer."""
        self._count('total_requests')
        logger.warning(f"Rejected request for {path}: bad Content-Length {raw_length!r}")
        res = Response().status(Status.BAD_REQUEST)
        if path == UPLOAD_PATH:
            return (
                res.json({"success": False, "message": "Invalid content length"})
                .header('Access-Control-Allow-Origin', '*')
            )
        return res.text("400 - Bad request")

    def resolve(self, path: str) -> Path:
        """Map a request path to a file: ``/`` is the document, ``/X`` is ``root/X``."""
        if path == "/":
            return self.slot.path
        return self.root / unquote(path[1:])

    def serve_file(self, req: Request, res: Response) -> Response:
        target = self.resolve(req.get_path())
        # Another request may swap the document between the check and the read
        try:
            if target.is_file():
                data = target.read_bytes()
                mime_type = get_mime_type(target.name)
                self._count('files_served')
                self._count('bytes_sent', len(data))
                logger.info(f"Request from {req.get_client_ip()}: {target.name} ({mime_type})")
                return res.status(Status.OK).binary(data, mime_type)
        except OSError as e:
            logger.debug(f"Read of {target} failed: {e}")

        self._count('not_found')
        logger.info(f"File not found: {req.get_path()}")
        return res.status(Status.NOT_FOUND).text(NOT_FOUND_BODY)

    def _count(self, key: str, amount: int = 1) -> None:
        with self._stats_lock:
            self._stats[key] += amount

    def get_stats(self) -> Dict[str, int]:
        """
        Get server statistics.

        Returns:
            Request counters merged with the upload handler's counters
        """
        with self._stats_lock:
            stats = dict(self._stats)
        stats.update(self.upload_handler.stats)
        return stats

    def __repr__(self) -> str:
        return f"Server(host='{self.host}', port={self.port}, running={self.is_running()})"
