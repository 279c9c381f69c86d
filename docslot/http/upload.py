"""
Upload handler

Accepts ``POST /upload`` with a multipart body holding one file, swaps the
Document Slot for the uploaded bytes, and schedules a deferred server
restart so the new document is picked up.
"""

import logging
import threading
from typing import Callable, Optional

from ..exceptions import RequestInputError, SwapFailure
from .document import DocumentSlot
from .multipart import extract_boundary, extract_file_content
from .request import Method, Request
from .response import Response, Status

logger = logging.getLogger(__name__)

UPLOAD_PATH = "/upload"
RESTART_DELAY_SECS = 1.0


class UploadHandler:
    """
    Route handler for document uploads.

    Dependencies are passed in explicitly: the slot to swap and the callback
    that restarts the serving server. The callback runs on a timer thread
    ``restart_delay`` seconds after a successful swap, off the request path,
    so the response has time to flush first.
    """

    def __init__(
        self,
        slot: DocumentSlot,
        restart_callback: Optional[Callable[[], object]] = None,
        restart_delay: float = RESTART_DELAY_SECS,
    ):
        """
        Args:
            slot: Document Slot replaced by uploads
            restart_callback: Called after a successful swap (None = no restart)
            restart_delay: Seconds to wait before calling restart_callback
        """
        self.slot = slot
        self.restart_callback = restart_callback
        self.restart_delay = restart_delay
        self.stats = {
            'uploads_accepted': 0,
            'uploads_rejected': 0,
            'swap_failures': 0,
        }
        self._stats_lock = threading.Lock()

    def __call__(self, req: Request, res: Response) -> Response:
        try:
            payload = self.parse(req)
            self.slot.swap(payload)
        except RequestInputError as e:
            self._count('uploads_rejected')
            logger.warning(f"Rejected upload from {req.get_client_ip()}: {e.message}")
            return self._reply(res, e.code, False, e.message)
        except SwapFailure as e:
            self._count('swap_failures')
            logger.error(f"Upload swap failed: {e.message} ({e.detail})")
            return self._reply(res, Status.INTERNAL_SERVER_ERROR, False, e.message)
        except Exception as e:
            self._count('swap_failures')
            logger.exception("Unexpected error while handling upload")
            return self._reply(res, Status.INTERNAL_SERVER_ERROR, False, f"Server error: {e}")

        self._count('uploads_accepted')
        logger.info(
            f"Upload from {req.get_client_ip()} replaced {self.slot.name} ({len(payload)} bytes)"
        )
        self._reply(res, Status.OK, True, "File uploaded successfully, server will restart")
        self.schedule_restart()
        return res

    def parse(self, req: Request) -> bytes:
        """
        Validate the request and extract the uploaded file bytes.

        Raises:
            RequestInputError: 405 for a non-POST method, 400 for a bad
                content type, missing boundary, or missing/empty payload.
        """
        if req.get_method() is not Method.POST:
            raise RequestInputError("Method not allowed", code=405)

        if not req.is_multipart():
            raise RequestInputError("Invalid content type")

        boundary = extract_boundary(req.get_content_type())
        if boundary is None:
            raise RequestInputError("Invalid boundary")

        payload = extract_file_content(req.get_body_bytes(), boundary.encode('latin-1'))
        if not payload:
            raise RequestInputError("No file content found")
        return payload

    def schedule_restart(self) -> Optional[threading.Timer]:
        """Run the restart callback after ``restart_delay`` on a daemon timer."""
        if self.restart_callback is None:
            return None
        timer = threading.Timer(self.restart_delay, self._run_restart)
        timer.daemon = True
        timer.start()
        return timer

    def _run_restart(self) -> None:
        try:
            self.restart_callback()
        except Exception as e:
            logger.error(f"Error restarting server after upload: {e}")

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self.stats[key] += 1

    @staticmethod
    def _reply(res: Response, status, success: bool, message: str) -> Response:
        return (
            res.status(status)
            .json({"success": success, "message": message})
            .header('Access-Control-Allow-Origin', '*')
        )
