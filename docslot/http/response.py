"""
HTTP Response wrapper

Builder for the status, headers and body a route handler produces. The
server writes it to the wire once the handler returns.
"""

import json
from typing import Dict, Any, Union
from enum import Enum


class Status(Enum):
    """HTTP status codes used by docslot."""
    OK = 200
    BAD_REQUEST = 400
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    INTERNAL_SERVER_ERROR = 500


class Response:
    """
    HTTP response object with method chaining.

    Example:
        res.status(Status.NOT_FOUND).text("404 - File not found")
    """

    def __init__(self):
        """Create a new HTTP response."""
        self.status_code = Status.OK
        self.headers: Dict[str, str] = {}
        self.body = b""

    def status(self, status: Union[Status, int]) -> 'Response':
        """
        Set HTTP status code.

        Args:
            status: HTTP status code

        Returns:
            Self for method chaining
        """
        if isinstance(status, int):
            self.status_code = Status(status)
        else:
            self.status_code = status
        return self

    def header(self, name: str, value: str) -> 'Response':
        """
        Set response header.

        Args:
            name: Header name
            value: Header value

        Returns:
            Self for method chaining
        """
        self.headers[name.lower()] = value
        return self

    def content_type(self, content_type: str) -> 'Response':
        """Set content type."""
        return self.header('content-type', content_type)

    def json(self, data: Dict[str, Any]) -> 'Response':
        """
        Send JSON response.

        Args:
            data: JSON-serializable data

        Returns:
            Self for method chaining
        """
        self.body = json.dumps(data, ensure_ascii=False).encode('utf-8')
        return self.content_type('application/json; charset=UTF-8')

    def text(self, text: str) -> 'Response':
        """Send plain text response."""
        self.body = text.encode('utf-8')
        return self.content_type('text/plain; charset=UTF-8')

    def binary(self, data: bytes, content_type: str = 'application/octet-stream') -> 'Response':
        """
        Send raw bytes.

        Args:
            data: Body bytes, written unchanged
            content_type: Content type for the body

        Returns:
            Self for method chaining
        """
        self.body = data
        return self.content_type(content_type)

    def get_size(self) -> int:
        """Get response body size."""
        return len(self.body)

    def __repr__(self) -> str:
        """String representation of response."""
        return f"Response(status={self.status_code.value}, size={len(self.body)})"
