"""
HTTP Request wrapper

Read-only view of one inbound request, built by the server from the raw
exchange before it is handed to a route handler.
"""

from typing import Dict
from enum import Enum


class Method(Enum):
    """HTTP methods."""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class Request:
    """
    HTTP request object.

    Headers are stored with lower-cased names so lookups are
    case-insensitive. The body is kept as raw bytes; the upload handler is
    the only consumer that needs it.
    """

    def __init__(self, method: str = "GET", path: str = "/", **kwargs):
        """
        Create a new HTTP request.

        Args:
            method: HTTP method
            path: Request path, without the query string
            **kwargs: query, headers, body_bytes, client_ip
        """
        self.method = Method(method.upper())
        self.path = path
        self.query = kwargs.get('query', '')
        self.headers: Dict[str, str] = {
            name.lower(): value for name, value in kwargs.get('headers', {}).items()
        }
        self.body_bytes: bytes = kwargs.get('body_bytes', b'')
        self.client_ip = kwargs.get('client_ip', '127.0.0.1')

    @classmethod
    def from_target(cls, method: str, target: str, **kwargs) -> 'Request':
        """Build a request from a raw request-target such as ``/a.css?v=2``."""
        path, _, query = target.partition('?')
        return cls(method=method, path=path or '/', query=query, **kwargs)

    def get_method(self) -> Method:
        """Get HTTP method."""
        return self.method

    def get_path(self) -> str:
        """Get request path."""
        return self.path

    def get_header(self, name: str) -> str:
        """
        Get header value.

        Args:
            name: Header name (case-insensitive)

        Returns:
            Header value, or empty string if not found
        """
        return self.headers.get(name.lower(), '')

    def get_headers(self) -> Dict[str, str]:
        """Get all headers."""
        return self.headers.copy()

    def get_body_bytes(self) -> bytes:
        """Get request body as bytes."""
        return self.body_bytes

    def get_content_type(self) -> str:
        """Get content type."""
        return self.get_header('content-type')

    def get_content_length(self) -> int:
        """Get content length, 0 when absent or malformed."""
        try:
            return int(self.get_header('content-length') or '0')
        except ValueError:
            return 0

    def is_multipart(self) -> bool:
        """Check if request declares a multipart/form-data body."""
        return self.get_content_type().startswith('multipart/form-data')

    def get_client_ip(self) -> str:
        """Get client IP address."""
        return self.client_ip

    def __repr__(self) -> str:
        """String representation of request."""
        return f"Request(method={self.method.value}, path='{self.path}')"
