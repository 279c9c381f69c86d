"""Suffix to MIME type table for static files."""

DEFAULT_MIME_TYPE = "text/plain"

MIME_TYPES = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".json": "application/json",
    ".ico": "image/x-icon",
}


def get_mime_type(filename: str) -> str:
    """Return the MIME type for ``filename`` based only on its suffix."""
    lowered = filename.lower()
    dot = lowered.rfind(".")
    if dot == -1:
        return DEFAULT_MIME_TYPE
    return MIME_TYPES.get(lowered[dot:], DEFAULT_MIME_TYPE)


__all__ = ["DEFAULT_MIME_TYPE", "MIME_TYPES", "get_mime_type"]
