"""
Minimal multipart/form-data extraction

Pulls the payload of the first (and assumed only) file part out of a raw
request body. There is no iteration over parts and no header parsing:

    <preamble and part headers>\\r\\n\\r\\n<payload>\\r\\n--<boundary>...

Everything between the first blank line and the first following
``\\r\\n--<boundary>`` is the payload.
"""

from typing import Optional

HEADER_TERMINATOR = b"\r\n\r\n"
BOUNDARY_PARAM = "boundary="


def extract_boundary(content_type: str) -> Optional[str]:
    """Return the boundary token from a Content-Type header value.

    The first ``;``-separated parameter starting with ``boundary=`` wins.
    Quoting and escaping are not supported. An empty token counts as absent.
    """
    for part in content_type.split(";"):
        part = part.strip()
        if part.startswith(BOUNDARY_PARAM):
            return part[len(BOUNDARY_PARAM):] or None
    return None


def index_of(source: bytes, target: bytes, from_index: int = 0) -> int:
    """Find ``target`` in ``source`` at or after ``from_index``.

    First-byte match then verify. Worst case is O(n*m), which is fine for
    the small documents this server accepts.

    Returns:
        Offset of the first match, or -1.
    """
    if from_index >= len(source):
        return -1
    if not target:
        return from_index

    first = target[0]
    last_start = len(source) - len(target)
    i = from_index
    while i <= last_start:
        if source[i] != first:
            i += 1
            continue
        if source[i + 1:i + len(target)] == target[1:]:
            return i
        i += 1
    return -1


def extract_file_content(body: bytes, boundary: bytes) -> Optional[bytes]:
    """Extract the single file payload from a multipart body.

    Args:
        body: Entire request body
        boundary: Boundary token as bytes, without the leading dashes

    Returns:
        Payload bytes (possibly empty), or None if either marker is missing.
    """
    start = index_of(body, HEADER_TERMINATOR, 0)
    if start == -1:
        return None
    start += len(HEADER_TERMINATOR)

    end = index_of(body, b"\r\n--" + boundary, start)
    if end == -1:
        return None

    return body[start:end]


__all__ = ["extract_boundary", "extract_file_content", "index_of"]
