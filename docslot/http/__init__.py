"""
docslot HTTP Module

- Static file server for the Document Slot and its working directory
- Multipart upload route that swaps the served document
- Request/Response wrappers and the suffix to MIME table
"""

from .server import Server
from .request import Request, Method
from .response import Response, Status
from .document import DocumentSlot
from .upload import UploadHandler
from .mime import MIME_TYPES, get_mime_type

__all__ = [
    'Server',
    'Request',
    'Method',
    'Response',
    'Status',
    'DocumentSlot',
    'UploadHandler',
    'MIME_TYPES',
    'get_mime_type',
]
