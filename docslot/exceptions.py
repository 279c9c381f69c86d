"""docslot exception hierarchy."""


class DocslotError(Exception):
    """Base exception for all docslot operations."""

    def __init__(self, message: str, code: int | None = None, detail: str | None = None):
        self.message = message
        self.code = code
        self.detail = detail
        super().__init__(message)


class StartupError(DocslotError):
    """Server could not start (document missing, port in use, etc.)."""
    pass


class RequestInputError(DocslotError):
    """Malformed upload request. ``code`` carries the HTTP status (400 or 405)."""

    def __init__(self, message: str, code: int = 400, detail: str | None = None):
        super().__init__(message, code=code, detail=detail)


class SwapFailure(DocslotError):
    """Document swap failed part way through."""

    document_lost = False

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(message, code=500, detail=detail)


class SwapWriteError(SwapFailure):
    """Temporary file could not be written. The document is untouched."""
    pass


class SwapDeleteError(SwapFailure):
    """Current document could not be deleted. The document is untouched."""
    pass


class SwapRenameError(SwapFailure):
    """Temp file could not be moved into place.

    In the two-phase swap this happens after the old document was deleted,
    so no document is served (``document_lost``).
    """

    def __init__(self, message: str, detail: str | None = None, document_lost: bool = True):
        super().__init__(message, detail=detail)
        self.document_lost = document_lost


class ProbeFailure(DocslotError):
    """Health probe could not reach its target."""
    pass


class ConfigError(DocslotError):
    """Configuration file unreadable or holding invalid values."""
    pass


class ScriptError(DocslotError):
    """Managed script missing or failed to spawn."""
    pass
