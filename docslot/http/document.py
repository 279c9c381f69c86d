"""Document Slot: the single file served for ``/`` and its swap protocol."""

import logging
import os
import threading
from pathlib import Path
from typing import Optional, Union

from ..exceptions import SwapDeleteError, SwapRenameError, SwapWriteError

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT = "index.html"
DEFAULT_TEMP_DOCUMENT = "index-update.html"


class DocumentSlot:
    """
    Fixed path of the served document plus the sibling temp path used
    while an upload replaces it.

    The default swap is two-phase (write temp, delete current, rename temp)
    and leaves a short window in which no document exists. Readers that land
    in that window see a 404. With ``atomic=True`` the temp file is renamed
    straight over the current document instead, which closes the window on
    filesystems where ``os.replace`` is atomic.

    Swaps are serialized: they share one temp path, and an overlapping
    delete could otherwise remove the document another swap just placed.
    """

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_DOCUMENT,
        temp_path: Optional[Union[str, Path]] = None,
        atomic: bool = False,
    ):
        self.path = Path(path)
        self.temp_path = Path(temp_path) if temp_path is not None else self.path.with_name(DEFAULT_TEMP_DOCUMENT)
        self.atomic = atomic
        self._swap_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.path.name

    def exists(self) -> bool:
        """True when the slot resolves to a regular file."""
        return self.path.is_file()

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def ensure(self, default_content: bytes) -> bool:
        """Create the document from ``default_content`` if it is missing.

        Returns:
            True if a file was written.
        """
        if self.path.exists():
            return False
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_bytes(default_content)
        logger.info(f"Extracted default document to {self.path}")
        return True

    def swap(self, payload: bytes) -> None:
        """Replace the document with ``payload``.

        Raises:
            SwapWriteError: The temp file could not be written.
            SwapDeleteError: The current document could not be deleted.
            SwapRenameError: The temp file could not be moved into place after
                the current document was deleted. No document is left.
        """
        with self._swap_lock:
            self._swap(payload)

    def _swap(self, payload: bytes) -> None:
        try:
            with open(self.temp_path, "wb") as handle:
                handle.write(payload)
        except OSError as e:
            raise SwapWriteError(f"Unable to write {self.temp_path.name}", detail=str(e)) from e

        if self.atomic:
            try:
                os.replace(self.temp_path, self.path)
            except OSError as e:
                # os.replace either succeeds or leaves the old document in place
                raise SwapRenameError(
                    f"Unable to replace {self.name}", detail=str(e), document_lost=False
                ) from e
            return

        if self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                raise SwapDeleteError(f"Unable to delete current {self.name}", detail=str(e)) from e

        try:
            self.temp_path.rename(self.path)
        except OSError as e:
            logger.error(f"Rename of {self.temp_path.name} failed after delete, {self.name} is now missing")
            raise SwapRenameError(
                f"Unable to rename {self.temp_path.name} to {self.name}; document is missing",
                detail=str(e),
            ) from e

    def __repr__(self) -> str:
        return f"DocumentSlot(path='{self.path}', atomic={self.atomic})"
