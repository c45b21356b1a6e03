"""Link: fluent symlink creation for a StoredFile."""

from __future__ import annotations

import logging

from .exceptions import InvalidPathError
from .file import StoredFile
from .utils import require_valid_path

logger = logging.getLogger(__name__)


class Link:
    """Builds symlinks that point at one file.

    Usage::

        Link(stored_file).to("/current.txt")
    """

    def __init__(self, file: StoredFile) -> None:
        if file is None:
            raise InvalidPathError("File cannot be None")
        if not isinstance(file, StoredFile):
            raise InvalidPathError(f"File must be a StoredFile, got {type(file).__name__}")
        self.file = file

    def to(self, destination: str) -> StoredFile:
        """Create a link at *destination* pointing at the file; return its handle."""
        require_valid_path(destination)
        try:
            self.file.backend.symlink(self.file.path, destination)  # type: ignore[attr-defined]
        except Exception as e:
            logger.error(
                "Failed to create symlink %s -> %s: %s",
                destination,
                self.file.path,
                e,
                exc_info=True,
            )
            raise
        logger.info("Created symlink: %s -> %s", destination, self.file.path)
        return StoredFile(destination, self.file.backend)
