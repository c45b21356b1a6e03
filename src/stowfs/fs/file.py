"""StoredFile: a path bound to one backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .exceptions import PathNotFoundError, SymlinkError
from .utils import require_valid_path, split_path

if TYPE_CHECKING:
    from datetime import datetime
    from typing import BinaryIO

    from .protocol import StorageBackend
    from .streams import BufferedCommitWriter
    from .types import Metadata


class StoredFile:
    """Lightweight handle pairing a path with a backend.

    Every method delegates to the bound backend.  The path is validated
    on construction, so an invalid path never reaches a backend.
    """

    __slots__ = ("backend", "path")

    def __init__(self, path: str, backend: StorageBackend) -> None:
        self.path = require_valid_path(path)
        self.backend = backend

    def __repr__(self) -> str:
        return f"StoredFile(path={self.path!r}, backend={type(self.backend).__name__})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, StoredFile):
            return NotImplemented
        return (
            self.backend is other.backend
            and self.backend.normalize_path(self.path) == other.backend.normalize_path(other.path)
        )

    def __hash__(self) -> int:
        return hash((id(self.backend), self.backend.normalize_path(self.path)))

    @property
    def name(self) -> str:
        return split_path(self.path)[1]

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def read(self) -> bytes:
        return self.backend.read(self.path)

    def write(self, content: bytes | str, **options: Any) -> None:
        self.backend.write(self.path, content, **options)

    def delete(self, *, recursive: bool = False) -> None:
        self.backend.delete(self.path, recursive=recursive)

    def exists(self) -> bool:
        return self.backend.exists(self.path)

    def open_read(self) -> BinaryIO:
        return self.backend.open_read(self.path)  # type: ignore[attr-defined]

    def open_write(self, **options: Any) -> BufferedCommitWriter:
        return self.backend.open_write(self.path, **options)  # type: ignore[attr-defined]

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def metadata(self) -> Metadata:
        return self.backend.metadata(self.path)

    @property
    def size(self) -> int:
        return self.metadata().size

    @property
    def modified_at(self) -> datetime | None:
        return self.metadata().modified_at

    @property
    def uri(self) -> str:
        return self.backend.uri_for(self.path)

    # ------------------------------------------------------------------
    # Links
    # ------------------------------------------------------------------

    def is_symlink(self) -> bool:
        """False on backends without symlink support instead of raising."""
        if not self.backend.capabilities.symlinks:
            return False
        return self.backend.is_symlink(self.path)  # type: ignore[attr-defined]

    def destination(self) -> str:
        """Target path of this link."""
        if not self.exists():
            raise PathNotFoundError(f"File does not exist: {self.path}")
        if not self.is_symlink():
            raise SymlinkError(f"File is not a symlink: {self.path}")
        return self.backend.readlink(self.path)  # type: ignore[attr-defined]
