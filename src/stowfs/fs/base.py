"""BaseBackend: default contract behaviour shared by every backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import CapabilityNotSupportedError
from .streams import BufferedCommitWriter
from .types import Capabilities
from .utils import normalize_path, require_valid_path

if TYPE_CHECKING:
    from typing import BinaryIO

    from .types import Metadata

logger = logging.getLogger(__name__)


class BaseBackend:
    """Base class for storage backends.

    Every contract operation exists here.  Operations a subclass does not
    override raise ``CapabilityNotSupportedError`` so missing functionality
    surfaces at the call site instead of producing wrong answers.

    ``copy`` and ``move`` have working defaults built from ``read``,
    ``write`` and ``delete``; subclasses may override them.
    """

    scheme: str = ""
    CAPABILITIES = Capabilities()

    def _unsupported(self, operation: str) -> CapabilityNotSupportedError:
        return CapabilityNotSupportedError(
            f"{type(self).__name__} does not support {operation}"
        )

    # =========================================================================
    # Capabilities
    # =========================================================================

    @property
    def capabilities(self) -> Capabilities:
        return self.CAPABILITIES

    @property
    def supports_symlinks(self) -> bool:
        return self.capabilities.symlinks

    @property
    def supports_permissions(self) -> bool:
        return self.capabilities.permissions

    @property
    def supports_streaming(self) -> bool:
        return self.capabilities.streaming

    @property
    def supports_atomic_writes(self) -> bool:
        return self.capabilities.atomic_writes

    @property
    def supports_custom_metadata(self) -> bool:
        return self.capabilities.custom_metadata

    # =========================================================================
    # Core Operations
    # =========================================================================

    def read(self, path: str) -> bytes:
        raise self._unsupported("read")

    def write(
        self,
        path: str,
        content: bytes | str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> None:
        raise self._unsupported("write")

    def exists(self, path: str) -> bool:
        raise self._unsupported("exists")

    def delete(self, path: str, *, recursive: bool = False) -> None:
        raise self._unsupported("delete")

    def metadata(self, path: str) -> Metadata:
        raise self._unsupported("metadata")

    # =========================================================================
    # Directory Operations
    # =========================================================================

    def list(self, path: str = "/", *, recursive: bool = False, pattern: str = "*") -> list[str]:
        raise self._unsupported("list")

    def mkdir(self, path: str, *, parents: bool = True) -> None:
        raise self._unsupported("mkdir")

    def rmdir(self, path: str, *, recursive: bool = False) -> None:
        raise self._unsupported("rmdir")

    # =========================================================================
    # Movement Operations
    # =========================================================================

    def copy(
        self,
        source: str,
        dest: str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> None:
        """Copy a file by reading *source* and writing *dest*."""
        logger.debug("Copying %s to %s by read and write", source, dest)
        content = self.read(source)
        self.write(
            dest,
            content,
            content_type=content_type,
            metadata=metadata,
            mode=mode,
            parents=parents,
        )

    def move(
        self,
        source: str,
        dest: str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> None:
        """Move a file by copying it to *dest* and deleting *source*."""
        if self.normalize_path(source) == self.normalize_path(dest):
            return
        logger.debug("Moving %s to %s by copy and delete", source, dest)
        self.copy(
            source,
            dest,
            content_type=content_type,
            metadata=metadata,
            mode=mode,
            parents=parents,
        )
        self.delete(source)

    # =========================================================================
    # Symlink Operations
    # =========================================================================

    def symlink(self, source: str, dest: str) -> None:
        raise self._unsupported("symlinks")

    def is_symlink(self, path: str) -> bool:
        raise self._unsupported("symlinks")

    def readlink(self, path: str) -> str:
        raise self._unsupported("symlinks")

    # =========================================================================
    # Streaming Operations
    # =========================================================================

    def open_read(self, path: str) -> BinaryIO:
        raise self._unsupported("streaming reads")

    def open_write(
        self,
        path: str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> BufferedCommitWriter:
        raise self._unsupported("streaming writes")

    def _buffered_writer(self, path: str, **options: Any) -> BufferedCommitWriter:
        """Writer whose buffered content lands via ``write(path, ..., **options)``."""

        def _commit(content: bytes) -> None:
            self.write(path, content, **options)

        return BufferedCommitWriter(path, _commit)

    # =========================================================================
    # Path Utilities
    # =========================================================================

    def normalize_path(self, path: str) -> str:
        """Canonical form of *path* in this backend's namespace."""
        return normalize_path(require_valid_path(path))

    def uri_for(self, path: str) -> str:
        if not self.scheme:
            raise self._unsupported("URIs")
        return f"{self.scheme}://{self.normalize_path(path)}"
