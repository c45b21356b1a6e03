"""StorageBackend protocol: runtime-checkable interfaces.

Split into a core protocol and opt-in capability protocols so that
minimal backends can implement just the core without being forced
to provide symlinks or streaming.  Whether a backend actually
supports an optional feature is declared by its ``capabilities``
record; these protocols only describe the call shapes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from typing import BinaryIO

    from .streams import BufferedCommitWriter
    from .types import Capabilities, Metadata


@runtime_checkable
class StorageBackend(Protocol):
    """Core interface every backend must implement."""

    scheme: str

    @property
    def capabilities(self) -> Capabilities: ...

    # ------------------------------------------------------------------
    # Files
    # ------------------------------------------------------------------

    def read(self, path: str) -> bytes: ...

    def write(
        self,
        path: str,
        content: bytes | str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> None: ...

    def exists(self, path: str) -> bool: ...

    def delete(self, path: str, *, recursive: bool = False) -> None: ...

    def metadata(self, path: str) -> Metadata: ...

    def copy(self, source: str, dest: str, **options: Any) -> None: ...

    def move(self, source: str, dest: str, **options: Any) -> None: ...

    # ------------------------------------------------------------------
    # Directories
    # ------------------------------------------------------------------

    def list(
        self, path: str = "/", *, recursive: bool = False, pattern: str = "*"
    ) -> list[str]: ...

    def mkdir(self, path: str, *, parents: bool = True) -> None: ...

    def rmdir(self, path: str, *, recursive: bool = False) -> None: ...

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def normalize_path(self, path: str) -> str: ...

    def uri_for(self, path: str) -> str: ...


@runtime_checkable
class SupportsSymlinks(Protocol):
    """Opt-in: symbolic links."""

    def symlink(self, source: str, dest: str) -> None: ...

    def is_symlink(self, path: str) -> bool: ...

    def readlink(self, path: str) -> str: ...


@runtime_checkable
class SupportsStreaming(Protocol):
    """Opt-in: streaming reads and buffered streaming writes."""

    def open_read(self, path: str) -> BinaryIO: ...

    def open_write(self, path: str, **options: Any) -> BufferedCommitWriter: ...
