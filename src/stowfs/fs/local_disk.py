"""LocalDiskBackend: pass-through to the host filesystem with error translation."""

from __future__ import annotations

import contextlib
import errno
import logging
import os
import shutil
import stat
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

from .base import BaseBackend
from .exceptions import (
    CapabilityNotSupportedError,
    InvalidPathError,
    PathNotFoundError,
    PermissionDeniedError,
    StowError,
    SymlinkError,
)
from .types import DEFAULT_CONTENT_TYPE, Capabilities, Metadata
from .utils import child_prefix, guess_mime_type, matches_pattern, to_bytes

if TYPE_CHECKING:
    from collections.abc import Iterator
    from typing import BinaryIO

    from .streams import BufferedCommitWriter

logger = logging.getLogger(__name__)

ERROR_MAP: dict[int, type[StowError]] = {
    errno.ENOENT: PathNotFoundError,
    errno.EACCES: PermissionDeniedError,
    errno.EPERM: PermissionDeniedError,
    errno.ENOTEMPTY: StowError,
    errno.EEXIST: StowError,
    errno.EISDIR: StowError,
    errno.ENOTDIR: StowError,
    errno.ELOOP: SymlinkError,
    errno.EINVAL: InvalidPathError,
}
"""Native errno -> stowfs exception.  Unlisted OSErrors surface as StowError."""


def translate_os_error(error: OSError, path: str) -> StowError:
    """Build the stowfs exception for a native error raised while handling *path*."""
    mapped = ERROR_MAP.get(error.errno, StowError) if error.errno is not None else StowError
    reason = error.strerror or str(error)
    return mapped(f"{reason}: {path}")


@contextlib.contextmanager
def translate_errors(path: str) -> Iterator[None]:
    """Re-raise native OSErrors raised in the block as stowfs exceptions."""
    try:
        yield
    except OSError as e:
        raise translate_os_error(e, path) from e


def _timestamp(value: float) -> datetime:
    return datetime.fromtimestamp(value, tz=UTC)


class LocalDiskBackend(BaseBackend):
    """Direct host filesystem access below an optional root directory.

    Virtual ``/`` maps onto ``root`` (the host root when no root is
    given).  Paths are joined, not sandboxed: keeping callers inside the
    root is the caller's responsibility.  Every native ``OSError`` is
    translated through ``ERROR_MAP`` before it leaves this class.
    """

    scheme = "file"
    CAPABILITIES = Capabilities(
        symlinks=True,
        permissions=True,
        streaming=True,
        atomic_writes=True,
        custom_metadata=False,
    )

    def __init__(self, root: Path | str | None = None) -> None:
        self.root = Path(root).resolve() if root is not None else Path("/")

        if not self.root.exists():
            raise PathNotFoundError(f"Root directory does not exist: {self.root}")
        if not self.root.is_dir():
            raise InvalidPathError(f"Root path is not a directory: {self.root}")

    # =========================================================================
    # Path Mapping
    # =========================================================================

    def _resolve_path(self, virtual_path: str) -> Path:
        """Map a virtual path to its physical location without following links."""
        rel = self.normalize_path(virtual_path).lstrip("/")
        if not rel:
            return self.root
        return self.root / rel

    def _to_virtual_path(self, physical_path: Path | str) -> str:
        """Convert a physical path back to a virtual path.

        Paths outside the root are returned as host paths.
        """
        absolute = Path(os.path.normpath(os.path.abspath(physical_path)))
        try:
            rel = absolute.relative_to(self.root)
        except ValueError:
            return absolute.as_posix()
        vpath = "/" + rel.as_posix()
        return vpath if vpath != "/." else "/"

    def _ensure_parent(self, resolved: Path, path: str, *, parents: bool) -> None:
        parent = resolved.parent
        if parent.is_dir():
            return
        if not parents:
            raise PathNotFoundError(f"Parent directory doesn't exist: {path}")
        parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Created parent directories for %s", path)

    def _reject_custom_metadata(self, metadata: dict[str, Any] | None) -> None:
        if metadata:
            raise CapabilityNotSupportedError(
                f"{type(self).__name__} does not support custom metadata"
            )

    # =========================================================================
    # Core Operations
    # =========================================================================

    def read(self, path: str) -> bytes:
        resolved = self._resolve_path(path)
        with translate_errors(path):
            if resolved.is_dir():
                raise StowError(f"Is a directory: {path}")
            return resolved.read_bytes()

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
        """Write content to a file on disk. Atomic via tempfile + replace.

        Links are written through to their target.  ``content_type`` has no
        on-disk representation and is ignored.
        """
        data = to_bytes(content)
        self._reject_custom_metadata(metadata)
        resolved = self._resolve_path(path)

        with translate_errors(path):
            if resolved.is_symlink():
                resolved = Path(os.path.realpath(resolved))
                if resolved.is_symlink():
                    raise SymlinkError(f"Circular symlink detected: {path}")
            if resolved.is_dir():
                raise StowError(f"Is a directory: {path}")

            self._ensure_parent(resolved, path, parents=parents)
            if mode is None:
                mode = stat.S_IMODE(resolved.stat().st_mode) if resolved.exists() else 0o644

            fd, tmp_path = tempfile.mkstemp(dir=str(resolved.parent), suffix=".tmp")
            try:
                with os.fdopen(fd, "wb") as f:
                    f.write(data)
                os.chmod(tmp_path, mode)
                Path(tmp_path).replace(resolved)
            except BaseException:
                with contextlib.suppress(OSError):
                    Path(tmp_path).unlink()
                raise

    def exists(self, path: str) -> bool:
        return os.path.lexists(self._resolve_path(path))

    def delete(self, path: str, *, recursive: bool = False) -> None:
        """Delete a file, a link, or a directory (always permanent)."""
        resolved = self._resolve_path(path)
        with translate_errors(path):
            if not os.path.lexists(resolved):
                raise PathNotFoundError(f"File not found: {path}")

            if resolved.is_symlink() or not resolved.is_dir():
                resolved.unlink()
                return

            if resolved == self.root:
                raise StowError("Cannot delete the root directory")
            if recursive:
                shutil.rmtree(resolved)
                logger.debug("Recursively deleted %s", path)
            else:
                resolved.rmdir()

    def metadata(self, path: str) -> Metadata:
        resolved = self._resolve_path(path)
        with translate_errors(path):
            st = resolved.stat()
            target_name = Path(os.path.realpath(resolved)).name

        is_dir = stat.S_ISDIR(st.st_mode)
        return Metadata(
            size=0 if is_dir else st.st_size,
            created_at=_timestamp(getattr(st, "st_birthtime", st.st_ctime)),
            modified_at=_timestamp(st.st_mtime),
            accessed_at=_timestamp(st.st_atime),
            mode=stat.S_IMODE(st.st_mode),
            content_type=DEFAULT_CONTENT_TYPE if is_dir else guess_mime_type(target_name),
            is_directory=is_dir,
            is_file=not is_dir,
        )

    # =========================================================================
    # Streaming Operations
    # =========================================================================

    def open_read(self, path: str) -> BinaryIO:
        resolved = self._resolve_path(path)
        with translate_errors(path):
            if resolved.is_dir():
                raise StowError(f"Is a directory: {path}")
            return resolved.open("rb")

    def open_write(
        self,
        path: str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> BufferedCommitWriter:
        self._reject_custom_metadata(metadata)
        if self._resolve_path(path).is_dir():
            raise StowError(f"Is a directory: {path}")
        return self._buffered_writer(
            path,
            content_type=content_type,
            mode=mode,
            parents=parents,
        )

    # =========================================================================
    # Directory Operations
    # =========================================================================

    def _walk(self, directory: Path, base: str, *, recursive: bool) -> Iterator[str]:
        """Yield virtual child paths of *directory*, depth-first when recursive."""
        pending: list[tuple[Path, str]] = [(directory, base)]
        while pending:
            current, virtual = pending.pop()
            prefix = child_prefix(virtual)
            with os.scandir(current) as entries:
                for entry in entries:
                    child = prefix + entry.name
                    yield child
                    if recursive and entry.is_dir(follow_symlinks=False):
                        pending.append((Path(entry.path), child))

    def list(self, path: str = "/", *, recursive: bool = False, pattern: str = "*") -> list[str]:
        """Sorted canonical paths below a directory on disk."""
        directory = self._resolve_path(path)
        with translate_errors(path):
            if not os.path.lexists(directory):
                raise PathNotFoundError(f"Directory not found: {path}")
            if not directory.is_dir():
                raise StowError(f"Not a directory: {path}")

            if directory.is_symlink():
                base = self._to_virtual_path(os.path.realpath(directory))
            else:
                base = self.normalize_path(path)

            results = [
                child
                for child in self._walk(directory, base, recursive=recursive)
                if matches_pattern(child, base, pattern, recursive=recursive)
            ]
        return sorted(results)

    def mkdir(self, path: str, *, parents: bool = True) -> None:
        resolved = self._resolve_path(path)
        with translate_errors(path):
            if os.path.lexists(resolved):
                raise StowError(f"Path already exists: {path}")
            resolved.mkdir(parents=parents)

    def rmdir(self, path: str, *, recursive: bool = False) -> None:
        resolved = self._resolve_path(path)
        if not os.path.lexists(resolved):
            raise PathNotFoundError(f"Directory not found: {path}")
        if resolved.is_symlink() or not resolved.is_dir():
            raise StowError(f"Not a directory: {path}")
        self.delete(path, recursive=recursive)

    # =========================================================================
    # Movement Operations
    # =========================================================================

    def _check_copy_source(self, src: Path, source: str) -> None:
        if not os.path.lexists(src):
            raise PathNotFoundError(f"Source file not found: {source}")
        if src.is_dir():
            raise StowError(f"Cannot copy directory: {source}")

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
        """Copy a file on disk, keeping its permission bits and timestamps."""
        self._reject_custom_metadata(metadata)
        src = self._resolve_path(source)
        dst = self._resolve_path(dest)

        with translate_errors(f"{source} -> {dest}"):
            self._check_copy_source(src, source)
            if dst.is_dir():
                raise StowError(f"Is a directory: {dest}")
            self._ensure_parent(dst, dest, parents=parents)
            shutil.copy2(src, dst)
            if mode is not None:
                os.chmod(dst, mode)

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
        """Move a file on disk with a rename where possible.

        A link at *dest* is replaced, never written through.  A link source
        is moved by writing its target's content at *dest* and removing the
        link, matching the in-memory backend.
        """
        if self.normalize_path(source) == self.normalize_path(dest):
            return
        self._reject_custom_metadata(metadata)
        src = self._resolve_path(source)
        dst = self._resolve_path(dest)

        if src.is_symlink():
            with translate_errors(source):
                self._check_copy_source(src, source)
                content = src.read_bytes()
                source_mode = stat.S_IMODE(src.stat().st_mode)
            if dst.is_symlink():
                if dst.is_dir():
                    raise StowError(f"Is a directory: {dest}")
                with translate_errors(dest):
                    dst.unlink()
            self.write(
                dest,
                content,
                mode=mode if mode is not None else source_mode,
                parents=parents,
            )
            self.delete(source)
            return

        with translate_errors(f"{source} -> {dest}"):
            self._check_copy_source(src, source)
            if dst.is_dir():
                raise StowError(f"Is a directory: {dest}")
            self._ensure_parent(dst, dest, parents=parents)
            shutil.move(str(src), str(dst))
            if mode is not None:
                os.chmod(dst, mode)

    # =========================================================================
    # Symlink Operations
    # =========================================================================

    def symlink(self, source: str, dest: str) -> None:
        src = self._resolve_path(source)
        dst = self._resolve_path(dest)

        if os.path.lexists(dst):
            raise SymlinkError(f"Symlink destination already exists: {dest}")
        if not dst.parent.is_dir():
            raise InvalidPathError(f"Parent directory doesn't exist: {dest}")

        with translate_errors(dest):
            os.symlink(src, dst)

    def is_symlink(self, path: str) -> bool:
        return self._resolve_path(path).is_symlink()

    def readlink(self, path: str) -> str:
        """Immediate target of a link, after checking the chain resolves."""
        resolved = self._resolve_path(path)
        if not resolved.is_symlink():
            raise SymlinkError(f"File is not a symlink: {path}")

        try:
            os.stat(resolved)
        except OSError as e:
            if e.errno == errno.ELOOP:
                raise SymlinkError(f"Circular symlink detected: {path}") from e
            if e.errno == errno.ENOENT:
                raise SymlinkError(f"Broken symlink: {path}") from e
            raise translate_os_error(e, path) from e

        with translate_errors(path):
            raw = os.readlink(resolved)
        return self._to_virtual_path(resolved.parent / raw)

    # =========================================================================
    # Path Utilities
    # =========================================================================

    def uri_for(self, path: str) -> str:
        return f"file://{self._resolve_path(path).as_posix()}"
