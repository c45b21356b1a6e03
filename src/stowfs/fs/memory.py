"""MemoryBackend: filesystem emulation held entirely in process memory."""

from __future__ import annotations

import dataclasses
import io
import logging
from datetime import UTC, datetime
from itertools import chain
from typing import TYPE_CHECKING, Any

from .base import BaseBackend
from .exceptions import (
    InvalidPathError,
    PathNotFoundError,
    StowError,
    SymlinkError,
)
from .types import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_DIRECTORY_MODE,
    DEFAULT_FILE_MODE,
    Capabilities,
    MemorySnapshot,
    MemoryStats,
    Metadata,
)
from .utils import (
    child_prefix,
    is_descendant,
    iter_ancestors,
    matches_pattern,
    parent_path,
    require_valid_path,
    to_bytes,
)

if TYPE_CHECKING:
    from .streams import BufferedCommitWriter

logger = logging.getLogger(__name__)

MAX_SYMLINK_HOPS = 40


def _now() -> datetime:
    return datetime.now(UTC)


class MemoryBackend(BaseBackend):
    """Fully functional in-memory backend for tests and disk-free tooling.

    State lives in four path-keyed mappings:

    - ``_files``: path -> content bytes
    - ``_directories``: path -> creation time
    - ``_symlinks``: path -> target path (unresolved)
    - ``_metadata``: path -> Metadata (files only)

    A canonical path appears in at most one of the first three.  The root
    directory always exists.  Nothing is locked; share an instance across
    threads only behind an external lock.
    """

    scheme = "memory"
    CAPABILITIES = Capabilities(
        symlinks=True,
        permissions=True,
        streaming=True,
        atomic_writes=False,
        custom_metadata=True,
    )

    def __init__(self) -> None:
        self._files: dict[str, bytes] = {}
        self._directories: dict[str, datetime] = {}
        self._symlinks: dict[str, str] = {}
        self._metadata: dict[str, Metadata] = {}
        self._directories["/"] = _now()

    # =========================================================================
    # Internal Lookups
    # =========================================================================

    def _occupied(self, path: str) -> bool:
        return path in self._files or path in self._directories or path in self._symlinks

    def _resolve(self, path: str) -> str:
        """Follow links from *path* to the first non-link path.

        The result may be absent (broken link).  Raises SymlinkError when a
        path repeats or more than MAX_SYMLINK_HOPS links would be followed.
        """
        visited: set[str] = set()
        current = path
        while current in self._symlinks:
            if current in visited:
                logger.debug("Symlink cycle at %s while resolving %s", current, path)
                raise SymlinkError(f"Circular symlink detected: {path}")
            if len(visited) >= MAX_SYMLINK_HOPS:
                raise SymlinkError(
                    f"Too many levels of symbolic links (max {MAX_SYMLINK_HOPS}): {path}"
                )
            visited.add(current)
            current = self._symlinks[current]
        return current

    def _prepare_parent(self, path: str, *, parents: bool) -> None:
        """Make sure the parent of *path* exists as a directory.

        Walks upward collecting missing ancestors until an existing directory
        is found, then creates them root-first.
        """
        missing: list[str] = []
        for ancestor in iter_ancestors(path):
            if ancestor in self._directories:
                break
            if ancestor in self._files or ancestor in self._symlinks:
                raise StowError(f"Not a directory: {ancestor}")
            missing.append(ancestor)

        if not missing:
            return
        if not parents:
            raise PathNotFoundError(f"Parent directory doesn't exist: {parent_path(path)}")

        created = _now()
        for directory in reversed(missing):
            self._directories[directory] = created
        logger.debug("Created parent directories for %s: %s", path, list(reversed(missing)))

    def _descendants(self, directory: str) -> list[str]:
        return [
            p
            for p in chain(self._files, self._directories, self._symlinks)
            if is_descendant(p, directory)
        ]

    def _remove_directory(self, path: str, *, recursive: bool) -> None:
        if path == "/":
            raise StowError("Cannot delete the root directory")

        descendants = self._descendants(path)
        if descendants and not recursive:
            raise StowError(f"Directory not empty: {path}. Use recursive=True to delete.")

        for mapping in (self._files, self._directories, self._symlinks, self._metadata):
            for key in [k for k in mapping if is_descendant(k, path)]:
                del mapping[key]
        del self._directories[path]

        if descendants:
            logger.debug("Recursively deleted %s (%d descendants)", path, len(descendants))

    # =========================================================================
    # Core Operations
    # =========================================================================

    def read(self, path: str) -> bytes:
        normalized = self.normalize_path(path)
        if not self._occupied(normalized):
            raise PathNotFoundError(f"File not found: {path}")

        target = self._resolve(normalized)
        if target in self._directories:
            raise StowError(f"Is a directory: {path}")

        content = self._files.get(target)
        if content is None:
            raise PathNotFoundError(f"Broken symlink: {path} -> {target}")

        self._metadata[target].accessed_at = _now()
        return content

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
        """Create or overwrite a file.

        Writing to a link writes to the link's resolved target.  On
        overwrite, ``created_at`` is kept and options that are not passed
        keep their previous values.
        """
        data = to_bytes(content)
        normalized = self.normalize_path(path)
        target = self._resolve(normalized)

        if target in self._directories:
            raise StowError(f"Is a directory: {path}")

        self._prepare_parent(target, parents=parents)

        now = _now()
        previous = self._metadata.get(target)
        if previous is None:
            previous = Metadata(
                size=0,
                created_at=now,
                mode=DEFAULT_FILE_MODE,
                content_type=DEFAULT_CONTENT_TYPE,
            )

        self._files[target] = data
        self._metadata[target] = Metadata(
            size=len(data),
            created_at=previous.created_at,
            modified_at=now,
            accessed_at=now,
            mode=mode if mode is not None else previous.mode,
            content_type=content_type or previous.content_type,
            custom=dict(metadata) if metadata is not None else dict(previous.custom),
        )

    def exists(self, path: str) -> bool:
        return self._occupied(self.normalize_path(path))

    def delete(self, path: str, *, recursive: bool = False) -> None:
        """Remove a file, a link (not its target), or a directory."""
        normalized = self.normalize_path(path)
        if not self._occupied(normalized):
            raise PathNotFoundError(f"File not found: {path}")

        if normalized in self._directories:
            self._remove_directory(normalized, recursive=recursive)
            return

        self._files.pop(normalized, None)
        self._metadata.pop(normalized, None)
        self._symlinks.pop(normalized, None)

    def metadata(self, path: str) -> Metadata:
        normalized = self.normalize_path(path)
        if not self._occupied(normalized):
            raise PathNotFoundError(f"File not found: {path}")

        target = self._resolve(normalized)
        if target in self._directories:
            created = self._directories[target]
            return Metadata(
                size=0,
                created_at=created,
                modified_at=created,
                accessed_at=created,
                mode=DEFAULT_DIRECTORY_MODE,
                is_directory=True,
                is_file=False,
            )

        meta = self._metadata.get(target)
        if meta is None:
            raise PathNotFoundError(f"Broken symlink: {path} -> {target}")
        return dataclasses.replace(meta, custom=dict(meta.custom))

    # =========================================================================
    # Streaming Operations
    # =========================================================================

    def open_read(self, path: str) -> io.BytesIO:
        """Snapshot of the file's content as a closable stream."""
        return io.BytesIO(self.read(path))

    def open_write(
        self,
        path: str,
        *,
        content_type: str | None = None,
        metadata: dict[str, Any] | None = None,
        mode: int | None = None,
        parents: bool = True,
    ) -> BufferedCommitWriter:
        normalized = self.normalize_path(path)
        if self._resolve(normalized) in self._directories:
            raise StowError(f"Is a directory: {path}")
        return self._buffered_writer(
            normalized,
            content_type=content_type,
            metadata=metadata,
            mode=mode,
            parents=parents,
        )

    # =========================================================================
    # Directory Operations
    # =========================================================================

    def list(self, path: str = "/", *, recursive: bool = False, pattern: str = "*") -> list[str]:
        """Sorted canonical paths below a directory."""
        normalized = self.normalize_path(path)
        if not self._occupied(normalized):
            raise PathNotFoundError(f"Directory not found: {path}")

        directory = self._resolve(normalized)
        if directory not in self._directories:
            if not self._occupied(directory):
                raise PathNotFoundError(f"Broken symlink: {path} -> {directory}")
            raise StowError(f"Not a directory: {path}")

        prefix = child_prefix(directory)
        results: list[str] = []
        for candidate in self._descendants(directory):
            if not recursive and "/" in candidate[len(prefix):]:
                continue
            if matches_pattern(candidate, directory, pattern, recursive=recursive):
                results.append(candidate)
        return sorted(results)

    def mkdir(self, path: str, *, parents: bool = True) -> None:
        normalized = self.normalize_path(path)
        if self._occupied(normalized):
            raise StowError(f"Path already exists: {path}")

        self._prepare_parent(normalized, parents=parents)
        self._directories[normalized] = _now()

    def rmdir(self, path: str, *, recursive: bool = False) -> None:
        normalized = self.normalize_path(path)
        if not self._occupied(normalized):
            raise PathNotFoundError(f"Directory not found: {path}")
        if normalized not in self._directories:
            raise StowError(f"Not a directory: {path}")
        self._remove_directory(normalized, recursive=recursive)

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
        """Copy a file, carrying its content type, mode and custom attributes."""
        require_valid_path(dest)
        content, source_meta = self._read_source(source)
        self.write(
            dest,
            content,
            content_type=content_type or source_meta.content_type,
            metadata=metadata if metadata is not None else dict(source_meta.custom),
            mode=mode if mode is not None else source_meta.mode,
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
        """Move a file like a rename: a link at *dest* is replaced, not written through.

        A link at *dest* that resolves to a directory is refused.
        """
        src = self.normalize_path(source)
        dst = self.normalize_path(dest)
        if src == dst:
            return

        content, source_meta = self._read_source(source)
        if dst in self._symlinks:
            if self._resolve(dst) in self._directories:
                raise StowError(f"Is a directory: {dest}")
            del self._symlinks[dst]
            logger.debug("Replaced symlink at %s while moving %s", dst, src)

        self.write(
            dst,
            content,
            content_type=content_type or source_meta.content_type,
            metadata=metadata if metadata is not None else dict(source_meta.custom),
            mode=mode if mode is not None else source_meta.mode,
            parents=parents,
        )
        self.delete(src)

    def _read_source(self, source: str) -> tuple[bytes, Metadata]:
        """Content and metadata of a copy/move source, following links."""
        src = self.normalize_path(source)
        if not self._occupied(src):
            raise PathNotFoundError(f"Source file not found: {source}")
        if self._resolve(src) in self._directories:
            raise StowError(f"Cannot copy directory: {source}")

        content = self.read(src)
        return content, self._metadata[self._resolve(src)]

    # =========================================================================
    # Symlink Operations
    # =========================================================================

    def symlink(self, source: str, dest: str) -> None:
        """Create a link at *dest* pointing at *source* (which may not exist yet)."""
        src = self.normalize_path(source)
        dst = self.normalize_path(dest)

        if self._occupied(dst):
            raise SymlinkError(f"Symlink destination already exists: {dest}")

        if parent_path(dst) not in self._directories:
            raise InvalidPathError(f"Parent directory doesn't exist: {dest}")

        self._symlinks[dst] = src

    def is_symlink(self, path: str) -> bool:
        return self.normalize_path(path) in self._symlinks

    def readlink(self, path: str) -> str:
        """Immediate target of a link, after checking the chain resolves."""
        normalized = self.normalize_path(path)
        if normalized not in self._symlinks:
            raise SymlinkError(f"File is not a symlink: {path}")

        try:
            final = self._resolve(normalized)
        except SymlinkError as e:
            raise SymlinkError(f"Circular symlink detected: {path}") from e

        if not self._occupied(final):
            raise SymlinkError(f"Broken symlink: {path}")

        return self._symlinks[normalized]

    # =========================================================================
    # Inspection Helpers
    # =========================================================================

    def dump(self) -> MemorySnapshot:
        """Copy of the full internal state."""
        return MemorySnapshot(
            files=dict(self._files),
            directories=sorted(self._directories),
            symlinks=dict(self._symlinks),
            metadata={
                p: dataclasses.replace(m, custom=dict(m.custom))
                for p, m in self._metadata.items()
            },
        )

    def stats(self) -> MemoryStats:
        return MemoryStats(
            file_count=len(self._files),
            directory_count=len(self._directories),
            symlink_count=len(self._symlinks),
            total_size=sum(len(c) for c in self._files.values()),
        )

    def clear(self) -> None:
        """Drop every entry and re-create the root directory."""
        self._files.clear()
        self._directories.clear()
        self._symlinks.clear()
        self._metadata.clear()
        self._directories["/"] = _now()
