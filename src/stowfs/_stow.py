"""Stow: top-level facade pairing one backend with one path registry."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from stowfs.config import StowConfig
from stowfs.fs.file import StoredFile
from stowfs.fs.link import Link
from stowfs.fs.memory import MemoryBackend
from stowfs.fs.protocol import StorageBackend
from stowfs.registry import PathRegistry

if TYPE_CHECKING:
    from pathlib import Path
    from typing import BinaryIO

    from stowfs.fs.streams import BufferedCommitWriter
    from stowfs.fs.types import Metadata

logger = logging.getLogger(__name__)


class Stow:
    """Facade over one storage backend and one path registry.

    The backend is injected, never looked up from process state.  A
    disposable in-memory instance for tests is just another constructor
    call::

        with Stow.in_memory() as stow:
            stow.write("/notes/today.txt", b"hello")
            assert stow.read("/notes/today.txt") == b"hello"

    Mutating calls log at ``debug`` before and ``info`` after, and log
    failures at ``error`` before re-raising.
    """

    def __init__(self, backend: StorageBackend, registry: PathRegistry | None = None) -> None:
        if not isinstance(backend, StorageBackend):
            msg = f"Backend must implement StorageBackend, got {type(backend).__name__}"
            raise TypeError(msg)
        self._backend = backend
        self._registry = registry if registry is not None else PathRegistry()
        self._closed = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def in_memory(cls) -> Stow:
        """Fresh instance over a new MemoryBackend."""
        return cls(MemoryBackend())

    @classmethod
    def local(cls, root: str | Path | None = None) -> Stow:
        """Fresh instance over the host filesystem below *root*."""
        return cls.from_config(StowConfig(backend="local", root=root))

    @classmethod
    def from_config(cls, config: StowConfig) -> Stow:
        return cls(config.build_backend(), config.build_registry())

    @property
    def backend(self) -> StorageBackend:
        return self._backend

    @property
    def registry(self) -> PathRegistry:
        return self._registry

    @property
    def is_memory(self) -> bool:
        """True when the active backend is the in-memory emulation."""
        return isinstance(self._backend, MemoryBackend)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._registry.close()

    def __enter__(self) -> Stow:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # File handles
    # ------------------------------------------------------------------

    def _path_of(self, file: StoredFile | str) -> str:
        return file.path if isinstance(file, StoredFile) else file

    def insert(self, path: str, content: bytes | str = b"") -> StoredFile:
        """Write *content* at *path*, register it, and return its handle."""
        stored = StoredFile(path, self._backend)
        logger.debug("Inserting file: %s", path)
        try:
            stored.write(content)
        except Exception as e:
            logger.error("Failed to create file %s: %s", path, e, exc_info=True)
            raise
        self._registry.organize(path)
        logger.info("Successfully inserted file: %s", path)
        return stored

    def retrieve(self, path: str) -> StoredFile:
        """Handle for *path*; the file need not exist."""
        logger.debug("Retrieving file: %s", path)
        return StoredFile(path, self._backend)

    def delete(self, file: StoredFile | str, *, recursive: bool = False) -> StoredFile:
        """Delete a file or directory and unregister it.

        A recursive delete also unregisters every path below the directory.
        """
        stored = file if isinstance(file, StoredFile) else self.retrieve(file)
        logger.debug("Deleting file: %s", stored.path)
        try:
            self._backend.delete(stored.path, recursive=recursive)
        except Exception as e:
            logger.error("Failed to delete file %s: %s", stored.path, e, exc_info=True)
            raise
        self._registry.remove(stored.path, recursive=recursive)
        logger.info("Successfully deleted file: %s", stored.path)
        return stored

    def has(self, file: StoredFile | str) -> bool:
        """True if the path was registered through this facade."""
        return self._path_of(file) in self._registry

    def link(self, path: str) -> Link:
        """Insert an empty file at *path* and return a Link builder for it."""
        logger.debug("Creating symlink from: %s", path)
        return Link(self.insert(path))

    # ------------------------------------------------------------------
    # Backend pass-throughs
    # ------------------------------------------------------------------

    def read(self, path: str) -> bytes:
        logger.debug("Reading file: %s", path)
        return self._backend.read(path)

    def write(self, path: str, content: bytes | str, **options: Any) -> None:
        logger.debug("Writing file: %s", path)
        try:
            self._backend.write(path, content, **options)
        except Exception as e:
            logger.error("Failed to write file %s: %s", path, e, exc_info=True)
            raise
        self._registry.organize(path)
        logger.info("Successfully wrote file: %s", path)

    def exists(self, path: str) -> bool:
        return self._backend.exists(path)

    def list(self, path: str = "/", **options: Any) -> list[str]:
        return self._backend.list(path, **options)

    def copy(self, source: str, dest: str, **options: Any) -> None:
        logger.debug("Copying %s to %s", source, dest)
        try:
            self._backend.copy(source, dest, **options)
        except Exception as e:
            logger.error("Failed to copy %s to %s: %s", source, dest, e, exc_info=True)
            raise
        self._registry.organize(dest)
        logger.info("Successfully copied %s to %s", source, dest)

    def move(self, source: str, dest: str, **options: Any) -> None:
        logger.debug("Moving %s to %s", source, dest)
        try:
            self._backend.move(source, dest, **options)
        except Exception as e:
            logger.error("Failed to move %s to %s: %s", source, dest, e, exc_info=True)
            raise
        self._registry.remove(source)
        self._registry.organize(dest)
        logger.info("Successfully moved %s to %s", source, dest)

    def metadata(self, path: str) -> Metadata:
        return self._backend.metadata(path)

    def mkdir(self, path: str, *, parents: bool = True) -> None:
        logger.debug("Creating directory: %s", path)
        try:
            self._backend.mkdir(path, parents=parents)
        except Exception as e:
            logger.error("Failed to create directory %s: %s", path, e, exc_info=True)
            raise
        logger.info("Successfully created directory: %s", path)

    def open_read(self, path: str) -> BinaryIO:
        return self._backend.open_read(path)  # type: ignore[attr-defined]

    def open_write(self, path: str, **options: Any) -> BufferedCommitWriter:
        return self._backend.open_write(path, **options)  # type: ignore[attr-defined]
