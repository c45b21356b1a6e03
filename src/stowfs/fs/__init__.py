"""Filesystem layer: backend contract, in-memory emulation, disk adapter."""

from stowfs.fs.base import BaseBackend
from stowfs.fs.exceptions import (
    CapabilityNotSupportedError,
    InvalidPathError,
    PathNotFoundError,
    PermissionDeniedError,
    StowError,
    SymlinkError,
)
from stowfs.fs.file import StoredFile
from stowfs.fs.link import Link
from stowfs.fs.local_disk import LocalDiskBackend
from stowfs.fs.memory import MAX_SYMLINK_HOPS, MemoryBackend
from stowfs.fs.protocol import StorageBackend, SupportsStreaming, SupportsSymlinks
from stowfs.fs.streams import BufferedCommitWriter
from stowfs.fs.types import Capabilities, MemorySnapshot, MemoryStats, Metadata
from stowfs.fs.utils import normalize_path, split_path, validate_path

__all__ = [
    "MAX_SYMLINK_HOPS",
    "BaseBackend",
    "BufferedCommitWriter",
    "Capabilities",
    "CapabilityNotSupportedError",
    "InvalidPathError",
    "Link",
    "LocalDiskBackend",
    "MemoryBackend",
    "MemorySnapshot",
    "MemoryStats",
    "Metadata",
    "PathNotFoundError",
    "PermissionDeniedError",
    "StorageBackend",
    "StoredFile",
    "StowError",
    "SupportsStreaming",
    "SupportsSymlinks",
    "SymlinkError",
    "normalize_path",
    "split_path",
    "validate_path",
]
