"""stowfs: one storage contract, a real disk and an in-memory stand-in.

Application code talks to a backend through the same operations whether it
runs against the host filesystem or a deterministic in-memory emulation.
"""

__version__ = "0.1.0"

from stowfs._stow import Stow
from stowfs.config import StowConfig
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
from stowfs.fs.memory import MemoryBackend
from stowfs.fs.protocol import StorageBackend, SupportsStreaming, SupportsSymlinks
from stowfs.fs.types import Capabilities, Metadata
from stowfs.registry import PathRegistry

__all__ = [
    "Capabilities",
    "CapabilityNotSupportedError",
    "InvalidPathError",
    "Link",
    "LocalDiskBackend",
    "MemoryBackend",
    "Metadata",
    "PathNotFoundError",
    "PathRegistry",
    "PermissionDeniedError",
    "StorageBackend",
    "StoredFile",
    "Stow",
    "StowConfig",
    "StowError",
    "SupportsStreaming",
    "SupportsSymlinks",
    "SymlinkError",
    "__version__",
]
