"""Record types: Capabilities, Metadata, and in-memory inspection snapshots."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_FILE_MODE = 0o644
DEFAULT_DIRECTORY_MODE = 0o755


@dataclass(frozen=True, slots=True)
class Capabilities:
    """Static feature flags a backend declares.

    Callers check these before invoking optional operations instead of
    probing the backend for methods.
    """

    symlinks: bool = False
    permissions: bool = False
    streaming: bool = False
    atomic_writes: bool = False
    custom_metadata: bool = False


@dataclass
class Metadata:
    """File/directory metadata.

    At most one of ``is_directory``, ``is_file`` and ``is_symlink`` is true.
    ``metadata()`` follows links on every backend and describes the target,
    so records it returns never set ``is_symlink``; ask the backend's
    ``is_symlink()`` about the link itself.
    """

    size: int
    created_at: datetime | None = None
    modified_at: datetime | None = None
    accessed_at: datetime | None = None
    mode: int | None = None
    content_type: str = DEFAULT_CONTENT_TYPE
    custom: dict[str, Any] = field(default_factory=dict)
    is_directory: bool = False
    is_file: bool = True
    is_symlink: bool = False

    def as_dict(self) -> dict[str, Any]:
        """Render the record with the ``directory``/``file``/``symlink`` key names."""
        return {
            "size": self.size,
            "created_at": self.created_at,
            "modified_at": self.modified_at,
            "accessed_at": self.accessed_at,
            "mode": self.mode,
            "content_type": self.content_type,
            "custom": dict(self.custom),
            "directory": self.is_directory,
            "file": self.is_file,
            "symlink": self.is_symlink,
        }


@dataclass
class MemorySnapshot:
    """Copy of every internal mapping of a MemoryBackend."""

    files: dict[str, bytes] = field(default_factory=dict)
    directories: list[str] = field(default_factory=list)
    symlinks: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Metadata] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class MemoryStats:
    """Aggregate counts for a MemoryBackend."""

    file_count: int
    directory_count: int
    symlink_count: int
    total_size: int
