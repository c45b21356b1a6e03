"""StowConfig: declarative choice of backend and registry."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from stowfs.fs.local_disk import LocalDiskBackend
from stowfs.fs.memory import MemoryBackend
from stowfs.registry import DEFAULT_REGISTRY_URL, PathRegistry

BACKEND_KINDS = ("memory", "local")


@dataclass
class StowConfig:
    """Configuration for a Stow instance.

    Each ``build_*`` call returns a fresh object; nothing is cached or
    shared between instances.
    """

    backend: str = "memory"
    """Backend kind: "memory" or "local"."""

    root: str | Path | None = None
    """Host directory mapped to ``/`` for the local backend (host root if None)."""

    registry_url: str = DEFAULT_REGISTRY_URL
    """SQLAlchemy URL for the path registry."""

    echo: bool = False
    """Echo registry SQL statements."""

    def __post_init__(self) -> None:
        self.backend = self.backend.strip().lower()
        if self.backend not in BACKEND_KINDS:
            msg = f"Unknown backend {self.backend!r}; expected one of {', '.join(BACKEND_KINDS)}"
            raise ValueError(msg)
        if self.root is not None:
            if self.backend != "local":
                msg = "root is only meaningful for the local backend"
                raise ValueError(msg)
            self.root = Path(self.root)

    def build_backend(self) -> MemoryBackend | LocalDiskBackend:
        if self.backend == "local":
            return LocalDiskBackend(root=self.root)
        return MemoryBackend()

    def build_registry(self) -> PathRegistry:
        return PathRegistry(url=self.registry_url, echo=self.echo)
