"""SQLModel database models for stowfs."""

from stowfs.models.paths import RegisteredPath

__all__ = ["RegisteredPath"]
