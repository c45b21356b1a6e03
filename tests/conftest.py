"""Shared fixtures for stowfs tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from sqlmodel import create_engine

from stowfs.fs.local_disk import LocalDiskBackend
from stowfs.fs.memory import MemoryBackend
from stowfs.registry import PathRegistry

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from sqlalchemy import Engine

    from stowfs.fs.base import BaseBackend


@pytest.fixture
def memory() -> MemoryBackend:
    """Fresh in-memory backend."""
    return MemoryBackend()


@pytest.fixture
def disk(tmp_path: Path) -> LocalDiskBackend:
    """LocalDiskBackend rooted at a temporary directory."""
    return LocalDiskBackend(root=tmp_path)


@pytest.fixture(params=["memory", "disk"])
def backend(request: pytest.FixtureRequest, tmp_path: Path) -> BaseBackend:
    """Each backend in turn, for behaviour both must share."""
    if request.param == "disk":
        return LocalDiskBackend(root=tmp_path)
    return MemoryBackend()


@pytest.fixture
def engine() -> Iterator[Engine]:
    """In-memory SQLite engine."""
    eng = create_engine("sqlite://", echo=False)
    yield eng
    eng.dispose()


@pytest.fixture
def registry(engine: Engine) -> PathRegistry:
    """PathRegistry bound to the in-memory engine."""
    return PathRegistry(engine)
