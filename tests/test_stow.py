"""Tests for the Stow facade and StowConfig."""

from __future__ import annotations

import logging

import pytest

from stowfs import Stow, StowConfig
from stowfs.fs.exceptions import PathNotFoundError, StowError
from stowfs.fs.file import StoredFile
from stowfs.fs.link import Link
from stowfs.fs.local_disk import LocalDiskBackend
from stowfs.fs.memory import MemoryBackend
from stowfs.registry import PathRegistry


@pytest.fixture
def stow():
    with Stow.in_memory() as s:
        yield s


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


class TestConstruction:
    def test_in_memory(self, stow):
        assert stow.is_memory
        assert isinstance(stow.backend, MemoryBackend)
        assert isinstance(stow.registry, PathRegistry)

    def test_instances_are_isolated(self):
        with Stow.in_memory() as a, Stow.in_memory() as b:
            a.write("/f", b"x")
            assert not b.exists("/f")
            assert not b.has("/f")

    def test_local(self, tmp_path):
        with Stow.local(tmp_path) as s:
            assert not s.is_memory
            s.write("/f.txt", b"on disk")
        assert (tmp_path / "f.txt").read_bytes() == b"on disk"

    def test_injected_backend_and_registry(self, registry):
        backend = MemoryBackend()
        s = Stow(backend, registry)
        assert s.backend is backend
        assert s.registry is registry

    def test_rejects_non_backend(self):
        with pytest.raises(TypeError, match="StorageBackend"):
            Stow(object())  # type: ignore[arg-type]

    def test_close_is_idempotent(self):
        s = Stow.in_memory()
        s.close()
        s.close()


class TestConfig:
    def test_defaults(self):
        config = StowConfig()
        assert config.backend == "memory"
        assert isinstance(config.build_backend(), MemoryBackend)

    def test_builds_fresh_objects(self):
        config = StowConfig()
        assert config.build_backend() is not config.build_backend()

    def test_local(self, tmp_path):
        config = StowConfig(backend="Local", root=str(tmp_path))
        assert config.backend == "local"
        backend = config.build_backend()
        assert isinstance(backend, LocalDiskBackend)
        assert backend.root == tmp_path.resolve()

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            StowConfig(backend="s3")

    def test_root_requires_local(self, tmp_path):
        with pytest.raises(ValueError, match="root"):
            StowConfig(root=tmp_path)

    def test_from_config_with_file_registry(self, tmp_path):
        url = f"sqlite:///{tmp_path / 'reg.db'}"
        with Stow.from_config(StowConfig(registry_url=url)) as s:
            s.write("/a", b"x")
        with Stow.from_config(StowConfig(registry_url=url)) as s:
            assert s.has("/a")
            assert not s.exists("/a")

    def test_missing_local_root(self, tmp_path):
        with pytest.raises(PathNotFoundError):
            Stow.from_config(StowConfig(backend="local", root=tmp_path / "nope"))


# ---------------------------------------------------------------------------
# File handles
# ---------------------------------------------------------------------------


class TestHandles:
    def test_insert_registers(self, stow):
        f = stow.insert("/docs/a.txt", b"hello")
        assert isinstance(f, StoredFile)
        assert f.read() == b"hello"
        assert stow.has("/docs/a.txt")
        assert stow.has(f)

    def test_insert_empty(self, stow):
        f = stow.insert("/empty")
        assert f.read() == b""

    def test_failed_insert_not_registered(self, stow):
        stow.mkdir("/d")
        with pytest.raises(StowError):
            stow.insert("/d", b"x")
        assert not stow.has("/d")

    def test_retrieve(self, stow):
        stow.insert("/a", b"x")
        f = stow.retrieve("/a")
        assert f.read() == b"x"
        assert not stow.retrieve("/missing").exists()

    def test_delete_unregisters(self, stow):
        f = stow.insert("/a", b"x")
        returned = stow.delete(f)
        assert returned is f
        assert not stow.exists("/a")
        assert not stow.has("/a")

    def test_delete_by_path(self, stow):
        stow.insert("/d/a", b"x")
        stow.delete("/d", recursive=True)
        assert not stow.exists("/d")

    def test_recursive_delete_unregisters_descendants(self, stow):
        stow.insert("/d/a", b"x")
        stow.insert("/d/sub/b", b"y")
        stow.insert("/dx", b"z")
        stow.delete("/d", recursive=True)
        assert not stow.has("/d/a")
        assert not stow.has("/d/sub/b")
        assert stow.has("/dx")

    def test_delete_missing(self, stow):
        with pytest.raises(PathNotFoundError):
            stow.delete("/missing")

    def test_has_unknown(self, stow):
        assert not stow.has("/nothing")
        assert not stow.has("")

    def test_link(self, stow):
        builder = stow.link("/source.txt")
        assert isinstance(builder, Link)
        assert stow.has("/source.txt")
        link = builder.to("/alias.txt")
        assert link.destination() == "/source.txt"
        assert stow.read("/alias.txt") == b""


# ---------------------------------------------------------------------------
# Pass-throughs
# ---------------------------------------------------------------------------


class TestPassThroughs:
    def test_write_read(self, stow):
        stow.write("/a.txt", "text", content_type="text/plain")
        assert stow.read("/a.txt") == b"text"
        assert stow.metadata("/a.txt").content_type == "text/plain"
        assert stow.has("/a.txt")

    def test_list_and_mkdir(self, stow):
        stow.mkdir("/d/e")
        stow.write("/d/f.txt", b"x")
        assert stow.list("/d") == ["/d/e", "/d/f.txt"]
        assert stow.list("/d", pattern="*.txt") == ["/d/f.txt"]
        assert stow.list() == ["/d"]

    def test_copy_registers_dest(self, stow):
        stow.write("/a", b"x")
        stow.copy("/a", "/b")
        assert stow.read("/b") == b"x"
        assert stow.has("/b")

    def test_move_updates_registry(self, stow):
        stow.write("/a", b"x")
        stow.move("/a", "/b")
        assert not stow.has("/a")
        assert stow.has("/b")
        assert stow.registry.known_paths() == ["/b"]

    def test_streams(self, stow):
        with stow.open_write("/s") as out:
            out.write(b"streamed")
        with stow.open_read("/s") as stream:
            assert stream.read() == b"streamed"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


class TestLogging:
    def test_success_logged_at_info(self, stow, caplog):
        with caplog.at_level(logging.INFO, logger="stowfs._stow"):
            stow.write("/a", b"x")
        assert "Successfully wrote file: /a" in caplog.text

    def test_failure_logged_at_error(self, stow, caplog):
        with caplog.at_level(logging.ERROR, logger="stowfs._stow"), pytest.raises(StowError):
            stow.move("/missing", "/b")
        records = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert records
        assert "Failed to move /missing to /b" in records[0].getMessage()

    def test_debug_for_mkdir(self, stow, caplog):
        with caplog.at_level(logging.DEBUG, logger="stowfs._stow"):
            stow.mkdir("/d")
        assert "Creating directory: /d" in caplog.text
        assert "Successfully created directory: /d" in caplog.text
