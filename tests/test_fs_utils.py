"""Tests for fs/utils.py — path helpers, validation, glob matching."""

from __future__ import annotations

import pytest

from stowfs.fs.exceptions import InvalidPathError
from stowfs.fs.utils import (
    guess_mime_type,
    is_descendant,
    iter_ancestors,
    matches_pattern,
    normalize_path,
    parent_path,
    require_valid_path,
    split_path,
    to_bytes,
    validate_path,
)

# ---------------------------------------------------------------------------
# Path Utilities
# ---------------------------------------------------------------------------


class TestNormalizePath:
    @pytest.mark.parametrize(
        ("input_path", "expected"),
        [
            pytest.param("", "/", id="empty"),
            pytest.param("/", "/", id="root"),
            pytest.param("foo.txt", "/foo.txt", id="no-leading-slash"),
            pytest.param("/foo//bar.txt", "/foo/bar.txt", id="double-slashes"),
            pytest.param("//foo", "/foo", id="leading-double-slash"),
            pytest.param("/foo/../bar.txt", "/bar.txt", id="dotdot"),
            pytest.param("/foo/./bar", "/foo/bar", id="dot"),
            pytest.param("/../../etc", "/etc", id="dotdot-above-root"),
            pytest.param("/foo/", "/foo", id="trailing-slash"),
            pytest.param("/a/b/..", "/a", id="trailing-dotdot"),
        ],
    )
    def test_normalize(self, input_path: str, expected: str):
        assert normalize_path(input_path) == expected

    def test_idempotent(self):
        once = normalize_path("a//b/../c/")
        assert normalize_path(once) == once


class TestSplitPath:
    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            pytest.param("/foo/bar.txt", ("/foo", "bar.txt"), id="nested-file"),
            pytest.param("/foo.txt", ("/", "foo.txt"), id="root-file"),
            pytest.param("/", ("/", ""), id="root"),
        ],
    )
    def test_split(self, path: str, expected: tuple[str, str]):
        assert split_path(path) == expected

    def test_parent_of_root_is_root(self):
        assert parent_path("/") == "/"


class TestAncestors:
    def test_nearest_first(self):
        assert list(iter_ancestors("/a/b/c.txt")) == ["/a/b", "/a", "/"]

    def test_root_has_none(self):
        assert list(iter_ancestors("/")) == []


class TestIsDescendant:
    @pytest.mark.parametrize(
        ("path", "directory", "expected"),
        [
            pytest.param("/foo/bar", "/foo", True, id="child"),
            pytest.param("/foo/bar/baz", "/foo", True, id="grandchild"),
            pytest.param("/foobar", "/foo", False, id="shared-prefix"),
            pytest.param("/foo", "/foo", False, id="self"),
            pytest.param("/foo", "/", True, id="below-root"),
            pytest.param("/", "/", False, id="root-self"),
        ],
    )
    def test_boundary(self, path: str, directory: str, expected: bool):
        assert is_descendant(path, directory) is expected


class TestValidatePath:
    def test_valid(self):
        ok, msg = validate_path("/hello.txt")
        assert ok is True
        assert msg == ""

    @pytest.mark.parametrize(
        ("path", "expected_msg"),
        [
            pytest.param(None, "None", id="none"),
            pytest.param("", "empty", id="empty"),
            pytest.param("   ", "empty", id="whitespace"),
            pytest.param("/hello\x00.txt", "null", id="null-byte"),
            pytest.param("/" + "a" * 4096, "long", id="path-too-long"),
            pytest.param(42, "string", id="not-a-string"),
        ],
    )
    def test_invalid(self, path: object, expected_msg: str):
        ok, msg = validate_path(path)
        assert ok is False
        assert expected_msg in msg

    def test_require_raises(self):
        with pytest.raises(InvalidPathError, match="null"):
            require_valid_path("/a\x00")

    def test_require_returns_path(self):
        assert require_valid_path("a/b") == "a/b"


# ---------------------------------------------------------------------------
# Matching & Content
# ---------------------------------------------------------------------------


class TestMatchesPattern:
    def test_star_matches_everything(self):
        assert matches_pattern("/d/x/y", "/d", "*", recursive=True)

    def test_non_recursive_matches_basename(self):
        assert matches_pattern("/d/a.txt", "/d", "*.txt", recursive=False)
        assert not matches_pattern("/d/a.md", "/d", "*.txt", recursive=False)

    def test_recursive_matches_any_segment(self):
        assert matches_pattern("/d/sub/c.md", "/d", "sub", recursive=True)
        assert matches_pattern("/d/sub/c.txt", "/d", "*.txt", recursive=True)
        assert not matches_pattern("/d/other/c.md", "/d", "sub", recursive=True)

    def test_segments_relative_to_directory(self):
        # "d" is the listed directory itself, not a segment of the candidate
        assert not matches_pattern("/d/x.md", "/d", "d", recursive=True)

    def test_case_sensitive(self):
        assert not matches_pattern("/d/A.TXT", "/d", "*.txt", recursive=False)


class TestGuessMimeType:
    def test_known(self):
        assert guess_mime_type("page.html") == "text/html"

    def test_unknown_falls_back_to_octet_stream(self):
        assert guess_mime_type("blob.zzzunknown") == "application/octet-stream"


class TestToBytes:
    def test_bytes_passthrough(self):
        assert to_bytes(b"\x00\xff") == b"\x00\xff"

    def test_str_encoded_utf8(self):
        assert to_bytes("héllo") == "héllo".encode()

    def test_bytearray(self):
        assert to_bytes(bytearray(b"ab")) == b"ab"

    def test_rejects_other(self):
        with pytest.raises(TypeError):
            to_bytes(123)  # type: ignore[arg-type]
