"""Path utilities, glob matching, content coercion."""

from __future__ import annotations

import mimetypes
import posixpath
from fnmatch import fnmatchcase
from typing import TYPE_CHECKING

from .exceptions import InvalidPathError
from .types import DEFAULT_CONTENT_TYPE

if TYPE_CHECKING:
    from collections.abc import Iterator

MAX_PATH_LENGTH = 4096

# =============================================================================
# Path Utilities
# =============================================================================


def normalize_path(path: str) -> str:
    """Canonicalize a virtual file system path.

    - Ensures leading /
    - Resolves .. and . references (.. above the root stays at the root)
    - Collapses repeated slashes
    - Removes trailing slash (except for root)

    Examples:
        normalize_path("foo.txt") -> "/foo.txt"
        normalize_path("/foo//bar.txt") -> "/foo/bar.txt"
        normalize_path("/foo/../bar.txt") -> "/bar.txt"
        normalize_path("/foo/") -> "/foo"
        normalize_path("") -> "/"
    """
    if not path:
        return "/"

    parts: list[str] = []
    for segment in path.strip().split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)

    return "/" + "/".join(parts)


def split_path(path: str) -> tuple[str, str]:
    """Split path into (parent_dir, name).

    Examples:
        split_path("/foo/bar.txt") -> ("/foo", "bar.txt")
        split_path("/foo.txt") -> ("/", "foo.txt")
        split_path("/") -> ("/", "")
    """
    path = normalize_path(path)
    if path == "/":
        return "/", ""
    return posixpath.split(path)


def parent_path(path: str) -> str:
    """Parent of a canonical path; the root is its own parent."""
    return split_path(path)[0]


def iter_ancestors(path: str) -> Iterator[str]:
    """Yield the strict ancestors of *path*, nearest first, ending with ``/``."""
    current = normalize_path(path)
    while current != "/":
        current = parent_path(current)
        yield current


def child_prefix(path: str) -> str:
    """Prefix shared by every strict descendant of the directory *path*."""
    return "/" if path == "/" else path + "/"


def is_descendant(path: str, directory: str) -> bool:
    """True if *path* lies strictly below *directory*.

    The boundary is the separator, so ``/foobar`` is not below ``/foo``.
    """
    return path != directory and path.startswith(child_prefix(directory))


def validate_path(path: object) -> tuple[bool, str]:
    """Validate a caller-supplied path before it reaches a backend.

    Returns:
        (is_valid, error_message) - error_message is empty if valid
    """
    if path is None:
        return False, "Path cannot be None"

    if not isinstance(path, str):
        return False, f"Path must be a string, got {type(path).__name__}"

    if not path.strip():
        return False, "Path cannot be empty"

    if "\x00" in path:
        return False, "Path contains null bytes"

    if len(path) > MAX_PATH_LENGTH:
        return False, f"Path too long (max {MAX_PATH_LENGTH} characters)"

    return True, ""


def require_valid_path(path: object) -> str:
    """Return *path* unchanged, raising InvalidPathError when it fails validation."""
    valid, error = validate_path(path)
    if not valid:
        raise InvalidPathError(error)
    return path  # type: ignore[return-value]


# =============================================================================
# Matching & Content
# =============================================================================


def matches_pattern(path: str, directory: str, pattern: str, *, recursive: bool) -> bool:
    """Apply a list() glob to a candidate below *directory*.

    Non-recursive listings match the basename; recursive listings accept the
    candidate when any segment of its path relative to *directory* matches.
    """
    if pattern == "*":
        return True
    relative = path[len(child_prefix(directory)):]
    if not recursive:
        return fnmatchcase(relative, pattern)
    return any(fnmatchcase(segment, pattern) for segment in relative.split("/"))


def guess_mime_type(filename: str) -> str:
    """Guess the MIME type of a file based on its name."""
    mime_type, _ = mimetypes.guess_type(filename)
    return mime_type or DEFAULT_CONTENT_TYPE


def to_bytes(content: bytes | bytearray | memoryview | str) -> bytes:
    """Coerce write() content to bytes; text is encoded as UTF-8."""
    if isinstance(content, str):
        return content.encode("utf-8")
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    msg = f"Content must be bytes or str, got {type(content).__name__}"
    raise TypeError(msg)
