"""Exception hierarchy shared by every stowfs storage backend."""


class StowError(Exception):
    """Base exception for all stowfs storage errors."""


class PathNotFoundError(StowError):
    """Raised when a file, directory, or link target does not exist."""


class InvalidPathError(StowError):
    """Raised when a path is missing, empty, or malformed."""


class SymlinkError(StowError):
    """Raised on symlink misuse: occupied destination, non-link, broken link, or cycle."""


class PermissionDeniedError(StowError):
    """Raised when the underlying storage refuses access."""


class CapabilityNotSupportedError(StowError):
    """Raised when a backend doesn't support a requested capability."""
