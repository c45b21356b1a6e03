"""BufferedCommitWriter: a write stream that lands in a backend on close."""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from types import TracebackType

logger = logging.getLogger(__name__)


class BufferedCommitWriter:
    """Accumulates bytes in memory and commits them through a callback.

    Used as a context manager, the buffer is committed exactly once on a
    clean exit and discarded when an exception escapes the block.  Used
    without ``with``, ``close()`` commits.  The buffer is released either way.

    Usage::

        with backend.open_write("/logs/run.txt") as out:
            out.write(b"started\\n")
    """

    def __init__(self, path: str, commit: Callable[[bytes], Any]) -> None:
        self.path = path
        self._commit = commit
        self._buffer = io.BytesIO()
        self._committed = False

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def write(self, data: bytes | str) -> int:
        if isinstance(data, str):
            data = data.encode("utf-8")
        return self._buffer.write(data)

    def writelines(self, lines: Iterable[bytes | str]) -> None:
        for line in lines:
            self.write(line)

    def getvalue(self) -> bytes:
        """Bytes buffered so far."""
        return self._buffer.getvalue()

    @property
    def closed(self) -> bool:
        return self._buffer.closed

    @property
    def committed(self) -> bool:
        return self._committed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Commit the buffer (once) and release it."""
        if self.closed:
            return
        try:
            if not self._committed:
                self._commit(self._buffer.getvalue())
                self._committed = True
        finally:
            self._buffer.close()

    def discard(self) -> None:
        """Release the buffer without committing."""
        if not self.closed:
            logger.debug("Discarding uncommitted stream for %s", self.path)
            self._buffer.close()

    def __enter__(self) -> BufferedCommitWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        if exc_type is None:
            self.close()
        else:
            self.discard()
