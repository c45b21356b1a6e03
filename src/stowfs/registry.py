"""PathRegistry: ordered bookkeeping of paths a caller has touched."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import or_
from sqlmodel import Session, col, create_engine, select

from stowfs.fs.utils import child_prefix, normalize_path, require_valid_path, validate_path
from stowfs.models.paths import RegisteredPath

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

DEFAULT_REGISTRY_URL = "sqlite://"


class PathRegistry:
    """Append/remove record of paths, persisted through SQLModel.

    The registry is bookkeeping for callers and tests, never the source of
    truth for what a backend holds.  By default it lives in an in-memory
    SQLite database that disappears with the registry.

    Usage::

        registry = PathRegistry()
        registry.organize("/docs/a.txt")
        assert "/docs/a.txt" in registry
    """

    def __init__(
        self,
        engine: Engine | None = None,
        *,
        url: str = DEFAULT_REGISTRY_URL,
        echo: bool = False,
    ) -> None:
        self._owns_engine = engine is None
        self._engine = engine if engine is not None else create_engine(url, echo=echo)
        RegisteredPath.__table__.create(self._engine, checkfirst=True)  # type: ignore[attr-defined]

    @property
    def engine(self) -> Engine:
        return self._engine

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def organize(self, path: str) -> None:
        """Append *path* to the registry."""
        path = normalize_path(require_valid_path(path))
        with Session(self._engine) as session:
            session.add(RegisteredPath(path=path))
            session.commit()
        logger.debug("Registered path %s", path)

    def remove(self, path: str, *, recursive: bool = False) -> bool:
        """Drop every registration of *path*. Return True if any existed.

        With ``recursive``, registrations below *path* are dropped too.
        """
        path = normalize_path(require_valid_path(path))
        condition = col(RegisteredPath.path) == path
        if recursive:
            below = col(RegisteredPath.path).startswith(child_prefix(path), autoescape=True)
            condition = or_(condition, below)
        with Session(self._engine) as session:
            rows = session.exec(select(RegisteredPath).where(condition)).all()
            for row in rows:
                session.delete(row)
            session.commit()
        if rows:
            logger.debug("Unregistered path %s (%d entries)", path, len(rows))
        return bool(rows)

    def clear(self) -> None:
        """Remove all registrations."""
        with Session(self._engine) as session:
            for row in session.exec(select(RegisteredPath)).all():
                session.delete(row)
            session.commit()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def known_paths(self) -> list[str]:
        """Registered paths in registration order (duplicates kept)."""
        with Session(self._engine) as session:
            order = RegisteredPath.id
            query = select(RegisteredPath.path).order_by(order)  # type: ignore[arg-type]
            return list(session.exec(query).all())

    def contains(self, path: str) -> bool:
        path = normalize_path(require_valid_path(path))
        with Session(self._engine) as session:
            query = select(RegisteredPath.id).where(RegisteredPath.path == path).limit(1)
            return session.exec(query).first() is not None

    def __contains__(self, path: object) -> bool:
        valid, _ = validate_path(path)
        if not valid:
            return False
        return self.contains(path)  # type: ignore[arg-type]

    def __iter__(self) -> Iterator[str]:
        return iter(self.known_paths())

    def __len__(self) -> int:
        return len(self.known_paths())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Dispose the engine if this registry created it."""
        if self._owns_engine:
            self._engine.dispose()
