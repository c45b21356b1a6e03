"""RegisteredPath model: one row per path a caller has touched."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


class RegisteredPath(SQLModel, table=True):
    """A path recorded by PathRegistry.

    Rows are append-only; the autoincrement ``id`` preserves registration
    order.  The same path may be registered more than once.
    """

    __tablename__ = "stow_registered_paths"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(index=True)
    registered_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_type=DateTime(timezone=True),
    )
