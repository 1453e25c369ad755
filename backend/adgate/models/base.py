"""Column mixins shared by the adgate tables."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from adgate.core.clock import utcnow


def _stamp(**kwargs):
    return mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now(), **kwargs
    )


class CreatedAtMixin:
    """Insert-time ``created_at``.

    Stamped in Python rather than by the database, so rows flushed in the same
    unit of work can be ordered by it reliably.
    """

    created_at: Mapped[datetime] = _stamp()


class TimestampMixin(CreatedAtMixin):
    """``created_at`` plus an ``updated_at`` refreshed on every UPDATE."""

    updated_at: Mapped[datetime] = _stamp(onupdate=utcnow)


class PKMixin:
    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class ReprMixin:
    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
