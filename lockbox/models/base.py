"""Column mixins shared by the ORM records."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column

# MySQL truncates DATETIME to whole seconds unless fsp is requested. The
# password reset epoch needs microseconds to survive a round trip.
PreciseDateTime = DateTime(timezone=True).with_variant(mysql.DATETIME(fsp=6), "mysql", "mariadb")


class CreatedAtMixin:
    """``created_at`` column, written by the application.

    The server default only covers rows inserted by hand.
    """

    created_at: Mapped[datetime] = mapped_column(
        PreciseDateTime,
        nullable=False,
        server_default=func.now(),
    )


class PKMixin:
    """Integer ``id`` primary key assigned by the database."""

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)


class ReprMixin:
    def __repr__(self) -> str:
        return f"<{type(self).__name__} id={getattr(self, 'id', None)}>"
