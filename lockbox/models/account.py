"""Account table mapping."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, String, UniqueConstraint, false
from sqlalchemy.orm import Mapped, mapped_column

from lockbox.core.extensions import db

from .base import CreatedAtMixin, PKMixin, PreciseDateTime, ReprMixin


class AccountRecord(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Persistent row for an account.

    The row is a pure storage shape: hashing, validation and uniqueness
    reporting live in the account service. The unique constraints back up the
    service-level checks against concurrent inserts.

    Fields
    ------
    password_reset_at : datetime
        Advanced on every password change; doubles as the token epoch.
    profile_picture_url : str
        Display picture reference.
    username : str
        Unique login handle.
    email : str
        Unique email address, stored as given.
    password : str
        Password hash (never plain text once persisted).
    is_email_verified, is_password_reset_required, is_locked, is_banned : bool
        Independent flags persisted as-is.
    """

    __tablename__ = "accounts"

    password_reset_at: Mapped[datetime] = mapped_column(PreciseDateTime, nullable=False)
    profile_picture_url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    username: Mapped[str] = mapped_column(String(32), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password: Mapped[str] = mapped_column(String(1024), nullable=False)

    is_email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_password_reset_required: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_locked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    is_banned: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    __table_args__ = (
        UniqueConstraint("username", name="uq_accounts_username"),
        UniqueConstraint("email", name="uq_accounts_email"),
        # Deleted ids must never be reissued; files keep their owner_id.
        {"sqlite_autoincrement": True},
    )
