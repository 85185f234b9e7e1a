"""File table mapping."""

from __future__ import annotations

from sqlalchemy import Index, Integer, LargeBinary, String
from sqlalchemy.dialects import mysql
from sqlalchemy.orm import Mapped, mapped_column

from lockbox.core.extensions import db

from .base import CreatedAtMixin, PKMixin, ReprMixin

# MySQL BLOB stops at 64 KiB.
Payload = LargeBinary().with_variant(mysql.LONGBLOB(), "mysql", "mariadb")


class FileRecord(PKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    Persistent row for a file owned by an account.

    ``owner_id`` is a plain back-reference to ``accounts.id`` used for
    ownership checks. There is no foreign key, so deleting an account leaves
    its files in place.
    """

    __tablename__ = "files"

    owner_id: Mapped[int] = mapped_column(Integer, nullable=False)
    mime_type: Mapped[str] = mapped_column(String(256), nullable=False)
    name: Mapped[str] = mapped_column(String(256), nullable=False)
    data: Mapped[bytes] = mapped_column(Payload, nullable=False, default=b"")

    __table_args__ = (
        Index("ix_files_owner_id", "owner_id"),
        {"sqlite_autoincrement": True},
    )
