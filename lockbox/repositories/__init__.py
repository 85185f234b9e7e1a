"""Repository package exposing the SQL adapters for the store ports."""

from __future__ import annotations

from lockbox.repositories.account import AccountRepository
from lockbox.repositories.base import BaseRepository
from lockbox.repositories.file import FileRepository

__all__ = [
    "AccountRepository",
    "BaseRepository",
    "FileRepository",
]
