"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import LoginSchema
from .common import Base64Bytes
from .file import FileCreateSchema, FilePatchSchema, FileSchema
from .user import (
    AccountCreateSchema,
    AccountPrivateSchema,
    AccountPublicSchema,
    AccountUpdateSchema,
)

__all__ = [
    "AccountCreateSchema",
    "AccountPrivateSchema",
    "AccountPublicSchema",
    "AccountUpdateSchema",
    "Base64Bytes",
    "FileCreateSchema",
    "FilePatchSchema",
    "FileSchema",
    "LoginSchema",
]
