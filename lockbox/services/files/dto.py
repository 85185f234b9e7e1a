"""File value objects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from lockbox.services._shared.clock import utc_now


@dataclass(frozen=True, slots=True)
class File:
    """
    A file record owned by one account.

    :param id: Storage-assigned identifier; ``0`` while unassigned.
    :type id: int
    :param owner_id: Owning account id.
    :type owner_id: int
    :param data: Opaque payload.
    :type data: bytes
    """

    id: int = 0
    owner_id: int = 0
    created_at: datetime = field(default_factory=utc_now)
    mime_type: str = ""
    name: str = ""
    data: bytes = field(default=b"", repr=False)


@dataclass(frozen=True, slots=True)
class FilePatch:
    """Partial update of a file; ``None`` leaves a field unchanged."""

    name: str | None = None
    mime_type: str | None = None
    data: bytes | None = None

    def apply(self, file: File) -> File:
        changes = {
            name: value
            for name, value in (
                ("name", self.name),
                ("mime_type", self.mime_type),
                ("data", self.data),
            )
            if value is not None
        }
        return replace(file, **changes)
