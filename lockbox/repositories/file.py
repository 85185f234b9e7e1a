"""File repository: SQL adapter for the ``FileStore`` port."""

from __future__ import annotations

from lockbox.models.file import FileRecord
from lockbox.repositories.base import BaseRepository
from lockbox.services._shared.clock import ensure_utc
from lockbox.services._shared.ports.file_store import FileStore
from lockbox.services.files.dto import File
from lockbox.uow.base import ExecutionContext


def _to_file(record: FileRecord) -> File:
    return File(
        id=record.id,
        owner_id=record.owner_id,
        created_at=ensure_utc(record.created_at),
        mime_type=record.mime_type,
        name=record.name,
        data=bytes(record.data),
    )


def _values(file: File) -> dict:
    return {
        "owner_id": file.owner_id,
        "created_at": ensure_utc(file.created_at),
        "mime_type": file.mime_type,
        "name": file.name,
        "data": file.data,
    }


class FileRepository(BaseRepository[FileRecord], FileStore):
    """Persistence-only repository for files. Ownership is not checked here."""

    model = FileRecord

    def insert(self, file: File, ctx: ExecutionContext) -> int:
        return self._insert(ctx, FileRecord(**_values(file)))

    def get_by_id(self, file_id: int, ctx: ExecutionContext) -> File | None:
        record = self._first(ctx, FileRecord.id == file_id)
        return None if record is None else _to_file(record)

    def update(self, file: File, ctx: ExecutionContext) -> int:
        return self._update_by_id(ctx, file.id, _values(file))

    def delete(self, file_id: int, ctx: ExecutionContext) -> int:
        return self._delete_by_id(ctx, file_id)
