from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from lockbox.services._shared.ports.account_store import _record_undo
from lockbox.services.files.dto import File
from lockbox.uow.base import ExecutionContext


class FileStore(Protocol):
    """Port for file persistence primitives (same contract as ``AccountStore``)."""

    def insert(self, file: File, ctx: ExecutionContext) -> int: ...

    def get_by_id(self, file_id: int, ctx: ExecutionContext) -> File | None: ...

    def update(self, file: File, ctx: ExecutionContext) -> int: ...

    def delete(self, file_id: int, ctx: ExecutionContext) -> int: ...


class InMemoryFileStore(FileStore):
    """Dictionary-backed store used in unit tests."""

    def __init__(self) -> None:
        self.rows: dict[int, File] = {}
        self._seq = 0

    def insert(self, file: File, ctx: ExecutionContext) -> int:
        self._seq += 1
        new_id = self._seq
        self.rows[new_id] = replace(file, id=new_id)
        _record_undo(ctx, lambda: self.rows.pop(new_id, None))
        return new_id

    def get_by_id(self, file_id: int, ctx: ExecutionContext) -> File | None:
        return self.rows.get(file_id)

    def update(self, file: File, ctx: ExecutionContext) -> int:
        previous = self.rows.get(file.id)
        if previous is None:
            return 0
        self.rows[file.id] = file
        _record_undo(ctx, lambda: self.rows.__setitem__(file.id, previous))
        return 1

    def delete(self, file_id: int, ctx: ExecutionContext) -> int:
        previous = self.rows.pop(file_id, None)
        if previous is None:
            return 0
        _record_undo(ctx, lambda: self.rows.__setitem__(file_id, previous))
        return 1
