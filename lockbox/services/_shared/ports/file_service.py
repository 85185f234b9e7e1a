from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from lockbox.services._shared.results import (
    DeletionResult,
    InsertionResult,
    Invalid,
    NotFound,
    Ok,
    QueryResult,
    UpdateResult,
)
from lockbox.services.files.dto import File, FilePatch
from lockbox.services.files.rules import validate_file
from lockbox.uow.base import ExecutionContext


class FileService(Protocol):
    """Port for file use cases (connection-scoped and context-scoped forms)."""

    def insert(self, file: File) -> InsertionResult[File]: ...

    def insert_with_context(self, file: File, ctx: ExecutionContext) -> InsertionResult[File]: ...

    def get_by_id(self, file_id: int) -> QueryResult[File]: ...

    def get_by_id_with_context(self, file_id: int, ctx: ExecutionContext) -> QueryResult[File]: ...

    def update(self, file_id: int, patch: FilePatch) -> UpdateResult[File]: ...

    def update_with_context(
        self, file_id: int, patch: FilePatch, ctx: ExecutionContext
    ) -> UpdateResult[File]: ...

    def delete(self, file_id: int) -> DeletionResult: ...

    def delete_with_context(self, file_id: int, ctx: ExecutionContext) -> DeletionResult: ...


class StubFileService(FileService):
    """In-memory file service for tests of the layers above it.

    Applies the field rules and never reuses an id; contexts are ignored.
    """

    def __init__(self, files: list[File] | None = None) -> None:
        self.rows: dict[int, File] = {}
        self._seq = 0
        for file in files or ():
            self.insert(file)

    def insert(self, file: File) -> InsertionResult[File]:
        errors = validate_file(file)
        if errors:
            return Invalid(errors)
        self._seq += 1
        stored = replace(file, id=self._seq)
        self.rows[stored.id] = stored
        return Ok(stored)

    def insert_with_context(self, file: File, ctx: ExecutionContext) -> InsertionResult[File]:
        return self.insert(file)

    def get_by_id(self, file_id: int) -> QueryResult[File]:
        file = self.rows.get(file_id)
        return NotFound() if file is None else Ok(file)

    def get_by_id_with_context(self, file_id: int, ctx: ExecutionContext) -> QueryResult[File]:
        return self.get_by_id(file_id)

    def update(self, file_id: int, patch: FilePatch) -> UpdateResult[File]:
        existing = self.rows.get(file_id)
        if existing is None:
            return NotFound()
        patched = patch.apply(existing)
        errors = validate_file(patched)
        if errors:
            return Invalid(errors)
        self.rows[file_id] = patched
        return Ok(patched)

    def update_with_context(
        self, file_id: int, patch: FilePatch, ctx: ExecutionContext
    ) -> UpdateResult[File]:
        return self.update(file_id, patch)

    def delete(self, file_id: int) -> DeletionResult:
        if self.rows.pop(file_id, None) is None:
            return NotFound()
        return Ok(None)

    def delete_with_context(self, file_id: int, ctx: ExecutionContext) -> DeletionResult:
        return self.delete(file_id)
