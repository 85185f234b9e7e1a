"""
TransactionalFileService
========================

File use cases on top of a :class:`FileStore`. Same shape as the account
service without uniqueness concerns. Ownership is *not* checked here: callers
decide who may read, patch or delete a file.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from lockbox.services._shared.base import BaseService
from lockbox.services._shared.errors import InconsistentStateError
from lockbox.services._shared.ports.file_service import FileService
from lockbox.services._shared.ports.file_store import FileStore
from lockbox.services._shared.results import (
    DeletionResult,
    InsertionResult,
    Invalid,
    NotFound,
    Ok,
    QueryResult,
    UpdateResult,
    captures_errors,
)
from lockbox.services.files.dto import File, FilePatch
from lockbox.services.files.rules import validate_file
from lockbox.uow.base import ContextFactory, ExecutionContext

log = logging.getLogger(__name__)

ENTITY = "File"


class TransactionalFileService(BaseService, FileService):
    """Application service for files."""

    def __init__(self, *, contexts: ContextFactory, store: FileStore) -> None:
        super().__init__(contexts=contexts)
        self.store = store

    def insert(self, file: File) -> InsertionResult[File]:
        return self.run_atomic(lambda ctx: self.insert_with_context(file, ctx))

    @captures_errors
    def insert_with_context(self, file: File, ctx: ExecutionContext) -> InsertionResult[File]:
        """
        Validate, insert and re-read ``file``.

        :returns: ``Ok`` with the stored file, ``Invalid`` or ``Err``.
        """
        errors = validate_file(file)
        if errors:
            log.debug("File insert rejected: %s", errors.fields())
            return Invalid(errors)

        new_id = self.store.insert(replace(file, id=0), ctx)
        created = self.store.get_by_id(new_id, ctx)
        if created is None:
            raise InconsistentStateError(ENTITY, new_id, "not readable after insert")
        log.info("File created: id=%s owner_id=%s", created.id, created.owner_id)
        return Ok(created)

    def get_by_id(self, file_id: int) -> QueryResult[File]:
        return self.run_autonomous(lambda ctx: self.get_by_id_with_context(file_id, ctx))

    @captures_errors
    def get_by_id_with_context(self, file_id: int, ctx: ExecutionContext) -> QueryResult[File]:
        file = self.store.get_by_id(file_id, ctx)
        return NotFound() if file is None else Ok(file)

    def update(self, file_id: int, patch: FilePatch) -> UpdateResult[File]:
        return self.run_atomic(lambda ctx: self.update_with_context(file_id, patch, ctx))

    @captures_errors
    def update_with_context(
        self, file_id: int, patch: FilePatch, ctx: ExecutionContext
    ) -> UpdateResult[File]:
        """
        Apply ``patch`` to the stored file, re-validate and persist.

        Only the fields set on the patch change; ``owner_id`` and
        ``created_at`` are never patched.
        """
        existing = self.store.get_by_id(file_id, ctx)
        if existing is None:
            return NotFound()

        patched = patch.apply(existing)
        errors = validate_file(patched)
        if errors:
            log.debug("File %s update rejected: %s", file_id, errors.fields())
            return Invalid(errors)

        if self.store.update(patched, ctx) == 0:
            raise InconsistentStateError(ENTITY, file_id, "vanished during update")

        updated = self.store.get_by_id(file_id, ctx)
        if updated is None:
            raise InconsistentStateError(ENTITY, file_id, "not readable after update")
        return Ok(updated)

    def delete(self, file_id: int) -> DeletionResult:
        return self.run_atomic(lambda ctx: self.delete_with_context(file_id, ctx))

    @captures_errors
    def delete_with_context(self, file_id: int, ctx: ExecutionContext) -> DeletionResult:
        if self.store.delete(file_id, ctx) == 0:
            return NotFound()
        return Ok(None)
