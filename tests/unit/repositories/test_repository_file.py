"""Unit tests for FileRepository against SQLite."""

from __future__ import annotations

from dataclasses import replace

from tests.factories.file import FileFactory


class TestFileRepository:
    def test_round_trip_keeps_payload_bytes(self, contexts, file_store):
        payload = bytes(range(256))
        with contexts.begin_autonomous() as ctx:
            new_id = file_store.insert(FileFactory.build(data=payload, owner_id=7), ctx)
            fetched = file_store.get_by_id(new_id, ctx)

        assert fetched.data == payload
        assert fetched.owner_id == 7
        assert fetched.created_at.tzinfo is not None

    def test_owner_needs_no_account_row(self, contexts, file_store):
        """Files reference owners by id only; nothing cascades or blocks."""
        with contexts.begin_autonomous() as ctx:
            new_id = file_store.insert(FileFactory.build(owner_id=424242), ctx)
            assert file_store.get_by_id(new_id, ctx) is not None

    def test_update_then_delete(self, contexts, file_store):
        with contexts.begin_autonomous() as ctx:
            new_id = file_store.insert(FileFactory.build(), ctx)
            stored = file_store.get_by_id(new_id, ctx)

            assert file_store.update(replace(stored, name="renamed.txt"), ctx) == 1
            assert file_store.get_by_id(new_id, ctx).name == "renamed.txt"
            assert file_store.delete(new_id, ctx) == 1
            assert file_store.get_by_id(new_id, ctx) is None
            assert file_store.delete(new_id, ctx) == 0
