"""
Unit tests for the in-memory execution contexts used by fakes.
"""

from __future__ import annotations

from lockbox.services._shared.ports import InMemoryAccountStore
from lockbox.uow import InMemoryContextFactory
from tests.factories.account import AccountFactory


class TestInMemoryContext:
    def test_rollback_replays_undo_journal(self):
        """
        GIVEN an atomic in-memory context with an insert, update and delete
        WHEN it is rolled back
        THEN the store is back to its initial rows.
        """
        factory = InMemoryContextFactory()
        store = InMemoryAccountStore()
        with factory.begin_autonomous() as setup:
            kept_id = store.insert(AccountFactory.build(), setup)
        before = dict(store.rows)

        with factory.begin_atomic() as ctx:
            store.insert(AccountFactory.build(), ctx)
            store.update(AccountFactory.build(id=kept_id, username="renamed"), ctx)
            store.delete(kept_id, ctx)
            ctx.rollback_if_atomic()

        assert store.rows == before

    def test_commit_keeps_changes(self):
        factory = InMemoryContextFactory()
        store = InMemoryAccountStore()
        with factory.begin_atomic() as ctx:
            new_id = store.insert(AccountFactory.build(), ctx)
            ctx.commit_if_atomic()
        assert new_id in store.rows

    def test_unfinished_context_rolls_back_on_close(self):
        factory = InMemoryContextFactory()
        store = InMemoryAccountStore()
        with factory.begin_atomic() as ctx:
            store.insert(AccountFactory.build(), ctx)
        assert store.rows == {}
        assert factory.opened == [ctx]
