"""
Unit tests for SQLAlchemy execution contexts, using account rows as payload.
"""

from __future__ import annotations

import pytest

from lockbox.services._shared.errors import ContextStateError, TransactionError
from lockbox.uow import SQLAlchemyExecutionContext
from tests.factories.account import AccountFactory


def _insert(store, ctx, **overrides) -> int:
    return store.insert(AccountFactory.build(password="hash", **overrides), ctx)


class TestAutonomousContext:
    def test_writes_are_visible_without_commit(self, contexts, account_store):
        """
        GIVEN an autonomous context
        WHEN a row is inserted and the context is closed
        THEN another context sees the row (autocommit).
        """
        with contexts.begin_autonomous() as ctx:
            new_id = _insert(account_store, ctx)

        with contexts.begin_autonomous() as other:
            assert account_store.get_by_id(new_id, other) is not None

    def test_finishing_is_a_noop(self, contexts):
        with contexts.begin_autonomous() as ctx:
            ctx.commit_if_atomic()
            ctx.rollback_if_atomic()
            ctx.commit_if_atomic()
            assert ctx.atomic is False
            assert ctx.finished is False

    def test_close_releases_connection(self, contexts):
        ctx = contexts.begin_autonomous()
        assert isinstance(ctx, SQLAlchemyExecutionContext)
        ctx.close()
        assert ctx.closed
        assert ctx.connection.closed


class TestAtomicContext:
    def test_commit_makes_writes_visible(self, contexts, account_store):
        """
        GIVEN an atomic context
        WHEN a row is inserted and the context is committed
        THEN the row is visible from a fresh context.
        """
        with contexts.begin_atomic() as ctx:
            new_id = _insert(account_store, ctx)
            ctx.commit_if_atomic()
            assert ctx.finished

        with contexts.begin_autonomous() as other:
            assert account_store.get_by_id(new_id, other) is not None

    def test_rollback_discards_writes(self, contexts, account_store):
        with contexts.begin_atomic() as ctx:
            new_id = _insert(account_store, ctx)
            assert account_store.get_by_id(new_id, ctx) is not None
            ctx.rollback_if_atomic()

        with contexts.begin_autonomous() as other:
            assert account_store.get_by_id(new_id, other) is None

    def test_close_without_finishing_rolls_back(self, contexts, account_store):
        """An abandoned atomic context never commits."""
        ctx = contexts.begin_atomic()
        new_id = _insert(account_store, ctx)
        ctx.close()

        assert ctx.finished
        with contexts.begin_autonomous() as other:
            assert account_store.get_by_id(new_id, other) is None

    def test_exception_inside_with_block_rolls_back(self, contexts, account_store):
        with pytest.raises(RuntimeError), contexts.begin_atomic() as ctx:
            new_id = _insert(account_store, ctx)
            raise RuntimeError("boom")

        with contexts.begin_autonomous() as other:
            assert account_store.get_by_id(new_id, other) is None

    @pytest.mark.parametrize("second", ["commit_if_atomic", "rollback_if_atomic"])
    def test_finishing_twice_is_rejected(self, contexts, second):
        with contexts.begin_atomic() as ctx:
            ctx.commit_if_atomic()
            with pytest.raises(ContextStateError):
                getattr(ctx, second)()

    def test_finishing_after_close_is_rejected(self, contexts):
        ctx = contexts.begin_atomic()
        ctx.close()
        with pytest.raises(ContextStateError):
            ctx.commit_if_atomic()

    def test_close_is_idempotent(self, contexts):
        ctx = contexts.begin_atomic()
        ctx.close()
        ctx.close()
        assert ctx.closed

    def test_failed_commit_raises_transaction_error(self, contexts):
        """
        GIVEN an atomic context whose transaction refuses to commit
        WHEN the context is committed
        THEN TransactionError is raised and the connection is discarded.
        """

        class _Refusing:
            def commit(self):
                raise RuntimeError("disk full")

            def rollback(self):
                pass

        ctx = contexts.begin_atomic()
        ctx._transaction = _Refusing()
        with pytest.raises(TransactionError):
            ctx.commit_if_atomic()
        assert ctx.connection.closed
        ctx.close()
