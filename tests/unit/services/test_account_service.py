# tests/unit/services/test_account_service.py
from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError

from lockbox.services._shared.errors import InconsistentStateError, TransactionError
from lockbox.services._shared.ports import InMemoryAccountStore, StubSecretService
from lockbox.services._shared.results import Err, Invalid, NotFound, Ok
from lockbox.services._shared.validation import INVALID, UNIQUE
from lockbox.services.accounts.service import TransactionalAccountService, next_password_reset_at
from lockbox.uow import InMemoryContextFactory, SQLAlchemyExecutionContext
from tests.factories.account import PASSWORD, AccountFactory


# ------------------------------ Helpers ----------------------------------- #
def _ok(outcome):
    assert isinstance(outcome, Ok), outcome
    return outcome.value


class _VanishingStore(InMemoryAccountStore):
    """Store that loses rows right after writing them."""

    def get_by_id(self, account_id, ctx):
        return None


class _RacingStore(InMemoryAccountStore):
    """Store where a concurrent writer wins between check and insert."""

    def insert(self, account, ctx):
        raise IntegrityError(
            "INSERT INTO accounts ...",
            {},
            Exception("UNIQUE constraint failed: accounts.username"),
        )


@pytest.fixture()
def memory_service() -> TransactionalAccountService:
    """AccountService wired to in-memory doubles."""
    return TransactionalAccountService(
        contexts=InMemoryContextFactory(),
        store=InMemoryAccountStore(),
        secrets=StubSecretService(),
    )


# ------------------------------- Insert ----------------------------------- #
class TestInsert:
    def test_assigns_id_and_hashes_password(self, accounts, secrets):
        created = _ok(accounts.insert(AccountFactory.build()))

        assert created.id > 0
        assert created.password != PASSWORD
        assert secrets.verify_secret(PASSWORD, created.password)

    def test_round_trip_through_every_lookup(self, accounts):
        account = AccountFactory.build()
        created = _ok(accounts.insert(account))

        assert replace(account, id=created.id, password=created.password) == created
        assert _ok(accounts.get_by_id(created.id)) == created
        assert _ok(accounts.get_by_username(created.username)) == created
        assert _ok(accounts.get_by_email(created.email)) == created

    def test_duplicate_username_is_invalid(self, accounts):
        """Inserting "bob" twice reports the username on the second call."""
        first = _ok(accounts.insert(AccountFactory.build(username="bob")))

        outcome = accounts.insert(
            replace(first, id=0, password=PASSWORD, email="other@example.com")
        )

        assert isinstance(outcome, Invalid)
        assert "username" in outcome.errors
        assert outcome.errors.get("username")[0].code == UNIQUE
        assert "email" not in outcome.errors

    def test_every_conflict_is_reported_at_once(self, accounts):
        first = _ok(accounts.insert(AccountFactory.build()))

        outcome = accounts.insert(
            AccountFactory.build(username=first.username, email=first.email)
        )

        assert isinstance(outcome, Invalid)
        assert outcome.errors.fields() == ["username", "email"]

    def test_format_errors_are_accumulated(self, accounts):
        outcome = accounts.insert(
            AccountFactory.build(username="x", email="not-an-email", password="123")
        )

        assert isinstance(outcome, Invalid)
        assert set(outcome.errors) == {"username", "email", "password"}
        assert all(e.code == INVALID for e in outcome.errors.get("password"))

    def test_invalid_insert_writes_nothing(self, accounts):
        accounts.insert(AccountFactory.build(username="no spaces allowed"))
        assert isinstance(accounts.get_by_username("no spaces allowed"), NotFound)

    def test_failure_after_uniqueness_check_leaves_no_row(self):
        """
        GIVEN a store that cannot re-read the row it just inserted
        WHEN an account is inserted
        THEN the outcome is Err and the insert was rolled back.
        """
        store = _VanishingStore()
        service = TransactionalAccountService(
            contexts=InMemoryContextFactory(), store=store, secrets=StubSecretService()
        )

        outcome = service.insert(AccountFactory.build())

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, InconsistentStateError)
        assert store.rows == {}

    def test_failure_after_uniqueness_check_leaves_no_sql_row(self, accounts, monkeypatch):
        """Same property against SQLite: the row is not visible afterwards."""
        account = AccountFactory.build()
        monkeypatch.setattr(accounts.store, "get_by_id", lambda account_id, ctx: None)

        assert isinstance(accounts.insert(account), Err)

        monkeypatch.undo()
        assert isinstance(accounts.get_by_username(account.username), NotFound)

    def test_hashing_failure_is_err(self, memory_service, monkeypatch):
        def _boom(plain):
            raise ValueError("no entropy")

        monkeypatch.setattr(memory_service.secrets, "hash_secret", _boom)
        account = AccountFactory.build()

        assert isinstance(memory_service.insert(account), Err)
        assert isinstance(memory_service.get_by_username(account.username), NotFound)

    def test_constraint_race_is_translated_to_invalid(self):
        service = TransactionalAccountService(
            contexts=InMemoryContextFactory(), store=_RacingStore(), secrets=StubSecretService()
        )

        outcome = service.insert(AccountFactory.build())

        assert isinstance(outcome, Invalid)
        assert outcome.errors.fields() == ["username"]


# ------------------------------- Update ----------------------------------- #
class TestUpdate:
    def test_password_change_rehashes_and_moves_reset_epoch(self, accounts, secrets):
        created = _ok(accounts.insert(AccountFactory.build()))

        updated = _ok(accounts.update(replace(created, password="Secret2")))

        assert secrets.verify_secret("Secret2", updated.password)
        assert updated.password_reset_at > created.password_reset_at

    def test_unchanged_password_keeps_hash_and_epoch(self, accounts):
        created = _ok(accounts.insert(AccountFactory.build()))

        updated = _ok(accounts.update(replace(created, profile_picture_url="https://x.test/p.png")))

        assert updated.password == created.password
        assert updated.password_reset_at == created.password_reset_at
        assert updated.profile_picture_url == "https://x.test/p.png"

    def test_keeping_own_username_is_not_a_conflict(self, accounts):
        created = _ok(accounts.insert(AccountFactory.build()))
        assert isinstance(accounts.update(replace(created, is_email_verified=True)), Ok)

    def test_taking_another_username_is_invalid(self, accounts):
        alice = _ok(accounts.insert(AccountFactory.build(username="alice")))
        bob = _ok(accounts.insert(AccountFactory.build(username="bob")))

        outcome = accounts.update(replace(bob, username=alice.username))

        assert isinstance(outcome, Invalid)
        assert outcome.errors.fields() == ["username"]
        assert _ok(accounts.get_by_id(bob.id)).username == "bob"

    def test_missing_account_is_not_found(self, accounts):
        assert isinstance(accounts.update(AccountFactory.build(id=9999)), NotFound)


# ------------------------------- Delete ----------------------------------- #
class TestDelete:
    def test_delete_then_lookup(self, accounts):
        created = _ok(accounts.insert(AccountFactory.build()))

        assert accounts.delete(created.id) == Ok(None)
        assert isinstance(accounts.get_by_id(created.id), NotFound)

    def test_missing_id_is_not_found(self, accounts, memory_service):
        assert isinstance(accounts.delete(424242), NotFound)
        assert isinstance(memory_service.delete(424242), NotFound)


# ----------------------------- Composition -------------------------------- #
class TestContextScopedOperations:
    def test_operations_share_one_transaction(self, accounts):
        """
        GIVEN two inserts run through ``*_with_context`` in one atomic context
        WHEN the second one is invalid and the caller rolls back
        THEN neither account exists.
        """
        first = AccountFactory.build()

        def _both(ctx):
            created = accounts.insert_with_context(first, ctx)
            assert isinstance(created, Ok)
            return accounts.insert_with_context(AccountFactory.build(username=first.username), ctx)

        assert isinstance(accounts.run_atomic(_both), Invalid)
        assert isinstance(accounts.get_by_username(first.username), NotFound)

    def test_context_open_failure_is_err(self, accounts, monkeypatch):
        def _refuse():
            raise OSError("pool exhausted")

        monkeypatch.setattr(accounts.contexts, "begin_atomic", _refuse)
        assert isinstance(accounts.insert(AccountFactory.build()), Err)

    def test_failed_commit_overrides_ok(self, accounts, monkeypatch):
        """
        GIVEN a valid insert whose commit fails
        WHEN the connection-scoped insert finishes
        THEN the outcome is Err and the row was not kept.
        """
        account = AccountFactory.build()

        def _fail(self):
            raise TransactionError("Failed to commit transaction.")

        monkeypatch.setattr(SQLAlchemyExecutionContext, "_commit", _fail)
        outcome = accounts.insert(account)
        monkeypatch.undo()

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, TransactionError)
        assert isinstance(accounts.get_by_username(account.username), NotFound)

    def test_failed_rollback_overrides_invalid(self, accounts, monkeypatch):
        first = _ok(accounts.insert(AccountFactory.build(username="bob")))

        def _fail(self):
            raise TransactionError("Failed to roll back transaction.")

        monkeypatch.setattr(SQLAlchemyExecutionContext, "_rollback", _fail)
        outcome = accounts.insert(AccountFactory.build(username=first.username))

        assert isinstance(outcome, Err)
        assert isinstance(outcome.error, TransactionError)


# ---------------------------- Reset epoch --------------------------------- #
class TestNextPasswordResetAt:
    def test_uses_clock_when_it_moved_forward(self):
        previous = datetime(2024, 1, 1, tzinfo=UTC)
        now = previous + timedelta(seconds=1)
        assert next_password_reset_at(previous, now) == now

    def test_is_strictly_monotonic_within_one_tick(self):
        previous = datetime(2024, 1, 1, tzinfo=UTC)
        assert next_password_reset_at(previous, previous) == previous + timedelta(microseconds=1)
        assert next_password_reset_at(previous, previous - timedelta(hours=1)) > previous
