"""
TransactionalAccountService
===========================

Account use cases on top of an :class:`AccountStore`:
- insertion with validation, uniqueness checks and secret hashing;
- lookups by id, username and email;
- updates that re-hash changed passwords and move the token epoch;
- deletion.

Every operation has a connection-scoped form that owns its transaction and a
``*_with_context`` form that runs inside a caller-owned context, so callers
can compose several operations (e.g. an account and its first file) into one
atomic unit.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime

from sqlalchemy.exc import IntegrityError

from lockbox.services._shared.base import BaseService
from lockbox.services._shared.clock import MICROSECOND, utc_now
from lockbox.services._shared.errors import InconsistentStateError, violates
from lockbox.services._shared.ports.account_service import AccountService
from lockbox.services._shared.ports.account_store import AccountStore
from lockbox.services._shared.ports.secret_service import SecretService
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
from lockbox.services._shared.validation import ValidationErrors
from lockbox.services.accounts.dto import Account
from lockbox.services.accounts.rules import validate_account
from lockbox.uow.base import ContextFactory, ExecutionContext

log = logging.getLogger(__name__)

ENTITY = "Account"

# (field, markers identifying its unique constraint across dialects)
_UNIQUE_CONSTRAINTS = (
    ("username", ("uq_accounts_username", "accounts.username")),
    ("email", ("uq_accounts_email", "accounts.email")),
)


def _unique_violation(exc: IntegrityError, account: Account) -> ValidationErrors:
    """Translate a unique constraint violation into field errors.

    Only reached when a concurrent transaction committed the same username or
    email between our check and our write.
    """
    errors = ValidationErrors()
    for field, markers in _UNIQUE_CONSTRAINTS:
        if violates(exc, *markers):
            errors.add_unique(field, getattr(account, field))
    return errors


def next_password_reset_at(previous: datetime, now: datetime | None = None) -> datetime:
    """Return a reset epoch strictly later than ``previous``.

    Two password changes within the same clock tick must still produce
    distinct epochs, otherwise tokens issued in between would survive.
    """
    now = now or utc_now()
    return now if now > previous else previous + MICROSECOND


class TransactionalAccountService(BaseService, AccountService):
    """
    Application service for accounts.

    Responsibilities
    ----------------
    - Validate field formats, accumulating every error.
    - Enforce username/email uniqueness inside the operation's context.
    - Hash secrets before they reach storage.
    - Re-read after writes so callers get what storage holds.
    """

    def __init__(
        self,
        *,
        contexts: ContextFactory,
        store: AccountStore,
        secrets: SecretService,
    ) -> None:
        """
        :param contexts: Factory for execution contexts.
        :param store: Account persistence primitives.
        :param secrets: Password hashing service.
        """
        super().__init__(contexts=contexts)
        self.store = store
        self.secrets = secrets

    # --------------------------------------------------------------------- #
    # Insertion
    # --------------------------------------------------------------------- #

    def insert(self, account: Account) -> InsertionResult[Account]:
        """Insert ``account`` atomically. See :meth:`insert_with_context`."""
        return self.run_atomic(lambda ctx: self.insert_with_context(account, ctx))

    @captures_errors
    def insert_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> InsertionResult[Account]:
        """
        Validate, check uniqueness, hash, insert and re-read ``account``.

        :param account: Account to create; ``id`` is ignored and
            ``password`` is the plain secret.
        :param ctx: Caller-owned context; not committed here.
        :returns: ``Ok`` with the stored account, ``Invalid`` with every
            validation and uniqueness problem found, or ``Err``.
        """
        errors = validate_account(account)
        if errors:
            log.debug("Account insert rejected: %s", errors.fields())
            return Invalid(errors)

        # Both lookups always run so the caller sees every conflict at once.
        if self.store.get_by_username(account.username, ctx) is not None:
            errors.add_unique("username", account.username)
        if self.store.get_by_email(account.email, ctx) is not None:
            errors.add_unique("email", account.email)
        if errors:
            log.debug("Account insert rejected: %s", errors.fields())
            return Invalid(errors)

        hashed = self.secrets.hash_secret(account.password)
        try:
            new_id = self.store.insert(replace(account, id=0, password=hashed), ctx)
        except IntegrityError as exc:
            conflicts = _unique_violation(exc, account)
            if not conflicts:
                raise
            return Invalid(conflicts)

        created = self.store.get_by_id(new_id, ctx)
        if created is None:
            raise InconsistentStateError(ENTITY, new_id, "not readable after insert")
        log.info("Account created: id=%s", created.id)
        return Ok(created)

    # --------------------------------------------------------------------- #
    # Retrieval
    # --------------------------------------------------------------------- #

    def get_by_id(self, account_id: int) -> QueryResult[Account]:
        return self.run_autonomous(lambda ctx: self.get_by_id_with_context(account_id, ctx))

    @captures_errors
    def get_by_id_with_context(
        self, account_id: int, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        account = self.store.get_by_id(account_id, ctx)
        return NotFound() if account is None else Ok(account)

    def get_by_username(self, username: str) -> QueryResult[Account]:
        return self.run_autonomous(lambda ctx: self.get_by_username_with_context(username, ctx))

    @captures_errors
    def get_by_username_with_context(
        self, username: str, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        account = self.store.get_by_username(username, ctx)
        return NotFound() if account is None else Ok(account)

    def get_by_email(self, email: str) -> QueryResult[Account]:
        return self.run_autonomous(lambda ctx: self.get_by_email_with_context(email, ctx))

    @captures_errors
    def get_by_email_with_context(
        self, email: str, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        account = self.store.get_by_email(email, ctx)
        return NotFound() if account is None else Ok(account)

    # --------------------------------------------------------------------- #
    # Update
    # --------------------------------------------------------------------- #

    def update(self, account: Account) -> UpdateResult[Account]:
        """Update ``account`` atomically. See :meth:`update_with_context`."""
        return self.run_atomic(lambda ctx: self.update_with_context(account, ctx))

    @captures_errors
    def update_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> UpdateResult[Account]:
        """
        Persist every field of ``account`` except ``id``.

        Uniqueness is re-checked only for a username or email that differs
        from the stored one. A ``password`` different from the stored hash is
        treated as a new plain secret: it is hashed and ``password_reset_at``
        advances, which invalidates every token issued before.

        :returns: ``Ok`` with the stored account, ``NotFound`` when no account
            has ``account.id``, ``Invalid`` or ``Err``.
        """
        existing = self.store.get_by_id(account.id, ctx)
        if existing is None:
            return NotFound()

        errors = validate_account(account)
        if errors:
            log.debug("Account %s update rejected: %s", account.id, errors.fields())
            return Invalid(errors)

        if account.username != existing.username:
            if self.store.get_by_username(account.username, ctx) is not None:
                errors.add_unique("username", account.username)
        if account.email != existing.email:
            if self.store.get_by_email(account.email, ctx) is not None:
                errors.add_unique("email", account.email)
        if errors:
            log.debug("Account %s update rejected: %s", account.id, errors.fields())
            return Invalid(errors)

        if account.password != existing.password:
            account = replace(
                account,
                password=self.secrets.hash_secret(account.password),
                password_reset_at=next_password_reset_at(existing.password_reset_at),
            )

        try:
            affected = self.store.update(account, ctx)
        except IntegrityError as exc:
            conflicts = _unique_violation(exc, account)
            if not conflicts:
                raise
            return Invalid(conflicts)
        if affected == 0:
            raise InconsistentStateError(ENTITY, account.id, "vanished during update")

        updated = self.store.get_by_id(account.id, ctx)
        if updated is None:
            raise InconsistentStateError(ENTITY, account.id, "not readable after update")
        return Ok(updated)

    # --------------------------------------------------------------------- #
    # Deletion
    # --------------------------------------------------------------------- #

    def delete(self, account_id: int) -> DeletionResult:
        return self.run_atomic(lambda ctx: self.delete_with_context(account_id, ctx))

    @captures_errors
    def delete_with_context(self, account_id: int, ctx: ExecutionContext) -> DeletionResult:
        """Delete by id. Files owned by the account are left in place."""
        if self.store.delete(account_id, ctx) == 0:
            return NotFound()
        log.info("Account deleted: id=%s", account_id)
        return Ok(None)
