from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from lockbox.services._shared.clock import MICROSECOND, utc_now
from lockbox.services._shared.results import (
    DeletionResult,
    InsertionResult,
    Invalid,
    NotFound,
    Ok,
    QueryResult,
    UpdateResult,
)
from lockbox.services._shared.validation import ValidationErrors
from lockbox.services.accounts.dto import Account
from lockbox.uow.base import ExecutionContext


class AccountService(Protocol):
    """Port for account use cases.

    Every operation comes in two forms: a connection-scoped one that owns its
    transaction boundary, and a ``*_with_context`` one that runs inside a
    context supplied (and later finished) by the caller.
    """

    def insert(self, account: Account) -> InsertionResult[Account]: ...

    def insert_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> InsertionResult[Account]: ...

    def get_by_id(self, account_id: int) -> QueryResult[Account]: ...

    def get_by_id_with_context(
        self, account_id: int, ctx: ExecutionContext
    ) -> QueryResult[Account]: ...

    def get_by_username(self, username: str) -> QueryResult[Account]: ...

    def get_by_username_with_context(
        self, username: str, ctx: ExecutionContext
    ) -> QueryResult[Account]: ...

    def get_by_email(self, email: str) -> QueryResult[Account]: ...

    def get_by_email_with_context(
        self, email: str, ctx: ExecutionContext
    ) -> QueryResult[Account]: ...

    def update(self, account: Account) -> UpdateResult[Account]: ...

    def update_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> UpdateResult[Account]: ...

    def delete(self, account_id: int) -> DeletionResult: ...

    def delete_with_context(self, account_id: int, ctx: ExecutionContext) -> DeletionResult: ...


class StubAccountService(AccountService):
    """In-memory account service for tests of the layers above it.

    Enforces username/email uniqueness and bumps ``password_reset_at`` when the
    password changes, but stores passwords as given and ignores contexts.
    """

    def __init__(self, accounts: list[Account] | None = None) -> None:
        self.rows: dict[int, Account] = {}
        self._seq = 0
        for account in accounts or ():
            self.insert(account)

    def _conflicts(self, account: Account) -> ValidationErrors:
        errors = ValidationErrors()
        for other in self.rows.values():
            if other.id == account.id:
                continue
            if other.username == account.username:
                errors.add_unique("username", account.username)
            if other.email == account.email:
                errors.add_unique("email", account.email)
        return errors

    def insert(self, account: Account) -> InsertionResult[Account]:
        errors = self._conflicts(replace(account, id=0))
        if errors:
            return Invalid(errors)
        self._seq += 1
        stored = replace(account, id=self._seq)
        self.rows[stored.id] = stored
        return Ok(stored)

    def insert_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> InsertionResult[Account]:
        return self.insert(account)

    def get_by_id(self, account_id: int) -> QueryResult[Account]:
        account = self.rows.get(account_id)
        return NotFound() if account is None else Ok(account)

    def get_by_id_with_context(
        self, account_id: int, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        return self.get_by_id(account_id)

    def get_by_username(self, username: str) -> QueryResult[Account]:
        account = next((a for a in self.rows.values() if a.username == username), None)
        return NotFound() if account is None else Ok(account)

    def get_by_username_with_context(
        self, username: str, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        return self.get_by_username(username)

    def get_by_email(self, email: str) -> QueryResult[Account]:
        account = next((a for a in self.rows.values() if a.email == email), None)
        return NotFound() if account is None else Ok(account)

    def get_by_email_with_context(
        self, email: str, ctx: ExecutionContext
    ) -> QueryResult[Account]:
        return self.get_by_email(email)

    def update(self, account: Account) -> UpdateResult[Account]:
        existing = self.rows.get(account.id)
        if existing is None:
            return NotFound()
        errors = self._conflicts(account)
        if errors:
            return Invalid(errors)
        if account.password != existing.password:
            reset_at = max(utc_now(), existing.password_reset_at + MICROSECOND)
            account = replace(account, password_reset_at=reset_at)
        self.rows[account.id] = account
        return Ok(account)

    def update_with_context(
        self, account: Account, ctx: ExecutionContext
    ) -> UpdateResult[Account]:
        return self.update(account)

    def delete(self, account_id: int) -> DeletionResult:
        if self.rows.pop(account_id, None) is None:
            return NotFound()
        return Ok(None)

    def delete_with_context(self, account_id: int, ctx: ExecutionContext) -> DeletionResult:
        return self.delete(account_id)
