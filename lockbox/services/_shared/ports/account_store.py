from __future__ import annotations

from dataclasses import replace
from typing import Protocol

from lockbox.services.accounts.dto import Account
from lockbox.uow.base import ExecutionContext


class AccountStore(Protocol):
    """Port for account persistence primitives.

    Every method runs against the supplied context. Implementations perform no
    validation and let storage errors propagate unchanged.
    """

    def insert(self, account: Account, ctx: ExecutionContext) -> int: ...

    def get_by_id(self, account_id: int, ctx: ExecutionContext) -> Account | None: ...

    def get_by_username(self, username: str, ctx: ExecutionContext) -> Account | None: ...

    def get_by_email(self, email: str, ctx: ExecutionContext) -> Account | None: ...

    def update(self, account: Account, ctx: ExecutionContext) -> int: ...

    def delete(self, account_id: int, ctx: ExecutionContext) -> int: ...


def _record_undo(ctx: ExecutionContext, step) -> None:
    record = getattr(ctx, "record_undo", None)
    if record is not None:
        record(step)


class InMemoryAccountStore(AccountStore):
    """Dictionary-backed store used in unit tests.

    Mutations register undo steps on in-memory atomic contexts so that rolling
    back the context restores the previous rows.
    """

    def __init__(self) -> None:
        self.rows: dict[int, Account] = {}
        self._seq = 0

    def insert(self, account: Account, ctx: ExecutionContext) -> int:
        self._seq += 1
        new_id = self._seq
        self.rows[new_id] = replace(account, id=new_id)
        _record_undo(ctx, lambda: self.rows.pop(new_id, None))
        return new_id

    def get_by_id(self, account_id: int, ctx: ExecutionContext) -> Account | None:
        return self.rows.get(account_id)

    def get_by_username(self, username: str, ctx: ExecutionContext) -> Account | None:
        return next((a for a in self.rows.values() if a.username == username), None)

    def get_by_email(self, email: str, ctx: ExecutionContext) -> Account | None:
        return next((a for a in self.rows.values() if a.email == email), None)

    def update(self, account: Account, ctx: ExecutionContext) -> int:
        previous = self.rows.get(account.id)
        if previous is None:
            return 0
        self.rows[account.id] = account
        _record_undo(ctx, lambda: self.rows.__setitem__(account.id, previous))
        return 1

    def delete(self, account_id: int, ctx: ExecutionContext) -> int:
        previous = self.rows.pop(account_id, None)
        if previous is None:
            return 0
        _record_undo(ctx, lambda: self.rows.__setitem__(account_id, previous))
        return 1
