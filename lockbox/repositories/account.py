"""Account repository: SQL adapter for the ``AccountStore`` port."""

from __future__ import annotations

from lockbox.models.account import AccountRecord
from lockbox.repositories.base import BaseRepository
from lockbox.services._shared.clock import ensure_utc
from lockbox.services._shared.ports.account_store import AccountStore
from lockbox.services.accounts.dto import Account
from lockbox.uow.base import ExecutionContext

# Columns written on insert and update; ``id`` is never written.
_WRITABLE = (
    "created_at",
    "password_reset_at",
    "profile_picture_url",
    "username",
    "password",
    "email",
    "is_email_verified",
    "is_password_reset_required",
    "is_locked",
    "is_banned",
)


def _to_account(record: AccountRecord) -> Account:
    return Account(
        id=record.id,
        created_at=ensure_utc(record.created_at),
        password_reset_at=ensure_utc(record.password_reset_at),
        profile_picture_url=record.profile_picture_url,
        username=record.username,
        password=record.password,
        email=record.email,
        is_email_verified=record.is_email_verified,
        is_password_reset_required=record.is_password_reset_required,
        is_locked=record.is_locked,
        is_banned=record.is_banned,
    )


def _values(account: Account) -> dict:
    values = {name: getattr(account, name) for name in _WRITABLE}
    values["created_at"] = ensure_utc(account.created_at)
    values["password_reset_at"] = ensure_utc(account.password_reset_at)
    return values


class AccountRepository(BaseRepository[AccountRecord], AccountStore):
    """Persistence-only repository for accounts.

    It never validates, hashes or checks uniqueness. Unique constraint
    violations surface as :class:`sqlalchemy.exc.IntegrityError` for the
    service to interpret.
    """

    model = AccountRecord

    def insert(self, account: Account, ctx: ExecutionContext) -> int:
        """Insert ``account`` (its ``id`` is ignored) and return the new id."""
        return self._insert(ctx, AccountRecord(**_values(account)))

    def get_by_id(self, account_id: int, ctx: ExecutionContext) -> Account | None:
        record = self._first(ctx, AccountRecord.id == account_id)
        return None if record is None else _to_account(record)

    def get_by_username(self, username: str, ctx: ExecutionContext) -> Account | None:
        record = self._first(ctx, AccountRecord.username == username)
        return None if record is None else _to_account(record)

    def get_by_email(self, email: str, ctx: ExecutionContext) -> Account | None:
        record = self._first(ctx, AccountRecord.email == email)
        return None if record is None else _to_account(record)

    def update(self, account: Account, ctx: ExecutionContext) -> int:
        """Overwrite every column except ``id``.

        :returns: Rows matched; ``0`` means no account has ``account.id``.
        :rtype: int
        """
        return self._update_by_id(ctx, account.id, _values(account))

    def delete(self, account_id: int, ctx: ExecutionContext) -> int:
        return self._delete_by_id(ctx, account_id)
