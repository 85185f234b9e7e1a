"""
Account value objects.

These frozen dataclasses cross every layer (store, service, HTTP). They are
plain data: validation and hashing happen in the service.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from lockbox.services._shared.clock import utc_now


@dataclass(frozen=True, slots=True)
class Account:
    """
    An account as stored.

    :param id: Storage-assigned identifier; ``0`` while unassigned.
    :type id: int
    :param created_at: Creation time (UTC).
    :type created_at: datetime
    :param password_reset_at: Time of the last password change (UTC). Tokens
        capture it at issuance and stop working once it moves.
    :type password_reset_at: datetime
    :param profile_picture_url: Display picture reference.
    :type profile_picture_url: str
    :param username: Unique handle.
    :type username: str
    :param password: Plain text on the way in, hash once stored.
    :type password: str
    :param email: Unique email address.
    :type email: str
    """

    id: int = 0
    created_at: datetime = field(default_factory=utc_now)
    password_reset_at: datetime = field(default_factory=utc_now)
    profile_picture_url: str = ""
    username: str = ""
    password: str = field(default="", repr=False)
    email: str = ""
    is_email_verified: bool = False
    is_password_reset_required: bool = False
    is_locked: bool = False
    is_banned: bool = False


@dataclass(frozen=True, slots=True)
class AccountPatch:
    """
    Partial update of the user-editable account fields.

    ``None`` means "leave unchanged".
    """

    profile_picture_url: str | None = None
    username: str | None = None
    password: str | None = None
    email: str | None = None

    def apply(self, account: Account) -> Account:
        """Return a copy of ``account`` with the provided fields replaced."""
        changes = {
            name: value
            for name, value in (
                ("profile_picture_url", self.profile_picture_url),
                ("username", self.username),
                ("password", self.password),
                ("email", self.email),
            )
            if value is not None
        }
        return replace(account, **changes)
