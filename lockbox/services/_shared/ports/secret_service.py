from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from lockbox.services._shared.clock import from_epoch_micros, to_epoch_micros, utc_now
from lockbox.services._shared.errors import InvalidTokenError


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """
    Decoded bearer-token payload.

    :param account_id: Account the token was issued to.
    :type account_id: int
    :param issued_at: Issuance time.
    :type issued_at: datetime
    :param expires_at: Expiry, ``None`` when unbounded.
    :type expires_at: datetime | None
    :param password_reset_at: The account's password reset epoch captured at
        issuance. The token is valid only while the account still has it.
    :type password_reset_at: datetime
    """

    account_id: int
    issued_at: datetime
    expires_at: datetime | None
    password_reset_at: datetime


class SecretService(Protocol):
    """Port for password hashing and bearer-token issuance.

    Implementations are pure: no storage access.
    """

    def hash_secret(self, plain: str) -> str: ...

    def verify_secret(self, plain: str, hashed: str) -> bool: ...

    def issue_token(self, account_id: int, password_reset_at: datetime) -> str: ...

    def verify_token(self, token: str) -> TokenClaims: ...


class StubSecretService(SecretService):
    """Deterministic, fast secret service used in unit tests.

    Hashes are ``stub$<n>$<plain>`` (salted by a counter so that two calls
    differ) and tokens are ``stub.<account_id>.<reset micros>.<n>``.
    """

    def __init__(self) -> None:
        self._seq = 0
        self.issued: dict[str, TokenClaims] = {}

    def hash_secret(self, plain: str) -> str:
        self._seq += 1
        return f"stub${self._seq}${plain}"

    def verify_secret(self, plain: str, hashed: str) -> bool:
        parts = hashed.split("$", 2)
        if len(parts) != 3 or parts[0] != "stub":
            return False
        return parts[2] == plain

    def issue_token(self, account_id: int, password_reset_at: datetime) -> str:
        self._seq += 1
        token = f"stub.{account_id}.{to_epoch_micros(password_reset_at)}.{self._seq}"
        self.issued[token] = TokenClaims(
            account_id=account_id,
            issued_at=utc_now(),
            expires_at=None,
            password_reset_at=from_epoch_micros(to_epoch_micros(password_reset_at)),
        )
        return token

    def verify_token(self, token: str) -> TokenClaims:
        try:
            return self.issued[token]
        except KeyError:
            raise InvalidTokenError("Unknown token.") from None
