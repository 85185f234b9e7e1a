# lockbox/infra/crypto/jwt_secret_service.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any

import jwt
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from werkzeug.security import check_password_hash, generate_password_hash

from lockbox.services._shared.clock import (
    from_epoch_micros,
    to_epoch_micros,
    utc_now,
)
from lockbox.services._shared.errors import (
    InvalidTokenError,
    SecretHashingError,
    SigningKeyError,
)
from lockbox.services._shared.ports.secret_service import SecretService, TokenClaims

log = logging.getLogger(__name__)

ALGORITHM = "RS256"
RESET_CLAIM = "password_reset_at"
REQUIRED_CLAIMS = ["sub", "iat", RESET_CLAIM]


class JWTSecretService(SecretService):
    """
    Production secret service.

    Passwords are hashed with Werkzeug's ``scrypt`` method (memory-hard, fresh
    random salt per call). Tokens are RS256 JWTs signed with the private key
    and verified with the public key.

    :param private_key: Signing key; without it :meth:`issue_token` fails.
    :param public_key: Verification key; without it :meth:`verify_token` fails.
    :param expires_in: Token lifetime. ``None`` issues tokens without ``exp``.
    :param verify_expiry: Whether :meth:`verify_token` rejects expired tokens.
    :param hash_method: Werkzeug hash method string, e.g. ``"scrypt"`` or
        ``"scrypt:32768:8:1"``.
    """

    def __init__(
        self,
        *,
        private_key: RSAPrivateKey | None,
        public_key: RSAPublicKey | None,
        expires_in: timedelta | None = None,
        verify_expiry: bool = False,
        hash_method: str = "scrypt",
    ) -> None:
        self._private_key = private_key
        self._public_key = public_key
        self.expires_in = expires_in
        self.verify_expiry = verify_expiry
        self.hash_method = hash_method

    # ------------------------------------------------------------------ #
    # Secrets
    # ------------------------------------------------------------------ #

    def hash_secret(self, plain: str) -> str:
        """Hash ``plain`` with a fresh salt.

        :raises SecretHashingError: If the method is unknown or hashing fails.
        """
        try:
            return generate_password_hash(plain, method=self.hash_method)
        except (ValueError, TypeError) as exc:
            raise SecretHashingError(f"Cannot hash secret with {self.hash_method!r}.") from exc

    def verify_secret(self, plain: str, hashed: str) -> bool:
        """Constant-time check of ``plain`` against ``hashed``.

        A malformed or unsupported hash is reported exactly like a mismatch.
        """
        try:
            return bool(check_password_hash(hashed, plain))
        except (ValueError, TypeError):
            return False

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #

    def issue_token(self, account_id: int, password_reset_at: datetime) -> str:
        """Sign a token bound to the account's current password reset epoch.

        :raises SigningKeyError: If no private key is configured or signing fails.
        """
        if self._private_key is None:
            raise SigningKeyError("No private key configured for token signing.")

        now = utc_now()
        payload: dict[str, Any] = {
            "sub": str(account_id),
            "iat": int(now.timestamp()),
            RESET_CLAIM: to_epoch_micros(password_reset_at),
        }
        if self.expires_in is not None:
            payload["exp"] = int((now + self.expires_in).timestamp())

        try:
            return jwt.encode(payload, self._private_key, algorithm=ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as exc:
            raise SigningKeyError("Token signing failed.") from exc

    def verify_token(self, token: str) -> TokenClaims:
        """Check signature and structure, then extract claims.

        :raises InvalidTokenError: On any signature, structure or (when enabled)
            expiry failure.
        :raises SigningKeyError: If no public key is configured.
        """
        if self._public_key is None:
            raise SigningKeyError("No public key configured for token verification.")

        try:
            payload = jwt.decode(
                token,
                self._public_key,
                algorithms=[ALGORITHM],
                options={"verify_exp": self.verify_expiry, "require": REQUIRED_CLAIMS},
            )
        except jwt.PyJWTError as exc:
            log.debug("Token rejected: %s", exc.__class__.__name__)
            raise InvalidTokenError("Token failed verification.") from exc

        try:
            exp = payload.get("exp")
            return TokenClaims(
                account_id=int(payload["sub"]),
                issued_at=from_epoch_micros(int(payload["iat"]) * 1_000_000),
                expires_at=None if exp is None else from_epoch_micros(int(exp) * 1_000_000),
                password_reset_at=from_epoch_micros(int(payload[RESET_CLAIM])),
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise InvalidTokenError("Token claims are malformed.") from exc
