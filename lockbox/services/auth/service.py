"""
AuthService
===========

Authentication orchestrator: credentials, bearer tokens and inbound
requests. It holds no state of its own and never reveals *why*
authentication failed. Unknown usernames, wrong passwords, bad signatures,
stale tokens and missing credentials all collapse to ``NotAuthenticated``.

Token validity is bound to the account's ``password_reset_at``: a token
carries the value seen at issuance and is accepted only while the account
still has it. Changing the password therefore revokes every earlier token
without a revocation store.
"""

from __future__ import annotations

import logging

from lockbox.services._shared.clock import to_epoch_micros
from lockbox.services._shared.errors import InvalidTokenError
from lockbox.services._shared.ports.account_service import AccountService
from lockbox.services._shared.ports.secret_service import SecretService
from lockbox.services._shared.results import (
    AuthResult,
    Err,
    NotAuthenticated,
    NotFound,
    Ok,
    captures_errors,
)
from lockbox.services.accounts.dto import Account
from lockbox.services.auth.dto import BEARER_PREFIX, AuthConfig, RequestMetadata

log = logging.getLogger(__name__)


class AuthService:
    """
    Authenticate by credentials, by token or by request metadata.

    :param accounts: Account lookups.
    :param secrets: Secret verification and token issuance.
    :param config: Header and cookie names to read credentials from.
    """

    def __init__(
        self,
        *,
        accounts: AccountService,
        secrets: SecretService,
        config: AuthConfig | None = None,
    ) -> None:
        self.accounts = accounts
        self.secrets = secrets
        self.config = config or AuthConfig()
        self._decoy_hash: str | None = None

    # ------------------------------------------------------------------ #
    # Credentials
    # ------------------------------------------------------------------ #

    @captures_errors
    def authenticate_credentials(self, username: str, password: str) -> AuthResult[Account]:
        """
        Check a username/password pair.

        :returns: ``Ok(account)``, ``NotAuthenticated`` or ``Err``.
        """
        found = self.accounts.get_by_username(username)
        if isinstance(found, NotFound):
            # Unknown usernames still run one full hash check.
            self.secrets.verify_secret(password, self._decoy())
            return NotAuthenticated()
        if isinstance(found, Err):
            return found

        account = found.value
        if not self.secrets.verify_secret(password, account.password):
            return NotAuthenticated()
        return Ok(account)

    def _decoy(self) -> str:
        if self._decoy_hash is None:
            self._decoy_hash = self.secrets.hash_secret("lockbox-decoy-password")
        return self._decoy_hash

    # ------------------------------------------------------------------ #
    # Tokens
    # ------------------------------------------------------------------ #

    @captures_errors
    def issue_token(self, account: Account) -> Ok[str] | Err:
        """Issue a bearer token bound to ``account``'s current reset epoch."""
        return Ok(self.secrets.issue_token(account.id, account.password_reset_at))

    @captures_errors
    def authenticate_token(self, token: str) -> AuthResult[Account]:
        """
        Verify ``token`` and load its account.

        :returns: ``Ok(account)`` when the signature holds, the account exists
            and its reset epoch matches the token's; ``NotAuthenticated``
            otherwise; ``Err`` on system failure (including missing keys).
        """
        try:
            claims = self.secrets.verify_token(token)
        except InvalidTokenError:
            return NotAuthenticated()

        found = self.accounts.get_by_id(claims.account_id)
        if isinstance(found, NotFound):
            return NotAuthenticated()
        if isinstance(found, Err):
            return found

        account = found.value
        if to_epoch_micros(claims.password_reset_at) != to_epoch_micros(account.password_reset_at):
            log.debug("Token for account %s predates its last password change.", account.id)
            return NotAuthenticated()
        return Ok(account)

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    def extract_token(self, request: RequestMetadata) -> str | None:
        """
        Return the bearer token of ``request`` or ``None``.

        The header wins over the cookie. A value without the ``Bearer``
        scheme prefix yields ``None``; there is no fallback to the cookie
        once a header is present.
        """
        value = request.headers.get(self.config.header_name)
        if value is None:
            value = request.cookies.get(self.config.cookie_name)
        if not value or not value.startswith(BEARER_PREFIX):
            return None
        token = value[len(BEARER_PREFIX) :].strip()
        return token or None

    @captures_errors
    def authenticate_request(self, request: RequestMetadata) -> AuthResult[Account]:
        """Authenticate the bearer credentials carried by ``request``."""
        token = self.extract_token(request)
        if token is None:
            return NotAuthenticated()
        return self.authenticate_token(token)
