"""Composition root: build the service graph from configuration.

The graph is created once per application and stored under
``app.extensions["lockbox"]``. Views reach it through
:func:`lockbox.api.deps.services`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any

from flask import Flask
from sqlalchemy.engine import Engine

from lockbox.infra.crypto import JWTSecretService, load_private_key, load_public_key
from lockbox.repositories import AccountRepository, FileRepository
from lockbox.services._shared.ports import AccountService, FileService, SecretService
from lockbox.services.accounts.service import TransactionalAccountService
from lockbox.services.auth.dto import AuthConfig
from lockbox.services.auth.service import AuthService
from lockbox.services.files.service import TransactionalFileService
from lockbox.uow import ContextFactory, SQLAlchemyContextFactory

log = logging.getLogger(__name__)

EXTENSION_KEY = "lockbox"


@dataclass(frozen=True, slots=True)
class Services:
    """Shared, stateless service instances for one application."""

    contexts: ContextFactory
    secrets: SecretService
    accounts: AccountService
    files: FileService
    auth: AuthService


def build_secret_service(config: Mapping[str, Any]) -> JWTSecretService:
    """
    Load RS256 keys and hashing settings from ``config``.

    PEM text (``JWT_PRIVATE_KEY`` / ``JWT_PUBLIC_KEY``) wins over the
    ``*_PATH`` keys. A missing public key is derived from the private key.
    Missing keys only produce a warning: the app still starts, and token
    operations report a :class:`SigningKeyError` as a system error.
    """
    private_key = load_private_key(
        config.get("JWT_PRIVATE_KEY"), config.get("JWT_PRIVATE_KEY_PATH")
    )
    public_key = load_public_key(config.get("JWT_PUBLIC_KEY"), config.get("JWT_PUBLIC_KEY_PATH"))
    if public_key is None and private_key is not None:
        public_key = private_key.public_key()
    if private_key is None:
        log.warning("No JWT private key configured; logins cannot issue tokens")
    if public_key is None:
        log.warning("No JWT public key configured; bearer tokens cannot be verified")

    seconds = config.get("JWT_EXPIRES_SECONDS")
    return JWTSecretService(
        private_key=private_key,
        public_key=public_key,
        expires_in=timedelta(seconds=int(seconds)) if seconds else None,
        verify_expiry=bool(config.get("JWT_VERIFY_EXPIRY", False)),
        hash_method=config.get("PASSWORD_HASH_METHOD") or "scrypt",
    )


def build_services(
    config: Mapping[str, Any],
    engine: Engine,
    *,
    secrets: SecretService | None = None,
) -> Services:
    """
    Wire stores, services and the auth orchestrator around ``engine``.

    :param config: Flask config or any mapping with the ``JWT_*`` keys.
    :param engine: Engine whose pool backs every execution context.
    :param secrets: Override for the secret service (tests).
    """
    contexts = SQLAlchemyContextFactory(engine)
    secrets = secrets or build_secret_service(config)
    accounts = TransactionalAccountService(
        contexts=contexts, store=AccountRepository(), secrets=secrets
    )
    files = TransactionalFileService(contexts=contexts, store=FileRepository())
    auth = AuthService(
        accounts=accounts,
        secrets=secrets,
        config=AuthConfig(cookie_name=config.get("AUTH_COOKIE_NAME") or "authorization"),
    )
    return Services(contexts=contexts, secrets=secrets, accounts=accounts, files=files, auth=auth)


def init_app(app: Flask) -> None:
    """Build the service graph on the app's SQLAlchemy engine."""
    from lockbox.core.extensions import db

    with app.app_context():
        engine = db.engine
    app.extensions[EXTENSION_KEY] = build_services(app.config, engine)


__all__ = ["Services", "EXTENSION_KEY", "build_services", "build_secret_service", "init_app"]
