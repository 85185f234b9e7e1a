"""Global pytest fixtures for the lockbox backend.

Each test gets its own file-backed SQLite database under ``tmp_path``: the
services borrow several pooled connections per operation, so an in-memory
database (one per connection) would not let them see each other's commits.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

import lockbox.models  # noqa: F401  (registers tables on the metadata)
from lockbox import create_app
from lockbox.core.config import TestingConfig
from lockbox.core.extensions import db, metadata
from lockbox.infra.crypto import (
    JWTSecretService,
    generate_key_pair,
    load_private_key,
    load_public_key,
)
from lockbox.repositories import AccountRepository, FileRepository
from lockbox.services.accounts.service import TransactionalAccountService
from lockbox.services.auth.service import AuthService
from lockbox.services.files.service import TransactionalFileService
from lockbox.uow import SQLAlchemyContextFactory

# Cheap but real Werkzeug hashing; scrypt makes the suite crawl.
TEST_HASH_METHOD = TestingConfig.PASSWORD_HASH_METHOD


# --------------------------------------------------------------------------- #
# Keys & secrets
# --------------------------------------------------------------------------- #


@pytest.fixture(scope="session")
def rsa_pem() -> tuple[bytes, bytes]:
    """One RSA key pair (private PEM, public PEM) for the whole session."""
    return generate_key_pair()


@pytest.fixture()
def secrets(rsa_pem: tuple[bytes, bytes]) -> JWTSecretService:
    """Production secret service with unbounded tokens."""
    private_pem, public_pem = rsa_pem
    return JWTSecretService(
        private_key=load_private_key(private_pem),
        public_key=load_public_key(public_pem),
        hash_method=TEST_HASH_METHOD,
    )


# --------------------------------------------------------------------------- #
# Database & services
# --------------------------------------------------------------------------- #


@pytest.fixture()
def engine(tmp_path) -> Generator[Engine, None, None]:
    """Engine on a fresh SQLite file with the schema created."""
    eng = create_engine(f"sqlite:///{tmp_path / 'lockbox.db'}")
    metadata.create_all(eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture()
def contexts(engine: Engine) -> SQLAlchemyContextFactory:
    return SQLAlchemyContextFactory(engine)


@pytest.fixture()
def account_store() -> AccountRepository:
    return AccountRepository()


@pytest.fixture()
def file_store() -> FileRepository:
    return FileRepository()


@pytest.fixture()
def accounts(contexts, account_store, secrets) -> TransactionalAccountService:
    return TransactionalAccountService(contexts=contexts, store=account_store, secrets=secrets)


@pytest.fixture()
def files(contexts, file_store) -> TransactionalFileService:
    return TransactionalFileService(contexts=contexts, store=file_store)


@pytest.fixture()
def auth(accounts, secrets) -> AuthService:
    return AuthService(accounts=accounts, secrets=secrets)


# --------------------------------------------------------------------------- #
# Flask application
# --------------------------------------------------------------------------- #


@pytest.fixture()
def app(tmp_path, rsa_pem: tuple[bytes, bytes]) -> Generator[Flask, None, None]:
    """Create a Flask application on its own SQLite file.

    Keys are passed as PEM text, the same way ``JWT_PRIVATE_KEY`` /
    ``JWT_PUBLIC_KEY`` would come from the environment.
    """
    private_pem, public_pem = rsa_pem
    application = create_app(
        {
            "TESTING": True,
            "DEBUG": False,
            "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'app.db'}",
            "JWT_PRIVATE_KEY": private_pem.decode(),
            "JWT_PUBLIC_KEY": public_pem.decode(),
            "PASSWORD_HASH_METHOD": TEST_HASH_METHOD,
            "AUTH_COOKIE_SECURE": False,
            "DEFAULT_PROFILE_PICTURE_URL": "https://cdn.example.com/default.png",
            "LOG_LEVEL": "WARNING",
        },
        instance_relative_config=False,
    )
    with application.app_context():
        db.create_all()
    yield application
    with application.app_context():
        db.engine.dispose()


@pytest.fixture()
def client(app: Flask) -> FlaskClient:
    """Return a Flask test client."""
    return app.test_client()


@pytest.fixture()
def freeze_time() -> Callable[[str | None], Any]:
    """Factory returning :func:`freezegun.freeze_time`.

    Examples
    --------
    >>> def test_with_frozen_time(freeze_time):
    ...     with freeze_time("2024-01-01"):
    ...         ...
    """
    from freezegun import freeze_time as _freeze_time

    def _factory(target: str | None = None) -> Any:
        return _freeze_time(target or "2024-01-01")

    return _factory
