"""
lockbox.services._shared.ports
==============================

Collection of *ports* (hexagonal interfaces) the services depend on, most
paired with an in-memory fake for tests.

Modules
-------
- :mod:`account_store` / :mod:`file_store`:
    Persistence primitives, parameterized by an execution context.
    Production adapters live in :mod:`lockbox.repositories`.

- :mod:`secret_service`:
    Password hashing and bearer-token issuance/verification.
    The production adapter lives in :mod:`lockbox.infra.crypto`.

- :mod:`account_service` / :mod:`file_service`:
    Use-case level contracts implemented by the transactional services.

Design Notes
------------
Services receive these interfaces through their constructors; nothing
imports a concrete adapter except the composition root
(:mod:`lockbox.core.container`) and tests.
"""

from __future__ import annotations

from .account_service import AccountService, StubAccountService
from .account_store import AccountStore, InMemoryAccountStore
from .file_service import FileService, StubFileService
from .file_store import FileStore, InMemoryFileStore
from .secret_service import SecretService, StubSecretService, TokenClaims

__all__ = [
    "AccountService",
    "AccountStore",
    "FileService",
    "FileStore",
    "InMemoryAccountStore",
    "InMemoryFileStore",
    "SecretService",
    "StubAccountService",
    "StubFileService",
    "StubSecretService",
    "TokenClaims",
]
