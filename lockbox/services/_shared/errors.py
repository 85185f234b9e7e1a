"""
System-level exceptions used within the service layer.

Validation problems and missing entities are *not* exceptions here: they are
returned as typed outcomes (see :mod:`lockbox.services._shared.results`).
The classes below describe infrastructure or invariant failures. Services
catch them and hand them back inside an ``Err`` outcome so the transport
layer can answer with a generic 500 without leaking detail.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, *markers: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/execute.
    *markers : str
        Fragments identifying the constraint. PostgreSQL and MySQL include the
        constraint name (e.g. ``'uq_accounts_email'``); SQLite reports the
        column instead (``'accounts.email'``), so callers usually pass both.

    Returns
    -------
    bool
        True if any marker appears in the driver message.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    return any(marker.lower() in message for marker in markers)


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They never cross the service boundary as raised exceptions; services
      wrap them in ``Err``.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific errors
# --------------------------------------------------------------------------- #


class TransactionError(ServiceError):
    """Raised when committing or rolling back an atomic context fails.

    After a failed rollback the final state of the transaction is unknown.
    """


class ContextStateError(ServiceError):
    """Raised when an execution context is used after it was finished or closed."""


@dataclass(slots=True)
class InconsistentStateError(ServiceError):
    """
    Raised when storage contradicts a check made earlier in the same context.

    Examples are a row that cannot be re-read right after insertion, or an
    update touching zero rows after the row was found.

    :param entity: Entity name (e.g., "Account").
    :type entity: str
    :param key: Identifier involved.
    :type key: str | int
    :param detail: What went wrong.
    :type detail: str
    """

    entity: str
    key: str | int
    detail: str

    def __str__(self) -> str:
        return f"{self.entity} {self.key}: {self.detail}"


class SecretHashingError(ServiceError):
    """Raised when a secret cannot be hashed."""


class SigningKeyError(ServiceError):
    """Raised when signing keys are missing or unusable.

    Unlike :class:`InvalidTokenError` this is a server misconfiguration and is
    never reported to clients as a failed authentication.
    """


class InvalidTokenError(ServiceError):
    """Raised when a token fails signature, structure or expiry checks."""
