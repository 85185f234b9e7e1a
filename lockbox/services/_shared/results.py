"""
Typed outcomes returned by every service operation.

Expected outcomes (validation failure, missing entity, failed
authentication) are values, not exceptions. System failures are caught at
the service boundary and returned as :class:`Err`.

===================  ====================================================
Alias                Variants
===================  ====================================================
``InsertionResult``  ``Ok[T]`` / ``Invalid`` / ``Err``
``QueryResult``      ``Ok[T]`` / ``NotFound`` / ``Err``
``UpdateResult``     ``Ok[T]`` / ``Invalid`` / ``NotFound`` / ``Err``
``DeletionResult``   ``Ok[None]`` / ``NotFound`` / ``Err``
``AuthResult``       ``Ok[T]`` / ``NotAuthenticated`` / ``Err``
===================  ====================================================
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from lockbox.services._shared.validation import ValidationErrors

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome carrying ``value``."""

    value: T


@dataclass(frozen=True, slots=True)
class Invalid:
    """Field-level validation failure."""

    errors: ValidationErrors


@dataclass(frozen=True, slots=True)
class NotFound:
    """The addressed entity does not exist."""


@dataclass(frozen=True, slots=True)
class NotAuthenticated:
    """Authentication failed. Deliberately carries no reason."""


@dataclass(frozen=True, slots=True)
class Err:
    """System or infrastructure failure; ``error`` is never shown to clients."""

    error: BaseException


InsertionResult = Union[Ok[T], Invalid, Err]
QueryResult = Union[Ok[T], NotFound, Err]
UpdateResult = Union[Ok[T], Invalid, NotFound, Err]
DeletionResult = Union[Ok[None], NotFound, Err]
AuthResult = Union[Ok[T], NotAuthenticated, Err]


def captures_errors(func: F) -> F:
    """Turn any exception escaping a service method into an :class:`Err`.

    The failure is logged with its traceback at the point of capture; callers
    only see the opaque outcome.
    """

    @functools.wraps(func)
    def wrapper(self: Any, *args: Any, **kwargs: Any):
        try:
            return func(self, *args, **kwargs)
        except Exception as exc:
            log.error(
                "%s.%s failed: %s",
                type(self).__name__,
                func.__name__,
                exc.__class__.__name__,
                exc_info=True,
            )
            return Err(exc)

    return wrapper  # type: ignore[return-value]
