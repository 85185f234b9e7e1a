# lockbox/services/_shared/base.py
from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TypeVar

from lockbox.services._shared.results import Err, Ok
from lockbox.uow.base import ContextFactory, ExecutionContext

R = TypeVar("R")

log = logging.getLogger(__name__)


def run_autonomous(
    contexts: ContextFactory, operation: Callable[[ExecutionContext], R]
) -> R | Err:
    """
    Run ``operation`` on a freshly borrowed autocommit connection.

    :param contexts: Factory the context is borrowed from.
    :param operation: Context-scoped call, usually a ``*_with_context`` method.
    :returns: The operation's outcome, or ``Err`` when no connection could
        be acquired.
    """
    try:
        ctx = contexts.begin_autonomous()
    except Exception as exc:
        log.error("Could not open autonomous context.", exc_info=True)
        return Err(exc)
    with ctx:
        return operation(ctx)


def run_atomic(contexts: ContextFactory, operation: Callable[[ExecutionContext], R]) -> R | Err:
    """
    Run ``operation`` inside a new transaction and finish it.

    The transaction is committed only for ``Ok`` outcomes. A failing
    commit or rollback replaces the outcome with ``Err``: after a failed
    rollback the caller must not assume any particular final state.

    Views composing several ``*_with_context`` calls use this directly with
    the shared factory, so they depend on the service ports only.

    :param contexts: Factory the transaction is opened on.
    :param operation: Context-scoped call, usually a ``*_with_context`` method.
    :returns: The operation's outcome or ``Err``.
    """
    try:
        ctx = contexts.begin_atomic()
    except Exception as exc:
        log.error("Could not open atomic context.", exc_info=True)
        return Err(exc)
    with ctx:
        outcome = operation(ctx)
        try:
            if isinstance(outcome, Ok):
                ctx.commit_if_atomic()
            else:
                ctx.rollback_if_atomic()
        except Exception as exc:
            log.error(
                "Finishing transaction failed after %s outcome.",
                type(outcome).__name__,
                exc_info=True,
            )
            return Err(exc)
        return outcome


class BaseService:
    """
    Base class for transactional application services.

    Responsibilities
    ----------------
    * Open execution contexts for connection-scoped operations.
    * Own the transaction boundary: commit on ``Ok``, roll back otherwise.
    * Turn context setup and commit/rollback failures into ``Err``.

    Notes
    -----
    - Context-scoped (``*_with_context``) methods never commit or roll back;
      the caller that opened the context does.
    """

    def __init__(self, *, contexts: ContextFactory) -> None:
        """
        Initialize the base service.

        :param contexts: Factory for autonomous and atomic execution contexts.
        :type contexts: ContextFactory
        """
        self.contexts = contexts

    # -------------------------- Context helpers ---------------------------

    def run_autonomous(self, operation: Callable[[ExecutionContext], R]) -> R | Err:
        return run_autonomous(self.contexts, operation)

    def run_atomic(self, operation: Callable[[ExecutionContext], R]) -> R | Err:
        return run_atomic(self.contexts, operation)
