"""
Abstract execution context contracts.

An execution context is the unit of work a store operation runs against. It
wraps either one borrowed connection in autocommit mode (*autonomous*) or one
open transaction (*atomic*). Store code only sees the context, so the same
query runs unchanged inside or outside a transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Protocol

from lockbox.services._shared.errors import ContextStateError


class ContextFactory(Protocol):
    """Port for opening execution contexts."""

    def begin_autonomous(self) -> ExecutionContext: ...

    def begin_atomic(self) -> ExecutionContext: ...


class ExecutionContext(ABC):
    """
    Coordinates the lifetime of one connection or one transaction.

    Responsibilities:
    - Expose the handle stores execute against (``session`` for SQL).
    - Commit or roll back an atomic context exactly once.
    - Release the underlying resource on :meth:`close`; an atomic context
      that was never finished is rolled back, never committed.

    Autonomous contexts treat ``commit_if_atomic``/``rollback_if_atomic`` as
    no-ops, which lets services finish every context the same way.
    """

    session: Any = None

    def __init__(self, *, atomic: bool) -> None:
        self.atomic = atomic
        self._finished = False
        self._closed = False

    @property
    def finished(self) -> bool:
        """``True`` once an atomic context was committed or rolled back."""
        return self._finished

    @property
    def closed(self) -> bool:
        return self._closed

    def commit_if_atomic(self) -> None:
        """Commit the transaction when the context is atomic.

        :raises ContextStateError: If the context is closed or already finished.
        :raises TransactionError: If the commit itself fails.
        """
        if not self.atomic:
            return
        self._claim_finish("commit")
        self._commit()

    def rollback_if_atomic(self) -> None:
        """Roll back the transaction when the context is atomic.

        :raises ContextStateError: If the context is closed or already finished.
        :raises TransactionError: If the rollback fails; the final state is unknown.
        """
        if not self.atomic:
            return
        self._claim_finish("rollback")
        self._rollback()

    def close(self) -> None:
        """Release the context, rolling back an unfinished atomic transaction."""
        if self._closed:
            return
        self._closed = True
        if self.atomic and not self._finished:
            self._finished = True
            try:
                self._rollback()
            finally:
                self._release()
        else:
            self._release()

    def __enter__(self) -> ExecutionContext:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _claim_finish(self, action: str) -> None:
        if self._closed:
            raise ContextStateError(f"Cannot {action}: execution context is closed.")
        if self._finished:
            raise ContextStateError(f"Cannot {action}: transaction was already finished.")
        self._finished = True

    @abstractmethod
    def _commit(self) -> None: ...

    @abstractmethod
    def _rollback(self) -> None: ...

    @abstractmethod
    def _release(self) -> None: ...
