"""
In-memory execution contexts for unit tests and fakes.

Atomic contexts keep an undo journal. In-memory stores register one undo step
per mutation; rolling back replays the journal in reverse order.
"""

from __future__ import annotations

from collections.abc import Callable

from lockbox.uow.base import ExecutionContext


class InMemoryExecutionContext(ExecutionContext):
    """Context whose "transaction" is a list of undo callbacks."""

    def __init__(self, *, atomic: bool) -> None:
        super().__init__(atomic=atomic)
        self._undo: list[Callable[[], None]] = []

    def record_undo(self, step: Callable[[], None]) -> None:
        """Register how to revert a mutation (ignored when autonomous)."""
        if self.atomic:
            self._undo.append(step)

    def _commit(self) -> None:
        self._undo.clear()

    def _rollback(self) -> None:
        while self._undo:
            self._undo.pop()()

    def _release(self) -> None:
        self._undo.clear()


class InMemoryContextFactory:
    """Counterpart of :class:`~lockbox.uow.sqlalchemy_uow.SQLAlchemyContextFactory`."""

    def __init__(self) -> None:
        self.opened: list[InMemoryExecutionContext] = []

    def begin_autonomous(self) -> InMemoryExecutionContext:
        ctx = InMemoryExecutionContext(atomic=False)
        self.opened.append(ctx)
        return ctx

    def begin_atomic(self) -> InMemoryExecutionContext:
        ctx = InMemoryExecutionContext(atomic=True)
        self.opened.append(ctx)
        return ctx
