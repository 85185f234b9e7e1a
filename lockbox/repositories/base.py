"""Generic repository base for SQLAlchemy 2.x.

This module centralizes persistence-only concerns shared by all repositories:
- Every operation receives the execution context to run against and uses the
  ORM session bound to that context's connection.
- Reads refresh identity-map rows (``populate_existing``) so a second read in
  the same context sees bulk ``UPDATE`` statements issued earlier.
- Updates and deletes are single statements returning the affected row count.
- No business logic, no commit/rollback: services own transactions.

Design decisions
----------------
* Repositories return frozen dataclasses, never ORM instances, so nothing
  outside this package can lazily touch a closed session.
* Storage errors (connectivity, constraint violations) propagate unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Generic, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from lockbox.uow.base import ExecutionContext

R = TypeVar("R")  # SQLAlchemy mapped record type


class BaseRepository(Generic[R]):
    """Persistence helpers for one mapped record type.

    Subclasses set :attr:`model` and translate between records and their
    domain dataclass.
    """

    model: type[R]

    @staticmethod
    def session_of(ctx: ExecutionContext) -> Session:
        """Return the ORM session bound to ``ctx``.

        :raises TypeError: If the context carries no SQL session (e.g. an
            in-memory context handed to a SQL repository).
        """
        session = ctx.session
        if not isinstance(session, Session):
            raise TypeError(f"{type(ctx).__name__} does not carry a SQLAlchemy session.")
        return session

    def _insert(self, ctx: ExecutionContext, record: R) -> int:
        """Add ``record`` and flush so the database assigns its primary key.

        :returns: The new primary key.
        :rtype: int
        """
        session = self.session_of(ctx)
        session.add(record)
        session.flush()
        return int(record.id)  # type: ignore[attr-defined]

    def _first(self, ctx: ExecutionContext, *criteria: Any) -> R | None:
        """Return the first record matching ``criteria`` or ``None``."""
        stmt = (
            select(self.model)
            .where(*criteria)
            .limit(1)
            .execution_options(populate_existing=True)
        )
        return self.session_of(ctx).execute(stmt).scalars().first()

    def _update_by_id(self, ctx: ExecutionContext, pk: int, values: Mapping[str, Any]) -> int:
        """Issue ``UPDATE ... WHERE id = :pk``.

        :returns: Number of rows matched.
        :rtype: int
        """
        stmt = (
            update(self.model)
            .where(self.model.id == pk)  # type: ignore[attr-defined]
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return int(self.session_of(ctx).execute(stmt).rowcount or 0)

    def _delete_by_id(self, ctx: ExecutionContext, pk: int) -> int:
        """Issue ``DELETE ... WHERE id = :pk``.

        :returns: Number of rows removed.
        :rtype: int
        """
        stmt = (
            delete(self.model)
            .where(self.model.id == pk)  # type: ignore[attr-defined]
            .execution_options(synchronize_session=False)
        )
        return int(self.session_of(ctx).execute(stmt).rowcount or 0)
