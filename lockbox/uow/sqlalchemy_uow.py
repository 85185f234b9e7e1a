"""
SQLAlchemy implementation of the execution context.
"""

from __future__ import annotations

import logging

from sqlalchemy.engine import Connection, Engine, Transaction
from sqlalchemy.orm import Session

from lockbox.services._shared.errors import TransactionError
from lockbox.uow.base import ExecutionContext

log = logging.getLogger(__name__)


def _discard(connection: Connection) -> None:
    """Invalidate and close a connection so the pool never reuses it."""
    try:
        connection.invalidate()
    finally:
        connection.close()


class SQLAlchemyExecutionContext(ExecutionContext):
    """
    Execution context backed by one pooled SQLAlchemy connection.

    Parameters
    ----------
    connection:
        Connection borrowed from the engine pool. It is returned to the pool on
        :meth:`close`, or invalidated when its transactional state is unknown.
    transaction:
        Open root transaction for atomic contexts, ``None`` for autonomous
        (autocommit) contexts.

    Notes
    -----
    The ORM ``session`` joins the connection's transaction instead of owning
    one, so ``session.commit()`` is never used; committing flushes pending
    ORM state and then commits the connection-level transaction.
    """

    def __init__(self, connection: Connection, *, transaction: Transaction | None = None) -> None:
        super().__init__(atomic=transaction is not None)
        self.connection = connection
        self._transaction = transaction
        self.session = Session(bind=connection, autoflush=False, expire_on_commit=False)

    def _commit(self) -> None:
        assert self._transaction is not None
        try:
            self.session.flush()
            self._transaction.commit()
        except Exception as exc:
            log.error("Commit failed; discarding connection.", exc_info=True)
            self._close_session()
            _discard(self.connection)
            raise TransactionError("Failed to commit transaction.") from exc

    def _rollback(self) -> None:
        assert self._transaction is not None
        self._close_session()
        try:
            self._transaction.rollback()
        except Exception as exc:
            log.error("Rollback failed; transaction state unknown.", exc_info=True)
            _discard(self.connection)
            raise TransactionError("Failed to roll back transaction.") from exc

    def _release(self) -> None:
        self._close_session()
        if not self.connection.closed:
            self.connection.close()

    def _close_session(self) -> None:
        try:
            self.session.close()
        except Exception:
            log.warning("Closing ORM session failed.", exc_info=True)


class SQLAlchemyContextFactory:
    """Open autonomous or atomic contexts on a SQLAlchemy engine.

    The engine owns the connection pool, including the acquisition timeout
    configured through ``DB_POOL_TIMEOUT``.
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def begin_autonomous(self) -> SQLAlchemyExecutionContext:
        """Borrow one connection in autocommit mode."""
        return self._open(atomic=False)

    def begin_atomic(self) -> SQLAlchemyExecutionContext:
        """Borrow one connection and begin a transaction on it."""
        return self._open(atomic=True)

    def _open(self, *, atomic: bool) -> SQLAlchemyExecutionContext:
        connection = self.engine.connect()
        try:
            if atomic:
                return SQLAlchemyExecutionContext(connection, transaction=connection.begin())
            connection.execution_options(isolation_level="AUTOCOMMIT")
            return SQLAlchemyExecutionContext(connection)
        except BaseException:
            # Setup was abandoned half way; the connection state is unknown.
            _discard(connection)
            raise
