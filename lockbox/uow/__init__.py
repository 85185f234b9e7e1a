"""Execution context abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed contexts used by the services,
the in-memory variant used by fakes, and the abstract contracts.
"""

from .base import ContextFactory, ExecutionContext
from .memory import InMemoryContextFactory, InMemoryExecutionContext
from .sqlalchemy_uow import SQLAlchemyContextFactory, SQLAlchemyExecutionContext

__all__ = [
    "ContextFactory",
    "ExecutionContext",
    "InMemoryContextFactory",
    "InMemoryExecutionContext",
    "SQLAlchemyContextFactory",
    "SQLAlchemyExecutionContext",
]
