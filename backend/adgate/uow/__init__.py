"""Unit of Work abstractions and concrete implementations.

Re-exports the SQLAlchemy-backed units of work used by the application, the
in-memory variant used in tests, and the abstract contract services depend on.
"""

from .base import UnitOfWork, UnitOfWorkFactory
from .memory import InMemoryStore, InMemoryUnitOfWork, in_memory_uow_factory
from .sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

__all__ = [
    "InMemoryStore",
    "InMemoryUnitOfWork",
    "SQLAlchemyReadOnlyUnitOfWork",
    "SQLAlchemyUnitOfWork",
    "UnitOfWork",
    "UnitOfWorkFactory",
    "in_memory_uow_factory",
]
