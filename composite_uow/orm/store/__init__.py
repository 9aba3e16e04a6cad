"""Persistence stores the statement emitter writes through.

- PersistenceStore: Abstract store interface
- InMemoryStore: Constraint-checking in-memory store with an ordered request log
- SqlAlchemyStore: Store executing Core statements through a SQLAlchemy session
"""

from composite_uow.orm.store.base import InsertRequest, InsertResult, PersistenceStore, UpdateRequest
from composite_uow.orm.store.memory import InMemoryStore
from composite_uow.orm.store.sql import SqlAlchemyStore

__all__ = [
    "InMemoryStore",
    "InsertRequest",
    "InsertResult",
    "PersistenceStore",
    "SqlAlchemyStore",
    "UpdateRequest",
]
