"""Planner Unit of Work for Composite-UoW.

Binds an `InsertionPlanner` to a SQLAlchemy session: entities registered
inside the context are inserted through that session on `flush()`, and the
transaction is rolled back if the context exits with an exception.
"""

from typing import Any

from sqlalchemy.orm import Session, sessionmaker

from composite_uow.catalog import SchemaCatalog
from composite_uow.exceptions import SessionNotSetError
from composite_uow.orm.schema_factory import create_schema
from composite_uow.orm.store.sql import SqlAlchemyStore
from composite_uow.orm.uow.base import BaseUnitOfWork
from composite_uow.planner.graph import EntityNode
from composite_uow.planner.planner import FlushResult, InsertionPlanner


class PlannerUnitOfWork(BaseUnitOfWork):
    """Unit of Work that persists registered entities in dependency order.

    Example:
        >>> with PlannerUnitOfWork(session_factory, REGRESSION_CATALOG) as uow:
        ...     a = uow.register("A", number=1)
        ...     b = uow.register("B", number=2)
        ...     uow.register("Composite", entityA=a, entityB=b)
        ...     uow.flush()
        ...     uow.commit()
    """

    def __init__(self, session_factory: sessionmaker[Session], catalog: SchemaCatalog, schema: Any | None = None):
        """Initialize the Unit of Work.

        Args:
            session_factory: SQLAlchemy sessionmaker instance.
            catalog: Catalog describing the entity types.
            schema: Schema namespace from create_schema(). If None, one is generated from the catalog.
        """
        super().__init__(session_factory)
        self.catalog = catalog
        self.schema = schema if schema is not None else create_schema(catalog)
        self._planner: InsertionPlanner | None = None

    def _reset(self) -> None:
        self._planner = None

    @property
    def planner(self) -> InsertionPlanner:
        """Get the planner bound to the current session.

        Raises:
            SessionNotSetError: If session is not initialized.
        """
        if self.session is None:
            raise SessionNotSetError
        if self._planner is None:
            self._planner = InsertionPlanner(self.catalog, SqlAlchemyStore(self.session, self.schema))
        return self._planner

    @property
    def store(self) -> SqlAlchemyStore:
        return self.planner.store  # type: ignore[return-value]

    def register(self, type_name: str, **values: Any) -> EntityNode:
        return self.planner.register(type_name, **values)

    def attach(self, type_name: str, **values: Any) -> EntityNode:
        return self.planner.attach(type_name, **values)

    def assign(self, node: EntityNode, name: str, value: Any) -> None:
        self.planner.assign(node, name, value)

    def flush(self) -> FlushResult:
        """Insert every pending entity through the session without committing."""
        return self.planner.flush()
