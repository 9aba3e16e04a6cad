"""SQLAlchemy-backed persistence store.

Executes Core `insert()` / `update()` statements through a `Session`, so the
writes join whatever transaction the surrounding unit of work manages.
"""

import logging
from typing import Any

from sqlalchemy import and_, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from composite_uow.exceptions import StoreRejectedError
from composite_uow.orm.store.base import InsertRequest, InsertResult, PersistenceStore, UpdateRequest

logger = logging.getLogger("Composite-UoW")


class SqlAlchemyStore(PersistenceStore):
    def __init__(self, session: Session, schema: Any):
        """Initialize the store with a session and a generated schema.

        Args:
            session: SQLAlchemy session for database operations.
            schema: Schema namespace from create_schema().
        """
        self.session = session
        self.schema = schema

    def insert(self, request: InsertRequest) -> InsertResult:
        table = self.schema.tables[request.entity]
        assign_key = request.generated is not None and request.values.get(request.generated) is None
        values = {
            column: value
            for column, value in request.values.items()
            if not (assign_key and column == request.generated)
        }

        logger.debug(f"INSERT INTO {table.name} {values}")
        try:
            result = self.session.execute(insert(table).values(**values))
        except IntegrityError as e:
            raise StoreRejectedError(str(e.orig)) from e

        if not assign_key:
            return InsertResult()
        primary_key = dict(zip(table.primary_key.columns.keys(), result.inserted_primary_key))
        return InsertResult(identity={request.generated: primary_key[request.generated]})

    def update(self, request: UpdateRequest) -> None:
        table = self.schema.tables[request.entity]
        stmt = update(table).where(self._match_key(table, request.key)).values(**request.values)

        logger.debug(f"UPDATE {table.name} SET {request.values} WHERE {request.key}")
        try:
            result = self.session.execute(stmt)
        except IntegrityError as e:
            raise StoreRejectedError(str(e.orig)) from e
        if result.rowcount == 0:
            raise StoreRejectedError(f"no row in {table.name} with key {request.key}")

    def get(self, entity: str, **key: Any) -> dict[str, Any] | None:
        """Read back one row of `entity` by its key columns.

        Returns:
            The row as a column -> value dict, or None if it does not exist.
        """
        table = self.schema.tables[entity]
        row = self.session.execute(select(table).where(self._match_key(table, key))).mappings().first()
        return dict(row) if row is not None else None

    @staticmethod
    def _match_key(table, key: dict[str, Any]):
        return and_(*[table.c[column] == value for column, value in key.items()])
