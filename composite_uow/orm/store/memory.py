"""In-memory persistence store.

Keeps rows per table and enforces the constraints a relational store would:
NOT NULL, primary key uniqueness and foreign key existence. Every executed
request is appended to `log`, which makes statement order observable.
"""

from typing import Any

from composite_uow.catalog import EntityType, SchemaCatalog
from composite_uow.exceptions import StoreRejectedError
from composite_uow.orm.store.base import InsertRequest, InsertResult, PersistenceStore, UpdateRequest


class InMemoryStore(PersistenceStore):
    def __init__(self, catalog: SchemaCatalog):
        self.catalog = catalog
        self.rows: dict[str, dict[tuple, dict[str, Any]]] = {entity_type.table: {} for entity_type in catalog}
        self.log: list[InsertRequest | UpdateRequest] = []
        self._sequences: dict[str, int] = {}

    def insert(self, request: InsertRequest) -> InsertResult:
        entity_type = self.catalog[request.entity]
        row = {column: request.values.get(column) for column in entity_type.columns}

        identity = {}
        generated = entity_type.key.generated_column
        if generated is not None:
            if row[generated] is None:
                row[generated] = self._sequences.get(entity_type.table, 0) + 1
                identity[generated] = row[generated]
            self._sequences[entity_type.table] = max(self._sequences.get(entity_type.table, 0), row[generated])

        self._check_not_null(entity_type, row)
        key = tuple(row[column] for column in entity_type.key.columns)
        if key in self.rows[entity_type.table]:
            columns = ", ".join(f"{entity_type.table}.{column}" for column in entity_type.key.columns)
            raise StoreRejectedError(f"UNIQUE constraint failed: {columns}")
        self._check_foreign_keys(entity_type, row)

        self.rows[entity_type.table][key] = row
        self.log.append(request)
        return InsertResult(identity=identity)

    def update(self, request: UpdateRequest) -> None:
        entity_type = self.catalog[request.entity]
        key = tuple(request.key[column] for column in entity_type.key.columns)
        current = self.rows[entity_type.table].get(key)
        if current is None:
            raise StoreRejectedError(f"no row in {entity_type.table} with key {request.key}")

        row = {**current, **request.values}
        self._check_not_null(entity_type, row)
        self._check_foreign_keys(entity_type, row)
        current.update(request.values)
        self.log.append(request)

    def get(self, entity: str, **key: Any) -> dict[str, Any] | None:
        """Return a copy of the row of `entity` with the given key columns, if present."""
        entity_type = self.catalog[entity]
        row = self.rows[entity_type.table].get(tuple(key[column] for column in entity_type.key.columns))
        return dict(row) if row is not None else None

    @property
    def inserted_entities(self) -> list[str]:
        """Entity type names in insert order."""
        return [request.entity for request in self.log if isinstance(request, InsertRequest)]

    @staticmethod
    def _check_not_null(entity_type: EntityType, row: dict[str, Any]) -> None:
        for column in entity_type.columns:
            if row.get(column) is None and not entity_type.is_nullable(column):
                raise StoreRejectedError(f"NOT NULL constraint failed: {entity_type.table}.{column}")

    def _check_foreign_keys(self, entity_type: EntityType, row: dict[str, Any]) -> None:
        for reference in entity_type.references:
            values = [row.get(column) for column in reference.columns]
            if all(value is None for value in values):
                continue
            target = self.catalog[reference.target]
            if any(value is None for value in values) or tuple(values) not in self.rows[target.table]:
                raise StoreRejectedError(
                    f"FOREIGN KEY constraint failed: {entity_type.table}({', '.join(reference.columns)}) "
                    f"-> {target.table}({', '.join(target.key.columns)})"
                )
