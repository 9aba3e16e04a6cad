"""Statement emitter.

Turns a resolved node into one row insert, hands it to the persistence
store and records the store-assigned identity back onto the node before any
dependent is materialized.
"""

import logging

from composite_uow.exceptions import StoreRejectedError
from composite_uow.orm.store.base import InsertRequest, PersistenceStore, UpdateRequest
from composite_uow.planner.graph import PENDING, EntityNode, NodeState

logger = logging.getLogger("Composite-UoW")


class StatementEmitter:
    def __init__(self, store: PersistenceStore):
        self.store = store

    def emit(self, node: EntityNode) -> InsertRequest:
        """Insert a resolved node and acknowledge it.

        Args:
            node: A node in the resolved state.

        Returns:
            The request handed to the store.

        Raises:
            InvalidStateTransitionError: If the node is not resolved.
            StoreRejectedError: If the store refuses the row or reports no identity for it.
        """
        entity_type = node.entity_type
        request = InsertRequest(
            entity=entity_type.name,
            table=entity_type.table,
            values={column: value for column, value in node.columns.items() if value is not PENDING},
            generated=entity_type.key.generated_column,
        )
        node.transition(NodeState.EMITTED)

        result = self.store.insert(request)
        node.columns.update(result.identity)
        if not node.key_known:
            raise StoreRejectedError(f"store reported no identity for {node.label}")
        node.transition(NodeState.ACKNOWLEDGED)
        logger.debug(f"Inserted {node.label} into {entity_type.table} with key {node.identity}")
        return request

    def emit_update(self, node: EntityNode, columns: list[str]) -> UpdateRequest:
        """Write back plain foreign key columns of an acknowledged node."""
        request = UpdateRequest(
            entity=node.entity_type.name,
            table=node.entity_type.table,
            key=node.identity or {},
            values={column: node.columns[column] for column in columns},
        )
        self.store.update(request)
        logger.debug(f"Updated {node.label} with {request.values}")
        return request
