"""Insertion planner: the caller-facing side of one flush.

Control flow per flush is Builder -> Resolver -> Materializer -> Emitter.
Ordering completes before the first insert; afterwards each node is
materialized and emitted in turn, so a dependent only ever sees final keys.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from composite_uow.catalog import SchemaCatalog
from composite_uow.orm.store.base import InsertRequest, PersistenceStore, UpdateRequest
from composite_uow.planner.emitter import StatementEmitter
from composite_uow.planner.graph import Edge, EntityGraph, EntityNode, NodeState
from composite_uow.planner.materializer import ForeignKeyMaterializer
from composite_uow.planner.resolver import DependencyResolver

logger = logging.getLogger("Composite-UoW")


@dataclass
class FlushResult:
    """What a successful flush wrote.

    Attributes:
        nodes: Inserted nodes in insert order.
        requests: Every request handed to the store, inserts first then post-insert updates.
        identities: Final key columns per inserted node.
    """

    nodes: list[EntityNode] = field(default_factory=list)
    requests: list[InsertRequest | UpdateRequest] = field(default_factory=list)
    identities: dict[EntityNode, dict[str, Any]] = field(default_factory=dict)

    @property
    def order(self) -> list[str]:
        """Entity type names in insert order."""
        return [node.entity_type.name for node in self.nodes]


class InsertionPlanner:
    """Collects new entities and persists them in dependency order.

    Example:
        >>> planner = InsertionPlanner(REGRESSION_CATALOG, InMemoryStore(REGRESSION_CATALOG))
        >>> a = planner.register("A", number=1)
        >>> b = planner.register("B", number=2)
        >>> composite = planner.register("Composite", entityA=a, entityB=b)
        >>> planner.flush().order
        ['A', 'B', 'Composite']
    """

    def __init__(self, catalog: SchemaCatalog, store: PersistenceStore):
        self.catalog = catalog
        self.store = store
        self.graph = EntityGraph(catalog)
        self.resolver = DependencyResolver(self.graph)
        self.materializer = ForeignKeyMaterializer(self.graph)
        self.emitter = StatementEmitter(store)

    def register(self, type_name: str, **values: Any) -> EntityNode:
        """Register a new entity to insert on the next flush."""
        return self.graph.register(type_name, **values)

    def attach(self, type_name: str, **values: Any) -> EntityNode:
        """Make an already-persisted entity available as a reference target."""
        return self.graph.attach(type_name, **values)

    def assign(self, node: EntityNode, name: str, value: Any) -> None:
        """Set a field of a registered entity before it is flushed."""
        self.graph.assign(node, name, value)

    @property
    def pending(self) -> list[EntityNode]:
        return self.graph.pending_nodes()

    def flush(self) -> FlushResult:
        """Persist every pending entity.

        The flush succeeds as a whole or fails with the first error. On
        failure, nodes already acknowledged keep their state and every other
        node of the flush is discarded and has to be registered again.

        Returns:
            The inserted nodes, the executed requests and the final identities.

        Raises:
            SchemaMismatchError: If a pending node lacks a required field.
            CyclicDependencyError: If key-contributing references form a cycle.
            UnresolvedDependencyError: If a dependency has no identity when it is needed.
            StoreRejectedError: If the store refuses a write.
        """
        nodes = self.graph.pending_nodes()
        if not nodes:
            return FlushResult()

        logger.info(f"Flushing {len(nodes)} pending entities")
        requests: list[InsertRequest | UpdateRequest] = []
        try:
            for node in nodes:
                self.graph.link_raw_references(node)
                self.graph.validate(node)
            ordered = self.resolver.order(nodes)

            deferred: list[Edge] = []
            for node in ordered:
                deferred.extend(self.materializer.resolve(node))
                requests.append(self.emitter.emit(node))
                self.graph.release(node)

            for edge in deferred:
                node = self.graph.nodes[edge.dependent]
                self.materializer.copy_key(node, self.graph.referenced(edge), edge)
                requests.append(self.emitter.emit_update(node, [column for _, column in edge.column_map]))
        except Exception:
            self._abort(nodes)
            raise

        logger.info(f"Flushed {len(ordered)} entities: {[node.label for node in ordered]}")
        return FlushResult(
            nodes=ordered,
            requests=requests,
            identities={node: node.identity for node in ordered},
        )

    def _abort(self, nodes: list[EntityNode]) -> None:
        discarded = []
        for node in nodes:
            if node.state is not NodeState.ACKNOWLEDGED:
                node.transition(NodeState.DISCARDED)
                discarded.append(node.label)
            self.graph.release(node)
        logger.warning(f"Flush aborted; discarded {discarded}")
