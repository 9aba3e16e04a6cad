"""Foreign key materializer.

Copies referenced keys into dependent rows as a phase of its own, strictly
after ordering. Every column of a composite key moves at once; a referenced
key that is only partly known is an error, never a partial copy.
"""

import logging

from composite_uow.exceptions import SchemaMismatchError, UnresolvedDependencyError
from composite_uow.planner.graph import PENDING, Edge, EntityGraph, EntityNode, NodeState

logger = logging.getLogger("Composite-UoW")

_ALREADY_RESOLVED = frozenset({NodeState.RESOLVED, NodeState.EMITTED, NodeState.ACKNOWLEDGED})


class ForeignKeyMaterializer:
    def __init__(self, graph: EntityGraph):
        self.graph = graph

    def resolve(self, node: EntityNode) -> list[Edge]:
        """Populate the foreign key columns of an ordered node.

        Resolving a node that is already resolved is a no-op.

        Args:
            node: A node in the ordered state whose dependencies have final identities.

        Returns:
            Plain references left NULL because their target is inserted later;
            the emitter fills them in with an update once that target is acknowledged.

        Raises:
            UnresolvedDependencyError: If a key-contributing dependency has no complete identity.
        """
        if node.state in _ALREADY_RESOLVED:
            return []

        node.transition(NodeState.RESOLVING)
        edges = self.graph.outgoing(node)
        for edge in edges:
            referenced = self.graph.referenced(edge)
            if edge.key_contributing and not (referenced.state is NodeState.ACKNOWLEDGED or referenced.key_known):
                raise UnresolvedDependencyError(node.label, referenced.label, edge.field_name)

        deferred = []
        for edge in edges:
            referenced = self.graph.referenced(edge)
            if not edge.key_contributing and referenced.state is not NodeState.ACKNOWLEDGED:
                for _, column in edge.column_map:
                    node.columns[column] = None
                deferred.append(edge)
                continue
            self.copy_key(node, referenced, edge)

        node.transition(NodeState.RESOLVED)
        logger.debug(f"Resolved {node.label}: {node.columns}")
        return deferred

    @staticmethod
    def copy_key(node: EntityNode, referenced: EntityNode, edge: Edge) -> None:
        """Copy every column of `referenced`'s key across `edge` into `node`."""
        values = {}
        for source, target in edge.column_map:
            value = referenced.columns.get(source)
            if value is None or value is PENDING:
                raise UnresolvedDependencyError(node.label, referenced.label, edge.field_name)
            values[target] = value

        for target, value in values.items():
            current = node.columns.get(target)
            if current is not None and current is not PENDING and current != value:
                raise SchemaMismatchError(
                    f"column '{target}' of {node.label} is {current!r} but '{edge.field_name}' requires {value!r}"
                )
        node.columns.update(values)
