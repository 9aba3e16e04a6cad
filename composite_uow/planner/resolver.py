"""Dependency resolver.

Orders pending nodes so that every node comes after the nodes its
key-contributing references point to. Plain (non-key) references are
honoured as well whenever they do not close a cycle; the ones that would
are left to the emitter's post-insert update.
"""

import logging

from composite_uow.exceptions import CyclicDependencyError
from composite_uow.planner.graph import Edge, EntityGraph, EntityNode, NodeState

logger = logging.getLogger("Composite-UoW")

_VISITING = 1
_DONE = 2


class DependencyResolver:
    """Depth-first topological sort over the pending part of an entity graph."""

    def __init__(self, graph: EntityGraph):
        self.graph = graph

    def order(self, nodes: list[EntityNode]) -> list[EntityNode]:
        """Return `nodes` in dependency order and mark them ordered.

        Independent subgraphs keep registration order, so the statement
        sequence is reproducible.

        Args:
            nodes: Pending nodes in registration order.

        Returns:
            The nodes, every one placed after the pending nodes it depends on.

        Raises:
            CyclicDependencyError: If key-contributing references form a cycle.
        """
        pending = {node.index for node in nodes}
        hard: dict[int, list[int]] = {node.index: [] for node in nodes}
        soft: list[Edge] = []
        for node in nodes:
            for edge in self.graph.outgoing(node):
                if edge.referenced not in pending:
                    continue
                if edge.key_contributing:
                    hard[node.index].append(edge.referenced)
                else:
                    soft.append(edge)

        # Key cycles are fatal whatever the plain references look like.
        self._sort(nodes, hard)

        dependencies = {index: list(deps) for index, deps in hard.items()}
        for edge in soft:
            if self._reaches(dependencies, edge.referenced, edge.dependent):
                logger.debug(
                    f"Deferring '{edge.field_name}' of {self.graph.nodes[edge.dependent].label}: "
                    f"{self.graph.nodes[edge.referenced].label} depends on it"
                )
                continue
            dependencies[edge.dependent].append(edge.referenced)

        ordered = self._sort(nodes, dependencies)
        for node in ordered:
            node.transition(NodeState.ORDERED)
        logger.debug(f"Insert order: {[node.label for node in ordered]}")
        return ordered

    def _sort(self, nodes: list[EntityNode], dependencies: dict[int, list[int]]) -> list[EntityNode]:
        marks: dict[int, int] = {}
        ordered: list[EntityNode] = []
        for root in nodes:
            if root.index in marks:
                continue
            marks[root.index] = _VISITING
            stack = [(root.index, iter(dependencies[root.index]))]
            while stack:
                index, deps = stack[-1]
                for dep in deps:
                    mark = marks.get(dep)
                    if mark == _DONE:
                        continue
                    if mark == _VISITING:
                        path = [entry[0] for entry in stack]
                        cycle = path[path.index(dep) :] + [dep]
                        raise CyclicDependencyError([self.graph.nodes[i].label for i in cycle])
                    marks[dep] = _VISITING
                    stack.append((dep, iter(dependencies[dep])))
                    break
                else:
                    stack.pop()
                    marks[index] = _DONE
                    ordered.append(self.graph.nodes[index])
        return ordered

    @staticmethod
    def _reaches(dependencies: dict[int, list[int]], start: int, goal: int) -> bool:
        seen = {start}
        frontier = [start]
        while frontier:
            current = frontier.pop()
            if current == goal:
                return True
            for dep in dependencies[current]:
                if dep not in seen:
                    seen.add(dep)
                    frontier.append(dep)
        return False
