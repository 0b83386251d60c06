"""DependencyGraph — immutable NetworkX arena of package nodes.

Built once per invocation from a package listing, no cross-invocation cache.
Node keys are :class:`PackageId` values and each node's ``package``
attribute holds its :class:`PackageNode`. Edges point from dependency to
dependent, so a topological walk yields leaf packages first.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import networkx as nx

from deps_order.domain.errors import DanglingDependency
from deps_order.domain.packages import DependencyEdge, PackageId, PackageNode, PackageRecord

logger = logging.getLogger(__name__)

type _Graph = nx.DiGraph


class DependencyGraph:
    """Read-only view over a frozen dependency DiGraph."""

    def __init__(self, graph: _Graph) -> None:
        self._graph = nx.freeze(graph)

    @property
    def graph(self) -> _Graph:
        """The underlying frozen graph (edges run dependency -> dependent)."""
        return self._graph

    def __len__(self) -> int:
        return self._graph.number_of_nodes()

    def __contains__(self, package_id: object) -> bool:
        return package_id in self._graph

    def node(self, package_id: PackageId) -> PackageNode:
        return self._graph.nodes[package_id]["package"]

    @property
    def nodes(self) -> tuple[PackageNode, ...]:
        """All nodes, sorted by identity."""
        return tuple(self.node(pid) for pid in sorted(self._graph))

    @property
    def edges(self) -> tuple[DependencyEdge, ...]:
        """All edges as ``(dependent, dependency)`` pairs, sorted."""
        pairs = sorted((dependent, dependency) for dependency, dependent in self._graph.edges)
        return tuple(DependencyEdge(dependent=a, dependency=b) for a, b in pairs)

    def dependencies(self, package_id: PackageId) -> tuple[PackageId, ...]:
        """Direct dependencies of *package_id*."""
        return tuple(sorted(self._graph.predecessors(package_id)))

    def dependents(self, package_id: PackageId) -> tuple[PackageId, ...]:
        """Packages that directly depend on *package_id*."""
        return tuple(sorted(self._graph.successors(package_id)))


def build_graph(records: Iterable[PackageRecord]) -> DependencyGraph:
    """Build a :class:`DependencyGraph` from a flat package listing.

    Duplicate identities collapse into one node: their dependency sets are
    unioned, workspace membership is true if any duplicate is a member, and
    the first known ``source_path`` wins.

    Raises:
        DanglingDependency: A dependency identity has no record in *records*.
    """
    nodes: dict[PackageId, PackageNode] = {}
    requires: dict[PackageId, set[PackageId]] = {}

    for record in records:
        existing = nodes.get(record.id)
        if existing is None:
            nodes[record.id] = PackageNode(
                id=record.id,
                is_workspace_member=record.is_workspace_member,
                source_path=record.source_path,
            )
            requires[record.id] = set()
        else:
            nodes[record.id] = PackageNode(
                id=record.id,
                is_workspace_member=existing.is_workspace_member or record.is_workspace_member,
                source_path=existing.source_path or record.source_path,
            )
        requires[record.id].update(record.dependencies)

    g: _Graph = nx.DiGraph()
    # Add all nodes first so packages without edges are still ordered
    for package_id in sorted(nodes):
        g.add_node(package_id, package=nodes[package_id])

    for dependent in sorted(requires):
        for dependency in sorted(requires[dependent]):
            if dependency not in nodes:
                raise DanglingDependency(dependency, dependent)
            g.add_edge(dependency, dependent)

    logger.debug(
        "Built dependency graph: %d packages, %d edges",
        g.number_of_nodes(),
        g.number_of_edges(),
    )
    return DependencyGraph(g)
