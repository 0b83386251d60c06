"""OrderService — leaf-first ordering of a package listing.

Pipeline: metadata source -> :func:`build_graph` -> :func:`topological_order`
-> :func:`filter_scope`. Every step is pure except the source itself.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

import networkx as nx

from deps_order.domain.errors import CycleDetected, DepsOrderError
from deps_order.domain.packages import PackageId, PackageNode
from deps_order.infrastructure.graph.engine import DependencyGraph, build_graph
from deps_order.infrastructure.metadata import MetadataSource
from deps_order.services._helpers import error_result
from deps_order.services.result import ServiceResult

logger = logging.getLogger(__name__)


def topological_order(graph: DependencyGraph) -> tuple[PackageNode, ...]:
    """Linearize *graph* so every dependency precedes its dependents.

    Kahn's algorithm in generations: each round emits every package whose
    dependencies have all been emitted, sorted by ``(name, version)``.

    Raises:
        CycleDetected: Some packages can never become available. The error
            names the members of one concrete cycle.
    """
    g = graph.graph
    emitted: list[PackageId] = []
    try:
        for generation in nx.topological_generations(g):
            emitted.extend(sorted(generation))
    except nx.NetworkXUnfeasible as exc:
        raise CycleDetected(_find_cycle(g, emitted)) from exc
    return tuple(graph.node(pid) for pid in emitted)


def _find_cycle(g: nx.DiGraph, emitted: Iterable[PackageId]) -> list[PackageId]:
    """Return the sorted members of one cycle among the unemitted packages.

    Every unemitted package has an unemitted dependency, so walking
    dependencies backwards from any of them must close a loop.
    """
    remaining = set(g) - set(emitted)
    reverse = g.subgraph(remaining).reverse(copy=False)
    edges = nx.find_cycle(reverse, source=min(remaining))
    return sorted({u for u, _v, *_ in edges})


def filter_scope(
    ordering: Sequence[PackageNode],
    *,
    workspace_only: bool = False,
) -> tuple[PackageNode, ...]:
    """Keep only workspace members when *workspace_only*, preserving order."""
    if not workspace_only:
        return tuple(ordering)
    return tuple(node for node in ordering if node.is_workspace_member)


class OrderService:
    """Builds the dependency graph and computes the leaf-first ordering."""

    def __init__(self, source: MetadataSource) -> None:
        self._source = source

    def plan(self, *, workspace_only: bool = False) -> tuple[PackageNode, ...]:
        """Return the (optionally filtered) ordering.

        Raises:
            MetadataError: The listing could not be loaded.
            DanglingDependency: The listing references an unknown package.
            CycleDetected: The dependency graph has a cycle.
        """
        graph = build_graph(self._source())
        ordering = topological_order(graph)
        scoped = filter_scope(ordering, workspace_only=workspace_only)
        logger.debug(
            "Ordered %d packages (%d in scope, workspace_only=%s)",
            len(ordering),
            len(scoped),
            workspace_only,
        )
        return scoped

    def order(self, *, workspace_only: bool = False) -> ServiceResult:
        """Compute the ordering as a ServiceResult for display."""
        try:
            nodes = self.plan(workspace_only=workspace_only)
        except DepsOrderError as exc:
            return error_result("order", exc)

        warnings: list[str] = []
        if workspace_only and not nodes:
            warnings.append("No workspace members found; nothing to list")

        return ServiceResult(
            ok=True,
            op="order",
            data={
                "count": len(nodes),
                "workspace_only": workspace_only,
                "items": [node.to_dict() for node in nodes],
            },
            warnings=warnings,
        )
