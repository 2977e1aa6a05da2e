"""
Graph Builder for SBOM Dependency Analysis.

Converts parsed SBOM components and dependency entries into an immutable
Graph snapshot:
- Component filtering (type, search term, criticality, depth, orphans)
- Dangling edge removal
- Out/in degree tallies
- Topological depth from root nodes
"""

import logging
from collections import deque
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

import numpy as np

from sbom_insight.analytics.models import (
    Component,
    ComponentType,
    DependencyEdge,
    Edge,
    Graph,
    Node,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphFilters:
    """Filter parameters applied when building a graph.

    Attributes:
        search: Case-insensitive substring matched against name, version
            and description. Empty matches everything.
        component_type: Keep only this type; None keeps all types.
        min_criticality: Keep components whose criticality (from a previous
            build) is at least this value. Ignored without a lookup. The
            analyzer re-applies it until the kept nodes' final scores all
            meet the threshold.
        max_depth: Drop nodes deeper than this level.
        show_orphans: Keep nodes with no incoming or outgoing edges.
    """

    search: str = ""
    component_type: ComponentType | None = None
    min_criticality: float = 0.0
    max_depth: int | None = None
    show_orphans: bool = True


class GraphBuilder:
    """Builds Graph snapshots from SBOM components and dependency entries."""

    def build(
        self,
        components: Sequence[Component],
        dependencies: Iterable[DependencyEdge] | None = None,
        filters: GraphFilters | None = None,
        criticality: Mapping[str, float] | None = None,
    ) -> Graph:
        """Build a graph snapshot.

        Args:
            components: Components from the loaded document
            dependencies: Declared dependency entries; None means no edges
            filters: Filter parameters (defaults keep everything)
            criticality: Criticality lookup used by ``min_criticality``

        Returns:
            Graph with degree counts, depth and orphan flags populated
        """
        filters = filters or GraphFilters()
        dependencies = list(dependencies or [])

        kept = [c for c in components if self._matches(c, filters, criticality)]
        logger.debug(f"Component filter kept {len(kept)} of {len(components)} components")

        nodes, edges = self._assemble(kept, dependencies)

        if filters.max_depth is not None:
            shallow = {node.id for node in nodes if node.depth <= filters.max_depth}
            if len(shallow) < len(nodes):
                kept = [c for c in kept if c.id in shallow]
                nodes, edges = self._assemble(kept, dependencies)

        if not filters.show_orphans:
            nodes = [node for node in nodes if not node.is_orphan]

        logger.info(f"Built graph: {len(nodes)} nodes, {len(edges)} edges")
        return Graph(nodes=tuple(nodes), edges=tuple(edges))

    @staticmethod
    def _matches(
        component: Component,
        filters: GraphFilters,
        criticality: Mapping[str, float] | None,
    ) -> bool:
        if filters.component_type is not None and component.type != filters.component_type:
            return False

        if filters.search:
            term = filters.search.lower()
            haystacks = (component.name, component.version or "", component.description)
            if not any(term in text.lower() for text in haystacks):
                return False

        if filters.min_criticality > 0 and criticality is not None:
            if criticality.get(component.id, 0.0) < filters.min_criticality:
                return False

        return True

    def _assemble(
        self,
        components: Sequence[Component],
        dependencies: Sequence[DependencyEdge],
    ) -> tuple[list[Node], list[Edge]]:
        """Index components, resolve edges and compute per-node structure."""
        index: dict[str, int] = {}
        unique: list[Component] = []
        for component in components:
            if component.id in index:
                continue
            index[component.id] = len(unique)
            unique.append(component)

        pairs: list[tuple[int, int]] = []
        seen_pairs: set[tuple[int, int]] = set()
        dropped = 0
        for entry in dependencies:
            src = index.get(entry.ref)
            for target in entry.depends_on:
                tgt = index.get(target)
                if src is None or tgt is None:
                    dropped += 1
                    continue
                if (src, tgt) in seen_pairs:
                    continue
                seen_pairs.add((src, tgt))
                pairs.append((src, tgt))

        if dropped:
            logger.debug(f"Dropped {dropped} dependency edges with endpoints outside the graph")

        num_nodes = len(index)
        sources = np.fromiter((s for s, _ in pairs), dtype=np.int64, count=len(pairs))
        targets = np.fromiter((t for _, t in pairs), dtype=np.int64, count=len(pairs))
        out_degree = np.bincount(sources, minlength=num_nodes)
        in_degree = np.bincount(targets, minlength=num_nodes)

        depths = self._compute_depths(num_nodes, pairs, in_degree)

        ids = list(index)
        nodes = []
        for i, component in enumerate(unique):
            nodes.append(
                Node(
                    id=component.id,
                    name=component.name,
                    version=component.version,
                    type=component.type,
                    dependency_count=int(out_degree[i]),
                    dependent_count=int(in_degree[i]),
                    depth=depths[i],
                    is_orphan=bool(out_degree[i] == 0 and in_degree[i] == 0),
                )
            )

        edges = [Edge(source=ids[s], target=ids[t]) for s, t in pairs]
        return nodes, edges

    @staticmethod
    def _compute_depths(
        num_nodes: int,
        pairs: Sequence[tuple[int, int]],
        in_degree: np.ndarray,
    ) -> list[int]:
        """Compute topological depth from root nodes.

        Roots (in-degree 0) sit at depth 0. Nodes are settled in topological
        order so that acyclic parts get their longest-path level. Nodes on or
        behind a cycle never reach in-degree 0; they are then reached by a
        single visited-guarded walk from the settled nodes. A node reachable
        only through a cycle with no root ancestor keeps depth 0.
        """
        out_adj: list[list[int]] = [[] for _ in range(num_nodes)]
        for src, tgt in pairs:
            out_adj[src].append(tgt)

        depth = [0] * num_nodes
        remaining = [int(d) for d in in_degree]
        settled = [False] * num_nodes

        queue = deque(i for i in range(num_nodes) if remaining[i] == 0)
        order = []
        while queue:
            current = queue.popleft()
            settled[current] = True
            order.append(current)
            for target in out_adj[current]:
                depth[target] = max(depth[target], depth[current] + 1)
                remaining[target] -= 1
                if remaining[target] == 0:
                    queue.append(target)

        if len(order) == num_nodes:
            return depth

        visited = settled[:]
        walk = deque(order)
        while walk:
            current = walk.popleft()
            for target in out_adj[current]:
                if visited[target]:
                    continue
                visited[target] = True
                depth[target] = max(depth[target], depth[current] + 1)
                walk.append(target)

        return depth
