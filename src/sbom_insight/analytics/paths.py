"""
Path queries over a graph snapshot.

- path_to_root: follows one parent per step back towards a root
- shortest_paths: bounded breadth-first enumeration between two nodes
- critical_path: the root-originating chain with the highest summed
  criticality
"""

import logging
from collections import deque

from sbom_insight.analytics.models import Graph

logger = logging.getLogger(__name__)


class PathFinder:
    """Answers path queries against one immutable graph."""

    def __init__(self, graph: Graph):
        self.graph = graph
        # First parent of each node in edge order
        self._parent: list[int | None] = [None] * graph.node_count
        for src, tgt in graph.edge_pairs:
            if self._parent[tgt] is None:
                self._parent[tgt] = src

    def path_to_root(self, node_id: str) -> list[str]:
        """Walk parent links from a node back towards a root.

        Each step moves to the source of the first edge (in edge order)
        targeting the current node. This yields *a* path, not necessarily
        the shortest or the only one. The walk stops at a node without
        parents or before revisiting a node, so it takes at most |V| steps.

        Returns:
            Node ids from ``node_id`` up to the last ancestor reached
        """
        current = self.graph.index_of(node_id)
        visited = {current}
        path = [current]

        while True:
            parent = self._parent[current]
            if parent is None or parent in visited:
                break
            visited.add(parent)
            path.append(parent)
            current = parent

        return [self.graph.nodes[i].id for i in path]

    def shortest_paths(
        self,
        from_id: str,
        to_id: str,
        max_paths: int = 3,
        max_hops: int = 5,
    ) -> list[list[str]]:
        """Enumerate up to ``max_paths`` simple paths of at most ``max_hops`` edges.

        Paths follow edge direction and are returned in breadth-first
        discovery order, so shorter paths come first. Extensions that
        cannot reach the goal within the hop budget are never queued.
        """
        start = self.graph.index_of(from_id)
        goal = self.graph.index_of(to_id)
        if max_paths <= 0:
            return []

        remaining = self._hops_to(goal, max_hops)
        if start not in remaining:
            logger.debug(f"{to_id} is not reachable from {from_id} within {max_hops} hops")
            return []

        out_adj = self.graph.out_adjacency
        found: list[tuple[int, ...]] = []
        queue: deque[tuple[int, ...]] = deque([(start,)])

        while queue and len(found) < max_paths:
            path = queue.popleft()
            last = path[-1]
            if last == goal:
                found.append(path)
                continue
            for target in out_adj[last]:
                # len(path) edges after the step, plus the rest to the goal
                if target in remaining and target not in path:
                    if len(path) + remaining[target] <= max_hops:
                        queue.append(path + (target,))

        logger.debug(f"Found {len(found)} paths from {from_id} to {to_id}")
        return [[self.graph.nodes[i].id for i in path] for path in found]

    def _hops_to(self, goal: int, max_hops: int) -> dict[int, int]:
        """Fewest edges from each node to ``goal``, for nodes within ``max_hops``."""
        in_adj = self.graph.in_adjacency
        hops = {goal: 0}
        queue = deque([goal])
        while queue:
            current = queue.popleft()
            if hops[current] == max_hops:
                continue
            for source in in_adj[current]:
                if source not in hops:
                    hops[source] = hops[current] + 1
                    queue.append(source)
        return hops

    def critical_path(self) -> list[str]:
        """Select the root-originating path with the highest total criticality.

        Candidates are the path_to_root chains of every node, read root
        first. Roots are taken in node order and, within a root, candidates
        in node order; a later candidate wins only with a strictly higher
        sum, so ties go to the first-discovered root.
        """
        if self.graph.node_count == 0:
            return []

        by_root: dict[str, list[list[str]]] = {}
        for node in self.graph.nodes:
            chain = self.path_to_root(node.id)
            by_root.setdefault(chain[-1], []).append(chain[::-1])

        roots = [node.id for node in self.graph.nodes if node.depth == 0]
        # Chains can end on a cycle node whose depth is non-zero
        root_set = set(roots)
        roots += [root for root in by_root if root not in root_set]

        best: list[str] = []
        best_score = float("-inf")
        for root in roots:
            for candidate in by_root.get(root, []):
                score = sum(self.graph.node(i).criticality_score for i in candidate)
                if score > best_score:
                    best, best_score = candidate, score

        return best
