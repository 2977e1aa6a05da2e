"""
Graph-level structure analysis.

Computes:
- Clusters: connected components of the graph taken as undirected
- Circular dependencies: back edges found by a directed depth-first walk
- Density: |E| / (|V| * (|V| - 1))
- Centrality proxy: mean per-node sum of incident edge weights
- Modularity proxy: sum over clusters of
  internal_fraction - expected_fraction ** 2, clamped to [0, 1], x100

The circular count is the number of back edges, not the number of distinct
simple cycles: a node sitting on two overlapping cycles can contribute one
back edge or two depending on visit order. It is zero exactly when the
graph is acyclic. The centrality and modularity figures are cheap proxies,
not betweenness centrality or Newman modularity.
"""

import logging
from dataclasses import dataclass, replace

import numpy as np

from sbom_insight.analytics.models import Graph, GraphMetrics

logger = logging.getLogger(__name__)

# DFS colours
_WHITE, _ON_STACK, _DONE = 0, 1, 2


@dataclass(frozen=True)
class StructureReport:
    """Result of a structure analysis."""

    graph: Graph
    metrics: GraphMetrics
    clusters: tuple[tuple[str, ...], ...] = ()

    def cluster_sizes(self) -> list[int]:
        return [len(cluster) for cluster in self.clusters]


class StructureAnalyzer:
    """Computes clusters, cycles and graph-level metrics."""

    def analyze(self, graph: Graph) -> StructureReport:
        """Analyze a graph snapshot.

        Args:
            graph: Graph built by GraphBuilder (optionally annotated)

        Returns:
            StructureReport with a new graph carrying cluster ids, circular
            edge flags and metrics
        """
        assignment = self.find_clusters(graph)
        circular = self.find_back_edges(graph)

        cluster_count = max(assignment, default=-1) + 1
        members: list[list[str]] = [[] for _ in range(cluster_count)]
        for node, cluster_id in zip(graph.nodes, assignment):
            members[cluster_id].append(node.id)

        num_nodes = graph.node_count
        num_edges = graph.edge_count

        metrics = GraphMetrics(
            total_nodes=num_nodes,
            total_edges=num_edges,
            avg_dependencies=num_edges / num_nodes if num_nodes else 0.0,
            max_depth=max((node.depth for node in graph.nodes), default=0),
            circular_deps=len(circular),
            cluster_count=cluster_count,
            network_density=self.density(num_nodes, num_edges),
            centrality_score=self.centrality(graph),
            modularity_score=self.modularity(graph, assignment),
        )

        nodes = tuple(
            replace(node, cluster=cluster_id)
            for node, cluster_id in zip(graph.nodes, assignment)
        )
        edges = tuple(
            replace(edge, is_circular=(i in circular)) for i, edge in enumerate(graph.edges)
        )

        logger.info(
            f"Structure: {cluster_count} clusters, {len(circular)} circular dependencies, "
            f"density {metrics.network_density:.4f}"
        )

        return StructureReport(
            graph=Graph(nodes=nodes, edges=edges, metrics=metrics),
            metrics=metrics,
            clusters=tuple(tuple(group) for group in members),
        )

    @staticmethod
    def find_clusters(graph: Graph) -> list[int]:
        """Assign each node a cluster id in discovery order, starting at 0.

        Treats edges as undirected; isolated nodes form singleton clusters.
        """
        assignment = [-1] * graph.node_count
        out_adj = graph.out_adjacency
        in_adj = graph.in_adjacency

        next_id = 0
        for start in range(graph.node_count):
            if assignment[start] != -1:
                continue
            assignment[start] = next_id
            stack = [start]
            while stack:
                current = stack.pop()
                for neighbour in (*out_adj[current], *in_adj[current]):
                    if assignment[neighbour] == -1:
                        assignment[neighbour] = next_id
                        stack.append(neighbour)
            next_id += 1

        return assignment

    @staticmethod
    def find_back_edges(graph: Graph) -> set[int]:
        """Edge indices whose target is on the DFS stack when traversed."""
        out_edges: list[list[tuple[int, int]]] = [[] for _ in range(graph.node_count)]
        for edge_idx, (src, tgt) in enumerate(graph.edge_pairs):
            out_edges[src].append((edge_idx, tgt))

        colour = [_WHITE] * graph.node_count
        back_edges: set[int] = set()

        for start in range(graph.node_count):
            if colour[start] != _WHITE:
                continue
            colour[start] = _ON_STACK
            # Frames of (node, position of the next outgoing edge to follow)
            stack = [(start, 0)]
            while stack:
                current, position = stack[-1]
                if position == len(out_edges[current]):
                    colour[current] = _DONE
                    stack.pop()
                    continue

                stack[-1] = (current, position + 1)
                edge_idx, target = out_edges[current][position]
                if colour[target] == _ON_STACK:
                    back_edges.add(edge_idx)
                elif colour[target] == _WHITE:
                    colour[target] = _ON_STACK
                    stack.append((target, 0))

        return back_edges

    @staticmethod
    def density(num_nodes: int, num_edges: int) -> float:
        if num_nodes <= 1:
            return 0.0
        return num_edges / (num_nodes * (num_nodes - 1))

    @staticmethod
    def centrality(graph: Graph) -> float:
        """Mean over nodes of the summed weights of incident edges."""
        if graph.node_count == 0:
            return 0.0

        incident = np.zeros(graph.node_count, dtype=np.float64)
        if graph.edge_count:
            pairs = np.asarray(graph.edge_pairs, dtype=np.int64)
            weights = np.fromiter((e.weight for e in graph.edges), dtype=np.float64)
            np.add.at(incident, pairs[:, 0], weights)
            np.add.at(incident, pairs[:, 1], weights)

        return float(incident.mean())

    @staticmethod
    def modularity(graph: Graph, assignment: list[int]) -> float:
        """Modularity proxy on a 0-100 scale; 0 for an edgeless graph."""
        num_edges = graph.edge_count
        if num_edges == 0:
            return 0.0

        clusters = np.asarray(assignment, dtype=np.int64)
        sizes = np.bincount(clusters).astype(np.float64)

        pairs = np.asarray(graph.edge_pairs, dtype=np.int64)
        src_cluster = clusters[pairs[:, 0]]
        internal_mask = src_cluster == clusters[pairs[:, 1]]
        internal = np.bincount(src_cluster[internal_mask], minlength=len(sizes)).astype(np.float64)

        internal_fraction = internal / num_edges
        expected_fraction = sizes * (sizes - 1) / (2 * num_edges)
        score = float(np.sum(internal_fraction - expected_fraction**2))

        return min(max(score, 0.0), 1.0) * 100.0
