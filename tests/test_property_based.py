"""
Property-Based Tests using Hypothesis.

These tests generate random dependency graphs, cyclic and acyclic, and
check the structural invariants the analytics promise for every graph.

References:
- Hypothesis documentation: https://hypothesis.readthedocs.io/
"""

import math
from collections import deque

from hypothesis import given, settings, strategies as st

from conftest import components_for, dependencies_for
from sbom_insight.analytics.graph_builder import GraphBuilder
from sbom_insight.analytics.impact import ImpactAnalyzer
from sbom_insight.analytics.metrics import MetricsEngine
from sbom_insight.analytics.paths import PathFinder
from sbom_insight.analytics.scores import HashedScoreProvider
from sbom_insight.analytics.structure import StructureAnalyzer


# =============================================================================
# Custom Strategies
# =============================================================================


@st.composite
def dependency_graphs(draw, max_nodes=25, acyclic=None):
    """Generate (node ids, edge pairs) with optional dangling references."""
    num_nodes = draw(st.integers(min_value=0, max_value=max_nodes))
    node_ids = [f"n{i}" for i in range(num_nodes)]

    if acyclic is True and num_nodes > 1:
        pair = st.tuples(
            st.integers(min_value=0, max_value=num_nodes - 2),
            st.integers(min_value=1, max_value=num_nodes - 1),
        ).filter(lambda p: p[0] < p[1])
        raw = draw(st.lists(pair, max_size=num_nodes * 3))
        edges = [(node_ids[s], node_ids[t]) for s, t in raw]
    elif num_nodes > 0:
        endpoint = st.sampled_from(node_ids + ["ghost"])
        edges = draw(st.lists(st.tuples(endpoint, endpoint), max_size=num_nodes * 3))
    else:
        edges = []

    return node_ids, edges


def build(node_ids, edges):
    return GraphBuilder().build(components_for(node_ids), dependencies_for(edges))


def is_acyclic(graph):
    """Independent Kahn check."""
    remaining = [len(incoming) for incoming in graph.in_adjacency]
    queue = deque(i for i, count in enumerate(remaining) if count == 0)
    visited = 0
    while queue:
        current = queue.popleft()
        visited += 1
        for target in graph.out_adjacency[current]:
            remaining[target] -= 1
            if remaining[target] == 0:
                queue.append(target)
    return visited == graph.node_count


# =============================================================================
# Graph Builder Properties
# =============================================================================


class TestGraphBuilderProperties:
    """Property-based tests for graph construction."""

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_out_degrees_sum_to_edge_count(self, data):
        """Property: sum of dependency counts equals the number of edges."""
        graph = build(*data)

        assert sum(n.dependency_count for n in graph.nodes) == graph.edge_count
        assert sum(n.dependent_count for n in graph.nodes) == graph.edge_count

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_edges_reference_existing_nodes(self, data):
        """Property: no dangling edge survives construction."""
        graph = build(*data)
        ids = set(graph.node_ids())

        for edge in graph.edges:
            assert edge.source in ids
            assert edge.target in ids

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_depth_is_bounded(self, data):
        """Property: depth is non-negative and below the node count."""
        graph = build(*data)

        for node in graph.nodes:
            assert 0 <= node.depth < max(graph.node_count, 1)

    @given(dependency_graphs(acyclic=True))
    @settings(max_examples=100, deadline=5000)
    def test_depth_increases_along_acyclic_edges(self, data):
        """Property: in a DAG every edge goes to a strictly deeper node."""
        graph = build(*data)

        for edge in graph.edges:
            assert graph.node(edge.target).depth > graph.node(edge.source).depth


# =============================================================================
# Structure Properties
# =============================================================================


class TestStructureProperties:
    """Property-based tests for structure analysis."""

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_clusters_partition_nodes(self, data):
        """Property: every node belongs to exactly one cluster."""
        graph = build(*data)
        report = StructureAnalyzer().analyze(graph)

        flattened = [node_id for cluster in report.clusters for node_id in cluster]
        assert sorted(flattened) == sorted(graph.node_ids())
        assert len(flattened) == len(set(flattened))
        assert report.metrics.cluster_count == len(report.clusters)

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_circular_count_zero_iff_acyclic(self, data):
        """Property: circularDeps is zero exactly for DAGs."""
        graph = build(*data)
        metrics = StructureAnalyzer().analyze(graph).metrics

        assert (metrics.circular_deps == 0) == is_acyclic(graph)

    @given(dependency_graphs(acyclic=True))
    @settings(max_examples=50, deadline=5000)
    def test_generated_dags_have_no_circular_edges(self, data):
        """Property: forward-only edges never produce back edges."""
        graph = build(*data)

        assert StructureAnalyzer().analyze(graph).metrics.circular_deps == 0

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_ratio_metrics_are_finite(self, data):
        """Property: density, centrality and modularity are finite and bounded."""
        graph = build(*data)
        metrics = StructureAnalyzer().analyze(graph).metrics

        for value in (metrics.network_density, metrics.centrality_score, metrics.modularity_score):
            assert math.isfinite(value)
            assert value >= 0.0
        assert metrics.modularity_score <= 100.0


# =============================================================================
# Query Properties
# =============================================================================


class TestQueryProperties:
    """Property-based tests for path and impact queries."""

    @given(dependency_graphs(), st.data())
    @settings(max_examples=100, deadline=5000)
    def test_impact_contains_node(self, data, draw):
        """Property: a node is always in its own impact set."""
        graph = build(*data)
        if graph.node_count == 0:
            return
        node_id = draw.draw(st.sampled_from(graph.node_ids()))

        result = ImpactAnalyzer(graph).impact(node_id)

        assert node_id in result.affected
        assert 0.0 < result.impact_score <= 1.0
        assert len(set(result.affected)) == len(result.affected)

    @given(dependency_graphs(), st.data())
    @settings(max_examples=100, deadline=5000)
    def test_impact_monotone_in_edges(self, data, draw):
        """Property: adding edges never shrinks an impact set."""
        node_ids, edges = data
        if not node_ids:
            return
        extra = draw.draw(
            st.lists(st.tuples(st.sampled_from(node_ids), st.sampled_from(node_ids)), max_size=10)
        )
        node_id = draw.draw(st.sampled_from(node_ids))

        before = ImpactAnalyzer(build(node_ids, edges)).impact(node_id)
        after = ImpactAnalyzer(build(node_ids, edges + extra)).impact(node_id)

        assert set(before.affected) <= set(after.affected)

    @given(dependency_graphs())
    @settings(max_examples=100, deadline=5000)
    def test_path_to_root_terminates(self, data):
        """Property: the parent walk visits each node at most once."""
        graph = build(*data)
        finder = PathFinder(graph)

        for node_id in graph.node_ids():
            path = finder.path_to_root(node_id)
            assert path[0] == node_id
            assert len(path) <= graph.node_count
            assert len(set(path)) == len(path)

    @given(dependency_graphs(), st.integers(min_value=1, max_value=4), st.integers(min_value=1, max_value=6))
    @settings(max_examples=50, deadline=5000)
    def test_shortest_paths_respect_bounds(self, data, max_paths, max_hops):
        """Property: enumerated paths are simple, bounded and follow edges."""
        graph = build(*data)
        if graph.node_count < 2:
            return
        ids = graph.node_ids()
        edge_set = {(e.source, e.target) for e in graph.edges}

        paths = PathFinder(graph).shortest_paths(ids[0], ids[-1], max_paths, max_hops)

        assert len(paths) <= max_paths
        for path in paths:
            assert path[0] == ids[0] and path[-1] == ids[-1]
            assert len(path) <= max_hops + 1
            assert len(set(path)) == len(path)
            assert all((a, b) in edge_set for a, b in zip(path, path[1:]))
        assert [len(p) for p in paths] == sorted(len(p) for p in paths)


# =============================================================================
# Metrics Properties
# =============================================================================


class TestMetricsProperties:
    """Property-based tests for criticality scoring."""

    @given(dependency_graphs(max_nodes=60), st.integers(min_value=0, max_value=1000))
    @settings(max_examples=50, deadline=5000)
    def test_criticality_in_unit_interval(self, data, seed):
        """Property: every criticality score lies in [0, 1]."""
        graph = MetricsEngine(score_provider=HashedScoreProvider(seed=seed)).annotate(build(*data))

        for node in graph.nodes:
            assert 0.0 <= node.criticality_score <= 1.0

    @given(dependency_graphs())
    @settings(max_examples=50, deadline=5000)
    def test_critical_path_is_a_parent_chain(self, data):
        """Property: consecutive critical path nodes are joined by edges."""
        graph = MetricsEngine().annotate(build(*data))
        edge_set = {(e.source, e.target) for e in graph.edges}

        path = PathFinder(graph).critical_path()

        if graph.node_count:
            assert path
        assert all((a, b) in edge_set for a, b in zip(path, path[1:]))
