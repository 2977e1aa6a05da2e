"""Unit tests for clusters, circular dependencies and graph-level metrics."""

import math

import pytest

from sbom_insight.analytics.models import Edge, Graph, GraphMetrics, Node
from sbom_insight.analytics.structure import StructureAnalyzer


@pytest.fixture
def analyzer():
    return StructureAnalyzer()


class TestCircularDependencies:
    """Test back-edge counting."""

    def test_three_node_cycle(self, analyzer, make_graph):
        graph = make_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "A")])
        report = analyzer.analyze(graph)

        assert report.metrics.circular_deps >= 1
        assert report.metrics.is_acyclic is False
        assert any(edge.is_circular for edge in report.graph.edges)

    def test_dag_has_no_circular_edges(self, analyzer, make_graph, diamond_edges):
        report = analyzer.analyze(make_graph(["A", "B", "C", "D"], diamond_edges))

        assert report.metrics.circular_deps == 0
        assert report.metrics.is_acyclic is True
        assert not any(edge.is_circular for edge in report.graph.edges)

    def test_self_loop_is_circular(self, analyzer, make_graph):
        report = analyzer.analyze(make_graph(["A"], [("A", "A")]))

        assert report.metrics.circular_deps == 1
        assert report.graph.edges[0].is_circular is True

    def test_back_edge_marks_closing_edge(self, analyzer, make_graph):
        graph = make_graph(["A", "B", "C"], [("A", "B"), ("B", "C"), ("C", "B")])

        assert StructureAnalyzer.find_back_edges(graph) == {2}

    def test_two_cycles(self, analyzer, make_graph):
        graph = make_graph(
            ["A", "B", "C", "D"],
            [("A", "B"), ("B", "A"), ("C", "D"), ("D", "C")],
        )

        assert analyzer.analyze(graph).metrics.circular_deps == 2

    def test_cross_edge_is_not_circular(self, analyzer, make_graph):
        """An edge into a finished subtree is not a back edge."""
        graph = make_graph(["A", "B", "C"], [("A", "B"), ("A", "C"), ("C", "B")])

        assert StructureAnalyzer.find_back_edges(graph) == set()


class TestClusters:
    """Test undirected connected-component clustering."""

    def test_edgeless_graph(self, analyzer, make_graph):
        """Five nodes with no edges form five singleton clusters."""
        report = analyzer.analyze(make_graph(["A", "B", "C", "D", "E"]))

        assert report.metrics.network_density == 0
        assert report.metrics.cluster_count == 5
        assert report.metrics.avg_dependencies == 0
        assert report.cluster_sizes() == [1, 1, 1, 1, 1]

    def test_direction_is_ignored(self, analyzer, make_graph):
        graph = make_graph(["A", "B", "C"], [("B", "A"), ("B", "C")])
        report = analyzer.analyze(graph)

        assert report.metrics.cluster_count == 1
        assert report.clusters == (("A", "B", "C"),)

    def test_cluster_ids_in_discovery_order(self, analyzer, make_graph):
        graph = make_graph(
            ["X", "A", "B", "Y", "C"],
            [("A", "B"), ("Y", "X")],
        )
        report = analyzer.analyze(graph)

        assert [n.cluster for n in report.graph.nodes] == [0, 1, 1, 0, 2]
        assert report.clusters == (("X", "Y"), ("A", "B"), ("C",))

    def test_clusters_partition_nodes(self, analyzer, make_graph, diamond_edges):
        graph = make_graph(["A", "B", "C", "D", "E", "F"], diamond_edges + [("E", "F")])
        report = analyzer.analyze(graph)

        flattened = [node_id for cluster in report.clusters for node_id in cluster]
        assert sorted(flattened) == sorted(graph.node_ids())
        assert len(flattened) == len(set(flattened))


class TestGraphMetrics:
    """Test density, centrality and modularity proxies."""

    @pytest.mark.parametrize("node_ids", [[], ["only"]])
    def test_degenerate_graphs_are_zero(self, analyzer, make_graph, node_ids):
        metrics = analyzer.analyze(make_graph(node_ids)).metrics

        for value in (
            metrics.network_density,
            metrics.avg_dependencies,
            metrics.centrality_score,
            metrics.modularity_score,
        ):
            assert value == 0
            assert not math.isnan(value)

    def test_empty_graph_metrics(self, analyzer):
        report = analyzer.analyze(Graph())

        assert report.metrics == GraphMetrics()
        assert report.clusters == ()

    def test_density(self, analyzer, make_graph, diamond_edges):
        metrics = analyzer.analyze(make_graph(["A", "B", "C", "D"], diamond_edges)).metrics

        assert metrics.network_density == pytest.approx(4 / 12)
        assert metrics.avg_dependencies == pytest.approx(1.0)
        assert metrics.max_depth == 2
        assert metrics.total_nodes == 4
        assert metrics.total_edges == 4

    def test_centrality_is_mean_incident_weight(self, analyzer):
        nodes = tuple(Node(id=i, name=i) for i in "ABC")
        edges = (Edge("A", "B", weight=2.0), Edge("B", "C", weight=1.0))
        metrics = analyzer.analyze(Graph(nodes=nodes, edges=edges)).metrics

        # A: 2, B: 3, C: 1
        assert metrics.centrality_score == pytest.approx(2.0)

    def test_modularity_of_separate_pairs(self, analyzer, make_graph):
        graph = make_graph(["A", "B", "C", "D"], [("A", "B"), ("C", "D")])

        # Each cluster: 1/2 - (2 * 1 / 4) ** 2 = 0.25
        assert analyzer.analyze(graph).metrics.modularity_score == pytest.approx(50.0)

    def test_modularity_is_clamped(self, analyzer, make_graph, diamond_edges):
        score = analyzer.analyze(make_graph(["A", "B", "C", "D"], diamond_edges)).metrics.modularity_score

        assert 0.0 <= score <= 100.0

    def test_modularity_zero_without_edges(self, analyzer, make_graph):
        assert analyzer.analyze(make_graph(["A", "B"])).metrics.modularity_score == 0.0

    def test_metrics_to_dict(self, analyzer, make_graph):
        data = analyzer.analyze(make_graph(["A", "B"], [("A", "B")])).metrics.to_dict()

        assert set(data) == {
            "totalNodes",
            "totalEdges",
            "avgDependencies",
            "maxDepth",
            "circularDeps",
            "clusterCount",
            "networkDensity",
            "centralityScore",
            "modularityScore",
        }


class TestImmutability:
    """Test that analysis never mutates its input."""

    def test_input_graph_untouched(self, analyzer, make_graph):
        graph = make_graph(["A", "B", "C", "D"], [("A", "B"), ("B", "A"), ("C", "D")])
        before = graph.to_dict()

        report = analyzer.analyze(graph)

        assert graph.to_dict() == before
        assert graph.metrics is None
        assert report.graph.metrics is report.metrics
        assert report.graph is not graph
