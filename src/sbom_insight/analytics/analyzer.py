"""
SBOM Graph Analyzer - main entry point for dependency graph analytics.

Runs the full pipeline for one document and one set of filter parameters:
- SBOM loading
- Graph building and filtering
- Risk and criticality annotation
- Structure metrics (clusters, cycles, density, centrality, modularity)
- Critical path selection
- Inventory summaries

Queries (impact, paths) run on demand against the resulting snapshot.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from sbom_insight.analytics.graph_builder import GraphBuilder, GraphFilters
from sbom_insight.analytics.impact import ImpactAnalyzer, ImpactResult
from sbom_insight.analytics.inventory import InventorySummary, summarize_inventory
from sbom_insight.analytics.metrics import MetricsEngine
from sbom_insight.analytics.models import Graph, GraphMetrics, RiskLevel
from sbom_insight.analytics.parser import SBOMDocument, SBOMParser
from sbom_insight.analytics.paths import PathFinder
from sbom_insight.analytics.risk import RiskClassifier
from sbom_insight.analytics.scores import HashedScoreProvider, NeutralScoreProvider, ScoreProvider
from sbom_insight.analytics.structure import StructureAnalyzer
from sbom_insight.config.schema import AnalysisConfig, ScoreProviderType

logger = logging.getLogger(__name__)


@dataclass
class AnalysisReport:
    """Complete analysis of one SBOM under one filter combination."""

    # Source info
    sbom_file: str = ""
    sbom_format: str = ""
    generated_at: str = ""

    # Snapshot with metrics attached
    graph: Graph = field(default_factory=Graph)

    # Query results computed eagerly
    critical_path: list[str] = field(default_factory=list)
    clusters: list[list[str]] = field(default_factory=list)

    # Document-level views
    inventory: InventorySummary | None = None

    @property
    def metrics(self) -> GraphMetrics:
        return self.graph.metrics or GraphMetrics()

    @property
    def vulnerable_nodes(self) -> int:
        return sum(1 for node in self.graph.nodes if node.risk_level != RiskLevel.NONE)

    def top_critical(self, limit: int = 10) -> list:
        """Nodes sorted by criticality, highest first."""
        return sorted(self.graph.nodes, key=lambda n: n.criticality_score, reverse=True)[:limit]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        result = {
            "sbomFile": self.sbom_file,
            "sbomFormat": self.sbom_format,
            "generatedAt": self.generated_at,
            "metrics": self.metrics.to_dict(),
            "vulnerableNodes": self.vulnerable_nodes,
            "nodes": [node.to_dict() for node in self.graph.nodes],
            "edges": [edge.to_dict() for edge in self.graph.edges],
            "clusters": self.clusters,
            "criticalPath": self.critical_path,
        }

        if self.inventory:
            result["inventory"] = self.inventory.to_dict()

        return result

    def to_json(self, indent: int = 2) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, default=str)


def create_score_provider(config: AnalysisConfig) -> ScoreProvider:
    """Instantiate the score provider selected in the configuration."""
    if config.score_provider == ScoreProviderType.HASHED:
        return HashedScoreProvider(seed=config.seed)
    return NeutralScoreProvider()


class SBOMGraphAnalyzer:
    """Main analyzer for SBOM dependency graphs."""

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        score_provider: ScoreProvider | None = None,
        risk_classifier: RiskClassifier | None = None,
    ):
        """Initialize analyzer.

        Args:
            config: Analysis configuration (defaults apply when omitted)
            score_provider: Overrides the provider named in the configuration
            risk_classifier: Overrides the heuristic risk classifier
        """
        self.config = config or AnalysisConfig()
        self.parser = SBOMParser()
        self.graph_builder = GraphBuilder()
        self.metrics_engine = MetricsEngine(
            score_provider=score_provider or create_score_provider(self.config),
            classifier=risk_classifier,
            model=self.config.scoring.to_model(),
        )
        self.structure_analyzer = StructureAnalyzer()

    def analyze(self, sbom_path: str | Path, filters: GraphFilters | None = None) -> AnalysisReport:
        """Perform complete analysis of an SBOM file.

        Args:
            sbom_path: Path to a CycloneDX JSON file
            filters: Filter parameters; defaults to the configured filters

        Returns:
            Complete analysis report
        """
        path = Path(sbom_path)
        document = self.parser.parse(path)
        report = self.analyze_document(document, filters)
        report.sbom_file = str(path)
        return report

    def analyze_json(self, sbom_content: str, filters: GraphFilters | None = None) -> AnalysisReport:
        """Analyze SBOM from a JSON string."""
        document = self.parser.parse_json(sbom_content)
        report = self.analyze_document(document, filters)
        report.sbom_file = "<inline>"
        return report

    def analyze_document(
        self, document: SBOMDocument, filters: GraphFilters | None = None
    ) -> AnalysisReport:
        """Analyze an already-parsed document."""
        filters = filters or self.config.filters.to_filters()

        graph, clusters = self._build(document, filters)

        logger.info("Selecting critical path")
        critical_path = PathFinder(graph).critical_path()

        return AnalysisReport(
            sbom_format=document.metadata.get("format", "unknown"),
            generated_at=datetime.now(timezone.utc).isoformat(),
            graph=graph,
            critical_path=critical_path,
            clusters=clusters,
            inventory=summarize_inventory(document.components, document.dependencies),
        )

    def build_graph(self, document: SBOMDocument, filters: GraphFilters | None = None) -> Graph:
        """Build, annotate and analyze a graph snapshot for a document."""
        graph, _ = self._build(document, filters or self.config.filters.to_filters())
        return graph

    def _build(self, document: SBOMDocument, filters: GraphFilters) -> tuple[Graph, list[list[str]]]:
        criticality = None
        if filters.min_criticality > 0:
            # Criticality is only known after annotation, so threshold on an
            # unthresholded build of the same document
            baseline = self.graph_builder.build(
                document.components,
                document.dependencies,
                GraphFilters(search=filters.search, component_type=filters.component_type),
            )
            annotated = self.metrics_engine.annotate(baseline)
            criticality = {node.id: node.criticality_score for node in annotated.nodes}

        graph = self.graph_builder.build(
            document.components, document.dependencies, filters, criticality
        )
        graph = self.metrics_engine.annotate(graph)

        # Dropping components lowers their dependents' fan-out, so repeat
        # until every kept node clears the threshold on its final score
        while criticality is not None:
            below = [n for n in graph.nodes if n.criticality_score < filters.min_criticality]
            if not below:
                break
            logger.debug(f"{len(below)} nodes fell below the criticality threshold, rebuilding")
            for node in below:
                criticality[node.id] = node.criticality_score
            graph = self.graph_builder.build(
                document.components, document.dependencies, filters, criticality
            )
            graph = self.metrics_engine.annotate(graph)

        structure = self.structure_analyzer.analyze(graph)
        return structure.graph, [list(cluster) for cluster in structure.clusters]

    # -------------------------------------------------------------------------
    # On-demand queries
    # -------------------------------------------------------------------------

    def impact(self, graph: Graph, node_id: str) -> ImpactResult:
        """Blast radius of a node in a snapshot."""
        return ImpactAnalyzer(graph, self.config.scoring.critical_threshold).impact(node_id)

    def shortest_paths(self, graph: Graph, from_id: str, to_id: str) -> list[list[str]]:
        """Bounded path enumeration using the configured limits."""
        return PathFinder(graph).shortest_paths(
            from_id,
            to_id,
            max_paths=self.config.paths.max_paths,
            max_hops=self.config.paths.max_hops,
        )

    def path_to_root(self, graph: Graph, node_id: str) -> list[str]:
        return PathFinder(graph).path_to_root(node_id)
