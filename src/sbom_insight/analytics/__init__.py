"""
Dependency Graph Analytics for SBOM documents.

This package derives structural and risk analytics from the dependency
graph declared in a Software Bill of Materials.

Key Features:
- Graph building with type/search/criticality/depth/orphan filters
- Heuristic risk classification and composite criticality scoring
- Clusters, circular dependencies, density, centrality and modularity proxies
- Path-to-root, bounded shortest paths and critical path selection
- Blast-radius (impact) analysis

The facade that runs the whole pipeline, SBOMGraphAnalyzer, lives in
sbom_insight.analytics.analyzer.
"""

from sbom_insight.analytics.graph_builder import (
    GraphBuilder,
    GraphFilters,
)
from sbom_insight.analytics.impact import (
    ImpactAnalyzer,
    ImpactResult,
)
from sbom_insight.analytics.metrics import (
    CriticalityModel,
    MetricsEngine,
)
from sbom_insight.analytics.models import (
    Component,
    ComponentType,
    DependencyEdge,
    Edge,
    Graph,
    GraphMetrics,
    Node,
    NodeNotFoundError,
    RiskLevel,
)
from sbom_insight.analytics.parser import (
    SBOMDocument,
    SBOMParser,
)
from sbom_insight.analytics.paths import PathFinder
from sbom_insight.analytics.risk import (
    HeuristicRiskClassifier,
    RiskClassifier,
)
from sbom_insight.analytics.scores import (
    ComponentScores,
    HashedScoreProvider,
    NeutralScoreProvider,
    ScoreProvider,
    StaticScoreProvider,
)
from sbom_insight.analytics.structure import (
    StructureAnalyzer,
    StructureReport,
)

__all__ = [
    # Models
    "Component",
    "ComponentType",
    "DependencyEdge",
    "Edge",
    "Graph",
    "GraphMetrics",
    "Node",
    "NodeNotFoundError",
    "RiskLevel",
    # Loading
    "SBOMDocument",
    "SBOMParser",
    # Graph Builder
    "GraphBuilder",
    "GraphFilters",
    # Metrics
    "ComponentScores",
    "CriticalityModel",
    "HashedScoreProvider",
    "HeuristicRiskClassifier",
    "MetricsEngine",
    "NeutralScoreProvider",
    "RiskClassifier",
    "ScoreProvider",
    "StaticScoreProvider",
    # Structure
    "StructureAnalyzer",
    "StructureReport",
    # Queries
    "ImpactAnalyzer",
    "ImpactResult",
    "PathFinder",
]
