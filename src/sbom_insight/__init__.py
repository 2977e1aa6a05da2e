"""
SBOM Insight - Dependency Graph Analytics for Software Bills of Materials

This package derives structural and risk analytics from CycloneDX SBOMs:
- Per-component fan-in/out, depth, risk class and criticality
- Graph-level density, clustering, circularity, centrality and modularity
- Path, critical-path and blast-radius queries
"""

__version__ = "0.4.0"

from sbom_insight.analytics.analyzer import AnalysisReport, SBOMGraphAnalyzer

__all__ = ["SBOMGraphAnalyzer", "AnalysisReport"]
