"""
SBOM Insight - Command Line Interface.

Provides a rich CLI for analyzing SBOM dependency graphs, querying
impact and paths, and managing analysis configurations.

Usage:
    sbom-insight analyze bom.json
    sbom-insight validate analysis.yaml
    sbom-insight generate --output analysis.yaml
"""

from sbom_insight.cli.main import app, main

__all__ = ["app", "main"]
