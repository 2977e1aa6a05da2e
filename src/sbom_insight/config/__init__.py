"""
YAML Configuration System for SBOM Insight.

This package provides Pydantic-based YAML configuration for:
- Graph filters (type, search, criticality, depth, orphans)
- Criticality weights and normalization scales
- Path enumeration bounds
- Score provider selection
"""

from sbom_insight.config.loader import (
    ConfigError,
    ConfigLoader,
    load_analysis_config,
    validate_config,
)
from sbom_insight.config.schema import (
    AnalysisConfig,
    CriticalityWeights,
    FilterConfig,
    PathConfig,
    ScoreProviderType,
    ScoringConfig,
    TypeFilter,
)

__all__ = [
    # Schema - Enums
    "ScoreProviderType",
    "TypeFilter",
    # Schema - Models
    "AnalysisConfig",
    "CriticalityWeights",
    "FilterConfig",
    "PathConfig",
    "ScoringConfig",
    # Loader
    "ConfigError",
    "ConfigLoader",
    "load_analysis_config",
    "validate_config",
]
