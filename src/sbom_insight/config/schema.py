"""
Pydantic Schema for YAML Configuration.

Provides type-safe configuration models for SBOM graph analysis runs with
validation and helpful error messages.

Usage:
    from sbom_insight.config import load_analysis_config

    config = load_analysis_config("analysis.yaml")
    print(config.scoring.weights.dependency)
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from sbom_insight.analytics.graph_builder import GraphFilters
from sbom_insight.analytics.metrics import CriticalityModel
from sbom_insight.analytics.models import ComponentType


# =============================================================================
# Enums
# =============================================================================


class TypeFilter(str, Enum):
    """Component type filter values."""

    ALL = "all"
    LIBRARY = "library"
    FRAMEWORK = "framework"
    APPLICATION = "application"
    OTHER = "other"


class ScoreProviderType(str, Enum):
    """Built-in score providers."""

    NEUTRAL = "neutral"
    HASHED = "hashed"


# =============================================================================
# Filter Configuration
# =============================================================================


class FilterConfig(BaseModel):
    """Graph filter parameters."""

    model_config = ConfigDict(extra="forbid")

    search: str = Field(
        default="",
        description="Case-insensitive match on name, version or description",
    )
    component_type: TypeFilter = Field(
        default=TypeFilter.ALL,
        description="Keep only components of this type",
    )
    min_criticality: float = Field(
        default=0.0,
        description="Minimum criticality score for a component to be kept",
        ge=0.0,
        le=1.0,
    )
    max_depth: int | None = Field(
        default=None,
        description="Drop nodes deeper than this level",
        ge=0,
    )
    show_orphans: bool = Field(
        default=True,
        description="Keep components with no dependency edges",
    )

    def to_filters(self) -> GraphFilters:
        """Convert to the graph builder's filter value."""
        component_type = (
            None if self.component_type == TypeFilter.ALL else ComponentType(self.component_type.value)
        )
        return GraphFilters(
            search=self.search,
            component_type=component_type,
            min_criticality=self.min_criticality,
            max_depth=self.max_depth,
            show_orphans=self.show_orphans,
        )


# =============================================================================
# Scoring Configuration
# =============================================================================


class CriticalityWeights(BaseModel):
    """Weights of the criticality formula; must sum to 1."""

    model_config = ConfigDict(extra="forbid")

    dependency: float = Field(default=0.4, ge=0.0, le=1.0)
    risk: float = Field(default=0.3, ge=0.0, le=1.0)
    popularity: float = Field(default=0.2, ge=0.0, le=1.0)
    trust: float = Field(default=0.1, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def validate_sum(self) -> CriticalityWeights:
        """Ensure the weights sum to 1.0."""
        total = self.dependency + self.risk + self.popularity + self.trust
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"Criticality weights must sum to 1.0, got {total:.4f}")
        return self


class ScoringConfig(BaseModel):
    """Criticality scoring configuration."""

    model_config = ConfigDict(extra="forbid")

    weights: CriticalityWeights = Field(default_factory=CriticalityWeights)
    dependency_scale: float = Field(
        default=50.0,
        description="Dependency count that maps to a normalized value of 1",
        gt=0.0,
    )
    popularity_scale: float = Field(default=100.0, gt=0.0)
    trust_scale: float = Field(default=100.0, gt=0.0)
    critical_threshold: float = Field(
        default=0.7,
        description="Criticality above which an impacted node is reported as critical",
        ge=0.0,
        le=1.0,
    )

    def to_model(self) -> CriticalityModel:
        return CriticalityModel(
            dependency_weight=self.weights.dependency,
            risk_weight=self.weights.risk,
            popularity_weight=self.weights.popularity,
            trust_weight=self.weights.trust,
            dependency_scale=self.dependency_scale,
            popularity_scale=self.popularity_scale,
            trust_scale=self.trust_scale,
        )


# =============================================================================
# Path Configuration
# =============================================================================


class PathConfig(BaseModel):
    """Bounds for path enumeration."""

    model_config = ConfigDict(extra="forbid")

    max_paths: int = Field(default=3, ge=1, le=100)
    max_hops: int = Field(default=5, ge=1, le=50)


# =============================================================================
# Analysis Configuration
# =============================================================================


class AnalysisConfig(BaseModel):
    """Complete analysis configuration."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(
        default="default",
        description="Configuration name for identification",
        min_length=1,
        max_length=100,
    )
    description: str | None = Field(default=None)
    version: str = Field(
        default="1.0.0",
        description="Configuration schema version",
        pattern=r"^\d+\.\d+\.\d+$",
    )

    filters: FilterConfig = Field(default_factory=FilterConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    paths: PathConfig = Field(default_factory=PathConfig)

    score_provider: ScoreProviderType = Field(
        default=ScoreProviderType.NEUTRAL,
        description="Source of popularity/trust/vulnerability scores",
    )
    seed: int = Field(
        default=0,
        description="Seed for the hashed score provider",
        ge=0,
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
