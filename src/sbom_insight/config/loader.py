"""
YAML Configuration Loader.

Provides utilities for loading, validating, and saving analysis
configurations with Pydantic models for type safety.

Usage:
    from sbom_insight.config import load_analysis_config

    config = load_analysis_config("analysis.yaml")
    print(config.filters.component_type)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, TypeVar

import yaml
from pydantic import ValidationError

from sbom_insight.config.schema import AnalysisConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


class ConfigLoader:
    """
    YAML Configuration Loader with validation.

    Loads and validates configuration files with readable error messages
    and can emit a commented template.
    """

    def __init__(self, config_dir: str | Path | None = None) -> None:
        """
        Initialize the config loader.

        Args:
            config_dir: Directory that relative paths are resolved against
        """
        self.config_dir = Path(config_dir) if config_dir else Path.cwd()

    def load_yaml(self, path: str | Path) -> dict[str, Any]:
        """
        Load raw YAML file.

        Args:
            path: Path to YAML file

        Returns:
            Dictionary with parsed YAML content

        Raises:
            ConfigError: If file not found or YAML parsing fails
        """
        file_path = self._resolve_path(path)

        if not file_path.exists():
            raise ConfigError(
                f"Configuration file not found: {file_path}",
                {"path": str(file_path)},
            )

        try:
            with open(file_path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                f"Failed to parse YAML file: {e}",
                {"path": str(file_path), "error": str(e)},
            ) from e

        if data is None:
            return {}

        if not isinstance(data, dict):
            raise ConfigError(
                f"YAML file must contain a dictionary, got {type(data).__name__}",
                {"path": str(file_path)},
            )

        logger.debug(f"Loaded YAML from {file_path}")
        return data

    def load_analysis(self, path: str | Path) -> AnalysisConfig:
        """
        Load and validate an analysis configuration.

        Raises:
            ConfigError: If loading or validation fails
        """
        data = self.load_yaml(path)
        return self._validate_model(AnalysisConfig, data, path)

    def _resolve_path(self, path: str | Path) -> Path:
        """Resolve path relative to config_dir if not absolute."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.config_dir / p

    def _validate_model(
        self,
        model_class: type[T],
        data: dict[str, Any],
        path: str | Path,
    ) -> T:
        """Validate data against a Pydantic model, flattening error locations."""
        try:
            return model_class.model_validate(data)
        except ValidationError as e:
            errors = []
            for error in e.errors():
                loc = " -> ".join(str(x) for x in error["loc"])
                errors.append(f"  {loc}: {error['msg']}")

            error_text = "\n".join(errors)
            raise ConfigError(
                f"Configuration validation failed for {path}:\n{error_text}",
                {"path": str(path), "errors": e.errors()},
            ) from e

    @staticmethod
    def save_yaml(config: Any, path: str | Path) -> None:
        """
        Save configuration to YAML file.

        Args:
            config: Pydantic model or dictionary to save
            path: Output file path
        """
        file_path = Path(path)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        if hasattr(config, "model_dump"):
            data = config.model_dump(mode="json")
        else:
            data = config

        with open(file_path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        logger.info(f"Saved configuration to {file_path}")

    @staticmethod
    def generate_analysis_template() -> str:
        """Generate analysis configuration template."""
        return """# Analysis Configuration Template
# SBOM Insight - dependency graph analytics

name: "default_analysis"
description: "Dependency graph analysis"
version: "1.0.0"

# Component filters (graph is rebuilt whole for each combination)
filters:
  search: ""
  component_type: "all"      # all, library, framework, application, other
  min_criticality: 0.0
  max_depth: null
  show_orphans: true

# Criticality formula
scoring:
  weights:
    dependency: 0.4
    risk: 0.3
    popularity: 0.2
    trust: 0.1
  dependency_scale: 50
  popularity_scale: 100
  trust_scale: 100
  critical_threshold: 0.7

# Path enumeration bounds
paths:
  max_paths: 3
  max_hops: 5

# Score source: neutral (no external data) or hashed (deterministic placeholder)
score_provider: "neutral"
seed: 0

log_level: "INFO"
"""


# =============================================================================
# Convenience Functions
# =============================================================================


def load_analysis_config(path: str | Path) -> AnalysisConfig:
    """
    Load analysis configuration from YAML file.

    Raises:
        ConfigError: If loading or validation fails
    """
    loader = ConfigLoader()
    return loader.load_analysis(path)


def validate_config(data: dict[str, Any]) -> AnalysisConfig:
    """
    Validate a configuration dictionary.

    Raises:
        ConfigError: If validation fails
    """
    try:
        return AnalysisConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Validation failed: {e}",
            {"errors": e.errors()},
        ) from e
