"""Shared pytest fixtures for sbom-insight tests."""

import json
import logging
import sys
import tempfile
from pathlib import Path

import pytest

# Add src directory to path for imports without installation
_src_path = str(Path(__file__).parent.parent / "src")
if _src_path not in sys.path:
    sys.path.insert(0, _src_path)

from sbom_insight.analytics.graph_builder import GraphBuilder  # noqa: E402
from sbom_insight.analytics.models import Component, ComponentType, DependencyEdge  # noqa: E402
from sbom_insight.analytics.parser import create_sample_sbom  # noqa: E402


def components_for(node_ids, component_type=ComponentType.LIBRARY, version="3.0.0"):
    """Plain components named after their ids."""
    return [Component(id=i, name=i, version=version, type=component_type) for i in node_ids]


def dependencies_for(edges):
    """Group (source, target) pairs into dependency entries, keeping edge order."""
    grouped: dict[str, list[str]] = {}
    for source, target in edges:
        grouped.setdefault(source, []).append(target)
    return [DependencyEdge(ref=ref, depends_on=tuple(targets)) for ref, targets in grouped.items()]


@pytest.fixture(autouse=True)
def _restore_package_log_level():
    """Undo logger level changes the CLI makes so tests stay independent."""
    package_logger = logging.getLogger("sbom_insight")
    level = package_logger.level
    yield
    package_logger.setLevel(level)


@pytest.fixture
def make_graph():
    """Factory building a graph from node ids and (source, target) pairs."""

    def _make(node_ids, edges=(), **component_kwargs):
        return GraphBuilder().build(
            components_for(node_ids, **component_kwargs),
            dependencies_for(edges),
        )

    return _make


@pytest.fixture
def diamond_edges():
    """A -> B, A -> C, B -> D, C -> D."""
    return [("A", "B"), ("A", "C"), ("B", "D"), ("C", "D")]


@pytest.fixture
def sample_sbom_json():
    """Sample CycloneDX SBOM as a JSON string."""
    return create_sample_sbom()


@pytest.fixture
def sample_sbom_cyclonedx(sample_sbom_json):
    """Sample CycloneDX SBOM as a dictionary."""
    return json.loads(sample_sbom_json)


@pytest.fixture
def temp_sbom_file(sample_sbom_cyclonedx):
    """Create a temporary SBOM file for testing."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".json", delete=False) as f:
        json.dump(sample_sbom_cyclonedx, f)
        temp_path = f.name
    yield temp_path
    Path(temp_path).unlink(missing_ok=True)


# Component ids of the sample SBOM
SERVICE = "pkg:npm/inventory-service@3.2.0"
EXPRESS = "pkg:npm/express@4.17.1"
LODASH = "pkg:npm/lodash@4.17.20"
AXIOS = "pkg:npm/axios@0.21.0"
BODY_PARSER = "pkg:npm/body-parser@2.0.0-beta.1"
LOG4J = "pkg:maven/org.apache.logging.log4j/log4j-core@2.14.0"
LEFT_PAD = "pkg:npm/left-pad@1.3.0"
