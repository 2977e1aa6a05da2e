"""Unit tests for inventory summaries."""

import pytest

from conftest import BODY_PARSER, LEFT_PAD, LODASH
from sbom_insight.analytics.inventory import (
    SecurityPosture,
    is_outdated,
    license_category,
    summarize_inventory,
)
from sbom_insight.analytics.models import Component, DependencyEdge
from sbom_insight.analytics.parser import SBOMParser


@pytest.fixture
def sample_summary(sample_sbom_json):
    document = SBOMParser().parse_json(sample_sbom_json)
    return summarize_inventory(document.components, document.dependencies)


class TestLicenseCategory:
    @pytest.mark.parametrize(
        "name,category",
        [
            ("GPL-3.0", "copyleft"),
            ("LGPL-2.1-only", "copyleft"),
            ("AGPL-3.0", "copyleft"),
            ("MIT", "permissive"),
            ("Apache-2.0", "permissive"),
            ("BSD-3-Clause", "permissive"),
            ("WTFPL", "review"),
            ("Proprietary", "review"),
        ],
    )
    def test_categories(self, name, category):
        assert license_category(name) == category


class TestOutdated:
    @pytest.mark.parametrize(
        "version,expected",
        [
            ("0.21.0", True),
            ("1.3.0", True),
            ("2.0.0", False),
            ("10.1", False),
            ("1", False),
            ("latest", False),
            (None, False),
        ],
    )
    def test_is_outdated(self, version, expected):
        assert is_outdated(version) is expected


class TestSecurityPosture:
    def test_empty_inventory_scores_zero(self):
        assert SecurityPosture().score == 0

    def test_perfect_inventory(self):
        posture = SecurityPosture(total=4, with_hashes=4, licensed=4, outdated=0)

        assert posture.score == 100
        assert posture.without_hashes == 0
        assert posture.unlicensed == 0

    def test_weighting(self):
        # Hashes are worth 30, licenses 40, current versions 30
        posture = SecurityPosture(total=2, with_hashes=0, licensed=2, outdated=2)

        assert posture.score == 40


class TestSummarizeInventory:
    """Test inventory views over the sample document."""

    def test_posture(self, sample_summary):
        posture = sample_summary.posture

        assert posture.total == 7
        assert posture.with_hashes == 1
        assert posture.licensed == 6
        assert posture.outdated == 2
        assert posture.score == 60

    def test_licenses(self, sample_summary):
        names = [(entry.name, entry.count) for entry in sample_summary.licenses]

        assert names[0] == ("MIT", 3)
        assert ("Apache-2.0", 2) in names
        assert ("WTFPL", 1) in names
        assert sample_summary.unlicensed == [BODY_PARSER]

    def test_type_counts(self, sample_summary):
        assert sample_summary.type_counts == {
            "library": 5,
            "framework": 1,
            "application": 1,
            "other": 0,
        }

    def test_dependency_overview(self, sample_summary):
        assert sample_summary.declared_dependencies == 3
        assert sample_summary.connected_components == 6
        assert sample_summary.isolated_components == 1
        assert sample_summary.top_dependencies[0] == (LODASH, 2)

    def test_top_n(self, sample_sbom_json):
        document = SBOMParser().parse_json(sample_sbom_json)
        summary = summarize_inventory(document.components, document.dependencies, top_n=1)

        assert len(summary.top_dependencies) == 1

    def test_unknown_targets_not_reported(self):
        components = [Component(id="a", name="a")]
        dependencies = [DependencyEdge(ref="a", depends_on=("ghost",))]

        summary = summarize_inventory(components, dependencies)

        assert summary.top_dependencies == []
        assert summary.connected_components == 1

    def test_to_dict(self, sample_summary):
        data = sample_summary.to_dict()

        assert data["security"]["score"] == 60
        assert data["dependencies"]["isolated"] == 1
        assert {"name": "WTFPL", "category": "review", "count": 1, "components": [LEFT_PAD]} in data[
            "licenses"
        ]
