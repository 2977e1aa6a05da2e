"""
Inventory summaries over the raw component list.

These views read the document directly rather than the filtered graph:
- Security posture (hash coverage, license coverage, outdated versions)
- License distribution with a coarse copyleft/permissive category
- Declared dependency overview (connected vs isolated, most depended upon)
- Component type breakdown
"""

import re
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from sbom_insight.analytics.models import Component, ComponentType, DependencyEdge

COPYLEFT_MARKERS = ("GPL", "AGPL", "LGPL")
PERMISSIVE_MARKERS = ("MIT", "APACHE", "BSD")

_RELEASE_PATTERN = re.compile(r"^[0-9]+\.[0-9]+")


def license_category(license_name: str) -> str:
    """Classify a license as ``copyleft``, ``permissive`` or ``review``."""
    upper = license_name.upper()
    if any(marker in upper for marker in COPYLEFT_MARKERS):
        return "copyleft"
    if any(marker in upper for marker in PERMISSIVE_MARKERS):
        return "permissive"
    return "review"


@dataclass
class SecurityPosture:
    """Metadata hygiene of the component inventory."""

    total: int = 0
    with_hashes: int = 0
    licensed: int = 0
    outdated: int = 0

    @property
    def without_hashes(self) -> int:
        return self.total - self.with_hashes

    @property
    def unlicensed(self) -> int:
        return self.total - self.licensed

    @property
    def score(self) -> int:
        """0-100: 30 points hash coverage, 40 license coverage, 30 current versions."""
        if self.total == 0:
            return 0
        hash_score = self.with_hashes / self.total * 30
        license_score = self.licensed / self.total * 40
        version_score = (self.total - self.outdated) / self.total * 30
        return round(hash_score + license_score + version_score)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "withHashes": self.with_hashes,
            "withoutHashes": self.without_hashes,
            "licensed": self.licensed,
            "unlicensed": self.unlicensed,
            "outdated": self.outdated,
            "score": self.score,
        }


@dataclass
class LicenseEntry:
    name: str
    category: str
    components: list[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.components)


@dataclass
class InventorySummary:
    """All inventory views for one document."""

    posture: SecurityPosture = field(default_factory=SecurityPosture)
    licenses: list[LicenseEntry] = field(default_factory=list)
    unlicensed: list[str] = field(default_factory=list)
    type_counts: dict[str, int] = field(default_factory=dict)
    declared_dependencies: int = 0
    connected_components: int = 0
    isolated_components: int = 0
    top_dependencies: list[tuple[str, int]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "security": self.posture.to_dict(),
            "licenses": [
                {
                    "name": entry.name,
                    "category": entry.category,
                    "count": entry.count,
                    "components": entry.components,
                }
                for entry in self.licenses
            ],
            "unlicensed": self.unlicensed,
            "types": self.type_counts,
            "dependencies": {
                "declared": self.declared_dependencies,
                "connected": self.connected_components,
                "isolated": self.isolated_components,
                "top": [{"id": ref, "dependents": count} for ref, count in self.top_dependencies],
            },
        }


def is_outdated(version: str | None) -> bool:
    """True for ``major.minor`` versions with a major below 2."""
    if not version or not _RELEASE_PATTERN.match(version):
        return False
    return int(version.split(".")[0]) < 2


def summarize_inventory(
    components: Sequence[Component],
    dependencies: Sequence[DependencyEdge] = (),
    top_n: int = 10,
) -> InventorySummary:
    """Build inventory views for a component list.

    Args:
        components: Components from the loaded document
        dependencies: Declared dependency entries
        top_n: Number of most depended-upon components to report

    Returns:
        InventorySummary
    """
    summary = InventorySummary()
    posture = summary.posture
    posture.total = len(components)

    by_license: dict[str, LicenseEntry] = {}
    types: Counter[str] = Counter({t.value: 0 for t in ComponentType})

    for component in components:
        types[component.type.value] += 1
        if component.hashes:
            posture.with_hashes += 1
        if is_outdated(component.version):
            posture.outdated += 1

        if not component.licenses:
            summary.unlicensed.append(component.id)
            continue
        posture.licensed += 1
        for name in component.licenses:
            entry = by_license.get(name)
            if entry is None:
                entry = by_license[name] = LicenseEntry(name=name, category=license_category(name))
            entry.components.append(component.id)

    summary.licenses = sorted(by_license.values(), key=lambda e: e.count, reverse=True)
    summary.type_counts = dict(types)

    known = {c.id for c in components}
    connected: set[str] = set()
    dependents: Counter[str] = Counter()
    for entry in dependencies:
        connected.add(entry.ref)
        connected.update(entry.depends_on)
        dependents.update(entry.depends_on)

    summary.declared_dependencies = len(dependencies)
    summary.connected_components = len(connected & known)
    summary.isolated_components = len(known - connected)
    summary.top_dependencies = [
        (ref, count) for ref, count in dependents.most_common() if ref in known
    ][:top_n]

    return summary
