"""
Heuristic risk classification for graph nodes.

This is not a vulnerability feed. Classification is rule based, working
only from component metadata plus the vulnerability count supplied by the
score provider:

1. Known-vulnerable name/version ranges -> HIGH
2. Three or more reported vulnerabilities -> HIGH
3. No version at all -> MEDIUM
4. Pre-release markers (alpha, beta, rc, snapshot, dev, pre) -> MEDIUM
5. Major version 0 or 1 -> MEDIUM
6. Any reported vulnerability -> at least MEDIUM
7. Applications -> LOW
8. Otherwise -> NONE
"""

import re
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sbom_insight.analytics.models import ComponentType, Node, RiskLevel
from sbom_insight.analytics.scores import ComponentScores

PRERELEASE_PATTERN = re.compile(r"(?:^|[.\-+_])(alpha|beta|rc|pre|snapshot|dev)\d*", re.IGNORECASE)


@dataclass(frozen=True)
class VulnerableRange:
    """Half-open version range ``[introduced, fixed)`` for a package name."""

    name: str
    introduced: tuple[int, ...]
    fixed: tuple[int, ...]
    advisory: str = ""

    def contains(self, version: tuple[int, ...]) -> bool:
        return self.introduced <= version < self.fixed


KNOWN_VULNERABLE = (
    VulnerableRange("log4j-core", (2, 0), (2, 17, 1), "CVE-2021-44228"),
    VulnerableRange("lodash", (0,), (4, 17, 21), "CVE-2021-23337"),
    VulnerableRange("axios", (0,), (0, 21, 2), "CVE-2021-3749"),
    VulnerableRange("minimist", (0,), (1, 2, 6), "CVE-2021-44906"),
    VulnerableRange("jackson-databind", (2, 0), (2, 9, 10, 8), "CVE-2020-36518"),
    VulnerableRange("spring-core", (5, 3), (5, 3, 18), "CVE-2022-22965"),
    VulnerableRange("openssl", (3, 0), (3, 0, 7), "CVE-2022-3602"),
    VulnerableRange("pyyaml", (0,), (5, 4), "CVE-2020-14343"),
)


def parse_version(version: str | None) -> tuple[int, ...]:
    """Extract the leading numeric release tuple from a version string.

    ``"2.14.0"`` -> ``(2, 14, 0)``; ``"v1.2-beta"`` -> ``(1, 2)``;
    a version with no digits yields ``()``.
    """
    if not version:
        return ()
    match = re.match(r"^\D*(\d+(?:\.\d+)*)", version)
    if not match:
        return ()
    return tuple(int(part) for part in match.group(1).split("."))


def is_prerelease(version: str | None) -> bool:
    return bool(version and PRERELEASE_PATTERN.search(version))


@runtime_checkable
class RiskClassifier(Protocol):
    """Assigns a risk level to a node."""

    def classify(self, node: Node, scores: ComponentScores) -> RiskLevel: ...


class HeuristicRiskClassifier:
    """Rule-based classifier over component metadata."""

    def __init__(self, known_vulnerable: tuple[VulnerableRange, ...] = KNOWN_VULNERABLE):
        self.known_vulnerable = known_vulnerable

    def classify(self, node: Node, scores: ComponentScores) -> RiskLevel:
        """Classify a node.

        Args:
            node: Graph node carrying name, version and type
            scores: External scores for the node's component

        Returns:
            Risk level for the node
        """
        release = parse_version(node.version)

        if self.matching_advisory(node.name, release) is not None:
            return RiskLevel.HIGH
        if scores.vulnerability_count >= 3:
            return RiskLevel.HIGH

        if not node.version:
            return RiskLevel.MEDIUM
        if is_prerelease(node.version):
            return RiskLevel.MEDIUM
        if release and release[0] < 2:
            return RiskLevel.MEDIUM
        if scores.vulnerability_count > 0:
            return RiskLevel.MEDIUM

        if node.type == ComponentType.APPLICATION:
            return RiskLevel.LOW

        return RiskLevel.NONE

    def matching_advisory(self, name: str, release: tuple[int, ...]) -> str | None:
        """Advisory id of the first known-vulnerable range containing the version."""
        if not release:
            return None
        lowered = name.lower()
        for entry in self.known_vulnerable:
            if entry.name == lowered and entry.contains(release):
                return entry.advisory or entry.name
        return None
