"""
Per-component score providers.

Popularity, trust and vulnerability counts come from outside the analytics
(package registry telemetry, vulnerability feeds). A ScoreProvider is the
injection point for that data; the analytics only require that it is
deterministic for a given component id.

Scales:
- popularity: 0-100, higher means more widely used
- trust: 0-100, higher means more trusted (maintainer reputation, signing)
- vulnerability_count: non-negative integer
"""

import hashlib
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ComponentScores:
    """External scores for one component."""

    popularity: float = 0.0
    trust: float = 100.0
    vulnerability_count: int = 0


@runtime_checkable
class ScoreProvider(Protocol):
    """Supplies external scores for a component id."""

    def scores(self, component_id: str) -> ComponentScores: ...


class NeutralScoreProvider:
    """Returns the same neutral scores for every component.

    Zero popularity, full trust and no vulnerabilities, so criticality is
    driven by connectivity and the heuristic risk class alone.
    """

    def __init__(self, default: ComponentScores | None = None):
        self.default = default or ComponentScores()

    def scores(self, component_id: str) -> ComponentScores:
        return self.default


class StaticScoreProvider:
    """Looks scores up in a fixed mapping, with a fallback for unknown ids."""

    def __init__(
        self,
        table: Mapping[str, ComponentScores],
        default: ComponentScores | None = None,
    ):
        self.table = dict(table)
        self.default = default or ComponentScores()

    def scores(self, component_id: str) -> ComponentScores:
        return self.table.get(component_id, self.default)


class HashedScoreProvider:
    """Deterministic placeholder scores derived from a hash of the id.

    Stands in for a telemetry feed in demos: values look varied but are
    reproducible for a given (seed, component id) pair.
    """

    def __init__(self, seed: int = 0, max_vulnerabilities: int = 5):
        if max_vulnerabilities < 1:
            raise ValueError("max_vulnerabilities must be at least 1")
        self.seed = seed
        self.max_vulnerabilities = max_vulnerabilities

    def scores(self, component_id: str) -> ComponentScores:
        digest = hashlib.sha256(f"{self.seed}:{component_id}".encode("utf-8")).digest()

        popularity = int.from_bytes(digest[0:2], "big") / 0xFFFF * 100.0
        trust = int.from_bytes(digest[2:4], "big") / 0xFFFF * 100.0

        # Most components carry no known vulnerabilities
        vuln_roll = digest[4]
        if vuln_roll < 192:
            vulnerabilities = 0
        else:
            vulnerabilities = 1 + digest[5] % self.max_vulnerabilities

        return ComponentScores(
            popularity=round(popularity, 2),
            trust=round(trust, 2),
            vulnerability_count=vulnerabilities,
        )
