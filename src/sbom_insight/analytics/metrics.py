"""
Per-node metrics: risk classification and composite criticality.

criticality = clamp01(
    w_dep  * normalized(dependency_count)
  + w_risk * risk_weight(risk_level)
  + w_pop  * normalized(popularity)
  + w_trust * (1 - normalized(trust))
)

Default weights are 0.4 / 0.3 / 0.2 / 0.1. ``normalized`` is a linear
scale with clamping (``min(max(x, 0) / scale, 1)``), which is monotonic
and deterministic. The default scales are 50 dependencies, 100 popularity
points and 100 trust points.
"""

import logging
import math
from dataclasses import dataclass, replace

from sbom_insight.analytics.models import Graph, Node, RiskLevel
from sbom_insight.analytics.risk import HeuristicRiskClassifier, RiskClassifier
from sbom_insight.analytics.scores import ComponentScores, NeutralScoreProvider, ScoreProvider

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CriticalityModel:
    """Weights and normalization scales of the criticality formula."""

    dependency_weight: float = 0.4
    risk_weight: float = 0.3
    popularity_weight: float = 0.2
    trust_weight: float = 0.1
    dependency_scale: float = 50.0
    popularity_scale: float = 100.0
    trust_scale: float = 100.0

    def score(self, dependency_count: int, risk_level: RiskLevel, scores: ComponentScores) -> float:
        """Compute the criticality score, always a finite value in [0, 1]."""
        value = (
            self.dependency_weight * normalize(dependency_count, self.dependency_scale)
            + self.risk_weight * risk_level.weight
            + self.popularity_weight * normalize(scores.popularity, self.popularity_scale)
            + self.trust_weight * (1.0 - normalize(scores.trust, self.trust_scale))
        )
        return clamp01(value)


def normalize(value: float, scale: float) -> float:
    """Map a non-negative magnitude to [0, 1] by linear scaling with clamping."""
    if scale <= 0 or not math.isfinite(value):
        return 0.0
    return clamp01(value / scale)


def clamp01(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


class MetricsEngine:
    """Annotates graph nodes with risk level and criticality score."""

    def __init__(
        self,
        score_provider: ScoreProvider | None = None,
        classifier: RiskClassifier | None = None,
        model: CriticalityModel | None = None,
    ):
        """Initialize metrics engine.

        Args:
            score_provider: Source of popularity/trust/vulnerability scores
            classifier: Risk classifier (heuristic by default)
            model: Criticality weights and scales
        """
        self.score_provider = score_provider or NeutralScoreProvider()
        self.classifier = classifier or HeuristicRiskClassifier()
        self.model = model or CriticalityModel()

    def annotate(self, graph: Graph) -> Graph:
        """Return a new graph whose nodes carry risk and criticality fields."""
        nodes = tuple(self.annotate_node(node) for node in graph.nodes)

        elevated = sum(1 for node in nodes if node.risk_level != RiskLevel.NONE)
        logger.info(f"Annotated {len(nodes)} nodes ({elevated} with elevated risk)")

        return replace(graph, nodes=nodes)

    def annotate_node(self, node: Node) -> Node:
        scores = self.score_provider.scores(node.id)
        risk_level = self.classifier.classify(node, scores)
        criticality = self.model.score(node.dependency_count, risk_level, scores)
        return replace(node, risk_level=risk_level, criticality_score=criticality)
