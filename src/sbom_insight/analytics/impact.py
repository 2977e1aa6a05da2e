"""
Blast-radius analysis.

The impact set of a component is every component that transitively
depends on it, i.e. everything reachable by walking edges backwards from
the component. The component itself is always part of its impact set.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Any

from sbom_insight.analytics.models import Graph

logger = logging.getLogger(__name__)

DEFAULT_CRITICAL_THRESHOLD = 0.7


@dataclass(frozen=True)
class ImpactResult:
    """Blast radius of one node."""

    node_id: str
    affected: tuple[str, ...] = ()
    impact_score: float = 0.0
    critical_nodes: tuple[str, ...] = ()

    @property
    def affected_count(self) -> int:
        return len(self.affected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodeId": self.node_id,
            "affected": list(self.affected),
            "impactScore": self.impact_score,
            "criticalNodes": list(self.critical_nodes),
        }


class ImpactAnalyzer:
    """Computes reverse reachability for nodes of one graph."""

    def __init__(self, graph: Graph, critical_threshold: float = DEFAULT_CRITICAL_THRESHOLD):
        self.graph = graph
        self.critical_threshold = critical_threshold

    def impact(self, node_id: str) -> ImpactResult:
        """Compute the blast radius of a node.

        Args:
            node_id: Node whose dependents are collected

        Returns:
            ImpactResult with affected ids in discovery order (starting with
            ``node_id``), the affected share of all nodes, and the affected
            nodes whose criticality exceeds the threshold
        """
        start = self.graph.index_of(node_id)
        in_adj = self.graph.in_adjacency

        seen = {start}
        order = [start]
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for dependent in in_adj[current]:
                if dependent not in seen:
                    seen.add(dependent)
                    order.append(dependent)
                    queue.append(dependent)

        nodes = [self.graph.nodes[i] for i in order]
        critical = tuple(n.id for n in nodes if n.criticality_score > self.critical_threshold)

        result = ImpactResult(
            node_id=node_id,
            affected=tuple(n.id for n in nodes),
            impact_score=len(order) / self.graph.node_count,
            critical_nodes=critical,
        )
        logger.debug(
            f"Impact of {node_id}: {result.affected_count} affected, "
            f"{len(critical)} above criticality {self.critical_threshold}"
        )
        return result
