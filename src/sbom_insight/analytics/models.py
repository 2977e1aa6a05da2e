"""
Value objects for SBOM dependency graph analytics.

Input records (Component, DependencyEdge) mirror the subset of the CycloneDX
schema the analytics read. Derived records (Node, Edge, Graph, GraphMetrics)
are immutable snapshots: every stage of the pipeline returns new values
instead of mutating the ones it was given.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ComponentType(str, Enum):
    """Component classification used by the type filter."""

    LIBRARY = "library"
    FRAMEWORK = "framework"
    APPLICATION = "application"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: str | None) -> "ComponentType":
        """Map a raw document type string, defaulting to OTHER."""
        if not value:
            return cls.OTHER
        try:
            return cls(value.lower())
        except ValueError:
            return cls.OTHER


class RiskLevel(str, Enum):
    """Heuristic risk classes, ordered from least to most severe."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def weight(self) -> float:
        """Weight used by the criticality formula."""
        return RISK_WEIGHTS[self]


RISK_WEIGHTS = {
    RiskLevel.NONE: 0.0,
    RiskLevel.LOW: 0.33,
    RiskLevel.MEDIUM: 0.66,
    RiskLevel.HIGH: 1.0,
}


class NodeNotFoundError(KeyError):
    """Raised when a query names a node id absent from the graph snapshot."""

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Node not found in graph: {self.node_id}"


@dataclass(frozen=True)
class Component:
    """A component entry read from an SBOM document."""

    id: str
    name: str
    version: str | None = None
    type: ComponentType = ComponentType.OTHER
    description: str = ""
    licenses: tuple[str, ...] = ()
    hashes: tuple[str, ...] = ()
    purl: str = ""


@dataclass(frozen=True)
class DependencyEdge:
    """A declared dependency entry: ``ref`` depends on each id in ``depends_on``."""

    ref: str
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True)
class Node:
    """A component placed in the graph, with its derived metrics."""

    id: str
    name: str
    version: str | None = None
    type: ComponentType = ComponentType.OTHER
    dependency_count: int = 0
    dependent_count: int = 0
    depth: int = 0
    cluster: int = 0
    is_orphan: bool = False
    risk_level: RiskLevel = RiskLevel.NONE
    criticality_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        """Convert to the rendering-layer dictionary shape."""
        return {
            "id": self.id,
            "name": self.name,
            "version": self.version,
            "type": self.type.value,
            "dependencyCount": self.dependency_count,
            "dependentCount": self.dependent_count,
            "depth": self.depth,
            "cluster": self.cluster,
            "isOrphan": self.is_orphan,
            "riskLevel": self.risk_level.value,
            "criticalityScore": self.criticality_score,
        }


@dataclass(frozen=True)
class Edge:
    """A directed dependency edge between two nodes of the same graph."""

    source: str
    target: str
    is_circular: bool = False
    weight: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "isCircular": self.is_circular,
            "weight": self.weight,
        }


@dataclass(frozen=True)
class GraphMetrics:
    """Graph-level structure metrics."""

    total_nodes: int = 0
    total_edges: int = 0
    avg_dependencies: float = 0.0
    max_depth: int = 0
    circular_deps: int = 0
    cluster_count: int = 0
    network_density: float = 0.0
    centrality_score: float = 0.0
    modularity_score: float = 0.0

    @property
    def is_acyclic(self) -> bool:
        return self.circular_deps == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalNodes": self.total_nodes,
            "totalEdges": self.total_edges,
            "avgDependencies": self.avg_dependencies,
            "maxDepth": self.max_depth,
            "circularDeps": self.circular_deps,
            "clusterCount": self.cluster_count,
            "networkDensity": self.network_density,
            "centralityScore": self.centrality_score,
            "modularityScore": self.modularity_score,
        }


@dataclass(frozen=True)
class Graph:
    """Immutable graph snapshot.

    Node ids are interned into dense integer indices on construction;
    ``out_adjacency``/``in_adjacency`` hold index lists in edge order so the
    traversals never hash strings in their inner loops.
    """

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    metrics: GraphMetrics | None = None

    _index: dict[str, int] = field(init=False, repr=False, compare=False)
    _out: tuple[tuple[int, ...], ...] = field(init=False, repr=False, compare=False)
    _in: tuple[tuple[int, ...], ...] = field(init=False, repr=False, compare=False)
    _edge_pairs: tuple[tuple[int, int], ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        index = {node.id: i for i, node in enumerate(self.nodes)}
        out_lists: list[list[int]] = [[] for _ in self.nodes]
        in_lists: list[list[int]] = [[] for _ in self.nodes]
        pairs = []
        for edge in self.edges:
            src = index[edge.source]
            tgt = index[edge.target]
            out_lists[src].append(tgt)
            in_lists[tgt].append(src)
            pairs.append((src, tgt))

        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_out", tuple(tuple(a) for a in out_lists))
        object.__setattr__(self, "_in", tuple(tuple(a) for a in in_lists))
        object.__setattr__(self, "_edge_pairs", tuple(pairs))

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def out_adjacency(self) -> tuple[tuple[int, ...], ...]:
        return self._out

    @property
    def in_adjacency(self) -> tuple[tuple[int, ...], ...]:
        return self._in

    @property
    def edge_pairs(self) -> tuple[tuple[int, int], ...]:
        """(source index, target index) for each edge, in edge order."""
        return self._edge_pairs

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._index

    def index_of(self, node_id: str) -> int:
        """Dense index of a node id, raising NodeNotFoundError if absent."""
        try:
            return self._index[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def node(self, node_id: str) -> Node:
        return self.nodes[self.index_of(node_id)]

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def to_dict(self) -> dict[str, Any]:
        """Convert to the rendering-layer dictionary shape."""
        result: dict[str, Any] = {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
        if self.metrics is not None:
            result["metrics"] = self.metrics.to_dict()
        return result
