"""Data model for the robust causal discovery engine."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import networkx as nx
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

DIRECT = "direct"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RegularizationConfig(BaseModel):
    """Regularization parameters.

    Only ``l1_lambda`` is used by the discovery path; the remaining fields
    are reserved for iterative solvers.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    l1_lambda: float = Field(default=0.01, ge=0.0)
    l2_lambda: float = Field(default=0.001, ge=0.0)
    max_iterations: int = Field(default=1000, gt=0)
    convergence_threshold: float = Field(default=1e-6, gt=0.0)
    learning_rate: float = Field(default=0.01, gt=0.0)


class BootstrapConfig(BaseModel):
    """Bootstrap resampling parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sample_size: int = Field(default=100, gt=0)
    num_samples: int = Field(default=1000, gt=0)
    confidence_level: float = Field(default=0.95, gt=0.0, lt=1.0)
    random_seed: int | None = Field(default=42, ge=0)


class SignificanceThresholds(BaseModel):
    """Thresholds for the final significance gate."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_strength: float = Field(default=0.05, ge=0.0, le=1.0)
    min_confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    max_p_value: float = Field(default=0.05, ge=0.0, le=1.0)


@dataclass
class EWMAFilterState:
    """Running smoothing state for one variable."""

    alpha: float
    current_value: float | None = None
    last_updated: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "alpha": self.alpha,
            "current_value": self.current_value,
            "last_updated": self.last_updated.isoformat(),
        }


@dataclass(frozen=True)
class SmoothingMetrics:
    """Variance before and after smoothing."""

    original_variance: float
    filtered_variance: float
    noise_reduction: float

    def to_dict(self) -> dict[str, float]:
        return {
            "original_variance": self.original_variance,
            "filtered_variance": self.filtered_variance,
            "noise_reduction": self.noise_reduction,
        }


@dataclass(frozen=True)
class NoiseFilteringResult:
    """Output of smoothing and outlier rejection for one variable."""

    variable: str
    filtered_data: pd.DataFrame
    removed_outliers: list[int]
    smoothing_metrics: SmoothingMetrics

    def to_dict(self) -> dict[str, Any]:
        return {
            "variable": self.variable,
            "n_filtered": len(self.filtered_data),
            "removed_outliers": list(self.removed_outliers),
            "smoothing_metrics": self.smoothing_metrics.to_dict(),
        }


@dataclass(frozen=True)
class BootstrapResult:
    """Percentile confidence intervals of each variable's mean."""

    confidence_intervals: dict[str, tuple[float, float]]
    skipped_variables: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class CausalEdge:
    """A directed candidate edge with its three scores."""

    source: str
    target: str
    edge_type: str = DIRECT
    strength: float = 0.0
    confidence: float = 0.0
    p_value: float = 1.0
    bootstrap_samples: int = 0
    timestamp: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "from": self.source,
            "to": self.target,
            "type": self.edge_type,
            "strength": self.strength,
            "confidence": self.confidence,
            "p_value": self.p_value,
            "bootstrap_samples": self.bootstrap_samples,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class DiscoveryMetrics:
    """Summary statistics of one discovery run."""

    total_edges: int
    significant_edges: int
    average_confidence: float
    discovery_time_ms: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_edges": self.total_edges,
            "significant_edges": self.significant_edges,
            "average_confidence": self.average_confidence,
            "discovery_time_ms": self.discovery_time_ms,
        }


@dataclass(frozen=True)
class CausalDiscoveryResult:
    """Result of one discovery run.

    ``filtered_edges`` is the authoritative graph; ``significant_edges`` is a
    looser diagnostic set and ``edges`` holds every candidate above the
    minimum strength.
    """

    edges: list[CausalEdge]
    confidence_intervals: dict[str, tuple[float, float]]
    significant_edges: list[CausalEdge]
    filtered_edges: list[CausalEdge]
    metrics: DiscoveryMetrics
    filtering_results: dict[str, NoiseFilteringResult] = field(default_factory=dict)
    variables: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "variables": list(self.variables),
            "edges": [e.to_dict() for e in self.edges],
            "confidence_intervals": {
                name: [lower, upper]
                for name, (lower, upper) in self.confidence_intervals.items()
            },
            "significant_edges": [e.to_dict() for e in self.significant_edges],
            "filtered_edges": [e.to_dict() for e in self.filtered_edges],
            "discovery_metrics": self.metrics.to_dict(),
            "filtering": {
                name: r.to_dict() for name, r in self.filtering_results.items()
            },
        }

    def to_graph(self) -> nx.DiGraph:
        """Build a directed graph from the filtered edges."""
        graph = nx.DiGraph()
        graph.add_nodes_from(self.variables)
        for edge in self.filtered_edges:
            graph.add_edge(
                edge.source,
                edge.target,
                strength=edge.strength,
                confidence=edge.confidence,
                p_value=edge.p_value,
            )
        return graph

    def get_parents(self, node: str) -> list[str]:
        """Get parent nodes of a given node in the filtered graph."""
        return [e.source for e in self.filtered_edges if e.target == node]

    def get_children(self, node: str) -> list[str]:
        """Get child nodes of a given node in the filtered graph."""
        return [e.target for e in self.filtered_edges if e.source == node]
