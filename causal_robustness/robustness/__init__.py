"""Robust pairwise causal discovery."""

from .bootstrap import BootstrapEstimator
from .cancellation import CancellationToken
from .edges import PairwiseEdgeDiscoverer
from .engine import CausalRobustnessEngine
from .errors import (
    BootstrapError,
    CausalDiscoveryError,
    CausalRobustnessError,
    ConfigurationError,
    DiscoveryCancelledError,
    EdgeDiscoveryError,
    FilteringError,
    RegularizationError,
    StageError,
)
from .events import DISCOVERY_COMPLETED, FILTER_APPLIED, EventBus
from .filtering import EWMAOutlierFilter
from .regularization import L1Regularizer, soft_threshold
from .significance import SignificanceFilter, select_significant
from .state import EngineState
from .statistics import (
    CorrelationComplementProxy,
    IndependenceProxy,
    PartialCorrelationProxy,
    get_independence_proxy,
    interval_overlap,
    pearson_correlation,
    permutation_p_value,
    register_independence_proxy,
)
from .types import (
    BootstrapConfig,
    BootstrapResult,
    CausalDiscoveryResult,
    CausalEdge,
    DiscoveryMetrics,
    EWMAFilterState,
    NoiseFilteringResult,
    RegularizationConfig,
    SignificanceThresholds,
    SmoothingMetrics,
)

__all__ = [
    # Engine
    "CausalRobustnessEngine",
    "EngineState",
    "CancellationToken",
    # Stages
    "EWMAOutlierFilter",
    "L1Regularizer",
    "soft_threshold",
    "BootstrapEstimator",
    "PairwiseEdgeDiscoverer",
    "SignificanceFilter",
    "select_significant",
    # Statistics
    "pearson_correlation",
    "interval_overlap",
    "permutation_p_value",
    "IndependenceProxy",
    "CorrelationComplementProxy",
    "PartialCorrelationProxy",
    "get_independence_proxy",
    "register_independence_proxy",
    # Events
    "EventBus",
    "FILTER_APPLIED",
    "DISCOVERY_COMPLETED",
    # Types
    "BootstrapConfig",
    "BootstrapResult",
    "CausalDiscoveryResult",
    "CausalEdge",
    "DiscoveryMetrics",
    "EWMAFilterState",
    "NoiseFilteringResult",
    "RegularizationConfig",
    "SignificanceThresholds",
    "SmoothingMetrics",
    # Errors
    "CausalRobustnessError",
    "ConfigurationError",
    "DiscoveryCancelledError",
    "StageError",
    "FilteringError",
    "RegularizationError",
    "BootstrapError",
    "EdgeDiscoveryError",
    "CausalDiscoveryError",
]
