"""Robust causal discovery engine for noisy time-ordered observations."""

from .robustness import CausalDiscoveryResult, CausalRobustnessEngine, EngineState

__version__ = "1.0.0"

__all__ = ["CausalDiscoveryResult", "CausalRobustnessEngine", "EngineState"]
