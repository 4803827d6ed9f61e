"""Structured error types for the discovery engine.

Every pipeline stage raises its own ``StageError`` subclass so callers can
tell which stage failed from the message prefix or the ``stage`` attribute.
"""


class CausalRobustnessError(Exception):
    """Base error for all engine failures."""


class ConfigurationError(CausalRobustnessError):
    """Raised when a configuration update or smoothing factor is invalid."""


class DiscoveryCancelledError(CausalRobustnessError):
    """Raised when a run is cancelled through its cancellation token."""

    def __init__(self, message: str = "Causal discovery was cancelled") -> None:
        super().__init__(message)


class StageError(CausalRobustnessError):
    """Base error for a failing pipeline stage."""

    STAGE: str = "discovery"
    LABEL: str = "Causal discovery"

    def __init__(self, message: str) -> None:
        self.stage = self.STAGE
        self.detail = message
        super().__init__(f"{self.LABEL} failed: {message}")


class FilteringError(StageError):
    STAGE = "filtering"
    LABEL = "EWMA filtering"


class RegularizationError(StageError):
    STAGE = "regularization"
    LABEL = "Regularization"


class BootstrapError(StageError):
    STAGE = "bootstrap"
    LABEL = "Bootstrap analysis"


class EdgeDiscoveryError(StageError):
    STAGE = "edge_discovery"
    LABEL = "Causal edge discovery"


class CausalDiscoveryError(StageError):
    """Raised by the orchestrator; ``stage`` names the stage that failed."""

    def __init__(self, message: str, stage: str = "discovery") -> None:
        super().__init__(message)
        self.stage = stage
