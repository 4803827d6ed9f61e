"""Robust causal discovery engine.

Sequences smoothing, regularization, bootstrap intervals, pairwise edge
scoring and significance gating into one run, and publishes the result.
"""

import time
from typing import Any, Iterable

import numpy as np
import pandas as pd

from causal_robustness.config import Settings, get_settings
from causal_robustness.logging_config.structured import get_logger

from .bootstrap import BootstrapEstimator
from .cancellation import CancellationToken
from .edges import PairwiseEdgeDiscoverer
from .errors import CausalDiscoveryError, DiscoveryCancelledError, StageError
from .events import DISCOVERY_COMPLETED, FILTER_APPLIED, EventBus, EventHandler
from .filtering import EWMAOutlierFilter
from .frames import Observations, as_frame, numeric_column
from .regularization import L1Regularizer
from .significance import SignificanceFilter, select_significant
from .state import EngineState
from .statistics import IndependenceProxy, get_independence_proxy
from .types import (
    BootstrapConfig,
    BootstrapResult,
    CausalDiscoveryResult,
    CausalEdge,
    DiscoveryMetrics,
    EWMAFilterState,
    NoiseFilteringResult,
    RegularizationConfig,
    utc_now,
)

logger = get_logger(__name__)


class CausalRobustnessEngine:
    """Main interface for robust pairwise causal discovery.

    Each instance owns its ``EngineState`` (EWMA registry and configs) and
    its ``EventBus``, so several engines can run side by side.
    """

    def __init__(
        self,
        state: EngineState | None = None,
        settings: Settings | None = None,
        event_bus: EventBus | None = None,
        independence_proxy: IndependenceProxy | None = None,
    ):
        """Initialize the engine.

        Args:
            state: Owned state; a fresh one is created when omitted
            settings: Application settings (defaults to ``get_settings()``)
            event_bus: Notification hub; a private one is created when omitted
            independence_proxy: Overrides ``settings.independence_proxy``
        """
        self.settings = settings or get_settings()
        self.state = state or EngineState()
        self.events = event_bus or EventBus()
        self.proxy = independence_proxy or get_independence_proxy(
            self.settings.independence_proxy
        )
        self.noise_filter = EWMAOutlierFilter.from_settings(self.state, self.settings)
        self.significance_filter = SignificanceFilter.from_settings(self.settings)
        self._running = True

    # ─── Individual stages ──────────────────────────────────────────────────

    def apply_filter(
        self,
        observations: Observations,
        variable: str,
        alpha: float | None = None,
    ) -> NoiseFilteringResult:
        """Smooth one variable, drop its outliers and notify subscribers."""
        result = self.noise_filter.apply(observations, variable, alpha)
        self._publish_filter(result)
        return result

    def regularize(self, data: pd.DataFrame, variables: list[str]) -> pd.DataFrame:
        return L1Regularizer(self.state.regularization_config).regularize(data, variables)

    def bootstrap(
        self,
        data: pd.DataFrame,
        variables: list[str],
        seed: np.random.SeedSequence | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BootstrapResult:
        estimator = BootstrapEstimator(
            self.state.bootstrap_config, max_workers=self.settings.max_workers
        )
        return estimator.estimate(data, variables, seed=seed, cancel_token=cancel_token)

    def discover_edges(
        self,
        data: pd.DataFrame,
        variables: list[str],
        bootstrap_result: BootstrapResult,
        seed: np.random.SeedSequence | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[CausalEdge]:
        if seed is None:
            seed = np.random.SeedSequence(self.state.bootstrap_config.random_seed)
        discoverer = PairwiseEdgeDiscoverer.from_settings(
            self.settings,
            bootstrap_samples=self.state.bootstrap_config.num_samples,
            proxy=self.proxy,
        )
        return discoverer.discover(
            data, variables, bootstrap_result, seed=seed, cancel_token=cancel_token
        )

    def filter_significant(self, edges: list[CausalEdge]) -> list[CausalEdge]:
        return self.significance_filter.apply(edges)

    # ─── Full pipeline ──────────────────────────────────────────────────────

    def discover_causal_relationships(
        self,
        data: Observations,
        variables: Iterable[str],
        cancel_token: CancellationToken | None = None,
    ) -> CausalDiscoveryResult:
        """Discover directed edges between ``variables``.

        Args:
            data: Time-ordered observations (records or DataFrame)
            variables: Variable names to analyze
            cancel_token: Optional token checked between variables and pairs

        Returns:
            CausalDiscoveryResult with candidate, significant and filtered edges

        Raises:
            CausalDiscoveryError: A stage failed; nothing was published
            DiscoveryCancelledError: The token was cancelled mid-run
        """
        start = time.perf_counter()
        variables = list(dict.fromkeys(variables))
        bootstrap_config = self.state.bootstrap_config
        regularization_config = self.state.regularization_config

        # Independent streams for resampling and permutation tests
        bootstrap_seed, permutation_seed = np.random.SeedSequence(
            bootstrap_config.random_seed
        ).spawn(2)

        logger.info(
            "causal_discovery_start",
            n_variables=len(variables),
            num_samples=bootstrap_config.num_samples,
            confidence_level=bootstrap_config.confidence_level,
        )

        try:
            frame = as_frame(data)

            filtering_results: dict[str, NoiseFilteringResult] = {}
            for variable in variables:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                filtering_results[variable] = self.noise_filter.apply(frame, variable)
            cleaned = self._combine_filtered(frame, filtering_results)

            regularized = L1Regularizer(regularization_config).regularize(cleaned, variables)

            bootstrap_result = BootstrapEstimator(
                bootstrap_config, max_workers=self.settings.max_workers
            ).estimate(
                regularized, variables, seed=bootstrap_seed, cancel_token=cancel_token
            )

            edges = PairwiseEdgeDiscoverer.from_settings(
                self.settings,
                bootstrap_samples=bootstrap_config.num_samples,
                proxy=self.proxy,
            ).discover(
                regularized,
                variables,
                bootstrap_result,
                seed=permutation_seed,
                cancel_token=cancel_token,
            )
        except DiscoveryCancelledError:
            logger.info("causal_discovery_cancelled", n_variables=len(variables))
            raise
        except StageError as e:
            logger.error("causal_discovery_failed", stage=e.stage, error=str(e))
            raise CausalDiscoveryError(str(e), stage=e.stage) from e
        except Exception as e:
            logger.exception("causal_discovery_failed", stage="input", error=str(e))
            raise CausalDiscoveryError(str(e), stage="input") from e

        significant_edges = select_significant(
            edges,
            bootstrap_config.confidence_level,
            self.settings.significant_min_confidence,
        )
        filtered_edges = self.significance_filter.apply(significant_edges)

        average_confidence = (
            float(np.mean([e.confidence for e in significant_edges]))
            if significant_edges
            else 0.0
        )

        result = CausalDiscoveryResult(
            edges=edges,
            confidence_intervals=dict(bootstrap_result.confidence_intervals),
            significant_edges=significant_edges,
            filtered_edges=filtered_edges,
            metrics=DiscoveryMetrics(
                total_edges=len(edges),
                significant_edges=len(significant_edges),
                average_confidence=average_confidence,
                discovery_time_ms=(time.perf_counter() - start) * 1000,
            ),
            filtering_results=filtering_results,
            variables=variables,
        )

        logger.info(
            "causal_discovery_complete",
            total_edges=result.metrics.total_edges,
            significant_edges=result.metrics.significant_edges,
            filtered_edges=len(filtered_edges),
            discovery_time_ms=round(result.metrics.discovery_time_ms, 2),
        )

        # Publication is off the numerical path: only after a complete run
        for filtering_result in filtering_results.values():
            self._publish_filter(filtering_result)
        self.events.publish(
            DISCOVERY_COMPLETED,
            {"result": result, "timestamp": utc_now().isoformat()},
        )
        return result

    @staticmethod
    def _combine_filtered(
        frame: pd.DataFrame, filtering_results: dict[str, NoiseFilteringResult]
    ) -> pd.DataFrame:
        """Align the smoothed columns on the original rows.

        Rows dropped as outliers for a variable become missing in that
        variable's column only.
        """
        return pd.DataFrame(
            {
                variable: numeric_column(result.filtered_data, variable).reindex(frame.index)
                for variable, result in filtering_results.items()
            },
            index=frame.index,
        )

    def _publish_filter(self, result: NoiseFilteringResult) -> None:
        self.events.publish(
            FILTER_APPLIED,
            {
                "variable": result.variable,
                "result": result,
                "timestamp": utc_now().isoformat(),
            },
        )

    # ─── Subscriptions and lifecycle ────────────────────────────────────────

    def subscribe(self, event: str, handler: EventHandler):
        """Register a handler; returns a callable that unsubscribes it."""
        return self.events.subscribe(event, handler)

    def unsubscribe(self, event: str, handler: EventHandler) -> bool:
        return self.events.unsubscribe(event, handler)

    @property
    def is_running(self) -> bool:
        return self._running

    def stop(self) -> None:
        """Drop every subscriber and mark the engine stopped."""
        self._running = False
        self.events.clear()
        logger.info("causal_robustness_engine_stopped")

    # ─── State management ───────────────────────────────────────────────────

    def get_filters(self) -> dict[str, EWMAFilterState]:
        return self.state.filters()

    def add_filter(self, variable: str, alpha: float | None = None) -> EWMAFilterState:
        return self.state.add_filter(
            variable, alpha if alpha is not None else self.settings.ewma_alpha
        )

    def remove_filter(self, variable: str) -> bool:
        return self.state.remove_filter(variable)

    def get_regularization_config(self) -> RegularizationConfig:
        return self.state.regularization_config

    def get_bootstrap_config(self) -> BootstrapConfig:
        return self.state.bootstrap_config

    def update_regularization_config(self, **changes: Any) -> RegularizationConfig:
        return self.state.update_regularization_config(**changes)

    def update_bootstrap_config(self, **changes: Any) -> BootstrapConfig:
        return self.state.update_bootstrap_config(**changes)
