"""Exponential smoothing with rolling Z-score outlier rejection."""

import numpy as np
import pandas as pd

from causal_robustness.config import Settings, get_settings
from causal_robustness.logging_config.structured import get_logger

from .errors import CausalRobustnessError, FilteringError
from .frames import Observations, as_frame, numeric_column
from .state import EngineState, validate_alpha
from .types import NoiseFilteringResult, SmoothingMetrics, utc_now

logger = get_logger(__name__)

# Rolling standard deviations at or below this (relative to the window mean) count as zero
_STD_TOLERANCE = 1e-9


def _variance(values: np.ndarray) -> float:
    """Population variance, 0.0 for no values."""
    return float(np.var(values)) if values.size else 0.0


class EWMAOutlierFilter:
    """Per-variable EWMA smoothing with trailing-window outlier rejection.

    Each new value is first tested against the mean and standard deviation
    of up to ``window`` prior raw values; with fewer than ``min_window``
    prior values nothing is flagged. Flagged rows are left out of the
    filtered output, but the EWMA still absorbs the raw value.
    """

    def __init__(
        self,
        state: EngineState,
        default_alpha: float = 0.3,
        z_threshold: float = 3.0,
        window: int = 20,
        min_window: int = 5,
    ):
        """Initialize the filter.

        Args:
            state: Engine state holding the per-variable EWMA registry
            default_alpha: Smoothing factor for variables without a state
            z_threshold: Absolute Z-score above which a value is an outlier
            window: Maximum number of prior values in the trailing window
            min_window: Minimum prior values before outliers can be flagged
        """
        self.state = state
        self.default_alpha = validate_alpha(default_alpha)
        self.z_threshold = z_threshold
        self.window = window
        self.min_window = min_window

    @classmethod
    def from_settings(
        cls, state: EngineState, settings: Settings | None = None
    ) -> "EWMAOutlierFilter":
        settings = settings or get_settings()
        return cls(
            state,
            default_alpha=settings.ewma_alpha,
            z_threshold=settings.outlier_z_threshold,
            window=settings.outlier_window,
            min_window=settings.outlier_min_window,
        )

    def resolve_alpha(self, variable: str, alpha: float | None) -> float:
        """Explicit alpha, else the registered state's, else the default."""
        if alpha is not None:
            return validate_alpha(alpha)
        existing = self.state.get_filter(variable)
        return existing.alpha if existing is not None else self.default_alpha

    def apply(
        self,
        observations: Observations,
        variable: str,
        alpha: float | None = None,
    ) -> NoiseFilteringResult:
        """Smooth ``variable`` and drop outlier rows.

        Args:
            observations: Time-ordered records or DataFrame
            variable: Column to smooth
            alpha: Smoothing factor in (0, 1]

        Returns:
            NoiseFilteringResult with the filtered rows and variance metrics
        """
        resolved_alpha = self.resolve_alpha(variable, alpha)
        try:
            frame = as_frame(observations)
            with self.state.variable_lock(variable):
                result = self._filter(frame, variable, resolved_alpha)
        except CausalRobustnessError:
            raise
        except Exception as e:
            raise FilteringError(str(e)) from e

        logger.debug(
            "ewma_filter_applied",
            variable=variable,
            alpha=resolved_alpha,
            n_outliers=len(result.removed_outliers),
            noise_reduction=result.smoothing_metrics.noise_reduction,
        )
        return result

    def outlier_mask(self, values: pd.Series) -> pd.Series:
        """Flag values whose Z-score against the trailing window exceeds the threshold.

        ``values`` holds the observed raw values in time order. Each value is
        compared with the population mean and standard deviation of the up
        to ``window`` values before it; a window shorter than ``min_window``
        or with zero spread never flags.
        """
        prior = values.shift(1).rolling(self.window, min_periods=self.min_window)
        mean = prior.mean()
        std = prior.std(ddof=0)
        std = std.where(std > _STD_TOLERANCE * np.maximum(1.0, mean.abs()))
        z_scores = (values - mean) / std
        return z_scores.abs() > self.z_threshold

    def _filter(
        self, frame: pd.DataFrame, variable: str, alpha: float
    ) -> NoiseFilteringResult:
        values = numeric_column(frame, variable).to_numpy()
        observed = ~np.isnan(values)
        positions = np.flatnonzero(observed)

        ewma = self.state.ensure_filter(variable, alpha)
        ewma.alpha = alpha

        # The window holds raw values, so the test does not depend on the EWMA
        flagged = self.outlier_mask(pd.Series(values[positions])).to_numpy()
        outliers = [int(i) for i in positions[flagged]]

        smoothed = np.full(values.shape, np.nan)
        for i in positions:
            value = float(values[i])
            # Filter forward regardless: outliers still advance the state
            if ewma.current_value is None:
                ewma.current_value = value
            else:
                ewma.current_value = alpha * value + (1 - alpha) * ewma.current_value
            smoothed[i] = ewma.current_value

        if observed.any():
            ewma.last_updated = utc_now()

        filtered = frame.copy()
        if variable in filtered.columns:
            filtered[variable] = pd.Series(smoothed, index=frame.index).where(
                observed, frame[variable]
            )
        filtered = filtered.drop(index=frame.index[outliers])

        kept = observed.copy()
        kept[outliers] = False
        original_variance = _variance(values[observed])
        filtered_variance = _variance(smoothed[kept])
        noise_reduction = (
            (original_variance - filtered_variance) / original_variance
            if original_variance > 0
            else 0.0
        )

        return NoiseFilteringResult(
            variable=variable,
            filtered_data=filtered,
            removed_outliers=outliers,
            smoothing_metrics=SmoothingMetrics(
                original_variance=original_variance,
                filtered_variance=filtered_variance,
                noise_reduction=noise_reduction,
            ),
        )
