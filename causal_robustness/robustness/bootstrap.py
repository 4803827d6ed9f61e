"""Bootstrap percentile confidence intervals for variable means."""

import math
from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pandas as pd

from causal_robustness.logging_config.structured import get_logger

from .cancellation import CancellationToken
from .errors import BootstrapError, CausalRobustnessError
from .types import BootstrapConfig, BootstrapResult

logger = get_logger(__name__)


def percentile_bounds(n: int, confidence_level: float) -> tuple[int, int]:
    """Indices of the lower and upper bounds in ``n`` sorted statistics."""
    lower = math.floor((1 - confidence_level) / 2 * n)
    upper = math.ceil((1 + confidence_level) / 2 * n) - 1
    return max(lower, 0), min(max(upper, lower), n - 1)


class BootstrapEstimator:
    """Resamples each variable with replacement to bound its mean.

    Each variable draws from its own child of a ``SeedSequence`` rooted at
    ``random_seed``, so intervals are reproducible regardless of thread
    scheduling.
    """

    def __init__(self, config: BootstrapConfig, max_workers: int | None = None):
        """Initialize the estimator.

        Args:
            config: Sample size, sample count, confidence level and seed
            max_workers: Thread pool size (None for the executor default)
        """
        self.config = config
        self.max_workers = max_workers

    def resample_means(self, values: np.ndarray, rng: np.random.Generator) -> np.ndarray:
        """Sorted means of ``num_samples`` resamples of ``sample_size``."""
        draws = rng.choice(
            values,
            size=(self.config.num_samples, self.config.sample_size),
            replace=True,
        )
        return np.sort(draws.mean(axis=1))

    def interval(self, values: np.ndarray, rng: np.random.Generator) -> tuple[float, float]:
        """Percentile interval of the resampled means."""
        stats = self.resample_means(values, rng)
        lower, upper = percentile_bounds(stats.size, self.config.confidence_level)
        return float(stats[lower]), float(stats[upper])

    def estimate(
        self,
        data: pd.DataFrame,
        variables: list[str],
        seed: np.random.SeedSequence | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> BootstrapResult:
        """Compute a confidence interval for every variable with enough data.

        Args:
            data: Cleaned numeric observations
            variables: Variables to bound
            seed: Root seed sequence (defaults to ``config.random_seed``)
            cancel_token: Checked before each variable

        Returns:
            BootstrapResult; variables with fewer than ``sample_size``
            values are listed in ``skipped_variables``
        """
        if seed is None:
            seed = np.random.SeedSequence(self.config.random_seed)
        # Spawn per variable up front so seeds depend only on position
        child_seeds = seed.spawn(len(variables))

        samples: dict[str, np.ndarray] = {}
        skipped: list[str] = []
        try:
            for variable in variables:
                column = data[variable] if variable in data.columns else pd.Series(dtype=float)
                values = pd.to_numeric(column, errors="coerce").dropna().to_numpy(dtype=float)
                if values.size < self.config.sample_size:
                    skipped.append(variable)
                    logger.info(
                        "bootstrap_variable_skipped",
                        variable=variable,
                        n_values=int(values.size),
                        sample_size=self.config.sample_size,
                    )
                    continue
                samples[variable] = values

            def _run(variable: str, child: np.random.SeedSequence) -> tuple[float, float]:
                if cancel_token is not None:
                    cancel_token.raise_if_cancelled()
                return self.interval(samples[variable], np.random.default_rng(child))

            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = {
                    variable: executor.submit(_run, variable, child)
                    for variable, child in zip(variables, child_seeds)
                    if variable in samples
                }
                intervals = {variable: future.result() for variable, future in futures.items()}
        except CausalRobustnessError:
            raise
        except Exception as e:
            raise BootstrapError(str(e)) from e

        return BootstrapResult(confidence_intervals=intervals, skipped_variables=skipped)
