"""L1 soft-thresholding of centered variable values."""

import numpy as np
import pandas as pd

from causal_robustness.logging_config.structured import get_logger

from .errors import CausalRobustnessError, RegularizationError
from .types import RegularizationConfig

logger = get_logger(__name__)


def soft_threshold(values: np.ndarray, threshold: float) -> np.ndarray:
    """Shrinkage operator sign(x) * max(|x| - threshold, 0)."""
    return np.sign(values) * np.maximum(np.abs(values) - threshold, 0.0)


class L1Regularizer:
    """Shrinks small deviations from each variable's mean toward the mean.

    Deviations smaller than ``l1_lambda`` are treated as noise and zeroed;
    larger ones are reduced by ``l1_lambda``.
    """

    def __init__(self, config: RegularizationConfig):
        self.config = config

    def regularize(self, data: pd.DataFrame, variables: list[str]) -> pd.DataFrame:
        """Return a copy of ``data`` with each variable soft-thresholded.

        Missing values stay missing, non-numeric cells are left as they were
        and columns without numeric data are returned unchanged.
        """
        try:
            regularized = data.copy()
            for variable in variables:
                if variable not in regularized.columns:
                    continue
                column = pd.to_numeric(regularized[variable], errors="coerce")
                observed = column.notna()
                if not observed.any():
                    continue

                mean = column[observed].mean()
                shrunk = soft_threshold(
                    column[observed].to_numpy(dtype=float) - mean,
                    self.config.l1_lambda,
                )
                if pd.api.types.is_numeric_dtype(regularized[variable]):
                    regularized[variable] = regularized[variable].astype(float)
                # Non-numeric cells of a mixed column are left as they were
                regularized.loc[observed, variable] = shrunk + mean
        except CausalRobustnessError:
            raise
        except Exception as e:
            raise RegularizationError(str(e)) from e

        logger.debug(
            "regularization_applied",
            variables=len(variables),
            l1_lambda=self.config.l1_lambda,
        )
        return regularized
