"""Statistical primitives for pairwise edge scoring.

Includes the Pearson correlation, bootstrap-interval overlap, the
permutation test, and the conditional-independence proxies used to
moderate correlation into a causal-strength score.
"""

from abc import ABC, abstractmethod
from typing import Type

import numpy as np
import pandas as pd

from .errors import ConfigurationError


def pearson_correlation(x: np.ndarray, y: np.ndarray) -> float:
    """Pearson correlation from raw sums.

    r = (nΣxy − ΣxΣy) / sqrt[(nΣx² − (Σx)²)(nΣy² − (Σy)²)]

    Returns 0.0 for empty or mismatched inputs and for a zero denominator,
    so a constant series never produces NaN.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    n = x.size
    if n == 0 or n != y.size:
        return 0.0
    # A constant series has zero variance; sums alone can leave rounding residue
    if np.ptp(x) == 0 or np.ptp(y) == 0:
        return 0.0

    sum_x = x.sum()
    sum_y = y.sum()
    numerator = n * np.dot(x, y) - sum_x * sum_y
    denominator_sq = (n * np.dot(x, x) - sum_x**2) * (n * np.dot(y, y) - sum_y**2)
    if denominator_sq <= 0:
        return 0.0

    r = numerator / np.sqrt(denominator_sq)
    return float(np.clip(r, -1.0, 1.0))


def interval_overlap(
    first: tuple[float, float],
    second: tuple[float, float],
) -> float:
    """Fraction of the wider interval covered by the intersection.

    Disjoint intervals give 0.0 and identical intervals give 1.0.
    """
    low_1, high_1 = first
    low_2, high_2 = second

    overlap_low = max(low_1, low_2)
    overlap_high = min(high_1, high_2)
    if overlap_high < overlap_low:
        return 0.0

    total = max(high_1 - low_1, high_2 - low_2)
    if total <= 0:
        # Both intervals are single points and they coincide
        return 1.0
    return float(min((overlap_high - overlap_low) / total, 1.0))


def permutation_p_value(
    x: np.ndarray,
    y: np.ndarray,
    n_permutations: int,
    rng: np.random.Generator,
) -> float:
    """Permutation test of |correlation| by shuffling ``y``.

    Returns:
        Share of shuffles whose |r| is at least the observed |r|; 1.0 when
        there is no data.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.size == 0 or y.size == 0:
        return 1.0

    observed = abs(pearson_correlation(x, y))
    extreme = 0
    for _ in range(n_permutations):
        if abs(pearson_correlation(x, rng.permutation(y))) >= observed:
            extreme += 1
    return extreme / n_permutations


def complete_pair(data: pd.DataFrame, source: str, target: str) -> pd.DataFrame:
    """Rows where both variables are observed."""
    return data[[source, target]].dropna()


# ─── Conditional-independence proxies ───────────────────────────────────────

_PROXIES: dict[str, Type["IndependenceProxy"]] = {}


def register_independence_proxy(name: str):
    """Decorator to register a proxy class under ``name``.

    Usage:
        @register_independence_proxy("correlation")
        class CorrelationComplementProxy(IndependenceProxy):
            ...
    """
    def decorator(cls: Type["IndependenceProxy"]) -> Type["IndependenceProxy"]:
        cls.NAME = name
        _PROXIES[name] = cls
        return cls
    return decorator


def get_independence_proxy(name: str) -> "IndependenceProxy":
    """Instantiate the registered proxy called ``name``."""
    try:
        return _PROXIES[name]()
    except KeyError:
        raise ConfigurationError(
            f"Unknown independence proxy: {name}. Available: {', '.join(sorted(_PROXIES))}"
        ) from None


def available_independence_proxies() -> list[str]:
    return sorted(_PROXIES)


class IndependenceProxy(ABC):
    """Score in [0, 1] of how independent two variables look.

    Higher means more independent. Causal strength is scaled by
    ``1 - independence``.
    """

    NAME: str = "base"

    @abstractmethod
    def independence(self, data: pd.DataFrame, source: str, target: str) -> float:
        """Independence score for ``source`` and ``target`` in ``data``."""


@register_independence_proxy("correlation")
class CorrelationComplementProxy(IndependenceProxy):
    """``1 - |r|`` on the pairwise-complete rows.

    A stand-in for a real conditioning-set test: it ignores every other
    variable.
    """

    def independence(self, data: pd.DataFrame, source: str, target: str) -> float:
        pair = complete_pair(data, source, target)
        if pair.empty:
            return 0.0
        r = pearson_correlation(pair[source].to_numpy(), pair[target].to_numpy())
        return 1.0 - abs(r)


@register_independence_proxy("partial_correlation")
class PartialCorrelationProxy(IndependenceProxy):
    """``1 - |partial r|`` given all remaining variables.

    Both variables are regressed on the others (with intercept) and the
    residuals are correlated. Falls back to the marginal correlation when
    there is nothing to condition on.
    """

    def independence(self, data: pd.DataFrame, source: str, target: str) -> float:
        conditioning = [c for c in data.columns if c not in (source, target)]
        complete = data[[source, target, *conditioning]].dropna()
        if complete.empty:
            return 0.0

        x = complete[source].to_numpy(dtype=float)
        y = complete[target].to_numpy(dtype=float)

        if conditioning and len(complete) > len(conditioning) + 1:
            z = complete[conditioning].to_numpy(dtype=float)
            z_with_const = np.column_stack([np.ones(len(complete)), z])
            try:
                beta_x = np.linalg.lstsq(z_with_const, x, rcond=None)[0]
                beta_y = np.linalg.lstsq(z_with_const, y, rcond=None)[0]
            except np.linalg.LinAlgError:
                return 1.0  # Assume independent if the regression fails
            x = x - z_with_const @ beta_x
            y = y - z_with_const @ beta_y

        return 1.0 - abs(pearson_correlation(x, y))
