"""Pairwise directed edge scoring."""

from concurrent.futures import ThreadPoolExecutor
from itertools import permutations

import numpy as np
import pandas as pd

from causal_robustness.config import Settings, get_settings
from causal_robustness.logging_config.structured import get_logger

from .cancellation import CancellationToken
from .errors import CausalRobustnessError, DiscoveryCancelledError, EdgeDiscoveryError
from .statistics import (
    CorrelationComplementProxy,
    IndependenceProxy,
    complete_pair,
    get_independence_proxy,
    interval_overlap,
    pearson_correlation,
    permutation_p_value,
)
from .types import DIRECT, BootstrapResult, CausalEdge

logger = get_logger(__name__)

# Confidence assigned when either variable has no bootstrap interval
MISSING_INTERVAL_CONFIDENCE = 0.5


class PairwiseEdgeDiscoverer:
    """Scores every ordered variable pair as a candidate edge.

    For a pair (source, target):
    - strength: |r| scaled by (1 - independence proxy), clamped to [0, 1]
    - confidence: 1 - overlap of the two bootstrap intervals
    - p-value: permutation test shuffling the target series

    Pairs are independent and run on a thread pool; the edge list keeps
    pair order.
    """

    def __init__(
        self,
        proxy: IndependenceProxy | None = None,
        min_strength: float = 0.1,
        n_permutations: int = 100,
        bootstrap_samples: int = 0,
        max_workers: int | None = None,
    ):
        """Initialize the discoverer.

        Args:
            proxy: Conditional-independence proxy (default ``1 - |r|``)
            min_strength: Edges at or below this strength are dropped
            n_permutations: Shuffles per permutation test
            bootstrap_samples: Resample count recorded on each edge
            max_workers: Thread pool size (None for the executor default)
        """
        self.proxy = proxy or CorrelationComplementProxy()
        self.min_strength = min_strength
        self.n_permutations = n_permutations
        self.bootstrap_samples = bootstrap_samples
        self.max_workers = max_workers

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        bootstrap_samples: int = 0,
        proxy: IndependenceProxy | None = None,
    ) -> "PairwiseEdgeDiscoverer":
        settings = settings or get_settings()
        return cls(
            proxy=proxy or get_independence_proxy(settings.independence_proxy),
            min_strength=settings.min_edge_strength,
            n_permutations=settings.n_permutations,
            bootstrap_samples=bootstrap_samples,
            max_workers=settings.max_workers,
        )

    def strength(self, data: pd.DataFrame, source: str, target: str) -> float:
        pair = complete_pair(data, source, target)
        if pair.empty:
            return 0.0
        r = pearson_correlation(pair[source].to_numpy(), pair[target].to_numpy())
        independence = self.proxy.independence(data, source, target)
        return float(np.clip(abs(r) * (1.0 - independence), 0.0, 1.0))

    @staticmethod
    def confidence(
        source: str, target: str, bootstrap_result: BootstrapResult
    ) -> float:
        source_interval = bootstrap_result.confidence_intervals.get(source)
        target_interval = bootstrap_result.confidence_intervals.get(target)
        if source_interval is None or target_interval is None:
            return MISSING_INTERVAL_CONFIDENCE
        overlap = interval_overlap(source_interval, target_interval)
        return float(np.clip(1.0 - overlap, 0.0, 1.0))

    def p_value(
        self,
        data: pd.DataFrame,
        source: str,
        target: str,
        rng: np.random.Generator,
    ) -> float:
        pair = complete_pair(data, source, target)
        return permutation_p_value(
            pair[source].to_numpy(dtype=float),
            pair[target].to_numpy(dtype=float),
            self.n_permutations,
            rng,
        )

    def score_pair(
        self,
        data: pd.DataFrame,
        source: str,
        target: str,
        bootstrap_result: BootstrapResult,
        rng: np.random.Generator,
        cancel_token: CancellationToken | None = None,
    ) -> CausalEdge | None:
        """Score one ordered pair; None when below the strength gate."""
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        strength = self.strength(data, source, target)
        if strength <= self.min_strength:
            return None

        confidence = self.confidence(source, target, bootstrap_result)
        p_value = self.p_value(data, source, target, rng)

        return CausalEdge(
            source=source,
            target=target,
            edge_type=DIRECT,
            strength=strength,
            confidence=confidence,
            p_value=p_value,
            bootstrap_samples=self.bootstrap_samples,
        )

    def discover(
        self,
        data: pd.DataFrame,
        variables: list[str],
        bootstrap_result: BootstrapResult,
        seed: np.random.SeedSequence | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> list[CausalEdge]:
        """Score all ordered pairs of distinct variables.

        Args:
            data: Cleaned numeric observations
            variables: Variables to pair up
            bootstrap_result: Intervals used for the confidence score
            seed: Root seed sequence for the permutation tests
            cancel_token: Checked before each pair

        Returns:
            Candidate edges above the minimum strength, in pair order
        """
        unique = list(dict.fromkeys(variables))
        pairs = list(permutations(unique, 2))
        if not pairs:
            return []

        if seed is None:
            seed = np.random.SeedSequence()
        child_seeds = seed.spawn(len(pairs))

        try:
            numeric = data.reindex(columns=unique)
            numeric = numeric.apply(pd.to_numeric, errors="coerce")

            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                futures = [
                    executor.submit(
                        self.score_pair,
                        numeric,
                        source,
                        target,
                        bootstrap_result,
                        np.random.default_rng(child),
                        cancel_token,
                    )
                    for (source, target), child in zip(pairs, child_seeds)
                ]
                try:
                    scored = [future.result() for future in futures]
                except DiscoveryCancelledError:
                    for future in futures:
                        future.cancel()
                    logger.info("edge_discovery_cancelled", n_pairs=len(pairs))
                    raise
        except CausalRobustnessError:
            raise
        except Exception as e:
            raise EdgeDiscoveryError(str(e)) from e

        edges = [edge for edge in scored if edge is not None]
        logger.debug("edges_scored", n_pairs=len(pairs), n_edges=len(edges))
        return edges
