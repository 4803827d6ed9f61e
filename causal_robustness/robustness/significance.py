"""Significance gates applied to candidate edges."""

from causal_robustness.config import Settings, get_settings

from .types import CausalEdge, SignificanceThresholds


def select_significant(
    edges: list[CausalEdge],
    confidence_level: float,
    min_confidence: float = 0.7,
) -> list[CausalEdge]:
    """Loose diagnostic gate: p < 1 - confidence_level and confidence > min."""
    max_p_value = 1 - confidence_level
    return [
        edge
        for edge in edges
        if edge.source != edge.target
        and edge.p_value < max_p_value
        and edge.confidence > min_confidence
    ]


class SignificanceFilter:
    """Authoritative gate deciding which edges are worth surfacing."""

    def __init__(self, thresholds: SignificanceThresholds | None = None):
        self.thresholds = thresholds or SignificanceThresholds()

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SignificanceFilter":
        settings = settings or get_settings()
        return cls(
            SignificanceThresholds(
                min_strength=settings.filter_min_strength,
                min_confidence=settings.filter_min_confidence,
                max_p_value=settings.filter_max_p_value,
            )
        )

    def passes(self, edge: CausalEdge) -> bool:
        t = self.thresholds
        if edge.source == edge.target:
            return False
        if edge.strength < t.min_strength:
            return False
        if edge.confidence < t.min_confidence:
            return False
        if edge.p_value > t.max_p_value:
            return False
        return True

    def apply(self, edges: list[CausalEdge]) -> list[CausalEdge]:
        return [edge for edge in edges if self.passes(edge)]
