# backend/discovery/services/search/ranking_service.py
"""
Ranking service for discovery search results.
Combines five normalised signals into one explainable score.

Ranking Formula:
    final_score = clamp(
        0.35 × distance +
        0.30 × relevance +
        0.20 × trust +
        0.10 × price +
        0.05 × availability
    )

Design notes:
- Unknown distance scores 0: a provider we cannot place is not favoured
- Missing price or market data scores a neutral 0.5 so it cannot bias ranking
- Weights are configuration: unknown keys are ignored, missing keys default
- Ties keep their input order (stable sort)
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

# Ranking weights
WEIGHT_DISTANCE = 0.35
WEIGHT_RELEVANCE = 0.30
WEIGHT_TRUST = 0.20
WEIGHT_PRICE = 0.10
WEIGHT_AVAILABILITY = 0.05

DEFAULT_WEIGHTS: Dict[str, float] = {
    "distance": WEIGHT_DISTANCE,
    "relevance": WEIGHT_RELEVANCE,
    "trust": WEIGHT_TRUST,
    "price": WEIGHT_PRICE,
    "availability": WEIGHT_AVAILABILITY,
}

DEFAULT_MAX_DISTANCE_KM = 100.0
NEUTRAL_PRICE_SCORE = 0.5

T = TypeVar("T")


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def resolve_weights(weights: Optional[Mapping[str, Any]] = None) -> Dict[str, float]:
    """Merge caller overrides into the default weights, ignoring unknown keys."""
    resolved = dict(DEFAULT_WEIGHTS)
    if not weights:
        return resolved
    for key, value in weights.items():
        if key not in resolved:
            logger.debug("Ignoring unknown ranking weight %r", key)
            continue
        if value is None:
            continue
        resolved[key] = float(value)
    return resolved


def distance_score(
    distance_km: Optional[float],
    max_distance: float = DEFAULT_MAX_DISTANCE_KM,
) -> float:
    """
    Linear decay from 1.0 at 0 km to 0.0 at `max_distance`.

    Returns:
        0 when the distance is unknown
    """
    if distance_km is None:
        return 0.0
    return clamp01(1 - (distance_km / max_distance))


def price_score(price: Optional[float], market_avg: Optional[float]) -> float:
    """
    Score a price against the market average.

    Above-average prices lose score linearly (2× the average scores 0);
    at or below average scores 1 after clamping.

    Returns:
        0.5 (neutral) when price or a positive market average is missing
    """
    if price is None:
        return NEUTRAL_PRICE_SCORE
    if not market_avg or market_avg <= 0:
        return NEUTRAL_PRICE_SCORE
    ratio = (price - market_avg) / market_avg
    return clamp01(1 - ratio)


@dataclass(frozen=True)
class RankingInputs:
    """Raw signals for one candidate."""

    distance_km: Optional[float] = None
    relevance_score: float = 0.0
    trust_score: float = 0.0
    price: Optional[float] = None
    market_avg: Optional[float] = None
    availability_score: float = 0.0


@dataclass(frozen=True)
class ScoreComponents:
    """Normalised sub-scores (for transparency and weight tuning)."""

    distance: float
    relevance: float
    trust: float
    price: float
    availability: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    final_score: float
    components: ScoreComponents

    def to_dict(self) -> Dict[str, Any]:
        return {"final_score": self.final_score, "components": self.components.to_dict()}


def compute_final_score(
    inputs: RankingInputs,
    weights: Optional[Mapping[str, Any]] = None,
    max_distance: float = DEFAULT_MAX_DISTANCE_KM,
) -> ScoreResult:
    """
    Combine the ranking signals into a final score in [0, 1].

    Args:
        inputs: Raw signals for the candidate
        weights: Optional partial weight overrides
        max_distance: Distance at which the distance score reaches zero

    Returns:
        ScoreResult with the final score and every sub-score
    """
    w = resolve_weights(weights)

    components = ScoreComponents(
        distance=distance_score(inputs.distance_km, max_distance),
        relevance=clamp01(inputs.relevance_score),
        trust=clamp01(inputs.trust_score),
        price=price_score(inputs.price, inputs.market_avg),
        availability=clamp01(inputs.availability_score),
    )

    final = (
        w["distance"] * components.distance
        + w["relevance"] * components.relevance
        + w["trust"] * components.trust
        + w["price"] * components.price
        + w["availability"] * components.availability
    )

    return ScoreResult(final_score=clamp01(final), components=components)


class RankingService:
    """
    Service for ranking discovery candidates by the weighted signals.

    Usage:
        ranking = RankingService(weights={"price": 0.2})
        ordered = ranking.rank(results, key=lambda r: r.final_score)
    """

    def __init__(
        self,
        weights: Optional[Mapping[str, Any]] = None,
        max_distance_km: float = DEFAULT_MAX_DISTANCE_KM,
    ) -> None:
        self.weights = resolve_weights(weights)
        self.max_distance_km = max_distance_km

    def score(self, inputs: RankingInputs) -> ScoreResult:
        return compute_final_score(inputs, self.weights, self.max_distance_km)

    @staticmethod
    def rank(items: Sequence[T], key: Callable[[T], float]) -> List[T]:
        """Sort by score descending; equal scores keep their input order."""
        return sorted(items, key=key, reverse=True)
