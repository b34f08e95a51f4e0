# backend/discovery/services/trust_service.py
"""
Explainable provider trust scoring.

Trust Formula:
    raw = (
        0.25 × verification +
        0.20 × job_completion +
        0.20 × review +
        0.15 × response_rate +
        0.10 × address_confidence
    ) - 0.20 × incident_penalty

    trust_score = clamp(raw, 0, 1)

Every sub-score is clamped to [0, 1] and returned in the breakdown so a
ranking decision can always be explained to the provider and the searcher.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import VerificationLevel
from ..models.catalog import Provider

WEIGHT_VERIFICATION = 0.25
WEIGHT_JOB_COMPLETION = 0.20
WEIGHT_REVIEW = 0.20
WEIGHT_RESPONSE_RATE = 0.15
WEIGHT_ADDRESS_CONFIDENCE = 0.10
WEIGHT_INCIDENT_PENALTY = 0.20

PENALTY_PER_INCIDENT = 0.2

VERIFICATION_SCORES: Dict[VerificationLevel, float] = {
    VerificationLevel.TRUSTED: 1.0,
    VerificationLevel.BASIC: 0.5,
    VerificationLevel.NONE: 0.0,
}


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _number(value: Any, default: float = 0.0) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    return float(value)


@dataclass(frozen=True)
class JobStats:
    accepted: int = 0
    completed: int = 0


@dataclass(frozen=True)
class TrustContext:
    """Activity signals gathered for a provider by the calling layer."""

    stats: Optional[JobStats] = None
    reviews: Sequence[Any] = field(default_factory=tuple)
    response_rate: float = 0.0
    incidents: int = 0

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TrustContext":
        data = data or {}
        raw_stats = data.get("stats")
        stats = None
        if isinstance(raw_stats, JobStats):
            stats = raw_stats
        elif isinstance(raw_stats, Mapping):
            stats = JobStats(
                accepted=int(_number(raw_stats.get("accepted"))),
                completed=int(_number(raw_stats.get("completed"))),
            )
        reviews = data.get("reviews")
        return cls(
            stats=stats,
            reviews=tuple(reviews) if isinstance(reviews, (list, tuple)) else (),
            response_rate=_number(data.get("response_rate")),
            incidents=int(_number(data.get("incidents"))),
        )


@dataclass(frozen=True)
class TrustBreakdown:
    verification_score: float
    job_completion_score: float
    review_score: float
    response_rate_score: float
    address_confidence_score: float
    incident_penalty: float
    raw: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class TrustResult:
    trust_score: float
    breakdown: TrustBreakdown

    def to_dict(self) -> Dict[str, Any]:
        return {"trust_score": self.trust_score, "breakdown": self.breakdown.to_dict()}


def compute_verification_score(provider: Optional[Provider]) -> float:
    if provider is None:
        return 0.0
    return VERIFICATION_SCORES.get(provider.verification_level, 0.0)


def compute_completion_score(stats: Optional[JobStats]) -> float:
    """Share of accepted jobs that were completed; no activity scores 0."""
    if stats is None or stats.accepted <= 0:
        return 0.0
    return clamp(stats.completed / stats.accepted)


def _rating_of(review: Any) -> float:
    if isinstance(review, Mapping):
        return _number(review.get("rating"))
    return _number(getattr(review, "rating", None))


def compute_review_score(reviews: Sequence[Any]) -> float:
    """Mean rating mapped from the 1-5 star scale onto 0-1."""
    if not reviews:
        return 0.0
    mean = sum(_rating_of(r) for r in reviews) / len(reviews)
    return clamp((mean - 1) / 4)


def compute_response_rate_score(rate: Any) -> float:
    return clamp(_number(rate))


def compute_address_confidence_score(provider: Optional[Provider]) -> float:
    if provider is None or provider.address_confidence is None:
        return 0.0
    return clamp(provider.address_confidence / 100)


def compute_incident_penalty(incidents: Any) -> float:
    """Each incident costs 0.2, reaching the full penalty at five."""
    count = _number(incidents)
    if count <= 0:
        return 0.0
    return clamp(count * PENALTY_PER_INCIDENT)


def compute_trust_score(
    provider: Optional[Provider],
    context: Optional[TrustContext | Mapping[str, Any]] = None,
) -> TrustResult:
    """
    Compute a provider's trust score with its full breakdown.

    Args:
        provider: Provider record (None scores as an unverified provider)
        context: Job stats, reviews, response rate and incident count;
            a plain mapping is accepted

    Returns:
        TrustResult with trust_score in [0, 1]
    """
    if not isinstance(context, TrustContext):
        context = TrustContext.from_dict(context)

    verification_score = compute_verification_score(provider)
    job_completion_score = compute_completion_score(context.stats)
    review_score = compute_review_score(context.reviews)
    response_rate_score = compute_response_rate_score(context.response_rate)
    address_confidence_score = compute_address_confidence_score(provider)
    incident_penalty = compute_incident_penalty(context.incidents)

    raw = (
        WEIGHT_VERIFICATION * verification_score
        + WEIGHT_JOB_COMPLETION * job_completion_score
        + WEIGHT_REVIEW * review_score
        + WEIGHT_RESPONSE_RATE * response_rate_score
        + WEIGHT_ADDRESS_CONFIDENCE * address_confidence_score
        - WEIGHT_INCIDENT_PENALTY * incident_penalty
    )

    return TrustResult(
        trust_score=clamp(raw),
        breakdown=TrustBreakdown(
            verification_score=verification_score,
            job_completion_score=job_completion_score,
            review_score=review_score,
            response_rate_score=response_rate_score,
            address_confidence_score=address_confidence_score,
            incident_penalty=incident_penalty,
            raw=raw,
        ),
    )
