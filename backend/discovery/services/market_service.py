# backend/discovery/services/market_service.py
"""
Passive market price aggregation.

Summarises observed prices for a service or category after trimming
outliers with the interquartile-range fence:

    keep v  where  Q1 - 1.5 × IQR <= v <= Q3 + 1.5 × IQR

Quartiles use linear interpolation between closest ranks
(idx = (n - 1) × p), so one or two observations, or identical values,
collapse the fence onto the data instead of rejecting it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
import math
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

IQR_FENCE_MULTIPLIER = 1.5


@dataclass(frozen=True)
class Quartiles:
    q1: float
    q2: float
    q3: float

    @property
    def iqr(self) -> float:
        return self.q3 - self.q1


@dataclass(frozen=True)
class MarketSummary:
    """Outlier-filtered price range for a market."""

    min_price: float
    avg_price: float
    max_price: float
    sample_size: int
    last_updated: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min_price": self.min_price,
            "avg_price": self.avg_price,
            "max_price": self.max_price,
            "sample_size": self.sample_size,
            "last_updated": self.last_updated.isoformat(),
        }


def _percentile(sorted_values: Sequence[float], p: float) -> float:
    idx = (len(sorted_values) - 1) * p
    lo, hi = math.floor(idx), math.ceil(idx)
    if lo == hi:
        return float(sorted_values[lo])
    return sorted_values[lo] * (hi - idx) + sorted_values[hi] * (idx - lo)


def compute_quartiles(sorted_values: Sequence[float]) -> Quartiles:
    """Interpolated Q1/median/Q3 of an already sorted, non-empty sequence."""
    return Quartiles(
        q1=_percentile(sorted_values, 0.25),
        q2=_percentile(sorted_values, 0.5),
        q3=_percentile(sorted_values, 0.75),
    )


def _numeric(values: Any) -> List[float]:
    if values is None or isinstance(values, (str, bytes)):
        return []
    try:
        items = list(values)
    except TypeError:
        return []
    clean = []
    for value in items:
        if isinstance(value, bool) or not isinstance(value, Real):
            continue
        number = float(value)
        if math.isfinite(number):
            clean.append(number)
    return clean


def exclude_outliers(values: Any) -> List[float]:
    """Return the sorted values inside the IQR fence."""
    sorted_values = sorted(_numeric(values))
    if not sorted_values:
        return []
    quartiles = compute_quartiles(sorted_values)
    lower = quartiles.q1 - IQR_FENCE_MULTIPLIER * quartiles.iqr
    upper = quartiles.q3 + IQR_FENCE_MULTIPLIER * quartiles.iqr
    return [v for v in sorted_values if lower <= v <= upper]


def aggregate_prices(prices: Any) -> Optional[MarketSummary]:
    """
    Summarise observed prices, ignoring outliers.

    Args:
        prices: Observed prices; non-numeric entries are ignored

    Returns:
        MarketSummary over the retained values, or None when there is
        nothing usable to summarise
    """
    # Materialise once; `prices` may be a one-shot iterator
    observed = _numeric(prices)
    clean = exclude_outliers(observed)
    if not clean:
        return None

    rejected = len(observed) - len(clean)
    if rejected:
        logger.debug("Excluded %d outlier price(s) from market aggregate", rejected)

    return MarketSummary(
        min_price=clean[0],
        avg_price=sum(clean) / len(clean),
        max_price=clean[-1],
        sample_size=len(clean),
    )
