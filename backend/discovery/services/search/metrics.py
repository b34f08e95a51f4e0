# backend/discovery/services/search/metrics.py
"""
Prometheus metrics for discovery search.

Provides observability for:
- Which branch served a search (explicit, no-location, tiered)
- Tier sizes before expansion
- Result counts and zero-result searches
"""
from __future__ import annotations

from typing import Mapping

from prometheus_client import Counter, Histogram

from discovery.monitoring.prometheus_metrics import REGISTRY

SEARCH_REQUESTS = Counter(
    "discovery_search_requests_total",
    "Total discovery searches by branch",
    ["branch"],  # explicit | no_location | tiered
    registry=REGISTRY,
)

SEARCH_RESULT_COUNT = Histogram(
    "discovery_search_result_count",
    "Number of search results returned",
    ["branch"],
    registry=REGISTRY,
    buckets=[0, 1, 5, 10, 20, 50, 100],
)

SEARCH_ZERO_RESULTS = Counter(
    "discovery_search_zero_results_total",
    "Count of searches returning zero results",
    ["branch", "has_keywords"],
    registry=REGISTRY,
)

TIER_CANDIDATES = Histogram(
    "discovery_search_tier_candidates",
    "Candidates classified into each locality tier",
    ["tier"],
    registry=REGISTRY,
    buckets=[0, 1, 5, 10, 20, 50, 100, 500],
)

TIER_EXPANSIONS = Counter(
    "discovery_search_tier_expansions_total",
    "Count of searches that pulled in a wider tier",
    ["tier"],
    registry=REGISTRY,
)


def record_search_metrics(
    branch: str,
    result_count: int,
    has_keywords: bool,
    tier_sizes: Mapping[int, int] | None = None,
    expanded_tiers: tuple[int, ...] = (),
) -> None:
    """Record all metrics for a search request."""
    SEARCH_REQUESTS.labels(branch=branch).inc()
    SEARCH_RESULT_COUNT.labels(branch=branch).observe(result_count)

    if result_count == 0:
        SEARCH_ZERO_RESULTS.labels(
            branch=branch, has_keywords="true" if has_keywords else "false"
        ).inc()

    for tier, size in (tier_sizes or {}).items():
        TIER_CANDIDATES.labels(tier=str(tier)).observe(size)

    for tier in expanded_tiers:
        TIER_EXPANSIONS.labels(tier=str(tier)).inc()
