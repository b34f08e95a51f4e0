"""
Discovery search services.

This module provides candidate filtering, locality tiers, ranking and the
search orchestrator.
"""

from discovery.services.search.config import (
    SearchConfig,
    get_search_config,
    reset_search_config,
    update_search_config,
)
from discovery.services.search.discovery_service import DiscoveryService, SearchResult
from discovery.services.search.filter_service import (
    Candidate,
    FilterResult,
    FilterService,
    classify_tier,
    union_tiers,
)
from discovery.services.search.location import estimate_distance_km, resolve_search_location
from discovery.services.search.price_extraction import extract_price
from discovery.services.search.ranking_service import (
    DEFAULT_WEIGHTS,
    RankingInputs,
    RankingService,
    ScoreComponents,
    ScoreResult,
    compute_final_score,
    distance_score,
    price_score,
)

__all__ = [
    # Config
    "SearchConfig",
    "get_search_config",
    "update_search_config",
    "reset_search_config",
    # Filtering
    "FilterService",
    "FilterResult",
    "Candidate",
    "classify_tier",
    "union_tiers",
    # Location
    "resolve_search_location",
    "estimate_distance_km",
    # Pricing
    "extract_price",
    # Ranking
    "RankingService",
    "RankingInputs",
    "ScoreComponents",
    "ScoreResult",
    "DEFAULT_WEIGHTS",
    "compute_final_score",
    "distance_score",
    "price_score",
    # Main service
    "DiscoveryService",
    "SearchResult",
]
