# backend/discovery/services/search/discovery_service.py
"""
Tiered, location-aware discovery search.

Pipeline per request:
1. FilterService narrows the snapshot and applies the locality branch
2. Each candidate is enriched with a distance proxy, trust score and
   price/market summary
3. RankingService scores every candidate; the final order is by score,
   except for explicit-location searches which keep the within-scope
   placeholder order

Everything runs synchronously over one snapshot; nothing is written.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Callable, Dict, List, Optional

from discovery.core.enums import SearchTier
from discovery.models.catalog import Provider, ServiceListing
from discovery.models.search import SearchLocation, SearchQuery
from discovery.repositories.catalog_snapshot import CatalogSnapshot
from discovery.services.base import BaseService
from discovery.services.market_service import MarketSummary, aggregate_prices
from discovery.services.search.config import SearchConfig, get_search_config
from discovery.services.search.filter_service import (
    BRANCH_EXPLICIT,
    Candidate,
    FilterResult,
    FilterService,
)
from discovery.services.search.location import estimate_distance_km
from discovery.services.search.metrics import record_search_metrics
from discovery.services.search.price_extraction import extract_price
from discovery.services.search.ranking_service import (
    RankingInputs,
    RankingService,
    ScoreComponents,
)
from discovery.services.trust_service import TrustContext, TrustResult, compute_trust_score

logger = logging.getLogger(__name__)

TrustContextLoader = Callable[[Provider], Optional[TrustContext]]


@dataclass
class SearchResult:
    """A ranked listing with every signal that went into its score."""

    listing: ServiceListing
    provider: Provider
    tier: Optional[SearchTier]
    distance_km: Optional[float]
    price: Optional[float]
    market: Optional[MarketSummary]
    trust: TrustResult
    final_score: float
    score_components: ScoreComponents
    rank: int = 0  # 1-based position

    @property
    def id(self) -> str:
        return self.listing.id

    def to_dict(self) -> Dict[str, Any]:
        listing = self.listing
        return {
            "id": listing.id,
            "provider_id": listing.provider_id,
            "service_name": listing.service_name,
            "service_description": listing.service_description,
            "category_id": listing.category_id,
            "subcategory_id": listing.subcategory_id,
            "tags": sorted(listing.tags),
            "service_mode": listing.service_mode.value if listing.service_mode else None,
            "coverage_scope": listing.coverage_scope.value if listing.coverage_scope else None,
            "is_primary": listing.is_primary,
            "provider": {
                "id": self.provider.id,
                "display_name": self.provider.display_name,
                "provider_type": self.provider.provider_type,
                "location_country": self.provider.location_country,
                "location_state": self.provider.location_state,
                "location_city": self.provider.location_city,
                "verification_level": self.provider.verification_level.value,
            },
            "tier": self.tier.value if self.tier else None,
            "distance_km": self.distance_km,
            "price": self.price,
            "market": self.market.to_dict() if self.market else None,
            "trust": self.trust.to_dict(),
            "final_score": self.final_score,
            "score_components": self.score_components.to_dict(),
            "rank": self.rank,
        }


class DiscoveryService(BaseService):
    """
    Entry point for marketplace discovery.

    Usage:
        service = DiscoveryService(snapshot)
        results = service.search(SearchQuery(q="yoga", location=SearchLocation(city="Lagos")))

    The query is assumed valid (see schemas.search.SearchRequest); a query
    that matches nothing returns an empty list.
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        config: Optional[SearchConfig] = None,
        ranking_service: Optional[RankingService] = None,
        trust_context_loader: Optional[TrustContextLoader] = None,
    ) -> None:
        super().__init__(snapshot)
        self.snapshot: CatalogSnapshot = snapshot
        self.config = config or get_search_config()
        self.filter_service = FilterService(
            snapshot, min_results_threshold=self.config.min_results_threshold
        )
        self.ranking_service = ranking_service or RankingService(
            weights=self.config.ranking_weights,
            max_distance_km=self.config.max_distance_km,
        )
        self.trust_context_loader = trust_context_loader

    @BaseService.measure_operation("search")
    def search(self, query: SearchQuery) -> List[SearchResult]:
        """
        Run a discovery search.

        Args:
            query: Validated search query

        Returns:
            Annotated results, best first
        """
        filtered = self.filter_service.filter_candidates(query)
        location = query.location if query.has_location else None

        with self.measure_operation_context("score_candidates"):
            scored = [self._score_candidate(c, query, location) for c in filtered.candidates]

        if filtered.branch == BRANCH_EXPLICIT:
            # Placeholder within-scope order from FilterService is kept as-is
            ordered = scored
        else:
            ordered = self.ranking_service.rank(scored, key=lambda r: r.final_score)

        for position, result in enumerate(ordered, start=1):
            result.rank = position

        self._record(filtered, query, len(ordered))
        return ordered

    def _score_candidate(
        self,
        candidate: Candidate,
        query: SearchQuery,
        location: Optional[SearchLocation],
    ) -> SearchResult:
        """Calculate all signals and the final score for one candidate."""
        provider = candidate.provider
        config = self.config

        distance_km = estimate_distance_km(provider, location)
        relevance_score = (
            config.relevance_with_query if query.q else config.relevance_without_query
        )

        price = extract_price(self.snapshot.list_settings(candidate.service_id))
        market = aggregate_prices([price]) if price is not None else None

        trust = compute_trust_score(provider, self._trust_context(provider))

        score = self.ranking_service.score(
            RankingInputs(
                distance_km=distance_km,
                relevance_score=relevance_score,
                trust_score=trust.trust_score,
                price=price,
                market_avg=market.avg_price if market else None,
                availability_score=config.default_availability,
            )
        )

        return SearchResult(
            listing=candidate.listing,
            provider=provider,
            tier=candidate.tier,
            distance_km=distance_km,
            price=price,
            market=market,
            trust=trust,
            final_score=score.final_score,
            score_components=score.components,
        )

    def _trust_context(self, provider: Provider) -> Optional[TrustContext]:
        if self.trust_context_loader is None:
            return None
        try:
            return self.trust_context_loader(provider)
        except Exception:
            # Activity signals are optional; score the provider on its profile alone
            self.logger.warning(
                "Trust context unavailable for provider %s", provider.id, exc_info=True
            )
            return None

    def _record(self, filtered: FilterResult, query: SearchQuery, result_count: int) -> None:
        self.logger.info(
            "Discovery search served by %s branch: %d result(s) from %d listing(s)",
            filtered.branch,
            result_count,
            filtered.total_before_filter,
        )
        record_search_metrics(
            branch=filtered.branch,
            result_count=result_count,
            has_keywords=bool(query.q),
            tier_sizes=filtered.tier_sizes,
            expanded_tiers=filtered.expanded_tiers,
        )
