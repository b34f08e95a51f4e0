# backend/discovery/services/search/filter_service.py
"""
Candidate filtering and locality tiers for discovery search.

Filter Order:
1. Mandatory - active listing with an active, resolvable provider
2. Exact filters - service_mode, coverage_scope, category/subcategory
3. Keywords - text, tags, or category name (expanded to descendants)

Then exactly one locality branch applies:
- Explicit location: hard filter at the most specific level, no tiers
- No location: only national/global or remote listings
- Located: classify into tiers and expand until the threshold is met

Tiers (first match wins):
  1 LOCAL         shares city/state/country, physical or hybrid
  2 LOCAL_REMOTE  shares country, remote, local or national scope
  3 BROAD         national/global scope, or remote outside the country
"""
from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Dict, List, Optional, Sequence, Set, Tuple

from discovery.core.enums import CoverageScope, SearchTier, ServiceMode
from discovery.models.catalog import Provider, ServiceListing
from discovery.models.search import SearchLocation, SearchQuery
from discovery.repositories.catalog_snapshot import CatalogSnapshot
from discovery.services.category_tree import CategoryTree
from discovery.services.search.location import matches_level

logger = logging.getLogger(__name__)

# Configuration
MIN_RESULTS_BEFORE_EXPANSION = 5

BRANCH_EXPLICIT = "explicit"
BRANCH_NO_LOCATION = "no_location"
BRANCH_TIERED = "tiered"

_IN_PERSON_MODES = frozenset({ServiceMode.PHYSICAL, ServiceMode.HYBRID})
_BROAD_SCOPES = frozenset({CoverageScope.NATIONAL, CoverageScope.GLOBAL})
_DOMESTIC_SCOPES = frozenset({CoverageScope.LOCAL, CoverageScope.NATIONAL})


@dataclass
class Candidate:
    """A listing that passed filtering, paired with its provider."""

    listing: ServiceListing
    provider: Provider
    tier: Optional[SearchTier] = None

    @property
    def service_id(self) -> str:
        return self.listing.id


@dataclass
class FilterResult:
    """Result of candidate filtering."""

    candidates: List[Candidate]
    branch: str
    total_before_filter: int
    filters_applied: List[str] = field(default_factory=list)
    tier_sizes: Dict[int, int] = field(default_factory=dict)
    expanded_tiers: Tuple[int, ...] = ()


def placeholder_scope_score(listing: ServiceListing) -> int:
    """Within-scope ordering used for explicit-location searches."""
    return len(listing.service_name or "") + len(listing.service_description or "")


def classify_tier(candidate: Candidate, location: SearchLocation) -> Optional[SearchTier]:
    """Return the first tier the candidate qualifies for, or None."""
    listing, provider = candidate.listing, candidate.provider
    same_city = location.same_city(provider.location_city)
    same_state = location.same_state(provider.location_state)
    same_country = location.same_country(provider.location_country)

    if (same_city or same_state or same_country) and listing.service_mode in _IN_PERSON_MODES:
        return SearchTier.LOCAL

    if (
        same_country
        and listing.service_mode is ServiceMode.REMOTE
        and listing.coverage_scope in _DOMESTIC_SCOPES
    ):
        return SearchTier.LOCAL_REMOTE

    if listing.coverage_scope in _BROAD_SCOPES or (
        listing.service_mode is ServiceMode.REMOTE and not same_country
    ):
        return SearchTier.BROAD

    return None


def union_tiers(
    tiers: Dict[SearchTier, List[Candidate]],
    threshold: int,
) -> Tuple[List[Candidate], Tuple[int, ...]]:
    """
    Start from Tier 1 and add wider tiers while below `threshold`.

    Returns:
        (de-duplicated candidates in tier order, tiers pulled in by expansion)
    """
    results: List[Candidate] = []
    seen: Set[str] = set()
    expanded: List[int] = []

    def _push(bucket: Sequence[Candidate]) -> None:
        for candidate in bucket:
            if candidate.service_id in seen:
                continue
            seen.add(candidate.service_id)
            results.append(candidate)

    _push(tiers.get(SearchTier.LOCAL, []))
    for tier in (SearchTier.LOCAL_REMOTE, SearchTier.BROAD):
        if len(results) >= threshold:
            break
        expanded.append(tier.value)
        _push(tiers.get(tier, []))

    return results, tuple(expanded)


class FilterService:
    """
    Service for narrowing the catalog snapshot to search candidates.

    Usage:
        result = FilterService(snapshot, min_results_threshold=5).filter_candidates(query)
    """

    def __init__(
        self,
        snapshot: CatalogSnapshot,
        min_results_threshold: int = MIN_RESULTS_BEFORE_EXPANSION,
    ) -> None:
        self.snapshot = snapshot
        self.min_results_threshold = min_results_threshold
        self.category_tree = CategoryTree(snapshot.list_categories())

    def filter_candidates(self, query: SearchQuery) -> FilterResult:
        """
        Apply all filters and the locality branch for `query`.

        Args:
            query: Validated search query

        Returns:
            FilterResult with candidates in branch order (not final rank order)
        """
        services = self.snapshot.list_services()
        filters_applied: List[str] = []
        working = self._apply_mandatory(services)

        if query.service_mode is not None:
            working = [c for c in working if c.listing.service_mode == query.service_mode]
            filters_applied.append("service_mode")
        if query.coverage_scope is not None:
            working = [c for c in working if c.listing.coverage_scope == query.coverage_scope]
            filters_applied.append("coverage_scope")
        if query.category_id:
            working = self._filter_category(working, query.category_id)
            filters_applied.append("category")
        if query.subcategory_id:
            working = self._filter_category(working, query.subcategory_id)
            filters_applied.append("subcategory")
        if query.q:
            working = self._filter_keywords(working, query.q)
            filters_applied.append("keywords")

        if query.explicit_location:
            candidates = self._explicit_location(working, query.location)
            return FilterResult(
                candidates=candidates,
                branch=BRANCH_EXPLICIT,
                total_before_filter=len(services),
                filters_applied=filters_applied + ["explicit_location"],
            )

        location = query.location
        if location is None or location.is_empty:
            candidates = [
                c
                for c in working
                if c.listing.coverage_scope in _BROAD_SCOPES
                or c.listing.service_mode is ServiceMode.REMOTE
            ]
            return FilterResult(
                candidates=candidates,
                branch=BRANCH_NO_LOCATION,
                total_before_filter=len(services),
                filters_applied=filters_applied,
            )

        tiers = self.classify(working, location)
        candidates, expanded = union_tiers(tiers, self.min_results_threshold)
        tier_sizes = {tier.value: len(bucket) for tier, bucket in tiers.items()}
        logger.debug(
            "Tier sizes %s, threshold %d, expanded into %s",
            tier_sizes,
            self.min_results_threshold,
            expanded or "none",
        )
        return FilterResult(
            candidates=candidates,
            branch=BRANCH_TIERED,
            total_before_filter=len(services),
            filters_applied=filters_applied + ["locality_tiers"],
            tier_sizes=tier_sizes,
            expanded_tiers=expanded,
        )

    def classify(
        self,
        candidates: Sequence[Candidate],
        location: SearchLocation,
    ) -> Dict[SearchTier, List[Candidate]]:
        """Bucket candidates by tier; candidates matching no tier are dropped."""
        tiers: Dict[SearchTier, List[Candidate]] = {tier: [] for tier in SearchTier}
        for candidate in candidates:
            tier = classify_tier(candidate, location)
            if tier is None:
                continue
            candidate.tier = tier
            tiers[tier].append(candidate)
        return tiers

    def _apply_mandatory(self, services: Sequence[ServiceListing]) -> List[Candidate]:
        candidates: List[Candidate] = []
        for listing in services:
            if not listing.is_active:
                continue
            provider = self.snapshot.get_provider(listing.provider_id)
            if provider is None:
                logger.debug(
                    "Listing %s references unknown provider %s; skipping",
                    listing.id,
                    listing.provider_id,
                )
                continue
            if not provider.is_active:
                continue
            candidates.append(Candidate(listing=listing, provider=provider))
        return candidates

    @staticmethod
    def _filter_category(candidates: List[Candidate], category_id: str) -> List[Candidate]:
        return [
            c
            for c in candidates
            if c.listing.category_id == category_id or c.listing.subcategory_id == category_id
        ]

    def _filter_keywords(self, candidates: List[Candidate], q: str) -> List[Candidate]:
        needle = q.lower()
        matched_categories = self.category_tree.expand_name_match(needle)

        def _matches(listing: ServiceListing) -> bool:
            if needle in listing.searchable_text():
                return True
            if any(needle in tag.lower() for tag in listing.tags):
                return True
            return listing.category_id is not None and listing.category_id in matched_categories

        return [c for c in candidates if _matches(c.listing)]

    @staticmethod
    def _explicit_location(
        candidates: List[Candidate],
        location: Optional[SearchLocation],
    ) -> List[Candidate]:
        level = location.most_specific_level if location is not None else None
        if location is not None and level is not None:
            candidates = [c for c in candidates if matches_level(c.provider, location, level)]
        # TODO: rank explicit-location results with RankingService once the
        # placeholder ordering is retired from the API fixtures.
        return sorted(candidates, key=lambda c: placeholder_scope_score(c.listing), reverse=True)
