# backend/discovery/schemas/search.py
"""
Pydantic schemas for the discovery search API.

`SearchRequest` is the caller-side gate: a search must carry keywords or a
category/subcategory before it reaches the engine. The response schemas
mirror `SearchResult` so every score can be shown to the end user.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from discovery.core.enums import CoverageScope, ServiceMode
from discovery.core.exceptions import InvalidSearchQueryException
from discovery.models.catalog import Provider
from discovery.models.search import SearchQuery
from discovery.services.search.discovery_service import SearchResult
from discovery.services.search.location import resolve_search_location


class StrictRequestModel(BaseModel):
    """Request DTO base that always forbids unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)


class SearchRequest(StrictRequestModel):
    """Query parameters accepted by the search endpoint."""

    q: Optional[str] = Field(None, description="Keywords")
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    service_mode: Optional[ServiceMode] = None
    coverage_scope: Optional[CoverageScope] = None
    location_city: Optional[str] = None
    location_state: Optional[str] = None
    location_country: Optional[str] = None

    @field_validator("q", "category_id", "subcategory_id", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @model_validator(mode="after")
    def check_has_filter(self) -> "SearchRequest":
        """Ensure keywords or a category/subcategory is provided."""
        if not (self.q or self.category_id or self.subcategory_id):
            raise ValueError("Search requires at least keywords or category/subcategory")
        return self

    def to_query(
        self,
        user_provider: Optional[Provider] = None,
        headers: Optional[Mapping[str, str]] = None,
    ) -> SearchQuery:
        """
        Build the engine query, resolving where the searcher is.

        Args:
            user_provider: The requesting user's provider profile, if any
            headers: Request headers carrying x-user-* location hints
        """
        location, explicit = resolve_search_location(
            city=self.location_city,
            state=self.location_state,
            country=self.location_country,
            user_provider=user_provider,
            headers=headers,
        )
        return SearchQuery(
            q=self.q,
            category_id=self.category_id,
            subcategory_id=self.subcategory_id,
            service_mode=self.service_mode,
            coverage_scope=self.coverage_scope,
            location=location,
            explicit_location=explicit,
        )


def ensure_searchable(query: SearchQuery) -> SearchQuery:
    """Reject a query that carries no usable filter."""
    if not query.has_usable_filter:
        raise InvalidSearchQueryException()
    return query


class ProviderSummary(BaseModel):
    id: str
    display_name: Optional[str] = None
    provider_type: Optional[str] = None
    location_country: Optional[str] = None
    location_state: Optional[str] = None
    location_city: Optional[str] = None
    verification_level: str = "none"


class MarketSummaryResponse(BaseModel):
    min_price: float
    avg_price: float
    max_price: float
    sample_size: int = Field(..., ge=1)
    last_updated: str


class TrustResponse(BaseModel):
    trust_score: float = Field(..., ge=0, le=1)
    breakdown: Dict[str, float]


class SearchResultResponse(BaseModel):
    """Single ranked listing with its explainable score."""

    id: str
    provider_id: str
    service_name: str
    service_description: str
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    service_mode: Optional[ServiceMode] = None
    coverage_scope: Optional[CoverageScope] = None
    is_primary: bool = False
    provider: ProviderSummary
    tier: Optional[int] = Field(None, ge=1, le=3, description="Locality tier (tiered searches)")
    distance_km: Optional[float] = Field(None, description="Distance proxy, not real distance")
    price: Optional[float] = None
    market: Optional[MarketSummaryResponse] = None
    trust: TrustResponse
    final_score: float = Field(..., ge=0, le=1)
    score_components: Dict[str, float]
    rank: int = Field(..., ge=1)

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResultResponse":
        return cls.model_validate(result.to_dict())


class SearchResponse(BaseModel):
    success: bool = True
    data: List[SearchResultResponse]
    total: int

    @classmethod
    def from_results(cls, results: List[SearchResult]) -> "SearchResponse":
        items = [SearchResultResponse.from_result(r) for r in results]
        return cls(data=items, total=len(items))
