# backend/discovery/models/search.py
"""Value objects describing a discovery search request."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import CoverageScope, LocationLevel, ServiceMode


def _same_place(left: Optional[str], right: Optional[str]) -> bool:
    """Case-insensitive equality where an empty side never matches."""
    if not left or not right:
        return False
    return left.strip().lower() == right.strip().lower()


@dataclass(frozen=True)
class SearchLocation:
    """Administrative location of the searcher (no coordinates)."""

    country: Optional[str] = None
    state: Optional[str] = None
    city: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.country or self.state or self.city)

    @property
    def most_specific_level(self) -> Optional[LocationLevel]:
        if self.city:
            return LocationLevel.CITY
        if self.state:
            return LocationLevel.STATE
        if self.country:
            return LocationLevel.COUNTRY
        return None

    def same_city(self, city: Optional[str]) -> bool:
        return _same_place(self.city, city)

    def same_state(self, state: Optional[str]) -> bool:
        return _same_place(self.state, state)

    def same_country(self, country: Optional[str]) -> bool:
        return _same_place(self.country, country)


@dataclass(frozen=True)
class SearchQuery:
    """
    A validated discovery request.

    Callers are expected to reject requests without `q`, `category_id` or
    `subcategory_id` before building one (see `schemas.search`).
    """

    q: Optional[str] = None
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    service_mode: Optional[ServiceMode] = None
    coverage_scope: Optional[CoverageScope] = None
    location: Optional[SearchLocation] = None
    explicit_location: bool = False

    @property
    def has_location(self) -> bool:
        return self.location is not None and not self.location.is_empty

    @property
    def has_usable_filter(self) -> bool:
        return bool(self.q or self.category_id or self.subcategory_id)
