# backend/discovery/services/search/location.py
"""
Search location context and the coarse distance proxy.

No geocoding happens here. Locality is judged on the declared
administrative fields (city, state, country) of the provider profile.

Location precedence for a search:
1) Explicit query parameters (hard filter, no tiering)
2) The requesting user's own provider profile
3) x-user-country / x-user-state / x-user-city headers
"""

from __future__ import annotations

import logging
from typing import Mapping, Optional, Tuple

from discovery.core.enums import LocationLevel
from discovery.models.catalog import Provider
from discovery.models.search import SearchLocation

logger = logging.getLogger(__name__)

# Distance proxy (km) by the most specific shared level
SAME_CITY_KM = 1.0
SAME_STATE_KM = 20.0
SAME_COUNTRY_KM = 200.0
ELSEWHERE_KM = 1000.0

LOCATION_HEADERS: Mapping[str, str] = {
    "country": "x-user-country",
    "state": "x-user-state",
    "city": "x-user-city",
}


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def resolve_search_location(
    *,
    city: Optional[str] = None,
    state: Optional[str] = None,
    country: Optional[str] = None,
    user_provider: Optional[Provider] = None,
    headers: Optional[Mapping[str, str]] = None,
) -> Tuple[Optional[SearchLocation], bool]:
    """
    Work out where the searcher is.

    Args:
        city, state, country: Explicit location query parameters
        user_provider: The requesting user's provider profile, if any
        headers: Request headers (case-insensitive lookup of x-user-*)

    Returns:
        (location or None, explicit) where `explicit` is True only when the
        caller passed location query parameters
    """
    explicit = SearchLocation(country=_clean(country), state=_clean(state), city=_clean(city))
    if not explicit.is_empty:
        return explicit, True

    if user_provider is not None:
        from_profile = SearchLocation(
            country=_clean(user_provider.location_country),
            state=_clean(user_provider.location_state),
            city=_clean(user_provider.location_city),
        )
        if not from_profile.is_empty:
            return from_profile, False
        # A profile without location fields does not stop the search;
        # the x-user-* headers are still consulted below.
        logger.debug("Provider %s has no declared location; checking headers", user_provider.id)

    if headers:
        lowered = {str(k).lower(): v for k, v in headers.items()}
        from_headers = SearchLocation(
            **{field: _clean(lowered.get(header)) for field, header in LOCATION_HEADERS.items()}
        )
        if not from_headers.is_empty:
            return from_headers, False

    return None, False


def matches_level(provider: Provider, location: SearchLocation, level: LocationLevel) -> bool:
    """Case-insensitive provider match at one administrative level."""
    if level is LocationLevel.CITY:
        return location.same_city(provider.location_city)
    if level is LocationLevel.STATE:
        return location.same_state(provider.location_state)
    return location.same_country(provider.location_country)


def estimate_distance_km(
    provider: Optional[Provider],
    location: Optional[SearchLocation],
) -> Optional[float]:
    """
    Three-level stand-in for real distance.

    Same city -> 1 km, same state -> 20 km, same country -> 200 km,
    anything else -> 1000 km. None when either side is unknown.
    """
    if provider is None or location is None or location.is_empty:
        return None
    if location.same_city(provider.location_city):
        return SAME_CITY_KM
    if location.same_state(provider.location_state):
        return SAME_STATE_KM
    if location.same_country(provider.location_country):
        return SAME_COUNTRY_KM
    return ELSEWHERE_KM
