from discovery.core.enums import LocationLevel
from discovery.models.catalog import Provider
from discovery.models.search import SearchLocation
from discovery.services.search.location import (
    ELSEWHERE_KM,
    SAME_CITY_KM,
    SAME_COUNTRY_KM,
    SAME_STATE_KM,
    estimate_distance_km,
    matches_level,
    resolve_search_location,
)

PROVIDER = Provider(
    id="p1",
    location_country="Neverland",
    location_state="Lagoon",
    location_city="Pixie Hollow",
)


def test_explicit_params_win_and_are_flagged():
    location, explicit = resolve_search_location(
        city=" Mermaid Bay ",
        user_provider=PROVIDER,
        headers={"x-user-city": "Faraway"},
    )
    assert explicit is True
    assert location == SearchLocation(city="Mermaid Bay")


def test_provider_profile_is_used_before_headers():
    location, explicit = resolve_search_location(
        user_provider=PROVIDER,
        headers={"x-user-country": "Otherland"},
    )
    assert explicit is False
    assert location == SearchLocation(country="Neverland", state="Lagoon", city="Pixie Hollow")


def test_headers_are_used_when_profile_has_no_location():
    location, explicit = resolve_search_location(
        user_provider=Provider(id="p2"),
        headers={"X-User-Country": "Otherland", "X-User-City": "Faraway"},
    )
    assert explicit is False
    assert location == SearchLocation(country="Otherland", city="Faraway")


def test_blank_inputs_resolve_to_no_location():
    location, explicit = resolve_search_location(city="  ", headers={"x-user-state": ""})
    assert location is None
    assert explicit is False


def test_distance_proxy_levels():
    assert estimate_distance_km(PROVIDER, SearchLocation(city="pixie hollow")) == SAME_CITY_KM
    assert estimate_distance_km(PROVIDER, SearchLocation(state="Lagoon")) == SAME_STATE_KM
    assert estimate_distance_km(PROVIDER, SearchLocation(country="Neverland")) == SAME_COUNTRY_KM
    assert estimate_distance_km(PROVIDER, SearchLocation(country="Otherland")) == ELSEWHERE_KM


def test_distance_unknown_without_location():
    assert estimate_distance_km(PROVIDER, None) is None
    assert estimate_distance_km(PROVIDER, SearchLocation()) is None
    assert estimate_distance_km(None, SearchLocation(city="Pixie Hollow")) is None


def test_provider_without_location_is_elsewhere():
    assert estimate_distance_km(Provider(id="p3"), SearchLocation(city="Pixie Hollow")) == ELSEWHERE_KM


def test_matches_level():
    location = SearchLocation(country="NEVERLAND", state="Lagoon", city="Mermaid Bay")
    assert matches_level(PROVIDER, location, LocationLevel.COUNTRY)
    assert matches_level(PROVIDER, location, LocationLevel.STATE)
    assert not matches_level(PROVIDER, location, LocationLevel.CITY)
