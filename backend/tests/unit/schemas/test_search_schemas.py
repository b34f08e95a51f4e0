"""Tests for search request validation and result serialisation."""

import pytest
from pydantic import ValidationError

from discovery.core.enums import ServiceMode
from discovery.core.exceptions import InvalidSearchQueryException
from discovery.models.catalog import Provider
from discovery.models.search import SearchLocation, SearchQuery
from discovery.schemas.search import SearchRequest, SearchResponse, ensure_searchable
from discovery.services.search.discovery_service import DiscoveryService


def test_request_requires_keywords_or_category():
    with pytest.raises(ValidationError) as exc:
        SearchRequest(location_city="Pixie Hollow")
    assert "at least keywords or category/subcategory" in str(exc.value)


def test_blank_keywords_do_not_count():
    with pytest.raises(ValidationError):
        SearchRequest(q="   ")


def test_unknown_fields_are_rejected():
    with pytest.raises(ValidationError):
        SearchRequest(q="yoga", sort="price")


def test_category_only_request_is_valid():
    request = SearchRequest(subcategory_id="cat-yoga", service_mode="remote")
    assert request.service_mode is ServiceMode.REMOTE


def test_explicit_location_params_build_explicit_query():
    query = SearchRequest(q="yoga", location_city="Pixie Hollow").to_query()

    assert query.explicit_location is True
    assert query.location == SearchLocation(city="Pixie Hollow")


def test_profile_location_builds_tiered_query():
    provider = Provider(id="p1", location_country="Neverland", location_city="Pixie Hollow")
    query = SearchRequest(q="yoga").to_query(
        user_provider=provider, headers={"x-user-country": "Otherland"}
    )

    assert query.explicit_location is False
    assert query.location == SearchLocation(country="Neverland", city="Pixie Hollow")


def test_header_location_is_used_last():
    query = SearchRequest(q="yoga").to_query(headers={"x-user-state": "Lagoon"})
    assert query.location == SearchLocation(state="Lagoon")
    assert query.explicit_location is False


def test_no_location_anywhere():
    query = SearchRequest(q="yoga").to_query()
    assert query.location is None
    assert not query.has_location


def test_ensure_searchable():
    with pytest.raises(InvalidSearchQueryException) as exc:
        ensure_searchable(SearchQuery(location=SearchLocation(city="Pixie Hollow")))

    assert exc.value.code == "INVALID_SEARCH_QUERY"
    http_exc = exc.value.to_http_exception()
    assert http_exc.status_code == 400
    assert http_exc.detail["details"]["accepted_filters"] == ["q", "category_id", "subcategory_id"]

    query = SearchQuery(q="yoga")
    assert ensure_searchable(query) is query


def test_response_validates_search_results(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))

    response = SearchResponse.from_results(results)

    assert response.success is True
    assert response.total == 4
    first = response.data[0]
    assert first.id == "svc-local-yoga"
    assert first.rank == 1
    assert first.tier == 1
    assert first.provider.display_name == "Pixie Hollow Yoga"
    assert first.market.sample_size == 1
    assert first.trust.breakdown["verification_score"] == 1.0
    assert response.data[-1].market is None
