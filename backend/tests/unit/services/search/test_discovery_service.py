"""End-to-end discovery searches over the in-memory Neverland catalog."""

import pytest

from discovery.core.enums import CoverageScope, SearchTier, ServiceMode
from discovery.models.search import SearchLocation, SearchQuery
from discovery.services.search.config import SearchConfig, update_search_config
from discovery.services.search.discovery_service import DiscoveryService
from discovery.services.trust_service import JobStats, TrustContext

# ── Helpers ──────────────────────────────────────────────────────


def _ids(results):
    return [r.id for r in results]


def _by_id(results):
    return {r.id: r for r in results}


# ── Tiered search (implicit location) ────────────────────────────


def test_tiered_search_ranks_local_physical_first(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))

    assert _ids(results) == [
        "svc-local-yoga",
        "svc-state-yoga",
        "svc-remote-yoga",
        "svc-global-yoga",
    ]
    assert [r.rank for r in results] == [1, 2, 3, 4]


def test_tiered_search_annotates_tiers_and_distance(snapshot, pixie_hollow):
    results = _by_id(DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow)))

    assert results["svc-local-yoga"].tier is SearchTier.LOCAL
    assert results["svc-local-yoga"].distance_km == 1.0
    assert results["svc-state-yoga"].tier is SearchTier.LOCAL
    assert results["svc-state-yoga"].distance_km == 20.0
    assert results["svc-remote-yoga"].tier is SearchTier.LOCAL_REMOTE
    assert results["svc-remote-yoga"].distance_km == 200.0
    assert results["svc-global-yoga"].tier is SearchTier.BROAD
    assert results["svc-global-yoga"].distance_km == 1000.0


def test_global_listing_never_ranks_first_with_local_match(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))

    assert results[0].listing.coverage_scope is not CoverageScope.GLOBAL
    assert results[0].tier is SearchTier.LOCAL


def test_final_score_is_weighted_sum_of_components(snapshot, pixie_hollow):
    results = _by_id(DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow)))
    local = results["svc-local-yoga"]

    # distance 1 km -> 0.99, relevance 0.6, trust 0.25 + 0.08, price at market avg -> 1.0
    assert local.score_components.distance == pytest.approx(0.99)
    assert local.score_components.relevance == pytest.approx(0.6)
    assert local.trust.trust_score == pytest.approx(0.33)
    assert local.score_components.price == pytest.approx(1.0)
    assert local.score_components.availability == pytest.approx(0.8)
    assert local.final_score == pytest.approx(0.7325)


def test_missing_price_scores_neutral(snapshot, pixie_hollow):
    results = _by_id(DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow)))
    unpriced = results["svc-global-yoga"]

    assert unpriced.price is None
    assert unpriced.market is None
    assert unpriced.score_components.price == pytest.approx(0.5)


def test_price_and_market_are_attached(snapshot, pixie_hollow):
    results = _by_id(DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow)))
    state = results["svc-state-yoga"]

    assert state.price == 60.0
    assert state.market is not None
    assert state.market.sample_size == 1
    assert state.market.avg_price == 60.0


def test_threshold_limits_tier_expansion(snapshot, pixie_hollow):
    service = DiscoveryService(snapshot, config=SearchConfig(min_results_threshold=2))
    results = service.search(SearchQuery(q="yoga", location=pixie_hollow))

    assert _ids(results) == ["svc-local-yoga", "svc-state-yoga"]


def test_runtime_config_update_is_picked_up(snapshot, pixie_hollow):
    update_search_config(min_results_threshold=3)
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))

    # Tier 1 holds 2, Tier 2 brings it to 3, Tier 3 is never added
    assert _ids(results) == ["svc-local-yoga", "svc-state-yoga", "svc-remote-yoga"]


def test_location_is_case_insensitive(snapshot):
    location = SearchLocation(country="NEVERLAND", state="lagoon", city="pixie hollow")
    results = _by_id(DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=location)))

    assert results["svc-local-yoga"].distance_km == 1.0


def test_user_outside_every_country_gets_broad_results_only(snapshot):
    location = SearchLocation(country="Atlantis")
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=location))

    # Remote listings from other countries fall into Tier 3; local physical ones are excluded
    assert set(_ids(results)) == {"svc-remote-yoga", "svc-global-yoga"}
    assert all(r.tier is SearchTier.BROAD for r in results)


# ── Explicit location ────────────────────────────────────────────


def test_explicit_city_is_a_hard_filter(snapshot):
    query = SearchQuery(
        q="yoga",
        location=SearchLocation(city="Pixie Hollow"),
        explicit_location=True,
    )
    results = DiscoveryService(snapshot).search(query)

    assert _ids(results) == ["svc-local-yoga"]
    assert results[0].tier is None
    assert results[0].rank == 1


def test_explicit_city_without_match_returns_empty(snapshot):
    query = SearchQuery(
        q="yoga",
        location=SearchLocation(city="Atlantis"),
        explicit_location=True,
    )

    assert DiscoveryService(snapshot).search(query) == []


def test_explicit_state_keeps_placeholder_order(snapshot):
    query = SearchQuery(
        q="yoga",
        location=SearchLocation(state="Lagoon"),
        explicit_location=True,
    )
    results = DiscoveryService(snapshot).search(query)

    # Longer name + description first, regardless of final_score
    assert _ids(results) == ["svc-local-yoga", "svc-state-yoga"]
    assert all(r.final_score > 0 for r in results)


def test_explicit_country_includes_remote_listings_in_that_country(snapshot):
    query = SearchQuery(
        q="yoga",
        location=SearchLocation(country="Otherland"),
        explicit_location=True,
    )
    results = DiscoveryService(snapshot).search(query)

    assert _ids(results) == ["svc-global-yoga"]


# ── No location ──────────────────────────────────────────────────


def test_no_location_returns_only_broad_or_remote(snapshot):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga"))

    assert _ids(results) == ["svc-remote-yoga", "svc-global-yoga"]
    assert all(r.distance_km is None for r in results)
    assert all(r.score_components.distance == 0 for r in results)
    assert all(r.tier is None for r in results)


def test_empty_location_behaves_like_no_location(snapshot):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=SearchLocation()))

    assert _ids(results) == ["svc-remote-yoga", "svc-global-yoga"]


def test_relevance_without_keywords_is_lower(snapshot):
    results = DiscoveryService(snapshot).search(SearchQuery(category_id="cat-yoga"))

    assert results
    assert all(r.score_components.relevance == pytest.approx(0.3) for r in results)


# ── Filters ──────────────────────────────────────────────────────


def test_inactive_and_dangling_records_are_excluded(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))
    ids = set(_ids(results))

    assert "svc-inactive-yoga" not in ids
    assert "svc-closed-provider" not in ids
    assert "svc-dangling" not in ids


def test_category_name_keyword_expands_to_descendants(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="wellness", location=pixie_hollow))
    ids = set(_ids(results))

    assert "svc-pilates" in ids
    assert "svc-local-yoga" in ids
    assert "svc-tech" not in ids


def test_service_mode_filter(snapshot, pixie_hollow):
    query = SearchQuery(q="yoga", service_mode=ServiceMode.REMOTE, location=pixie_hollow)
    results = DiscoveryService(snapshot).search(query)

    assert _ids(results) == ["svc-remote-yoga", "svc-global-yoga"]


def test_no_match_returns_empty_list(snapshot, pixie_hollow):
    results = DiscoveryService(snapshot).search(SearchQuery(q="astrophysics", location=pixie_hollow))

    assert results == []


# ── Trust context ────────────────────────────────────────────────


def test_trust_context_loader_feeds_trust_score(snapshot, pixie_hollow):
    def loader(provider):
        if provider.id == "prov-remote":
            return TrustContext(stats=JobStats(accepted=10, completed=10), response_rate=1.0)
        return None

    results = _by_id(
        DiscoveryService(snapshot, trust_context_loader=loader).search(
            SearchQuery(q="yoga", location=pixie_hollow)
        )
    )

    assert results["svc-remote-yoga"].trust.breakdown.job_completion_score == 1.0
    assert results["svc-remote-yoga"].trust.trust_score == pytest.approx(0.35)


def test_failing_trust_loader_falls_back_to_profile(snapshot, pixie_hollow):
    def loader(provider):
        raise RuntimeError("activity store down")

    results = _by_id(
        DiscoveryService(snapshot, trust_context_loader=loader).search(
            SearchQuery(q="yoga", location=pixie_hollow)
        )
    )

    assert results["svc-local-yoga"].trust.trust_score == pytest.approx(0.33)


# ── Serialisation ────────────────────────────────────────────────


def test_result_to_dict_exposes_every_signal(snapshot, pixie_hollow):
    result = DiscoveryService(snapshot).search(SearchQuery(q="yoga", location=pixie_hollow))[0]
    payload = result.to_dict()

    assert payload["id"] == "svc-local-yoga"
    assert payload["tier"] == 1
    assert payload["rank"] == 1
    assert payload["provider"]["verification_level"] == "trusted"
    assert set(payload["score_components"]) == {
        "distance",
        "relevance",
        "trust",
        "price",
        "availability",
    }
    assert "incident_penalty" in payload["trust"]["breakdown"]
    assert payload["market"]["sample_size"] == 1


def test_search_records_service_metrics(snapshot, pixie_hollow):
    service = DiscoveryService(snapshot)
    service.reset_metrics()
    service.search(SearchQuery(q="yoga", location=pixie_hollow))

    metrics = service.get_metrics()
    assert metrics["search"]["count"] == 1
    assert metrics["search"]["success_count"] == 1
    assert metrics["score_candidates"]["count"] == 1
