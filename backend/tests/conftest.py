# backend/tests/conftest.py
"""
Pytest configuration for the discovery engine.

Fixtures build a small two-country catalog (Neverland / Otherland) that
covers every locality tier, inactive records and a dangling provider
reference. Everything is in memory; no storage is touched.
"""

import os
import sys

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from typing import Any, Dict, List

import pytest

from discovery.models.search import SearchLocation
from discovery.repositories.catalog_snapshot import InMemoryCatalogSnapshot
from discovery.services.search.config import reset_search_config

# ============================================================================
# CATALOG DATA
# ============================================================================

CATEGORIES: List[Dict[str, Any]] = [
    {"id": "cat-wellness", "name": "Wellness", "slug": "wellness", "level": 0},
    {"id": "cat-yoga", "name": "Yoga", "slug": "yoga", "parent_id": "cat-wellness", "level": 1},
    {
        "id": "cat-pilates",
        "name": "Pilates",
        "slug": "pilates",
        "parent_id": "cat-wellness",
        "level": 1,
    },
    {"id": "cat-tech", "name": "Tech Support", "slug": "tech-support", "level": 0},
]

PROVIDERS: List[Dict[str, Any]] = [
    {
        "id": "prov-local",
        "user_id": "user-local",
        "display_name": "Pixie Hollow Yoga",
        "location_country": "Neverland",
        "location_state": "Lagoon",
        "location_city": "Pixie Hollow",
        "verification_level": "trusted",
        "address_confidence": 80,
        "is_active": True,
    },
    {
        "id": "prov-state",
        "user_id": "user-state",
        "display_name": "Mermaid Bay Studio",
        "location_country": "Neverland",
        "location_state": "Lagoon",
        "location_city": "Mermaid Bay",
        "verification_level": "basic",
        "is_active": True,
    },
    {
        "id": "prov-remote",
        "user_id": "user-remote",
        "display_name": "Skull Rock Online",
        "location_country": "Neverland",
        "location_state": "North",
        "location_city": "Skull Rock",
        "verification_level": "none",
        "is_active": True,
    },
    {
        "id": "prov-global",
        "user_id": "user-global",
        "display_name": "Faraway Academy",
        "location_country": "Otherland",
        "location_state": "Far",
        "location_city": "Faraway",
        "verification_level": "basic",
        "is_active": True,
    },
    {
        "id": "prov-inactive",
        "display_name": "Closed Studio",
        "location_country": "Neverland",
        "location_state": "Lagoon",
        "location_city": "Pixie Hollow",
        "verification_level": "trusted",
        "is_active": False,
    },
]

SERVICES: List[Dict[str, Any]] = [
    {
        "id": "svc-local-yoga",
        "provider_id": "prov-local",
        "service_name": "Yoga Classes",
        "service_description": "Morning vinyasa yoga in the park",
        "category_id": "cat-yoga",
        "tags": ["vinyasa", "outdoor"],
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_primary": True,
        "is_active": True,
    },
    {
        "id": "svc-state-yoga",
        "provider_id": "prov-state",
        "service_name": "Hatha Yoga",
        "service_description": "Small group sessions",
        "category_id": "cat-yoga",
        "service_mode": "hybrid",
        "coverage_scope": "local",
        "is_active": True,
    },
    {
        "id": "svc-remote-yoga",
        "provider_id": "prov-remote",
        "service_name": "Online Yoga Coaching",
        "service_description": "Live video sessions",
        "category_id": "cat-yoga",
        "service_mode": "remote",
        "coverage_scope": "national",
        "is_active": True,
    },
    {
        "id": "svc-global-yoga",
        "provider_id": "prov-global",
        "service_name": "Global Yoga Academy",
        "service_description": "Self-paced courses",
        "category_id": "cat-yoga",
        "service_mode": "remote",
        "coverage_scope": "global",
        "is_active": True,
    },
    {
        "id": "svc-pilates",
        "provider_id": "prov-local",
        "service_name": "Reformer Sessions",
        "service_description": "Private reformer training",
        "category_id": "cat-pilates",
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_active": True,
    },
    {
        "id": "svc-tech",
        "provider_id": "prov-state",
        "service_name": "Laptop Repair",
        "service_description": "Screen and battery replacement",
        "category_id": "cat-tech",
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_active": True,
    },
    {
        "id": "svc-inactive-yoga",
        "provider_id": "prov-local",
        "service_name": "Retired Yoga Class",
        "service_description": "No longer offered",
        "category_id": "cat-yoga",
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_active": False,
    },
    {
        "id": "svc-closed-provider",
        "provider_id": "prov-inactive",
        "service_name": "Closed Yoga",
        "service_description": "Provider is inactive",
        "category_id": "cat-yoga",
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_active": True,
    },
    {
        "id": "svc-dangling",
        "provider_id": "prov-missing",
        "service_name": "Ghost Yoga",
        "service_description": "Provider record was deleted",
        "category_id": "cat-yoga",
        "service_mode": "physical",
        "coverage_scope": "local",
        "is_active": True,
    },
]

SETTINGS: List[Dict[str, Any]] = [
    {"id": "set-1", "service_id": "svc-local-yoga", "key": "price", "value": "50"},
    {"id": "set-2", "service_id": "svc-state-yoga", "key": "hourly_rate", "value": "60/hr"},
    {"id": "set-3", "service_id": "svc-remote-yoga", "key": "session_fee", "value": 40},
    {"id": "set-4", "service_id": "svc-global-yoga", "key": "notes", "value": "ask for price"},
]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture(autouse=True)
def _reset_search_config():
    """Runtime config overrides must not leak between tests."""
    reset_search_config()
    yield
    reset_search_config()


@pytest.fixture
def catalog_rows() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "providers": [dict(row) for row in PROVIDERS],
        "services": [dict(row) for row in SERVICES],
        "categories": [dict(row) for row in CATEGORIES],
        "settings": [dict(row) for row in SETTINGS],
    }


@pytest.fixture
def snapshot(catalog_rows) -> InMemoryCatalogSnapshot:
    return InMemoryCatalogSnapshot(**catalog_rows)


@pytest.fixture
def pixie_hollow() -> SearchLocation:
    return SearchLocation(country="Neverland", state="Lagoon", city="Pixie Hollow")
