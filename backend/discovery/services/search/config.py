# backend/discovery/services/search/config.py
"""
Configuration for discovery search.

Provides runtime-configurable settings for:
- Tier expansion threshold
- Distance decay horizon
- Relevance and availability proxies
- Ranking weights

Settings are loaded from the environment at startup and can be temporarily
overridden (e.g. for A/B weight tuning) without a restart.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Mapping, Optional

from discovery.core.config import Settings, settings


@dataclass
class SearchConfig:
    """Configuration for discovery search."""

    min_results_threshold: int = 5
    max_distance_km: float = 100.0
    relevance_with_query: float = 0.6
    relevance_without_query: float = 0.3
    default_availability: float = 0.8
    ranking_weights: Dict[str, float] = field(
        default_factory=lambda: {
            "distance": 0.35,
            "relevance": 0.30,
            "trust": 0.20,
            "price": 0.10,
            "availability": 0.05,
        }
    )

    @classmethod
    def from_settings(cls, source: Optional[Settings] = None) -> "SearchConfig":
        """Build configuration from the environment-backed settings."""
        source = source or settings
        return cls(
            min_results_threshold=source.search_min_threshold,
            max_distance_km=source.search_max_distance_km,
            relevance_with_query=source.search_relevance_with_query,
            relevance_without_query=source.search_relevance_without_query,
            default_availability=source.search_default_availability,
            ranking_weights=source.ranking_weights(),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "min_results_threshold": self.min_results_threshold,
            "max_distance_km": self.max_distance_km,
            "relevance_with_query": self.relevance_with_query,
            "relevance_without_query": self.relevance_without_query,
            "default_availability": self.default_availability,
            "ranking_weights": dict(self.ranking_weights),
        }


# Thread-safe singleton pattern for config
_config: Optional[SearchConfig] = None
_config_lock = Lock()


def get_search_config() -> SearchConfig:
    """
    Get the search configuration singleton.

    Loads from settings on first access.
    """
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = SearchConfig.from_settings()
    return _config


def update_search_config(
    min_results_threshold: Optional[int] = None,
    max_distance_km: Optional[float] = None,
    ranking_weights: Optional[Mapping[str, float]] = None,
) -> SearchConfig:
    """
    Update search configuration at runtime.

    Changes are NOT persisted - they reset on restart. Weight overrides are
    merged into the current weights; unknown keys are dropped.

    Args:
        min_results_threshold: Result count below which the next tier is added
        max_distance_km: Distance at which the distance score reaches zero
        ranking_weights: Partial weight overrides keyed by signal name

    Returns:
        Updated SearchConfig
    """
    global _config
    with _config_lock:
        if _config is None:
            _config = SearchConfig.from_settings()

        if min_results_threshold is not None:
            _config.min_results_threshold = max(0, int(min_results_threshold))
        if max_distance_km is not None:
            _config.max_distance_km = float(max_distance_km)
        if ranking_weights:
            merged = dict(_config.ranking_weights)
            for key, value in ranking_weights.items():
                if key in merged:
                    merged[key] = float(value)
            _config.ranking_weights = merged

        return _config


def reset_search_config() -> SearchConfig:
    """Reset configuration to environment defaults."""
    global _config
    with _config_lock:
        _config = SearchConfig.from_settings()
        return _config
