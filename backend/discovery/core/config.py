# backend/discovery/core/config.py
"""
Runtime settings for the discovery engine.

Values are read from the environment (and a local .env file outside CI).
Search and ranking knobs live here so operators can tune the tier expansion
threshold and the ranking weights without a code change.
"""

import logging
import os

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Environment-driven configuration for search, ranking and trust scoring."""

    # Tiered search
    search_min_threshold: int = Field(
        default=5,
        ge=0,
        description="Minimum result count before the next locality tier is pulled in",
    )
    search_max_distance_km: float = Field(
        default=100.0,
        gt=0,
        description="Distance at which the distance score decays to zero",
    )
    search_relevance_with_query: float = Field(default=0.6, ge=0, le=1)
    search_relevance_without_query: float = Field(default=0.3, ge=0, le=1)
    search_default_availability: float = Field(default=0.8, ge=0, le=1)

    # Ranking weights (see services/search/ranking_service.py)
    ranking_weight_distance: float = Field(default=0.35, ge=0)
    ranking_weight_relevance: float = Field(default=0.30, ge=0)
    ranking_weight_trust: float = Field(default=0.20, ge=0)
    ranking_weight_price: float = Field(default=0.10, ge=0)
    ranking_weight_availability: float = Field(default=0.05, ge=0)

    # Trust context defaults used by the provider dashboard
    trust_default_response_rate: float = Field(default=0.5, ge=0, le=1)

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("search_min_threshold", mode="before")
    @classmethod
    def _coerce_threshold(cls, value: object) -> object:
        if isinstance(value, str):
            cleaned = value.strip()
            if not cleaned:
                return 5
            try:
                return int(cleaned)
            except ValueError:
                logger.warning("Invalid SEARCH_MIN_THRESHOLD=%s; defaulting to 5", cleaned)
                return 5
        return value

    @model_validator(mode="after")
    def _check_ranking_weights(self) -> "Settings":
        total = (
            self.ranking_weight_distance
            + self.ranking_weight_relevance
            + self.ranking_weight_trust
            + self.ranking_weight_price
            + self.ranking_weight_availability
        )
        if abs(total - 1.0) > 1e-6:
            logger.warning(
                "Ranking weights sum to %.3f, final scores will be clamped to [0, 1]", total
            )
        return self

    def ranking_weights(self) -> dict[str, float]:
        """Return the configured ranking weights keyed by signal name."""
        return {
            "distance": self.ranking_weight_distance,
            "relevance": self.ranking_weight_relevance,
            "trust": self.ranking_weight_trust,
            "price": self.ranking_weight_price,
            "availability": self.ranking_weight_availability,
        }


settings = Settings()
