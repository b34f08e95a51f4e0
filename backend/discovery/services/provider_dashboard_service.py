"""Provider dashboard signals: profile completeness and settings-derived trust."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from ..core.config import settings
from ..models.catalog import Provider, ServiceSetting
from ..repositories.catalog_snapshot import CatalogSnapshot
from .base import BaseService
from .search.price_extraction import parse_leading_number
from .trust_service import JobStats, TrustContext, TrustResult, compute_trust_score

# Critical profile fields, each worth an equal share of the completion score
COMPLETION_FIELDS = ("address", "service_description", "service_mode", "phone_number")
MIN_DESCRIPTION_LENGTH = 10


class ProviderDashboardService(BaseService):
    """
    Read-only dashboard figures for a provider.

    Incidents and response rate are stored by providers as free-form service
    settings until a dedicated activity feed exists, so both are read from
    the snapshot's settings here.
    """

    def __init__(self, snapshot: CatalogSnapshot, default_response_rate: Optional[float] = None):
        super().__init__(snapshot)
        self.snapshot: CatalogSnapshot = snapshot
        self.default_response_rate = (
            settings.trust_default_response_rate
            if default_response_rate is None
            else default_response_rate
        )

    def _provider_settings(self, provider_id: str) -> List[ServiceSetting]:
        collected: List[ServiceSetting] = []
        for listing in self.snapshot.list_services_for_provider(provider_id):
            collected.extend(self.snapshot.list_settings(listing.id))
        return collected

    @BaseService.measure_operation("profile_completion")
    def profile_completion(self, provider: Optional[Provider]) -> Dict[str, Any]:
        """
        Score how complete a provider profile is.

        Returns:
            {"profile_completion_score": 0-100, "missing_fields": [...]}
        """
        if provider is None:
            return {"profile_completion_score": 0, "missing_fields": ["profile"]}

        missing: List[str] = []
        if not self.snapshot.list_addresses_for_provider(provider.id):
            missing.append("address")

        listings = self.snapshot.list_services_for_provider(provider.id)
        if not any(
            len(listing.service_description or "") > MIN_DESCRIPTION_LENGTH for listing in listings
        ):
            missing.append("service_description")
        if not any(listing.service_mode for listing in listings):
            missing.append("service_mode")

        has_phone_setting = any(
            "phone" in (s.key or "").lower() for s in self._provider_settings(provider.id)
        )
        if not has_phone_setting and not provider.phone_number:
            missing.append("phone_number")

        present = len(COMPLETION_FIELDS) - len(missing)
        return {
            "profile_completion_score": round(present / len(COMPLETION_FIELDS) * 100),
            "missing_fields": missing,
        }

    def trust_context(self, provider: Provider) -> TrustContext:
        """
        Build a trust context from the provider's service settings.

        `incidents` values are summed; the last numeric `response_rate` wins.
        Job stats and reviews are not tracked in settings and stay empty.
        """
        incidents = 0.0
        response_rate = self.default_response_rate
        for setting in self._provider_settings(provider.id):
            if setting.key == "incidents":
                incidents += parse_leading_number(setting.value) or 0
            elif setting.key == "response_rate":
                rate = parse_leading_number(setting.value)
                if rate:
                    response_rate = rate
        return TrustContext(
            stats=JobStats(accepted=0, completed=0),
            reviews=(),
            response_rate=response_rate,
            incidents=int(incidents),
        )

    @BaseService.measure_operation("trust_for_provider")
    def trust_for_provider(self, provider: Provider) -> TrustResult:
        return compute_trust_score(provider, self.trust_context(provider))
