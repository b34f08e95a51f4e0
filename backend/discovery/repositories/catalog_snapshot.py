# backend/discovery/repositories/catalog_snapshot.py
"""
Read-only catalog snapshot consumed by the discovery engine.

The storage collaborator owns persistence; the engine only needs a
consistent view of providers, listings, categories, settings and addresses
for the lifetime of one request. `CatalogSnapshot` is that contract and
`InMemoryCatalogSnapshot` is the reference implementation, built once per
request from already-loaded rows.
"""

from __future__ import annotations

from collections import defaultdict
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from ..models.address import Address
from ..models.catalog import Category, Provider, ServiceListing, ServiceSetting

logger = logging.getLogger(__name__)

ProviderRow = Union[Provider, Mapping[str, Any]]
ServiceRow = Union[ServiceListing, Mapping[str, Any]]
CategoryRow = Union[Category, Mapping[str, Any]]
SettingRow = Union[ServiceSetting, Mapping[str, Any]]


class CatalogSnapshot(Protocol):
    """Interface for catalog reads - enables swapping storage implementations."""

    def list_providers(self) -> Sequence[Provider]:
        """All provider profiles, active or not."""
        ...

    def list_services(self) -> Sequence[ServiceListing]:
        """All service listings, active or not."""
        ...

    def list_categories(self) -> Sequence[Category]:
        """The full category taxonomy."""
        ...

    def list_settings(self, service_id: str) -> Sequence[ServiceSetting]:
        """Key/value settings attached to one listing, in insertion order."""
        ...

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        ...

    def get_provider_by_user_id(self, user_id: str) -> Optional[Provider]:
        ...

    def list_services_for_provider(self, provider_id: str) -> Sequence[ServiceListing]:
        ...

    def list_addresses_for_provider(self, provider_id: str) -> Sequence[Address]:
        ...


def _as_records(rows: Iterable[Any], record_cls: Any) -> List[Any]:
    records = []
    for row in rows or ():
        if isinstance(row, record_cls):
            records.append(row)
            continue
        try:
            records.append(record_cls.from_dict(row))
        except (KeyError, TypeError, ValueError) as e:
            # One malformed row must not take the whole catalog down
            logger.warning("Skipping malformed %s row: %s", record_cls.__name__, e)
    return records


class InMemoryCatalogSnapshot:
    """
    Immutable in-memory snapshot of the catalog.

    Accepts records or plain mappings (as produced by the storage layer) and
    indexes them once so lookups during ranking are O(1).

    Usage:
        snapshot = InMemoryCatalogSnapshot(
            providers=rows["provider_profiles"],
            services=rows["services"],
            categories=rows["service_categories"],
            settings=rows["service_settings"],
        )
        results = DiscoveryService(snapshot).search(query)
    """

    def __init__(
        self,
        providers: Iterable[ProviderRow] = (),
        services: Iterable[ServiceRow] = (),
        categories: Iterable[CategoryRow] = (),
        settings: Iterable[SettingRow] = (),
        addresses: Iterable[Address] = (),
    ) -> None:
        self._providers: List[Provider] = _as_records(providers, Provider)
        self._services: List[ServiceListing] = _as_records(services, ServiceListing)
        self._categories: List[Category] = _as_records(categories, Category)
        self._addresses: List[Address] = list(addresses or ())

        self._providers_by_id: Dict[str, Provider] = {p.id: p for p in self._providers}
        self._providers_by_user: Dict[str, Provider] = {
            p.user_id: p for p in self._providers if p.user_id
        }
        self._services_by_provider: Dict[str, List[ServiceListing]] = defaultdict(list)
        for service in self._services:
            self._services_by_provider[service.provider_id].append(service)

        self._settings_by_service: Dict[str, List[ServiceSetting]] = defaultdict(list)
        for setting in _as_records(settings, ServiceSetting):
            self._settings_by_service[setting.service_id].append(setting)

        self._addresses_by_provider: Dict[str, List[Address]] = defaultdict(list)
        for address in self._addresses:
            if address.provider_id:
                self._addresses_by_provider[address.provider_id].append(address)

    def list_providers(self) -> Sequence[Provider]:
        return tuple(self._providers)

    def list_services(self) -> Sequence[ServiceListing]:
        return tuple(self._services)

    def list_categories(self) -> Sequence[Category]:
        return tuple(self._categories)

    def list_settings(self, service_id: str) -> Sequence[ServiceSetting]:
        return tuple(self._settings_by_service.get(service_id, ()))

    def get_provider(self, provider_id: str) -> Optional[Provider]:
        return self._providers_by_id.get(provider_id)

    def get_provider_by_user_id(self, user_id: str) -> Optional[Provider]:
        return self._providers_by_user.get(user_id)

    def list_services_for_provider(self, provider_id: str) -> Sequence[ServiceListing]:
        return tuple(self._services_by_provider.get(provider_id, ()))

    def list_addresses_for_provider(self, provider_id: str) -> Sequence[Address]:
        return tuple(self._addresses_by_provider.get(provider_id, ()))
