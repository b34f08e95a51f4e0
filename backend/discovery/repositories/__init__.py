"""Read-only data access for the discovery engine."""

from .catalog_snapshot import CatalogSnapshot, InMemoryCatalogSnapshot

__all__ = ["CatalogSnapshot", "InMemoryCatalogSnapshot"]
