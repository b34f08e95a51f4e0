"""Records and value objects used by the discovery engine."""

from .address import PARSED_ADDRESS_FIELDS, Address, compute_address_confidence
from .catalog import Category, Provider, ServiceListing, ServiceSetting
from .search import SearchLocation, SearchQuery

__all__ = [
    "Address",
    "Category",
    "PARSED_ADDRESS_FIELDS",
    "Provider",
    "SearchLocation",
    "SearchQuery",
    "ServiceListing",
    "ServiceSetting",
    "compute_address_confidence",
]
