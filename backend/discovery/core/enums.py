# backend/discovery/core/enums.py
"""
Core enums for the discovery engine.

Values match the strings stored by the profile and catalog collaborators,
so records can be built straight from their payloads.
"""

from enum import Enum


class VerificationLevel(str, Enum):
    """How far a provider has been verified by the trust collaborator."""

    NONE = "none"
    BASIC = "basic"
    TRUSTED = "trusted"


class ServiceMode(str, Enum):
    """How a service is delivered."""

    PHYSICAL = "physical"
    REMOTE = "remote"
    HYBRID = "hybrid"


class CoverageScope(str, Enum):
    """Declared geographic reach of a listing."""

    LOCAL = "local"
    NATIONAL = "national"
    GLOBAL = "global"


class SearchTier(int, Enum):
    """Locality bucket a listing falls into for a located search."""

    LOCAL = 1
    LOCAL_REMOTE = 2
    BROAD = 3


class LocationLevel(str, Enum):
    """Administrative level used to match an explicit search location."""

    CITY = "city"
    STATE = "state"
    COUNTRY = "country"
