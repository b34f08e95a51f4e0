# backend/discovery/models/catalog.py
"""
Catalog records consumed by the discovery engine.

These are read-only views over data owned by the catalog and profile
collaborators. Optional fields are real optionals; `from_dict` builds a
record from a collaborator payload and tolerates missing or unknown values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Type, TypeVar

from ..core.enums import CoverageScope, ServiceMode, VerificationLevel

E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    """Return the enum member for `value`, or None when it is unset or unknown."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return None


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _tags(value: Any) -> frozenset[str]:
    if not value or isinstance(value, (str, bytes)):
        return frozenset()
    if not isinstance(value, Iterable):
        return frozenset()
    return frozenset(str(tag) for tag in value if tag)


@dataclass(frozen=True)
class Category:
    """A node of the service category taxonomy."""

    id: str
    name: str
    slug: Optional[str] = None
    parent_id: Optional[str] = None
    level: int = 0
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Category":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or ""),
            slug=_optional_str(data.get("slug")),
            parent_id=_optional_str(data.get("parent_id")),
            level=int(data.get("level") or 0),
            is_active=bool(data.get("is_active", True)),
        )


@dataclass(frozen=True)
class Provider:
    """Provider profile fields the engine reads for locality and trust."""

    id: str
    user_id: Optional[str] = None
    display_name: Optional[str] = None
    provider_type: Optional[str] = None
    location_country: Optional[str] = None
    location_state: Optional[str] = None
    location_city: Optional[str] = None
    verification_level: VerificationLevel = VerificationLevel.NONE
    address_confidence: Optional[float] = None
    phone_number: Optional[str] = None
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Provider":
        confidence = data.get("address_confidence")
        return cls(
            id=str(data["id"]),
            user_id=_optional_str(data.get("user_id")),
            display_name=_optional_str(data.get("display_name")),
            provider_type=_optional_str(data.get("provider_type")),
            location_country=_optional_str(data.get("location_country")),
            location_state=_optional_str(data.get("location_state")),
            location_city=_optional_str(data.get("location_city")),
            verification_level=(
                _coerce_enum(VerificationLevel, data.get("verification_level"))
                or VerificationLevel.NONE
            ),
            address_confidence=(
                float(confidence)
                if isinstance(confidence, (int, float)) and not isinstance(confidence, bool)
                else None
            ),
            phone_number=_optional_str(data.get("phone_number")),
            is_active=bool(data.get("is_active", False)),
        )


@dataclass(frozen=True)
class ServiceListing:
    """A service offered by a provider."""

    id: str
    provider_id: str
    service_name: str = ""
    service_description: str = ""
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    service_role_or_name: Optional[str] = None
    normalized_service_name: Optional[str] = None
    tags: frozenset[str] = field(default_factory=frozenset)
    service_mode: Optional[ServiceMode] = None
    coverage_scope: Optional[CoverageScope] = None
    is_primary: bool = False
    is_active: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceListing":
        return cls(
            id=str(data["id"]),
            provider_id=str(data.get("provider_id") or ""),
            service_name=str(data.get("service_name") or ""),
            service_description=str(data.get("service_description") or ""),
            category_id=_optional_str(data.get("category_id")),
            subcategory_id=_optional_str(data.get("subcategory_id")),
            service_role_or_name=_optional_str(data.get("service_role_or_name")),
            normalized_service_name=_optional_str(data.get("normalized_service_name")),
            tags=_tags(data.get("tags")),
            service_mode=_coerce_enum(ServiceMode, data.get("service_mode")),
            coverage_scope=_coerce_enum(CoverageScope, data.get("coverage_scope")),
            is_primary=bool(data.get("is_primary", False)),
            is_active=bool(data.get("is_active", False)),
        )

    def searchable_text(self) -> str:
        """Lower-cased text the keyword filter matches against."""
        parts = (
            self.service_name,
            self.service_description,
            self.service_role_or_name or "",
            self.normalized_service_name or "",
        )
        return " ".join(parts).lower()


@dataclass(frozen=True)
class ServiceSetting:
    """Free-form key/value setting attached to a service listing."""

    service_id: str
    key: str
    value: Any = None
    id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ServiceSetting":
        return cls(
            id=_optional_str(data.get("id")),
            service_id=str(data.get("service_id") or ""),
            key=str(data.get("key") or ""),
            value=data.get("value"),
        )
