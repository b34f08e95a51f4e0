# backend/discovery/models/address.py
"""Address record with fields derived from the raw address text."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

PARSED_ADDRESS_FIELDS: Tuple[str, ...] = (
    "premise",
    "street",
    "community",
    "area",
    "district",
    "city",
    "state",
    "country",
)

CONFIDENCE_PER_FIELD = 10
MAX_ADDRESS_CONFIDENCE = 100


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def compute_address_confidence(parsed: Dict[str, Any]) -> int:
    """10 points per parsed field that resolved to a value, capped at 100."""
    found = sum(1 for name in PARSED_ADDRESS_FIELDS if parsed.get(name))
    return min(MAX_ADDRESS_CONFIDENCE, found * CONFIDENCE_PER_FIELD)


@dataclass
class Address:
    """
    A provider or service address.

    Exactly one of `provider_id` / `service_id` is set. `raw_address` is kept
    verbatim; the parsed fields and `address_confidence` are derived from it.
    """

    id: str
    raw_address: str
    provider_id: Optional[str] = None
    service_id: Optional[str] = None

    premise: Optional[str] = None
    street: Optional[str] = None
    community: Optional[str] = None
    area: Optional[str] = None
    district: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    address_confidence: Optional[int] = None

    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)

    def __post_init__(self) -> None:
        if bool(self.provider_id) == bool(self.service_id):
            raise ValueError("Address must belong to exactly one of provider_id or service_id")

    def parsed_fields(self) -> Dict[str, Optional[str]]:
        return {name: getattr(self, name) for name in PARSED_ADDRESS_FIELDS}

    def apply_parsed(self, parsed: Dict[str, Any]) -> None:
        """Replace every derived field with the parser output and recompute confidence."""
        for name in PARSED_ADDRESS_FIELDS:
            setattr(self, name, parsed.get(name) or None)
        self.address_confidence = compute_address_confidence(parsed)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "provider_id": self.provider_id,
            "service_id": self.service_id,
            "raw_address": self.raw_address,
            **self.parsed_fields(),
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address_confidence": self.address_confidence,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
