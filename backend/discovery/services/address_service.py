"""Address lifecycle: keep the raw text verbatim and derive structured fields from it."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..core.exceptions import ValidationException
from ..core.ulid_helper import generate_ulid
from ..models.address import Address
from ..monitoring.prometheus_metrics import prometheus_metrics
from .address_parser import parse_address
from .base import BaseService

AddressParser = Callable[[Any], Dict[str, str]]

_UPDATABLE_FIELDS = ("latitude", "longitude")


class AddressService(BaseService):
    """
    Creates and updates Address records.

    Parsing runs on creation and whenever `raw_address` changes. A parser
    failure never loses the submission: the raw text is kept and
    `address_confidence` stays unset.
    """

    def __init__(self, parser: Optional[AddressParser] = None):
        super().__init__()
        self.parser: AddressParser = parser or parse_address

    def _parse(self, raw_address: str) -> Optional[Dict[str, str]]:
        try:
            parsed = self.parser(raw_address)
        except Exception:
            self.logger.warning("Address parsing failed; keeping raw address only", exc_info=True)
            prometheus_metrics.record_address_parse("failed")
            return None
        prometheus_metrics.record_address_parse("parsed" if parsed else "empty")
        return parsed

    @BaseService.measure_operation("create_address")
    def create_address(
        self,
        raw_address: str,
        *,
        provider_id: Optional[str] = None,
        service_id: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
    ) -> Address:
        if not raw_address or not isinstance(raw_address, str):
            raise ValidationException("raw_address is required", code="RAW_ADDRESS_REQUIRED")
        if bool(provider_id) == bool(service_id):
            raise ValidationException(
                "Address must belong to exactly one of provider or service",
                code="ADDRESS_OWNER_INVALID",
                details={"provider_id": provider_id, "service_id": service_id},
            )

        address = Address(
            id=generate_ulid(),
            raw_address=raw_address,
            provider_id=provider_id,
            service_id=service_id,
            latitude=latitude,
            longitude=longitude,
        )

        parsed = self._parse(raw_address)
        if parsed is not None:
            address.apply_parsed(parsed)
            address.updated_at = datetime.now(timezone.utc)
        return address

    @BaseService.measure_operation("update_address")
    def update_address(self, address: Address, **fields: Any) -> Address:
        """
        Return an updated copy of `address`.

        Only `raw_address`, `latitude` and `longitude` are accepted; derived
        fields are recomputed from `raw_address` and cannot be set directly.
        """
        unknown = set(fields) - {"raw_address", *_UPDATABLE_FIELDS}
        if unknown:
            raise ValidationException(
                "Unsupported address fields",
                code="ADDRESS_FIELDS_INVALID",
                details={"fields": sorted(unknown)},
            )

        changes: Dict[str, Any] = {k: fields[k] for k in _UPDATABLE_FIELDS if k in fields}
        updated = replace(address, **changes, updated_at=datetime.now(timezone.utc))

        new_raw = fields.get("raw_address")
        if new_raw and new_raw != address.raw_address:
            updated.raw_address = new_raw
            parsed = self._parse(new_raw)
            if parsed is None:
                # Fields derived from the previous text no longer describe this address
                updated.apply_parsed({})
                updated.address_confidence = None
            else:
                updated.apply_parsed(parsed)
        return updated
