# backend/discovery/services/address_parser.py
"""
Deterministic, rule-based address parser.

Decomposes a free-text address into structured fields without any external
lookups. Best-effort only: fields that cannot be recognised are simply left
out, and unparsable input yields an empty dict.

Apply rules in this order: premise -> street -> community -> area ->
city/state/country (tail of the string) -> district
"""

import re
from typing import Any, Dict, List, Optional, Pattern

# Leading house/plot number, optionally suffixed ("12", "12B", "4-6")
PREMISE: Pattern[str] = re.compile(r"^\s*(\d+[-\w]*)\b")

STREET_KEYWORDS: Pattern[str] = re.compile(
    r"\b(?:street|st\.?|road|rd\.?|avenue|ave\.?|lane|dr\.?|boulevard|blvd\.?|way)\b",
    re.IGNORECASE,
)
COMMUNITY_KEYWORDS: Pattern[str] = re.compile(
    r"\b(?:estate|quarter|quarters|village|camp|community)\b", re.IGNORECASE
)
AREA_KEYWORDS: Pattern[str] = re.compile(
    r"\b(?:roundabout|junction|axis|landmark|power line|quarry|near|opposite|beside)\b",
    re.IGNORECASE,
)
DISTRICT_KEYWORDS: Pattern[str] = re.compile(r"\b(?:district|suburb|lga|town)\b", re.IGNORECASE)

SEGMENT_SEPARATOR: Pattern[str] = re.compile(r"[,;]")


def _first_segment(text: str, pattern: Pattern[str]) -> Optional[str]:
    """First comma/semicolon-delimited segment matching `pattern`, trimmed."""
    for segment in SEGMENT_SEPARATOR.split(text):
        if pattern.search(segment):
            return segment.strip()
    return None


def _tail_fields(parts: List[str]) -> Dict[str, str]:
    """
    Read city/state/country from the last comma-separated part.

    1 token -> country; 2 tokens -> state, country; 3+ tokens -> leading
    tokens form the city, then state, then country.
    """
    if not parts:
        return {}
    tokens = parts[-1].split()
    if len(tokens) == 1:
        return {"country": tokens[0]}
    if len(tokens) == 2:
        return {"state": tokens[0], "country": tokens[1]}
    if len(tokens) >= 3:
        return {
            "city": " ".join(tokens[:-2]),
            "state": tokens[-2],
            "country": tokens[-1],
        }
    return {}


def parse_address(raw: Any) -> Dict[str, str]:
    """
    Parse a raw address into structured fields.

    Args:
        raw: Free-text address as submitted by the provider

    Returns:
        Mapping with any of premise, street, community, area, district,
        city, state, country. Empty for empty or non-string input.
    """
    if not raw or not isinstance(raw, str):
        return {}

    text = raw.strip()
    out: Dict[str, Optional[str]] = {}

    premise = PREMISE.match(text)
    if premise:
        out["premise"] = premise.group(1)

    out["street"] = _first_segment(text, STREET_KEYWORDS)
    out["community"] = _first_segment(text, COMMUNITY_KEYWORDS)
    out["area"] = _first_segment(text, AREA_KEYWORDS)

    parts = [part.strip() for part in text.split(",") if part.strip()]
    out.update(_tail_fields(parts))

    out["district"] = next((part for part in parts if DISTRICT_KEYWORDS.search(part)), None)

    return {key: value for key, value in out.items() if value}
