# backend/discovery/services/search/price_extraction.py
"""
Best-effort price lookup from free-form service settings.

Listings carry no structured price; providers store it as an arbitrary
key/value setting. The first setting whose key mentions price, rate, amount
or fee and whose value starts with a number wins. This is a heuristic, not
a source of truth.
"""

import math
import re
from typing import Any, Iterable, Optional, Pattern

from discovery.models.catalog import ServiceSetting

PRICE_KEY: Pattern[str] = re.compile(r"price|rate|amount|fee", re.IGNORECASE)

# Leading decimal number, as a lenient float parse would read it ("50/hr" -> 50)
LEADING_NUMBER: Pattern[str] = re.compile(r"^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)")


def parse_leading_number(value: Any) -> Optional[float]:
    """Parse the number at the start of `value`, or None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    match = LEADING_NUMBER.match(str(value))
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def extract_price(settings: Iterable[ServiceSetting]) -> Optional[float]:
    """
    Return the first numeric price-like setting value.

    Args:
        settings: The listing's settings in insertion order

    Returns:
        The price, or None when no price-like key holds a number
    """
    for setting in settings or ():
        if not PRICE_KEY.search(setting.key or ""):
            continue
        price = parse_leading_number(setting.value)
        if price is not None:
            return price
    return None
