"""Raw API record -> Customer normalization."""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Iterable

from .errors import ValidationError
from .schemas import Customer

logger = logging.getLogger(__name__)

# Leading integer, the way the customer API's own clients read ids ("12abc" -> 12).
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

_STRING_FIELDS = {
    "cg_id": "cgId",
    "name": "name",
    "email": "email",
    "mobile": "mobile",
}


def _parse_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value)
        if match:
            return int(match.group(1))
    return None


def _as_text(value: Any) -> str:
    """Stringify a scalar the way JSON clients do (True -> "true", 5.0 -> "5")."""
    if not value:
        return ""
    if isinstance(value, bool):
        return "true"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
    return str(value)


def normalize(raw: Any) -> Customer | None:
    """Convert a raw API customer into a ``Customer``.

    Returns None when the record has no usable integer ``id``. Never raises.
    """
    if not isinstance(raw, dict):
        return None

    customer_id = _parse_id(raw.get("id"))
    if customer_id is None:
        return None

    fields = {attr: _as_text(raw.get(key)) for attr, key in _STRING_FIELDS.items()}
    return Customer(id=customer_id, **fields)


def normalize_many(raws: Iterable[Any]) -> list[Customer]:
    """Normalize a page of raw records, dropping (and logging) invalid ones."""
    customers: list[Customer] = []
    for raw in raws:
        customer = normalize(raw)
        if customer is None:
            err = ValidationError("Invalid customer record", raw=raw)
            logger.warning("%s: %r", err, raw)
            continue
        customers.append(customer)
    return customers
