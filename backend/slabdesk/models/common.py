from __future__ import annotations

import uuid
from decimal import Decimal, InvalidOperation
from typing import Any


def new_uuid() -> str:
    return str(uuid.uuid4())


def to_number(value: Any) -> float:
    """
    Money columns come back as Decimal (or str from raw SQL sums).
    The JSON boundary uses plain numbers; absent values read as 0.
    """
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def to_decimal(value: Any) -> Decimal:
    """Normalize a money input to a 2-place Decimal for Numeric(10, 2) columns."""
    if value is None or value == "":
        return Decimal("0.00")
    try:
        return Decimal(str(value)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError):
        return Decimal("0.00")


def optional_number(value: Any) -> float | None:
    if value is None:
        return None
    return to_number(value)
