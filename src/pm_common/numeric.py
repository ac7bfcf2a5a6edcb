"""Numeric coercion for exchange-sourced fields.

The exchange sends prices, sizes and volumes as JSON numbers or as numeric
strings, interchangeably. Everything entering the database goes through
to_decimal() so NaN/Infinity/blank values never reach a NUMERIC column.
"""

import math
from decimal import Decimal, InvalidOperation
from typing import Any

_ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal | None:
    """Coerce a number or numeric string to a finite Decimal, else None.

    >>> to_decimal("0.42")
    Decimal('0.42')
    >>> to_decimal(float("nan")) is None
    True
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr: 0.1 -> Decimal('0.1'), not the binary expansion
        return Decimal(str(value)) if math.isfinite(value) else None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            return None
        try:
            parsed = Decimal(stripped)
        except InvalidOperation:
            return None
        return parsed if parsed.is_finite() else None
    return None


def to_decimal_or_zero(value: Any) -> Decimal:
    """Same as to_decimal() but with a neutral 0 for volumes and sizes."""
    parsed = to_decimal(value)
    return _ZERO if parsed is None else parsed


def first_decimal(*values: Any) -> Decimal | None:
    """Return the first value that coerces to a finite Decimal."""
    for value in values:
        parsed = to_decimal(value)
        if parsed is not None:
            return parsed
    return None
