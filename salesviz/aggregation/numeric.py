"""
Numeric coercion for persisted money and quantity values.

Backends may serialize decimals as strings; everything is normalized to an
exact ``Decimal`` before any arithmetic. Non-numeric input becomes zero.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Convert a number, numeric string or None to a finite Decimal (0 on failure)."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        return Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, so 0.1 stays 0.1
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return ZERO
        try:
            result = Decimal(text)
        except InvalidOperation:
            return ZERO
    else:
        return ZERO

    if not result.is_finite():
        return ZERO
    return result


def to_int(value: Any) -> int:
    """Convert a quantity-like value to an int, truncating fractions."""
    return int(to_decimal(value))
