"""Decimal coercion for financial fields"""

from decimal import Decimal, InvalidOperation
from typing import Any

ZERO = Decimal("0")
CENT = Decimal("0.01")

# Largest magnitude accepted as money. Sums of many such amounts still
# quantize to cents under the default 28-digit context.
MAX_AMOUNT = Decimal("1e15")


def to_decimal(value: Any) -> Decimal | None:
    """
    Coerce a raw financial value to a finite Decimal.

    Accepts Decimal, int, float and numeric strings (thousands separators and a
    leading currency symbol are tolerated). Returns None for anything else,
    including booleans, NaN, infinities and magnitudes of MAX_AMOUNT or more.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        # str() keeps the shortest repr, 0.1 stays 0.1 instead of 0.1000000000000000055...
        result = Decimal(str(value))
    elif isinstance(value, str):
        text = value.strip().replace(",", "").replace("$", "")
        if not text:
            return None
        try:
            result = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None

    if not result.is_finite() or abs(result) >= MAX_AMOUNT:
        return None
    return result
