"""Amount coercion utilities for values read from stored documents."""

import math
from decimal import Decimal
from typing import Any, Optional


def finite_amount(value: Any) -> Optional[Decimal]:
    """Return value as a Decimal if it is a finite number, else None.

    Only real numbers count: strings, booleans, NaN and infinities are
    rejected, matching how the documents were written (numbers or nothing).
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value if value.is_finite() else None
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        # str() keeps the shortest repr, so 0.1 stays Decimal("0.1")
        return Decimal(str(value))
    return None


def amount_to_json(amount: Decimal) -> float:
    """Convert a Decimal to the float representation stored in documents."""
    return float(amount)
