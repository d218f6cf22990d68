# commission_hub/sales_commission/parsing.py
"""
Numeric parsing for user-entered values.

Form fields arrive as Brazilian-formatted text ("1.234,56") or as plain
numbers. Parsing is total: anything that cannot be read as a finite
number becomes 0, so half-typed input never breaks the commission math.
"""

import math
import numbers
from decimal import Decimal
from typing import Any

from .constants import LIMIT_CREDITO


def parse_number(value: Any):
    """
    Parse a pt-BR formatted number.

    Examples:
        parse_number("1.500.000")  -> 1500000.0
        parse_number("5,5")        -> 5.5
        parse_number(None)         -> 0
        parse_number("abc")        -> 0
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, Decimal):
        # Decimal does not mix with float arithmetic downstream
        try:
            value = float(value)
        except (ValueError, OverflowError):
            return 0

    if isinstance(value, numbers.Real):
        try:
            return value if math.isfinite(value) else 0
        except (TypeError, ValueError, OverflowError):
            return 0

    text = str(value).strip().replace(".", "").replace(",", ".", 1)
    if not text:
        return 0
    # float() accepts "1_000"; a form never should
    if "_" in text:
        return 0

    try:
        number = float(text)
    except ValueError:
        return 0

    return number if math.isfinite(number) else 0


def clamp_credito(raw) -> float:
    """Bound the raw credit (cotas x valor_unit) into [0, LIMIT_CREDITO]."""
    return min(max(raw, 0), LIMIT_CREDITO)


def exceeds_credit_limit(raw) -> bool:
    return raw > LIMIT_CREDITO
