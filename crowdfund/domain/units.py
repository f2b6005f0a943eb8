from __future__ import annotations

"""Conversion between octas (on-chain integer unit) and APT (display unit).

Raw to display is exact. Display to raw truncates toward zero, so a round trip
can only lose the sub-octa remainder and never gains value.
"""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import Any, Optional

from .errors import InvalidInput

OCTA_DECIMALS = 8
OCTAS_PER_APT = 10**OCTA_DECIMALS
_SCALE = Decimal(OCTAS_PER_APT)


def _as_decimal(value: Any) -> Optional[Decimal]:
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        number = value
    elif isinstance(value, int):
        number = Decimal(value)
    elif isinstance(value, float):
        # repr keeps the shortest literal, so 0.29 stays 0.29 instead of 0.28999...
        number = Decimal(repr(value))
    elif isinstance(value, str):
        text = value.strip().replace("_", "")
        if not text:
            return None
        try:
            number = Decimal(text)
        except InvalidOperation:
            return None
    else:
        return None
    if not number.is_finite():
        return None
    return number


def to_display(raw: Any) -> Decimal:
    """Return ``raw`` octas as APT without rounding.

    Non-numeric input yields ``Decimal(0)``.
    """
    number = _as_decimal(raw)
    if number is None:
        return Decimal(0)
    return number / _SCALE


def to_raw(display: Any) -> int:
    """Return octas for a display amount, truncated toward zero.

    Negative, non-finite, or unparsable amounts produce ``0``.
    """
    number = _as_decimal(display)
    if number is None or number < 0:
        return 0
    try:
        return int((number * _SCALE).to_integral_value(rounding=ROUND_DOWN))
    except ArithmeticError:
        return 0


def parse_display_amount(value: Any, *, field: str = "amount") -> Decimal:
    """Validate a user-entered APT amount.

    Raises:
        InvalidInput: If the amount is unparsable, non-finite, or not positive.
    """
    number = _as_decimal(value)
    if number is None:
        raise InvalidInput(f"{field} must be a number.")
    if number <= 0:
        raise InvalidInput(f"{field} must be greater than zero.")
    return number


def format_display(raw: Any, places: int = 2) -> str:
    """Format octas as an APT string with a fixed number of decimals."""
    quantum = Decimal(1).scaleb(-max(0, int(places)))
    return str(to_display(raw).quantize(quantum, rounding=ROUND_DOWN))


__all__ = [
    "OCTAS_PER_APT",
    "OCTA_DECIMALS",
    "format_display",
    "parse_display_amount",
    "to_display",
    "to_raw",
]
