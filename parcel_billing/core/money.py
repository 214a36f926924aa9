"""Fixed-point helpers for monetary amounts."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Any) -> Decimal:
    """Convert a stored or user-supplied value to Decimal without going through float."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return ZERO
    return Decimal(str(value))


def quantize_money(value: Any) -> Decimal:
    """Round to cents using round-half-up."""
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def _reject_float(value: Any) -> Any:
    if isinstance(value, float):
        raise ValueError("monetary amounts must be sent as decimal strings, not floats")
    return value


# Monetary amount exchanged over the API as a two-decimal string, e.g. "18.90".
Money = Annotated[
    Decimal,
    BeforeValidator(_reject_float),
    PlainSerializer(lambda v: f"{quantize_money(v):f}", return_type=str, when_used="json"),
]
