from decimal import Decimal

from parcel_billing.core.config import settings
from parcel_billing.core.exceptions import InvalidAmountError
from parcel_billing.core.money import quantize_money, to_decimal


def calculate_cod_fee(
    cod_amount: Decimal,
    percentage: Decimal | None = None,
    min_fee: Decimal | None = None,
    max_fee: Decimal | None = None,
) -> Decimal:
    """Cash-on-delivery handling fee: a percentage of the collected amount with a floor.

    Defaults to ``COD_FEE_PERCENTAGE`` / ``COD_MIN_FEE`` from settings. ``max_fee``
    caps the result when a client has negotiated one.
    """
    amount = to_decimal(cod_amount)
    if amount <= 0:
        raise InvalidAmountError(f"COD amount must be positive, got {amount}")

    pct = settings.COD_FEE_PERCENTAGE if percentage is None else to_decimal(percentage)
    floor = settings.COD_MIN_FEE if min_fee is None else to_decimal(min_fee)

    fee = max(amount * pct / Decimal(100), floor)
    if max_fee is not None:
        fee = min(fee, to_decimal(max_fee))
    return quantize_money(fee)
