"""Pure shipment pricing: chargeable weight, tier selection and the charge itself."""

import math
from dataclasses import dataclass
from decimal import Decimal

from parcel_billing.core.config import settings
from parcel_billing.core.exceptions import InvalidWeightError
from parcel_billing.core.money import ZERO, quantize_money, to_decimal
from parcel_billing.models.client import Client
from parcel_billing.models.rate_tier import RateTier, ServiceType
from parcel_billing.services.rating.catalog import RateTierCatalog


@dataclass
class Dimensions:
    """Parcel dimensions in centimetres."""

    length: Decimal
    width: Decimal
    height: Decimal


@dataclass
class RateResult:
    base_rate: Decimal
    additional_kg_charge: Decimal
    total_rate: Decimal
    # None when the client's custom rates priced the shipment
    tier: RateTier | None
    using_manual_tier: bool
    using_custom_rates: bool
    actual_weight: Decimal
    volumetric_weight: Decimal
    chargeable_weight: Decimal


def volumetric_weight(dimensions: Dimensions | None) -> Decimal:
    """``ceil(L x W x H / divisor)`` in kg, or 0 when dimensions are unknown."""
    if dimensions is None:
        return Decimal(0)
    volume = (
        to_decimal(dimensions.length) * to_decimal(dimensions.width) * to_decimal(dimensions.height)
    )
    return Decimal(math.ceil(volume / Decimal(settings.VOLUMETRIC_DIVISOR)))


def chargeable_weight(actual_weight: Decimal, dimensions: Dimensions | None = None) -> Decimal:
    chargeable = max(to_decimal(actual_weight), volumetric_weight(dimensions))
    if chargeable <= 0:
        raise InvalidWeightError(f"Chargeable weight must be positive, got {chargeable}")
    return chargeable


def custom_rates(client: Client, service_type: ServiceType) -> tuple[Decimal, Decimal] | None:
    """The client's negotiated ``(base_rate, per_kg)`` for the service, if any.

    A custom base rate without a per-kg rate charges nothing for extra weight.
    """
    if service_type == ServiceType.DOM:
        base_rate, per_kg = client.custom_dom_base_rate, client.custom_dom_per_kg
    else:
        base_rate, per_kg = client.custom_sdd_base_rate, client.custom_sdd_per_kg
    if base_rate is None:
        return None
    return to_decimal(base_rate), (to_decimal(per_kg) if per_kg is not None else ZERO)


def select_tier(
    catalog: RateTierCatalog,
    client: Client,
    service_type: ServiceType,
    weight: Decimal,
    shipment_count: int,
) -> tuple[RateTier, bool]:
    """Return the pricing tier and whether it came from the client's manual override."""
    if client.manual_rate_tier_id is not None:
        tier = catalog.find_tier_by_id(client.manual_rate_tier_id)  # type: ignore[arg-type]
        if tier.service_type == service_type.value:
            return tier, True

    if service_type == ServiceType.DOM:
        return catalog.find_dom_tier(shipment_count), False
    return catalog.find_sdd_tier(weight), False


def calculate_rate(
    catalog: RateTierCatalog,
    client: Client,
    service_type: ServiceType,
    weight: Decimal,
    shipment_count: int,
    dimensions: Dimensions | None = None,
) -> RateResult:
    """Price one shipment.

    Custom rates negotiated with the client take precedence over any tier,
    including a manual one. Otherwise ``shipment_count``, the number of
    shipments the client already created in the shipment's calendar month,
    selects the tier. The first ``INCLUDED_WEIGHT_KG`` kilograms are covered by
    the base rate; each started kilogram above that adds the per-kg rate.
    """
    actual = to_decimal(weight)
    volumetric = volumetric_weight(dimensions)
    chargeable = chargeable_weight(actual, dimensions)

    tier: RateTier | None = None
    using_manual_tier = False
    custom = custom_rates(client, service_type)
    if custom is not None:
        base, per_kg = custom
    else:
        tier, using_manual_tier = select_tier(
            catalog, client, service_type, chargeable, shipment_count
        )
        base, per_kg = to_decimal(tier.base_rate), to_decimal(tier.additional_kg_rate)

    extra_kg = max(0, math.ceil(chargeable) - settings.INCLUDED_WEIGHT_KG)
    base_rate = quantize_money(base)
    additional_kg_charge = quantize_money(extra_kg * per_kg)

    return RateResult(
        base_rate=base_rate,
        additional_kg_charge=additional_kg_charge,
        total_rate=base_rate + additional_kg_charge,
        tier=tier,
        using_manual_tier=using_manual_tier,
        using_custom_rates=custom is not None,
        actual_weight=actual,
        volumetric_weight=volumetric,
        chargeable_weight=chargeable,
    )
