"""Schemas for rate quotes and COD fee calculation."""

from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field

from parcel_billing.core.money import Money
from parcel_billing.models.rate_tier import ServiceType
from parcel_billing.schemas.rate_tier import RateTierResponse


class RateCalculateRequest(BaseModel):
    client_id: UUID
    service_type: ServiceType
    weight: Decimal = Field(description="Actual weight in kg")
    length: Decimal | None = Field(default=None, gt=0, description="cm")
    width: Decimal | None = Field(default=None, gt=0, description="cm")
    height: Decimal | None = Field(default=None, gt=0, description="cm")
    shipment_count: int | None = Field(
        default=None,
        ge=0,
        description="Shipments already created this month; read from the volume counter when omitted",
    )


class RateCalculateResponse(BaseModel):
    base_rate: Money
    additional_kg_charge: Money
    total_rate: Money
    tier: RateTierResponse | None = None
    using_manual_tier: bool
    using_custom_rates: bool
    actual_weight: Decimal
    volumetric_weight: Decimal
    chargeable_weight: Decimal


class CodFeeRequest(BaseModel):
    cod_amount: Money
    client_id: UUID | None = None


class CodFeeResponse(BaseModel):
    cod_amount: Money
    fee: Money
