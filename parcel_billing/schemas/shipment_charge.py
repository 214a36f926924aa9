"""ShipmentCharge schemas."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from parcel_billing.core.money import Money
from parcel_billing.models.rate_tier import ServiceType


class ShipmentRateRequest(BaseModel):
    """Shipment attributes supplied by the order system when a shipment is created."""

    shipment_id: str = Field(min_length=1, max_length=64)
    client_id: UUID
    service_type: ServiceType
    weight: Decimal
    pieces: int = Field(default=1, ge=1)
    length: Decimal | None = Field(default=None, gt=0)
    width: Decimal | None = Field(default=None, gt=0)
    height: Decimal | None = Field(default=None, gt=0)
    cod_required: bool = False
    cod_amount: Money | None = None
    fod_required: bool = False
    created_at: datetime | None = None


class ShipmentChargeResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    shipment_id: str
    client_id: UUID
    service_type: ServiceType
    period: str
    volume_count: int
    rate_tier_id: UUID | None = None
    using_manual_tier: bool
    using_custom_rates: bool
    pieces: int
    actual_weight: Decimal
    volumetric_weight: Decimal
    chargeable_weight: Decimal
    base_rate: Money
    additional_kg_charge: Money
    total_rate: Money
    cod_amount: Money | None = None
    cod_fee: Money
    shipment_created_at: datetime
    created_at: datetime
