from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from parcel_billing.core.money import Money


class ClientCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    currency: str = Field(default="AED", min_length=3, max_length=3)
    net_payment_term: int = Field(default=30, ge=0)
    cod_allowed: bool = False
    fod_allowed: bool = False
    manual_rate_tier_id: UUID | None = None
    cod_fee_percent: Decimal | None = Field(default=None, ge=0, le=100)
    cod_min_fee: Money | None = Field(default=None, ge=0)
    cod_max_fee: Money | None = Field(default=None, gt=0)
    custom_dom_base_rate: Money | None = Field(default=None, ge=0)
    custom_dom_per_kg: Money | None = Field(default=None, ge=0)
    custom_sdd_base_rate: Money | None = Field(default=None, ge=0)
    custom_sdd_per_kg: Money | None = Field(default=None, ge=0)


class ClientResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    currency: str
    net_payment_term: int
    cod_allowed: bool
    fod_allowed: bool
    manual_rate_tier_id: UUID | None = None
    cod_fee_percent: Decimal | None = None
    cod_min_fee: Money | None = None
    cod_max_fee: Money | None = None
    custom_dom_base_rate: Money | None = None
    custom_dom_per_kg: Money | None = None
    custom_sdd_base_rate: Money | None = None
    custom_sdd_per_kg: Money | None = None
    created_at: datetime
    updated_at: datetime
