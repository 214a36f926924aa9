"""RateTier schemas."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from parcel_billing.core.money import Money
from parcel_billing.models.rate_tier import ServiceType


class RateTierCreate(BaseModel):
    service_type: ServiceType
    name: str | None = Field(default=None, max_length=100)
    min_volume: int | None = Field(default=None, ge=0)
    max_volume: int | None = Field(default=None, ge=0)
    max_weight: int | None = Field(default=None, gt=0)
    base_rate: Money = Field(ge=0)
    additional_kg_rate: Money = Field(ge=0)
    is_active: bool = True

    @model_validator(mode="after")
    def check_selector_fields(self) -> "RateTierCreate":
        if self.service_type == ServiceType.DOM:
            if self.min_volume is None:
                raise ValueError("DOM tiers require min_volume")
            if self.max_volume is not None and self.max_volume < self.min_volume:
                raise ValueError("max_volume must not be lower than min_volume")
            if self.max_weight is not None:
                raise ValueError("DOM tiers are selected by volume and must not set max_weight")
        else:
            if self.max_weight is None:
                raise ValueError("SDD tiers require max_weight")
            if self.min_volume is not None or self.max_volume is not None:
                raise ValueError("SDD tiers are selected by weight and must not set a volume range")
        return self


class RateTierUpdate(BaseModel):
    name: str | None = Field(default=None, max_length=100)
    min_volume: int | None = Field(default=None, ge=0)
    max_volume: int | None = Field(default=None, ge=0)
    max_weight: int | None = Field(default=None, gt=0)
    base_rate: Money | None = Field(default=None, ge=0)
    additional_kg_rate: Money | None = Field(default=None, ge=0)
    is_active: bool | None = None


class RateTierResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str | None = None
    service_type: ServiceType
    min_volume: int | None = None
    max_volume: int | None = None
    max_weight: int | None = None
    base_rate: Money
    additional_kg_rate: Money
    is_active: bool
    created_at: datetime
    updated_at: datetime
