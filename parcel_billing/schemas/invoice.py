from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from parcel_billing.core.money import Money
from parcel_billing.models.invoice import InvoiceStatus


class InvoiceGenerateRequest(BaseModel):
    client_id: UUID
    period_from: datetime
    period_to: datetime
    shipment_ids: list[str] | None = Field(default=None, min_length=1)

    @model_validator(mode="after")
    def check_period(self) -> "InvoiceGenerateRequest":
        if self.period_to <= self.period_from:
            raise ValueError("period_to must be after period_from")
        return self


class InvoiceUpdate(BaseModel):
    amount_paid: Money | None = Field(default=None, ge=0)
    status: InvoiceStatus | None = None
    notes: str | None = None
    adjustment_notes: str | None = Field(default=None, min_length=1)
    payment_reference: str | None = Field(default=None, max_length=255)
    adjusted_by: str | None = Field(default=None, max_length=255)


class InvoiceItemCreate(BaseModel):
    description: str = Field(min_length=1)
    quantity: int = Field(default=1, ge=1)
    unit_price: Money
    adjustment_notes: str | None = Field(
        default=None, min_length=1, description="Customer-visible reason for the adjustment"
    )
    adjusted_by: str | None = Field(default=None, max_length=255)


class InvoiceItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_id: UUID
    shipment_id: str | None = None
    description: str
    quantity: int
    unit_price: Money
    total: Money
    position: int
    created_at: datetime


class InvoiceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    invoice_number: str
    client_id: UUID
    status: InvoiceStatus
    status_overridden: bool
    period_from: datetime
    period_to: datetime
    issue_date: datetime
    due_date: datetime
    currency: str
    subtotal: Money
    taxes: Money
    total: Money
    amount_paid: Money
    balance: Money
    payment_date: datetime | None = None
    payment_reference: str | None = None
    notes: str | None = None
    is_adjusted: bool
    adjustment_notes: str | None = None
    last_adjusted_by: str | None = None
    last_adjusted_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class InvoiceDetailsResponse(BaseModel):
    invoice: InvoiceResponse
    items: list[InvoiceItemResponse]
