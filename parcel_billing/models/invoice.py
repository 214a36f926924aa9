from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String, Text, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_number = Column(String(50), unique=True, index=True, nullable=False)
    client_id = Column(
        UUIDType, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    status = Column(String(20), nullable=False, default=InvoiceStatus.PENDING.value)
    # Set when an operator forced the status; cleared by the next item mutation
    status_overridden = Column(Boolean, nullable=False, default=False)

    # Billing period, half-open [period_from, period_to)
    period_from = Column(DateTime(timezone=True), nullable=False)
    period_to = Column(DateTime(timezone=True), nullable=False)

    issue_date = Column(DateTime(timezone=True), nullable=False)
    due_date = Column(DateTime(timezone=True), nullable=False)
    currency = Column(String(3), nullable=False, default="AED")

    # Amounts
    subtotal = Column(Numeric(12, 2), nullable=False, default=0)
    taxes = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False, default=0)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False, default=0)

    payment_date = Column(DateTime(timezone=True), nullable=True)
    payment_reference = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    # Adjustments made outside the automatic shipment billing flow
    is_adjusted = Column(Boolean, nullable=False, default=False)
    adjustment_notes = Column(Text, nullable=True)
    last_adjusted_by = Column(String(255), nullable=True)
    last_adjusted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
