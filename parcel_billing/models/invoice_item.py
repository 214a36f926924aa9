"""InvoiceItem model: one charge line on an invoice."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid, utc_now


class InvoiceItem(Base):
    __tablename__ = "invoice_items"
    __table_args__ = (
        UniqueConstraint("invoice_id", "shipment_id", name="uq_invoice_item_shipment"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    invoice_id = Column(
        UUIDType, ForeignKey("invoices.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    # Null for manually added lines
    shipment_id = Column(String(64), nullable=True, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(12, 2), nullable=False)
    total = Column(Numeric(12, 2), nullable=False)
    position = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())

    @property
    def is_manual(self) -> bool:
        return self.shipment_id is None
