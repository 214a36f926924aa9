"""Per-day counters behind INV-YYYYMMDD-NNNN invoice numbers."""

from sqlalchemy import Column, Integer, String

from parcel_billing.core.database import Base


class InvoiceNumberSequence(Base):
    __tablename__ = "invoice_number_sequences"

    day = Column(String(8), primary_key=True)  # YYYYMMDD of the UTC issue date
    last_number = Column(Integer, nullable=False, default=0)
