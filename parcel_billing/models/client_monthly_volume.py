"""Per-client monthly shipment counter used for DOM tier selection."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid


class ClientMonthlyVolume(Base):
    __tablename__ = "client_monthly_volumes"
    __table_args__ = (UniqueConstraint("client_id", "period", name="uq_client_monthly_volume"),)

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    client_id = Column(
        UUIDType, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    period = Column(String(7), nullable=False)  # YYYY-MM
    shipment_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
