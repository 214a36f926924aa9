"""ShipmentCharge model: the priced result of rating one shipment."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid


class ShipmentCharge(Base):
    __tablename__ = "shipment_charges"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    shipment_id = Column(String(64), nullable=False, unique=True, index=True)
    client_id = Column(
        UUIDType, ForeignKey("clients.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    service_type = Column(String(3), nullable=False)
    period = Column(String(7), nullable=False, index=True)

    # Tier-relevant count this shipment was billed against
    volume_count = Column(Integer, nullable=False)
    # Null when the client's custom rates priced the shipment
    rate_tier_id = Column(
        UUIDType, ForeignKey("rate_tiers.id", ondelete="RESTRICT"), nullable=True
    )
    using_manual_tier = Column(Boolean, nullable=False, default=False)
    using_custom_rates = Column(Boolean, nullable=False, default=False)

    pieces = Column(Integer, nullable=False, default=1)
    actual_weight = Column(Numeric(10, 3), nullable=False)
    volumetric_weight = Column(Numeric(10, 3), nullable=False, default=0)
    chargeable_weight = Column(Numeric(10, 3), nullable=False)

    base_rate = Column(Numeric(12, 2), nullable=False)
    additional_kg_charge = Column(Numeric(12, 2), nullable=False, default=0)
    total_rate = Column(Numeric(12, 2), nullable=False)

    cod_amount = Column(Numeric(12, 2), nullable=True)
    cod_fee = Column(Numeric(12, 2), nullable=False, default=0)

    shipment_created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
