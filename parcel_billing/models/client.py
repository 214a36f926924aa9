"""Client (billing account) model."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, Numeric, String, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid


class Client(Base):
    __tablename__ = "clients"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    currency = Column(String(3), nullable=False, default="AED")
    net_payment_term = Column(Integer, nullable=False, default=30)

    # Capability flags
    cod_allowed = Column(Boolean, nullable=False, default=False)
    fod_allowed = Column(Boolean, nullable=False, default=False)

    # Pins pricing to one tier for requests of that tier's service type
    manual_rate_tier_id = Column(
        UUIDType, ForeignKey("rate_tiers.id", ondelete="SET NULL"), nullable=True
    )

    # COD fee overrides; null falls back to the global settings
    cod_fee_percent = Column(Numeric(5, 2), nullable=True)
    cod_min_fee = Column(Numeric(12, 2), nullable=True)
    cod_max_fee = Column(Numeric(12, 2), nullable=True)

    # Negotiated rates; a base rate set for a service type bypasses the tiers for it
    custom_dom_base_rate = Column(Numeric(12, 2), nullable=True)
    custom_dom_per_kg = Column(Numeric(12, 2), nullable=True)
    custom_sdd_base_rate = Column(Numeric(12, 2), nullable=True)
    custom_sdd_per_kg = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
