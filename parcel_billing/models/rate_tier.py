"""RateTier model: one pricing bracket for a service type."""

from dataclasses import dataclass
from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid


class ServiceType(str, Enum):
    DOM = "DOM"  # next-business-day domestic, priced by monthly volume
    SDD = "SDD"  # same-day delivery, priced by weight bracket


@dataclass(frozen=True)
class ByVolume:
    """DOM tier: inclusive monthly shipment-count range, open-ended when max_volume is None."""

    min_volume: int
    max_volume: int | None

    def contains(self, shipment_count: int) -> bool:
        if shipment_count < self.min_volume:
            return False
        return self.max_volume is None or shipment_count <= self.max_volume

    def overlaps(self, other: "ByVolume") -> bool:
        self_max = self.max_volume if self.max_volume is not None else float("inf")
        other_max = other.max_volume if other.max_volume is not None else float("inf")
        return self.min_volume <= other_max and other.min_volume <= self_max


@dataclass(frozen=True)
class ByWeight:
    """SDD tier: flat rate up to an inclusive weight ceiling in kg."""

    max_weight: int


TierSelector = ByVolume | ByWeight


class RateTier(Base):
    __tablename__ = "rate_tiers"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=True)
    service_type = Column(String(3), nullable=False, index=True)

    # DOM: monthly shipment volume bracket
    min_volume = Column(Integer, nullable=True)
    max_volume = Column(Integer, nullable=True)

    # SDD: weight ceiling in kg
    max_weight = Column(Integer, nullable=True)

    base_rate = Column(Numeric(12, 2), nullable=False)
    additional_kg_rate = Column(Numeric(12, 2), nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def selector(self) -> TierSelector:
        if self.service_type == ServiceType.SDD.value:
            return ByWeight(max_weight=int(self.max_weight))  # type: ignore[arg-type]
        return ByVolume(
            min_volume=int(self.min_volume or 0),
            max_volume=None if self.max_volume is None else int(self.max_volume),  # type: ignore[arg-type]
        )
