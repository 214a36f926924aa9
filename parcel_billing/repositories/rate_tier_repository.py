"""RateTier repository for data access."""

from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.models.rate_tier import RateTier, ServiceType
from parcel_billing.schemas.rate_tier import RateTierCreate, RateTierUpdate


class RateTierRepository:
    """Repository for RateTier model."""

    def __init__(self, db: Session):
        self.db = db

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        service_type: ServiceType | None = None,
        active_only: bool = False,
    ) -> list[RateTier]:
        query = self.db.query(RateTier)

        if service_type:
            query = query.filter(RateTier.service_type == service_type.value)
        if active_only:
            query = query.filter(RateTier.is_active.is_(True))

        return (
            query.order_by(RateTier.service_type, RateTier.min_volume, RateTier.max_weight)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_active(self, service_type: ServiceType | None = None) -> list[RateTier]:
        """Get every active tier, optionally for one service type."""
        query = self.db.query(RateTier).filter(RateTier.is_active.is_(True))
        if service_type:
            query = query.filter(RateTier.service_type == service_type.value)
        return query.all()

    def get_by_id(self, tier_id: UUID) -> RateTier | None:
        return self.db.query(RateTier).filter(RateTier.id == tier_id).first()

    def build(self, data: RateTierCreate) -> RateTier:
        """Build an unsaved tier from create data."""
        return RateTier(
            name=data.name,
            service_type=data.service_type.value,
            min_volume=data.min_volume,
            max_volume=data.max_volume,
            max_weight=data.max_weight,
            base_rate=data.base_rate,
            additional_kg_rate=data.additional_kg_rate,
            is_active=data.is_active,
        )

    def create(self, data: RateTierCreate) -> RateTier:
        tier = self.build(data)
        self.db.add(tier)
        self.db.commit()
        self.db.refresh(tier)
        return tier

    def update(self, tier_id: UUID, data: RateTierUpdate) -> RateTier | None:
        tier = self.get_by_id(tier_id)
        if not tier:
            return None

        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(tier, key, value)

        self.db.commit()
        self.db.refresh(tier)
        return tier

    def deactivate(self, tier_id: UUID) -> RateTier | None:
        """Retire a tier. Tiers are never deleted so historical charges stay traceable."""
        tier = self.get_by_id(tier_id)
        if not tier:
            return None

        tier.is_active = False  # type: ignore[assignment]
        self.db.commit()
        self.db.refresh(tier)
        return tier
