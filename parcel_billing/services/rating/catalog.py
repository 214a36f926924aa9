"""In-memory snapshot of the active rate tiers."""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.exceptions import (
    NoMatchingTierError,
    OverlappingTierError,
    TierNotFoundError,
    WeightExceedsMaxTierError,
)
from parcel_billing.models.rate_tier import ByVolume, ByWeight, RateTier, ServiceType
from parcel_billing.repositories.rate_tier_repository import RateTierRepository


class RateTierCatalog:
    """Selects the tier that prices a shipment.

    Only active tiers are held. Selection never falls back to a neighbouring
    tier: a gap in the configured ranges is reported as a configuration error.
    """

    def __init__(self, tiers: Iterable[RateTier]):
        self.tiers = [tier for tier in tiers if tier.is_active]

    @classmethod
    def load(cls, db: Session) -> "RateTierCatalog":
        return cls(RateTierRepository(db).get_active())

    def _of_type(self, service_type: ServiceType) -> list[RateTier]:
        return [tier for tier in self.tiers if tier.service_type == service_type.value]

    def find_dom_tier(self, shipment_count: int) -> RateTier:
        """Tier whose inclusive volume range contains the client's monthly count."""
        for tier in self._of_type(ServiceType.DOM):
            if self._matches(tier, shipment_count):
                return tier
        raise NoMatchingTierError(ServiceType.DOM.value, shipment_count)

    def find_sdd_tier(self, weight: Decimal) -> RateTier:
        """Tier with the smallest weight ceiling that still fits the shipment."""
        candidates = [
            tier for tier in self._of_type(ServiceType.SDD) if self._matches(tier, weight)
        ]
        if not candidates:
            raise WeightExceedsMaxTierError(weight)
        return min(candidates, key=lambda tier: tier.max_weight)

    def find_tier_by_id(self, tier_id: UUID) -> RateTier:
        for tier in self.tiers:
            if tier.id == tier_id:
                return tier
        raise TierNotFoundError(tier_id)

    @staticmethod
    def _matches(tier: RateTier, value: int | Decimal) -> bool:
        selector = tier.selector
        if isinstance(selector, ByVolume):
            return selector.contains(int(value))
        if isinstance(selector, ByWeight):
            return value <= selector.max_weight
        raise TypeError(f"Unknown tier selector: {selector!r}")

    def check_no_overlap(self, candidate: RateTier) -> None:
        """Raise if ``candidate`` would share a volume range with an active DOM tier.

        SDD tiers nest by weight ceiling, so only an identical ceiling conflicts.
        """
        for tier in self._of_type(ServiceType(candidate.service_type)):
            if tier.id is not None and tier.id == candidate.id:
                continue
            ours, theirs = candidate.selector, tier.selector
            if isinstance(ours, ByVolume) and isinstance(theirs, ByVolume):
                conflict = ours.overlaps(theirs)
            elif isinstance(ours, ByWeight) and isinstance(theirs, ByWeight):
                conflict = ours.max_weight == theirs.max_weight
            else:
                conflict = False
            if conflict:
                raise OverlappingTierError(
                    f"Rate tier overlaps active {tier.service_type} tier {tier.id}"
                )
