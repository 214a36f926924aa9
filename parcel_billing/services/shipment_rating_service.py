"""Prices shipments against the client's monthly volume and records the charge."""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.exceptions import (
    ClientNotFoundError,
    CodNotAllowedError,
    DuplicateShipmentChargeError,
    FodNotAllowedError,
)
from parcel_billing.core.locks import volume_locks
from parcel_billing.core.money import ZERO
from parcel_billing.models.client import Client
from parcel_billing.models.rate_tier import ServiceType
from parcel_billing.models.shared import as_utc, billing_month, utc_now
from parcel_billing.models.shipment_charge import ShipmentCharge
from parcel_billing.repositories.client_monthly_volume_repository import (
    ClientMonthlyVolumeRepository,
)
from parcel_billing.repositories.client_repository import ClientRepository
from parcel_billing.repositories.shipment_charge_repository import ShipmentChargeRepository
from parcel_billing.schemas.shipment_charge import ShipmentRateRequest
from parcel_billing.services.rating.calculator import Dimensions, RateResult, calculate_rate
from parcel_billing.services.rating.catalog import RateTierCatalog
from parcel_billing.services.rating.cod_fee import calculate_cod_fee

logger = logging.getLogger(__name__)


def dimensions_from(
    length: Decimal | None, width: Decimal | None, height: Decimal | None
) -> Dimensions | None:
    """Dimensions count only when all three are known."""
    if length is None or width is None or height is None:
        return None
    return Dimensions(length=length, width=width, height=height)


class ShipmentRatingService:
    def __init__(self, db: Session):
        self.db = db
        self.client_repo = ClientRepository(db)
        self.volume_repo = ClientMonthlyVolumeRepository(db)
        self.charge_repo = ShipmentChargeRepository(db)

    def _get_client(self, client_id: UUID) -> Client:
        client = self.client_repo.get_by_id(client_id)
        if not client:
            raise ClientNotFoundError(client_id)
        return client

    def quote(
        self,
        client_id: UUID,
        service_type: ServiceType,
        weight: Decimal,
        dimensions: Dimensions | None = None,
        shipment_count: int | None = None,
        now: datetime | None = None,
    ) -> RateResult:
        """Price a prospective shipment without recording anything.

        Without an explicit ``shipment_count`` the client's stored count for the
        month of ``now`` is used.
        """
        client = self._get_client(client_id)
        if shipment_count is None:
            shipment_count = self.volume_repo.get_count(client_id, billing_month(now or utc_now()))
        catalog = RateTierCatalog.load(self.db)
        return calculate_rate(catalog, client, service_type, weight, shipment_count, dimensions)

    def calculate_cod_fee(self, cod_amount: Decimal, client_id: UUID | None = None) -> Decimal:
        """COD fee with the client's negotiated percentage, floor and cap applied."""
        if client_id is None:
            return calculate_cod_fee(cod_amount)
        client = self._get_client(client_id)
        return self._client_cod_fee(client, cod_amount)

    @staticmethod
    def _client_cod_fee(client: Client, cod_amount: Decimal | None) -> Decimal:
        return calculate_cod_fee(
            cod_amount or ZERO,
            percentage=client.cod_fee_percent,  # type: ignore[arg-type]
            min_fee=client.cod_min_fee,  # type: ignore[arg-type]
            max_fee=client.cod_max_fee,  # type: ignore[arg-type]
        )

    def rate_shipment(self, request: ShipmentRateRequest) -> ShipmentCharge:
        """Price a newly created shipment and count it towards the client's month.

        Shipments of one client and month are rated one at a time: the n-th
        shipment is priced against a count of n-1 and no two shipments see the
        same count.
        """
        created_at = as_utc(request.created_at) if request.created_at else utc_now()
        period = billing_month(created_at)

        with volume_locks.hold((request.client_id, period)):
            try:
                client = self._get_client(request.client_id)
                if request.cod_required and not client.cod_allowed:
                    raise CodNotAllowedError(f"Client {client.id} is not enabled for cash on delivery")
                if request.fod_required and not client.fod_allowed:
                    raise FodNotAllowedError(f"Client {client.id} is not enabled for fit on delivery")
                if self.charge_repo.get_by_shipment_id(request.shipment_id):
                    raise DuplicateShipmentChargeError(request.shipment_id)

                counter = self.volume_repo.get_for_update(request.client_id, period)
                volume_count = int(counter.shipment_count)

                catalog = RateTierCatalog.load(self.db)
                result = calculate_rate(
                    catalog,
                    client,
                    request.service_type,
                    request.weight,
                    volume_count,
                    dimensions_from(request.length, request.width, request.height),
                )
                cod_fee = (
                    self._client_cod_fee(client, request.cod_amount) if request.cod_required else ZERO
                )

                self.volume_repo.increment(counter)
                charge = self.charge_repo.create(
                    shipment_id=request.shipment_id,
                    client_id=request.client_id,
                    service_type=request.service_type.value,
                    period=period,
                    volume_count=volume_count,
                    rate_tier_id=result.tier.id if result.tier else None,
                    using_manual_tier=result.using_manual_tier,
                    using_custom_rates=result.using_custom_rates,
                    pieces=request.pieces,
                    actual_weight=result.actual_weight,
                    volumetric_weight=result.volumetric_weight,
                    chargeable_weight=result.chargeable_weight,
                    base_rate=result.base_rate,
                    additional_kg_charge=result.additional_kg_charge,
                    total_rate=result.total_rate,
                    cod_amount=request.cod_amount if request.cod_required else None,
                    cod_fee=cod_fee,
                    shipment_created_at=created_at,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        logger.info(
            "Rated shipment %s for client %s: %s (tier %s, volume %d)",
            request.shipment_id,
            request.client_id,
            result.total_rate,
            result.tier.id if result.tier else "custom",
            volume_count,
        )
        self.db.refresh(charge)
        return charge
