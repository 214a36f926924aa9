"""ShipmentCharge repository for data access."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import exists
from sqlalchemy.orm import Session

from parcel_billing.models.invoice_item import InvoiceItem
from parcel_billing.models.shipment_charge import ShipmentCharge


class ShipmentChargeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_by_shipment_id(self, shipment_id: str) -> ShipmentCharge | None:
        return (
            self.db.query(ShipmentCharge).filter(ShipmentCharge.shipment_id == shipment_id).first()
        )

    def get_all(
        self,
        client_id: UUID | None = None,
        period: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[ShipmentCharge]:
        query = self.db.query(ShipmentCharge)
        if client_id:
            query = query.filter(ShipmentCharge.client_id == client_id)
        if period:
            query = query.filter(ShipmentCharge.period == period)
        return (
            query.order_by(ShipmentCharge.shipment_created_at.asc(), ShipmentCharge.volume_count.asc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_billable(
        self,
        client_id: UUID,
        period_from: datetime,
        period_to: datetime,
        shipment_ids: list[str] | None = None,
    ) -> list[ShipmentCharge]:
        """Charges not yet on any invoice.

        With ``shipment_ids`` the listed shipments are returned regardless of date;
        otherwise every charge created in ``[period_from, period_to)``.
        """
        already_invoiced = exists().where(InvoiceItem.shipment_id == ShipmentCharge.shipment_id)
        query = self.db.query(ShipmentCharge).filter(
            ShipmentCharge.client_id == client_id,
            ~already_invoiced,
        )
        if shipment_ids:
            query = query.filter(ShipmentCharge.shipment_id.in_(shipment_ids))
        else:
            query = query.filter(
                ShipmentCharge.shipment_created_at >= period_from,
                ShipmentCharge.shipment_created_at < period_to,
            )
        return query.order_by(
            ShipmentCharge.shipment_created_at.asc(), ShipmentCharge.volume_count.asc()
        ).all()

    def create(self, **fields: Any) -> ShipmentCharge:
        """Add a charge. Does not commit; the caller owns the transaction."""
        charge = ShipmentCharge(**fields)
        self.db.add(charge)
        self.db.flush()
        return charge
