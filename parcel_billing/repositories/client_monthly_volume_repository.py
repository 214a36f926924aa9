"""Repository for the per-client monthly shipment counter."""

from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.database import insert_if_absent
from parcel_billing.models.client_monthly_volume import ClientMonthlyVolume


class ClientMonthlyVolumeRepository:
    def __init__(self, db: Session):
        self.db = db

    def get_count(self, client_id: UUID, period: str) -> int:
        """Shipments counted so far for the client in the month, 0 when none."""
        row = (
            self.db.query(ClientMonthlyVolume)
            .filter(
                ClientMonthlyVolume.client_id == client_id,
                ClientMonthlyVolume.period == period,
            )
            .first()
        )
        return int(row.shipment_count) if row else 0

    def get_for_update(self, client_id: UUID, period: str) -> ClientMonthlyVolume:
        """Lock the counter row for the month, creating it at zero on first use.

        The insert is a no-op when another process created the row first, so
        concurrent first shipments of a month all end up waiting on one row lock.
        Does not commit; the caller owns the transaction.
        """
        insert_if_absent(
            self.db,
            ClientMonthlyVolume,
            {"client_id": client_id, "period": period, "shipment_count": 0},
            ["client_id", "period"],
        )
        return (
            self.db.query(ClientMonthlyVolume)
            .filter(
                ClientMonthlyVolume.client_id == client_id,
                ClientMonthlyVolume.period == period,
            )
            .with_for_update()
            .populate_existing()
            .one()
        )

    def increment(self, row: ClientMonthlyVolume) -> int:
        row.shipment_count = int(row.shipment_count) + 1  # type: ignore[assignment]
        self.db.flush()
        return int(row.shipment_count)
