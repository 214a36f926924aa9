"""InvoiceItem repository for data access."""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from parcel_billing.core.money import to_decimal
from parcel_billing.models.invoice_item import InvoiceItem


class InvoiceItemRepository:
    """Repository for InvoiceItem model.

    Mutations flush but never commit; the ledger commits once per operation.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_invoice_id(self, invoice_id: UUID) -> list[InvoiceItem]:
        return (
            self.db.query(InvoiceItem)
            .filter(InvoiceItem.invoice_id == invoice_id)
            .order_by(InvoiceItem.position.asc())
            .all()
        )

    def get_by_id(self, item_id: UUID, invoice_id: UUID | None = None) -> InvoiceItem | None:
        query = self.db.query(InvoiceItem).filter(InvoiceItem.id == item_id)
        if invoice_id is not None:
            query = query.filter(InvoiceItem.invoice_id == invoice_id)
        return query.first()

    def get_by_shipment(self, invoice_id: UUID, shipment_id: str) -> InvoiceItem | None:
        return (
            self.db.query(InvoiceItem)
            .filter(
                InvoiceItem.invoice_id == invoice_id,
                InvoiceItem.shipment_id == shipment_id,
            )
            .first()
        )

    def next_position(self, invoice_id: UUID) -> int:
        current = (
            self.db.query(func.max(InvoiceItem.position))
            .filter(InvoiceItem.invoice_id == invoice_id)
            .scalar()
        )
        return 0 if current is None else int(current) + 1

    def sum_totals(self, invoice_id: UUID) -> Decimal:
        # Summed in Python so SQLite's float SUM never touches the amounts
        return sum(
            (to_decimal(item.total) for item in self.get_by_invoice_id(invoice_id)),
            Decimal(0),
        )

    def create(
        self,
        *,
        invoice_id: UUID,
        description: str,
        quantity: int,
        unit_price: Decimal,
        total: Decimal,
        shipment_id: str | None = None,
    ) -> InvoiceItem:
        item = InvoiceItem(
            invoice_id=invoice_id,
            shipment_id=shipment_id,
            description=description,
            quantity=quantity,
            unit_price=unit_price,
            total=total,
            position=self.next_position(invoice_id),
        )
        self.db.add(item)
        self.db.flush()
        return item

    def delete(self, item: InvoiceItem) -> None:
        self.db.delete(item)
        self.db.flush()
