from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import func
from sqlalchemy.orm import Session

from parcel_billing.core.sorting import apply_order_by
from parcel_billing.models.invoice import Invoice, InvoiceStatus
from parcel_billing.models.shared import as_utc
from parcel_billing.repositories.invoice_number_sequence_repository import (
    InvoiceNumberSequenceRepository,
)


class InvoiceRepository:
    def __init__(self, db: Session):
        self.db = db
        self.sequences = InvoiceNumberSequenceRepository(db)

    def _generate_invoice_number(self, issue_date: datetime) -> str:
        """``INV-YYYYMMDD-NNNN``, numbered per UTC issue day."""
        day = as_utc(issue_date).strftime("%Y%m%d")
        number = self.sequences.next_number(day)
        return f"INV-{day}-{number:04d}"

    def get_all(
        self,
        skip: int = 0,
        limit: int = 100,
        client_id: UUID | None = None,
        status: InvoiceStatus | None = None,
        order_by: str | None = None,
    ) -> list[Invoice]:
        query = self.db.query(Invoice)

        if client_id:
            query = query.filter(Invoice.client_id == client_id)
        if status:
            query = query.filter(Invoice.status == status.value)

        query = apply_order_by(query, Invoice, order_by)
        return query.offset(skip).limit(limit).all()

    def count(self, client_id: UUID | None = None, status: InvoiceStatus | None = None) -> int:
        query = self.db.query(func.count(Invoice.id))
        if client_id:
            query = query.filter(Invoice.client_id == client_id)
        if status:
            query = query.filter(Invoice.status == status.value)
        return int(query.scalar() or 0)

    def get_by_id(self, invoice_id: UUID, for_update: bool = False) -> Invoice | None:
        query = self.db.query(Invoice).filter(Invoice.id == invoice_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def find_overlapping(
        self, client_id: UUID, period_from: datetime, period_to: datetime
    ) -> Invoice | None:
        """First invoice of the client whose half-open period intersects the given one."""
        return (
            self.db.query(Invoice)
            .filter(
                Invoice.client_id == client_id,
                Invoice.period_from < period_to,
                Invoice.period_to > period_from,
            )
            .first()
        )

    def create(
        self,
        *,
        client_id: UUID,
        period_from: datetime,
        period_to: datetime,
        issue_date: datetime,
        due_date: datetime,
        currency: str,
    ) -> Invoice:
        """Open an empty invoice. Does not commit; the caller owns the transaction."""
        kwargs: dict[str, Any] = {
            "invoice_number": self._generate_invoice_number(issue_date),
            "client_id": client_id,
            "status": InvoiceStatus.PENDING.value,
            "period_from": period_from,
            "period_to": period_to,
            "issue_date": issue_date,
            "due_date": due_date,
            "currency": currency,
            "subtotal": Decimal(0),
            "taxes": Decimal(0),
            "total": Decimal(0),
            "amount_paid": Decimal(0),
            "balance": Decimal(0),
        }
        invoice = Invoice(**kwargs)
        self.db.add(invoice)
        self.db.flush()
        return invoice
