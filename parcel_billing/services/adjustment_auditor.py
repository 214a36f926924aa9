"""Marks invoices as adjusted and keeps a history of every adjustment."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.exceptions import InvoiceNotFoundError
from parcel_billing.models.audit_log import ItemOperation
from parcel_billing.models.invoice import Invoice
from parcel_billing.models.shared import utc_now
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.services.audit_service import AuditService

logger = logging.getLogger(__name__)


class AdjustmentAuditor:
    def __init__(self, db: Session):
        self.db = db
        self.invoice_repo = InvoiceRepository(db)
        self.audit = AuditService(db)

    def record_adjustment(
        self,
        invoice_id: UUID,
        notes: str,
        actor_id: str | None = None,
        now: datetime | None = None,
        item_id: UUID | None = None,
        operation: ItemOperation | None = None,
    ) -> Invoice:
        """Flag the invoice as adjusted and append an audit record.

        ``adjustment_notes`` on the invoice holds the latest note only; the
        audit log keeps all of them. There is no way to un-adjust an invoice.
        Runs inside the caller's transaction: the caller holds the invoice
        lock and commits.
        """
        invoice = self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)

        invoice.is_adjusted = True  # type: ignore[assignment]
        invoice.adjustment_notes = notes  # type: ignore[assignment]
        invoice.last_adjusted_at = now or utc_now()  # type: ignore[assignment]
        invoice.last_adjusted_by = actor_id  # type: ignore[assignment]
        self.db.flush()

        self.audit.log_adjustment(
            invoice_id, notes, actor_id=actor_id, item_id=item_id, operation=operation
        )
        logger.info(
            "Invoice %s adjusted by %s: %s", invoice.invoice_number, actor_id or "system", notes
        )
        return invoice
