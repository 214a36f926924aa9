"""Keeps invoice amounts and status consistent with the invoice's items."""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.config import settings
from parcel_billing.core.exceptions import InvalidAmountError, InvoiceNotFoundError
from parcel_billing.core.locks import invoice_locks
from parcel_billing.core.money import quantize_money, to_decimal
from parcel_billing.models.invoice import Invoice, InvoiceStatus
from parcel_billing.models.shared import as_utc, utc_now
from parcel_billing.repositories.invoice_item_repository import InvoiceItemRepository
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.services.audit_service import AuditService

logger = logging.getLogger(__name__)


def derive_status(balance: Decimal, due_date: datetime, now: datetime) -> InvoiceStatus:
    if balance <= 0:
        return InvoiceStatus.PAID
    if as_utc(now) > as_utc(due_date):
        return InvoiceStatus.OVERDUE
    return InvoiceStatus.PENDING


def _track_settlement(invoice: Invoice, now: datetime) -> None:
    """Stamp the first moment the balance is settled; clear it once the balance reopens."""
    if invoice.balance > 0:
        invoice.payment_date = None  # type: ignore[assignment]
    elif invoice.payment_date is None:
        invoice.payment_date = now  # type: ignore[assignment]


class InvoiceReconciler:
    """Recomputes ``subtotal``, ``taxes``, ``total`` and ``balance`` and derives status.

    The public operations (``recompute``, ``record_payment``, ``force_status``)
    lock the invoice and commit. The ``apply_*`` methods work on an invoice the
    caller already locked and leave the commit to the caller.
    """

    def __init__(self, db: Session):
        self.db = db
        self.invoice_repo = InvoiceRepository(db)
        self.item_repo = InvoiceItemRepository(db)
        self.audit = AuditService(db)

    def lock_invoice(self, invoice_id: UUID) -> Invoice:
        invoice = self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice

    def recompute(self, invoice_id: UUID, now: datetime | None = None) -> Invoice:
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.lock_invoice(invoice_id)
                self.apply_totals(invoice, now)
                self.refresh_status(invoice, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(invoice)
        return invoice

    def record_payment(
        self, invoice_id: UUID, amount_paid: Decimal, now: datetime | None = None
    ) -> Invoice:
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.lock_invoice(invoice_id)
                self.apply_payment(invoice, amount_paid, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(invoice)
        return invoice

    def force_status(
        self, invoice_id: UUID, status: InvoiceStatus, actor_id: str | None = None
    ) -> Invoice:
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.lock_invoice(invoice_id)
                self.apply_forced_status(invoice, status, actor_id)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(invoice)
        return invoice

    def apply_totals(self, invoice: Invoice, now: datetime | None = None) -> None:
        subtotal = quantize_money(self.item_repo.sum_totals(invoice.id))  # type: ignore[arg-type]
        taxes = quantize_money(subtotal * settings.TAX_RATE)
        total = subtotal + taxes

        invoice.subtotal = subtotal  # type: ignore[assignment]
        invoice.taxes = taxes  # type: ignore[assignment]
        invoice.total = total  # type: ignore[assignment]
        invoice.balance = total - to_decimal(invoice.amount_paid)  # type: ignore[assignment]
        _track_settlement(invoice, now or utc_now())
        self.db.flush()

    def apply_payment(
        self, invoice: Invoice, amount_paid: Decimal, now: datetime | None = None
    ) -> None:
        amount = quantize_money(amount_paid)
        if amount < 0:
            raise InvalidAmountError(f"Amount paid must not be negative, got {amount}")

        now = now or utc_now()
        invoice.amount_paid = amount  # type: ignore[assignment]
        invoice.balance = to_decimal(invoice.total) - amount  # type: ignore[assignment]
        _track_settlement(invoice, now)
        logger.info(
            "Recorded payment of %s on invoice %s, balance %s",
            amount,
            invoice.invoice_number,
            invoice.balance,
        )
        self.refresh_status(invoice, now)

    def apply_forced_status(
        self, invoice: Invoice, status: InvoiceStatus, actor_id: str | None = None
    ) -> None:
        old_status = str(invoice.status)
        invoice.status = status.value  # type: ignore[assignment]
        invoice.status_overridden = True  # type: ignore[assignment]
        self.db.flush()
        self.audit.log_status_change(
            invoice.id, old_status, status.value, actor_id=actor_id  # type: ignore[arg-type]
        )
        logger.info(
            "Invoice %s status forced from %s to %s", invoice.invoice_number, old_status, status.value
        )

    def refresh_status(
        self, invoice: Invoice, now: datetime | None = None, clear_override: bool = False
    ) -> None:
        """Derive status from balance and due date unless an operator forced one.

        ``clear_override`` drops a forced status first; item mutations pass it.
        """
        if clear_override:
            invoice.status_overridden = False  # type: ignore[assignment]
        if invoice.status_overridden:
            return

        old_status = str(invoice.status)
        new_status = derive_status(
            to_decimal(invoice.balance),
            invoice.due_date,  # type: ignore[arg-type]
            now or utc_now(),
        ).value
        invoice.status = new_status  # type: ignore[assignment]
        self.db.flush()
        if old_status != new_status:
            self.audit.log_status_change(
                invoice.id, old_status, new_status  # type: ignore[arg-type]
            )
