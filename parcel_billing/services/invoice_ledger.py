"""Invoice line items: the only way items are added to or removed from an invoice."""

import logging
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.exceptions import (
    CannotDeleteAutoItemError,
    DuplicateShipmentItemError,
    InvalidQuantityError,
    InvoiceItemNotFoundError,
    InvoiceNotFoundError,
)
from parcel_billing.core.locks import invoice_locks
from parcel_billing.core.money import quantize_money, to_decimal
from parcel_billing.models.audit_log import ItemOperation
from parcel_billing.models.invoice import Invoice
from parcel_billing.models.invoice_item import InvoiceItem
from parcel_billing.repositories.invoice_item_repository import InvoiceItemRepository
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.services.adjustment_auditor import AdjustmentAuditor
from parcel_billing.services.invoice_reconciler import InvoiceReconciler

logger = logging.getLogger(__name__)


def _check_quantity(quantity: int) -> None:
    if quantity < 1:
        raise InvalidQuantityError(f"Quantity must be at least 1, got {quantity}")


class InvoiceLedger:
    """Adds and removes invoice items.

    Every mutation runs under the invoice's lock and commits the item change,
    the reconciled totals and the audit record together.
    """

    def __init__(self, db: Session):
        self.db = db
        self.item_repo = InvoiceItemRepository(db)
        self.invoice_repo = InvoiceRepository(db)
        self.reconciler = InvoiceReconciler(db)
        self.auditor = AdjustmentAuditor(db)

    def list_items(self, invoice_id: UUID) -> list[InvoiceItem]:
        if not self.invoice_repo.get_by_id(invoice_id):
            raise InvoiceNotFoundError(invoice_id)
        return self.item_repo.get_by_invoice_id(invoice_id)

    def add_auto_item(
        self,
        invoice_id: UUID,
        shipment_id: str,
        description: str,
        quantity: int,
        unit_price: Decimal,
        now: datetime | None = None,
    ) -> InvoiceItem:
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.reconciler.lock_invoice(invoice_id)
                item = self.stage_auto_item(invoice, shipment_id, description, quantity, unit_price)
                self._reconcile(invoice, now)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        self.db.refresh(item)
        return item

    def stage_auto_item(
        self,
        invoice: Invoice,
        shipment_id: str,
        description: str,
        quantity: int,
        unit_price: Decimal,
    ) -> InvoiceItem:
        """Add a shipment item to an invoice the caller has locked; no reconcile, no commit."""
        _check_quantity(quantity)
        if self.item_repo.get_by_shipment(invoice.id, shipment_id):  # type: ignore[arg-type]
            raise DuplicateShipmentItemError(invoice.id, shipment_id)

        price = quantize_money(unit_price)
        return self.item_repo.create(
            invoice_id=invoice.id,  # type: ignore[arg-type]
            shipment_id=shipment_id,
            description=description,
            quantity=quantity,
            unit_price=price,
            total=quantize_money(quantity * price),
        )

    def add_manual_item(
        self,
        invoice_id: UUID,
        description: str,
        quantity: int,
        unit_price: Decimal,
        actor_id: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> InvoiceItem:
        """Add an operator line. A negative ``unit_price`` credits the client."""
        _check_quantity(quantity)
        price = quantize_money(unit_price)
        total = quantize_money(quantity * price)

        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.reconciler.lock_invoice(invoice_id)
                item = self.item_repo.create(
                    invoice_id=invoice_id,
                    description=description,
                    quantity=quantity,
                    unit_price=price,
                    total=total,
                )
                self._reconcile(invoice, now)
                self.auditor.record_adjustment(
                    invoice_id,
                    notes or f"Added manual item: {description} ({total})",
                    actor_id=actor_id,
                    now=now,
                    item_id=item.id,  # type: ignore[arg-type]
                    operation=ItemOperation.ADD_ITEM,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        logger.info("Added manual item %s to invoice %s", item.id, invoice.invoice_number)
        self.db.refresh(item)
        return item

    def delete_item(
        self,
        invoice_id: UUID,
        item_id: UUID,
        actor_id: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> Invoice:
        """Remove a manual item. Shipment items are permanent; correct them with a manual item."""
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.reconciler.lock_invoice(invoice_id)
                item = self.item_repo.get_by_id(item_id, invoice_id=invoice_id)
                if not item:
                    raise InvoiceItemNotFoundError(item_id)
                if not item.is_manual:
                    logger.warning(
                        "Refused to delete shipment item %s from invoice %s",
                        item_id,
                        invoice.invoice_number,
                    )
                    raise CannotDeleteAutoItemError(item_id)

                description, total = str(item.description), to_decimal(item.total)
                self.item_repo.delete(item)
                self._reconcile(invoice, now)
                self.auditor.record_adjustment(
                    invoice_id,
                    notes or f"Removed manual item: {description} ({total})",
                    actor_id=actor_id,
                    now=now,
                    item_id=item_id,
                    operation=ItemOperation.DELETE_ITEM,
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise
        logger.info("Deleted manual item %s from invoice %s", item_id, invoice.invoice_number)
        self.db.refresh(invoice)
        return invoice

    def _reconcile(self, invoice: Invoice, now: datetime | None) -> None:
        self.reconciler.apply_totals(invoice, now)
        self.reconciler.refresh_status(invoice, now, clear_override=True)
