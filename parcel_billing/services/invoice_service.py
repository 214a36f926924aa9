"""Invoice generation and operator updates."""

import logging
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.core.exceptions import (
    ClientNotFoundError,
    InvoiceNotFoundError,
    NoBillableShipmentsError,
    OverlappingInvoicePeriodError,
)
from parcel_billing.core.locks import invoice_locks
from parcel_billing.core.money import to_decimal
from parcel_billing.models.audit_log import AuditResource
from parcel_billing.models.invoice import Invoice, InvoiceStatus
from parcel_billing.models.invoice_item import InvoiceItem
from parcel_billing.models.shared import as_utc, utc_now
from parcel_billing.models.shipment_charge import ShipmentCharge
from parcel_billing.repositories.client_repository import ClientRepository
from parcel_billing.repositories.invoice_item_repository import InvoiceItemRepository
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.repositories.shipment_charge_repository import ShipmentChargeRepository
from parcel_billing.schemas.invoice import InvoiceUpdate
from parcel_billing.services.adjustment_auditor import AdjustmentAuditor
from parcel_billing.services.audit_service import AuditService
from parcel_billing.services.invoice_ledger import InvoiceLedger
from parcel_billing.services.invoice_reconciler import InvoiceReconciler

logger = logging.getLogger(__name__)

# Held per client with the client row lock; numbering has its own row lock
_GENERATION_LOCK_KEY = "invoice-generation"  # scoped per client: (key, client_id)


def describe_charge(charge: ShipmentCharge) -> str:
    description = (
        f"{charge.service_type} shipment {charge.shipment_id} "
        f"({to_decimal(charge.chargeable_weight).normalize():f} kg)"
    )
    if to_decimal(charge.cod_fee) > 0:
        description += f", incl. COD fee {charge.cod_fee}"
    return description


class InvoiceService:
    def __init__(self, db: Session):
        self.db = db
        self.client_repo = ClientRepository(db)
        self.invoice_repo = InvoiceRepository(db)
        self.item_repo = InvoiceItemRepository(db)
        self.charge_repo = ShipmentChargeRepository(db)
        self.ledger = InvoiceLedger(db)
        self.reconciler = InvoiceReconciler(db)
        self.auditor = AdjustmentAuditor(db)
        self.audit = AuditService(db)

    def generate_invoice(
        self,
        client_id: UUID,
        period_from: datetime,
        period_to: datetime,
        shipment_ids: list[str] | None = None,
        now: datetime | None = None,
        actor_id: str | None = None,
    ) -> Invoice:
        """Bill the client's uninvoiced shipment charges for ``[period_from, period_to)``.

        With ``shipment_ids`` only those shipments are billed. Each shipment
        becomes one automatic item priced at its rate plus COD fee.
        """
        period_from, period_to = as_utc(period_from), as_utc(period_to)
        now = now or utc_now()

        with invoice_locks.hold((_GENERATION_LOCK_KEY, client_id)):
            try:
                # Serializes overlap checks for the client across processes
                client = self.client_repo.get_by_id(client_id, for_update=True)
                if not client:
                    raise ClientNotFoundError(client_id)

                existing = self.invoice_repo.find_overlapping(client_id, period_from, period_to)
                if existing:
                    raise OverlappingInvoicePeriodError(
                        f"Invoice {existing.invoice_number} already covers part of this period"
                    )

                charges = self.charge_repo.get_billable(
                    client_id, period_from, period_to, shipment_ids
                )
                if not charges:
                    raise NoBillableShipmentsError(
                        f"Client {client_id} has no uninvoiced shipments in this period"
                    )
                if shipment_ids and len(charges) < len(set(shipment_ids)):
                    billed = {charge.shipment_id for charge in charges}
                    logger.warning(
                        "Skipping shipments not billable for client %s: %s",
                        client_id,
                        sorted(set(shipment_ids) - billed),
                    )

                invoice = self.invoice_repo.create(
                    client_id=client_id,
                    period_from=period_from,
                    period_to=period_to,
                    issue_date=now,
                    due_date=now + timedelta(days=int(client.net_payment_term)),
                    currency=str(client.currency),
                )
                for charge in charges:
                    self.ledger.stage_auto_item(
                        invoice,
                        str(charge.shipment_id),
                        describe_charge(charge),
                        1,
                        to_decimal(charge.total_rate) + to_decimal(charge.cod_fee),
                    )
                self.reconciler.apply_totals(invoice, now)
                self.reconciler.refresh_status(invoice, now)
                self.audit.log_create(
                    AuditResource.INVOICE,
                    invoice.id,  # type: ignore[arg-type]
                    actor_id=actor_id,
                    data={
                        "invoice_number": invoice.invoice_number,
                        "shipments": len(charges),
                        "total": str(invoice.total),
                    },
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(invoice)
        logger.info(
            "Generated invoice %s for client %s with %d shipments, total %s",
            invoice.invoice_number,
            client_id,
            len(charges),
            invoice.total,
        )
        return invoice

    def update_invoice(
        self, invoice_id: UUID, data: InvoiceUpdate, now: datetime | None = None
    ) -> Invoice:
        """Apply an operator update in one transaction.

        A payment re-derives the status; an explicit ``status`` is applied after
        it and sticks until the next item change.
        """
        now = now or utc_now()
        with invoice_locks.hold(invoice_id):
            try:
                invoice = self.reconciler.lock_invoice(invoice_id)
                old_data = {"notes": invoice.notes, "payment_reference": invoice.payment_reference}

                if data.amount_paid is not None:
                    self.reconciler.apply_payment(invoice, data.amount_paid, now)
                if data.payment_reference is not None:
                    invoice.payment_reference = data.payment_reference  # type: ignore[assignment]
                if data.notes is not None:
                    invoice.notes = data.notes  # type: ignore[assignment]
                if data.status is not None:
                    self.reconciler.apply_forced_status(invoice, data.status, data.adjusted_by)
                if data.adjustment_notes:
                    self.auditor.record_adjustment(
                        invoice_id, data.adjustment_notes, actor_id=data.adjusted_by, now=now
                    )

                self.audit.log_update(
                    AuditResource.INVOICE,
                    invoice_id,
                    actor_id=data.adjusted_by,
                    old_data=old_data,
                    new_data={"notes": invoice.notes, "payment_reference": invoice.payment_reference},
                )
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

        self.db.refresh(invoice)
        return invoice

    def get_invoice_details(self, invoice_id: UUID) -> tuple[Invoice, list[InvoiceItem]]:
        invoice = self.invoice_repo.get_by_id(invoice_id)
        if not invoice:
            raise InvoiceNotFoundError(invoice_id)
        return invoice, self.item_repo.get_by_invoice_id(invoice_id)

    def list_invoices(
        self,
        client_id: UUID | None = None,
        status: InvoiceStatus | None = None,
        skip: int = 0,
        limit: int = 100,
        order_by: str | None = None,
    ) -> list[Invoice]:
        return self.invoice_repo.get_all(
            skip=skip, limit=limit, client_id=client_id, status=status, order_by=order_by
        )
