"""Tests for InvoiceLedger, InvoiceReconciler and AdjustmentAuditor."""

from datetime import UTC, datetime, timedelta
from decimal import Decimal
from uuid import uuid4

import pytest

from parcel_billing.core.config import settings
from parcel_billing.core.database import get_db
from parcel_billing.core.exceptions import (
    CannotDeleteAutoItemError,
    DuplicateShipmentItemError,
    InvalidAmountError,
    InvalidQuantityError,
    InvoiceItemNotFoundError,
    InvoiceNotFoundError,
)
from parcel_billing.core.locks import invoice_locks
from parcel_billing.models.audit_log import AuditResource
from parcel_billing.models.invoice import InvoiceStatus
from parcel_billing.repositories.audit_log_repository import AuditLogRepository
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.services.adjustment_auditor import AdjustmentAuditor
from parcel_billing.services.invoice_ledger import InvoiceLedger
from parcel_billing.services.invoice_reconciler import InvoiceReconciler, derive_status
from tests.conftest import add_client

# Issued yesterday so that the default "now" falls before the due date
ISSUED = datetime.now(UTC).replace(microsecond=0) - timedelta(days=1)
DUE = ISSUED + timedelta(days=30)


@pytest.fixture
def db_session():
    """Create a database session for direct service testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def billing_client(db_session):
    return add_client(db_session)


def _open_invoice(db_session, client_id, period_from):
    invoice = InvoiceRepository(db_session).create(
        client_id=client_id,
        period_from=period_from,
        period_to=period_from + timedelta(days=28),
        issue_date=ISSUED,
        due_date=DUE,
        currency="AED",
    )
    db_session.commit()
    return invoice


@pytest.fixture
def invoice(db_session, billing_client):
    return _open_invoice(db_session, billing_client.id, datetime(2026, 2, 1, tzinfo=UTC))


@pytest.fixture
def ledger(db_session):
    return InvoiceLedger(db_session)


@pytest.fixture
def reconciler(db_session):
    return InvoiceReconciler(db_session)


BEFORE_DUE = ISSUED + timedelta(days=1)
AFTER_DUE = DUE + timedelta(days=1)


def _items_sum(ledger, invoice_id):
    return sum((item.total for item in ledger.list_items(invoice_id)), Decimal(0))


class TestInvoiceLedger:
    def test_add_auto_item(self, db_session, ledger, invoice):
        item = ledger.add_auto_item(
            invoice.id, "AWB1001", "DOM shipment AWB1001 (3 kg)", 1, Decimal("14.00"), now=BEFORE_DUE
        )
        db_session.refresh(invoice)

        assert item.shipment_id == "AWB1001"
        assert item.is_manual is False
        assert item.total == Decimal("14.00")
        assert invoice.subtotal == Decimal("14.00")
        assert invoice.total == Decimal("14.00")
        assert invoice.balance == Decimal("14.00")
        assert invoice.status == InvoiceStatus.PENDING.value
        assert invoice.is_adjusted is False

    def test_add_auto_item_duplicate_shipment(self, db_session, ledger, invoice):
        ledger.add_auto_item(invoice.id, "AWB1001", "first", 1, Decimal("14.00"))
        with pytest.raises(DuplicateShipmentItemError):
            ledger.add_auto_item(invoice.id, "AWB1001", "again", 1, Decimal("14.00"))

        db_session.refresh(invoice)
        assert len(ledger.list_items(invoice.id)) == 1
        assert invoice.subtotal == Decimal("14.00")

    def test_same_shipment_on_different_invoices_is_not_a_duplicate(
        self, db_session, ledger, invoice, billing_client
    ):
        other = _open_invoice(db_session, billing_client.id, datetime(2026, 3, 1, tzinfo=UTC))
        ledger.add_auto_item(invoice.id, "AWB1001", "first", 1, Decimal("14.00"))
        ledger.add_auto_item(other.id, "AWB1001", "second", 1, Decimal("14.00"))

    def test_add_manual_item_marks_invoice_adjusted(self, db_session, ledger, invoice):
        item = ledger.add_manual_item(
            invoice.id, "Fuel surcharge", 2, Decimal("12.50"), actor_id="ops@acme"
        )
        db_session.refresh(invoice)

        assert item.shipment_id is None
        assert item.is_manual is True
        assert item.total == Decimal("25.00")
        assert invoice.subtotal == Decimal("25.00")
        assert invoice.is_adjusted is True
        assert invoice.adjustment_notes == "Added manual item: Fuel surcharge (25.00)"
        assert invoice.last_adjusted_by == "ops@acme"
        assert invoice.last_adjusted_at is not None

    def test_add_manual_item_with_operator_notes(self, db_session, ledger, invoice):
        ledger.add_manual_item(
            invoice.id, "Handling", 1, Decimal("5.00"), notes="Fragile goods handling agreed"
        )
        db_session.refresh(invoice)
        assert invoice.adjustment_notes == "Fragile goods handling agreed"

    def test_negative_manual_item_credits_invoice(self, db_session, ledger, invoice):
        ledger.add_auto_item(invoice.id, "AWB1001", "shipment", 1, Decimal("30.00"))
        ledger.add_manual_item(invoice.id, "Goodwill credit", 1, Decimal("-10.00"))
        db_session.refresh(invoice)
        assert invoice.subtotal == Decimal("20.00")
        assert invoice.balance == Decimal("20.00")

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_quantity_must_be_positive(self, db_session, ledger, invoice, quantity):
        with pytest.raises(InvalidQuantityError):
            ledger.add_manual_item(invoice.id, "Bad", quantity, Decimal("5.00"))
        with pytest.raises(InvalidQuantityError):
            ledger.add_auto_item(invoice.id, "AWB1", "Bad", quantity, Decimal("5.00"))
        assert ledger.list_items(invoice.id) == []

    def test_unknown_invoice(self, ledger):
        with pytest.raises(InvoiceNotFoundError):
            ledger.add_manual_item(uuid4(), "Fee", 1, Decimal("1.00"))
        with pytest.raises(InvoiceNotFoundError):
            ledger.list_items(uuid4())

    def test_list_items_in_insertion_order(self, ledger, invoice):
        ledger.add_auto_item(invoice.id, "AWB2", "second shipment", 1, Decimal("14.00"))
        ledger.add_manual_item(invoice.id, "Surcharge", 1, Decimal("3.00"))
        ledger.add_auto_item(invoice.id, "AWB1", "first shipment", 1, Decimal("14.00"))

        items = ledger.list_items(invoice.id)
        assert [item.description for item in items] == [
            "second shipment",
            "Surcharge",
            "first shipment",
        ]
        assert [item.position for item in items] == [0, 1, 2]

    def test_delete_manual_item_reduces_subtotal(self, db_session, ledger, invoice):
        ledger.add_auto_item(invoice.id, "AWB1001", "shipment", 1, Decimal("14.00"))
        item = ledger.add_manual_item(invoice.id, "Storage fee", 3, Decimal("4.00"))
        db_session.refresh(invoice)
        before = invoice.subtotal

        ledger.delete_item(invoice.id, item.id, actor_id="ops@acme")
        db_session.refresh(invoice)

        assert invoice.subtotal == before - Decimal("12.00")
        assert invoice.is_adjusted is True
        assert invoice.adjustment_notes == "Removed manual item: Storage fee (12.00)"
        assert [i.shipment_id for i in ledger.list_items(invoice.id)] == ["AWB1001"]

    def test_delete_auto_item_is_rejected(self, db_session, ledger, invoice):
        item = ledger.add_auto_item(invoice.id, "AWB1001", "shipment", 1, Decimal("14.00"))

        with pytest.raises(CannotDeleteAutoItemError):
            ledger.delete_item(invoice.id, item.id)

        db_session.refresh(invoice)
        assert invoice.subtotal == Decimal("14.00")
        assert invoice.is_adjusted is False
        assert len(ledger.list_items(invoice.id)) == 1

    def test_delete_item_of_another_invoice(self, db_session, ledger, invoice, billing_client):
        other = _open_invoice(db_session, billing_client.id, datetime(2026, 3, 1, tzinfo=UTC))
        item = ledger.add_manual_item(other.id, "Fee", 1, Decimal("1.00"))
        with pytest.raises(InvoiceItemNotFoundError):
            ledger.delete_item(invoice.id, item.id)

    def test_subtotal_matches_items_after_every_mutation(self, db_session, ledger, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        manual = ledger.add_manual_item(invoice.id, "b", 3, Decimal("2.35"))
        ledger.add_auto_item(invoice.id, "AWB2", "c", 1, Decimal("19.80"))
        ledger.add_manual_item(invoice.id, "d", 1, Decimal("-5.00"))
        db_session.refresh(invoice)
        assert invoice.subtotal == _items_sum(ledger, invoice.id)

        ledger.delete_item(invoice.id, manual.id)
        db_session.refresh(invoice)
        assert invoice.subtotal == _items_sum(ledger, invoice.id) == Decimal("28.80")

    def test_locks_released_after_errors(self, ledger, invoice):
        item = ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        with pytest.raises(CannotDeleteAutoItemError):
            ledger.delete_item(invoice.id, item.id)
        assert invoice_locks.active_keys() == 0

    def test_adjustments_are_recorded_in_audit_log(self, db_session, ledger, invoice):
        item = ledger.add_manual_item(invoice.id, "Fee", 1, Decimal("1.00"), actor_id="ops@acme")
        ledger.delete_item(invoice.id, item.id, actor_id="ops@acme", notes="Charged in error")

        trail = AuditLogRepository(db_session).get_trail(AuditResource.INVOICE, invoice.id)
        logs = [log for log in trail if log.action == "adjusted"]
        notes = sorted(log.changes["adjustment_notes"] for log in logs)
        assert notes == ["Added manual item: Fee (1.00)", "Charged in error"]
        assert all(log.actor_id == "ops@acme" for log in logs)
        assert {log.item_operation for log in logs} == {"add_item", "delete_item"}
        assert all(log.item_id == item.id for log in logs)


class TestDeriveStatus:
    def test_zero_balance_is_paid(self):
        assert derive_status(Decimal("0"), DUE, AFTER_DUE) == InvoiceStatus.PAID

    def test_overpaid_is_paid(self):
        assert derive_status(Decimal("-5"), DUE, BEFORE_DUE) == InvoiceStatus.PAID

    def test_open_balance_before_due_date_is_pending(self):
        assert derive_status(Decimal("1"), DUE, BEFORE_DUE) == InvoiceStatus.PENDING

    def test_open_balance_after_due_date_is_overdue(self):
        assert derive_status(Decimal("1"), DUE, AFTER_DUE) == InvoiceStatus.OVERDUE

    def test_naive_due_date_is_treated_as_utc(self):
        naive_due = DUE.replace(tzinfo=None)
        assert derive_status(Decimal("1"), naive_due, AFTER_DUE) == InvoiceStatus.OVERDUE


class TestInvoiceReconciler:
    def test_recompute_is_idempotent(self, db_session, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        ledger.add_manual_item(invoice.id, "b", 2, Decimal("3.10"))

        first = reconciler.recompute(invoice.id, now=BEFORE_DUE)
        amounts = (first.subtotal, first.taxes, first.total, first.balance, first.status)
        second = reconciler.recompute(invoice.id, now=BEFORE_DUE)

        assert (second.subtotal, second.taxes, second.total, second.balance, second.status) == amounts
        assert second.subtotal == Decimal("20.20")

    def test_recompute_repairs_drifted_totals(self, db_session, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        db_session.refresh(invoice)
        invoice.subtotal = Decimal("999.00")
        invoice.total = Decimal("999.00")
        db_session.commit()

        result = reconciler.recompute(invoice.id)
        assert result.subtotal == Decimal("14.00")
        assert result.total == Decimal("14.00")

    def test_recompute_applies_tax_rate(self, monkeypatch, ledger, reconciler, invoice):
        monkeypatch.setattr(settings, "TAX_RATE", Decimal("0.05"))
        ledger.add_manual_item(invoice.id, "Fee", 1, Decimal("10.10"))

        result = reconciler.recompute(invoice.id)
        assert result.subtotal == Decimal("10.10")
        assert result.taxes == Decimal("0.51")
        assert result.total == Decimal("10.61")

    def test_recompute_unknown_invoice(self, reconciler):
        with pytest.raises(InvoiceNotFoundError):
            reconciler.recompute(uuid4())

    def test_full_payment_marks_paid(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))

        result = reconciler.record_payment(invoice.id, Decimal("14.00"), now=AFTER_DUE)
        assert result.balance == Decimal("0.00")
        assert result.status == InvoiceStatus.PAID.value
        assert result.payment_date is not None

    def test_partial_payment_before_due_date(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))

        result = reconciler.record_payment(invoice.id, Decimal("4.00"), now=BEFORE_DUE)
        assert result.balance == Decimal("10.00")
        assert result.status == InvoiceStatus.PENDING.value
        assert result.payment_date is None

    def test_lowered_payment_clears_payment_date(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        reconciler.record_payment(invoice.id, Decimal("14.00"), now=BEFORE_DUE)

        result = reconciler.record_payment(invoice.id, Decimal("9.00"), now=BEFORE_DUE)
        assert result.balance == Decimal("5.00")
        assert result.status == InvoiceStatus.PENDING.value
        assert result.payment_date is None

    def test_new_item_on_paid_invoice_clears_payment_date(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        reconciler.record_payment(invoice.id, Decimal("14.00"), now=BEFORE_DUE)

        ledger.add_manual_item(invoice.id, "Late pickup", 1, Decimal("3.00"), now=BEFORE_DUE)
        result = reconciler.recompute(invoice.id, now=BEFORE_DUE)
        assert result.balance == Decimal("3.00")
        assert result.payment_date is None

    def test_payment_date_kept_while_settled(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        first = reconciler.record_payment(invoice.id, Decimal("14.00"), now=BEFORE_DUE)
        paid_at = first.payment_date

        result = reconciler.record_payment(invoice.id, Decimal("20.00"), now=AFTER_DUE)
        assert result.balance == Decimal("-6.00")
        assert result.payment_date == paid_at

    def test_partial_payment_after_due_date(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))

        result = reconciler.record_payment(invoice.id, Decimal("4.00"), now=AFTER_DUE)
        assert result.status == InvoiceStatus.OVERDUE.value

    def test_negative_payment_rejected(self, reconciler, invoice):
        with pytest.raises(InvalidAmountError):
            reconciler.record_payment(invoice.id, Decimal("-1.00"))

    def test_forced_status_survives_payment(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        reconciler.force_status(invoice.id, InvoiceStatus.OVERDUE, actor_id="ops@acme")

        result = reconciler.record_payment(invoice.id, Decimal("14.00"), now=BEFORE_DUE)
        assert result.balance == Decimal("0.00")
        assert result.status == InvoiceStatus.OVERDUE.value
        assert result.status_overridden is True

    def test_forced_status_survives_recompute(self, reconciler, invoice):
        reconciler.force_status(invoice.id, InvoiceStatus.OVERDUE)
        result = reconciler.recompute(invoice.id)
        assert result.balance == Decimal("0.00")
        assert result.status == InvoiceStatus.OVERDUE.value

    def test_item_mutation_clears_forced_status(self, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        reconciler.force_status(invoice.id, InvoiceStatus.PAID)

        ledger.add_manual_item(invoice.id, "Fee", 1, Decimal("1.00"), now=BEFORE_DUE)
        result = reconciler.recompute(invoice.id, now=BEFORE_DUE)
        assert result.status_overridden is False
        assert result.status == InvoiceStatus.PENDING.value

    def test_status_changes_are_audited(self, db_session, ledger, reconciler, invoice):
        ledger.add_auto_item(invoice.id, "AWB1", "a", 1, Decimal("14.00"))
        reconciler.record_payment(invoice.id, Decimal("14.00"))

        logs = AuditLogRepository(db_session).get_trail(AuditResource.INVOICE, invoice.id)
        changes = [log.changes["status"] for log in logs if log.action == "status_changed"]
        assert {"old": "pending", "new": "paid"} in changes


class TestAdjustmentAuditor:
    def test_record_adjustment(self, db_session, invoice):
        auditor = AdjustmentAuditor(db_session)
        now = datetime(2026, 3, 5, 10, 0, tzinfo=UTC)

        auditor.record_adjustment(invoice.id, "Rate corrected", actor_id="ops@acme", now=now)
        db_session.commit()
        db_session.refresh(invoice)

        assert invoice.is_adjusted is True
        assert invoice.adjustment_notes == "Rate corrected"
        assert invoice.last_adjusted_by == "ops@acme"
        assert invoice.last_adjusted_at.replace(tzinfo=UTC) == now

    def test_latest_note_wins_and_history_is_kept(self, db_session, invoice):
        auditor = AdjustmentAuditor(db_session)
        auditor.record_adjustment(invoice.id, "First note")
        auditor.record_adjustment(invoice.id, "Second note")
        db_session.commit()
        db_session.refresh(invoice)

        assert invoice.adjustment_notes == "Second note"
        assert invoice.is_adjusted is True
        trail = AuditLogRepository(db_session).get_trail(AuditResource.INVOICE, invoice.id)
        logs = [log for log in trail if log.action == "adjusted"]
        assert all(log.item_id is None for log in logs)
        assert sorted(log.changes["adjustment_notes"] for log in logs) == [
            "First note",
            "Second note",
        ]

    def test_unknown_invoice(self, db_session):
        with pytest.raises(InvoiceNotFoundError):
            AdjustmentAuditor(db_session).record_adjustment(uuid4(), "note")
