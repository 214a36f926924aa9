"""Tests for AuditLogRepository and AuditService."""

from datetime import timedelta
from uuid import uuid4

import pytest

from parcel_billing.core.database import get_db
from parcel_billing.models.audit_log import AuditAction, AuditResource, ItemOperation
from parcel_billing.repositories.audit_log_repository import AuditLogRepository
from parcel_billing.schemas.audit_log import AuditLogResponse
from parcel_billing.services.audit_service import AuditService


@pytest.fixture
def db_session():
    """Create a database session for direct testing."""
    gen = get_db()
    db = next(gen)
    try:
        yield db
    finally:
        for _ in gen:
            pass


@pytest.fixture
def repo(db_session):
    """Create an AuditLogRepository instance."""
    return AuditLogRepository(db_session)


@pytest.fixture
def service(db_session):
    """Create an AuditService instance."""
    return AuditService(db_session)


# ---------------------------------------------------------------------------
# Repository tests
# ---------------------------------------------------------------------------


class TestAuditLogRepository:
    def test_create(self, repo):
        resource_id = uuid4()
        log = repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=resource_id,
            action=AuditAction.CREATED,
            changes={"total": {"old": None, "new": "100.00"}},
        )
        assert log.id is not None
        assert log.resource_type == "invoice"
        assert log.resource_id == resource_id
        assert log.action == "created"
        assert log.changes == {"total": {"old": None, "new": "100.00"}}
        assert log.actor_id is None
        assert log.item_id is None
        assert log.item_operation is None
        assert log.created_at is not None

    def test_create_stores_item_operation(self, repo):
        item_id = uuid4()
        log = repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=uuid4(),
            action=AuditAction.ADJUSTED,
            changes={},
            item_id=item_id,
            item_operation=ItemOperation.DELETE_ITEM,
        )
        assert log.item_id == item_id
        assert log.item_operation == "delete_item"

    def test_create_does_not_commit(self, repo, db_session):
        resource_id = uuid4()
        repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=resource_id,
            action=AuditAction.CREATED,
            changes={},
        )
        db_session.rollback()
        assert repo.get_trail(AuditResource.INVOICE, resource_id) == []

    def test_get_trail(self, repo):
        resource_id = uuid4()
        for action in (AuditAction.CREATED, AuditAction.ADJUSTED):
            repo.create(
                resource_type=AuditResource.INVOICE,
                resource_id=resource_id,
                action=action,
                changes={},
            )
        repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=uuid4(),
            action=AuditAction.CREATED,
            changes={},
        )
        logs = repo.get_trail(AuditResource.INVOICE, resource_id)
        assert len(logs) == 2
        assert all(log.resource_id == resource_id for log in logs)

    def test_get_trail_is_scoped_by_resource_type(self, repo):
        shared_id = uuid4()
        repo.create(
            resource_type=AuditResource.RATE_TIER,
            resource_id=shared_id,
            action=AuditAction.CREATED,
            changes={},
        )
        assert repo.get_trail(AuditResource.INVOICE, shared_id) == []
        assert len(repo.get_trail(AuditResource.RATE_TIER, shared_id)) == 1

    def test_get_trail_newest_first(self, repo):
        resource_id = uuid4()
        first = repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=resource_id,
            action=AuditAction.CREATED,
            changes={},
        )
        second = repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=resource_id,
            action=AuditAction.UPDATED,
            changes={},
        )
        second.created_at = first.created_at + timedelta(seconds=1)
        repo.db.flush()
        assert [log.id for log in repo.get_trail(AuditResource.INVOICE, resource_id)] == [
            second.id,
            first.id,
        ]

    def test_get_trail_pagination(self, repo):
        resource_id = uuid4()
        for _ in range(5):
            repo.create(
                resource_type=AuditResource.INVOICE,
                resource_id=resource_id,
                action=AuditAction.UPDATED,
                changes={},
            )
        page = repo.get_trail(AuditResource.INVOICE, resource_id, skip=2, limit=2)
        assert len(page) == 2


# ---------------------------------------------------------------------------
# Service tests
# ---------------------------------------------------------------------------


class TestAuditService:
    def test_log_create(self, service, repo):
        resource_id = uuid4()
        service.log_create(
            AuditResource.RATE_TIER,
            resource_id,
            actor_id="ops@acme",
            data={"base_rate": "14.00", "service_type": "DOM"},
        )
        logs = repo.get_trail(AuditResource.RATE_TIER, resource_id)
        assert len(logs) == 1
        log = logs[0]
        assert log.action == "created"
        assert log.changes == {"base_rate": "14.00", "service_type": "DOM"}
        assert log.actor_id == "ops@acme"

    def test_log_create_defaults(self, service, repo):
        resource_id = uuid4()
        service.log_create(AuditResource.INVOICE, resource_id)
        logs = repo.get_trail(AuditResource.INVOICE, resource_id)
        assert len(logs) == 1
        assert logs[0].actor_id is None
        assert logs[0].changes == {}

    def test_log_update_diffs_fields(self, service, repo):
        resource_id = uuid4()
        service.log_update(
            AuditResource.INVOICE,
            resource_id,
            old_data={"notes": None, "payment_reference": None, "currency": "AED"},
            new_data={"notes": "Call first", "payment_reference": None, "currency": "AED"},
        )
        logs = repo.get_trail(AuditResource.INVOICE, resource_id)
        assert len(logs) == 1
        assert logs[0].action == "updated"
        assert logs[0].changes == {"notes": {"old": None, "new": "Call first"}}

    def test_log_update_no_changes_skips(self, service, repo):
        resource_id = uuid4()
        result = service.log_update(
            AuditResource.INVOICE,
            resource_id,
            old_data={"notes": "same"},
            new_data={"notes": "same"},
        )
        assert result is None
        assert repo.get_trail(AuditResource.INVOICE, resource_id) == []

    def test_log_update_with_removed_field(self, service, repo):
        resource_id = uuid4()
        service.log_update(
            AuditResource.INVOICE,
            resource_id,
            old_data={"total": "100.00", "note": "test"},
            new_data={"total": "100.00"},
        )
        logs = repo.get_trail(AuditResource.INVOICE, resource_id)
        assert logs[0].changes == {"note": {"old": "test", "new": None}}

    def test_log_status_change_is_an_invoice_record(self, service, repo):
        invoice_id = uuid4()
        service.log_status_change(invoice_id, "pending", "paid")
        logs = repo.get_trail(AuditResource.INVOICE, invoice_id)
        assert len(logs) == 1
        log = logs[0]
        assert log.action == "status_changed"
        assert log.changes == {"status": {"old": "pending", "new": "paid"}}
        assert log.actor_id is None

    def test_log_adjustment(self, service, repo):
        invoice_id = uuid4()
        service.log_adjustment(invoice_id, "Waived weekend surcharge", actor_id="ops@acme")
        logs = repo.get_trail(AuditResource.INVOICE, invoice_id)
        assert len(logs) == 1
        log = logs[0]
        assert log.action == "adjusted"
        assert log.changes == {"adjustment_notes": "Waived weekend surcharge"}
        assert log.actor_id == "ops@acme"
        assert log.item_id is None

    def test_log_adjustment_for_an_item(self, service, repo):
        invoice_id, item_id = uuid4(), uuid4()
        service.log_adjustment(
            invoice_id, "Added pickup", item_id=item_id, operation=ItemOperation.ADD_ITEM
        )
        log = repo.get_trail(AuditResource.INVOICE, invoice_id)[0]
        assert log.item_id == item_id
        assert log.item_operation == "add_item"


# ---------------------------------------------------------------------------
# Schema tests
# ---------------------------------------------------------------------------


class TestAuditLogSchema:
    def test_response_from_model(self, repo):
        resource_id, item_id = uuid4(), uuid4()
        log = repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=resource_id,
            action=AuditAction.ADJUSTED,
            changes={"adjustment_notes": "Credit"},
            actor_id="ops@acme",
            item_id=item_id,
            item_operation=ItemOperation.ADD_ITEM,
        )
        response = AuditLogResponse.model_validate(log)
        assert response.id == log.id
        assert response.resource_type is AuditResource.INVOICE
        assert response.resource_id == resource_id
        assert response.action is AuditAction.ADJUSTED
        assert response.item_id == item_id
        assert response.item_operation is ItemOperation.ADD_ITEM
        assert response.actor_id == "ops@acme"
        assert response.created_at is not None

    def test_response_without_item(self, repo):
        log = repo.create(
            resource_type=AuditResource.RATE_TIER,
            resource_id=uuid4(),
            action=AuditAction.UPDATED,
            changes={},
        )
        response = AuditLogResponse.model_validate(log)
        assert response.resource_type is AuditResource.RATE_TIER
        assert response.item_id is None
        assert response.item_operation is None
        assert response.actor_id is None
