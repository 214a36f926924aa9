"""Audit service for recording state changes to billing records."""

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.models.audit_log import AuditAction, AuditLog, AuditResource, ItemOperation
from parcel_billing.repositories.audit_log_repository import AuditLogRepository


class AuditService:
    """Service for recording audit trail entries.

    Entries are flushed into the caller's session and committed together with
    the change they describe.
    """

    def __init__(self, db: Session):
        self.repo = AuditLogRepository(db)

    def log_create(
        self,
        resource_type: AuditResource,
        resource_id: UUID,
        actor_id: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> AuditLog:
        """Log a resource creation event."""
        return self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=AuditAction.CREATED,
            changes=data or {},
            actor_id=actor_id,
        )

    def log_update(
        self,
        resource_type: AuditResource,
        resource_id: UUID,
        actor_id: str | None = None,
        old_data: dict[str, Any] | None = None,
        new_data: dict[str, Any] | None = None,
    ) -> AuditLog | None:
        """Log a resource update event, auto-diffing changed fields."""
        old = old_data or {}
        new = new_data or {}
        changes: dict[str, Any] = {}
        for key in set(old.keys()) | set(new.keys()):
            old_val = old.get(key)
            new_val = new.get(key)
            if old_val != new_val:
                changes[key] = {"old": old_val, "new": new_val}
        if not changes:
            return None
        return self.repo.create(
            resource_type=resource_type,
            resource_id=resource_id,
            action=AuditAction.UPDATED,
            changes=changes,
            actor_id=actor_id,
        )

    def log_status_change(
        self,
        invoice_id: UUID,
        old_status: str,
        new_status: str,
        actor_id: str | None = None,
    ) -> AuditLog:
        """Log an invoice status transition."""
        return self.repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=invoice_id,
            action=AuditAction.STATUS_CHANGED,
            changes={"status": {"old": old_status, "new": new_status}},
            actor_id=actor_id,
        )

    def log_adjustment(
        self,
        invoice_id: UUID,
        notes: str,
        actor_id: str | None = None,
        item_id: UUID | None = None,
        operation: ItemOperation | None = None,
    ) -> AuditLog:
        """Log a manual invoice adjustment together with its customer-visible notes."""
        return self.repo.create(
            resource_type=AuditResource.INVOICE,
            resource_id=invoice_id,
            action=AuditAction.ADJUSTED,
            changes={"adjustment_notes": notes},
            actor_id=actor_id,
            item_id=item_id,
            item_operation=operation,
        )
