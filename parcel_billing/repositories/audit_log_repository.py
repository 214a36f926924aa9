"""Repository for AuditLog records."""

from __future__ import annotations

from typing import Any
from uuid import UUID

from sqlalchemy.orm import Session

from parcel_billing.models.audit_log import AuditAction, AuditLog, AuditResource, ItemOperation
from parcel_billing.models.shared import generate_uuid


class AuditLogRepository:
    def __init__(self, db: Session):
        self.db = db

    def create(
        self,
        *,
        resource_type: AuditResource,
        resource_id: UUID,
        action: AuditAction,
        changes: dict[str, Any],
        actor_id: str | None = None,
        item_id: UUID | None = None,
        item_operation: ItemOperation | None = None,
    ) -> AuditLog:
        """Append a record. Flushes only, so it joins the caller's transaction."""
        audit_log = AuditLog(
            id=generate_uuid(),
            resource_type=resource_type.value,
            resource_id=resource_id,
            action=action.value,
            changes=changes,
            actor_id=actor_id,
            item_id=item_id,
            item_operation=item_operation.value if item_operation else None,
        )
        self.db.add(audit_log)
        self.db.flush()
        return audit_log

    def get_trail(
        self,
        resource_type: AuditResource,
        resource_id: UUID,
        skip: int = 0,
        limit: int = 100,
    ) -> list[AuditLog]:
        """Records for one resource, newest first."""
        return (
            self.db.query(AuditLog)
            .filter(
                AuditLog.resource_type == resource_type.value,
                AuditLog.resource_id == resource_id,
            )
            .order_by(AuditLog.created_at.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
