"""Pydantic schemas for AuditLog."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel

from parcel_billing.models.audit_log import AuditAction, AuditResource, ItemOperation


class AuditLogResponse(BaseModel):
    id: UUID
    resource_type: AuditResource
    resource_id: UUID
    action: AuditAction
    changes: dict[str, Any]
    actor_id: str | None
    item_id: UUID | None = None
    item_operation: ItemOperation | None = None
    created_at: datetime

    model_config = {"from_attributes": True}
