"""AuditLog model: the append-only history of invoice and rate tier changes."""

from enum import Enum

from sqlalchemy import JSON, Column, DateTime, Index, String, func

from parcel_billing.core.database import Base
from parcel_billing.models.shared import UUIDType, generate_uuid, utc_now


class AuditResource(str, Enum):
    INVOICE = "invoice"
    RATE_TIER = "rate_tier"


class AuditAction(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    STATUS_CHANGED = "status_changed"
    ADJUSTED = "adjusted"


class ItemOperation(str, Enum):
    ADD_ITEM = "add_item"
    DELETE_ITEM = "delete_item"


class AuditLog(Base):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_resource", "resource_type", "resource_id", "created_at"),
    )

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    resource_type = Column(String(20), nullable=False)
    resource_id = Column(UUIDType, nullable=False)
    action = Column(String(20), nullable=False)
    changes = Column(JSON, nullable=False, default=dict)
    # Null for system changes (generation, overdue sweeps)
    actor_id = Column(String(255), nullable=True)
    # Set only on adjustments that added or removed an invoice item
    item_id = Column(UUIDType, nullable=True)
    item_operation = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utc_now, server_default=func.now())
