from parcel_billing.repositories.audit_log_repository import AuditLogRepository
from parcel_billing.repositories.client_monthly_volume_repository import (
    ClientMonthlyVolumeRepository,
)
from parcel_billing.repositories.client_repository import ClientRepository
from parcel_billing.repositories.invoice_item_repository import InvoiceItemRepository
from parcel_billing.repositories.invoice_number_sequence_repository import (
    InvoiceNumberSequenceRepository,
)
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.repositories.rate_tier_repository import RateTierRepository
from parcel_billing.repositories.shipment_charge_repository import ShipmentChargeRepository

__all__ = [
    "AuditLogRepository",
    "ClientMonthlyVolumeRepository",
    "ClientRepository",
    "InvoiceItemRepository",
    "InvoiceNumberSequenceRepository",
    "InvoiceRepository",
    "RateTierRepository",
    "ShipmentChargeRepository",
]
