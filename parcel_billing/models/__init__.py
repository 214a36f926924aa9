from parcel_billing.models.audit_log import AuditAction, AuditLog, AuditResource, ItemOperation
from parcel_billing.models.client import Client
from parcel_billing.models.client_monthly_volume import ClientMonthlyVolume
from parcel_billing.models.invoice import Invoice, InvoiceStatus
from parcel_billing.models.invoice_item import InvoiceItem
from parcel_billing.models.invoice_number_sequence import InvoiceNumberSequence
from parcel_billing.models.rate_tier import ByVolume, ByWeight, RateTier, ServiceType, TierSelector
from parcel_billing.models.shipment_charge import ShipmentCharge

__all__ = [
    "AuditAction",
    "AuditLog",
    "AuditResource",
    "ByVolume",
    "ByWeight",
    "Client",
    "ClientMonthlyVolume",
    "Invoice",
    "InvoiceItem",
    "InvoiceNumberSequence",
    "InvoiceStatus",
    "ItemOperation",
    "RateTier",
    "ServiceType",
    "ShipmentCharge",
    "TierSelector",
]
