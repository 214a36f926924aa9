from parcel_billing.schemas.audit_log import AuditLogResponse
from parcel_billing.schemas.client import ClientCreate, ClientResponse
from parcel_billing.schemas.invoice import (
    InvoiceDetailsResponse,
    InvoiceGenerateRequest,
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceUpdate,
)
from parcel_billing.schemas.rate import (
    CodFeeRequest,
    CodFeeResponse,
    RateCalculateRequest,
    RateCalculateResponse,
)
from parcel_billing.schemas.rate_tier import RateTierCreate, RateTierResponse, RateTierUpdate
from parcel_billing.schemas.shipment_charge import ShipmentChargeResponse, ShipmentRateRequest

__all__ = [
    "AuditLogResponse",
    "ClientCreate",
    "ClientResponse",
    "CodFeeRequest",
    "CodFeeResponse",
    "InvoiceDetailsResponse",
    "InvoiceGenerateRequest",
    "InvoiceItemCreate",
    "InvoiceItemResponse",
    "InvoiceResponse",
    "InvoiceUpdate",
    "RateCalculateRequest",
    "RateCalculateResponse",
    "RateTierCreate",
    "RateTierResponse",
    "RateTierUpdate",
    "ShipmentChargeResponse",
    "ShipmentRateRequest",
]
