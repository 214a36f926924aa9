from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from parcel_billing.core.database import get_db
from parcel_billing.core.exceptions import BillingError, status_code_for
from parcel_billing.models.audit_log import AuditLog, AuditResource
from parcel_billing.models.invoice import Invoice, InvoiceStatus
from parcel_billing.models.invoice_item import InvoiceItem
from parcel_billing.repositories.audit_log_repository import AuditLogRepository
from parcel_billing.repositories.invoice_repository import InvoiceRepository
from parcel_billing.schemas.audit_log import AuditLogResponse
from parcel_billing.schemas.invoice import (
    InvoiceDetailsResponse,
    InvoiceGenerateRequest,
    InvoiceItemCreate,
    InvoiceItemResponse,
    InvoiceResponse,
    InvoiceUpdate,
)
from parcel_billing.services.invoice_ledger import InvoiceLedger
from parcel_billing.services.invoice_reconciler import InvoiceReconciler
from parcel_billing.services.invoice_service import InvoiceService

router = APIRouter()


@router.get(
    "/",
    response_model=list[InvoiceResponse],
    summary="List invoices",
)
async def list_invoices(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    client_id: UUID | None = None,
    status: InvoiceStatus | None = None,
    order_by: str | None = None,
    db: Session = Depends(get_db),
) -> list[Invoice]:
    """List invoices with optional filters."""
    response.headers["X-Total-Count"] = str(InvoiceRepository(db).count(client_id, status))
    return InvoiceService(db).list_invoices(
        client_id=client_id, status=status, skip=skip, limit=limit, order_by=order_by
    )


@router.post(
    "/generate",
    response_model=InvoiceResponse,
    status_code=201,
    summary="Generate invoice",
    responses={
        404: {"description": "Client not found"},
        409: {"description": "Overlapping period or nothing to bill"},
    },
)
async def generate_invoice(
    data: InvoiceGenerateRequest,
    db: Session = Depends(get_db),
) -> Invoice:
    """Bill the client's uninvoiced shipments for a period."""
    service = InvoiceService(db)
    try:
        return service.generate_invoice(
            client_id=data.client_id,
            period_from=data.period_from,
            period_to=data.period_to,
            shipment_ids=data.shipment_ids,
        )
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.get(
    "/{invoice_id}",
    response_model=InvoiceDetailsResponse,
    summary="Get invoice with items",
    responses={404: {"description": "Invoice not found"}},
)
async def get_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
) -> InvoiceDetailsResponse:
    service = InvoiceService(db)
    try:
        invoice, items = service.get_invoice_details(invoice_id)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None
    return InvoiceDetailsResponse(
        invoice=InvoiceResponse.model_validate(invoice),
        items=[InvoiceItemResponse.model_validate(item) for item in items],
    )


@router.put(
    "/{invoice_id}",
    response_model=InvoiceResponse,
    summary="Update invoice",
    responses={
        400: {"description": "Invalid payment amount"},
        404: {"description": "Invoice not found"},
    },
)
async def update_invoice(
    invoice_id: UUID,
    data: InvoiceUpdate,
    db: Session = Depends(get_db),
) -> Invoice:
    """Record a payment, force a status, or attach adjustment notes."""
    service = InvoiceService(db)
    try:
        return service.update_invoice(invoice_id, data)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.post(
    "/{invoice_id}/items",
    response_model=InvoiceItemResponse,
    status_code=201,
    summary="Add manual invoice item",
    responses={
        400: {"description": "Invalid quantity"},
        404: {"description": "Invoice not found"},
    },
)
async def add_invoice_item(
    invoice_id: UUID,
    data: InvoiceItemCreate,
    db: Session = Depends(get_db),
) -> InvoiceItem:
    ledger = InvoiceLedger(db)
    try:
        return ledger.add_manual_item(
            invoice_id,
            description=data.description,
            quantity=data.quantity,
            unit_price=data.unit_price,
            actor_id=data.adjusted_by,
            notes=data.adjustment_notes,
        )
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.delete(
    "/{invoice_id}/items/{item_id}",
    status_code=204,
    summary="Delete manual invoice item",
    responses={
        404: {"description": "Invoice or item not found"},
        409: {"description": "Shipment items cannot be deleted"},
    },
)
async def delete_invoice_item(
    invoice_id: UUID,
    item_id: UUID,
    adjusted_by: str | None = None,
    adjustment_notes: str | None = None,
    db: Session = Depends(get_db),
) -> None:
    ledger = InvoiceLedger(db)
    try:
        ledger.delete_item(invoice_id, item_id, actor_id=adjusted_by, notes=adjustment_notes)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.post(
    "/{invoice_id}/recompute",
    response_model=InvoiceResponse,
    summary="Recompute invoice totals",
    responses={404: {"description": "Invoice not found"}},
)
async def recompute_invoice(
    invoice_id: UUID,
    db: Session = Depends(get_db),
) -> Invoice:
    try:
        return InvoiceReconciler(db).recompute(invoice_id)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.get(
    "/{invoice_id}/audit_logs",
    response_model=list[AuditLogResponse],
    summary="Get invoice audit trail",
    responses={404: {"description": "Invoice not found"}},
)
async def get_invoice_audit_logs(
    invoice_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[AuditLog]:
    """Every recorded change to the invoice, newest first."""
    if not InvoiceRepository(db).get_by_id(invoice_id):
        raise HTTPException(status_code=404, detail="Invoice not found")
    return AuditLogRepository(db).get_trail(
        AuditResource.INVOICE, invoice_id, skip=skip, limit=limit
    )
