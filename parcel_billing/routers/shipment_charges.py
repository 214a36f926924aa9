"""Shipment charge API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from parcel_billing.core.database import get_db
from parcel_billing.core.exceptions import BillingError, status_code_for
from parcel_billing.models.shipment_charge import ShipmentCharge
from parcel_billing.repositories.shipment_charge_repository import ShipmentChargeRepository
from parcel_billing.schemas.shipment_charge import ShipmentChargeResponse, ShipmentRateRequest
from parcel_billing.services.shipment_rating_service import ShipmentRatingService

router = APIRouter()


@router.post(
    "/",
    response_model=ShipmentChargeResponse,
    status_code=201,
    summary="Rate a shipment",
    responses={
        400: {"description": "Invalid weight or capability not enabled for the client"},
        404: {"description": "Client not found"},
        409: {"description": "Shipment already rated"},
        422: {"description": "No rate tier matches the shipment"},
    },
)
async def rate_shipment(
    data: ShipmentRateRequest,
    db: Session = Depends(get_db),
) -> ShipmentCharge:
    """Price a new shipment and count it towards the client's monthly volume."""
    service = ShipmentRatingService(db)
    try:
        return service.rate_shipment(data)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None


@router.get(
    "/",
    response_model=list[ShipmentChargeResponse],
    summary="List shipment charges",
)
async def list_shipment_charges(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    client_id: UUID | None = None,
    period: str | None = Query(default=None, pattern=r"^\d{4}-\d{2}$"),
    db: Session = Depends(get_db),
) -> list[ShipmentCharge]:
    repo = ShipmentChargeRepository(db)
    return repo.get_all(client_id=client_id, period=period, skip=skip, limit=limit)


@router.get(
    "/{shipment_id}",
    response_model=ShipmentChargeResponse,
    summary="Get shipment charge",
    responses={404: {"description": "Shipment charge not found"}},
)
async def get_shipment_charge(
    shipment_id: str,
    db: Session = Depends(get_db),
) -> ShipmentCharge:
    charge = ShipmentChargeRepository(db).get_by_shipment_id(shipment_id)
    if not charge:
        raise HTTPException(status_code=404, detail="Shipment charge not found")
    return charge
