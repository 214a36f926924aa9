"""Rate quote endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from parcel_billing.core.database import get_db
from parcel_billing.core.exceptions import BillingError, status_code_for
from parcel_billing.schemas.rate import (
    CodFeeRequest,
    CodFeeResponse,
    RateCalculateRequest,
    RateCalculateResponse,
)
from parcel_billing.schemas.rate_tier import RateTierResponse
from parcel_billing.services.shipment_rating_service import ShipmentRatingService, dimensions_from

router = APIRouter()


@router.post(
    "/calculate",
    response_model=RateCalculateResponse,
    summary="Calculate shipment rate",
    responses={
        400: {"description": "Invalid weight"},
        404: {"description": "Client not found"},
        422: {"description": "No rate tier matches the shipment"},
    },
)
async def calculate_rate(
    data: RateCalculateRequest,
    db: Session = Depends(get_db),
) -> RateCalculateResponse:
    """Quote a shipment without recording it or counting it towards the monthly volume."""
    service = ShipmentRatingService(db)
    try:
        result = service.quote(
            client_id=data.client_id,
            service_type=data.service_type,
            weight=data.weight,
            dimensions=dimensions_from(data.length, data.width, data.height),
            shipment_count=data.shipment_count,
        )
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None

    return RateCalculateResponse(
        base_rate=result.base_rate,
        additional_kg_charge=result.additional_kg_charge,
        total_rate=result.total_rate,
        tier=RateTierResponse.model_validate(result.tier) if result.tier else None,
        using_manual_tier=result.using_manual_tier,
        using_custom_rates=result.using_custom_rates,
        actual_weight=result.actual_weight,
        volumetric_weight=result.volumetric_weight,
        chargeable_weight=result.chargeable_weight,
    )


@router.post(
    "/cod_fee",
    response_model=CodFeeResponse,
    summary="Calculate COD fee",
    responses={
        400: {"description": "COD amount must be positive"},
        404: {"description": "Client not found"},
    },
)
async def calculate_cod_fee(
    data: CodFeeRequest,
    db: Session = Depends(get_db),
) -> CodFeeResponse:
    service = ShipmentRatingService(db)
    try:
        fee = service.calculate_cod_fee(data.cod_amount, client_id=data.client_id)
    except BillingError as e:
        raise HTTPException(status_code=status_code_for(e), detail=e.message) from None
    return CodFeeResponse(cod_amount=data.cod_amount, fee=fee)
