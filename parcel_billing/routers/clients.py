from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from parcel_billing.core.database import get_db
from parcel_billing.models.client import Client
from parcel_billing.repositories.client_repository import ClientRepository
from parcel_billing.repositories.rate_tier_repository import RateTierRepository
from parcel_billing.schemas.client import ClientCreate, ClientResponse

router = APIRouter()


@router.post(
    "/",
    response_model=ClientResponse,
    status_code=201,
    summary="Create client",
    responses={404: {"description": "Manual rate tier not found"}},
)
async def create_client(
    data: ClientCreate,
    db: Session = Depends(get_db),
) -> Client:
    if data.manual_rate_tier_id and not RateTierRepository(db).get_by_id(data.manual_rate_tier_id):
        raise HTTPException(status_code=404, detail="Manual rate tier not found")
    return ClientRepository(db).create(data)


@router.get(
    "/{client_id}",
    response_model=ClientResponse,
    summary="Get client",
    responses={404: {"description": "Client not found"}},
)
async def get_client(
    client_id: UUID,
    db: Session = Depends(get_db),
) -> Client:
    client = ClientRepository(db).get_by_id(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")
    return client
