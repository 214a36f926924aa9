"""Rate tier API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from parcel_billing.core.database import get_db
from parcel_billing.core.exceptions import OverlappingTierError
from parcel_billing.models.audit_log import AuditLog, AuditResource
from parcel_billing.models.rate_tier import RateTier, ServiceType
from parcel_billing.repositories.audit_log_repository import AuditLogRepository
from parcel_billing.repositories.rate_tier_repository import RateTierRepository
from parcel_billing.schemas.audit_log import AuditLogResponse
from parcel_billing.schemas.rate_tier import RateTierCreate, RateTierResponse, RateTierUpdate
from parcel_billing.services.audit_service import AuditService
from parcel_billing.services.rating.catalog import RateTierCatalog

router = APIRouter()


def _check_overlap(db: Session, candidate: RateTier) -> None:
    if not candidate.is_active:
        return
    try:
        RateTierCatalog.load(db).check_no_overlap(candidate)
    except OverlappingTierError as e:
        raise HTTPException(status_code=422, detail=e.message) from None


def _snapshot(tier: RateTier, keys) -> dict[str, str | None]:
    values = {k: getattr(tier, k) for k in keys}
    return {k: str(v) if v is not None else None for k, v in values.items()}


@router.get(
    "/",
    response_model=list[RateTierResponse],
    summary="List rate tiers",
)
async def list_rate_tiers(
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    service_type: ServiceType | None = None,
    active_only: bool = False,
    db: Session = Depends(get_db),
) -> list[RateTier]:
    repo = RateTierRepository(db)
    return repo.get_all(skip=skip, limit=limit, service_type=service_type, active_only=active_only)


@router.get(
    "/{tier_id}",
    response_model=RateTierResponse,
    summary="Get rate tier",
    responses={404: {"description": "Rate tier not found"}},
)
async def get_rate_tier(
    tier_id: UUID,
    db: Session = Depends(get_db),
) -> RateTier:
    repo = RateTierRepository(db)
    tier = repo.get_by_id(tier_id)
    if not tier:
        raise HTTPException(status_code=404, detail="Rate tier not found")
    return tier


@router.post(
    "/",
    response_model=RateTierResponse,
    status_code=201,
    summary="Create rate tier",
    responses={422: {"description": "Validation error or overlapping tier"}},
)
async def create_rate_tier(
    data: RateTierCreate,
    actor_id: str | None = Query(default=None, description="Operator making the change"),
    db: Session = Depends(get_db),
) -> RateTier:
    """Create a tier. Active tiers of one service type must not overlap."""
    repo = RateTierRepository(db)
    _check_overlap(db, repo.build(data))
    tier = repo.create(data)

    AuditService(db).log_create(
        AuditResource.RATE_TIER,
        tier.id,  # type: ignore[arg-type]
        actor_id=actor_id,
        data=_snapshot(tier, data.model_dump()),
    )
    db.commit()
    return tier


@router.put(
    "/{tier_id}",
    response_model=RateTierResponse,
    summary="Update rate tier",
    responses={
        404: {"description": "Rate tier not found"},
        422: {"description": "Validation error or overlapping tier"},
    },
)
async def update_rate_tier(
    tier_id: UUID,
    data: RateTierUpdate,
    actor_id: str | None = Query(default=None, description="Operator making the change"),
    db: Session = Depends(get_db),
) -> RateTier:
    repo = RateTierRepository(db)
    tier = repo.get_by_id(tier_id)
    if not tier:
        raise HTTPException(status_code=404, detail="Rate tier not found")

    current = RateTierResponse.model_validate(tier).model_dump(
        exclude={"id", "created_at", "updated_at"}
    )
    try:
        merged = RateTierCreate.model_validate({**current, **data.model_dump(exclude_unset=True)})
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from None

    candidate = repo.build(merged)
    candidate.id = tier.id
    _check_overlap(db, candidate)

    changed = data.model_dump(exclude_unset=True)
    old_data = _snapshot(tier, changed)
    updated = repo.update(tier_id, data)
    if not updated:  # pragma: no cover - race condition
        raise HTTPException(status_code=404, detail="Rate tier not found")

    AuditService(db).log_update(
        AuditResource.RATE_TIER,
        tier_id,
        actor_id=actor_id,
        old_data=old_data,
        new_data=_snapshot(updated, changed),
    )
    db.commit()
    return updated


@router.delete(
    "/{tier_id}",
    status_code=204,
    summary="Deactivate rate tier",
    responses={404: {"description": "Rate tier not found"}},
)
async def deactivate_rate_tier(
    tier_id: UUID,
    actor_id: str | None = Query(default=None, description="Operator making the change"),
    db: Session = Depends(get_db),
) -> None:
    """Deactivate a tier. It stays referenced by the shipment charges priced with it."""
    repo = RateTierRepository(db)
    tier = repo.get_by_id(tier_id)
    if not tier:
        raise HTTPException(status_code=404, detail="Rate tier not found")
    was_active = bool(tier.is_active)
    repo.deactivate(tier_id)

    if was_active:
        AuditService(db).log_update(
            AuditResource.RATE_TIER,
            tier_id,
            actor_id=actor_id,
            old_data={"is_active": "True"},
            new_data={"is_active": "False"},
        )
        db.commit()


@router.get(
    "/{tier_id}/audit_logs",
    response_model=list[AuditLogResponse],
    summary="Get rate tier audit trail",
    responses={404: {"description": "Rate tier not found"}},
)
async def get_rate_tier_audit_logs(
    tier_id: UUID,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> list[AuditLog]:
    """Every recorded change to the tier, newest first."""
    if not RateTierRepository(db).get_by_id(tier_id):
        raise HTTPException(status_code=404, detail="Rate tier not found")
    return AuditLogRepository(db).get_trail(
        AuditResource.RATE_TIER, tier_id, skip=skip, limit=limit
    )
