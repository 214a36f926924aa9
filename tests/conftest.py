"""Shared test fixtures for all test modules."""

import contextlib
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import parcel_billing.models  # noqa: F401
from parcel_billing.core import database as db_module
from parcel_billing.core.database import Base
from parcel_billing.models.client import Client
from parcel_billing.models.rate_tier import RateTier, ServiceType

# Create an in-memory SQLite engine with StaticPool so all connections
# share the same database state and there are no file-locking issues.
_test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
_TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=_test_engine)

# DOM tiers used by the delivery company at launch: (min, max, base, per extra kg)
DEFAULT_DOM_TIERS = [
    (0, 399, Decimal("14.00"), Decimal("1.00")),
    (400, 899, Decimal("11.00"), Decimal("1.00")),
    (900, None, Decimal("8.00"), Decimal("1.00")),
]


def add_tier(
    session: Session,
    service_type: ServiceType,
    base_rate: str,
    additional_kg_rate: str,
    min_volume: int | None = None,
    max_volume: int | None = None,
    max_weight: int | None = None,
    is_active: bool = True,
) -> RateTier:
    tier = RateTier(
        service_type=service_type.value,
        min_volume=min_volume,
        max_volume=max_volume,
        max_weight=max_weight,
        base_rate=Decimal(base_rate),
        additional_kg_rate=Decimal(additional_kg_rate),
        is_active=is_active,
    )
    session.add(tier)
    session.commit()
    session.refresh(tier)
    return tier


def seed_default_tiers(session: Session) -> list[RateTier]:
    """Launch DOM tiers plus the single flat SDD tier (18.00 up to 10 kg)."""
    tiers = [
        add_tier(session, ServiceType.DOM, str(base), str(extra), min_volume=lo, max_volume=hi)
        for lo, hi, base, extra in DEFAULT_DOM_TIERS
    ]
    tiers.append(add_tier(session, ServiceType.SDD, "18.00", "1.00", max_weight=10))
    return tiers


def add_client(session: Session, name: str = "Acme Trading LLC", **kwargs) -> Client:
    client = Client(name=name, **kwargs)
    session.add(client)
    session.commit()
    session.refresh(client)
    return client


@pytest.fixture(autouse=True)
def setup_database():
    """Create tables before each test and truncate all data after.

    Patches the module-level engine and SessionLocal so all application code
    uses the in-memory test database. Clears data after each test.
    """
    # Patch module-level engine and session factory
    original_engine = db_module.engine
    original_session = db_module.SessionLocal
    db_module.engine = _test_engine
    db_module.SessionLocal = _TestSessionLocal

    Base.metadata.create_all(bind=_test_engine)

    yield
    with _test_engine.connect() as conn:
        conn.execute(text("PRAGMA foreign_keys = OFF"))
        for table in reversed(Base.metadata.sorted_tables):
            with contextlib.suppress(OperationalError):
                conn.execute(table.delete())
        conn.execute(text("PRAGMA foreign_keys = ON"))
        conn.commit()

    # Restore originals
    db_module.engine = original_engine
    db_module.SessionLocal = original_session
