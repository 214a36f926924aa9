from collections.abc import Generator
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from parcel_billing.core.config import settings

engine = create_engine(
    settings.APP_DATABASE_DSN,
    connect_args=({"check_same_thread": False} if "sqlite" in settings.APP_DATABASE_DSN else {}),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base: Any = declarative_base()

_UPSERT_INSERTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def insert_if_absent(
    db: Session, model: Any, values: dict[str, Any], index_elements: list[str]
) -> None:
    """Insert a row unless one with the same unique key already exists.

    Safe against concurrent inserts from other processes: a conflicting row is
    left untouched instead of raising. Runs in the caller's transaction.
    """
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is not None:
        stmt = insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
        db.execute(stmt)
        return

    try:
        with db.begin_nested():
            db.add(model(**values))
    except IntegrityError:
        pass  # another transaction inserted it first


def init_db() -> None:
    """Initialize database tables."""
    import parcel_billing.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
