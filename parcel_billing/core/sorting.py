"""Parse ``field:direction`` sort strings for list endpoints."""

from __future__ import annotations

from sqlalchemy import asc, desc, inspect
from sqlalchemy.orm import Query

from parcel_billing.core.database import Base

DIRECTIONS = ("asc", "desc")


def parse_order_by(
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> tuple[str, str]:
    """Resolve a sort string such as ``"due_date:asc"`` against a model's columns.

    Unknown columns fall back to the default sort; a known column with a missing
    direction sorts ascending, and one with an unknown direction uses the default.
    """
    if not order_by:
        return default_field, default_direction

    field, _, direction = order_by.partition(":")
    if field not in inspect(model).column_attrs:
        return default_field, default_direction
    if not direction:
        return field, "asc"
    return field, direction if direction in DIRECTIONS else default_direction


def apply_order_by(
    query: Query,  # type: ignore[type-arg]
    model: type[Base],
    order_by: str | None,
    default_field: str = "created_at",
    default_direction: str = "desc",
) -> Query:  # type: ignore[type-arg]
    field, direction = parse_order_by(model, order_by, default_field, default_direction)
    order_func = asc if direction == "asc" else desc
    # id breaks ties so pagination is stable
    return query.order_by(order_func(getattr(model, field)), model.id)
