"""custom client rates, invoice number sequences, typed audit records

Revision ID: 8e2f4a6b1c3d
Revises: 5c1d2e3f4a5b
Create Date: 2026-10-19 15:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "8e2f4a6b1c3d"
down_revision = "5c1d2e3f4a5b"
branch_labels = None
depends_on = None

CUSTOM_RATE_COLUMNS = (
    "custom_dom_base_rate",
    "custom_dom_per_kg",
    "custom_sdd_base_rate",
    "custom_sdd_per_kg",
)

audit_logs = sa.table(
    "audit_logs",
    sa.column("id", sa.String(length=36)),
    sa.column("metadata", sa.JSON()),
    sa.column("item_id", sa.String(length=36)),
    sa.column("item_operation", sa.String(length=20)),
)


def upgrade() -> None:
    with op.batch_alter_table("clients") as batch_op:
        for name in CUSTOM_RATE_COLUMNS:
            batch_op.add_column(sa.Column(name, sa.Numeric(precision=12, scale=2), nullable=True))

    with op.batch_alter_table("shipment_charges") as batch_op:
        batch_op.alter_column("rate_tier_id", existing_type=sa.String(length=36), nullable=True)
        batch_op.add_column(
            sa.Column(
                "using_custom_rates", sa.Boolean(), nullable=False, server_default=sa.false()
            )
        )

    op.create_table(
        "invoice_number_sequences",
        sa.Column("day", sa.String(length=8), nullable=False),
        sa.Column("last_number", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("day"),
    )
    # Continue numbering from invoices issued before the sequences existed
    op.execute(
        "INSERT INTO invoice_number_sequences (day, last_number) "
        "SELECT substr(invoice_number, 5, 8), MAX(CAST(substr(invoice_number, 14) AS INTEGER)) "
        "FROM invoices GROUP BY substr(invoice_number, 5, 8)"
    )

    with op.batch_alter_table("audit_logs") as batch_op:
        batch_op.add_column(sa.Column("item_id", sa.String(length=36), nullable=True))
        batch_op.add_column(sa.Column("item_operation", sa.String(length=20), nullable=True))

    bind = op.get_bind()
    metadata_column = audit_logs.c["metadata"]
    rows = bind.execute(
        sa.select(audit_logs.c.id, metadata_column).where(metadata_column.isnot(None))
    ).all()
    for log_id, metadata in rows:
        if not metadata or "item_id" not in metadata:
            continue
        bind.execute(
            audit_logs.update()
            .where(audit_logs.c.id == log_id)
            .values(item_id=metadata["item_id"], item_operation=metadata.get("operation"))
        )

    op.drop_index(op.f("ix_audit_logs_action"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_id"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_type"), table_name="audit_logs")
    with op.batch_alter_table("audit_logs") as batch_op:
        batch_op.drop_column("actor_type")
        batch_op.drop_column("metadata")
        batch_op.alter_column(
            "resource_type", existing_type=sa.String(length=50), type_=sa.String(length=20)
        )
        batch_op.alter_column("action", existing_type=sa.String(length=50), type_=sa.String(length=20))
    op.create_index(
        "ix_audit_logs_resource", "audit_logs", ["resource_type", "resource_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_audit_logs_resource", table_name="audit_logs")
    with op.batch_alter_table("audit_logs") as batch_op:
        batch_op.alter_column("action", existing_type=sa.String(length=20), type_=sa.String(length=50))
        batch_op.alter_column(
            "resource_type", existing_type=sa.String(length=20), type_=sa.String(length=50)
        )
        batch_op.add_column(sa.Column("metadata", sa.JSON(), nullable=True))
        batch_op.add_column(
            sa.Column("actor_type", sa.String(length=50), nullable=False, server_default="system")
        )
    op.execute("UPDATE audit_logs SET actor_type = 'operator' WHERE actor_id IS NOT NULL")

    bind = op.get_bind()
    rows = bind.execute(
        sa.select(audit_logs.c.id, audit_logs.c.item_id, audit_logs.c.item_operation).where(
            audit_logs.c.item_id.isnot(None)
        )
    ).all()
    for log_id, item_id, operation in rows:
        bind.execute(
            audit_logs.update()
            .where(audit_logs.c.id == log_id)
            .values(metadata={"item_id": item_id, "operation": operation})
        )

    with op.batch_alter_table("audit_logs") as batch_op:
        batch_op.drop_column("item_operation")
        batch_op.drop_column("item_id")
    op.create_index(op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"])
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"])
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])

    op.drop_table("invoice_number_sequences")

    with op.batch_alter_table("shipment_charges") as batch_op:
        batch_op.drop_column("using_custom_rates")
        batch_op.alter_column("rate_tier_id", existing_type=sa.String(length=36), nullable=False)

    with op.batch_alter_table("clients") as batch_op:
        for name in reversed(CUSTOM_RATE_COLUMNS):
            batch_op.drop_column(name)
