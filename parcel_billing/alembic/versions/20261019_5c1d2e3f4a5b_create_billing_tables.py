"""create billing tables

Revision ID: 5c1d2e3f4a5b
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "5c1d2e3f4a5b"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "rate_tiers",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("service_type", sa.String(length=3), nullable=False),
        sa.Column("min_volume", sa.Integer(), nullable=True),
        sa.Column("max_volume", sa.Integer(), nullable=True),
        sa.Column("max_weight", sa.Integer(), nullable=True),
        sa.Column("base_rate", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("additional_kg_rate", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_rate_tiers_service_type"), "rate_tiers", ["service_type"])
    op.create_index(op.f("ix_rate_tiers_is_active"), "rate_tiers", ["is_active"])

    op.create_table(
        "clients",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("net_payment_term", sa.Integer(), nullable=False),
        sa.Column("cod_allowed", sa.Boolean(), nullable=False),
        sa.Column("fod_allowed", sa.Boolean(), nullable=False),
        sa.Column("manual_rate_tier_id", sa.String(length=36), nullable=True),
        sa.Column("cod_fee_percent", sa.Numeric(precision=5, scale=2), nullable=True),
        sa.Column("cod_min_fee", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("cod_max_fee", sa.Numeric(precision=12, scale=2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["manual_rate_tier_id"], ["rate_tiers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "client_monthly_volumes",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("client_id", sa.String(length=36), nullable=False),
        sa.Column("period", sa.String(length=7), nullable=False),
        sa.Column("shipment_count", sa.Integer(), nullable=False),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("client_id", "period", name="uq_client_monthly_volume"),
    )
    op.create_index(
        op.f("ix_client_monthly_volumes_client_id"), "client_monthly_volumes", ["client_id"]
    )

    op.create_table(
        "shipment_charges",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("shipment_id", sa.String(length=64), nullable=False),
        sa.Column("client_id", sa.String(length=36), nullable=False),
        sa.Column("service_type", sa.String(length=3), nullable=False),
        sa.Column("period", sa.String(length=7), nullable=False),
        sa.Column("volume_count", sa.Integer(), nullable=False),
        sa.Column("rate_tier_id", sa.String(length=36), nullable=False),
        sa.Column("using_manual_tier", sa.Boolean(), nullable=False),
        sa.Column("pieces", sa.Integer(), nullable=False),
        sa.Column("actual_weight", sa.Numeric(precision=10, scale=3), nullable=False),
        sa.Column("volumetric_weight", sa.Numeric(precision=10, scale=3), nullable=False),
        sa.Column("chargeable_weight", sa.Numeric(precision=10, scale=3), nullable=False),
        sa.Column("base_rate", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("additional_kg_charge", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("total_rate", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("cod_amount", sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column("cod_fee", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("shipment_created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["rate_tier_id"], ["rate_tiers.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        op.f("ix_shipment_charges_shipment_id"), "shipment_charges", ["shipment_id"], unique=True
    )
    op.create_index(op.f("ix_shipment_charges_client_id"), "shipment_charges", ["client_id"])
    op.create_index(op.f("ix_shipment_charges_period"), "shipment_charges", ["period"])
    op.create_index(
        op.f("ix_shipment_charges_shipment_created_at"),
        "shipment_charges",
        ["shipment_created_at"],
    )

    op.create_table(
        "invoices",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invoice_number", sa.String(length=50), nullable=False),
        sa.Column("client_id", sa.String(length=36), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("status_overridden", sa.Boolean(), nullable=False),
        sa.Column("period_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("period_to", sa.DateTime(timezone=True), nullable=False),
        sa.Column("issue_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("due_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False),
        sa.Column("subtotal", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("taxes", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("amount_paid", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("balance", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("payment_reference", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_adjusted", sa.Boolean(), nullable=False),
        sa.Column("adjustment_notes", sa.Text(), nullable=True),
        sa.Column("last_adjusted_by", sa.String(length=255), nullable=True),
        sa.Column("last_adjusted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_invoices_invoice_number"), "invoices", ["invoice_number"], unique=True)
    op.create_index(op.f("ix_invoices_client_id"), "invoices", ["client_id"])

    op.create_table(
        "invoice_items",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("invoice_id", sa.String(length=36), nullable=False),
        sa.Column("shipment_id", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("total", sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.ForeignKeyConstraint(["invoice_id"], ["invoices.id"], ondelete="RESTRICT"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_id", "shipment_id", name="uq_invoice_item_shipment"),
    )
    op.create_index(op.f("ix_invoice_items_invoice_id"), "invoice_items", ["invoice_id"])
    op.create_index(op.f("ix_invoice_items_shipment_id"), "invoice_items", ["shipment_id"])

    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("resource_type", sa.String(length=50), nullable=False),
        sa.Column("resource_id", sa.String(length=36), nullable=False),
        sa.Column("action", sa.String(length=50), nullable=False),
        sa.Column("changes", sa.JSON(), nullable=False),
        sa.Column("actor_type", sa.String(length=50), nullable=False),
        sa.Column("actor_id", sa.String(length=255), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("(CURRENT_TIMESTAMP)"),
            nullable=True,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_audit_logs_resource_type"), "audit_logs", ["resource_type"])
    op.create_index(op.f("ix_audit_logs_resource_id"), "audit_logs", ["resource_id"])
    op.create_index(op.f("ix_audit_logs_action"), "audit_logs", ["action"])


def downgrade() -> None:
    op.drop_index(op.f("ix_audit_logs_action"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_id"), table_name="audit_logs")
    op.drop_index(op.f("ix_audit_logs_resource_type"), table_name="audit_logs")
    op.drop_table("audit_logs")
    op.drop_index(op.f("ix_invoice_items_shipment_id"), table_name="invoice_items")
    op.drop_index(op.f("ix_invoice_items_invoice_id"), table_name="invoice_items")
    op.drop_table("invoice_items")
    op.drop_index(op.f("ix_invoices_client_id"), table_name="invoices")
    op.drop_index(op.f("ix_invoices_invoice_number"), table_name="invoices")
    op.drop_table("invoices")
    op.drop_index(op.f("ix_shipment_charges_shipment_created_at"), table_name="shipment_charges")
    op.drop_index(op.f("ix_shipment_charges_period"), table_name="shipment_charges")
    op.drop_index(op.f("ix_shipment_charges_client_id"), table_name="shipment_charges")
    op.drop_index(op.f("ix_shipment_charges_shipment_id"), table_name="shipment_charges")
    op.drop_table("shipment_charges")
    op.drop_index(op.f("ix_client_monthly_volumes_client_id"), table_name="client_monthly_volumes")
    op.drop_table("client_monthly_volumes")
    op.drop_table("clients")
    op.drop_index(op.f("ix_rate_tiers_is_active"), table_name="rate_tiers")
    op.drop_index(op.f("ix_rate_tiers_service_type"), table_name="rate_tiers")
    op.drop_table("rate_tiers")
