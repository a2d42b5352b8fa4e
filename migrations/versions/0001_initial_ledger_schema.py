"""initial ledger schema

Revision ID: 0001_initial_ledger_schema
Revises:
Create Date: 2026-10-19
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import TIMESTAMP

revision = "0001_initial_ledger_schema"
down_revision = None
branch_labels = None
depends_on = None


def _created_at():
    return sa.Column("created_at", TIMESTAMP(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "principals",
        sa.Column("principal_id", sa.String(), primary_key=True),
        sa.Column("display_name", sa.String(), nullable=False),
        sa.Column("organization", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column("registered_by", sa.String(), nullable=False),
        sa.Column("registered_at", sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_principals_principal_id", "principals", ["principal_id"])
    op.create_index("ix_principals_role", "principals", ["role"])

    op.create_table(
        "production_records",
        sa.Column("trace_number", sa.String(), primary_key=True),
        sa.Column("food_name", sa.String(), nullable=False),
        sa.Column("origin_address", sa.String(), nullable=False),
        sa.Column("quality", sa.BigInteger(), nullable=False),
        sa.Column("producer", sa.String(), sa.ForeignKey("principals.principal_id"), nullable=False),
        sa.Column("recorded_at", sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_production_records_trace_number", "production_records", ["trace_number"])
    op.create_index("ix_production_records_producer", "production_records", ["producer"])

    op.create_table(
        "distribution_records",
        sa.Column("trace_number", sa.String(), primary_key=True),
        sa.Column("food_name", sa.String(), nullable=False),
        sa.Column("handling_address", sa.String(), nullable=False),
        sa.Column("distributor", sa.String(), sa.ForeignKey("principals.principal_id"), nullable=False),
        sa.Column("recorded_at", sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_distribution_records_trace_number", "distribution_records", ["trace_number"])
    op.create_index("ix_distribution_records_distributor", "distribution_records", ["distributor"])

    op.create_table(
        "sales_records",
        sa.Column("trace_number", sa.String(), primary_key=True),
        sa.Column("food_name", sa.String(), nullable=False),
        sa.Column("sale_address", sa.String(), nullable=False),
        sa.Column("retailer", sa.String(), sa.ForeignKey("principals.principal_id"), nullable=False),
        sa.Column("recorded_at", sa.BigInteger(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_sales_records_trace_number", "sales_records", ["trace_number"])
    op.create_index("ix_sales_records_retailer", "sales_records", ["retailer"])

    op.create_table(
        "trace_summaries",
        sa.Column("trace_number", sa.String(), primary_key=True),
        sa.Column("food_name", sa.String(), nullable=False),
        sa.Column("origin_address", sa.String(), nullable=False),
        sa.Column("produced_at", sa.String(), nullable=False),
        sa.Column("producer_label", sa.String(), nullable=False),
        sa.Column("quality", sa.String(), nullable=False),
        _created_at(),
    )
    op.create_index("ix_trace_summaries_trace_number", "trace_summaries", ["trace_number"])

    op.create_table(
        "ledger_events",
        sa.Column("sequence", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("event", sa.String(), nullable=False),
        sa.Column("stage", sa.String(), nullable=False),
        sa.Column("trace_number", sa.String(), nullable=False),
        sa.Column("principal_id", sa.String(), nullable=False),
        sa.Column("recorded_at", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        _created_at(),
    )
    op.create_index("ix_ledger_events_trace_number", "ledger_events", ["trace_number"])
    op.create_index("ix_ledger_events_status", "ledger_events", ["status"])


def downgrade() -> None:
    op.drop_table("ledger_events")
    op.drop_table("trace_summaries")
    op.drop_table("sales_records")
    op.drop_table("distribution_records")
    op.drop_table("production_records")
    op.drop_table("principals")
