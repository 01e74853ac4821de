"""Create purchases and installments.

Revision ID: 20250301_000001
Revises: 
Create Date: 2025-03-01 00:00:01.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20250301_000001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "purchases",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column("name", sa.String(length=128), nullable=False),
        sa.Column("total_value", sa.Numeric(14, 2), nullable=False),
        sa.Column("installment_value", sa.Numeric(14, 2), nullable=False),
        sa.Column("total_installments", sa.Integer(), nullable=False),
        sa.Column("paid_installments", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("purchase_date", sa.Date(), nullable=False),
        sa.CheckConstraint("total_installments >= 1", name="ck_purchases_total_installments"),
        sa.CheckConstraint(
            "paid_installments >= 0 AND paid_installments <= total_installments",
            name="ck_purchases_paid_installments",
        ),
    )
    op.create_index("ix_purchases_purchase_date", "purchases", ["purchase_date"])

    op.create_table(
        "installments",
        sa.Column("id", sa.Uuid(), primary_key=True, nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("timezone('utc', now())"),
            nullable=False,
        ),
        sa.Column(
            "purchase_id",
            sa.Uuid(),
            sa.ForeignKey("purchases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("number", sa.Integer(), nullable=False),
        sa.Column("value", sa.Numeric(14, 2), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.UniqueConstraint("purchase_id", "number", name="uq_installments_purchase_number"),
    )
    op.create_index("ix_installments_purchase_id", "installments", ["purchase_id"])
    op.create_index("ix_installments_due_date", "installments", ["due_date"])


def downgrade() -> None:
    op.drop_index("ix_installments_due_date", table_name="installments")
    op.drop_index("ix_installments_purchase_id", table_name="installments")
    op.drop_table("installments")
    op.drop_index("ix_purchases_purchase_date", table_name="purchases")
    op.drop_table("purchases")
