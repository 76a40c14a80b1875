"""create orders

Revision ID: 20261017_0001
Revises:
Create Date: 2026-10-17 00:00:00
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261017_0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

order_status = sa.Enum(
    "pending",
    "confirmed",
    "preparing",
    "ready",
    "completed",
    "cancelled",
    "deleted",
    name="order_status",
)
payment_status = sa.Enum("unpaid", "paid", "refunded", name="payment_status")
deletion_origin = sa.Enum("admin", "orderCard", name="deletion_origin")


def upgrade() -> None:
    bind = op.get_bind()
    order_status.create(bind, checkfirst=True)
    payment_status.create(bind, checkfirst=True)
    deletion_origin.create(bind, checkfirst=True)

    op.create_table(
        "orders",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_number", sa.String(length=64), nullable=True),
        sa.Column("customer_name", sa.String(length=255), nullable=True),
        sa.Column("customer_phone", sa.String(length=50), nullable=True),
        sa.Column("order_type", sa.String(length=50), nullable=True),
        sa.Column("table_number", sa.String(length=32), nullable=True),
        sa.Column("items", sa.JSON(), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("status", order_status, nullable=False),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("payment_method", sa.String(length=50), nullable=True),
        sa.Column("is_archived", sa.Boolean(), nullable=False),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("scheduled_for_deletion", sa.Boolean(), nullable=False),
        sa.Column("deleted_from", deletion_origin, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_is_archived"), "orders", ["is_archived"], unique=False)
    op.create_index(op.f("ix_orders_deleted_from"), "orders", ["deleted_from"], unique=False)
    op.create_index(op.f("ix_orders_created_at"), "orders", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_orders_created_at"), table_name="orders")
    op.drop_index(op.f("ix_orders_deleted_from"), table_name="orders")
    op.drop_index(op.f("ix_orders_is_archived"), table_name="orders")
    op.drop_table("orders")

    bind = op.get_bind()
    deletion_origin.drop(bind, checkfirst=True)
    payment_status.drop(bind, checkfirst=True)
    order_status.drop(bind, checkfirst=True)
