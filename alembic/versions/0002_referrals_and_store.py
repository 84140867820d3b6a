"""referral rewards and coin store

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-20 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


NEW_TRANSACTION_TYPES = ("REFERRAL_REWARD", "STORE_PURCHASE")


def upgrade() -> None:
    if op.get_bind().dialect.name == "postgresql":
        # ADD VALUE не можна виконати всередині транзакції на старих PostgreSQL
        with op.get_context().autocommit_block():
            for value in NEW_TRANSACTION_TYPES:
                op.execute(f"ALTER TYPE transactiontype ADD VALUE IF NOT EXISTS '{value}'")

    op.create_table(
        "referral_events",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("referrer_id", sa.String(), nullable=False),
        sa.Column("referred_user_id", sa.String(), nullable=False),
        sa.Column("course_id", sa.String(), nullable=True),
        sa.Column("coins_awarded", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["referrer_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["referred_user_id"], ["users.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("referred_user_id"),
    )
    op.create_index(
        "ix_referral_events_referrer_id", "referral_events", ["referrer_id"]
    )
    op.create_table(
        "store_items",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("stock_quantity", sa.Integer(), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint("price > 0", name="ck_store_items_price_positive"),
        sa.CheckConstraint("stock_quantity >= -1", name="ck_store_items_stock"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_table(
        "store_purchases",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("user_id", sa.String(), nullable=False),
        sa.Column("item_id", sa.String(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("total_cost", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["item_id"], ["store_items.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_store_purchases_user_id", "store_purchases", ["user_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_store_purchases_user_id", table_name="store_purchases")
    op.drop_table("store_purchases")
    op.drop_table("store_items")
    op.drop_index("ix_referral_events_referrer_id", table_name="referral_events")
    op.drop_table("referral_events")
    # значення enum у PostgreSQL не видаляються; transactiontype лишається розширеним
