"""Initial schema — items and wallet_balances.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-16

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "items",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("category", sa.String(100), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("price", sa.String(50), nullable=False),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("image", sa.String(2048), nullable=False),
        sa.Column("seller", sa.String(128), nullable=True),
        sa.Column("status", sa.String(30), nullable=False, server_default="listed"),
        sa.Column("buyer", sa.String(128), nullable=True),
        sa.Column("transaction_hash", sa.String(128), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("sold_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_items_category", "items", ["category"])
    op.create_index("ix_items_buyer", "items", ["buyer"])

    op.create_table(
        "wallet_balances",
        sa.Column("address", sa.String(128), primary_key=True),
        sa.Column("balance_units", sa.BigInteger, nullable=False),
        sa.Column("source", sa.String(20), nullable=False, server_default="default"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("balance_units >= 0", name="ck_wallet_balance_non_negative"),
    )


def downgrade() -> None:
    op.drop_table("wallet_balances")
    op.drop_index("ix_items_buyer", table_name="items")
    op.drop_index("ix_items_category", table_name="items")
    op.drop_table("items")
