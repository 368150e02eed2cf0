"""Initial schema: users, tours, shows, inventory, sales and show summaries.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False, server_default=sa.text("'user'")),
        sa.Column("profile_pic", sa.String(500), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("role IN ('admin', 'manager', 'user')", name="check_user_role"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "tours",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("band_name", sa.String(255), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=True),
        sa.Column("end_date", sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tours_id", "tours", ["id"])
    op.create_index("ix_tours_user_id", "tours", ["user_id"])

    op.create_table(
        "shows",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tour_id", sa.Integer(), sa.ForeignKey("tours.id"), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("venue", sa.String(255), nullable=False),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_shows_id", "shows", ["id"])
    op.create_index("ix_shows_tour_id", "shows", ["tour_id"])

    op.create_table(
        "inventory",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("tour_id", sa.Integer(), sa.ForeignKey("tours.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("type", sa.String(10), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("tour_id", "name", "type", name="uq_inventory_tour_name_type"),
        sa.CheckConstraint("type IN ('hard', 'soft', 'bundle')", name="check_inventory_type"),
        sa.CheckConstraint("quantity IS NULL OR quantity >= 0", name="check_inventory_quantity_non_negative"),
    )
    op.create_index("ix_inventory_id", "inventory", ["id"])
    op.create_index("ix_inventory_tour_id", "inventory", ["tour_id"])

    op.create_table(
        "inventory_sizes",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("inventory_id", sa.Integer(), sa.ForeignKey("inventory.id"), nullable=False),
        sa.Column("size", sa.String(20), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.UniqueConstraint("inventory_id", "size", name="uq_inventory_size"),
        sa.CheckConstraint("quantity >= 0", name="check_size_quantity_non_negative"),
    )
    op.create_index("ix_inventory_sizes_id", "inventory_sizes", ["id"])
    op.create_index("ix_inventory_sizes_inventory_id", "inventory_sizes", ["inventory_id"])

    op.create_table(
        "bundle_items",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("bundle_id", sa.Integer(), sa.ForeignKey("inventory.id"), nullable=False),
        sa.Column("item_id", sa.Integer(), sa.ForeignKey("inventory.id"), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default=sa.text("0")),
    )
    op.create_index("ix_bundle_items_id", "bundle_items", ["id"])
    op.create_index("ix_bundle_items_bundle_id", "bundle_items", ["bundle_id"])
    op.create_index("ix_bundle_items_item_id", "bundle_items", ["item_id"])

    op.create_table(
        "sales",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "inventory_id",
            sa.Integer(),
            sa.ForeignKey("inventory.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("show_id", sa.Integer(), sa.ForeignKey("shows.id"), nullable=False),
        sa.Column("quantity_sold", sa.Integer(), nullable=False),
        sa.Column("total_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("payment_method", sa.String(10), nullable=False),
        sa.Column("size", sa.String(20), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("quantity_sold > 0", name="check_sale_quantity_positive"),
        sa.CheckConstraint("total_amount >= 0", name="check_sale_amount_non_negative"),
        sa.CheckConstraint("payment_method IN ('cash', 'card', 'free')", name="check_sale_payment_method"),
    )
    op.create_index("ix_sales_id", "sales", ["id"])
    # Summaries and listings always filter by show
    op.create_index("ix_sales_show_id", "sales", ["show_id"])
    op.create_index("ix_sales_inventory_id", "sales", ["inventory_id"])

    op.create_table(
        "show_summaries",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("show_id", sa.Integer(), sa.ForeignKey("shows.id"), nullable=False),
        sa.Column("total_sales", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_cash", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_card", sa.Numeric(12, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("total_transactions", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("best_selling_items", sa.JSON(), nullable=False),
        sa.Column("items_sold", sa.JSON(), nullable=False),
        *_timestamps(),
        # one summary per show: a show closes once
        sa.UniqueConstraint("show_id", name="uq_show_summaries_show_id"),
    )
    op.create_index("ix_show_summaries_id", "show_summaries", ["id"])


def downgrade() -> None:
    op.drop_table("show_summaries")
    op.drop_table("sales")
    op.drop_table("bundle_items")
    op.drop_table("inventory_sizes")
    op.drop_table("inventory")
    op.drop_table("shows")
    op.drop_table("tours")
    op.drop_table("users")
