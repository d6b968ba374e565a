"""create catalog, customer, order and subscription installment tables

Revision ID: 202610190001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610190001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "customer_address",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("firstname", sa.String(length=128), nullable=False),
        sa.Column("lastname", sa.String(length=128), nullable=False),
        sa.Column("address1", sa.String(length=255), nullable=False),
        sa.Column("address2", sa.String(length=255), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=False),
        sa.Column("zipcode", sa.String(length=32), nullable=False),
        sa.Column("state_code", sa.String(length=16), nullable=True),
        sa.Column("country_code", sa.String(length=2), nullable=False),
        sa.Column("phone", sa.String(length=32), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "customer",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("ship_address_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["ship_address_id"], ["customer_address.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "customer_payment_source",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("payment_method", sa.String(length=32), nullable=False, server_default="credit_card"),
        sa.Column("gateway_customer_profile_id", sa.String(length=128), nullable=True),
        sa.Column("brand", sa.String(length=32), nullable=True),
        sa.Column("last_digits", sa.String(length=4), nullable=True),
        sa.Column("expiry_month", sa.Integer(), nullable=True),
        sa.Column("expiry_year", sa.Integer(), nullable=True),
        sa.Column("is_default", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_customer_payment_source_customer", "customer_payment_source", ["customer_id"])

    op.create_table(
        "catalog_variant",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("sku", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("track_inventory", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("sku", name="uq_catalog_variant_sku"),
    )

    op.create_table(
        "catalog_stock_item",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("variant_id", sa.Uuid(), nullable=False),
        sa.Column("location_code", sa.String(length=64), nullable=False, server_default="default"),
        sa.Column("count_on_hand", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("backorderable", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["variant_id"], ["catalog_variant.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("variant_id", "location_code", name="uq_catalog_stock_item_location"),
    )
    op.create_index("ix_catalog_stock_item_variant", "catalog_stock_item", ["variant_id"])

    op.create_table(
        "order_store",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("default_currency", sa.String(length=16), nullable=False, server_default="USD"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code", name="uq_order_store_code"),
    )

    op.create_table(
        "order_shipping_method",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("store_id", sa.Uuid(), nullable=True),
        sa.Column("code", sa.String(length=64), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["store_id"], ["order_store.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "order_order",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("number", sa.String(length=32), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=True),
        sa.Column("store_id", sa.Uuid(), nullable=True),
        sa.Column("channel", sa.String(length=64), nullable=False, server_default="storefront"),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("currency", sa.String(length=16), nullable=False, server_default="USD"),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="cart"),
        sa.Column("ship_address_id", sa.Uuid(), nullable=True),
        sa.Column("bill_address_id", sa.Uuid(), nullable=True),
        sa.Column("payment_source_id", sa.Uuid(), nullable=True),
        sa.Column("item_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("shipment_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("additional_tax_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("payment_state", sa.String(length=32), nullable=True),
        sa.Column("checkout_error", sa.String(length=64), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["store_id"], ["order_store.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["ship_address_id"], ["customer_address.id"]),
        sa.ForeignKeyConstraint(["bill_address_id"], ["customer_address.id"]),
        sa.ForeignKeyConstraint(["payment_source_id"], ["customer_payment_source.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("number", name="uq_order_order_number"),
    )
    op.create_index("ix_order_order_customer", "order_order", ["customer_id", "created_at"])

    op.create_table(
        "order_line_item",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("variant_id", sa.Uuid(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["order_order.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["variant_id"], ["catalog_variant.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_line_item_order", "order_line_item", ["order_id"])

    op.create_table(
        "order_shipment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("shipping_method_id", sa.Uuid(), nullable=False),
        sa.Column("number", sa.String(length=32), nullable=False),
        sa.Column("cost", sa.Numeric(12, 2), nullable=False),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="pending"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["order_order.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["shipping_method_id"], ["order_shipping_method.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_shipment_order", "order_shipment", ["order_id"])

    op.create_table(
        "order_payment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=False),
        sa.Column("source_id", sa.Uuid(), nullable=True),
        sa.Column("payment_method", sa.String(length=32), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="checkout"),
        sa.Column("response_code", sa.String(length=64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["order_order.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["source_id"], ["customer_payment_source.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_order_payment_order", "order_payment", ["order_id"])

    op.create_table(
        "subscription",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("customer_id", sa.Uuid(), nullable=False),
        sa.Column("interval_length", sa.Integer(), nullable=False),
        sa.Column("interval_units", sa.String(length=16), nullable=False, server_default="MONTH"),
        sa.Column("state", sa.String(length=32), nullable=False, server_default="ACTIVE"),
        sa.Column("actionable_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["customer_id"], ["customer.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subscription_customer_actionable", "subscription", ["customer_id", "actionable_date"])

    op.create_table(
        "subscription_line_item",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("subscription_id", sa.Uuid(), nullable=False),
        sa.Column("subscribable_id", sa.Uuid(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(12, 2), nullable=False),
        sa.Column("origin_line_item_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["subscription_id"], ["subscription.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["subscribable_id"], ["catalog_variant.id"]),
        sa.ForeignKeyConstraint(["origin_line_item_id"], ["order_line_item.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("subscription_id", name="uq_subscription_line_item_subscription"),
    )

    op.create_table(
        "subscription_installment",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("subscription_id", sa.Uuid(), nullable=False),
        sa.Column("actionable_date", sa.Date(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["subscription_id"], ["subscription.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_subscription_installment_actionable", "subscription_installment", ["actionable_date"])

    op.create_table(
        "subscription_installment_detail",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("installment_id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.Uuid(), nullable=True),
        sa.Column("successful", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reason", sa.String(length=64), nullable=True),
        sa.Column("message", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["installment_id"], ["subscription_installment.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["order_id"], ["order_order.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_subscription_installment_detail_installment",
        "subscription_installment_detail",
        ["installment_id", "created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_subscription_installment_detail_installment", table_name="subscription_installment_detail")
    op.drop_table("subscription_installment_detail")
    op.drop_index("ix_subscription_installment_actionable", table_name="subscription_installment")
    op.drop_table("subscription_installment")
    op.drop_table("subscription_line_item")
    op.drop_index("ix_subscription_customer_actionable", table_name="subscription")
    op.drop_table("subscription")
    op.drop_index("ix_order_payment_order", table_name="order_payment")
    op.drop_table("order_payment")
    op.drop_index("ix_order_shipment_order", table_name="order_shipment")
    op.drop_table("order_shipment")
    op.drop_index("ix_order_line_item_order", table_name="order_line_item")
    op.drop_table("order_line_item")
    op.drop_index("ix_order_order_customer", table_name="order_order")
    op.drop_table("order_order")
    op.drop_table("order_shipping_method")
    op.drop_table("order_store")
    op.drop_index("ix_catalog_stock_item_variant", table_name="catalog_stock_item")
    op.drop_table("catalog_stock_item")
    op.drop_table("catalog_variant")
    op.drop_index("ix_customer_payment_source_customer", table_name="customer_payment_source")
    op.drop_table("customer_payment_source")
    op.drop_table("customer")
    op.drop_table("customer_address")
