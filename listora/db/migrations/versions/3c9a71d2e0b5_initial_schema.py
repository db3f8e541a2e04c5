"""Initial schema: product_contents, ebay_connections, ebay_listings,
published_products, amazon_templates

Tables:
    product_contents    — Generated copy the publisher reads from
    ebay_connections    — Encrypted eBay OAuth tokens per seller
    ebay_listings       — Listings created with AddFixedPriceItem
    published_products  — Cross-marketplace projection of every publish
    amazon_templates    — Generated Seller Central flat files

Revision ID: 3c9a71d2e0b5
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3c9a71d2e0b5"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


# ─── Custom Enum Types ──────────────────────────────────────

connection_status = sa.Enum("active", "expired", "disconnected", name="connection_status")
listing_status = sa.Enum("active", "template_ready", "error", name="listing_status")
published_status = sa.Enum("active", "template_ready", "error", name="published_status")
platform = sa.Enum("ebay", "amazon", "shopify", "walmart", "etsy", name="platform")


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()"))


def _content_fk() -> sa.Column:
    return sa.Column(
        "content_id",
        postgresql.UUID(as_uuid=True),
        sa.ForeignKey("product_contents.id", ondelete="SET NULL"),
        nullable=True,
    )


def upgrade() -> None:
    # ─── product_contents ────────────────────────────────────
    op.create_table(
        "product_contents",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("product_name", sa.Unicode(500), nullable=False),
        sa.Column("generated_content", sa.Text(), nullable=True),
        sa.Column("features", sa.Text(), nullable=False, server_default=""),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "ix_product_contents_user_created", "product_contents", ["user_id", "created_at"]
    )

    # ─── ebay_connections ────────────────────────────────────
    op.create_table(
        "ebay_connections",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("ebay_user_id", sa.String(255), nullable=True),
        sa.Column("access_token", sa.Text(), nullable=False),
        sa.Column("refresh_token", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", connection_status, nullable=False, server_default="active"),
        sa.Column("sandbox", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("last_used_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )
    op.create_index(
        "ix_ebay_connections_user_status", "ebay_connections", ["user_id", "status"]
    )

    # ─── ebay_listings ───────────────────────────────────────
    op.create_table(
        "ebay_listings",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _content_fk(),
        sa.Column("ebay_item_id", sa.String(50), nullable=False),
        sa.Column("sku", sa.String(50), nullable=False),
        sa.Column("title", sa.Unicode(200), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("category_id", sa.String(20), nullable=False),
        sa.Column("category_name", sa.String(255), nullable=True),
        sa.Column("category_source", sa.String(30), nullable=True),
        sa.Column("condition_id", sa.String(10), nullable=False, server_default="1000"),
        sa.Column("listing_url", sa.String(500), nullable=True),
        sa.Column("status", listing_status, nullable=False, server_default="active"),
        sa.Column("fees", postgresql.JSON(), nullable=False, server_default="{}"),
        sa.Column("listing_data", postgresql.JSON(), nullable=False, server_default="{}"),
        sa.Column("ebay_response", postgresql.JSON(), nullable=False, server_default="{}"),
        _timestamp("created_at"),
    )
    op.create_index("ix_ebay_listings_user_created", "ebay_listings", ["user_id", "created_at"])
    op.create_index("ix_ebay_listings_item_id", "ebay_listings", ["ebay_item_id"])

    # ─── published_products ──────────────────────────────────
    op.create_table(
        "published_products",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _content_fk(),
        sa.Column("platform", platform, nullable=False),
        sa.Column("platform_product_id", sa.String(100), nullable=False),
        sa.Column("platform_url", sa.String(500), nullable=True),
        sa.Column("title", sa.Unicode(200), nullable=False),
        sa.Column("price", sa.Numeric(12, 2), nullable=True),
        sa.Column("sku", sa.String(50), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=True),
        sa.Column("images", postgresql.JSON(), nullable=False, server_default="[]"),
        sa.Column("status", published_status, nullable=False, server_default="active"),
        sa.Column("details", postgresql.JSON(), nullable=False, server_default="{}"),
        _timestamp("published_at"),
    )
    op.create_index(
        "ix_published_products_user_platform", "published_products", ["user_id", "platform"]
    )

    # ─── amazon_templates ────────────────────────────────────
    op.create_table(
        "amazon_templates",
        _id_column(),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        _content_fk(),
        sa.Column("sku", sa.String(50), nullable=False),
        sa.Column("product_type", sa.String(30), nullable=False),
        sa.Column("template_data", postgresql.JSON(), nullable=False, server_default="{}"),
        sa.Column("file_content", sa.Text(), nullable=False, server_default=""),
        sa.Column("status", sa.String(20), nullable=False, server_default="ready"),
        _timestamp("created_at"),
    )
    op.create_index(
        "ix_amazon_templates_user_created", "amazon_templates", ["user_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_amazon_templates_user_created", table_name="amazon_templates")
    op.drop_index("ix_published_products_user_platform", table_name="published_products")
    op.drop_index("ix_ebay_listings_item_id", table_name="ebay_listings")
    op.drop_index("ix_ebay_listings_user_created", table_name="ebay_listings")
    op.drop_index("ix_ebay_connections_user_status", table_name="ebay_connections")
    op.drop_index("ix_product_contents_user_created", table_name="product_contents")

    # Reverse dependency order
    op.drop_table("amazon_templates")
    op.drop_table("published_products")
    op.drop_table("ebay_listings")
    op.drop_table("ebay_connections")
    op.drop_table("product_contents")

    platform.drop(op.get_bind(), checkfirst=True)
    published_status.drop(op.get_bind(), checkfirst=True)
    listing_status.drop(op.get_bind(), checkfirst=True)
    connection_status.drop(op.get_bind(), checkfirst=True)
