"""
SQLAlchemy 2.0 ORM models for Listora.

All models use the modern Mapped/mapped_column syntax. Users live in the
external auth service, so ``user_id`` columns carry no foreign key; every
repository query is still scoped by ``user_id``.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Unicode,
)
from sqlalchemy import (
    Enum as SAEnum,
)
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all ORM models."""
    pass


def utc_now() -> datetime:
    return datetime.now(UTC)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


# ─── Generated Content ────────────────────────────────────────


class ProductContentRecord(Base):
    """AI-generated copy for one product, as saved by the content generator."""

    __tablename__ = "product_contents"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    product_name: Mapped[str] = mapped_column(Unicode(500), nullable=False)
    generated_content: Mapped[str | None] = mapped_column(Text, nullable=True)
    features: Mapped[str] = mapped_column(Text, default="", nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_product_contents_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<ProductContentRecord {self.id} '{self.product_name[:40]}'>"


# ─── Marketplace Connections ──────────────────────────────────


class EbayConnection(Base):
    """A seller's eBay OAuth connection. Tokens are Fernet-encrypted."""

    __tablename__ = "ebay_connections"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    ebay_user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    access_token: Mapped[str] = mapped_column(Text, nullable=False)
    refresh_token: Mapped[str | None] = mapped_column(Text, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum("active", "expired", "disconnected", name="connection_status"),
        default="active",
        nullable=False,
    )
    sandbox: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    last_used_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, onupdate=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_ebay_connections_user_status", "user_id", "status"),
    )

    def __repr__(self) -> str:
        return f"<EbayConnection {self.id} user={self.user_id} status={self.status}>"


# ─── Listings ─────────────────────────────────────────────────


class EbayListing(Base):
    """A listing created through the Trading API."""

    __tablename__ = "ebay_listings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("product_contents.id", ondelete="SET NULL"), nullable=True
    )
    ebay_item_id: Mapped[str] = mapped_column(String(50), nullable=False)
    sku: Mapped[str] = mapped_column(String(50), nullable=False)
    title: Mapped[str] = mapped_column(Unicode(200), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    category_id: Mapped[str] = mapped_column(String(20), nullable=False)
    category_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    category_source: Mapped[str | None] = mapped_column(String(30), nullable=True)
    condition_id: Mapped[str] = mapped_column(String(10), default="1000", nullable=False)
    listing_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    status: Mapped[str] = mapped_column(
        SAEnum("active", "template_ready", "error", name="listing_status"),
        default="active",
        nullable=False,
    )
    fees: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    listing_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    ebay_response: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_ebay_listings_user_created", "user_id", "created_at"),
        Index("ix_ebay_listings_item_id", "ebay_item_id"),
    )

    def __repr__(self) -> str:
        return f"<EbayListing {self.ebay_item_id} sku={self.sku}>"


class PublishedProduct(Base):
    """Cross-marketplace projection shown in the seller's published products view."""

    __tablename__ = "published_products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("product_contents.id", ondelete="SET NULL"), nullable=True
    )
    platform: Mapped[str] = mapped_column(
        SAEnum("ebay", "amazon", "shopify", "walmart", "etsy", name="platform"),
        nullable=False,
    )
    platform_product_id: Mapped[str] = mapped_column(String(100), nullable=False)
    platform_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    title: Mapped[str] = mapped_column(Unicode(200), nullable=False)
    price: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    sku: Mapped[str | None] = mapped_column(String(50), nullable=True)
    quantity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    images: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    status: Mapped[str] = mapped_column(
        SAEnum("active", "template_ready", "error", name="published_status"),
        default="active",
        nullable=False,
    )
    details: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    published_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_published_products_user_platform", "user_id", "platform"),
    )

    def __repr__(self) -> str:
        return f"<PublishedProduct {self.platform}:{self.platform_product_id}>"


class AmazonTemplate(Base):
    """A generated Seller Central flat file, kept for re-download."""

    __tablename__ = "amazon_templates"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=new_uuid
    )
    user_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), ForeignKey("product_contents.id", ondelete="SET NULL"), nullable=True
    )
    sku: Mapped[str] = mapped_column(String(50), nullable=False)
    product_type: Mapped[str] = mapped_column(String(30), nullable=False)
    template_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    file_content: Mapped[str] = mapped_column(Text, default="", nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="ready", nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utc_now, nullable=False
    )

    __table_args__ = (
        Index("ix_amazon_templates_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<AmazonTemplate {self.id} {self.product_type} sku={self.sku}>"
