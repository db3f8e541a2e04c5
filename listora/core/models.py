"""
Pydantic domain models for Listora.

These models represent the data flowing through the publishing pipeline:
ProductContent + PublishingOptions → CategoryResult → ListingDocument → PublishResult
"""

import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field, computed_field, model_validator


class Platform(StrEnum):
    """Marketplaces a listing can be published to."""
    EBAY = "ebay"
    AMAZON = "amazon"
    SHOPIFY = "shopify"
    WALMART = "walmart"
    ETSY = "etsy"


class ItemCondition(StrEnum):
    """Seller-facing item condition, mapped to a marketplace condition code."""
    NEW = "new"
    USED_LIKE_NEW = "used_like_new"
    USED_VERY_GOOD = "used_very_good"
    USED_GOOD = "used_good"
    USED_ACCEPTABLE = "used_acceptable"


class CategorySource(StrEnum):
    """Where a category id came from."""
    TAXONOMY_API = "taxonomy_api"
    VERIFIED_FALLBACK = "verified_fallback"
    BULLETPROOF_FALLBACK = "bulletproof_fallback"


class CategoryFamily(StrEnum):
    """Product families known to the fallback table; drives attribute strategies."""
    HEADPHONES = "headphones"
    KITCHEN_APPLIANCE = "kitchen_appliance"
    ATHLETIC_SHOES = "athletic_shoes"
    JEANS = "jeans"
    SHIRT = "shirt"
    WATCH = "watch"
    LAPTOP = "laptop"
    PHONE = "phone"
    GENERIC = "generic"


class ListingStatus(StrEnum):
    """Status of a published listing."""
    ACTIVE = "active"
    TEMPLATE_READY = "template_ready"
    ERROR = "error"


class ConnectionStatus(StrEnum):
    """Status of a seller's marketplace connection."""
    ACTIVE = "active"
    EXPIRED = "expired"
    DISCONNECTED = "disconnected"


# ─── Input Models ─────────────────────────────────────────────


class ProductContent(BaseModel):
    """AI-generated content record for one product."""

    id: uuid.UUID | None = None
    user_id: uuid.UUID | None = None
    product_name: str = Field(..., min_length=1, max_length=500)
    generated_content: str | None = None
    features: str = Field(default="")
    description: str = Field(default="")

    @property
    def full_text(self) -> str:
        """Lower-cased concatenation of every text field, used by keyword matchers."""
        parts = [self.product_name, self.generated_content or "", self.features, self.description]
        return " ".join(p for p in parts if p).lower()


class PublishingOptions(BaseModel):
    """Seller choices supplied at publish time."""

    price: Decimal | None = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    quantity: int = Field(default=1, ge=0)
    sku: str | None = Field(default=None, max_length=50)
    condition: ItemCondition = ItemCondition.NEW


# ─── Pipeline Models ──────────────────────────────────────────


class CategoryResult(BaseModel):
    """Outcome of category classification. Never empty."""

    category_id: str = Field(..., min_length=1)
    category_name: str = Field(default="")
    source: CategorySource
    family: CategoryFamily = CategoryFamily.GENERIC
    # Aspect names eBay marks required; only filled for taxonomy results
    required_aspects: list[str] = Field(default_factory=list)

    @property
    def from_taxonomy(self) -> bool:
        return self.source == CategorySource.TAXONOMY_API


class ItemSpecific(BaseModel):
    """One marketplace item specific (aspect) with at least one value."""

    name: str = Field(..., min_length=1)
    values: list[str] = Field(..., min_length=1)


class ContentSections(BaseModel):
    """Structured pieces parsed out of generated marketing copy."""

    title: str | None = None
    bullet_points: list[str] = Field(default_factory=list)
    highlight: str = Field(default="")
    detailed_features: list[str] = Field(default_factory=list)
    specifications: list[str] = Field(default_factory=list)
    full_description: str = Field(default="")


class ShippingPolicy(BaseModel):
    shipping_type: str = "Flat"
    service: str = "USPSPriority"
    cost: Decimal = Decimal("9.99")
    priority: int = 1


class ReturnPolicy(BaseModel):
    returns_accepted: str = "ReturnsAccepted"
    refund: str = "MoneyBack"
    returns_within: str = "Days_30"
    shipping_cost_paid_by: str = "Buyer"


class ListingDocument(BaseModel):
    """A fully assembled listing ready for a marketplace transport."""

    platform: Platform = Platform.EBAY
    title: str = Field(..., min_length=1, max_length=200)
    description_html: str = Field(default="")
    price: Decimal = Field(..., gt=0)
    currency: str = Field(default="USD", max_length=3)
    quantity: int = Field(default=1, ge=0)
    sku: str = Field(..., min_length=1)
    images: list[str] = Field(default_factory=list)
    item_specifics: list[ItemSpecific] = Field(default_factory=list)
    category_id: str = Field(..., min_length=1)
    category_name: str = Field(default="")
    condition_id: str = Field(default="1000")
    listing_type: str = "FixedPriceItem"
    listing_duration: str = "GTC"
    country: str = "US"
    location: str = "United States"
    shipping_policy: ShippingPolicy = Field(default_factory=ShippingPolicy)
    return_policy: ReturnPolicy = Field(default_factory=ReturnPolicy)
    dispatch_time_max: int = 3

    @computed_field
    @property
    def price_cents(self) -> int:
        return int((self.price * 100).to_integral_value())

    def specific(self, name: str) -> list[str]:
        """Values of the item specific called ``name`` (case-insensitive), or []."""
        for spec in self.item_specifics:
            if spec.name.lower() == name.lower():
                return spec.values
        return []


# ─── Marketplace Credentials ──────────────────────────────────


class SellerToken(BaseModel):
    """Per-seller OAuth credential for the Trading API."""

    connection_id: uuid.UUID | None = None
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None

    def needs_refresh(self, now: datetime | None = None, window: timedelta = timedelta(hours=1)) -> bool:
        """True when the token expires within ``window`` of ``now``."""
        if self.expires_at is None:
            return False
        now = now or datetime.now(UTC)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at - now <= window


class ApplicationToken(BaseModel):
    """Client-credentials token for read-only catalog calls. Never persisted."""

    access_token: str
    expires_in: int = 7200
    token_type: str = "Application Access Token"


# ─── Marketplace Responses ────────────────────────────────────


class TradingMessage(BaseModel):
    """One <Errors> entry of a Trading API response."""

    severity: str = "Error"
    code: str = ""
    short_message: str = ""
    long_message: str = ""

    @property
    def is_error(self) -> bool:
        return self.severity == "Error"

    @property
    def text(self) -> str:
        return self.long_message or self.short_message


class TradingResponse(BaseModel):
    """Parsed AddFixedPriceItem response."""

    ack: str = "Unknown"
    item_id: str | None = None
    errors: list[TradingMessage] = Field(default_factory=list)
    warnings: list[TradingMessage] = Field(default_factory=list)
    fees: dict[str, Decimal] = Field(default_factory=dict)
    raw: str = ""

    @property
    def is_success(self) -> bool:
        return self.ack in ("Success", "Warning")


# ─── Results ──────────────────────────────────────────────────


class PublishResult(BaseModel):
    """Uniform outcome of a publish call, whatever the marketplace."""

    success: bool
    platform: Platform = Platform.EBAY
    platform_product_id: str | None = None
    platform_url: str | None = None
    sku: str | None = None
    category_id: str | None = None
    category_name: str | None = None
    category_source: CategorySource | None = None
    fees: dict[str, Decimal] = Field(default_factory=dict)
    raw: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None
    missing_fields: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @model_validator(mode="after")
    def check_error_matches_success(self) -> "PublishResult":
        if self.success and self.error:
            raise ValueError("a successful result cannot carry an error")
        if not self.success and not self.error:
            raise ValueError("a failed result must carry an error")
        return self


class TemplateDocument(BaseModel):
    """An offline marketplace upload file (flat-file template)."""

    product_type: str
    sku: str
    fields: dict[str, str] = Field(default_factory=dict)
    filename: str = ""
    content: str = ""
    content_type: str = "text/tab-separated-values"
