"""
Pydantic ↔ ORM mapping helpers for Listora.

Converts between pipeline models (ProductContent, ListingDocument,
PublishResult, TemplateDocument, SellerToken) and the SQLAlchemy rows that
store them.

Usage:
    from listora.db.mappers import listing_from_document, seller_token_from_connection

    listing_orm = listing_from_document(document, result, user_id=user_id)
    token = seller_token_from_connection(connection)
"""

import uuid
from decimal import Decimal

from listora.core.encryption import decrypt_token
from listora.core.models import (
    CategorySource,
    ListingDocument,
    ListingStatus,
    ProductContent,
    PublishResult,
    SellerToken,
    TemplateDocument,
)
from listora.db.models import (
    AmazonTemplate,
    EbayConnection,
    EbayListing,
    ProductContentRecord,
    PublishedProduct,
)


def content_from_record(record: ProductContentRecord) -> ProductContent:
    """Map a stored content row to the pipeline's ProductContent."""
    return ProductContent(
        id=record.id,
        user_id=record.user_id,
        product_name=record.product_name,
        generated_content=record.generated_content,
        features=record.features or "",
        description=record.description or "",
    )


def seller_token_from_connection(connection: EbayConnection) -> SellerToken:
    """Decrypted seller credential for a connection row."""
    return SellerToken(
        connection_id=connection.id,
        access_token=decrypt_token(connection.access_token),
        refresh_token=decrypt_token(connection.refresh_token) or None,
        expires_at=connection.expires_at,
    )


def listing_from_document(
    document: ListingDocument,
    result: PublishResult,
    user_id: uuid.UUID,
    content_id: uuid.UUID | None = None,
    category_source: CategorySource | None = None,
) -> EbayListing:
    """
    Map a published ListingDocument and its result to an EbayListing row.

    Returns:
        A new (unsaved) EbayListing ready for session.add().
    """
    source = category_source or result.category_source
    return EbayListing(
        user_id=user_id,
        content_id=content_id,
        ebay_item_id=result.platform_product_id or "",
        sku=document.sku,
        title=document.title,
        price=document.price,
        quantity=document.quantity,
        category_id=document.category_id,
        category_name=document.category_name or None,
        category_source=source.value if source else None,
        condition_id=document.condition_id,
        listing_url=result.platform_url,
        status=ListingStatus.ACTIVE.value if result.success else ListingStatus.ERROR.value,
        fees={name: str(amount) for name, amount in result.fees.items()},
        listing_data=document.model_dump(mode="json", exclude={"description_html"}),
        ebay_response=result.raw,
    )


def published_product_from_result(
    result: PublishResult,
    title: str,
    user_id: uuid.UUID,
    content_id: uuid.UUID | None = None,
    price: Decimal | None = None,
    quantity: int | None = None,
    images: list[str] | None = None,
    status: ListingStatus = ListingStatus.ACTIVE,
) -> PublishedProduct:
    """Cross-marketplace projection row for a successful publish."""
    return PublishedProduct(
        user_id=user_id,
        content_id=content_id,
        platform=result.platform.value,
        platform_product_id=result.platform_product_id or "",
        platform_url=result.platform_url,
        title=title[:200],
        price=price,
        sku=result.sku,
        quantity=quantity,
        images=list(images or []),
        status=status.value,
        details={
            "category_id": result.category_id,
            "category_name": result.category_name,
            "category_source": result.category_source.value if result.category_source else None,
        },
    )


def template_from_document(
    document: TemplateDocument,
    user_id: uuid.UUID,
    content_id: uuid.UUID | None = None,
) -> AmazonTemplate:
    return AmazonTemplate(
        user_id=user_id,
        content_id=content_id,
        sku=document.sku,
        product_type=document.product_type,
        template_data=dict(document.fields),
        file_content=document.content,
        status="ready",
    )
