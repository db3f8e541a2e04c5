"""
Marketplace publishing API endpoints.

Provides:
- POST /api/v1/publish/ebay — Create a live eBay listing
- POST /api/v1/publish/amazon/template — Generate an Amazon flat-file template
- GET /api/v1/publish/amazon/template/{template_id} — Download a stored template
- GET /api/v1/publish/amazon/templates — List stored templates
- GET /api/v1/publish/products — Published products across marketplaces

Caller authentication happens upstream; the user id travels in the request.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from listora.core.models import ProductContent, PublishingOptions, PublishResult
from listora.db.database import get_db
from listora.db.repositories import AmazonTemplateRepository, PublishedProductRepository
from listora.services.publish_service import PublishService
from listora.services.template_service import TemplateFormat, TemplateService

router = APIRouter(prefix="/publish", tags=["Publishing"])


# ─── Request / Response Schemas ──────────────────────────────


class PublishRequest(BaseModel):
    """Request body shared by both publishing flows."""
    product_content: ProductContent
    images: list[str] = Field(default_factory=list, description="Image URLs, first is primary")
    publishing_options: PublishingOptions = Field(default_factory=PublishingOptions)
    user_id: uuid.UUID


class TemplateRequest(PublishRequest):
    product_type: str | None = Field(
        default=None,
        description="AIR_FRYER, WATCH, SHOES or CLOTHING; detected from the content when omitted",
    )


class TemplateResponse(BaseModel):
    """Generated template summary."""
    result: PublishResult
    template_id: str | None = None
    filename: str
    product_type: str
    download_url: str | None = None


# ─── Dependencies ─────────────────────────────────────────────


def get_publish_service() -> PublishService:
    return PublishService()


def get_template_service() -> TemplateService:
    return TemplateService()


# ─── Endpoints ───────────────────────────────────────────────


@router.post("/ebay", summary="Publish to eBay", response_model=PublishResult)
async def publish_to_ebay(
    body: PublishRequest,
    service: PublishService = Depends(get_publish_service),
):
    """
    Classify, build and publish one product as an eBay fixed-price listing.

    A listing eBay rejected comes back with ``success: false`` and the
    reason in ``error``; missing input answers 400 and an expired eBay
    connection 401.
    """
    return await service.publish(
        body.product_content,
        body.images,
        body.publishing_options,
        body.user_id,
    )


@router.post("/amazon/template", summary="Generate Amazon template", response_model=TemplateResponse)
async def generate_amazon_template(
    body: TemplateRequest,
    service: TemplateService = Depends(get_template_service),
):
    """Build the Seller Central upload file for one product and store it."""
    result, document = await service.generate(
        body.product_content,
        body.images,
        body.publishing_options,
        body.user_id,
        product_type=body.product_type,
    )
    template_id = result.platform_product_id
    return TemplateResponse(
        result=result,
        template_id=template_id,
        filename=document.filename,
        product_type=document.product_type,
        download_url=f"/api/v1/publish/amazon/template/{template_id}" if template_id else None,
    )


@router.get("/amazon/template/{template_id}", summary="Download Amazon template")
async def download_amazon_template(
    template_id: str,
    user_id: uuid.UUID = Query(..., description="Owner of the template"),
    file_format: TemplateFormat = Query(default=TemplateFormat.TSV, alias="format"),
    service: TemplateService = Depends(get_template_service),
):
    """
    Download a stored template, re-rendered in the current file format.

    ``format=tsv`` returns the Seller Central flat file; ``format=csv``
    the plain header + row file.
    """
    try:
        tid = uuid.UUID(template_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid template ID format")

    document = await service.download(tid, user_id, file_format)
    if document is None:
        raise HTTPException(status_code=404, detail="Template not found")

    return Response(
        content=document.content,
        media_type=document.content_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("/amazon/templates", summary="List Amazon templates")
async def list_amazon_templates(
    user_id: uuid.UUID = Query(...),
    limit: int = Query(default=50, ge=1, le=200, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: AsyncSession = Depends(get_db),
):
    """Stored templates for the seller, newest first."""
    templates = await AmazonTemplateRepository(db).find_by_user(user_id, limit=limit, offset=offset)
    return {
        "templates": [
            {
                "id": str(t.id),
                "sku": t.sku,
                "product_type": t.product_type,
                "status": t.status,
                "download_url": f"/api/v1/publish/amazon/template/{t.id}",
                "created_at": t.created_at.isoformat() if t.created_at else None,
            }
            for t in templates
        ],
        "total": len(templates),
    }


@router.get("/products", summary="List published products")
async def list_published_products(
    user_id: uuid.UUID = Query(...),
    platform: str | None = Query(default=None, description="ebay or amazon; all platforms when omitted"),
    limit: int = Query(default=50, ge=1, le=200, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: AsyncSession = Depends(get_db),
):
    """
    Everything the seller has published, newest first.

    ``total`` counts the seller's products on every platform; ``platforms``
    breaks down the returned page.
    """
    repo = PublishedProductRepository(db)
    products = await repo.find_by_user(user_id, platform=platform, limit=limit, offset=offset)

    platforms: dict[str, int] = {}
    for product in products:
        platforms[product.platform] = platforms.get(product.platform, 0) + 1

    return {
        "products": [
            {
                "id": str(p.id),
                "content_id": str(p.content_id) if p.content_id else None,
                "platform": p.platform,
                "platform_product_id": p.platform_product_id,
                "platform_url": p.platform_url,
                "title": p.title,
                "price": str(p.price) if p.price is not None else None,
                "quantity": p.quantity,
                "sku": p.sku,
                "images": p.images or [],
                "status": p.status,
                "published_at": p.published_at.isoformat() if p.published_at else None,
            }
            for p in products
        ],
        "total": await repo.count(user_id),
        "platforms": platforms,
    }
