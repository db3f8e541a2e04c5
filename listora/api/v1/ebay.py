"""
eBay account API endpoints.

Provides:
- GET /api/v1/ebay/connect — Start the seller consent flow
- GET /api/v1/ebay/callback — eBay consent callback, stores the tokens
- GET /api/v1/ebay/status — Whether the seller has an active connection
- GET /api/v1/ebay/listings — Listings created through Listora
"""

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from listora.core.models import SellerToken
from listora.db.database import get_db
from listora.db.repositories import EbayListingRepository
from listora.services.connection_service import EbayConnectionService

router = APIRouter(prefix="/ebay", tags=["eBay"])


# ─── Request / Response Schemas ──────────────────────────────


class EbayConnectResponse(BaseModel):
    """Consent URL to redirect the seller to."""
    authorization_url: str
    state: str


class EbayConnectionResponse(BaseModel):
    """eBay connection status."""
    connected: bool
    connection_id: str | None = None
    expires_at: datetime | None = None


def _connection_response(token: SellerToken | None) -> EbayConnectionResponse:
    if token is None:
        return EbayConnectionResponse(connected=False)
    return EbayConnectionResponse(
        connected=True,
        connection_id=str(token.connection_id) if token.connection_id else None,
        expires_at=token.expires_at,
    )


# ─── Dependencies ─────────────────────────────────────────────


def get_connection_service() -> EbayConnectionService:
    return EbayConnectionService()


# ─── Endpoints ───────────────────────────────────────────────


@router.get("/connect", summary="Start eBay connection", response_model=EbayConnectResponse)
async def ebay_connect(
    user_id: uuid.UUID = Query(..., description="Seller to connect"),
    service: EbayConnectionService = Depends(get_connection_service),
):
    """
    eBay consent URL for the seller.

    The caller redirects the seller there; eBay sends them back to the
    callback with an authorization code and the same ``state``.
    """
    authorization_url, state = service.start(user_id)
    return EbayConnectResponse(authorization_url=authorization_url, state=state)


@router.get("/callback", summary="eBay consent callback", response_model=EbayConnectionResponse)
async def ebay_callback(
    code: str = "",
    state: str = "",
    service: EbayConnectionService = Depends(get_connection_service),
):
    """Exchange the authorization code and store the seller's tokens."""
    token = await service.complete(code, state)
    return _connection_response(token)


@router.get("/status", summary="eBay connection status", response_model=EbayConnectionResponse)
async def ebay_status(
    user_id: uuid.UUID = Query(...),
    service: EbayConnectionService = Depends(get_connection_service),
):
    return _connection_response(await service.status(user_id))


@router.get("/listings", summary="List eBay listings")
async def list_ebay_listings(
    user_id: uuid.UUID = Query(...),
    listing_status: str | None = Query(
        default=None,
        alias="status",
        description="Filter by status (active, error)",
    ),
    limit: int = Query(default=50, ge=1, le=200, description="Max results"),
    offset: int = Query(default=0, ge=0, description="Pagination offset"),
    db: AsyncSession = Depends(get_db),
):
    """Listings created for the seller, newest first, with per-status counts."""
    repo = EbayListingRepository(db)
    listings = await repo.find_by_user(user_id, status=listing_status, limit=limit, offset=offset)

    return {
        "listings": [
            {
                "id": str(lst.id),
                "ebay_item_id": lst.ebay_item_id,
                "sku": lst.sku,
                "title": lst.title,
                "price": str(lst.price),
                "quantity": lst.quantity,
                "category_id": lst.category_id,
                "category_source": lst.category_source,
                "listing_url": lst.listing_url,
                "status": lst.status,
                "created_at": lst.created_at.isoformat() if lst.created_at else None,
            }
            for lst in listings
        ],
        "total": len(listings),
        "by_status": await repo.count_by_status(user_id),
    }
