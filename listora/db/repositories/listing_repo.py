"""
eBay listing repository.
"""

import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from listora.db.models import EbayListing
from listora.db.repositories.base_repo import BaseRepository


class EbayListingRepository(BaseRepository[EbayListing]):
    """Repository for EbayListing CRUD and queries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EbayListing)

    async def find_by_user(
        self,
        user_id: uuid.UUID,
        status: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[EbayListing]:
        """Listings for a user, newest first, optionally filtered by status."""
        stmt = select(EbayListing).where(EbayListing.user_id == user_id)
        if status:
            stmt = stmt.where(EbayListing.status == status)
        stmt = stmt.order_by(EbayListing.created_at.desc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_by_status(self, user_id: uuid.UUID) -> dict[str, int]:
        stmt = (
            select(EbayListing.status, func.count())
            .where(EbayListing.user_id == user_id)
            .group_by(EbayListing.status)
        )
        result = await self.session.execute(stmt)
        return {row[0]: row[1] for row in result.all()}
