"""
Published products repository: one row per marketplace publish, any platform.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listora.db.models import PublishedProduct
from listora.db.repositories.base_repo import BaseRepository


class PublishedProductRepository(BaseRepository[PublishedProduct]):
    """Repository for PublishedProduct queries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, PublishedProduct)

    async def find_by_user(
        self,
        user_id: uuid.UUID,
        platform: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PublishedProduct]:
        stmt = select(PublishedProduct).where(PublishedProduct.user_id == user_id)
        if platform:
            stmt = stmt.where(PublishedProduct.platform == platform)
        stmt = stmt.order_by(PublishedProduct.published_at.desc()).limit(limit).offset(offset)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())
