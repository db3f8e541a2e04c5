"""
Generated-content repository.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listora.db.models import ProductContentRecord
from listora.db.repositories.base_repo import BaseRepository


class ProductContentRepository(BaseRepository[ProductContentRecord]):
    """Repository for ProductContentRecord queries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ProductContentRecord)

    async def find_latest(
        self,
        user_id: uuid.UUID,
        content_id: uuid.UUID | None = None,
    ) -> ProductContentRecord | None:
        """
        The seller's content record: ``content_id`` when given, otherwise the
        most recently created one.
        """
        stmt = select(ProductContentRecord).where(ProductContentRecord.user_id == user_id)
        if content_id is not None:
            stmt = stmt.where(ProductContentRecord.id == content_id)
        stmt = stmt.order_by(ProductContentRecord.created_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
