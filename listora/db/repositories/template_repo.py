"""
Amazon template repository.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listora.db.models import AmazonTemplate
from listora.db.repositories.base_repo import BaseRepository


class AmazonTemplateRepository(BaseRepository[AmazonTemplate]):
    """Repository for AmazonTemplate CRUD and queries."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AmazonTemplate)

    async def find_by_user(
        self,
        user_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[AmazonTemplate]:
        stmt = (
            select(AmazonTemplate)
            .where(AmazonTemplate.user_id == user_id)
            .order_by(AmazonTemplate.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def find_for_user(self, template_id: uuid.UUID, user_id: uuid.UUID) -> AmazonTemplate | None:
        """A template only if ``user_id`` owns it."""
        stmt = select(AmazonTemplate).where(
            AmazonTemplate.id == template_id,
            AmazonTemplate.user_id == user_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
