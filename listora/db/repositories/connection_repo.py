"""
eBay connection repository.

Handles active-connection lookup and the write-back of refreshed OAuth
tokens. Tokens are encrypted here, on the way in; decryption happens in
``listora.db.mappers.seller_token_from_connection``.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listora.core.encryption import encrypt_token
from listora.core.models import ConnectionStatus
from listora.db.models import EbayConnection
from listora.db.repositories.base_repo import BaseRepository


class EbayConnectionRepository(BaseRepository[EbayConnection]):
    """Repository for EbayConnection CRUD and token management."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, EbayConnection)

    async def create_connection(
        self,
        user_id: uuid.UUID,
        access_token: str,
        refresh_token: str | None,
        expires_at: datetime | None,
        sandbox: bool = True,
        ebay_user_id: str | None = None,
    ) -> EbayConnection:
        """Store a new connection with encrypted tokens."""
        return await self.create(
            user_id=user_id,
            access_token=encrypt_token(access_token),
            refresh_token=encrypt_token(refresh_token) or None,
            expires_at=expires_at,
            sandbox=sandbox,
            ebay_user_id=ebay_user_id,
            status=ConnectionStatus.ACTIVE.value,
        )

    async def find_active(
        self,
        user_id: uuid.UUID,
        sandbox: bool | None = None,
    ) -> EbayConnection | None:
        """
        The seller's most recent active connection.

        Args:
            user_id: Owner user ID.
            sandbox: Filter by environment. None = either.
        """
        stmt = select(EbayConnection).where(
            EbayConnection.user_id == user_id,
            EbayConnection.status == ConnectionStatus.ACTIVE.value,
        )
        if sandbox is not None:
            stmt = stmt.where(EbayConnection.sandbox == sandbox)
        stmt = stmt.order_by(EbayConnection.created_at.desc()).limit(1)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update_tokens(
        self,
        connection_id: uuid.UUID,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
    ) -> EbayConnection | None:
        """
        Store tokens after a refresh. The refresh token is only replaced
        when eBay issued a new one.

        Returns:
            Updated EbayConnection, or None if not found.
        """
        connection = await self.get_by_id(connection_id)
        if connection is None:
            return None

        connection.access_token = encrypt_token(access_token)
        if refresh_token:
            connection.refresh_token = encrypt_token(refresh_token)
        connection.expires_at = expires_at
        connection.status = ConnectionStatus.ACTIVE.value
        await self.session.flush()
        return connection

    async def touch_last_used(self, connection_id: uuid.UUID) -> None:
        await self.update(connection_id, last_used_at=datetime.now(UTC))

    async def mark_expired(self, connection_id: uuid.UUID) -> None:
        await self.update(connection_id, status=ConnectionStatus.EXPIRED.value)
