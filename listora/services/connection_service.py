"""
eBay account connection: seller consent and token storage.

The consent URL carries ``<user_id>:<nonce>`` as its state, so the callback
knows which seller to store the tokens for. eBay redirects the browser to
the callback directly, without any caller credentials.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listora.config import Settings, get_settings
from listora.core.exceptions import MarketplaceAuthError, PublishValidationError
from listora.core.models import SellerToken
from listora.db.database import get_session_factory
from listora.db.mappers import seller_token_from_connection
from listora.db.repositories import EbayConnectionRepository
from listora.listers.ebay_auth import EbayAuth

logger = logging.getLogger(__name__)


def build_state(user_id: uuid.UUID) -> str:
    return f"{user_id}:{uuid.uuid4()}"


def parse_state(state: str) -> uuid.UUID:
    """
    User id encoded in a consent state.

    Raises:
        PublishValidationError: The state is not ``<user_id>:<nonce>``.
    """
    try:
        user_part, _ = state.split(":", 1)
        return uuid.UUID(user_part)
    except (ValueError, AttributeError) as e:
        raise PublishValidationError("state", "Invalid eBay authorization state") from e


class EbayConnectionService:
    """
    Connects a seller's eBay account.

    Usage:
        service = EbayConnectionService()
        url, state = service.start(user_id)
        token = await service.complete(code, state)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        settings: Settings | None = None,
        auth: EbayAuth | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        settings = settings or get_settings()
        self._session_factory = session_factory or get_session_factory()
        self._sandbox = settings.ebay_sandbox
        self._auth = auth or EbayAuth(settings)
        self._clock = clock or (lambda: datetime.now(UTC))

    def start(self, user_id: uuid.UUID) -> tuple[str, str]:
        """Consent URL and the state it carries."""
        state = build_state(user_id)
        return self._auth.get_authorization_url(state=state), state

    async def complete(self, code: str, state: str) -> SellerToken:
        """
        Exchange the consent code and store the seller's tokens.

        Raises:
            PublishValidationError: Missing code or malformed state.
            MarketplaceAuthError: eBay refused the code.
        """
        if not code:
            raise PublishValidationError("code", "Missing eBay authorization code")
        user_id = parse_state(state)

        tokens = await self._auth.exchange_code(code)
        if not tokens.get("access_token"):
            raise MarketplaceAuthError(
                "Token exchange failed: no access token in eBay response",
                details={"user_id": str(user_id)},
            )

        expires_at = self._clock() + timedelta(seconds=int(tokens.get("expires_in", 7200)))
        async with self._session_factory() as session:
            connection = await EbayConnectionRepository(session).create_connection(
                user_id=user_id,
                access_token=tokens["access_token"],
                refresh_token=tokens.get("refresh_token"),
                expires_at=expires_at,
                sandbox=self._sandbox,
            )
            await session.commit()
            token = seller_token_from_connection(connection)

        logger.info(f"eBay connection {token.connection_id} saved for user {user_id}")
        return token

    async def status(self, user_id: uuid.UUID) -> SellerToken | None:
        """The seller's active connection, or None when not connected."""
        async with self._session_factory() as session:
            connection = await EbayConnectionRepository(session).find_active(user_id, sandbox=self._sandbox)
            if connection is None:
                return None
            return seller_token_from_connection(connection)
