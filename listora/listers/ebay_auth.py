"""
eBay OAuth 2.0 client and seller token lifecycle.

Two kinds of token are involved in a publish:

* The **seller token** (authorization-code grant) lets us call the Trading
  API on behalf of a connected seller. It is stored encrypted in
  ``ebay_connections`` and refreshed once it is within an hour of expiry.
* The **application token** (client-credentials grant) only reads the
  public Taxonomy API. It is fetched fresh for every classification and
  never stored.
"""

import base64
import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Protocol
from urllib.parse import quote, urlencode

import httpx

from listora.config import Settings, get_settings
from listora.core.exceptions import AuthExpiredError, MarketplaceAuthError
from listora.core.models import ApplicationToken, SellerToken

logger = logging.getLogger(__name__)

# Scopes requested during seller consent
SELLER_SCOPES = [
    "https://api.ebay.com/oauth/api_scope/sell.listing.item",
    "https://api.ebay.com/oauth/api_scope/sell.marketing",
    "https://api.ebay.com/oauth/api_scope/sell.account",
    "https://api.ebay.com/oauth/api_scope/sell.inventory",
]

# Client-credentials scope; enough for the Taxonomy API
APPLICATION_SCOPE = "https://api.ebay.com/oauth/api_scope"

REFRESH_WINDOW = timedelta(hours=1)


class EbayAuth:
    """
    eBay identity endpoint client.

    Usage:
        auth = EbayAuth()
        url = auth.get_authorization_url(state="random-state")
        tokens = await auth.exchange_code(auth_code)
        tokens = await auth.refresh_token(refresh_token)
        app_token = await auth.get_application_token()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = settings or get_settings()
        self._app_id = settings.ebay_app_id
        self._cert_id = settings.ebay_cert_id
        self._redirect_uri = settings.ebay_redirect_uri
        self._base_url = settings.ebay_base_url
        self._auth_url = settings.ebay_auth_url
        self._timeout = settings.transport_timeout_seconds
        self._transport = transport

    @property
    def token_url(self) -> str:
        return f"{self._base_url}/identity/v1/oauth2/token"

    def get_authorization_url(self, state: str = "") -> str:
        """URL to send the seller to for eBay consent."""
        params = {
            "client_id": self._app_id,
            "response_type": "code",
            "redirect_uri": self._redirect_uri,
            "scope": " ".join(SELLER_SCOPES),
            "state": state,
        }
        # eBay rejects %3A%2F%2F inside scope URLs and '+' for spaces
        url = f"{self._auth_url}/oauth2/authorize?{urlencode(params, quote_via=quote, safe=':/')}"
        logger.info(f"Generated eBay consent URL (scopes: {len(SELLER_SCOPES)}, state: {bool(state)})")
        return url

    def _get_basic_auth_header(self) -> str:
        credentials = f"{self._app_id}:{self._cert_id}"
        encoded = base64.b64encode(credentials.encode()).decode()
        return f"Basic {encoded}"

    async def _token_request(self, data: dict[str, str], action: str) -> dict:
        try:
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                response = await client.post(
                    self.token_url,
                    headers={
                        "Authorization": self._get_basic_auth_header(),
                        "Content-Type": "application/x-www-form-urlencoded",
                    },
                    data=data,
                )
        except httpx.HTTPError as e:
            raise MarketplaceAuthError(
                f"{action} failed: could not reach eBay identity service",
                details={"error": str(e)},
            ) from e

        if response.status_code != 200:
            raise MarketplaceAuthError(
                f"{action} failed: {response.status_code}",
                details={"status_code": response.status_code, "response": response.text[:500]},
            )

        return response.json()

    async def exchange_code(self, auth_code: str) -> dict:
        """
        Exchange a consent authorization code for seller tokens.

        Returns:
            Dict with access_token, refresh_token, expires_in and
            refresh_token_expires_in.

        Raises:
            MarketplaceAuthError: If eBay refuses the code.
        """
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": auth_code,
                "redirect_uri": self._redirect_uri,
            },
            "Token exchange",
        )

    async def refresh_token(self, refresh_token: str) -> dict:
        """
        Mint a new seller access token from a refresh token.

        Raises:
            MarketplaceAuthError: If eBay refuses the refresh.
        """
        return await self._token_request(
            {"grant_type": "refresh_token", "refresh_token": refresh_token},
            "Token refresh",
        )

    async def get_application_token(self) -> ApplicationToken:
        """
        Fetch a client-credentials token for Taxonomy API reads.

        Raises:
            MarketplaceAuthError: If the grant fails.
        """
        data = await self._token_request(
            {"grant_type": "client_credentials", "scope": APPLICATION_SCOPE},
            "Application token request",
        )
        return ApplicationToken(
            access_token=data["access_token"],
            expires_in=int(data.get("expires_in", 7200)),
            token_type=data.get("token_type", "Application Access Token"),
        )


# ─── Seller Token Lifecycle ───────────────────────────────────


class TokenStore(Protocol):
    """Where refreshed seller tokens are written back."""

    async def update_tokens(
        self,
        connection_id,
        access_token: str,
        expires_at: datetime,
        refresh_token: str | None = None,
    ) -> object: ...


class TokenManager:
    """
    Returns a usable seller access token, refreshing it when needed.

    Usage:
        manager = TokenManager(EbayAuth(), EbayConnectionRepository(session))
        token = await manager.get_seller_token(seller_token)
    """

    def __init__(
        self,
        auth: EbayAuth,
        store: TokenStore | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self._auth = auth
        self._store = store
        self._clock = clock or (lambda: datetime.now(UTC))

    async def get_seller_token(self, token: SellerToken) -> SellerToken:
        """
        Refresh ``token`` if it expires within one hour and a refresh token
        is available; otherwise return it unchanged.

        Raises:
            AuthExpiredError: The refresh call failed. The seller has to
                reconnect their eBay account before publishing.
        """
        now = self._clock()
        if not token.needs_refresh(now, REFRESH_WINDOW) or not token.refresh_token:
            return token

        logger.info(f"Refreshing eBay seller token for connection {token.connection_id}")
        try:
            data = await self._auth.refresh_token(token.refresh_token)
        except MarketplaceAuthError as e:
            logger.warning(f"Seller token refresh failed for connection {token.connection_id}: {e.message}")
            raise AuthExpiredError(
                "Your eBay session has expired. Please reconnect your eBay account.",
                details={"connection_id": str(token.connection_id), **e.details},
            ) from e

        refreshed = SellerToken(
            connection_id=token.connection_id,
            access_token=data["access_token"],
            # eBay only rotates the refresh token on some grants
            refresh_token=data.get("refresh_token") or token.refresh_token,
            expires_at=now + timedelta(seconds=int(data.get("expires_in", 7200))),
        )

        if self._store is not None and token.connection_id is not None:
            await self._store.update_tokens(
                token.connection_id,
                access_token=refreshed.access_token,
                expires_at=refreshed.expires_at,
                refresh_token=data.get("refresh_token"),
            )

        logger.info(f"eBay seller token refreshed, expires at {refreshed.expires_at.isoformat()}")
        return refreshed

    async def get_application_token(self) -> ApplicationToken:
        """Fresh client-credentials token; never cached."""
        return await self._auth.get_application_token()
