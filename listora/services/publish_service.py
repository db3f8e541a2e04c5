"""
eBay publish orchestration service.

Runs one publish end to end:

    validate → load content + connection → seller token → classify
    → build listing → AddFixedPriceItem → persist listing + projection

Validation and seller-auth problems are raised to the caller. Anything
that goes wrong once the marketplace is involved (unreachable, listing
rejected) is returned as a failed PublishResult instead, so the caller
always gets a uniform answer for a publish attempt.

The content record and the seller's connection are read concurrently, each
in its own short-lived session; every write of a publish goes through one
session that is committed at the end.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from listora.categories.classifier import CategoryClassifier
from listora.config import Settings, get_settings
from listora.converters.ebay_converter import EbayConverter
from listora.core.exceptions import (
    AuthExpiredError,
    PersistenceError,
    PlatformRejectedError,
    PublishValidationError,
    TransportFailureError,
)
from listora.core.interfaces import IClassifiable, IPublishable
from listora.core.logging_config import publish_log_context
from listora.core.models import (
    CategoryResult,
    ListingDocument,
    Platform,
    ProductContent,
    PublishingOptions,
    PublishResult,
    SellerToken,
)
from listora.db.database import get_session_factory
from listora.db.mappers import (
    content_from_record,
    listing_from_document,
    published_product_from_result,
    seller_token_from_connection,
)
from listora.db.repositories import (
    EbayConnectionRepository,
    EbayListingRepository,
    ProductContentRepository,
    PublishedProductRepository,
)
from listora.listers.ebay_auth import EbayAuth, TokenManager
from listora.listers.ebay_lister import EbayTradingLister

logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "eBay account not connected. Please connect your eBay account first."


def validate_publish_request(
    content: ProductContent | None,
    options: PublishingOptions | None,
    user_id: uuid.UUID | None,
) -> None:
    """
    Reject a publish request before any I/O happens.

    Raises:
        PublishValidationError: user id, product data or price is missing.
    """
    if user_id is None:
        raise PublishValidationError("user_id", "A user id is required to publish")
    if content is None or not content.product_name.strip():
        raise PublishValidationError("product_content", "Product data is required to publish")
    if options is None or options.price is None:
        raise PublishValidationError("price", "A valid price is required")


class PublishService:
    """
    Publishes generated product content to eBay.

    Usage:
        service = PublishService()
        result = await service.publish(content, images, options, user_id)
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        settings: Settings | None = None,
        auth: EbayAuth | None = None,
        classifier: IClassifiable | None = None,
        converter: EbayConverter | None = None,
        lister: IPublishable | None = None,
    ):
        settings = settings or get_settings()
        self._session_factory = session_factory or get_session_factory()
        self._auth = auth or EbayAuth(settings)
        self._classifier = classifier or CategoryClassifier(TokenManager(self._auth))
        self._converter = converter or EbayConverter(sandbox=settings.ebay_sandbox)
        self._lister = lister or EbayTradingLister(settings)

    async def publish(
        self,
        content: ProductContent,
        images: list[str] | None,
        options: PublishingOptions,
        user_id: uuid.UUID,
    ) -> PublishResult:
        """
        Create an eBay listing for ``content``.

        Returns:
            PublishResult. ``success=False`` with a user-facing ``error`` when
            eBay rejected the listing or could not be reached.

        Raises:
            PublishValidationError: Missing user, product data, price or
                eBay connection.
            AuthExpiredError: The seller token could not be refreshed or eBay
                refused it. The connection is marked expired.
        """
        validate_publish_request(content, options, user_id)
        images = images or []

        with publish_log_context(user_id=user_id, platform=Platform.EBAY.value, sku=options.sku):
            content, token = await asyncio.gather(
                self._load_content(content, user_id),
                self._load_seller_token(user_id),
            )
            if token is None:
                raise PublishValidationError("ebay_connection", NOT_CONNECTED_MESSAGE)

            logger.info(
                f"Publishing '{content.product_name[:60]}' to eBay "
                f"(price={options.price}, images={len(images)}, connection={token.connection_id})"
            )

            async with self._session_factory() as session:
                connections = EbayConnectionRepository(session)
                try:
                    result, document = await self._publish_with_token(
                        content, images, options, token, TokenManager(self._auth, store=connections)
                    )
                except AuthExpiredError:
                    await self._save(session, "connection status", lambda: connections.mark_expired(token.connection_id))
                    await session.commit()
                    raise

                if result.success:
                    await self._persist(session, document, result, content, user_id, options)
                    await self._save(
                        session, "connection last_used_at", lambda: connections.touch_last_used(token.connection_id)
                    )
                await session.commit()

            if result.success:
                logger.info(f"Published to eBay as {result.platform_product_id}: {result.platform_url}")
            return result

    async def _publish_with_token(
        self,
        content: ProductContent,
        images: list[str],
        options: PublishingOptions,
        token: SellerToken,
        token_manager: TokenManager,
    ) -> tuple[PublishResult, ListingDocument]:
        token = await token_manager.get_seller_token(token)
        category = await self._classifier.classify(content)
        document = self._converter.build(content, options, images, category)

        try:
            result = await self._lister.publish(document, token)
        except (PlatformRejectedError, TransportFailureError) as e:
            logger.warning(f"eBay publish failed for SKU {document.sku}: {type(e).__name__}: {e.message}")
            return self._failure(e, document, category), document

        return result.model_copy(update={"category_source": category.source}), document

    async def _load_content(self, content: ProductContent, user_id: uuid.UUID) -> ProductContent:
        """Stored copy of the record merged over the request's copy."""
        if content.id is None:
            return content
        async with self._session_factory() as session:
            record = await ProductContentRepository(session).find_latest(user_id, content.id)
            if record is None:
                logger.info(f"Content {content.id} not stored for user {user_id}, using request data")
                # rows written for this publish must not point at a missing record
                return content.model_copy(update={"id": None})
            stored = content_from_record(record)
        return content.model_copy(update=stored.model_dump(exclude_none=True))

    async def _load_seller_token(self, user_id: uuid.UUID) -> SellerToken | None:
        async with self._session_factory() as session:
            connection = await EbayConnectionRepository(session).find_active(user_id)
            if connection is None:
                return None
            return seller_token_from_connection(connection)

    def _failure(
        self,
        error: PlatformRejectedError | TransportFailureError,
        document: ListingDocument,
        category: CategoryResult,
    ) -> PublishResult:
        missing = error.missing_fields if isinstance(error, PlatformRejectedError) else []
        return PublishResult(
            success=False,
            platform=Platform.EBAY,
            sku=document.sku,
            category_id=category.category_id,
            category_name=category.category_name,
            category_source=category.source,
            error=error.message,
            missing_fields=missing,
            raw={"error_type": type(error).__name__, **error.details},
        )

    async def _persist(
        self,
        session: AsyncSession,
        document: ListingDocument,
        result: PublishResult,
        content: ProductContent,
        user_id: uuid.UUID,
        options: PublishingOptions,
    ) -> None:
        """
        Record the listing and its published-product projection.

        Each write runs in its own savepoint; a failed write is logged and
        the other still happens. The listing exists on eBay either way.
        """
        listing = listing_from_document(document, result, user_id, content_id=content.id)
        projection = published_product_from_result(
            result,
            document.title,
            user_id,
            content_id=content.id,
            price=options.price,
            quantity=document.quantity,
            images=document.images,
        )
        await self._save(session, "ebay listing", lambda: EbayListingRepository(session).add(listing))
        await self._save(session, "published product", lambda: PublishedProductRepository(session).add(projection))

    async def _save(self, session: AsyncSession, label: str, write: Callable[[], Awaitable[object]]) -> None:
        try:
            async with session.begin_nested():
                await write()
        except PersistenceError as e:
            logger.warning(f"PersistenceError: {label} not saved: {e.message} {e.details}")
        except SQLAlchemyError as e:
            logger.warning(f"PersistenceError: {label} not saved: {type(e).__name__}: {e}")
