"""
Integration tests for the eBay publish pipeline.

Runs PublishService with REAL components (EbayAuth, TokenManager,
CategoryClassifier, TaxonomyClient, EbayConverter, EbayTradingLister and
the repositories over a SQLite database) and only the HTTP layer mocked,
through one httpx.MockTransport that answers every eBay endpoint.

Verifies:
    - Category fallback when the Taxonomy API is down
    - Taxonomy-driven categories when it is up
    - Validation before any network call
    - Seller token refresh written back to the connection
    - Rejections returned as failed results, nothing persisted
    - 401 from eBay marks the connection expired
"""

import json
import uuid
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from urllib.parse import parse_qs

import httpx
import pytest

from listora.categories.classifier import CategoryClassifier
from listora.categories.taxonomy import TaxonomyClient
from listora.converters.ebay_converter import EbayConverter
from listora.core.encryption import decrypt_token
from listora.core.exceptions import AuthExpiredError, PublishValidationError
from listora.core.models import CategorySource, ProductContent, PublishingOptions
from listora.db.models import ProductContentRecord
from listora.db.repositories import (
    EbayConnectionRepository,
    EbayListingRepository,
    PublishedProductRepository,
)
from listora.listers.ebay_auth import EbayAuth, TokenManager
from listora.listers.ebay_lister import EbayTradingLister
from listora.services.publish_service import PublishService
from tests.conftest import GENERATED_HEADPHONES_CONTENT

SUCCESS_XML = """<?xml version="1.0" encoding="UTF-8"?>
<AddFixedPriceItemResponse xmlns="urn:ebay:apis:eBLBaseComponents">
  <Ack>Success</Ack>
  <ItemID>110553204831</ItemID>
  <Fees><Fee><Name>InsertionFee</Name><Fee currencyID="USD">0.00</Fee></Fee></Fees>
</AddFixedPriceItemResponse>"""

REJECTED_XML = """<?xml version="1.0" encoding="UTF-8"?>
<AddFixedPriceItemResponse xmlns="urn:ebay:apis:eBLBaseComponents">
  <Ack>Failure</Ack>
  <Errors>
    <ShortMessage>The item specific Model is missing.</ShortMessage>
    <LongMessage>The item specific Model is missing. Add Model to this listing.</LongMessage>
    <ErrorCode>21919303</ErrorCode>
    <SeverityCode>Error</SeverityCode>
  </Errors>
</AddFixedPriceItemResponse>"""


class FakeEbay:
    """
    MockTransport handler standing in for every eBay endpoint the pipeline
    touches. Flip ``taxonomy_up`` or swap ``trading_response`` per test.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.taxonomy_up = False
        self.trading_response = httpx.Response(200, text=SUCCESS_XML)
        self.refresh_response = httpx.Response(
            200, json={"access_token": "fresh-access", "expires_in": 7200, "refresh_token": "fresh-refresh"}
        )

    def paths(self, fragment: str) -> list[str]:
        return [r.url.path for r in self.requests if fragment in r.url.path]

    def trading_bodies(self) -> list[str]:
        return [r.content.decode() for r in self.requests if r.url.path == "/ws/api.dll"]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path == "/identity/v1/oauth2/token":
            grant = parse_qs(request.content.decode())["grant_type"][0]
            if grant == "refresh_token":
                return self.refresh_response
            return httpx.Response(200, json={"access_token": "app-token", "expires_in": 7200})

        if path.startswith("/commerce/taxonomy/v1"):
            if not self.taxonomy_up:
                return httpx.Response(500, json={"errors": [{"message": "internal error"}]})
            if path.endswith("get_default_category_tree_id"):
                return httpx.Response(200, json={"categoryTreeId": "0"})
            if path.endswith("get_category_suggestions"):
                return httpx.Response(200, json={"categorySuggestions": [
                    {"category": {"categoryId": "112529", "categoryName": "Headphones"}},
                ]})
            return httpx.Response(200, json={"aspects": [
                {"localizedAspectName": "Brand", "aspectConstraint": {"aspectRequired": True}},
                {"localizedAspectName": "Type", "aspectConstraint": {"aspectRequired": True}},
                {"localizedAspectName": "Features", "aspectConstraint": {"aspectRequired": False}},
            ]})

        if path == "/ws/api.dll":
            return self.trading_response

        return httpx.Response(404, text=json.dumps({"unexpected": path}))


# ─── Fixtures ──────────────────────────────────────────────


@pytest.fixture
def fake_ebay() -> FakeEbay:
    return FakeEbay()


@pytest.fixture
def service(settings, session_factory, retry_policy, fake_ebay) -> PublishService:
    transport = httpx.MockTransport(fake_ebay)
    auth = EbayAuth(settings, transport=transport)
    classifier = CategoryClassifier(
        TokenManager(auth),
        taxonomy_factory=lambda token: TaxonomyClient(token, settings, transport=transport),
    )
    return PublishService(
        session_factory=session_factory,
        settings=settings,
        auth=auth,
        classifier=classifier,
        converter=EbayConverter(sandbox=True),
        lister=EbayTradingLister(settings, retry_policy, transport=transport),
    )


async def _connect(session_factory, user_id, expires_in: timedelta = timedelta(hours=2)):
    async with session_factory() as session:
        connection = await EbayConnectionRepository(session).create_connection(
            user_id=user_id,
            access_token="seller-access",
            refresh_token="seller-refresh",
            expires_at=datetime.now(UTC) + expires_in,
        )
        await session.commit()
        return connection.id


# ─── Happy Path ────────────────────────────────────────────


class TestPublishSuccess:

    async def test_publish_with_taxonomy_outage(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)

        result = await service.publish(headphones_content, [], publishing_options, user_id)

        assert result.success is True
        assert result.platform_product_id == "110553204831"
        assert result.platform_url == "https://www.sandbox.ebay.com/itm/110553204831"
        assert result.category_id == "14969"
        assert result.category_source == CategorySource.VERIFIED_FALLBACK

        # Probe failed, so no suggestion or aspect lookups
        assert fake_ebay.paths("get_category_suggestions") == []
        assert fake_ebay.paths("get_item_aspects_for_category") == []

        body = fake_ebay.trading_bodies()[0]
        assert "<CategoryID>14969</CategoryID>" in body
        assert "<eBayAuthToken>seller-access</eBayAuthToken>" in body

        async with session_factory() as session:
            listings = await EbayListingRepository(session).find_by_user(user_id)
            published = await PublishedProductRepository(session).find_by_user(user_id, platform="ebay")
            connection = await EbayConnectionRepository(session).find_active(user_id)

        assert len(listings) == 1
        listing = listings[0]
        assert listing.ebay_item_id == "110553204831"
        assert listing.price == Decimal("29.99")
        assert listing.quantity == 5
        assert listing.category_source == "verified_fallback"
        specifics = {s["name"]: s["values"] for s in listing.listing_data["item_specifics"]}
        assert specifics["Brand"] == ["Unbranded"]
        assert specifics["Color"] == ["Multicolor"]

        assert len(published) == 1
        assert published[0].platform_product_id == "110553204831"
        assert published[0].sku == result.sku
        assert published[0].quantity == 5
        assert published[0].images == []
        assert connection.last_used_at is not None

    async def test_publish_with_taxonomy_category(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)
        fake_ebay.taxonomy_up = True

        result = await service.publish(headphones_content, [], publishing_options, user_id)

        assert result.success is True
        assert result.category_id == "112529"
        assert result.category_source == CategorySource.TAXONOMY_API
        assert "<CategoryID>112529</CategoryID>" in fake_ebay.trading_bodies()[0]
        app_token_request = fake_ebay.requests[0]
        assert app_token_request.url.path == "/identity/v1/oauth2/token"
        assert fake_ebay.paths("get_item_aspects_for_category")

    async def test_stored_content_used(
        self, service, session_factory, fake_ebay, user_id, publishing_options
    ):
        await _connect(session_factory, user_id)
        async with session_factory() as session:
            record = ProductContentRecord(
                user_id=user_id,
                product_name="Noise Cancelling Headphones",
                generated_content=GENERATED_HEADPHONES_CONTENT,
            )
            session.add(record)
            await session.commit()
            content_id = record.id

        request_content = ProductContent(id=content_id, product_name="Headphones")
        result = await service.publish(request_content, [], publishing_options, user_id)

        assert result.success is True
        body = fake_ebay.trading_bodies()[0]
        assert "Wireless Noise Cancelling Over-Ear Headphones" in body
        assert "Perfect for Travel" not in body.split("<Title>")[1].split("</Title>")[0]

        async with session_factory() as session:
            listing = (await EbayListingRepository(session).find_by_user(user_id))[0]
        assert listing.content_id == content_id

    async def test_unknown_content_id_still_recorded(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)
        request_content = headphones_content.model_copy(update={"id": uuid.uuid4()})

        result = await service.publish(request_content, [], publishing_options, user_id)

        assert result.success is True
        async with session_factory() as session:
            listings = await EbayListingRepository(session).find_by_user(user_id)
            published = await PublishedProductRepository(session).find_by_user(user_id, platform="ebay")

        assert len(listings) == 1
        assert listings[0].content_id is None
        assert len(published) == 1
        assert published[0].content_id is None

    async def test_images_sent_as_pictures(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)
        images = ["https://img.example.com/front.jpg", "https://img.example.com/side.jpg"]

        await service.publish(headphones_content, images, publishing_options, user_id)

        body = fake_ebay.trading_bodies()[0]
        assert "<PictureURL>https://img.example.com/front.jpg</PictureURL>" in body
        assert "<PictureURL>https://img.example.com/side.jpg</PictureURL>" in body


# ─── Validation ────────────────────────────────────────────


class TestPublishValidation:

    async def test_missing_price_rejected_before_network(
        self, service, session_factory, fake_ebay, user_id, headphones_content
    ):
        await _connect(session_factory, user_id)

        with pytest.raises(PublishValidationError) as exc_info:
            await service.publish(headphones_content, [], PublishingOptions(), user_id)

        assert exc_info.value.field == "price"
        assert fake_ebay.requests == []

    async def test_missing_user_rejected(self, service, fake_ebay, headphones_content, publishing_options):
        with pytest.raises(PublishValidationError) as exc_info:
            await service.publish(headphones_content, [], publishing_options, None)
        assert exc_info.value.field == "user_id"
        assert fake_ebay.requests == []

    async def test_no_connection(self, service, fake_ebay, user_id, headphones_content, publishing_options):
        with pytest.raises(PublishValidationError) as exc_info:
            await service.publish(headphones_content, [], publishing_options, user_id)

        assert exc_info.value.field == "ebay_connection"
        assert "not connected" in exc_info.value.message
        assert fake_ebay.requests == []


# ─── Seller Token ──────────────────────────────────────────


class TestSellerToken:

    async def test_expiring_token_refreshed_and_stored(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        connection_id = await _connect(session_factory, user_id, expires_in=timedelta(minutes=10))

        result = await service.publish(headphones_content, [], publishing_options, user_id)

        assert result.success is True
        assert "<eBayAuthToken>fresh-access</eBayAuthToken>" in fake_ebay.trading_bodies()[0]

        async with session_factory() as session:
            connection = await EbayConnectionRepository(session).get_by_id(connection_id)
        assert decrypt_token(connection.access_token) == "fresh-access"
        assert decrypt_token(connection.refresh_token) == "fresh-refresh"

    async def test_failed_refresh_marks_connection_expired(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        connection_id = await _connect(session_factory, user_id, expires_in=timedelta(minutes=10))
        fake_ebay.refresh_response = httpx.Response(400, json={"error": "invalid_grant"})

        with pytest.raises(AuthExpiredError):
            await service.publish(headphones_content, [], publishing_options, user_id)

        assert fake_ebay.trading_bodies() == []
        async with session_factory() as session:
            connection = await EbayConnectionRepository(session).get_by_id(connection_id)
        assert connection.status == "expired"

    async def test_unauthorized_publish_marks_connection_expired(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        connection_id = await _connect(session_factory, user_id)
        fake_ebay.trading_response = httpx.Response(401, text="")

        with pytest.raises(AuthExpiredError):
            await service.publish(headphones_content, [], publishing_options, user_id)

        async with session_factory() as session:
            connection = await EbayConnectionRepository(session).get_by_id(connection_id)
            listings = await EbayListingRepository(session).find_by_user(user_id)
        assert connection.status == "expired"
        assert listings == []


# ─── Rejection & Transport ─────────────────────────────────


class TestPublishFailure:

    async def test_rejection_returned_as_failed_result(
        self, service, session_factory, fake_ebay, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)
        fake_ebay.trading_response = httpx.Response(200, text=REJECTED_XML)

        result = await service.publish(headphones_content, [], publishing_options, user_id)

        assert result.success is False
        assert result.missing_fields == ["Model"]
        assert "• Model" in result.error
        assert result.category_id == "14969"
        assert result.raw["error_type"] == "PlatformRejectedError"

        async with session_factory() as session:
            assert await EbayListingRepository(session).find_by_user(user_id) == []
            assert await PublishedProductRepository(session).find_by_user(user_id) == []

    async def test_unreachable_ebay_returned_as_failed_result(
        self, settings, session_factory, retry_policy, fake_sleep, user_id, headphones_content, publishing_options
    ):
        await _connect(session_factory, user_id)

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/ws/api.dll":
                raise httpx.ConnectError("connection refused")
            return httpx.Response(500)

        transport = httpx.MockTransport(handler)
        auth = EbayAuth(settings, transport=transport)
        service = PublishService(
            session_factory=session_factory,
            settings=settings,
            auth=auth,
            classifier=CategoryClassifier(
                TokenManager(auth),
                taxonomy_factory=lambda token: TaxonomyClient(token, settings, transport=transport),
            ),
            lister=EbayTradingLister(settings, retry_policy, transport=transport),
        )

        result = await service.publish(headphones_content, [], publishing_options, user_id)

        assert result.success is False
        assert result.raw["error_type"] == "TransportFailureError"
        assert result.raw["attempts"] == 3
        assert fake_sleep.delays == [2.0, 4.0]
