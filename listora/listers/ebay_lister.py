"""
eBay listing creation via the Trading API (AddFixedPriceItem).

One XML POST per publish:
    POST {base}/ws/api.dll   X-EBAY-API-CALL-NAME: AddFixedPriceItem

Connection failures and timeouts are retried with exponential backoff.
An HTTP response, whatever its status, is never retried; it is parsed for
its Ack and error entries instead.
"""

import asyncio
import logging
import re
import time

import httpx

from listora.config import Settings, get_settings
from listora.core.exceptions import AuthExpiredError, PlatformRejectedError
from listora.core.interfaces import IPublishable
from listora.core.models import (
    ListingDocument,
    Platform,
    PublishResult,
    SellerToken,
    TradingResponse,
)
from listora.core.resilience import RetryPolicy
from listora.listers.trading_xml import CALL_NAME, build_add_fixed_price_item, parse_trading_response

logger = logging.getLogger(__name__)

USER_AGENT = "Listora-AI/1.0"

BRAND_MISMATCH_CODE = "240"
_MISSING_SPECIFIC = re.compile(r"The item specific ([^.]+) is missing")

GENERIC_REJECTION = "eBay listing requirements not met. Please check your product details and try again."


def describe_rejection(response: TradingResponse, document: ListingDocument) -> tuple[str, list[str]]:
    """
    User-facing message and missing item specifics for a rejected listing.

    Specific problems (brand mismatch, pictures, title) win over the list
    of missing specifics, which wins over the generic message.
    """
    message = ""
    missing: list[str] = []

    for error in response.errors:
        if error.code == BRAND_MISMATCH_CODE or "title includes extra brand names" in error.long_message:
            message = (
                "Brand mismatch error: Your title contains a brand name that doesn't match the item specifics.\n\n"
            )
            title_brand = re.search(r"\b([A-Z][a-zA-Z]+)'s\b", document.title)
            item_brand = document.specific("Brand")
            if title_brand and item_brand:
                message += f'• Title contains: "{title_brand.group(1)}"\n'
                message += f'• Item specific brand: "{item_brand[0]}"\n\n'
            message += (
                "Please ensure the brand in your title matches the brand in item specifics, "
                "or remove brand names from the title."
            )
        elif "item specific" in error.short_message and "missing" in error.short_message:
            match = _MISSING_SPECIFIC.search(error.short_message)
            if match:
                missing.append(match.group(1).strip())
        elif "at least 1 picture" in error.long_message:
            message = "At least one product image is required for eBay listings."
        elif "Title is missing" in error.long_message:
            message = "Product title is missing or too short. Titles must be at least 15 characters."
        else:
            message = f"eBay Error ({error.code}): {error.text}"

    if missing and not message:
        fields = "\n".join(f"• {name}" for name in missing)
        message = (
            f"eBay requires the following item specifics:\n{fields}\n\n"
            "Please update your product description to include these details."
        )

    return message or GENERIC_REJECTION, missing


class EbayTradingLister(IPublishable):
    """
    Publishes ListingDocuments with the Trading API.

    Usage:
        lister = EbayTradingLister()
        result = await lister.publish(document, seller_token)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        retry_policy: RetryPolicy | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = settings or get_settings()
        self._settings = settings
        self._url = settings.ebay_trading_url
        self._item_url = settings.ebay_item_url
        self._timeout = settings.transport_timeout_seconds
        self._retry_policy = retry_policy or RetryPolicy(
            max_attempts=settings.transport_max_attempts,
            base_delay=settings.transport_base_delay,
            multiplier=settings.transport_backoff_multiplier,
        )
        self._transport = transport

    def _get_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "text/xml; charset=utf-8",
            "X-EBAY-API-COMPATIBILITY-LEVEL": str(self._settings.ebay_compatibility_level),
            "X-EBAY-API-DEV-NAME": self._settings.ebay_dev_id,
            "X-EBAY-API-APP-NAME": self._settings.ebay_app_id,
            "X-EBAY-API-CERT-NAME": self._settings.ebay_cert_id,
            "X-EBAY-API-CALL-NAME": CALL_NAME,
            "X-EBAY-API-SITEID": str(self._settings.ebay_site_id),
            "User-Agent": USER_AGENT,
        }

    async def _post(self, body: str) -> httpx.Response:
        """One attempt, bounded by the per-attempt timeout."""
        async with asyncio.timeout(self._timeout):
            async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
                return await client.post(self._url, content=body.encode("utf-8"), headers=self._get_headers())

    async def publish(self, document: ListingDocument, token: SellerToken) -> PublishResult:
        """
        Create the listing and return its eBay item id.

        Raises:
            TransportFailureError: eBay could not be reached after all attempts.
            AuthExpiredError: eBay refused the seller token.
            PlatformRejectedError: eBay answered with Error-severity entries
                or a non-2xx status.
        """
        body = build_add_fixed_price_item(document, token.access_token)
        logger.info(f"Sending AddFixedPriceItem for SKU {document.sku} to category {document.category_id}")

        response = await self._retry_policy.run(lambda: self._post(body), operation=CALL_NAME)
        xml = response.text
        parsed = parse_trading_response(xml)

        logger.info(f"eBay responded {response.status_code}, Ack={parsed.ack}")
        for warning in parsed.warnings:
            logger.warning(f"eBay warning ({warning.code}): {warning.text}")

        if response.status_code == 401:
            raise AuthExpiredError(
                "Your eBay session has expired. Please reconnect your eBay account.",
                details={"status_code": 401},
            )

        rejected = not parsed.is_success and (parsed.errors or parsed.ack in ("Failure", "PartialFailure"))
        if rejected or not response.is_success:
            self._raise_rejection(response, parsed, document)

        item_id = parsed.item_id
        if not item_id:
            item_id = f"TEMP_{int(time.time() * 1000)}"
            logger.warning(f"eBay acknowledged {parsed.ack} without an ItemID, using placeholder {item_id}")

        logger.info(f"eBay listing created: {item_id} (SKU {document.sku})")
        return PublishResult(
            success=True,
            platform=Platform.EBAY,
            platform_product_id=item_id,
            platform_url=f"{self._item_url}{item_id}",
            sku=document.sku,
            category_id=document.category_id,
            category_name=document.category_name,
            fees=parsed.fees,
            raw={
                "ack": parsed.ack,
                "item_id": item_id,
                "warnings": [w.model_dump() for w in parsed.warnings],
                "fees": {name: str(amount) for name, amount in parsed.fees.items()},
            },
        )

    def _raise_rejection(
        self,
        response: httpx.Response,
        parsed: TradingResponse,
        document: ListingDocument,
    ) -> None:
        if parsed.errors:
            message, missing = describe_rejection(parsed, document)
        elif not response.is_success:
            message, missing = f"eBay API HTTP error: {response.status_code}", []
        else:
            message, missing = GENERIC_REJECTION, []

        first = parsed.errors[0] if parsed.errors else None
        logger.error(
            f"eBay rejected SKU {document.sku}: Ack={parsed.ack}, status={response.status_code}, "
            f"errors={[f'{e.code}: {e.short_message}' for e in parsed.errors]}"
        )
        raise PlatformRejectedError(
            message,
            raw_response=parsed.raw,
            missing_fields=missing,
            details={
                "ack": parsed.ack,
                "status_code": response.status_code,
                "error_code": first.code if first else None,
                "missing_fields": missing,
            },
        )
