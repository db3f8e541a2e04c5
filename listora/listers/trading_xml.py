"""
eBay Trading API XML: AddFixedPriceItem request envelope and response parsing.

The request is hand-built from a ListingDocument; every text node is
escaped except the description, which travels inside CDATA. Responses are
parsed with xmltodict; a body that is not well-formed XML falls back to
pattern matching so the Ack, errors and ItemID can still be recovered.
"""

import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any
from xml.parsers.expat import ExpatError

import xmltodict

from listora.core.models import ItemSpecific, ListingDocument, TradingMessage, TradingResponse

logger = logging.getLogger(__name__)

TRADING_NAMESPACE = "urn:ebay:apis:eBLBaseComponents"
CALL_NAME = "AddFixedPriceItem"

_ITEM_ID = re.compile(r"<ItemID>(\d+)</ItemID>")
_ACK = re.compile(r"<Ack>([^<]+)</Ack>")
_ERRORS_BLOCK = re.compile(r"<Errors>([\s\S]*?)</Errors>")
_FEE = re.compile(r"<Name>([^<]+)</Name>\s*<Fee currencyID=\"USD\">([^<]+)</Fee>")


def escape_xml(text: object) -> str:
    """Escape ``& < > " '`` for an XML text node or attribute."""
    return (
        str(text)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
        .replace("'", "&#39;")
    )


def _cdata(text: str) -> str:
    # A literal "]]>" would close the section early
    return "<![CDATA[" + text.replace("]]>", "]]]]><![CDATA[>") + "]]>"


# ─── Request ──────────────────────────────────────────────────


def item_specifics_xml(specifics: list[ItemSpecific]) -> str:
    if not specifics:
        return ""
    parts = ["<ItemSpecifics>"]
    for specific in specifics:
        parts.append("<NameValueList>")
        parts.append(f"<Name>{escape_xml(specific.name)}</Name>")
        parts.extend(f"<Value>{escape_xml(value)}</Value>" for value in specific.values)
        parts.append("</NameValueList>")
    parts.append("</ItemSpecifics>")
    return "".join(parts)


def _picture_details_xml(images: list[str]) -> str:
    if not images:
        return ""
    urls = "".join(f"<PictureURL>{escape_xml(url)}</PictureURL>" for url in images)
    return f"<PictureDetails>{urls}</PictureDetails>"


def build_add_fixed_price_item(document: ListingDocument, token: str) -> str:
    """Complete AddFixedPriceItemRequest body for ``document``."""
    shipping = document.shipping_policy
    returns = document.return_policy
    return (
        '<?xml version="1.0" encoding="utf-8"?>\n'
        f'<AddFixedPriceItemRequest xmlns="{TRADING_NAMESPACE}">'
        f"<RequesterCredentials><eBayAuthToken>{escape_xml(token)}</eBayAuthToken></RequesterCredentials>"
        "<Item>"
        f"<Title>{escape_xml(document.title)}</Title>"
        f"<Description>{_cdata(document.description_html)}</Description>"
        f"<PrimaryCategory><CategoryID>{escape_xml(document.category_id)}</CategoryID></PrimaryCategory>"
        f"<StartPrice>{document.price:.2f}</StartPrice>"
        f"<Currency>{escape_xml(document.currency)}</Currency>"
        f"<Country>{escape_xml(document.country)}</Country>"
        f"<Location>{escape_xml(document.location)}</Location>"
        f"<Quantity>{document.quantity}</Quantity>"
        f"<ListingType>{escape_xml(document.listing_type)}</ListingType>"
        f"<ListingDuration>{escape_xml(document.listing_duration)}</ListingDuration>"
        f"<ConditionID>{escape_xml(document.condition_id)}</ConditionID>"
        f"<SKU>{escape_xml(document.sku)}</SKU>"
        f"{_picture_details_xml(document.images)}"
        "<ShippingDetails>"
        f"<ShippingType>{escape_xml(shipping.shipping_type)}</ShippingType>"
        "<ShippingServiceOptions>"
        f"<ShippingServicePriority>{shipping.priority}</ShippingServicePriority>"
        f"<ShippingService>{escape_xml(shipping.service)}</ShippingService>"
        f"<ShippingServiceCost>{shipping.cost:.2f}</ShippingServiceCost>"
        "</ShippingServiceOptions>"
        "</ShippingDetails>"
        "<ReturnPolicy>"
        f"<ReturnsAcceptedOption>{escape_xml(returns.returns_accepted)}</ReturnsAcceptedOption>"
        f"<RefundOption>{escape_xml(returns.refund)}</RefundOption>"
        f"<ReturnsWithinOption>{escape_xml(returns.returns_within)}</ReturnsWithinOption>"
        f"<ShippingCostPaidByOption>{escape_xml(returns.shipping_cost_paid_by)}</ShippingCostPaidByOption>"
        "</ReturnPolicy>"
        f"<DispatchTimeMax>{document.dispatch_time_max}</DispatchTimeMax>"
        f"{item_specifics_xml(document.item_specifics)}"
        "</Item>"
        "</AddFixedPriceItemRequest>"
    )


# ─── Response ─────────────────────────────────────────────────


def _text(node: Any) -> str:
    if node is None:
        return ""
    if isinstance(node, dict):
        return str(node.get("#text", "")).strip()
    return str(node).strip()


def _as_list(node: Any) -> list:
    if node is None:
        return []
    return node if isinstance(node, list) else [node]


def _message(entry: dict) -> TradingMessage:
    return TradingMessage(
        severity=_text(entry.get("SeverityCode")) or "Error",
        code=_text(entry.get("ErrorCode")),
        short_message=_text(entry.get("ShortMessage")),
        long_message=_text(entry.get("LongMessage")),
    )


def _decimal(value: str) -> Decimal | None:
    try:
        return Decimal(value)
    except (InvalidOperation, ValueError):
        return None


def _split_messages(messages: list[TradingMessage]) -> tuple[list[TradingMessage], list[TradingMessage]]:
    errors = [m for m in messages if m.is_error]
    warnings = [m for m in messages if not m.is_error]
    return errors, warnings


def parse_trading_response(xml: str) -> TradingResponse:
    """
    Ack, errors, warnings, fees and ItemID of a Trading API response.

    Never raises: a malformed body is scanned with regular expressions and
    anything not found is left at its default.
    """
    try:
        parsed = xmltodict.parse(xml, force_list=("Errors", "Fee"))
    except (ExpatError, ValueError) as e:
        logger.warning(f"Trading API response is not well-formed XML, scanning text: {e}")
        return _scan_trading_response(xml)

    root = next(iter(parsed.values()), None) if parsed else None
    if not isinstance(root, dict):
        return _scan_trading_response(xml)

    errors, warnings = _split_messages([_message(e) for e in _as_list(root.get("Errors")) if isinstance(e, dict)])

    fees: dict[str, Decimal] = {}
    fees_node = root.get("Fees") or {}
    for fee in _as_list(fees_node.get("Fee") if isinstance(fees_node, dict) else None):
        if not isinstance(fee, dict):
            continue
        amount = _decimal(_text(next(iter(_as_list(fee.get("Fee"))), None)))
        name = _text(fee.get("Name"))
        if name and amount is not None:
            fees[name] = amount

    item_id = _text(root.get("ItemID")) or None
    if item_id and not item_id.isdigit():
        item_id = None

    return TradingResponse(
        ack=_text(root.get("Ack")) or "Unknown",
        item_id=item_id,
        errors=errors,
        warnings=warnings,
        fees=fees,
        raw=xml,
    )


def _scan_trading_response(xml: str) -> TradingResponse:
    text = xml or ""
    messages = []
    for block in _ERRORS_BLOCK.findall(text):
        fields = {
            tag: (m.group(1).strip() if (m := re.search(rf"<{tag}>([^<]*)</{tag}>", block)) else "")
            for tag in ("SeverityCode", "ErrorCode", "ShortMessage", "LongMessage")
        }
        messages.append(_message(fields))
    errors, warnings = _split_messages(messages)

    fees = {}
    for name, value in _FEE.findall(text):
        amount = _decimal(value)
        if amount is not None:
            fees[name] = amount

    ack = _ACK.search(text)
    item_id = _ITEM_ID.search(text)
    return TradingResponse(
        ack=ack.group(1).strip() if ack else "Unknown",
        item_id=item_id.group(1) if item_id else None,
        errors=errors,
        warnings=warnings,
        fees=fees,
        raw=text,
    )
