"""
eBay item specifics (aspects) for a listing.

Brand and Color always lead the list. Categories verified through the
Taxonomy API carry the names of their required aspects and each one is
filled from the product text. Fallback categories get a fixed aspect set
per product family.
"""

import logging
from types import MappingProxyType

from listora.content.extractors import (
    DEFAULT_VALUE,
    EBAY_DEFAULT_BRAND,
    EBAY_DEFAULT_COLOR,
    extract_appliance_type,
    extract_brand,
    extract_color,
    extract_value_for_aspect,
)
from listora.core.models import CategoryFamily, CategoryResult, ItemSpecific, ProductContent

logger = logging.getLogger(__name__)

# eBay rejects aspect names and values longer than this
MAX_ASPECT_LENGTH = 65

# Below this many specifics a taxonomy category also gets its family set
MIN_SPECIFICS = 3

_APPAREL = ("Department", "Size", "Size Type", "Material")

FAMILY_ASPECTS: MappingProxyType = MappingProxyType({
    CategoryFamily.PHONE: ("Model", "Storage Capacity", "Network", "Operating System"),
    CategoryFamily.LAPTOP: ("Screen Size", "Processor", "RAM Size", "Storage Type", "Operating System"),
    CategoryFamily.WATCH: ("Type", "Movement", "Band Material", "Case Material"),
    CategoryFamily.HEADPHONES: ("Type", "Connectivity", "Form Factor"),
    CategoryFamily.ATHLETIC_SHOES: _APPAREL,
    CategoryFamily.JEANS: _APPAREL,
    CategoryFamily.SHIRT: (*_APPAREL, "Sleeve Length"),
    CategoryFamily.KITCHEN_APPLIANCE: ("Type", "Power", "Capacity"),
    CategoryFamily.GENERIC: ("Model", "Type"),
})

_FAMILY_TYPES = MappingProxyType({
    CategoryFamily.WATCH: "Wristwatch",
    CategoryFamily.HEADPHONES: "Headphones",
})


class ItemSpecificsBuilder:
    """
    Builds the ItemSpecifics list for one product and category.

    Usage:
        builder = ItemSpecificsBuilder()
        specifics = builder.build(content, category, title)
    """

    def build(
        self,
        content: ProductContent,
        category: CategoryResult,
        title: str = "",
    ) -> list[ItemSpecific]:
        """
        Ordered, de-duplicated item specifics. Never empty; every value is
        a non-empty string.
        """
        original_text = " ".join(
            p for p in (content.product_name, content.generated_content, content.features, content.description) if p
        )
        text = content.full_text
        generated = content.generated_content or ""

        pairs: list[tuple[str, str]] = [
            ("Brand", extract_brand(original_text, title, default=EBAY_DEFAULT_BRAND)),
            ("Color", extract_color(text, default=EBAY_DEFAULT_COLOR)),
        ]

        if category.from_taxonomy:
            for aspect in category.required_aspects:
                pairs.append((aspect, extract_value_for_aspect(aspect, text, generated, title)))

        if not category.from_taxonomy or len(_unique_names(pairs)) < MIN_SPECIFICS:
            for aspect in FAMILY_ASPECTS.get(category.family, FAMILY_ASPECTS[CategoryFamily.GENERIC]):
                pairs.append((aspect, self._family_value(aspect, category.family, text, generated, title)))

        specifics = self._validate(pairs)
        logger.debug(
            f"Item specifics for category {category.category_id} ({category.source}): "
            + ", ".join(f"{s.name}={s.values[0]}" for s in specifics)
        )
        return specifics

    def _family_value(self, aspect: str, family: CategoryFamily, text: str, generated: str, title: str) -> str:
        if aspect == "Type":
            if family == CategoryFamily.KITCHEN_APPLIANCE:
                return extract_appliance_type(text)
            return _FAMILY_TYPES.get(family, DEFAULT_VALUE)
        return extract_value_for_aspect(aspect, text, generated, title)

    def _validate(self, pairs: list[tuple[str, str]]) -> list[ItemSpecific]:
        """Drop blank entries and repeated names (case-insensitive, first wins)."""
        seen: set[str] = set()
        specifics: list[ItemSpecific] = []
        for name, value in pairs:
            name = (name or "").strip()[:MAX_ASPECT_LENGTH]
            value = (value or "").strip()[:MAX_ASPECT_LENGTH].strip()
            if not name or not value or value.lower() in ("undefined", "null", "none"):
                continue
            if name.lower() in seen:
                continue
            seen.add(name.lower())
            specifics.append(ItemSpecific(name=name, values=[value]))

        if not specifics:
            specifics.append(ItemSpecific(name="Type", values=[DEFAULT_VALUE]))
        return specifics


def _unique_names(pairs: list[tuple[str, str]]) -> set[str]:
    return {name.lower() for name, value in pairs if value}
