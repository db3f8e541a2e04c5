"""
eBay listing converter: product content + seller options → ListingDocument.

Pure and deterministic apart from the generated SKU timestamp. Missing
content degrades to documented defaults; only a missing price is refused.
"""

import logging
from typing import Any

from listora.content.normalizer import parse_sections
from listora.converters.base_converter import BaseConverter
from listora.converters.description_builder import EbayDescriptionBuilder
from listora.converters.item_specifics import ItemSpecificsBuilder
from listora.converters.title_optimizer import EBAY_TITLE_LIMIT, TitleOptimizer
from listora.core.models import (
    CategoryResult,
    ListingDocument,
    Platform,
    ProductContent,
    PublishingOptions,
)
from listora.listers.conditions import condition_label, map_condition

logger = logging.getLogger(__name__)

EBAY_MAX_IMAGES = 12


class EbayConverter(BaseConverter):
    """
    Converts generated product content into an eBay Trading API listing.

    Handles:
    - Title from the generated headline or product name (80 char max)
    - Mobile-first HTML description
    - Item specifics for the resolved category
    - Image selection (max 12, first is the gallery image)
    - Condition id for the category group
    """

    max_title_length = EBAY_TITLE_LIMIT
    sku_prefix = "LISTORA"

    def __init__(
        self,
        title_optimizer: TitleOptimizer | None = None,
        description_builder: EbayDescriptionBuilder | None = None,
        specifics_builder: ItemSpecificsBuilder | None = None,
        sandbox: bool = False,
    ):
        super().__init__(title_optimizer)
        self._description_builder = description_builder or EbayDescriptionBuilder()
        self._specifics_builder = specifics_builder or ItemSpecificsBuilder()
        self._sandbox = sandbox

    def build(
        self,
        content: ProductContent,
        options: PublishingOptions,
        images: list[str],
        category: CategoryResult,
        **kwargs: Any,
    ) -> ListingDocument:
        price = self.require_price(options)
        title = self.build_title(content)

        source_text = content.generated_content or "\n\n".join(
            p for p in (content.features, content.description) if p
        )
        sections = parse_sections(source_text)
        description = self._description_builder.build(sections, condition_label(options.condition))

        specifics = self._specifics_builder.build(content, category, title)
        pictures = [url.strip() for url in images if url and url.strip()][:EBAY_MAX_IMAGES]
        condition_id = map_condition(options.condition, category.category_id, self._sandbox)

        document = ListingDocument(
            platform=Platform.EBAY,
            title=title,
            description_html=description,
            price=price,
            quantity=options.quantity,
            sku=self.build_sku(options),
            images=pictures,
            item_specifics=specifics,
            category_id=category.category_id,
            category_name=category.category_name,
            condition_id=condition_id,
        )
        logger.info(
            f"Built eBay listing '{title}' ({len(title)} chars) in category {category.category_id}, "
            f"{len(specifics)} specifics, {len(pictures)} images"
        )
        return document
