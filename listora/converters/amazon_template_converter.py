"""
Amazon template converter: product content → Seller Central flat-file fields.

No API call is involved. The converter picks a product type from the text,
fills the common flat-file columns and appends the columns that product
type needs, then renders the upload file.

Product types:
    AIR_FRYER — kitchen appliance columns (material, wattage, capacity)
    WATCH     — watch columns (movement, water resistance); also the default
    SHOES     — footwear columns (outer material, closure, width)
    CLOTHING  — apparel columns (material, size, sleeve)
"""

import logging
import re
from dataclasses import dataclass
from typing import Any

from listora.content.extractors import (
    TEMPLATE_DEFAULT_BRAND,
    TEMPLATE_DEFAULT_COLOR,
    extract_brand,
    extract_capacity,
    extract_color,
    extract_department,
    extract_gender,
    extract_material,
    extract_power,
    extract_size,
    extract_sleeve_length,
    extract_watch_movement,
)
from listora.content.normalizer import parse_sections
from listora.converters.base_converter import BaseConverter
from listora.converters.title_optimizer import AMAZON_TITLE_LIMIT
from listora.core.models import CategoryResult, ProductContent, PublishingOptions, TemplateDocument
from listora.listers.amazon_template import render_flat_file

logger = logging.getLogger(__name__)

MAX_OTHER_IMAGES = 8
MAX_BULLET_POINTS = 5
MAX_KEYWORDS_LENGTH = 250
MAX_DESCRIPTION_LENGTH = 2000

DEFAULT_PRODUCT_TYPE = "WATCH"

_KEYWORD_STOPWORDS = frozenset({
    "a", "an", "and", "the", "for", "with", "of", "in", "on", "to", "by",
    "premium", "quality", "top", "rated", "item", "great", "value", "pick",
})


@dataclass(frozen=True)
class ProductTypeProfile:
    feed_product_type: str
    item_type: str
    template_category: str


PRODUCT_TYPES: dict[str, ProductTypeProfile] = {
    "AIR_FRYER": ProductTypeProfile("kitchen", "air-fryers", "home"),
    "WATCH": ProductTypeProfile("watch", "wrist-watches", "ce_jewelry"),
    "SHOES": ProductTypeProfile("shoes", "athletic-shoes", "shoes"),
    "CLOTHING": ProductTypeProfile("shirt", "shirts", "clothing"),
}

# Keywords checked in order; first hit wins
_PRODUCT_TYPE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("AIR_FRYER", ("air fryer", "fryer")),
    ("WATCH", ("watch", "timepiece")),
    ("SHOES", ("shoe", "sneaker")),
    ("CLOTHING", ("clothing", "shirt")),
)


def detect_product_type(text: str) -> str:
    lower = (text or "").lower()
    for product_type, keywords in _PRODUCT_TYPE_KEYWORDS:
        if any(keyword in lower for keyword in keywords):
            return product_type
    return DEFAULT_PRODUCT_TYPE


def amazon_department(text: str) -> str:
    return {"Men": "mens", "Women": "womens", "Kids": "kids"}.get(extract_department(text), "unisex-adult")


def build_keywords(title: str) -> str:
    """Search terms from the title: distinct lower-case words, stopwords dropped."""
    words: list[str] = []
    for word in re.findall(r"[a-z0-9]+", title.lower()):
        if len(word) > 1 and word not in _KEYWORD_STOPWORDS and word not in words:
            words.append(word)
    return " ".join(words)[:MAX_KEYWORDS_LENGTH].strip()


class AmazonTemplateConverter(BaseConverter):
    """
    Builds a TemplateDocument for the Seller Central upload flow.

    Usage:
        converter = AmazonTemplateConverter()
        document = converter.build(content, options, images)
    """

    max_title_length = AMAZON_TITLE_LIMIT
    sku_prefix = "LISTORA"

    def build(
        self,
        content: ProductContent,
        options: PublishingOptions,
        images: list[str],
        category: CategoryResult | None = None,
        product_type: str | None = None,
        **kwargs: Any,
    ) -> TemplateDocument:
        price = self.require_price(options)
        text = content.full_text
        product_type = (product_type or "").upper()
        if product_type not in PRODUCT_TYPES:
            product_type = detect_product_type(text)
        profile = PRODUCT_TYPES[product_type]

        title = self.build_title(content)
        sku = self.build_sku(options)
        sections = parse_sections(content.generated_content or content.description)
        original_text = " ".join(
            p for p in (content.product_name, content.generated_content, content.features, content.description) if p
        )
        brand = extract_brand(original_text, title, default=TEMPLATE_DEFAULT_BRAND)
        pictures = [url.strip() for url in images if url and url.strip()]

        fields: dict[str, str] = {
            "feed_product_type": profile.feed_product_type,
            "item_sku": sku,
            "brand_name": brand,
            "item_name": title,
            "external_product_id": "",
            "external_product_id_type": "",
            "item_type": profile.item_type,
            "standard_price": f"{price:.2f}",
            "quantity": str(options.quantity),
            "main_image_url": pictures[0] if pictures else "",
        }
        others = pictures[1:1 + MAX_OTHER_IMAGES]
        for i in range(MAX_OTHER_IMAGES):
            fields[f"other_image_url{i + 1}"] = others[i] if i < len(others) else ""

        description = sections.full_description or content.description or title
        fields["product_description"] = description[:MAX_DESCRIPTION_LENGTH]
        bullets = sections.bullet_points[:MAX_BULLET_POINTS]
        for i in range(MAX_BULLET_POINTS):
            fields[f"bullet_point{i + 1}"] = bullets[i] if i < len(bullets) else ""

        fields["generic_keywords"] = build_keywords(title)
        fields["condition_type"] = "New"
        fields["manufacturer"] = brand
        fields["color_name"] = extract_color(text, default=TEMPLATE_DEFAULT_COLOR)
        fields.update(self._type_fields(product_type, text))

        document = TemplateDocument(
            product_type=product_type,
            sku=sku,
            fields=fields,
            filename=f"amazon-template-{sku}-{product_type}.txt",
            content=render_flat_file(fields, profile.template_category),
        )
        logger.info(f"Built Amazon {product_type} template {sku} with {len(fields)} columns, {len(pictures)} images")
        return document

    def _type_fields(self, product_type: str, text: str) -> dict[str, str]:
        if product_type == "AIR_FRYER":
            return {
                "material_type": extract_material(text, default="Stainless Steel"),
                "wattage": extract_power(text, default="1500 W"),
                "capacity": extract_capacity(text, default="5 qt"),
                "special_features": "Digital Display, Timer, Non-stick Coating",
                "included_components": "Air Fryer, Basket, Manual",
                "number_of_items": "1",
            }
        if product_type == "SHOES":
            return {
                "outer_material_type": extract_material(text, default="Synthetic"),
                "closure_type": "Lace Up",
                "target_gender": extract_gender(text),
                "department_name": amazon_department(text),
                "shoe_width": "Medium",
                "size_name": "One Size",
            }
        if product_type == "CLOTHING":
            return {
                "material_type": extract_material(text, default="Cotton"),
                "target_gender": extract_gender(text),
                "department_name": amazon_department(text),
                "size_name": extract_size(text),
                "sleeve_type": extract_sleeve_length(text),
            }
        return {
            "target_gender": extract_gender(text),
            "department_name": amazon_department(text),
            "watch_movement_type": extract_watch_movement(text),
            "water_resistance_level": "water_resistant_30_meters",
            "item_shape": "Round",
            "warranty_type": "Limited Warranty",
        }
