"""
Keyword decision table for eBay categories.

Used whenever the Taxonomy API cannot produce a verified leaf category.
Rules are checked top to bottom and the first match wins, so narrow product
types sit above the generic ones that would otherwise swallow them:
headphones before phones, kitchen appliances before electronics, sneakers
before generic shoes, jeans before shirts.

Every category id here has been confirmed to accept AddFixedPriceItem calls.
"""

import logging
import re
from dataclasses import dataclass

from listora.core.models import CategoryFamily, CategoryResult, CategorySource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryRule:
    family: CategoryFamily
    category_id: str
    category_name: str
    keywords: tuple[str, ...] = ()
    pattern: re.Pattern | None = None

    def matches(self, text: str) -> bool:
        if any(keyword in text for keyword in self.keywords):
            return True
        return bool(self.pattern and self.pattern.search(text))


CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule(
        CategoryFamily.HEADPHONES,
        "14969",
        "Headphones",
        keywords=(
            "headphones", "headphone", "earbuds", "earbud", "airpods", "headset",
            "earphone", "noise cancelling", "noise canceling",
        ),
    ),
    CategoryRule(
        CategoryFamily.KITCHEN_APPLIANCE,
        "20625",
        "Small Kitchen Appliances",
        keywords=(
            "air fryer", "airfryer", "blender", "coffee maker", "espresso machine",
            "toaster", "pressure cooker", "instant pot", "slow cooker",
            "food processor", "stand mixer", "electric kettle", "juicer",
        ),
    ),
    CategoryRule(
        CategoryFamily.ATHLETIC_SHOES,
        "15709",
        "Athletic Shoes",
        keywords=(
            "sneaker", "running shoe", "athletic shoe", "trainers", "nike",
            "adidas", "shoe", "runner",
        ),
    ),
    CategoryRule(
        CategoryFamily.JEANS,
        "11554",
        "Jeans",
        keywords=("jeans", "denim pants", "skinny jean", "bootcut"),
    ),
    CategoryRule(
        CategoryFamily.SHIRT,
        "57990",
        "Casual Shirts",
        keywords=("t-shirt", "shirt", "polo", "linen", "blouse", "tee shirt"),
    ),
    CategoryRule(
        CategoryFamily.WATCH,
        "31387",
        "Wristwatches",
        keywords=("smartwatch", "wristwatch", "timepiece", "watch"),
    ),
    CategoryRule(
        CategoryFamily.LAPTOP,
        "177",
        "PC Laptops & Netbooks",
        keywords=("laptop", "macbook", "notebook", "chromebook", "computer"),
    ),
    CategoryRule(
        CategoryFamily.PHONE,
        "9355",
        "Cell Phones & Smartphones",
        keywords=("iphone", "smartphone", "android", "galaxy", "pixel"),
        # "phone" on its own, but not as the tail of headphone / earphone
        pattern=re.compile(r"\bphones?\b|\bcell\s*phone|\bmobile\s*phone"),
    ),
)

SAFE_CATEGORY = CategoryResult(
    category_id="9355",
    category_name="Cell Phones & Smartphones",
    source=CategorySource.BULLETPROOF_FALLBACK,
    family=CategoryFamily.GENERIC,
)

KNOWN_CATEGORY_IDS: frozenset[str] = frozenset(
    {rule.category_id for rule in CATEGORY_RULES} | {SAFE_CATEGORY.category_id}
)

FAMILY_BY_CATEGORY_ID: dict[str, CategoryFamily] = {}
for _rule in CATEGORY_RULES:
    FAMILY_BY_CATEGORY_ID.setdefault(_rule.category_id, _rule.family)


def detect_verified_category(text: str | None) -> CategoryResult:
    """
    First rule whose keywords appear in ``text`` (case-insensitive).

    Returns SAFE_CATEGORY when nothing matches. Never raises and never
    returns an empty category id.
    """
    lower = (text or "").lower()
    if lower:
        for rule in CATEGORY_RULES:
            if rule.matches(lower):
                logger.debug(f"Fallback table matched {rule.family} → {rule.category_id}")
                return CategoryResult(
                    category_id=rule.category_id,
                    category_name=rule.category_name,
                    source=CategorySource.VERIFIED_FALLBACK,
                    family=rule.family,
                )

    logger.info("No fallback rule matched, using the safe category")
    return SAFE_CATEGORY.model_copy()


def family_for_category(category_id: str) -> CategoryFamily:
    """Family of a known category id, GENERIC for anything else."""
    return FAMILY_BY_CATEGORY_ID.get(category_id, CategoryFamily.GENERIC)
