"""
Seller condition → eBay ConditionID.

eBay accepts different condition ids per category group, and the sandbox
rejects some production ids for pre-owned items. The tables below list the
ids each group accepts; anything unlisted gets the universal table.
"""

from types import MappingProxyType

from listora.core.models import ItemCondition

NEW_CONDITION_ID = "1000"

ELECTRONICS_CATEGORY_IDS = frozenset({"9355", "177", "112529", "15052", "171485", "20667"})
APPAREL_CATEGORY_IDS = frozenset({"1059", "11554", "15709", "57989", "57990", "57991"})

# (production, sandbox)
_ELECTRONICS = MappingProxyType({
    ItemCondition.NEW: ("1000", "1000"),
    ItemCondition.USED_LIKE_NEW: ("2000", "1000"),
    ItemCondition.USED_VERY_GOOD: ("2500", "3000"),
    ItemCondition.USED_GOOD: ("3000", "3000"),
    ItemCondition.USED_ACCEPTABLE: ("7000", "7000"),
})

_APPAREL = MappingProxyType({
    ItemCondition.NEW: ("1000", "1000"),
    ItemCondition.USED_LIKE_NEW: ("1500", "1000"),
    ItemCondition.USED_VERY_GOOD: ("1750", "2000"),
    ItemCondition.USED_GOOD: ("2000", "2000"),
    ItemCondition.USED_ACCEPTABLE: ("3000", "3000"),
})

_UNIVERSAL = MappingProxyType({
    ItemCondition.NEW: ("1000", "1000"),
    ItemCondition.USED_LIKE_NEW: ("1000", "1000"),
    ItemCondition.USED_VERY_GOOD: ("3000", "3000"),
    ItemCondition.USED_GOOD: ("3000", "3000"),
    ItemCondition.USED_ACCEPTABLE: ("3000", "3000"),
})

CONDITION_LABELS = MappingProxyType({
    ItemCondition.NEW: "New",
    ItemCondition.USED_LIKE_NEW: "Used - Like New",
    ItemCondition.USED_VERY_GOOD: "Used - Very Good",
    ItemCondition.USED_GOOD: "Used - Good",
    ItemCondition.USED_ACCEPTABLE: "Used - Acceptable",
})


def map_condition(condition: ItemCondition | str, category_id: str, sandbox: bool = False) -> str:
    """ConditionID for ``condition`` in ``category_id``; unknown conditions map to new."""
    if category_id in ELECTRONICS_CATEGORY_IDS:
        table = _ELECTRONICS
    elif category_id in APPAREL_CATEGORY_IDS:
        table = _APPAREL
    else:
        table = _UNIVERSAL

    try:
        production_id, sandbox_id = table[ItemCondition(condition)]
    except ValueError:
        return NEW_CONDITION_ID
    return sandbox_id if sandbox else production_id


def condition_label(condition: ItemCondition | str) -> str:
    try:
        return CONDITION_LABELS[ItemCondition(condition)]
    except ValueError:
        return CONDITION_LABELS[ItemCondition.NEW]
