"""
eBay category classification.

One pass through the Taxonomy API with a fallback at every step:

    1. Application token (client credentials)
    2. Probe get_default_category_tree_id        non-2xx → fallback table
    3. get_category_suggestions for the product  empty   → fallback table
    4. Verify the top suggestion via its aspects non-2xx / no aspects → fallback table
    5. Any exception along the way               → fallback table

A classification failure never fails a publish; the fallback table always
produces a category that eBay has accepted before.
"""

import logging
import re
from collections.abc import Callable

from listora.categories.fallback import detect_verified_category, family_for_category
from listora.categories.taxonomy import TaxonomyClient, required_aspect_names
from listora.content.normalizer import extract_title
from listora.core.exceptions import ClassificationError
from listora.core.interfaces import IClassifiable
from listora.core.models import CategoryResult, CategorySource, ProductContent
from listora.listers.ebay_auth import TokenManager

logger = logging.getLogger(__name__)

TaxonomyFactory = Callable[[str], TaxonomyClient]

_MARKETING_WORDS = re.compile(
    r"\b(?:Affordable|Premium|Quality|Professional|Advanced|Enhanced|Ultimate|Best)\b",
    re.IGNORECASE,
)


def build_category_query(content: ProductContent) -> str:
    """
    Search text for category suggestions.

    The generated headline with marketing words and anything after the
    first dash or comma removed, when that leaves more than 10 characters;
    otherwise the start of the product text.
    """
    title = extract_title(content.generated_content)
    if title:
        core = _MARKETING_WORDS.sub("", title)
        core = re.sub(r"\b(?:Perfect|Ideal)\s+for\b.*", "", core, flags=re.IGNORECASE)
        core = re.split(r"\s[-–]\s|,", core, maxsplit=1)[0]
        core = re.sub(r"\s+", " ", core).strip()
        if len(core) > 10:
            return core[:50]

    text = " ".join(p for p in (content.product_name, content.features, content.description) if p)
    return text[:100]


class CategoryClassifier(IClassifiable):
    """
    Resolves an eBay leaf category for a product.

    Usage:
        classifier = CategoryClassifier(token_manager)
        category = await classifier.classify(product_content)
    """

    def __init__(
        self,
        token_manager: TokenManager,
        taxonomy_factory: TaxonomyFactory | None = None,
    ):
        self._token_manager = token_manager
        self._taxonomy_factory = taxonomy_factory or (lambda token: TaxonomyClient(token))

    async def classify(self, content: ProductContent) -> CategoryResult:
        try:
            return await self._classify_with_taxonomy(content)
        except Exception as e:
            # token grant, transport, HTTP status and JSON decode failures alike
            return self._degrade(content, f"{type(e).__name__}: {e}")

    async def _classify_with_taxonomy(self, content: ProductContent) -> CategoryResult:
        app_token = await self._token_manager.get_application_token()
        taxonomy = self._taxonomy_factory(app_token.access_token)

        tree_id = await self._probe(taxonomy)
        if tree_id is None:
            return self._degrade(content, "taxonomy probe failed")

        query = build_category_query(content)
        suggestions = await taxonomy.get_category_suggestions(query, tree_id)
        if not suggestions:
            return self._degrade(content, f"no suggestions for {query!r}")

        best = suggestions[0]
        aspects = await taxonomy.get_item_aspects(best["category_id"], tree_id)
        if not aspects:
            return self._degrade(content, f"category {best['category_id']} has no aspects")

        required = required_aspect_names(aspects)
        logger.info(
            f"Taxonomy API category {best['category_id']} ({best['category_name']}), "
            f"{len(required)} required aspects"
        )
        return CategoryResult(
            category_id=best["category_id"],
            category_name=best["category_name"],
            source=CategorySource.TAXONOMY_API,
            family=family_for_category(best["category_id"]),
            required_aspects=required,
        )

    async def _probe(self, taxonomy: TaxonomyClient) -> str | None:
        try:
            return await taxonomy.get_default_category_tree_id()
        except ClassificationError as e:
            logger.info(f"Taxonomy API unavailable: {e.message}")
            return None

    def _degrade(self, content: ProductContent, reason: str) -> CategoryResult:
        result = detect_verified_category(content.full_text)
        logger.warning(
            f"ClassificationDegraded: {reason}; using {result.source} category "
            f"{result.category_id} ({result.category_name})"
        )
        return result
