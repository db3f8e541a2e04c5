"""Tests for CategoryClassifier and its fallback behaviour."""

from unittest.mock import AsyncMock, MagicMock

import httpx

from listora.categories.classifier import CategoryClassifier, build_category_query
from listora.categories.taxonomy import TaxonomyClient
from listora.core.exceptions import MarketplaceAuthError
from listora.core.models import ApplicationToken, CategorySource, ProductContent
from tests.conftest import GENERATED_HEADPHONES_CONTENT


def _token_manager(side_effect=None) -> MagicMock:
    manager = MagicMock()
    manager.get_application_token = AsyncMock(
        return_value=ApplicationToken(access_token="app-token"),
        side_effect=side_effect,
    )
    return manager


class RecordingTaxonomy:
    """MockTransport handler routing taxonomy calls by path."""

    def __init__(self, probe_status=200, suggestions=None, aspects=None, tree_id="0"):
        self.probe_status = probe_status
        self.tree_id = tree_id
        self.suggestions = suggestions or []
        self.aspects = aspects or []
        self.paths: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.paths.append(request.url.path)
        if request.url.path.endswith("/get_default_category_tree_id"):
            if self.probe_status != 200:
                return httpx.Response(self.probe_status, text="Service Unavailable")
            return httpx.Response(200, json={"categoryTreeId": self.tree_id})
        if request.url.path.endswith("/get_category_suggestions"):
            return httpx.Response(200, json={"categorySuggestions": self.suggestions})
        if request.url.path.endswith("/get_item_aspects_for_category"):
            return httpx.Response(200, json={"aspects": self.aspects})
        return httpx.Response(404)


def _classifier(settings, taxonomy: RecordingTaxonomy, token_manager=None) -> CategoryClassifier:
    transport = httpx.MockTransport(taxonomy)
    return CategoryClassifier(
        token_manager or _token_manager(),
        taxonomy_factory=lambda token: TaxonomyClient(token, settings=settings, transport=transport),
    )


class TestBuildCategoryQuery:

    def test_uses_generated_headline_core(self):
        content = ProductContent(product_name="x", generated_content=GENERATED_HEADPHONES_CONTENT)
        assert build_category_query(content) == "Wireless Noise Cancelling Over-Ear Headphones with"

    def test_strips_marketing_words(self):
        content = ProductContent(
            product_name="x",
            generated_content="**1. PRODUCT TITLE:**\nPremium Quality Stainless Steel Kettle - 1.7L\n",
        )
        assert build_category_query(content) == "Stainless Steel Kettle"

    def test_falls_back_to_product_text(self):
        content = ProductContent(product_name="Air Fryer", features="5.8 qt basket")
        assert build_category_query(content) == "Air Fryer 5.8 qt basket"


class TestCategoryClassifier:
    """Taxonomy happy path and every degradation step."""

    async def test_taxonomy_result(self, settings, headphones_content):
        taxonomy = RecordingTaxonomy(
            suggestions=[{"category": {"categoryId": "112529", "categoryName": "Headphones"}}],
            aspects=[
                {"localizedAspectName": "Brand", "aspectConstraint": {"aspectRequired": True}},
                {"localizedAspectName": "Form Factor", "aspectConstraint": {"aspectRequired": True}},
            ],
        )
        result = await _classifier(settings, taxonomy).classify(headphones_content)

        assert result.source == CategorySource.TAXONOMY_API
        assert result.category_id == "112529"
        assert result.required_aspects == ["Brand", "Form Factor"]
        assert result.from_taxonomy

    async def test_returned_tree_id_used_for_lookups(self, settings, headphones_content):
        taxonomy = RecordingTaxonomy(
            suggestions=[{"category": {"categoryId": "112529", "categoryName": "Headphones"}}],
            aspects=[{"localizedAspectName": "Brand", "aspectConstraint": {"aspectRequired": True}}],
            tree_id="3",
        )
        await _classifier(settings, taxonomy).classify(headphones_content)

        assert taxonomy.paths[1:] == [
            "/commerce/taxonomy/v1/category_tree/3/get_category_suggestions",
            "/commerce/taxonomy/v1/category_tree/3/get_item_aspects_for_category",
        ]

    async def test_probe_failure_short_circuits(self, settings, headphones_content):
        taxonomy = RecordingTaxonomy(probe_status=500)
        result = await _classifier(settings, taxonomy).classify(headphones_content)

        assert result.source == CategorySource.VERIFIED_FALLBACK
        assert result.category_id == "14969"
        # only the probe was attempted
        assert len(taxonomy.paths) == 1
        assert taxonomy.paths[0].endswith("/get_default_category_tree_id")

    async def test_no_suggestions_uses_fallback(self, settings):
        taxonomy = RecordingTaxonomy(suggestions=[])
        result = await _classifier(settings, taxonomy).classify(ProductContent(product_name="Air Fryer 5.8qt"))
        assert result.source == CategorySource.VERIFIED_FALLBACK
        assert result.category_id == "20625"

    async def test_category_without_aspects_uses_fallback(self, settings, headphones_content):
        taxonomy = RecordingTaxonomy(
            suggestions=[{"category": {"categoryId": "1", "categoryName": "Collectibles"}}],
            aspects=[],
        )
        result = await _classifier(settings, taxonomy).classify(headphones_content)
        assert result.source == CategorySource.VERIFIED_FALLBACK

    async def test_token_failure_uses_fallback(self, settings, headphones_content):
        taxonomy = RecordingTaxonomy()
        manager = _token_manager(side_effect=MarketplaceAuthError("invalid_client"))
        result = await _classifier(settings, taxonomy, manager).classify(headphones_content)

        assert result.category_id == "14969"
        assert taxonomy.paths == []

    async def test_transport_error_uses_fallback(self, settings, headphones_content):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        classifier = CategoryClassifier(
            _token_manager(),
            taxonomy_factory=lambda t: TaxonomyClient(t, settings=settings, transport=httpx.MockTransport(handler)),
        )
        result = await classifier.classify(headphones_content)
        assert result.source == CategorySource.VERIFIED_FALLBACK

    async def test_unmatched_product_gets_safe_category(self, settings):
        taxonomy = RecordingTaxonomy(probe_status=503)
        result = await _classifier(settings, taxonomy).classify(ProductContent(product_name="Soy candle"))
        assert result.source == CategorySource.BULLETPROOF_FALLBACK
        assert result.category_id == "9355"

    async def test_degradation_is_logged(self, settings, headphones_content, caplog):
        taxonomy = RecordingTaxonomy(probe_status=500)
        with caplog.at_level("WARNING", logger="listora.categories.classifier"):
            await _classifier(settings, taxonomy).classify(headphones_content)
        assert "ClassificationDegraded" in caplog.text
