"""Tests for ItemSpecificsBuilder."""

import pytest

from listora.converters.item_specifics import MAX_ASPECT_LENGTH, ItemSpecificsBuilder
from listora.core.models import CategoryFamily, CategoryResult, CategorySource, ProductContent


@pytest.fixture
def builder() -> ItemSpecificsBuilder:
    return ItemSpecificsBuilder()


def _fallback(family: CategoryFamily, category_id: str) -> CategoryResult:
    return CategoryResult(category_id=category_id, source=CategorySource.VERIFIED_FALLBACK, family=family)


def _as_dict(specifics) -> dict[str, str]:
    return {s.name: s.values[0] for s in specifics}


class TestFallbackFamilies:
    """Fallback categories get Brand, Color and a fixed family set."""

    def test_headphones_defaults(self, builder):
        content = ProductContent(product_name="Wireless Bluetooth Headphones")
        specifics = builder.build(content, _fallback(CategoryFamily.HEADPHONES, "14969"), "Wireless Bluetooth Headphones")

        values = _as_dict(specifics)
        assert [s.name for s in specifics][:2] == ["Brand", "Color"]
        assert values["Brand"] == "Unbranded"
        assert values["Color"] == "Multicolor"
        assert values["Type"] == "Headphones"
        assert values["Connectivity"] == "Wireless"
        assert values["Form Factor"] == "Over-the-Ear"

    def test_kitchen_type_from_text(self, builder):
        content = ProductContent(product_name="Cosori 5.8 qt Air Fryer 1700W")
        values = _as_dict(builder.build(content, _fallback(CategoryFamily.KITCHEN_APPLIANCE, "20625")))
        assert values["Brand"] == "Cosori"
        assert values["Type"] == "Air Fryer"
        assert values["Power"] == "1700 W"
        assert values["Capacity"] == "5.8 qt"

    def test_shirt_family(self, builder):
        content = ProductContent(product_name="Men's Navy Cotton Polo Shirt, Size: L")
        values = _as_dict(builder.build(content, _fallback(CategoryFamily.SHIRT, "57990")))
        assert values["Department"] == "Men"
        assert values["Color"] == "Blue"
        assert values["Material"] == "Cotton"
        assert values["Size"] == "L"
        assert values["Sleeve Length"] == "Short Sleeve"


class TestTaxonomyAspects:
    """Taxonomy categories fill their required aspects."""

    def test_required_aspects_filled(self, builder):
        category = CategoryResult(
            category_id="112529",
            source=CategorySource.TAXONOMY_API,
            required_aspects=["Brand", "Type", "Model"],
        )
        content = ProductContent(product_name="Sony WH-1000XM5 Headphones")
        specifics = builder.build(content, category, "Sony WH-1000XM5 Headphones")

        names = [s.name for s in specifics]
        assert names == ["Brand", "Color", "Type", "Model"]
        assert _as_dict(specifics)["Brand"] == "Sony"

    def test_few_aspects_topped_up_with_family_set(self, builder):
        category = CategoryResult(
            category_id="112529",
            source=CategorySource.TAXONOMY_API,
            family=CategoryFamily.GENERIC,
            required_aspects=[],
        )
        specifics = builder.build(ProductContent(product_name="Desk organiser"), category)
        assert "Model" in [s.name for s in specifics]


class TestValidation:

    def test_names_unique_case_insensitive(self, builder):
        category = CategoryResult(
            category_id="1",
            source=CategorySource.TAXONOMY_API,
            required_aspects=["brand", "COLOR", "Material"],
        )
        specifics = builder.build(ProductContent(product_name="Leather wallet"), category)
        lowered = [s.name.lower() for s in specifics]
        assert len(lowered) == len(set(lowered))

    def test_values_never_blank_and_bounded(self, builder):
        category = CategoryResult(
            category_id="1",
            source=CategorySource.TAXONOMY_API,
            required_aspects=["X" * 100],
        )
        specifics = builder.build(ProductContent(product_name="Thing"), category)
        for spec in specifics:
            assert spec.values[0].strip()
            assert len(spec.name) <= MAX_ASPECT_LENGTH
            assert len(spec.values[0]) <= MAX_ASPECT_LENGTH
