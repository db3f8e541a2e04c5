"""Tests for item-specific attribute extractors."""

import pytest

from listora.content.extractors import (
    EBAY_DEFAULT_BRAND,
    EBAY_DEFAULT_COLOR,
    TEMPLATE_DEFAULT_BRAND,
    TEMPLATE_DEFAULT_COLOR,
    extract_brand,
    extract_capacity,
    extract_color,
    extract_department,
    extract_form_factor,
    extract_gender,
    extract_material,
    extract_model,
    extract_processor,
    extract_ram,
    extract_size,
    extract_storage_capacity,
    extract_value_for_aspect,
    extract_watch_movement,
)


class TestExtractBrand:
    """Brand detection order and defaults."""

    def test_known_brand(self):
        assert extract_brand("Sony WH-1000XM5 wireless headphones") == "Sony"

    def test_known_brand_needs_word_boundary(self):
        # "canon" inside "canonical" is not Canon
        assert extract_brand("The canonical cast iron pan") == EBAY_DEFAULT_BRAND

    def test_explicit_brand_line(self):
        assert extract_brand("Brand: Zenvo\nGreat sound") == "Zenvo"

    def test_made_by_phrase(self):
        assert extract_brand("Lovingly made by Kestrel in small batches") == "Kestrel"

    def test_possessive_in_title(self):
        assert extract_brand("", title="Marlowe's Cast Iron Skillet") == "Marlowe"

    def test_repeated_capitalized_word(self):
        text = "Aurora lamps glow softly. Every Aurora lamp ships ready to use."
        assert extract_brand(text) == "Aurora"

    def test_common_words_are_not_brands(self):
        text = "Wireless Bluetooth Headphones. Wireless Bluetooth Headphones."
        assert extract_brand(text) == EBAY_DEFAULT_BRAND

    def test_template_default(self):
        assert extract_brand("plain item", default=TEMPLATE_DEFAULT_BRAND) == "Generic"

    def test_empty_input(self):
        assert extract_brand("") == EBAY_DEFAULT_BRAND


class TestExtractColor:

    @pytest.mark.parametrize("text,expected", [
        ("Comes in jet black finish", "Black"),
        ("A charcoal melange knit", "Gray"),
        ("Navy blazer", "Blue"),
        ("rose gold case", "Gold"),
    ])
    def test_synonyms_map_to_canonical(self, text, expected):
        assert extract_color(text) == expected

    def test_defaults(self):
        assert extract_color("wireless bluetooth headphones", default=EBAY_DEFAULT_COLOR) == "Multicolor"
        assert extract_color("wireless bluetooth headphones") == TEMPLATE_DEFAULT_COLOR

    def test_word_boundary(self):
        # "tan" inside "stand" is not a color
        assert extract_color("a sturdy stand", default=EBAY_DEFAULT_COLOR) == "Multicolor"


class TestApparelExtractors:

    def test_material_precedence(self):
        assert extract_material("stainless steel with leather strap") == "Stainless Steel"
        assert extract_material("100% cotton tee") == "Cotton"
        assert extract_material("nothing here") == "Mixed Materials"

    def test_size(self):
        assert extract_size("Size: XL") == "XL"
        assert extract_size("fits large frames") == "L"
        assert extract_size("one size") == "M"

    def test_department_and_gender(self):
        assert extract_department("Women's running jacket") == "Women"
        assert extract_department("Men's oxford shirt") == "Men"
        assert extract_department("Unisex hoodie for men and women") == "Unisex Adult"
        assert extract_department("socks") == "Unisex Adult"
        assert extract_gender("Men's oxford shirt") == "male"
        assert extract_gender("socks") == "unisex"


class TestElectronicsExtractors:

    def test_phone_models(self):
        assert extract_model("Apple iPhone 15 Pro Max 256GB") == "iPhone 15 Pro Max"
        assert extract_model("Samsung Galaxy S23 Ultra") == "Galaxy S23 Ultra"

    def test_model_from_title_head(self):
        assert extract_model("", title="Zenvo Studio Monitor - Black", brand="Zenvo") == "Studio Monitor"

    def test_model_default(self):
        assert extract_model("") == "Standard Model"

    def test_storage_and_ram(self):
        assert extract_storage_capacity("512gb nvme drive") == "512 GB"
        assert extract_ram("16GB RAM and 1TB SSD") == "16 GB"
        assert extract_ram("no memory listed") == "8 GB"

    def test_processor(self):
        assert extract_processor("Intel Core i7-13700H") == "Intel Core i7"
        assert extract_processor("Apple M2 chip") == "Apple M2"
        assert extract_processor("AMD Ryzen 5 7530U") == "AMD Ryzen 5"

    def test_form_factor(self):
        assert extract_form_factor("true wireless earbuds") == "Earbud (In Ear)"
        assert extract_form_factor("over-ear cushions") == "Over-the-Ear"

    def test_watch_movement(self):
        assert extract_watch_movement("self-winding automatic movement") == "Automatic"
        assert extract_watch_movement("simple wristwatch") == "Quartz"

    def test_capacity(self):
        assert extract_capacity("5.8 qt basket") == "5.8 qt"
        assert extract_capacity("1.5 liters jar") == "1.5 L"


class TestExtractValueForAspect:
    """Aspect dispatch never returns an empty value."""

    def test_explicit_line_wins(self):
        content = "**Specifications**\n- Material: Recycled PET\n"
        assert extract_value_for_aspect("Material", "cotton", content=content) == "Recycled PET"

    def test_dispatches_by_keyword(self):
        text = "wireless bluetooth headphones"
        assert extract_value_for_aspect("Brand", text) == EBAY_DEFAULT_BRAND
        assert extract_value_for_aspect("Color", text) == EBAY_DEFAULT_COLOR
        assert extract_value_for_aspect("Connectivity", text) == "Wireless"

    def test_size_type_before_size(self):
        assert extract_value_for_aspect("Size Type", "big and tall tee") == "Big & Tall"

    def test_known_defaults(self):
        assert extract_value_for_aspect("MPN", "anything") == "Does Not Apply"

    def test_unknown_aspect_gets_standard(self):
        assert extract_value_for_aspect("Compatible Vehicle", "anything") == "Standard"

    @pytest.mark.parametrize("aspect", ["Brand", "Color", "Model", "Material", "Department", "Size"])
    def test_deterministic(self, aspect):
        text = "Black leather Men's jacket size: l"
        first = extract_value_for_aspect(aspect, text, title="Leather Jacket")
        assert first
        assert extract_value_for_aspect(aspect, text, title="Leather Jacket") == first
