"""
Unit tests for TitleOptimizer.

Tests the full optimization pipeline: clean → noise removal → deduplication →
padding → abbreviations → filler removal → truncation.
"""

import pytest

from listora.converters.title_optimizer import (
    AMAZON_TITLE_LIMIT,
    DEFAULT_TITLE,
    EBAY_TITLE_LIMIT,
    MIN_TITLE_LENGTH,
    TitleOptimizer,
)


@pytest.fixture
def optimizer():
    return TitleOptimizer()


# ─── Basic Behavior ──────────────────────────────────────


class TestBasicBehavior:
    """Tests for basic optimize() behavior."""

    def test_empty_title_gets_padded_default(self, optimizer):
        result = optimizer.optimize("")
        assert result.startswith(DEFAULT_TITLE)
        assert result == "Quality Product - Top Rated Item"

    def test_none_title(self, optimizer):
        assert optimizer.optimize(None)

    def test_fitting_title_unchanged(self, optimizer):
        assert optimizer.optimize("Wireless Bluetooth Headphones") == "Wireless Bluetooth Headphones"

    def test_always_within_80_chars(self, optimizer):
        long_title = (
            "Samsung Galaxy S24 Ultra 512GB Unlocked 5G Smartphone with "
            "Titanium Frame and Advanced AI Camera System for Professional "
            "Photography and Video Recording in Phantom Black Color"
        )
        result = optimizer.optimize(long_title)
        assert len(result) <= EBAY_TITLE_LIMIT
        assert result.startswith("Samsung")

    def test_amazon_limit_keeps_longer_titles(self, optimizer):
        title = (
            "Stainless Steel Insulated Water Bottle with Straw Lid and Carry Handle, "
            "Leak Proof Double Wall Vacuum Flask for Gym Office Hiking"
        )
        result = optimizer.optimize(title, max_length=AMAZON_TITLE_LIMIT)
        assert result == title


# ─── Cleaning ────────────────────────────────────────────


class TestCleaning:

    def test_strips_markdown_and_numbering(self, optimizer):
        assert optimizer.optimize("**1. Wireless Bluetooth Headphones**") == "Wireless Bluetooth Headphones"

    def test_removes_marketing_tail(self, optimizer):
        result = optimizer.optimize("Cotton Crew Neck T-Shirt for Men, Perfect for Summer Days")
        assert result == "Cotton Crew Neck T-Shirt for Men"

    def test_removes_badges(self, optimizer):
        result = optimizer.optimize("Ninja™ Air Fryer Max XL Best Seller!")
        assert "™" not in result
        assert "Best Seller" not in result
        assert "!" not in result


# ─── Deduplication ───────────────────────────────────────


class TestDeduplication:

    def test_repeated_words_dropped(self, optimizer):
        result = optimizer.optimize("Headphones Wireless Headphones Bluetooth HEADPHONES")
        assert result == "Headphones Wireless Bluetooth"

    def test_short_words_only_dropped_back_to_back(self, optimizer):
        result = optimizer.optimize("Set of 2 Mugs of Stoneware Glaze")
        assert result == "Set of 2 Mugs of Stoneware Glaze"


# ─── Padding ─────────────────────────────────────────────


class TestPadding:

    def test_short_title_padded(self, optimizer):
        result = optimizer.optimize("Air Fryer")
        assert result == "Air Fryer - Premium Quality"
        assert len(result) >= MIN_TITLE_LENGTH

    def test_qualifier_skipped_when_words_repeat(self, optimizer):
        result = optimizer.optimize("Premium Mug")
        assert result == "Premium Mug - Top Rated Item"

    def test_analysis_records_padding(self, optimizer):
        analysis = optimizer.optimize_with_analysis("Desk Lamp")
        assert analysis.padded_with == "Premium Quality"
        assert analysis.fits_limit

    def test_changes_logged_at_debug(self, optimizer, caplog):
        with caplog.at_level("DEBUG", logger="listora.converters.title_optimizer"):
            optimizer.optimize("Desk Lamp")
        assert "'padded_with': 'Premium Quality'" in caplog.text
        assert "'optimized_length': 27" in caplog.text


# ─── Shortening ──────────────────────────────────────────


class TestShortening:

    def test_abbreviations_only_when_too_long(self, optimizer):
        assert "Bluetooth" in optimizer.optimize("Bluetooth Speaker for Outdoor Parties")

        long_title = (
            "Bluetooth Noise Cancelling Over Ear Headphones with Stainless Steel "
            "Headband and Rechargeable Battery Case"
        )
        analysis = optimizer.optimize_with_analysis(long_title)
        assert len(analysis.optimized) <= EBAY_TITLE_LIMIT
        assert "Bluetooth→BT" in analysis.abbreviations_applied

    def test_truncates_on_word_boundary(self, optimizer):
        title = " ".join(f"Word{i:02d}" for i in range(30))
        result = optimizer.optimize(title)
        assert len(result) <= EBAY_TITLE_LIMIT
        assert result.split()[-1].startswith("Word")
        assert len(result.split()[-1]) == 6
