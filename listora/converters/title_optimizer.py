"""
Marketplace title optimization.

Turns a generated headline or product name into a title that fits a
platform's character limit.

Pipeline:
    1. Clean: strip markdown, normalize whitespace and trailing punctuation
    2. Remove noise: marketing tails ("Perfect for ..."), badges, symbols
    3. Deduplicate: drop repeated words, case-insensitive, first one wins
    4. Pad: titles under 20 characters get a quality qualifier
    5. Shorten (only if still too long): abbreviations, filler words,
       then a cut at the last word boundary
"""

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

EBAY_TITLE_LIMIT = 80
AMAZON_TITLE_LIMIT = 200
MIN_TITLE_LENGTH = 20
DEFAULT_TITLE = "Quality Product"


@dataclass
class TitleAnalysis:
    """What the optimizer did to a title, for debug logging."""

    original: str
    optimized: str = ""
    max_length: int = EBAY_TITLE_LIMIT
    abbreviations_applied: list[str] = field(default_factory=list)
    words_removed: list[str] = field(default_factory=list)
    padded_with: str = ""
    was_truncated: bool = False

    @property
    def fits_limit(self) -> bool:
        return len(self.optimized) <= self.max_length

    def to_dict(self) -> dict:
        return {
            "original": self.original,
            "optimized": self.optimized,
            "optimized_length": len(self.optimized),
            "fits_limit": self.fits_limit,
            "abbreviations_applied": self.abbreviations_applied,
            "words_removed": self.words_removed,
            "padded_with": self.padded_with,
            "was_truncated": self.was_truncated,
        }


class TitleOptimizer:
    """
    Produces non-empty, deduplicated titles within a platform limit.

    Usage:
        optimizer = TitleOptimizer()
        title = optimizer.optimize("Wireless Bluetooth Headphones", max_length=80)
    """

    # (pattern, replacement, label), applied only when a title is too long
    ABBREVIATIONS: tuple[tuple[str, str, str], ...] = (
        (r"\bStainless\s+Steel\b", "SS", "Stainless Steel→SS"),
        (r"\bBluetooth\b", "BT", "Bluetooth→BT"),
        (r"\bWi-?Fi\b", "WiFi", "Wi-Fi→WiFi"),
        (r"\bNoise[\s-]+Cancell?ing\b", "NC", "Noise Cancelling→NC"),
        (r"\b(\d+)\s*Inch(?:es)?\b", r'\1"', 'Inches→"'),
        (r"\b(\d+(?:\.\d+)?)\s*Quarts?\b", r"\1qt", "Quarts→qt"),
        (r"\b(\d+(?:\.\d+)?)\s*Ounces?\b", r"\1oz", "Ounces→oz"),
        (r"\bGeneration\b", "Gen", "Generation→Gen"),
        (r"\bProfessional\b", "Pro", "Professional→Pro"),
        (r"\bAdjustable\b", "Adj", "Adjustable→Adj"),
        (r"\bRechargeable\b", "Rchg", "Rechargeable→Rchg"),
        (r"\bWaterproof\b", "WP", "Waterproof→WP"),
        (r"\bAccessories\b", "Accs", "Accessories→Accs"),
    )

    NOISE_PATTERNS: tuple[re.Pattern, ...] = (
        re.compile(r"\s*[-,:]?\s*\b(?:Perfect|Ideal|Great)\s+for\b.*$", re.IGNORECASE),
        re.compile(r"\b(?:Best\s+Seller|Limited\s+Time\s+(?:Offer|Deal)|Free\s+Shipping)\b", re.IGNORECASE),
        re.compile(r"\bAs\s+Seen\s+On\s+TV\b", re.IGNORECASE),
        re.compile(r"[™®©]+"),
        re.compile(r"[!]+"),
    )

    FILLER_WORDS = frozenset({
        "the", "a", "an", "and", "or", "in", "on", "at", "to", "of",
        "by", "from", "that", "this", "is", "are", "it", "its", "your",
        "our", "very", "most", "more", "also", "just", "only", "even",
    })

    # Tried in order; the first one that adds no repeated word is used.
    QUALIFIERS: tuple[str, ...] = ("Premium Quality", "Top Rated Item", "Great Value Pick")

    # ─── Public API ───────────────────────────────────────────

    def optimize(self, title: str | None, max_length: int = EBAY_TITLE_LIMIT) -> str:
        """
        Optimize a title for a marketplace listing.

        Args:
            title: Raw headline or product name.
            max_length: Platform character limit (80 eBay, 200 Amazon).

        Returns:
            A non-empty title of at most ``max_length`` characters.
        """
        analysis = self.optimize_with_analysis(title, max_length)
        if analysis.optimized != analysis.original:
            logger.debug(f"Title optimized: {analysis.to_dict()}")
        return analysis.optimized

    def optimize_with_analysis(
        self, title: str | None, max_length: int = EBAY_TITLE_LIMIT
    ) -> TitleAnalysis:
        analysis = TitleAnalysis(original=title or "", max_length=max_length)

        result = self._clean(title or "")
        result = self._remove_noise(result, analysis)
        result = self._deduplicate(result, analysis)
        if not result:
            result = DEFAULT_TITLE

        if len(result) < MIN_TITLE_LENGTH:
            result = self._pad(result, analysis)

        if len(result) > max_length:
            result = self._apply_abbreviations(result, analysis)
            result = self._deduplicate(result, analysis)
        if len(result) > max_length:
            result = self._remove_filler_words(result, analysis)
        if len(result) > max_length:
            result = self._truncate(result, max_length)
            analysis.was_truncated = True

        analysis.optimized = result or DEFAULT_TITLE[:max_length]
        return analysis

    # ─── Internal Pipeline Steps ──────────────────────────────

    def _clean(self, title: str) -> str:
        title = re.sub(r"[*_#`]+", "", title)
        title = re.sub(r"^\s*(?:\d+[.)]\s+|[-•]\s+)", "", title)
        title = re.sub(r"\s+", " ", title).strip()
        title = re.sub(r",\s*,", ",", title)
        title = re.sub(r"^[\s|\-–—:]+", "", title)
        title = re.sub(r"[\s,|\-–—:;.]+$", "", title)
        return title.strip().strip('"').strip()

    def _remove_noise(self, title: str, analysis: TitleAnalysis) -> str:
        result = title
        for pattern in self.NOISE_PATTERNS:
            cleaned = pattern.sub("", result)
            if cleaned != result:
                analysis.words_removed.extend(
                    m.strip() for m in pattern.findall(result) if isinstance(m, str) and m.strip()
                )
                result = cleaned
        result = re.sub(r"\s+", " ", result).strip()
        return re.sub(r"[,\-–—:\s]+$", "", result).strip()

    def _deduplicate(self, title: str, analysis: TitleAnalysis) -> str:
        """Drop repeated words case-insensitively, keeping the first occurrence.

        Words of one or two characters ("x", "of") are only dropped when they
        repeat back to back.
        """
        result: list[str] = []
        seen: set[str] = set()
        previous = ""

        for word in title.split():
            key = self._word_key(word)
            if not key:
                result.append(word)
                continue
            if key == previous or (len(key) > 2 and key in seen):
                analysis.words_removed.append(word)
                continue
            seen.add(key)
            previous = key
            result.append(word)

        return " ".join(result)

    def _pad(self, title: str, analysis: TitleAnalysis) -> str:
        present = {self._word_key(w) for w in title.split()}
        for qualifier in self.QUALIFIERS:
            if not any(self._word_key(w) in present for w in qualifier.split()):
                analysis.padded_with = qualifier
                return f"{title} - {qualifier}"
        return title

    def _apply_abbreviations(self, title: str, analysis: TitleAnalysis) -> str:
        result = title
        for pattern, replacement, label in self.ABBREVIATIONS:
            new_result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
            if new_result != result:
                analysis.abbreviations_applied.append(label)
                result = new_result
        return re.sub(r"\s+", " ", result).strip()

    def _remove_filler_words(self, title: str, analysis: TitleAnalysis) -> str:
        words = title.split()
        if not words:
            return ""

        # First word is usually the brand or product noun
        result = [words[0]]
        for word in words[1:]:
            if word.lower() in self.FILLER_WORDS:
                analysis.words_removed.append(word)
            else:
                result.append(word)
        return " ".join(result)

    def _truncate(self, title: str, max_length: int) -> str:
        """Cut at the last complete word within the limit."""
        if len(title) <= max_length:
            return title

        truncated = title[:max_length]
        last_space = truncated.rfind(" ")
        if last_space > max_length // 2:
            truncated = truncated[:last_space]
        return truncated.rstrip(" ,.-–—:;|")

    @staticmethod
    def _word_key(word: str) -> str:
        return word.lower().strip(",.;:-–—()[]\"'!?")
