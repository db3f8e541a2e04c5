"""
Text cleanup and section parsing for AI-generated product copy.

Generated content arrives as loosely formatted markdown with numbered bold
headings:

    **1. PRODUCT TITLE/HEADLINE:**
    **2. KEY SELLING POINTS:**
    **3. DETAILED PRODUCT DESCRIPTION:**
    **4. INSTAGRAM CAPTION:**
    **5. BLOG INTRO:**
    **6. CALL-TO-ACTION:**

Only sections 1-3 feed marketplace listings; social and blog copy is
stripped. Nothing in this module raises on bad input.
"""

import logging
import re
from types import MappingProxyType

from listora.core.models import ContentSections

logger = logging.getLogger(__name__)


# ─── Character Repair Tables ──────────────────────────────────

# UTF-8 bytes decoded as cp1252. Longest sequences first.
MOJIBAKE = MappingProxyType({
    "â€™": "'",
    "â€˜": "'",
    "â€œ": '"',
    "â€\x9d": '"',
    "â€": '"',
    "â€“": "-",
    "â€”": "-",
    'â€"': "-",
    "â€¦": "...",
    "â€¢": "-",
    "Â®": "",
    "Â©": "",
    "Â°": " deg",
    "Â ": " ",
    "Ã©": "é",
    "Ã¨": "è",
    "Ã¡": "á",
    "Ã ": "à",
    "Ã³": "ó",
    "Ã±": "ñ",
    "Ã¼": "ü",
    "Ã¶": "ö",
    "Ã¤": "ä",
    "ÃŸ": "ß",
    "Ã§": "ç",
    "Ã­": "í",
    "Ãº": "ú",
})
_MOJIBAKE_ORDER = tuple(sorted(MOJIBAKE, key=len, reverse=True))

TRANSLITERATION = MappingProxyType({
    "á": "a", "à": "a", "â": "a", "ä": "a", "ã": "a", "å": "a",
    "é": "e", "è": "e", "ê": "e", "ë": "e",
    "í": "i", "ì": "i", "î": "i", "ï": "i",
    "ó": "o", "ò": "o", "ô": "o", "ö": "o", "õ": "o", "ø": "o",
    "ú": "u", "ù": "u", "û": "u", "ü": "u",
    "ñ": "n", "ç": "c", "ß": "ss", "æ": "ae", "œ": "oe",
    "Á": "A", "À": "A", "Â": "A", "Ä": "A", "Ã": "A", "Å": "A",
    "É": "E", "È": "E", "Ê": "E", "Ë": "E",
    "Í": "I", "Ì": "I", "Î": "I", "Ï": "I",
    "Ó": "O", "Ò": "O", "Ô": "O", "Ö": "O", "Õ": "O", "Ø": "O",
    "Ú": "U", "Ù": "U", "Û": "U", "Ü": "U",
    "Ñ": "N", "Ç": "C",
    "‘": "'", "’": "'", "‚": "'", "′": "'",
    "“": '"', "”": '"', "„": '"', "″": '"',
    "–": "-", "—": "-", "−": "-", "•": "-",
    "…": "...", " ": " ", "°": " deg", "×": "x",
    "™": "", "®": "", "©": "",
})
_TRANSLATE = str.maketrans(dict(TRANSLITERATION))


# ─── Section Vocabulary ───────────────────────────────────────

SECTION_HEADINGS = MappingProxyType({
    1: r"PRODUCT\s+TITLE(?:\s*/\s*HEADLINE)?",
    2: r"KEY\s+SELLING\s+POINTS",
    3: r"DETAILED\s+PRODUCT\s+DESCRIPTION",
    4: r"INSTAGRAM\s+CAPTION",
    5: r"BLOG\s+INTRO",
    6: r"CALL[\s-]*TO[\s-]*ACTION",
})

_HEADING = re.compile(r"\*\*\s*(\d)\.\s*([^*\n]*?)\s*:?\s*\*\*:?", re.IGNORECASE)
_BULLET = re.compile(r"^\s*[-•*]\s*\*\*([^*\n]+?):?\*\*\s*:?\s*(.+)$", re.MULTILINE)
_SENTENCE_SPLIT = re.compile(r"(?<=[.!?])\s+|[.!?]+$")

RICH_DETAIL_KEYWORDS = (
    "material", "crafted", "designed", "features", "dimension", "built",
    "premium", "quality", "technology", "comfort", "construction", "engineered",
    "durable", "capacity", "battery", "fabric", "stainless", "leather",
)

# Social / promotional leakage removed from description sections.
_LEAKAGE_PATTERNS = (
    re.compile(r"#\w+"),
    re.compile(r"[\U0001F300-\U0001FAFF☀-➿]"),
    re.compile(r"Tap the link in our bio.*", re.IGNORECASE),
    re.compile(r"Ready to own.*", re.IGNORECASE),
    re.compile(r"Visit our.*store.*", re.IGNORECASE),
    re.compile(r"Shop now.*", re.IGNORECASE),
)
_LEAKAGE_LINE_MARKERS = ("instagram", "blog intro", "call-to-action", "link in bio")

FALLBACK_BULLETS = (
    "Premium Quality: Built with superior materials and craftsmanship",
    "Modern Design: Stylish and contemporary aesthetic",
    "Enhanced Performance: Optimized for reliable daily use",
    "Professional Grade: Designed for discerning customers",
)
FALLBACK_HIGHLIGHT = "Premium quality product designed for style and performance."
FALLBACK_FEATURES = (
    "Built with quality materials",
    "Professional craftsmanship",
    "Reliable performance",
)
FALLBACK_SPECIFICATIONS = (
    "Quality: Premium Grade",
    "Style: Modern Design",
    "Performance: Reliable",
)

MAX_BULLETS = 5


# ─── Normalization ────────────────────────────────────────────


def repair_mojibake(text: str) -> str:
    """Replace UTF-8-read-as-cp1252 sequences with the intended characters."""
    if not text or "â" not in text and "Ã" not in text and "Â" not in text:
        return text or ""
    for bad in _MOJIBAKE_ORDER:
        text = text.replace(bad, MOJIBAKE[bad])
    return text


def to_ascii(text: str) -> str:
    """Transliterate known characters and drop any other non-ASCII."""
    text = (text or "").translate(_TRANSLATE)
    return text.encode("ascii", "ignore").decode("ascii")


def strip_markdown(text: str) -> str:
    """Remove emphasis, heading, bullet and numbered-list markers."""
    text = re.sub(r"\*\*|__", "", text)
    text = re.sub(r"(?<!\w)[*_](?=\S)|(?<=\S)[*_](?!\w)", "", text)
    text = re.sub(r"^\s*#{1,6}\s*", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*[-•*+]\s+", "", text, flags=re.MULTILINE)
    text = re.sub(r"^\s*\d+[.)]\s+", "", text, flags=re.MULTILINE)
    return text


def normalize(raw_text: str | None) -> str:
    """
    Clean marketing copy down to plain single-spaced ASCII.

    Mojibake is repaired before transliteration, so ``"Itâ€™s"`` becomes
    ``"It's"`` rather than losing the apostrophe.
    """
    if not raw_text:
        return ""
    text = repair_mojibake(raw_text)
    text = to_ascii(text)
    text = strip_markdown(text)
    return re.sub(r"\s+", " ", text).strip()


def clean_product_name(name: str | None) -> str:
    """Product name with markdown and encoding junk removed; never empty."""
    cleaned = normalize(name)
    return cleaned or "Quality Product"


# ─── Section Parsing ──────────────────────────────────────────


def _split_sections(content: str) -> dict[int, str]:
    """Map heading number → body text for every recognised numbered heading."""
    matches = list(_HEADING.finditer(content))
    sections: dict[int, str] = {}
    for i, match in enumerate(matches):
        number = int(match.group(1))
        pattern = SECTION_HEADINGS.get(number)
        if pattern is None or not re.fullmatch(pattern, match.group(2).strip(), re.IGNORECASE):
            continue
        end = matches[i + 1].start() if i + 1 < len(matches) else len(content)
        sections.setdefault(number, content[match.end():end].strip())
    return sections


def _parse_bullets(section: str) -> list[str]:
    bullets: list[str] = []
    for lead, text in _BULLET.findall(section):
        lead = normalize(lead).rstrip(":")
        text = normalize(text)
        if 3 <= len(lead) < 50 and len(text) > 10:
            bullets.append(f"{lead}: {text}")
    return bullets[:MAX_BULLETS]


def _remove_leakage(text: str) -> str:
    lines = [
        line for line in text.splitlines()
        if not any(marker in line.lower() for marker in _LEAKAGE_LINE_MARKERS)
    ]
    text = "\n".join(lines)
    for pattern in _LEAKAGE_PATTERNS:
        text = pattern.sub("", text)
    return text


def _detail_score(sentence: str) -> int:
    lower = sentence.lower()
    return sum(1 for keyword in RICH_DETAIL_KEYWORDS if keyword in lower)


def rank_sentences(text: str) -> list[str]:
    """
    Sentences longer than 20 characters, most descriptive first.

    The sort is stable: sentences with the same keyword score keep their
    original order.
    """
    sentences = [s.strip() for s in _SENTENCE_SPLIT.split(text) if s and len(s.strip()) > 20]
    sentences = [s if s[-1] in ".!?" else f"{s}." for s in sentences]
    return sorted(sentences, key=_detail_score, reverse=True)


def extract_title(content: str | None) -> str | None:
    """
    Headline from section 1, or None.

    "Perfect for ..." / "Ideal for ..." tails are dropped. Titles over 80
    characters are cut at the last ``,`` / `` - `` / `` with `` / `` and ``
    before character 75, provided at least 15 characters remain.
    """
    if not content or len(content) < 5:
        return None
    try:
        body = _split_sections(content).get(1)
        if not body:
            return None
        first_line = next((line for line in body.splitlines() if line.strip()), "")
        title = normalize(first_line).strip('"')
        title = re.sub(r",?\s*(?:Perfect|Ideal)\s+for\s+[^,]+$", "", title, flags=re.IGNORECASE).strip()

        if 15 <= len(title) <= 80:
            return title

        if len(title) > 80:
            breaks = [title.rfind(sep, 0, 75) for sep in (",", " - ", " with ", " and ")]
            best = max((b for b in breaks if b > 25), default=-1)
            if best > 0:
                cut = title[:best].strip()
                if len(cut) >= 15:
                    return cut
        return None
    except Exception as e:
        logger.warning(f"Title extraction failed, using product name: {e}")
        return None


def fallback_sections(content: str | None = None) -> ContentSections:
    """Generic sections, with the first paragraphs of ``content`` as description."""
    paragraphs = [normalize(p) for p in re.split(r"\n\s*\n", content or "") if normalize(p)]
    full = " ".join(paragraphs)
    features = [p for p in paragraphs[1:4] if len(p) > 20] or list(FALLBACK_FEATURES)
    return ContentSections(
        title=None,
        bullet_points=list(FALLBACK_BULLETS),
        highlight=paragraphs[0] if paragraphs and len(paragraphs[0]) > 20 else FALLBACK_HIGHLIGHT,
        detailed_features=features,
        specifications=list(FALLBACK_SPECIFICATIONS),
        full_description=full or FALLBACK_HIGHLIGHT,
    )


def parse_sections(content: str | None) -> ContentSections:
    """
    Split generated copy into listing sections.

    Falls back to naive paragraph splitting with generic bullets when the
    content is empty, has no recognised headings, or fails to parse.
    """
    if not content or len(content.strip()) < 10:
        return fallback_sections(content)

    try:
        sections = _split_sections(content)
        if not sections:
            return fallback_sections(content)

        bullets = _parse_bullets(sections.get(2, ""))

        description = _remove_leakage(sections.get(3, ""))
        description = normalize(description)
        ranked = rank_sentences(description)

        highlight = " ".join(ranked[:2]) if ranked else ""
        detailed = ranked[2:5]

        return ContentSections(
            title=extract_title(content),
            bullet_points=bullets or list(FALLBACK_BULLETS),
            highlight=highlight or FALLBACK_HIGHLIGHT,
            detailed_features=detailed,
            specifications=[b for b in bullets if ":" in b][:MAX_BULLETS] or list(FALLBACK_SPECIFICATIONS),
            full_description=description or FALLBACK_HIGHLIGHT,
        )
    except Exception as e:
        logger.warning(f"Content parsing failed, using paragraph fallback: {e}")
        return fallback_sections(content)
