"""
HTML description builder for eBay listings.

eBay shows only the schema.org ``description`` span on its mobile app and
cuts it at 800 characters of raw HTML, markup included. The builder
therefore renders two parts:

    MOBILE  — <div vocab="https://schema.org/" typeof="Product"> wrapping a
              <span property="description"> with highlight bullets and a
              short product description, kept under MOBILE_DESCRIPTION_LIMIT
    DESKTOP — <div class="desktop-details"> with the longer feature
              sentences not already shown above, then the store footer

Usage:
    builder = EbayDescriptionBuilder()
    html = builder.build(sections)
    mobile_only = builder.build_mobile(sections)
"""

import re

from listora.core.models import ContentSections

MOBILE_DESCRIPTION_LIMIT = 800
# Running length the mobile section may reach before its closing tags
MOBILE_SAFETY_MARGIN = 750

DEDUP_PREFIX_LENGTH = 30
MIN_FEATURE_LENGTH = 20
MAX_DESKTOP_FEATURES = 3
MIN_HIGHLIGHT_LENGTH = 20

_MOBILE_OPEN = '<div vocab="https://schema.org/" typeof="Product"><span property="description">'
_MOBILE_CLOSE = "</span></div>"
_HIGHLIGHTS_HEADING = "<strong>Product Highlights:</strong><br>"
_DESCRIPTION_HEADING = "<br><strong>Product Description</strong><br>"

_FALLBACK_BULLETS = (
    "Premium quality product with attention to detail",
    "Professional design and construction",
    "Suitable for discerning customers",
)

_COLORS = {
    "text": "#1E293B",
    "text_secondary": "#64748B",
    "border": "#E2E8F0",
}


class EbayDescriptionBuilder:
    """
    Builds eBay listing descriptions from parsed content sections.

    The mobile section is assembled greedily: bullets are appended while
    the running length stays within MOBILE_SAFETY_MARGIN, then the
    highlight is trimmed to whatever room is left (or dropped). Closing
    tags are short enough that the finished section never passes
    MOBILE_DESCRIPTION_LIMIT.
    """

    # ─── Public API ──────────────────────────────────────────

    def build(self, sections: ContentSections, condition_label: str = "New") -> str:
        """
        Full description HTML: mobile section, desktop details, footer.

        Args:
            sections: Output of ``parse_sections``.
            condition_label: Human-readable condition shown in the footer.
        """
        mobile, shown = self._render_mobile(sections)
        desktop = self._build_desktop(sections, shown)
        return f"{mobile}{desktop}{self._build_footer(condition_label)}"

    def build_mobile(self, sections: ContentSections) -> str:
        """Mobile section only. Always ≤ MOBILE_DESCRIPTION_LIMIT characters."""
        mobile, _ = self._render_mobile(sections)
        return mobile

    # ─── Mobile Section ──────────────────────────────────────

    def _render_mobile(self, sections: ContentSections) -> tuple[str, str]:
        """Returns the mobile HTML and the plain text it displays."""
        html = _MOBILE_OPEN + _HIGHLIGHTS_HEADING
        shown: list[str] = []

        bullets = [b for b in sections.bullet_points if b.strip()] or list(_FALLBACK_BULLETS)
        for bullet in bullets:
            piece = f"* {self._escape(bullet)}<br>"
            if len(html) + len(piece) > MOBILE_SAFETY_MARGIN:
                break
            html += piece
            shown.append(bullet)

        if sections.highlight:
            room = MOBILE_SAFETY_MARGIN - len(html) - len(_DESCRIPTION_HEADING)
            highlight = self._fit(sections.highlight, room)
            if highlight:
                html += _DESCRIPTION_HEADING + self._escape(highlight)
                shown.append(highlight)

        html += _MOBILE_CLOSE
        return html, " ".join(shown)

    def _fit(self, text: str, room: int) -> str:
        """
        Trim ``text`` so its escaped form fits in ``room`` characters.

        Prefers ending on a sentence, then on a word. Returns "" when less
        than MIN_HIGHLIGHT_LENGTH characters would survive.
        """
        text = text.strip()
        if len(self._escape(text)) <= room:
            return text
        if room < MIN_HIGHLIGHT_LENGTH:
            return ""

        candidate = text[:room]
        while candidate and len(self._escape(candidate)) > room:
            candidate = candidate[:-1]

        sentence_end = max(candidate.rfind(". "), candidate.rfind("! "), candidate.rfind("? "))
        if sentence_end >= MIN_HIGHLIGHT_LENGTH:
            return candidate[: sentence_end + 1]

        word_end = candidate.rfind(" ")
        if word_end >= MIN_HIGHLIGHT_LENGTH:
            return candidate[:word_end].rstrip(",;:- ")
        return ""

    # ─── Desktop Section ─────────────────────────────────────

    def _build_desktop(self, sections: ContentSections, shown: str) -> str:
        shown_lower = shown.lower()
        features = []
        for feature in sections.detailed_features:
            feature = feature.strip()
            if len(feature) <= MIN_FEATURE_LENGTH:
                continue
            if feature[:DEDUP_PREFIX_LENGTH].lower() in shown_lower:
                continue
            features.append(feature)
            if len(features) == MAX_DESKTOP_FEATURES:
                break

        specifications = [s for s in sections.specifications if s.strip()]
        if not features and not specifications:
            return ""

        parts = [f'<div class="desktop-details" style="color:{_COLORS["text"]};line-height:1.6;">']
        if features:
            parts.append("<br><strong>Additional Features:</strong><br>")
            parts.extend(f"{self._escape(f)}<br>" for f in features)
        if specifications:
            parts.append("<br><strong>Specifications:</strong><br>")
            parts.extend(f"* {self._escape(s)}<br>" for s in specifications)
        parts.append("</div>")
        return "".join(parts)

    # ─── Shared Helpers ──────────────────────────────────────

    def _build_footer(self, condition_label: str) -> str:
        return (
            f'<div style="border-top:1px solid {_COLORS["border"]};margin-top:8px;'
            f'color:{_COLORS["text_secondary"]};">'
            f"<br><strong>Condition:</strong> {self._escape(condition_label)}<br>"
            f"<strong>Shipping:</strong> Fast shipping available<br>"
            f"<strong>Returns:</strong> 30-day return policy<br><br>"
            f"Questions? Please message us for more details.<br>"
            f"Thanks for shopping with us!</div>"
        )

    def _escape(self, text: str) -> str:
        """Basic HTML escaping; eBay renders the description as-is."""
        text = re.sub(r"\s+", " ", text)
        return (
            text.replace("&", "&amp;")
            .replace("<", "&lt;")
            .replace(">", "&gt;")
            .replace('"', "&quot;")
        )
