"""
Attribute extractors for marketplace item specifics.

Every extractor is a pure, total function: given the same text it returns
the same non-empty value, falling back to a documented default instead of
returning an empty string. Marketplaces reject listings with blank required
attributes, so a plain default is always preferred over nothing.

Keyword tables are module-level and immutable (tuples and MappingProxyType)
and are matched in declaration order; the first match wins.
"""

import re
from collections import Counter
from collections.abc import Callable
from types import MappingProxyType

# ─── Defaults ─────────────────────────────────────────────────

EBAY_DEFAULT_BRAND = "Unbranded"
TEMPLATE_DEFAULT_BRAND = "Generic"
EBAY_DEFAULT_COLOR = "Multicolor"
TEMPLATE_DEFAULT_COLOR = "Black"
DEFAULT_MATERIAL = "Mixed Materials"
DEFAULT_SIZE = "M"
DEFAULT_MODEL = "Standard Model"
DEFAULT_VALUE = "Standard"


# ─── Brand ────────────────────────────────────────────────────

KNOWN_BRANDS: tuple[str, ...] = (
    # electronics
    "Apple", "Samsung", "Google", "Sony", "Bose", "JBL", "Sennheiser",
    "Skullcandy", "Anker", "Jabra", "Audio-Technica", "LG", "Motorola", "OnePlus",
    "Xiaomi", "Huawei", "Nokia", "Dell", "HP", "Lenovo", "Asus", "Acer", "Microsoft",
    "Razer", "Logitech", "Canon", "Nikon", "GoPro", "Fitbit", "Garmin",
    # fashion
    "Nike", "Adidas", "Puma", "Reebok", "New Balance", "Under Armour", "Asics",
    "Converse", "Vans", "Skechers", "Levi's", "Wrangler", "Ralph Lauren",
    "Tommy Hilfiger", "Calvin Klein", "Gucci", "Prada", "Zara", "Uniqlo",
    "Lacoste", "Hanes",
    # watches
    "Rolex", "Omega", "Seiko", "Casio", "Citizen", "Fossil", "Timex", "Tissot",
    "Invicta", "Bulova", "TAG Heuer",
    # kitchen
    "Ninja", "Cosori", "Instant Pot", "Philips", "KitchenAid", "Cuisinart",
    "Hamilton Beach", "Breville", "Keurig", "Vitamix", "Oster", "Black+Decker",
)

_BRAND_PATTERNS: tuple[tuple[str, re.Pattern], ...] = tuple(
    (brand, re.compile(rf"(?<![\w]){re.escape(brand.lower())}(?![\w])"))
    for brand in KNOWN_BRANDS
)

_EXPLICIT_BRAND_PATTERNS: tuple[re.Pattern, ...] = (
    re.compile(r"\bbrand\s*[:\-]\s*([A-Za-z0-9&][A-Za-z0-9&' ]{0,18}?)\s*(?:\n|,|\.|;|$)", re.IGNORECASE),
    re.compile(r"\b(?:made|manufactured|designed)\s+by\s+([A-Z][A-Za-z0-9&]{1,18})\b"),
    re.compile(r"\bby\s+([A-Z][A-Za-z0-9&]{1,18})\s*(?:\n|,|\.|$)"),
)

NOT_A_BRAND = frozenset(word.lower() for word in (
    # demographics
    "Men", "Mens", "Women", "Womens", "Ladies", "Unisex", "Adult", "Kids",
    "Boys", "Girls", "Baby", "Youth", "Teen",
    # marketing
    "Premium", "Quality", "Professional", "Advanced", "Enhanced", "Deluxe",
    "Luxury", "Genuine", "Authentic", "Original", "Official", "Certified",
    "New", "Used", "Vintage", "Retro", "Modern", "Classic", "Elegant",
    "Stylish", "Comfortable", "Durable", "Reliable", "Lightweight", "Portable",
    "Adjustable", "Waterproof", "Breathable", "Best", "Top", "Great",
    "Perfect", "Ideal", "Ultimate", "Essential", "Experience", "Introducing",
    "Discover", "Upgrade", "Elevate", "Enjoy", "Designed", "Crafted", "Built",
    "Featuring", "Whether", "Our", "Your", "This", "These", "That", "The",
    "With", "And", "For", "From",
    # sizes
    "Small", "Medium", "Large", "Extra", "Mini", "Ultra", "Super", "Compact",
    "Plus", "Pro", "Max", "Smart", "Standard", "Basic",
    # product nouns and tech words
    "Wireless", "Bluetooth", "Headphones", "Headphone", "Earbuds", "Headset",
    "Noise", "Cancelling", "Canceling", "Sound", "Audio", "Bass", "Stereo",
    "Battery", "Charging", "Fast", "Digital", "Electric", "Automatic",
    "Shirt", "Shirts", "Shoe", "Shoes", "Sneaker", "Sneakers", "Boots",
    "Watch", "Watches", "Bag", "Wallet", "Belt", "Hat", "Phone", "Phones",
    "Smartphone", "Laptop", "Computer", "Tablet", "Device", "Gadget", "Tool",
    "Kitchen", "Air", "Fryer", "Blender", "Coffee", "Maker", "Jeans", "Pants",
    "Dress", "Jacket", "Hoodie", "Tee", "Polo", "Running", "Athletic",
    "Accessory", "Accessories", "Item", "Product", "Set", "Pack", "Kit",
    "Edition", "Series", "Collection",
    # materials and colors
    "Cotton", "Leather", "Silk", "Wool", "Polyester", "Nylon", "Denim",
    "Steel", "Stainless", "Metal", "Plastic", "Glass", "Wood", "Ceramic",
    "Black", "White", "Red", "Blue", "Green", "Yellow", "Purple", "Orange",
    "Pink", "Brown", "Gray", "Grey", "Gold", "Silver", "Navy", "Beige",
))


def is_common_word(word: str) -> bool:
    return word.strip().lower() in NOT_A_BRAND


def extract_brand(text: str, title: str = "", default: str = EBAY_DEFAULT_BRAND) -> str:
    """
    Brand named in the product text.

    Order: curated brand list (word-boundary match), explicit
    ``Brand: X`` / ``by X`` phrases, a possessive in the title
    (``Nike's``), then a capitalized non-common word used at least twice.
    """
    if not text and not title:
        return default

    lower = f"{title} {text}".lower()
    for brand, pattern in _BRAND_PATTERNS:
        if pattern.search(lower):
            return brand

    original = f"{title}\n{text}"
    for pattern in _EXPLICIT_BRAND_PATTERNS:
        match = pattern.search(original)
        if match:
            candidate = match.group(1).strip()
            if 1 < len(candidate) < 20 and not is_common_word(candidate):
                return candidate

    possessive = re.search(r"\b([A-Z][a-zA-Z]+)'s\b", title or text)
    if possessive and not is_common_word(possessive.group(1)):
        return possessive.group(1)

    words = (re.sub(r"[^\w]", "", w) for w in text.split())
    counts = Counter(
        w for w in words
        if 2 <= len(w) <= 15 and re.match(r"^[A-Z][a-z]", w) and not is_common_word(w)
    )
    top = counts.most_common(1)
    if top and top[0][1] >= 2:
        return top[0][0]

    return default


# ─── Color ────────────────────────────────────────────────────

COLOR_SYNONYMS = MappingProxyType({
    "Black": ("black", "jet black", "onyx", "midnight black", "matte black", "ebony"),
    "White": ("white", "ivory", "pearl white", "snow white"),
    "Gray": ("gray", "grey", "charcoal", "space gray", "graphite", "slate", "gunmetal"),
    "Silver": ("silver", "chrome", "platinum", "metallic silver"),
    "Gold": ("gold", "rose gold", "champagne", "golden"),
    "Blue": ("blue", "navy", "royal blue", "sky blue", "cobalt", "teal", "turquoise"),
    "Red": ("red", "crimson", "burgundy", "maroon", "scarlet"),
    "Green": ("green", "olive", "emerald", "sage", "forest green"),
    "Pink": ("pink", "blush", "rose", "magenta", "fuchsia"),
    "Purple": ("purple", "violet", "lavender", "lilac"),
    "Brown": ("brown", "tan", "chocolate", "coffee brown", "camel", "khaki"),
    "Beige": ("beige", "nude", "taupe"),
    "Orange": ("orange", "coral", "peach"),
    "Yellow": ("yellow", "mustard"),
})

_COLOR_PATTERNS: tuple[tuple[str, re.Pattern], ...] = tuple(
    (color, re.compile(r"\b(?:" + "|".join(re.escape(s) for s in sorted(syns, key=len, reverse=True)) + r")\b"))
    for color, syns in COLOR_SYNONYMS.items()
)


def extract_color(text: str, default: str = TEMPLATE_DEFAULT_COLOR) -> str:
    """Canonical color name for the first color family mentioned."""
    lower = (text or "").lower()
    for color, pattern in _COLOR_PATTERNS:
        if pattern.search(lower):
            return color
    return default


# ─── Materials & Apparel ──────────────────────────────────────

MATERIALS = MappingProxyType({
    "Stainless Steel": ("stainless steel",),
    "Leather": ("genuine leather", "leather"),
    "Cotton": ("100% cotton", "organic cotton", "cotton"),
    "Denim": ("denim",),
    "Polyester": ("polyester",),
    "Linen": ("linen",),
    "Silk": ("silk",),
    "Wool": ("merino", "wool"),
    "Cashmere": ("cashmere",),
    "Suede": ("suede",),
    "Canvas": ("canvas",),
    "Nylon": ("nylon",),
    "Spandex": ("spandex", "elastane"),
    "Mesh": ("mesh", "knit"),
    "Titanium": ("titanium",),
    "Aluminum": ("aluminum", "aluminium"),
    "Ceramic": ("ceramic",),
    "Plastic": ("abs plastic", "plastic"),
    "Silicone": ("silicone",),
    "Rubber": ("rubber",),
})


def _first_key(text: str, table: MappingProxyType, default: str) -> str:
    lower = (text or "").lower()
    for value, keywords in table.items():
        for keyword in keywords:
            if re.search(rf"\b{re.escape(keyword)}\b", lower):
                return value
    return default


def extract_material(text: str, default: str = DEFAULT_MATERIAL) -> str:
    return _first_key(text, MATERIALS, default)


_SIZE_WORDS = MappingProxyType({
    "XXXL": ("xxxl", "3xl"),
    "XXL": ("xxl", "2xl"),
    "XL": ("xl", "extra large", "extra-large"),
    "XS": ("xs", "extra small", "extra-small"),
    "S": ("small",),
    "L": ("large",),
    "M": ("medium",),
})


def extract_size(text: str, default: str = DEFAULT_SIZE) -> str:
    """Letter size (XS…XXXL); ``small`` / ``medium`` / ``large`` map to S / M / L."""
    lower = (text or "").lower()
    match = re.search(r"\bsize\s*[:\-]?\s*(xxxl|xxl|xl|xs|s|m|l)\b", lower)
    if match:
        return match.group(1).upper()
    return _first_key(lower, _SIZE_WORDS, default)


def extract_size_type(text: str) -> str:
    lower = (text or "").lower()
    if "big & tall" in lower or "big and tall" in lower or re.search(r"\btall\b", lower):
        return "Big & Tall"
    if "petite" in lower:
        return "Petite"
    if "plus size" in lower:
        return "Plus"
    return "Regular"


def extract_sleeve_length(text: str) -> str:
    lower = (text or "").lower()
    if "short sleeve" in lower or "short-sleeve" in lower:
        return "Short Sleeve"
    if "long sleeve" in lower or "long-sleeve" in lower:
        return "Long Sleeve"
    if "sleeveless" in lower or "tank" in lower:
        return "Sleeveless"
    if "t-shirt" in lower or "polo" in lower or "tee" in lower.split():
        return "Short Sleeve"
    return "Long Sleeve"


def extract_department(text: str) -> str:
    """eBay department: Men, Women, Kids or Unisex Adult."""
    lower = (text or "").lower()
    if re.search(r"\b(?:unisex|everyone)\b", lower):
        return "Unisex Adult"
    if re.search(r"\b(?:women'?s?|female|ladies|lady|woman)\b", lower):
        return "Women"
    if re.search(r"\b(?:men'?s?|male|gentlemen|man)\b", lower):
        return "Men"
    if re.search(r"\b(?:kids?|children|youth|boys?|girls?)\b", lower):
        return "Kids"
    return "Unisex Adult"


def extract_gender(text: str) -> str:
    """Amazon target gender: male, female or unisex."""
    department = extract_department(text)
    if department == "Men":
        return "male"
    if department == "Women":
        return "female"
    return "unisex"


def extract_style(text: str) -> str:
    lower = (text or "").lower()
    for keyword, style in (
        ("casual", "Casual"),
        ("formal", "Formal"),
        ("business", "Business"),
        ("athletic", "Athletic"),
        ("sport", "Athletic"),
        ("vintage", "Vintage"),
    ):
        if keyword in lower:
            return style
    return "Modern"


# ─── Electronics ──────────────────────────────────────────────

_MODEL_PATTERNS: tuple[tuple[re.Pattern, Callable[[re.Match], str]], ...] = (
    (
        re.compile(r"\biphone\s*(\d{1,2})(\s*pro)?(\s*max)?\b", re.IGNORECASE),
        lambda m: " ".join(p for p in ("iPhone", m.group(1), "Pro" if m.group(2) else "", "Max" if m.group(3) else "") if p),
    ),
    (
        re.compile(r"\bgalaxy\s*([saznm])\s?(\d{1,2})(\s*ultra|\s*plus|\+)?\b", re.IGNORECASE),
        lambda m: f"Galaxy {m.group(1).upper()}{m.group(2)}" + (" " + m.group(3).strip().replace("+", "Plus").title() if m.group(3) else ""),
    ),
    (
        re.compile(r"\bpixel\s*(\d{1,2})(\s*pro)?(\s*a)?\b", re.IGNORECASE),
        lambda m: f"Pixel {m.group(1)}" + (" Pro" if m.group(2) else "") + ("a" if m.group(3) else ""),
    ),
    (
        re.compile(r"\bmodel\s*(?:number|no\.?|#)?\s*[:\-]\s*([A-Za-z0-9][A-Za-z0-9\- ]{1,24}?)\s*(?:\n|,|\.|;|$)", re.IGNORECASE),
        lambda m: m.group(1).strip(),
    ),
)


def extract_model(text: str, title: str = "", brand: str = "") -> str:
    """Model name: known phone families, an explicit ``Model:`` line, else the title head."""
    source = f"{title}\n{text}"
    for pattern, render in _MODEL_PATTERNS:
        match = pattern.search(source)
        if match:
            return render(match)

    if title:
        head = re.split(r"\s[-–|]\s|,|\(", title, maxsplit=1)[0].strip()
        if brand and head.lower().startswith(brand.lower()):
            head = head[len(brand):].strip()
        words = head.split()[:4]
        if words:
            return " ".join(words)

    return DEFAULT_MODEL


def extract_storage_capacity(text: str, default: str = "128 GB") -> str:
    match = re.search(r"\b(\d+)\s*(gb|tb)\b", (text or "").lower())
    if match:
        return f"{match.group(1)} {match.group(2).upper()}"
    return default


def extract_screen_size(text: str, default: str = "15.6 in") -> str:
    match = re.search(r"\b(\d{1,2}(?:\.\d)?)\s*-?\s*(?:inch(?:es)?\b|\")", (text or "").lower())
    if match:
        return f"{match.group(1)} in"
    return default


_PROCESSORS: tuple[tuple[str, str], ...] = (
    (r"\bapple\s+m(\d)\b|\bm(\d)\s+chip\b", "Apple M{}"),
    (r"\b(?:intel\s+)?core\s+i([3579])\b|\bi([3579])-\d{4,5}", "Intel Core i{}"),
    (r"\bcore\s+ultra\s+([579])\b", "Intel Core Ultra {}"),
    (r"\bryzen\s+([3579])\b", "AMD Ryzen {}"),
    (r"\bsnapdragon\b", "Qualcomm Snapdragon"),
    (r"\bceleron\b", "Intel Celeron"),
)


def extract_processor(text: str, default: str = "Intel Core i5") -> str:
    lower = (text or "").lower()
    for pattern, label in _PROCESSORS:
        match = re.search(pattern, lower)
        if match:
            digit = next((g for g in match.groups() if g), None)
            return label.format(digit) if "{}" in label else label
    return default


def extract_ram(text: str, default: str = "8 GB") -> str:
    match = re.search(r"\b(\d{1,3})\s*gb\s*(?:of\s+)?(?:ram|memory|ddr\d|lpddr\d)", (text or "").lower())
    if match:
        return f"{match.group(1)} GB"
    return default


def extract_storage_type(text: str) -> str:
    lower = (text or "").lower()
    if "nvme" in lower or "ssd" in lower or "solid state" in lower:
        return "SSD (Solid State Drive)"
    if "emmc" in lower:
        return "eMMC"
    if "hdd" in lower or "hard drive" in lower:
        return "HDD (Hard Disk Drive)"
    return "SSD (Solid State Drive)"


def extract_network(text: str) -> str:
    lower = (text or "").lower()
    for keyword, network in (
        ("verizon", "Verizon"),
        ("at&t", "AT&T"),
        ("t-mobile", "T-Mobile"),
        ("sprint", "Sprint"),
    ):
        if keyword in lower:
            return network
    return "Unlocked"


def extract_operating_system(text: str, default: str = "") -> str:
    lower = (text or "").lower()
    for keyword, system in (
        ("iphone", "iOS"),
        ("ios", "iOS"),
        ("android", "Android"),
        ("galaxy", "Android"),
        ("pixel", "Android"),
        ("macbook", "macOS"),
        ("macos", "macOS"),
        ("chromebook", "Chrome OS"),
        ("chrome os", "Chrome OS"),
        ("windows", "Windows 11"),
        ("linux", "Linux"),
    ):
        if re.search(rf"\b{re.escape(keyword)}\b", lower):
            return system
    return default or "Android"


# ─── Watches ──────────────────────────────────────────────────


def extract_watch_movement(text: str) -> str:
    lower = (text or "").lower()
    if "automatic" in lower or "self-winding" in lower:
        return "Automatic"
    if "mechanical" in lower or "hand-wound" in lower:
        return "Mechanical (Hand-winding)"
    if "solar" in lower or "eco-drive" in lower:
        return "Solar"
    if "smartwatch" in lower or "smart watch" in lower:
        return "Digital"
    return "Quartz"


_BAND_MATERIALS = MappingProxyType({
    "Stainless Steel": ("stainless steel band", "steel bracelet", "metal band", "link bracelet", "stainless steel strap"),
    "Leather": ("leather band", "leather strap"),
    "Silicone": ("silicone band", "silicone strap", "sport band"),
    "Rubber": ("rubber strap", "rubber band"),
    "Nylon": ("nylon strap", "nato strap", "fabric strap"),
    "Titanium": ("titanium band", "titanium bracelet"),
})

_CASE_MATERIALS = MappingProxyType({
    "Stainless Steel": ("stainless steel case", "steel case", "stainless steel"),
    "Titanium": ("titanium",),
    "Ceramic": ("ceramic",),
    "Aluminum": ("aluminum", "aluminium"),
    "Gold": ("gold case", "solid gold"),
    "Plastic": ("resin", "plastic"),
})


def extract_band_material(text: str) -> str:
    lower = (text or "").lower()
    value = _first_key(lower, _BAND_MATERIALS, "")
    return value or extract_material(lower, default="Stainless Steel")


def extract_case_material(text: str) -> str:
    return _first_key(text, _CASE_MATERIALS, "Stainless Steel")


# ─── Other Families ───────────────────────────────────────────


def extract_connectivity(text: str) -> str:
    lower = (text or "").lower()
    if "bluetooth" in lower or "wireless" in lower or "true wireless" in lower:
        return "Wireless"
    if "usb-c" in lower or "usb c" in lower:
        return "USB-C"
    return "Wired"


def extract_form_factor(text: str) -> str:
    lower = (text or "").lower()
    if re.search(r"\b(?:earbuds?|in-ear|airpods)\b", lower):
        return "Earbud (In Ear)"
    if "on-ear" in lower or "on ear" in lower:
        return "On-the-Ear"
    if "neckband" in lower:
        return "Neckband"
    return "Over-the-Ear"


def extract_power(text: str, default: str = DEFAULT_VALUE) -> str:
    match = re.search(r"\b(\d{2,4})\s*(?:w|watts?)\b", (text or "").lower())
    return f"{match.group(1)} W" if match else default


def extract_capacity(text: str, default: str = DEFAULT_VALUE) -> str:
    match = re.search(r"\b(\d+(?:\.\d+)?)\s*(qt|quarts?|l|liters?|litres?|oz|cups?)\b", (text or "").lower())
    if not match:
        return default
    unit = match.group(2)
    unit = {"quart": "qt", "quarts": "qt", "liter": "L", "liters": "L", "litre": "L", "litres": "L", "l": "L", "cup": "cups"}.get(unit, unit)
    return f"{match.group(1)} {unit}"


def extract_appliance_type(text: str) -> str:
    lower = (text or "").lower()
    for keyword, kind in (
        ("air fryer", "Air Fryer"),
        ("blender", "Blender"),
        ("coffee maker", "Coffee Maker"),
        ("espresso", "Espresso Machine"),
        ("toaster", "Toaster"),
        ("pressure cooker", "Pressure Cooker"),
        ("instant pot", "Pressure Cooker"),
        ("slow cooker", "Slow Cooker"),
        ("food processor", "Food Processor"),
        ("mixer", "Stand Mixer"),
        ("kettle", "Electric Kettle"),
        ("microwave", "Microwave"),
    ):
        if keyword in lower:
            return kind
    return "Kitchen Appliance"


# ─── Aspect Dispatch ──────────────────────────────────────────

AspectExtractor = Callable[[str, str], str]

# Keyed by a keyword looked for in the normalized aspect name. Checked in
# order, so "size type" is matched before "size".
ASPECT_EXTRACTORS: tuple[tuple[str, AspectExtractor], ...] = (
    ("brand", lambda text, title: extract_brand(text, title, default=EBAY_DEFAULT_BRAND)),
    ("colour", lambda text, title: extract_color(text, default=EBAY_DEFAULT_COLOR)),
    ("color", lambda text, title: extract_color(text, default=EBAY_DEFAULT_COLOR)),
    ("department", lambda text, title: extract_department(text)),
    ("size type", lambda text, title: extract_size_type(text)),
    ("sleeve", lambda text, title: extract_sleeve_length(text)),
    ("screen size", lambda text, title: extract_screen_size(text)),
    ("storage type", lambda text, title: extract_storage_type(text)),
    ("storage", lambda text, title: extract_storage_capacity(text)),
    ("ram", lambda text, title: extract_ram(text)),
    ("processor", lambda text, title: extract_processor(text)),
    ("operating system", lambda text, title: extract_operating_system(text)),
    ("network", lambda text, title: extract_network(text)),
    ("movement", lambda text, title: extract_watch_movement(text)),
    ("band material", lambda text, title: extract_band_material(text)),
    ("case material", lambda text, title: extract_case_material(text)),
    ("connectivity", lambda text, title: extract_connectivity(text)),
    ("form factor", lambda text, title: extract_form_factor(text)),
    ("power", lambda text, title: extract_power(text)),
    ("capacity", lambda text, title: extract_capacity(text)),
    ("material", lambda text, title: extract_material(text)),
    ("fabric", lambda text, title: extract_material(text)),
    ("size", lambda text, title: extract_size(text)),
    ("model", lambda text, title: extract_model(text, title)),
    ("style", lambda text, title: extract_style(text)),
    ("gender", lambda text, title: extract_department(text)),
)

ASPECT_DEFAULTS = MappingProxyType({
    "mpn": "Does Not Apply",
    "upc": "Does Not Apply",
    "ean": "Does Not Apply",
    "condition": "New",
    "type": DEFAULT_VALUE,
})

_MAX_EXPLICIT_VALUE = 50


def _explicit_value(aspect_name: str, content: str) -> str | None:
    """Value written as ``Aspect: value`` in the generated copy."""
    if not content:
        return None
    pattern = re.compile(
        rf"(?:^|\n|\*\*|-\s)\s*{re.escape(aspect_name)}\s*\**\s*[:\-]\s*\**\s*((?:[^,.\n*]|\.(?=\d))+)",
        re.IGNORECASE,
    )
    match = pattern.search(content)
    if match:
        value = match.group(1).strip()
        if 0 < len(value) < _MAX_EXPLICIT_VALUE:
            return value
    return None


def extract_value_for_aspect(aspect_name: str, text: str, content: str = "", title: str = "") -> str:
    """
    Value for an arbitrary marketplace aspect.

    An explicit ``Aspect: value`` line in the generated copy wins; otherwise
    the aspect name is dispatched to a keyword extractor. Never returns an
    empty string.
    """
    explicit = _explicit_value(aspect_name, content)
    if explicit:
        return explicit

    aspect = re.sub(r"[^a-z ]", " ", aspect_name.lower())
    aspect = re.sub(r"\s+", " ", aspect).strip()
    source = text or content.lower()

    for keyword, extractor in ASPECT_EXTRACTORS:
        if keyword in aspect.split() or (" " in keyword and keyword in aspect):
            value = extractor(source, title)
            if value:
                return value

    return ASPECT_DEFAULTS.get(aspect, DEFAULT_VALUE)
