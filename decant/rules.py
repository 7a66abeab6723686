"""Static classification tables and tuned thresholds for the cleaning pipeline.

Everything here is immutable module data.  The numeric thresholds were tuned
against a small fixture set; change them only together with the fixtures.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Noise tags
# ---------------------------------------------------------------------------

NOISE_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "template",
    "iframe",
    "canvas",
    "svg",
    "nav",
    "footer",
    "aside",
    "button",
    "input",
    "select",
    "textarea",
    "form",
    "meta",
    "link",
)

AGGRESSIVE_NOISE_TAGS: tuple[str, ...] = ("header", "dialog")

NOISE_ROLE_VALUES: frozenset[str] = frozenset(
    {
        "navigation",
        "banner",
        "complementary",
        "search",
        "contentinfo",
    }
)

# ---------------------------------------------------------------------------
# Noise keywords (substring match against id/class/test attributes)
# ---------------------------------------------------------------------------

NOISE_KEYWORDS: tuple[str, ...] = (
    "advert",
    "ads",
    "banner",
    "cookie",
    "consent",
    "disclosure",
    "footer",
    "header",
    "legal",
    "menu",
    "modal",
    "nav",
    "newsletter",
    "popup",
    "promo",
    "recommend",
    "related",
    "share",
    "sidebar",
    "social",
    "sponsor",
    "subscribe",
    "toolbar",
    "tracking",
)

AGGRESSIVE_NOISE_KEYWORDS: tuple[str, ...] = (
    "author",
    "breadcrumb",
    "comment",
    "community",
    "pagination",
    "tag-cloud",
    "widget",
)

# Attributes whose values are searched for noise keywords
KEYWORD_SOURCE_ATTRIBUTES: tuple[str, ...] = (
    "id",
    "class",
    "data-testid",
    "data-test",
    "data-qa",
    "name",
)

# Never removed by keyword match unless aggressive
CONTENT_PROTECTED_TAGS: frozenset[str] = frozenset({"article", "main"})

# ---------------------------------------------------------------------------
# Attribute allow-lists
# ---------------------------------------------------------------------------

GLOBAL_ALLOWED_ATTRIBUTES: frozenset[str] = frozenset({"lang"})

TAG_ALLOWED_ATTRIBUTES: dict[str, frozenset[str]] = {
    "a": frozenset({"href", "title"}),
    "img": frozenset({"src", "alt", "title"}),
    "source": frozenset({"src", "srcset", "type"}),
    "th": frozenset({"colspan", "rowspan"}),
    "td": frozenset({"colspan", "rowspan"}),
}

ABSOLUTE_URL_PROTOCOLS: tuple[str, ...] = ("http", "https", "mailto")

# ---------------------------------------------------------------------------
# Option-driven removals
# ---------------------------------------------------------------------------

IMAGE_TAGS: tuple[str, ...] = ("img", "picture", "source", "figure")
TABLE_TAGS: tuple[str, ...] = ("table",)
FLATTEN_TAGS: tuple[str, ...] = ("button", "summary")

# Elements that may legitimately be empty
PRESERVE_EMPTY_TAGS: frozenset[str] = frozenset({"br", "hr", "img", "td", "th"})

# ---------------------------------------------------------------------------
# Noise-container guard
# ---------------------------------------------------------------------------

LOW_VALUE_MAX_CHARS = 260
LOW_VALUE_MAX_PARAGRAPHS = 3

# ---------------------------------------------------------------------------
# Content isolation
# ---------------------------------------------------------------------------

CONTENT_CANDIDATE_TAGS: tuple[str, ...] = ("article", "main", "section", "div")

ISOLATION_MIN_BODY_CHARS = 450
CANDIDATE_MIN_CHARS = 80

SCORE_PARAGRAPH_WEIGHT = 32
SCORE_HEADING_WEIGHT = 48
SCORE_LIST_ITEM_WEIGHT = 10
SCORE_PUNCTUATION_WEIGHT = 8
SCORE_LINK_DENSITY_PENALTY = 140

ISOLATION_MIN_SCORE = 300
ISOLATION_MIN_SCORE_AGGRESSIVE = 220
ISOLATION_MIN_SHARE = 0.28
ISOLATION_BODY_RATIO = 1.6
ISOLATION_BODY_RATIO_AGGRESSIVE = 1.2

# ---------------------------------------------------------------------------
# Extraction confidence gate
# ---------------------------------------------------------------------------

CONFIDENCE_LARGE_DOC_CHARS = 900
CONFIDENCE_FLOOR_LARGE = 220
CONFIDENCE_FLOOR_SMALL = 90
CONFIDENCE_FLOOR_MULTIPLIER = 2
CONFIDENCE_COVERAGE_MIN_DOC_CHARS = 500
CONFIDENCE_MIN_COVERAGE = 0.12

# readability-lxml's minimum paragraph length; lowered to admit more
# candidate blocks in aggressive mode
READABILITY_MIN_TEXT_LENGTH = 25
READABILITY_MIN_TEXT_LENGTH_AGGRESSIVE = 15

# ---------------------------------------------------------------------------
# Headings
# ---------------------------------------------------------------------------

MIN_HEADING_LEVEL = 1
MAX_HEADING_LEVEL = 6


def clamp_heading_level(level: float) -> int:
    """Clamp *level* into 1..6, flooring fractional values."""
    return max(MIN_HEADING_LEVEL, min(MAX_HEADING_LEVEL, int(level // 1)))
