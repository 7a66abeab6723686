"""Convert sanitized HTML to Markdown and normalize the result."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from markdownify import MarkdownConverter, chomp  # type: ignore[import-untyped]

from decant.items import TransformOptions
from decant.rules import MAX_HEADING_LEVEL, clamp_heading_level

logger = logging.getLogger(__name__)

_TRAILING_WHITESPACE_RE = re.compile(r"[ \t]+\n")
_HEADING_PREFIX_RE = re.compile(r"^(#{1,6})([^\S\n]+)", re.MULTILINE)
_EMPTY_HEADING_RE = re.compile(r"^[^\S\n]*#{1,6}[^\S\n]*$", re.MULTILINE)
_EXCESSIVE_BLANK_LINES_RE = re.compile(r"\n{3,}")

# A rule receives the element and its already-converted inner markdown.
ConversionRule = Callable[[Any, str], str]


# ---------------------------------------------------------------------------
# Conversion rules
# ---------------------------------------------------------------------------

def _text_only(el: Any, text: str) -> str:
    return text


def _drop(el: Any, text: str) -> str:
    return ""


def conversion_rules(options: TransformOptions) -> dict[str, ConversionRule]:
    """Return per-tag overrides selected by *options*."""
    rules: dict[str, ConversionRule] = {}
    if not options.keep_links:
        rules["a"] = _text_only
    if not options.keep_images:
        rules["img"] = _drop
    return rules


def _detect_lang(el: Any) -> str:
    """Extract a ``language-*`` class hint for fenced code blocks."""
    for node in (el, el.find("code")):
        if node is None:
            continue
        for cls in node.get("class") or []:
            if isinstance(cls, str) and cls.startswith("language-"):
                return cls[len("language-"):]
    return ""


class DecantConverter(MarkdownConverter):
    """markdownify converter with tag-keyed rule overrides.

    ``_`` is used for emphasis while strong text keeps ``**``.
    """

    def __init__(self, rules: dict[str, ConversionRule] | None = None, **options: Any) -> None:
        super().__init__(**options)
        self.rules = rules or {}

    def convert_a(self, el: Any, text: str, *args: Any, **kwargs: Any) -> str:
        rule = self.rules.get("a")
        if rule is not None:
            return rule(el, text)
        return super().convert_a(el, text, *args, **kwargs)

    def convert_img(self, el: Any, text: str, *args: Any, **kwargs: Any) -> str:
        rule = self.rules.get("img")
        if rule is not None:
            return rule(el, text)
        return super().convert_img(el, text, *args, **kwargs)

    def convert_em(self, el: Any, text: str, *args: Any, **kwargs: Any) -> str:
        prefix, suffix, text = chomp(text)
        if not text:
            return ""
        return f"{prefix}_{text}_{suffix}"

    convert_i = convert_em


def _convert(cleaned_html: str, options: TransformOptions) -> str:
    converter = DecantConverter(
        rules=conversion_rules(options),
        heading_style="ATX",
        bullets="-",
        strong_em_symbol="*",
        code_language_callback=_detect_lang,
    )
    return converter.convert(cleaned_html)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def clamp_heading_levels(markdown: str, max_heading_level: int) -> str:
    """Rewrite any ATX heading deeper than *max_heading_level* to that level."""
    capped = clamp_heading_level(max_heading_level)
    if capped == MAX_HEADING_LEVEL:
        return markdown

    def _clamp(match: re.Match[str]) -> str:
        hashes, spacing = match.group(1), match.group(2)
        if len(hashes) <= capped:
            return match.group(0)
        return "#" * capped + spacing

    return _HEADING_PREFIX_RE.sub(_clamp, markdown)


def normalize_markdown(markdown: str, max_heading_level: int = MAX_HEADING_LEVEL) -> str:
    """Normalize converter output.  Idempotent."""
    md = markdown.replace("\r\n", "\n")
    md = _TRAILING_WHITESPACE_RE.sub("\n", md)
    md = clamp_heading_levels(md, max_heading_level)
    md = _EMPTY_HEADING_RE.sub("", md)
    md = _EXCESSIVE_BLANK_LINES_RE.sub("\n\n", md)
    return md.strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def html_to_markdown(cleaned_html: str, options: TransformOptions | None = None) -> str:
    """Convert *cleaned_html* to normalized Markdown.

    Falls back to plain text when the converter fails on malformed input.
    """
    options = options or TransformOptions()
    if not cleaned_html or not cleaned_html.strip():
        return ""

    try:
        md = _convert(cleaned_html, options)
    except Exception as exc:
        logger.warning("markdown conversion failed, using plain text: %s", exc)
        from bs4 import BeautifulSoup

        md = BeautifulSoup(cleaned_html, "lxml").get_text(separator="\n")

    return normalize_markdown(md, options.max_heading_level)
