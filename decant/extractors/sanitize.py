"""Deterministic DOM sanitizer.

Strips noise elements and attributes from an HTML document and returns the
cleaned inner HTML of ``<body>``.  The steps run in a fixed order; later
steps assume the earlier ones already ran.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urlparse

from bs4 import BeautifulSoup, Tag

from decant.extractors.isolate import isolate_primary_content, normalize_whitespace
from decant.items import CleanResult, TransformOptions
from decant.rules import (
    ABSOLUTE_URL_PROTOCOLS,
    AGGRESSIVE_NOISE_KEYWORDS,
    AGGRESSIVE_NOISE_TAGS,
    CONTENT_PROTECTED_TAGS,
    FLATTEN_TAGS,
    GLOBAL_ALLOWED_ATTRIBUTES,
    IMAGE_TAGS,
    KEYWORD_SOURCE_ATTRIBUTES,
    LOW_VALUE_MAX_CHARS,
    LOW_VALUE_MAX_PARAGRAPHS,
    NOISE_KEYWORDS,
    NOISE_ROLE_VALUES,
    NOISE_TAGS,
    PRESERVE_EMPTY_TAGS,
    TABLE_TAGS,
    TAG_ALLOWED_ATTRIBUTES,
    clamp_heading_level,
)

logger = logging.getLogger(__name__)

_DOCUMENT_SHELL_RE = re.compile(r"<(html|body)[\s>]", re.IGNORECASE)
_TEMPLATE_RE = re.compile(r"<template\b[^>]*>.*?</template>", re.DOTALL | re.IGNORECASE)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def wrap_html(raw_html: str) -> str:
    """Wrap a bare fragment in a minimal document shell."""
    if _DOCUMENT_SHELL_RE.search(raw_html):
        return raw_html
    return f"<!doctype html><html><body>{raw_html}</body></html>"


def parse_document(raw_html: str) -> BeautifulSoup:
    """Parse *raw_html* into a fresh tree that is guaranteed to have a body.

    ``<template>`` blocks are cut with a regex before parsing: lxml moves
    template children into the body, so removing the tag afterwards would
    leave its placeholder content behind.
    """
    html = _TEMPLATE_RE.sub("", wrap_html(raw_html))
    soup = BeautifulSoup(html, "lxml")
    if soup.body is None:
        body = soup.new_tag("body")
        (soup.html or soup).append(body)
    return soup


def _live(tag: Tag) -> bool:
    return not tag.decomposed


# ---------------------------------------------------------------------------
# Noise removal
# ---------------------------------------------------------------------------

def _remove_by_tag_name(soup: BeautifulSoup, names: tuple[str, ...] | list[str]) -> int:
    removed = 0
    for el in soup.find_all(list(names)):
        if _live(el):
            el.decompose()
            removed += 1
    return removed


def _dropped_by_role_or_state(el: Tag) -> bool:
    role = str(el.get("role") or "").lower()
    if role in NOISE_ROLE_VALUES:
        return True
    if el.has_attr("hidden"):
        return True
    return str(el.get("aria-hidden") or "").lower() == "true"


def _keyword_source(el: Tag) -> str:
    parts: list[str] = []
    for attr in KEYWORD_SOURCE_ATTRIBUTES:
        value = el.get(attr)
        if not value:
            continue
        parts.append(" ".join(value) if isinstance(value, list) else str(value))
    return " ".join(parts).lower()


def contains_noise_keyword(el: Tag, aggressive: bool = False) -> bool:
    source = _keyword_source(el)
    if not source:
        return False
    keywords = NOISE_KEYWORDS + AGGRESSIVE_NOISE_KEYWORDS if aggressive else NOISE_KEYWORDS
    return any(kw in source for kw in keywords)


def is_low_value_container(el: Tag) -> bool:
    """True for short containers without real paragraph structure."""
    text = normalize_whitespace(el.get_text())
    if not text:
        return True
    if len(el.find_all("p")) >= LOW_VALUE_MAX_PARAGRAPHS:
        return False
    return len(text) < LOW_VALUE_MAX_CHARS


def _remove_noise_containers(body: Tag, aggressive: bool) -> int:
    removed = 0
    for el in body.find_all(True):
        if not _live(el):
            continue

        if _dropped_by_role_or_state(el):
            el.decompose()
            removed += 1
            continue

        if not contains_noise_keyword(el, aggressive):
            continue
        if el.name in CONTENT_PROTECTED_TAGS and not aggressive:
            continue
        if not aggressive and not is_low_value_container(el):
            continue

        el.decompose()
        removed += 1
    return removed


# ---------------------------------------------------------------------------
# Structural rewrites
# ---------------------------------------------------------------------------

def _unwrap_links(soup: BeautifulSoup) -> None:
    for a in soup.find_all("a"):
        if a.parent is not None:
            a.unwrap()


def _flatten_to_text(soup: BeautifulSoup) -> None:
    """Replace interactive affordances with their plain text."""
    for el in soup.find_all(list(FLATTEN_TAGS)):
        if el.parent is None or not _live(el):
            continue
        el.replace_with(normalize_whitespace(el.get_text()))


def sanitize_href(value: str) -> str | None:
    """Return *value* if it is a safe link target, else None."""
    trimmed = value.strip()
    if not trimmed:
        return None
    if trimmed.startswith(("#", "/")):
        return trimmed
    try:
        scheme = urlparse(trimmed).scheme
    except ValueError:
        return None
    if scheme and scheme not in ABSOLUTE_URL_PROTOCOLS:
        return None
    return trimmed


def _strip_attributes(body: Tag) -> None:
    for el in body.find_all(True):
        allowed = TAG_ALLOWED_ATTRIBUTES.get(el.name, frozenset())
        for attr in list(el.attrs):
            name = attr.lower()
            if name in GLOBAL_ALLOWED_ATTRIBUTES:
                continue
            if name not in allowed:
                del el[attr]
                continue
            if el.name == "a" and name == "href":
                href = sanitize_href(str(el.get(attr) or ""))
                if href:
                    el[attr] = href
                else:
                    del el[attr]


def _normalize_heading_levels(soup: BeautifulSoup, max_heading_level: int) -> None:
    capped = clamp_heading_level(max_heading_level)
    if capped == 6:
        return
    deeper = [f"h{level}" for level in range(capped + 1, 7)]
    for heading in soup.find_all(deeper):
        heading.name = f"h{capped}"


def _prune_empty_elements(body: Tag) -> None:
    """Remove childless, textless elements until nothing changes."""
    changed = True
    while changed:
        changed = False
        for el in body.find_all(True):
            if not _live(el) or el.find(True) is not None:
                continue
            if el.name in PRESERVE_EMPTY_TAGS:
                continue
            if not normalize_whitespace(el.get_text()):
                el.decompose()
                changed = True


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def sanitize(raw_html: str, options: TransformOptions | None = None) -> CleanResult:
    """Clean *raw_html* and return the serialized body content."""
    options = options or TransformOptions()
    soup = parse_document(raw_html)

    noise_tags = NOISE_TAGS + AGGRESSIVE_NOISE_TAGS if options.aggressive else NOISE_TAGS
    removed = _remove_by_tag_name(soup, noise_tags)
    body = soup.body
    removed += _remove_noise_containers(body, options.aggressive)

    if not options.keep_images:
        _remove_by_tag_name(soup, IMAGE_TAGS)
    if not options.preserve_tables:
        _remove_by_tag_name(soup, TABLE_TAGS)
    if not options.keep_links:
        _unwrap_links(soup)

    _flatten_to_text(soup)
    _strip_attributes(body)
    _normalize_heading_levels(soup, options.max_heading_level)
    isolate_primary_content(soup, options.aggressive)
    body = soup.body
    _prune_empty_elements(body)

    cleaned = body.decode_contents().strip()
    logger.debug(
        "sanitize: %d noise elements removed, %d -> %d chars",
        removed, len(raw_html), len(cleaned),
    )
    return CleanResult(cleaned_html=cleaned)
