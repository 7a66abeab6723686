"""Main content extraction: readability-lxml with a confidence-gated fallback.

readability-lxml can silently return near-empty or truncated output on some
page layouts.  The confidence gate compares the extracted text length with
the original body text and routes those cases to the deterministic
sanitizer instead.

Outcomes:
  readability              - extractor output accepted, then sanitized
  fallback:no-article      - extractor produced nothing
  fallback:low-confidence  - extractor output failed the confidence gate
"""

from __future__ import annotations

import html as html_lib
import logging
import re
from typing import NamedTuple

from bs4 import BeautifulSoup

from decant.extractors.isolate import normalize_whitespace
from decant.extractors.sanitize import parse_document, sanitize
from decant.items import ExtractResult, TransformOptions
from decant.rules import (
    CONFIDENCE_COVERAGE_MIN_DOC_CHARS,
    CONFIDENCE_FLOOR_LARGE,
    CONFIDENCE_FLOOR_MULTIPLIER,
    CONFIDENCE_FLOOR_SMALL,
    CONFIDENCE_LARGE_DOC_CHARS,
    CONFIDENCE_MIN_COVERAGE,
    READABILITY_MIN_TEXT_LENGTH,
    READABILITY_MIN_TEXT_LENGTH_AGGRESSIVE,
)

logger = logging.getLogger(__name__)

_H1_RE = re.compile(r"<h1[\s>]", re.IGNORECASE)
_FALLBACK_HEADING_SELECTORS: tuple[str, ...] = ("article h1", "main h1", "h1")


class SourceProfile(NamedTuple):
    text_length: int
    heading: str | None


def normalized_text_length(text: str) -> int:
    return len(normalize_whitespace(text))


def _profile_source(raw_html: str) -> SourceProfile:
    """Measure the original body text and find a fallback ``<h1>``."""
    soup = parse_document(raw_html)
    heading: str | None = None
    for selector in _FALLBACK_HEADING_SELECTORS:
        found = soup.select_one(selector)
        if found is not None:
            heading = found.get_text().strip() or None
            break
    return SourceProfile(
        text_length=normalized_text_length(soup.body.get_text()),
        heading=heading,
    )


# ---------------------------------------------------------------------------
# Confidence gate
# ---------------------------------------------------------------------------

def is_low_confidence(original_length: int, extracted_length: int) -> bool:
    """Return True when the extracted text is too small to trust."""
    if extracted_length == 0:
        return True

    floor = (
        CONFIDENCE_FLOOR_LARGE
        if original_length > CONFIDENCE_LARGE_DOC_CHARS
        else CONFIDENCE_FLOOR_SMALL
    )
    if original_length > floor * CONFIDENCE_FLOOR_MULTIPLIER and extracted_length < floor:
        return True

    coverage = 1 if original_length == 0 else extracted_length / original_length
    return original_length > CONFIDENCE_COVERAGE_MIN_DOC_CHARS and coverage < CONFIDENCE_MIN_COVERAGE


# ---------------------------------------------------------------------------
# readability-lxml
# ---------------------------------------------------------------------------

def _run_readability(raw_html: str, aggressive: bool = False) -> str | None:
    """Return readability-lxml's article fragment, or None when it finds nothing."""
    from readability import Document  # type: ignore[import-untyped]

    min_text_length = (
        READABILITY_MIN_TEXT_LENGTH_AGGRESSIVE if aggressive else READABILITY_MIN_TEXT_LENGTH
    )
    try:
        content = Document(raw_html, min_text_length=min_text_length).summary(html_partial=True)
    except Exception as exc:
        logger.debug("readability failed: %s", exc)
        return None
    if not content or not content.strip():
        return None
    return content


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(raw_html: str, options: TransformOptions | None = None) -> ExtractResult:
    """Extract the primary article from *raw_html* and sanitize it."""
    options = options or TransformOptions()
    source = _profile_source(raw_html)

    article_html = _run_readability(raw_html, options.aggressive)
    if article_html is None:
        logger.debug("extract: no article found, falling back to sanitizer")
        return ExtractResult(
            cleaned_html=sanitize(raw_html, options).cleaned_html,
            used_readability=False,
            extraction_reason="fallback:no-article",
        )

    extracted_length = normalized_text_length(
        BeautifulSoup(article_html, "lxml").get_text(),
    )
    if is_low_confidence(source.text_length, extracted_length):
        logger.debug(
            "extract: low confidence (%d of %d chars), falling back to sanitizer",
            extracted_length, source.text_length,
        )
        return ExtractResult(
            cleaned_html=sanitize(raw_html, options).cleaned_html,
            used_readability=False,
            extraction_reason="fallback:low-confidence",
        )

    if not _H1_RE.search(article_html) and source.heading:
        article_html = f"<h1>{html_lib.escape(source.heading)}</h1>{article_html}"

    logger.debug(
        "extract: readability accepted (%d of %d chars)",
        extracted_length, source.text_length,
    )
    return ExtractResult(
        cleaned_html=sanitize(article_html, options).cleaned_html,
        used_readability=True,
        extraction_reason="readability",
    )
