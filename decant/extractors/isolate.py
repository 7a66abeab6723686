"""Primary-content isolation.

Scores every ``article``/``main``/``section``/``div`` under ``<body>`` and,
when one candidate clearly dominates, replaces the body with that subtree.
Prose-bearing regions score high through paragraph/heading bonuses; link
farms are pushed down by the link-density penalty.
"""

from __future__ import annotations

import logging
import math
import re

from bs4 import BeautifulSoup, Tag

from decant.rules import (
    CANDIDATE_MIN_CHARS,
    CONTENT_CANDIDATE_TAGS,
    ISOLATION_BODY_RATIO,
    ISOLATION_BODY_RATIO_AGGRESSIVE,
    ISOLATION_MIN_BODY_CHARS,
    ISOLATION_MIN_SCORE,
    ISOLATION_MIN_SCORE_AGGRESSIVE,
    ISOLATION_MIN_SHARE,
    SCORE_HEADING_WEIGHT,
    SCORE_LINK_DENSITY_PENALTY,
    SCORE_LIST_ITEM_WEIGHT,
    SCORE_PARAGRAPH_WEIGHT,
    SCORE_PUNCTUATION_WEIGHT,
)

logger = logging.getLogger(__name__)

_PUNCTUATION_RE = re.compile(r"[.!?;:]")
_HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]


def normalize_whitespace(value: str) -> str:
    return " ".join(value.split())


def text_length(tag: Tag) -> int:
    """Length of *tag*'s text after collapsing whitespace runs."""
    return len(normalize_whitespace(tag.get_text()))


def score_candidate(tag: Tag) -> float:
    """Return the content score of *tag* (0 for candidates under 80 chars)."""
    text = normalize_whitespace(tag.get_text())
    if len(text) < CANDIDATE_MIN_CHARS:
        return 0

    link_chars = sum(
        len(normalize_whitespace(a.get_text())) for a in tag.find_all("a")
    )
    paragraphs = len(tag.find_all("p"))
    headings = len(tag.find_all(_HEADING_TAGS))
    list_items = len(tag.find_all("li"))
    punctuation = len(_PUNCTUATION_RE.findall(text))
    link_density = link_chars / len(text)

    return (
        len(text)
        + paragraphs * SCORE_PARAGRAPH_WEIGHT
        + headings * SCORE_HEADING_WEIGHT
        + list_items * SCORE_LIST_ITEM_WEIGHT
        + punctuation * SCORE_PUNCTUATION_WEIGHT
        - link_density * SCORE_LINK_DENSITY_PENALTY
    )


def isolate_primary_content(soup: BeautifulSoup, aggressive: bool = False) -> bool:
    """Replace the body of *soup* with its best content candidate, in place.

    Returns True when the body was replaced.  Nothing happens unless the
    best candidate clears the minimum score, holds a significant share of
    the body text, and still leaves the body meaningfully larger.
    """
    body = soup.body
    if body is None:
        return False

    body_chars = text_length(body)
    if body_chars < ISOLATION_MIN_BODY_CHARS:
        return False

    best: Tag | None = None
    best_score: float = 0
    for candidate in body.find_all(list(CONTENT_CANDIDATE_TAGS)):
        score = score_candidate(candidate)
        if score > best_score:
            best, best_score = candidate, score

    if best is None:
        return False

    best_chars = text_length(best)
    significant_share = best_chars >= math.floor(body_chars * ISOLATION_MIN_SHARE)
    ratio = ISOLATION_BODY_RATIO_AGGRESSIVE if aggressive else ISOLATION_BODY_RATIO
    body_much_larger = body_chars >= best_chars * ratio
    min_score = ISOLATION_MIN_SCORE_AGGRESSIVE if aggressive else ISOLATION_MIN_SCORE

    if best_score < min_score or not significant_share or not body_much_larger:
        logger.debug(
            "isolation skipped: <%s> score=%.1f chars=%d body=%d",
            best.name, best_score, best_chars, body_chars,
        )
        return False

    logger.debug(
        "isolation applied: <%s> score=%.1f chars=%d body=%d",
        best.name, best_score, best_chars, body_chars,
    )
    best = best.extract()
    body.clear()
    body.append(best)
    return True
