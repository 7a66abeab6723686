"""decant.pipeline - top-level HTML to Markdown entry point.

Basic usage::

    from decant.pipeline import process_html

    result = process_html(html, mode="extract")
    print(result.markdown)
    print(result.stats.token_reduction_pct)

With a token budget the result also carries the section breakdown and, when
the markdown is over budget, a greedy truncation the caller may choose to
use instead of the full output::

    result = process_html(html, max_tokens=2000)
    if result.breakdown.over_budget:
        print(result.truncation.markdown)

Every call parses its own document tree and shares no state with other
calls, so it is safe to run concurrently.
"""

from __future__ import annotations

import logging

from decant.budget import build_section_breakdown, build_sections, truncate_to_token_budget
from decant.extractors.main_content import extract_content
from decant.extractors.markdown import html_to_markdown
from decant.extractors.sanitize import sanitize
from decant.items import Mode, ProcessResult, SectionSummary, TransformOptions
from decant.stats import build_stats

logger = logging.getLogger(__name__)


def clean_to_html(html: str, mode: Mode, options: TransformOptions) -> str:
    if mode == "extract":
        result = extract_content(html, options)
        logger.debug("extraction outcome: %s", result.extraction_reason)
        return result.cleaned_html
    return sanitize(html, options).cleaned_html


def process_html(
    html: str,
    options: TransformOptions | None = None,
    *,
    mode: Mode = "clean",
    max_tokens: int | None = None,
    source_format: str | None = None,
    source_chars: int | None = None,
) -> ProcessResult:
    """Clean or extract *html*, render Markdown and measure the reduction.

    Args:
        html:          Decoded HTML text.
        options:       Transform switches (defaults when omitted).
        mode:          ``"clean"`` runs the sanitizer only; ``"extract"``
                       tries readability first.
        max_tokens:    Optional token budget.  Adds a section breakdown and,
                       when over budget, a truncation result.
        source_format: Provenance label when *html* was converted from
                       another format (e.g. ``"docx"``).
        source_chars:  Size of the original source before conversion.

    Returns:
        A :class:`~decant.items.ProcessResult`.  Going over budget is
        reported as data; whether to fail or truncate is up to the caller.
    """
    options = options or TransformOptions()
    markdown = html_to_markdown(clean_to_html(html, mode, options), options)
    stats = build_stats(
        mode, html, markdown, source_format=source_format, source_chars=source_chars,
    )
    if max_tokens is None:
        return ProcessResult(markdown=markdown, stats=stats)

    sections = build_sections(markdown)
    breakdown = build_section_breakdown(sections, max_tokens)
    stats = stats.model_copy(
        update={
            "max_tokens": max_tokens,
            "over_budget": breakdown.over_budget,
            "sections": [
                SectionSummary(heading=s.heading, level=s.level, tokens=s.tokens)
                for s in sections
            ],
        },
    )

    truncation = None
    if breakdown.over_budget:
        truncation = truncate_to_token_budget(sections, max_tokens)
        logger.debug(
            "over budget by %d tokens; kept %d of %d sections",
            breakdown.overage_tokens,
            len(truncation.kept_sections),
            len(sections),
        )
    return ProcessResult(
        markdown=markdown, stats=stats, breakdown=breakdown, truncation=truncation,
    )
