"""decant - turn noisy HTML into compact, LLM-ready Markdown.

Quick usage::

    from decant import process_html

    result = process_html(html, mode="extract")
    print(result.markdown)
    print(result.stats.output_tokens_estimate)

Token budgets::

    from decant import TransformOptions, process_html

    result = process_html(html, TransformOptions(max_heading_level=3), max_tokens=1500)
    if result.breakdown.over_budget:
        markdown = result.truncation.markdown

Individual stages::

    from decant import sanitize, extract_content, html_to_markdown

    cleaned = sanitize(html).cleaned_html
    markdown = html_to_markdown(cleaned)
"""

from decant.budget import (
    auto_fit_selection,
    build_section_breakdown,
    build_sections,
    parse_markdown_sections,
    split_into_paragraphs,
    truncate_to_token_budget,
)
from decant.extractors import extract_content, html_to_markdown, sanitize
from decant.items import (
    CleanResult,
    ContentStats,
    ExtractResult,
    MarkdownSection,
    ProcessResult,
    SectionBreakdown,
    TransformOptions,
    TruncationResult,
)
from decant.pipeline import process_html
from decant.stats import build_stats, estimate_tokens

__version__ = "0.1.0"
__all__ = [
    "CleanResult",
    "ContentStats",
    "ExtractResult",
    "MarkdownSection",
    "ProcessResult",
    "SectionBreakdown",
    "TransformOptions",
    "TruncationResult",
    "auto_fit_selection",
    "build_section_breakdown",
    "build_sections",
    "build_stats",
    "estimate_tokens",
    "extract_content",
    "html_to_markdown",
    "parse_markdown_sections",
    "process_html",
    "sanitize",
    "split_into_paragraphs",
    "truncate_to_token_budget",
]
