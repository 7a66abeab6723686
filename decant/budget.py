"""Section segmentation and token-budget allocation for rendered Markdown.

Markdown is cut into heading-delimited sections (or blank-line-delimited
paragraphs for documents with a single section), each carrying its estimated
token cost.  Budget allocation is a strictly greedy forward fill: sections
are kept in document order until the next one would overflow, and nothing
after that point is reconsidered.

Usage::

    from decant.budget import build_sections, truncate_to_token_budget

    sections = build_sections(markdown)
    result = truncate_to_token_budget(sections, max_tokens=2000)
    print(result.markdown)
"""

from __future__ import annotations

import re

from decant.items import MarkdownSection, SectionBreakdown, TruncationResult
from decant.stats import estimate_tokens

PREAMBLE_HEADING = "(preamble)"

TRUNCATION_MARKER = (
    "\n\n---\n\n"
    "_[Content truncated: output exceeded token budget. "
    "Use `decant stats --max-tokens N` to see the full section breakdown.]_"
)

# any non-newline whitespace after the hashes, NBSP included
_HEADING_RE = re.compile(r"^(#{1,6})[^\S\n]")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n\n+")
_PARAGRAPH_LABEL_MAX = 50
_PARAGRAPH_LABEL_KEEP = 47


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------

def _section(heading: str, level: int, content: str, tokens: int | None = None) -> MarkdownSection:
    return MarkdownSection(
        heading=heading,
        level=level,
        content=content,
        tokens=estimate_tokens(content) if tokens is None else tokens,
    )


def parse_markdown_sections(markdown: str) -> list[MarkdownSection]:
    """Split *markdown* at ATX heading lines.

    Each section runs from its heading line up to (not including) the next
    heading line, newlines included, so joining every ``content`` in order
    reproduces *markdown* exactly.  Text before the first heading becomes a
    level-0 ``(preamble)`` section, omitted when it is only whitespace.
    """
    if not markdown:
        return []

    sections: list[MarkdownSection] = []
    heading, level = PREAMBLE_HEADING, 0
    lines: list[str] = []

    def flush() -> None:
        content = "".join(lines)
        if heading == PREAMBLE_HEADING and not content.strip():
            return
        sections.append(_section(heading, level, content))

    for line in markdown.splitlines(keepends=True):
        bare = line.rstrip("\r\n")
        match = _HEADING_RE.match(bare)
        if match:
            flush()
            heading, level = bare, len(match.group(1))
            lines = [line]
        else:
            lines.append(line)

    flush()
    return sections


def split_into_paragraphs(markdown: str) -> list[MarkdownSection]:
    """Split *markdown* into blank-line-delimited paragraph sections.

    Returns an empty list when there are fewer than two paragraphs.  Every
    section after the first is prefixed with a full blank line ('\\n\\n'), not a
    single newline, because kept sections are joined with no separator and
    a lone newline would merge neighbouring paragraphs into one.
    """
    blocks = [b.strip() for b in _PARAGRAPH_SPLIT_RE.split(markdown) if b.strip()]
    if len(blocks) < 2:
        return []

    sections: list[MarkdownSection] = []
    for i, block in enumerate(blocks):
        first_line = block.split("\n", 1)[0]
        match = _HEADING_RE.match(first_line)
        if match:
            heading, level = first_line, len(match.group(1))
        elif len(first_line) > _PARAGRAPH_LABEL_MAX:
            heading, level = f"¶ {first_line[:_PARAGRAPH_LABEL_KEEP]}...", 0
        else:
            heading, level = f"¶ {first_line}", 0
        content = block if i == 0 else f"\n\n{block}"
        sections.append(_section(heading, level, content, estimate_tokens(block)))
    return sections


def build_sections(markdown: str) -> list[MarkdownSection]:
    """Heading sections, or paragraph sections when there are fewer than two."""
    sections = parse_markdown_sections(markdown)
    if len(sections) < 2:
        paragraphs = split_into_paragraphs(markdown)
        if paragraphs:
            return paragraphs
    return sections


# ---------------------------------------------------------------------------
# Budget allocation
# ---------------------------------------------------------------------------

def build_section_breakdown(sections: list[MarkdownSection], max_tokens: int) -> SectionBreakdown:
    total = sum(s.tokens for s in sections)
    return SectionBreakdown(
        sections=sections,
        total_tokens=total,
        max_tokens=max_tokens,
        over_budget=total > max_tokens,
        overage_tokens=max(0, total - max_tokens),
    )


def auto_fit_selection(sections: list[MarkdownSection], max_tokens: int) -> list[bool]:
    """Greedy forward-fill selection vector.

    The first section is always selected; later sections are selected in
    order until one would push the running total past *max_tokens*.
    """
    selected = [False] * len(sections)
    if not sections:
        return selected

    selected[0] = True
    used = sections[0].tokens
    for i in range(1, len(sections)):
        if used + sections[i].tokens > max_tokens:
            break
        selected[i] = True
        used += sections[i].tokens
    return selected


def compute_selected_tokens(sections: list[MarkdownSection], selected: list[bool]) -> int:
    return sum(s.tokens for s, keep in zip(sections, selected) if keep)


def truncate_to_token_budget(sections: list[MarkdownSection], max_tokens: int) -> TruncationResult:
    """Keep the longest budget-fitting prefix of *sections*.

    A truncation notice is appended only when at least one section was
    dropped; a lone oversized section is returned whole without one.
    """
    if not sections:
        return TruncationResult()

    selected = auto_fit_selection(sections, max_tokens)
    cut = selected.index(False) if False in selected else len(sections)
    kept, dropped = sections[:cut], sections[cut:]

    markdown = "".join(s.content for s in kept)
    if dropped:
        markdown = markdown.rstrip() + TRUNCATION_MARKER

    return TruncationResult(
        markdown=markdown,
        kept_sections=kept,
        dropped_sections=dropped,
        kept_tokens=sum(s.tokens for s in kept),
    )


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

_RULE_WIDTH = 38


def _section_rows(breakdown: SectionBreakdown, labels: list[str] | None = None) -> list[str]:
    rows = ["  #   Tokens  Section"]
    for i, s in enumerate(breakdown.sections):
        row = f"  {i + 1:>3}{s.tokens:>8,}  {s.heading}"
        if labels:
            row += f"  {labels[i]}"
        rows.append(row)
    return rows


def format_section_breakdown(breakdown: SectionBreakdown) -> str:
    lines = [f"Section breakdown (budget: {breakdown.max_tokens:,} tokens):", ""]
    lines.extend(_section_rows(breakdown))
    lines.append("  " + "─" * _RULE_WIDTH)
    note = (
        f" ({breakdown.overage_tokens:,} over budget)"
        if breakdown.over_budget
        else " (within budget)"
    )
    lines.append(f"     {breakdown.total_tokens:>8,}  total{note}")
    return "\n".join(lines)


def format_token_budget_error(breakdown: SectionBreakdown) -> str:
    return "\n".join(
        [
            "Error: output exceeds token budget.",
            "",
            format_section_breakdown(breakdown),
            "",
            "Suggestions:",
            "  - Increase --max-tokens to fit the full output",
            "  - Use `decant extract` for tighter content extraction",
            "  - Add --aggressive for stronger pruning",
            "  - Add --truncate to keep the leading sections that fit",
        ],
    )


def format_token_budget_warning(breakdown: SectionBreakdown, truncation: TruncationResult) -> str:
    # kept sections are always a prefix of the breakdown
    kept = len(truncation.kept_sections)
    labels = ["[kept]" if i < kept else "[dropped]" for i in range(len(breakdown.sections))]

    lines = [
        "Warning: output exceeded token budget, smart truncation applied.",
        "",
        f"Section breakdown (budget: {breakdown.max_tokens:,} tokens):",
        "",
    ]
    lines.extend(_section_rows(breakdown, labels))
    lines.append("")
    lines.append(
        f"Kept {len(truncation.kept_sections)} of {len(breakdown.sections)} sections "
        f"({truncation.kept_tokens:,} tokens).",
    )
    return "\n".join(lines)
