"""Tests for section segmentation and token-budget allocation."""

from __future__ import annotations

from decant.budget import (
    PREAMBLE_HEADING,
    TRUNCATION_MARKER,
    auto_fit_selection,
    build_section_breakdown,
    build_sections,
    compute_selected_tokens,
    format_section_breakdown,
    format_token_budget_error,
    format_token_budget_warning,
    parse_markdown_sections,
    split_into_paragraphs,
    truncate_to_token_budget,
)
from decant.items import MarkdownSection


def _section(heading: str, tokens: int, level: int = 1) -> MarkdownSection:
    return MarkdownSection(heading=heading, level=level, content=f"{heading}\ncontent", tokens=tokens)


# ---------------------------------------------------------------------------
# Heading sections
# ---------------------------------------------------------------------------

class TestParseMarkdownSections:
    def test_splits_on_heading_levels(self):
        md = "# Heading 1\nParagraph one.\n## Heading 2\nParagraph two.\n### Heading 3\nDeep."
        sections = parse_markdown_sections(md)
        assert [s.heading for s in sections] == ["# Heading 1", "## Heading 2", "### Heading 3"]
        assert [s.level for s in sections] == [1, 2, 3]

    def test_no_headings_is_single_preamble(self):
        sections = parse_markdown_sections("Just some text\nwith multiple lines.")
        assert len(sections) == 1
        assert sections[0].heading == PREAMBLE_HEADING
        assert sections[0].level == 0

    def test_empty_markdown(self):
        assert parse_markdown_sections("") == []

    def test_blank_preamble_omitted(self):
        sections = parse_markdown_sections("# First Heading\nContent here.")
        assert len(sections) == 1
        assert sections[0].heading == "# First Heading"

    def test_preamble_kept(self):
        sections = parse_markdown_sections("Preamble text.\n\n# First Heading\nContent here.")
        assert len(sections) == 2
        assert sections[0].heading == PREAMBLE_HEADING
        assert "Preamble text." in sections[0].content

    def test_tokens_positive(self):
        for s in parse_markdown_sections("# Heading\nSome content here with words."):
            assert s.tokens > 0

    def test_reconstruction(self):
        md = "Preamble.\n\n# Section A\nContent A.\n## Section B\nContent B."
        sections = parse_markdown_sections(md)
        assert "".join(s.content for s in sections) == md

    def test_reconstruction_without_headings(self):
        md = "Just text\nacross lines.\n\nAnd a second paragraph."
        assert "".join(s.content for s in parse_markdown_sections(md)) == md

    def test_whitespace_preamble_dropped_from_reconstruction(self):
        md = "\n  \n# Section A\nContent A.\n## Section B\nContent B."
        sections = parse_markdown_sections(md)
        assert sections[0].heading == "# Section A"
        assert "".join(s.content for s in sections) == md[md.index("#"):]

    def test_nbsp_after_hashes(self):
        sections = parse_markdown_sections("Intro.\n##\xa0Deep\ntext")
        assert [s.level for s in sections] == [0, 2]

    def test_deep_headings(self):
        sections = parse_markdown_sections("#### H4\nText.\n##### H5\nMore.\n###### H6\nDeep.")
        assert [s.level for s in sections] == [4, 5, 6]

    def test_hash_without_space_is_not_heading(self):
        sections = parse_markdown_sections("# Title\n#hashtag\n####### seven")
        assert len(sections) == 1
        assert sections[0].content == "# Title\n#hashtag\n####### seven"


# ---------------------------------------------------------------------------
# Paragraph sections
# ---------------------------------------------------------------------------

class TestSplitIntoParagraphs:
    def test_splits_blocks(self):
        md = "# Title\n\nFirst paragraph content.\n\nSecond paragraph here.\n\nThird paragraph."
        result = split_into_paragraphs(md)
        assert len(result) == 4
        assert result[0].heading == "# Title"
        assert result[0].level == 1
        assert result[1].heading == "¶ First paragraph content."
        assert result[1].level == 0

    def test_single_paragraph_returns_empty(self):
        assert split_into_paragraphs("Just one paragraph with no breaks.") == []

    def test_long_first_line_label(self):
        long_line = "This is a very long paragraph first line that exceeds fifty characters easily."
        result = split_into_paragraphs(f"Short intro.\n\n{long_line}\n\nAnother paragraph.")
        assert len(result) == 3
        assert result[1].heading == f"¶ {long_line[:47]}..."

    def test_heading_blocks_keep_markers(self):
        md = "Preamble text.\n\n## Section One\n\nBody text.\n\n## Section Two\n\nMore text."
        result = split_into_paragraphs(md)
        assert len(result) == 5
        assert result[1].heading == "## Section One"
        assert result[1].level == 2
        assert result[3].heading == "## Section Two"

    def test_reconstruction(self):
        md = "First block.\n\nSecond block\nstill second.\n\nThird block."
        result = split_into_paragraphs(md)
        assert "".join(s.content for s in result) == md
        assert all(s.tokens > 0 for s in result)


class TestBuildSections:
    def test_prefers_heading_sections(self):
        md = "# A\nText.\n\n# B\nMore."
        assert [s.heading for s in build_sections(md)] == ["# A", "# B"]

    def test_falls_back_to_paragraphs(self):
        md = "# Title\n\nOne.\n\nTwo."
        assert len(build_sections(md)) == 3

    def test_single_block(self):
        sections = build_sections("Only text.")
        assert len(sections) == 1
        assert sections[0].heading == PREAMBLE_HEADING

    def test_empty(self):
        assert build_sections("") == []


# ---------------------------------------------------------------------------
# Breakdown and allocation
# ---------------------------------------------------------------------------

class TestBreakdown:
    def test_under_budget(self, make_sections):
        b = build_section_breakdown(make_sections([100, 200, 300]), 1000)
        assert b.total_tokens == 600
        assert b.max_tokens == 1000
        assert b.over_budget is False
        assert b.overage_tokens == 0

    def test_over_budget(self, make_sections):
        b = build_section_breakdown(make_sections([500, 400, 300]), 1000)
        assert b.total_tokens == 1200
        assert b.over_budget is True
        assert b.overage_tokens == 200

    def test_exactly_at_budget(self, make_sections):
        b = build_section_breakdown(make_sections([500, 500]), 1000)
        assert b.over_budget is False
        assert b.overage_tokens == 0


class TestAutoFitSelection:
    def test_greedy_fill(self, make_sections):
        assert auto_fit_selection(make_sections([100, 100, 100]), 250) == [True, True, False]

    def test_first_always_selected(self, make_sections):
        assert auto_fit_selection(make_sections([500, 100]), 100) == [True, False]

    def test_all_fit(self, make_sections):
        assert auto_fit_selection(make_sections([50, 50, 50]), 999) == [True, True, True]

    def test_stops_at_first_overflow(self, make_sections):
        # the 50-token section would fit on its own but is never reconsidered
        assert auto_fit_selection(make_sections([100, 300, 50]), 200) == [True, False, False]

    def test_empty(self):
        assert auto_fit_selection([], 100) == []

    def test_exact_boundary(self, make_sections):
        assert auto_fit_selection(make_sections([50, 50]), 100) == [True, True]

    def test_selected_tokens(self, make_sections):
        sections = make_sections([100, 200, 300])
        assert compute_selected_tokens(sections, [True, True, True]) == 600
        assert compute_selected_tokens(sections, [False, True, False]) == 200
        assert compute_selected_tokens(sections, [False, False, False]) == 0


class TestTruncateToTokenBudget:
    def test_under_budget_keeps_all(self, make_sections):
        sections = make_sections([100, 200, 300])
        result = truncate_to_token_budget(sections, 1000)
        assert len(result.kept_sections) == 3
        assert result.dropped_sections == []
        assert result.markdown == "".join(s.content for s in sections)
        assert "truncated" not in result.markdown

    def test_drops_trailing_sections(self, make_sections):
        sections = make_sections([100, 200, 300])
        result = truncate_to_token_budget(sections, 350)
        assert len(result.kept_sections) == 2
        assert len(result.dropped_sections) == 1
        assert result.kept_tokens == 300
        assert result.markdown == (
            "# Section 1\nContent for section 1.\n# Section 2\nContent for section 2."
            + TRUNCATION_MARKER
        )

    def test_oversized_first_section_kept(self, make_sections):
        sections = make_sections([500, 200])
        result = truncate_to_token_budget(sections, 100)
        assert result.kept_sections == [sections[0]]
        assert len(result.dropped_sections) == 1
        assert "Content truncated" in result.markdown

    def test_single_oversized_section_no_marker(self, make_sections):
        sections = make_sections([500])
        result = truncate_to_token_budget(sections, 100)
        assert len(result.kept_sections) == 1
        assert result.dropped_sections == []
        assert "truncated" not in result.markdown

    def test_empty(self):
        result = truncate_to_token_budget([], 100)
        assert result.markdown == ""
        assert result.kept_sections == []
        assert result.dropped_sections == []
        assert result.kept_tokens == 0

    def test_kept_tokens_bounded(self, make_sections):
        sections = make_sections([40, 80, 20, 90, 10])
        for budget in (50, 120, 140, 230, 500):
            result = truncate_to_token_budget(sections, budget)
            assert result.kept_tokens <= max(budget, sections[0].tokens)
            assert result.kept_sections + result.dropped_sections == sections


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

class TestReports:
    def test_breakdown_over_budget(self):
        breakdown = build_section_breakdown(
            [_section("# Intro", 120), _section("## Details", 830, level=2)], 500,
        )
        output = format_section_breakdown(breakdown)
        assert "budget: 500 tokens" in output
        assert "# Intro" in output
        assert "## Details" in output
        assert "120" in output
        assert "830" in output
        assert "950" in output
        assert "(450 over budget)" in output

    def test_breakdown_within_budget(self):
        output = format_section_breakdown(build_section_breakdown([_section("# Intro", 50)], 500))
        assert "within budget" in output

    def test_thousands_separator(self):
        output = format_section_breakdown(build_section_breakdown([_section("# Big", 12000)], 1000))
        assert "12,000" in output
        assert "budget: 1,000 tokens" in output

    def test_error_report(self):
        output = format_token_budget_error(build_section_breakdown([_section("# Intro", 500)], 100))
        assert output.startswith("Error:")
        assert "# Intro" in output
        assert "Suggestions:" in output
        assert "--max-tokens" in output
        assert "decant extract" in output
        assert "--aggressive" in output
        assert "--truncate" in output

    def test_warning_report(self):
        sections = [_section("# Intro", 100), _section("## Details", 500, level=2)]
        breakdown = build_section_breakdown(sections, 200)
        truncation = truncate_to_token_budget(sections, 200)
        output = format_token_budget_warning(breakdown, truncation)
        assert output.startswith("Warning:")
        assert "# Intro  [kept]" in output
        assert "## Details  [dropped]" in output
        assert "Kept 1 of 2 sections (100 tokens)." in output
