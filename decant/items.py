"""Pydantic schemas for pipeline options, intermediate results and reports."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from decant import settings
from decant.rules import clamp_heading_level

ExtractionReason = Literal["readability", "fallback:no-article", "fallback:low-confidence"]
Mode = Literal["clean", "extract"]


# ---------------------------------------------------------------------------
# Options
# ---------------------------------------------------------------------------

class TransformOptions(BaseModel):
    """Per-call switches threaded through every pipeline stage."""

    model_config = {"frozen": True}

    keep_links: bool = settings.DEFAULT_KEEP_LINKS
    keep_images: bool = settings.DEFAULT_KEEP_IMAGES
    preserve_tables: bool = settings.DEFAULT_PRESERVE_TABLES
    max_heading_level: int = settings.DEFAULT_MAX_HEADING_LEVEL
    aggressive: bool = settings.DEFAULT_AGGRESSIVE

    @field_validator("max_heading_level", mode="before")
    @classmethod
    def clamp_level(cls, v: Any) -> Any:
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return clamp_heading_level(v)
        return v


# ---------------------------------------------------------------------------
# Stage results
# ---------------------------------------------------------------------------

class CleanResult(BaseModel):
    cleaned_html: str


class ExtractResult(BaseModel):
    cleaned_html: str
    used_readability: bool
    extraction_reason: ExtractionReason


# ---------------------------------------------------------------------------
# Sections and budgets
# ---------------------------------------------------------------------------

class MarkdownSection(BaseModel):
    """A contiguous slice of rendered markdown with its estimated token cost."""

    heading: str
    level: int = Field(ge=0, le=6)
    content: str
    tokens: int = Field(ge=0)


class SectionBreakdown(BaseModel):
    sections: list[MarkdownSection] = Field(default_factory=list)
    total_tokens: int = 0
    max_tokens: int = 0
    over_budget: bool = False
    overage_tokens: int = 0


class TruncationResult(BaseModel):
    markdown: str = ""
    kept_sections: list[MarkdownSection] = Field(default_factory=list)
    dropped_sections: list[MarkdownSection] = Field(default_factory=list)
    kept_tokens: int = 0


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------

class SectionSummary(BaseModel):
    heading: str
    level: int
    tokens: int


class ContentStats(BaseModel):
    """Size and token deltas between the raw input and rendered markdown."""

    mode: Mode
    input_chars: int
    output_chars: int
    input_tokens_estimate: int
    output_tokens_estimate: int
    char_reduction: int
    char_reduction_pct: float
    token_reduction: int
    token_reduction_pct: float

    # Source provenance (set when the HTML came from a converted format)
    source_format: str | None = None
    source_chars: int | None = None

    # Budget fields (set when a token budget was supplied)
    max_tokens: int | None = None
    over_budget: bool | None = None
    sections: list[SectionSummary] | None = None


class ProcessResult(BaseModel):
    """Everything the top-level pipeline hands back to its caller."""

    markdown: str
    stats: ContentStats
    breakdown: SectionBreakdown | None = None
    truncation: TruncationResult | None = None
