"""Extraction sub-package: deterministic cleaning, article extraction, Markdown rendering."""

from .isolate import isolate_primary_content, score_candidate
from .main_content import extract_content, is_low_confidence
from .markdown import html_to_markdown, normalize_markdown
from .sanitize import sanitize, sanitize_href

__all__ = [
    "extract_content",
    "html_to_markdown",
    "is_low_confidence",
    "isolate_primary_content",
    "normalize_markdown",
    "sanitize",
    "sanitize_href",
    "score_candidate",
]
