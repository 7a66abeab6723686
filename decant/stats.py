"""Token estimation and before/after content statistics."""

from __future__ import annotations

import math

from decant.items import ContentStats, Mode

_CHARS_PER_TOKEN = 4
_TOKENS_PER_WORD = 1.33


def estimate_tokens(text: str) -> int:
    """Approximate the LLM token count of *text*.

    Averages a character-based estimate (len / 4) with a word-based one
    (words * 1.33).  Empty or whitespace-only text is 0 tokens; anything
    else is at least 1.
    """
    words = text.split()
    if not words:
        return 0
    normalized = " ".join(words)

    by_chars = math.ceil(len(normalized) / _CHARS_PER_TOKEN)
    by_words = math.ceil(len(words) * _TOKENS_PER_WORD)
    return max(1, _round_half_up((by_chars + by_words) / 2))


def _round_half_up(value: float) -> int:
    # round() is banker's rounding; token counts round .5 upward
    return math.floor(value + 0.5)


def _pct(delta: int, base: int) -> float:
    return 0.0 if base == 0 else round(delta / base * 100, 2)


def build_stats(
    mode: Mode,
    input_text: str,
    output_text: str,
    source_format: str | None = None,
    source_chars: int | None = None,
) -> ContentStats:
    input_chars = len(input_text)
    output_chars = len(output_text)
    input_tokens = estimate_tokens(input_text)
    output_tokens = estimate_tokens(output_text)

    char_reduction = input_chars - output_chars
    token_reduction = input_tokens - output_tokens

    return ContentStats(
        mode=mode,
        input_chars=input_chars,
        output_chars=output_chars,
        input_tokens_estimate=input_tokens,
        output_tokens_estimate=output_tokens,
        char_reduction=char_reduction,
        char_reduction_pct=_pct(char_reduction, input_chars),
        token_reduction=token_reduction,
        token_reduction_pct=_pct(token_reduction, input_tokens),
        source_format=source_format,
        source_chars=source_chars,
    )


def format_stats_markdown(stats: ContentStats) -> str:
    """Render *stats* as a short Markdown bullet list."""
    lines = [
        f"# decant stats ({stats.mode})",
        "",
    ]
    if stats.source_format:
        lines.append(f"- source_format: {stats.source_format}")
    if stats.source_chars is not None:
        lines.append(f"- source_chars: {stats.source_chars}")
    lines.extend(
        [
            f"- input_chars: {stats.input_chars}",
            f"- output_chars: {stats.output_chars}",
            f"- char_reduction: {stats.char_reduction} ({stats.char_reduction_pct}%)",
            f"- input_tokens_estimate: {stats.input_tokens_estimate}",
            f"- output_tokens_estimate: {stats.output_tokens_estimate}",
            f"- token_reduction: {stats.token_reduction} ({stats.token_reduction_pct}%)",
        ],
    )
    if stats.max_tokens is not None:
        lines.append(f"- max_tokens: {stats.max_tokens}")
        lines.append(f"- over_budget: {'yes' if stats.over_budget else 'no'}")
    return "\n".join(lines)


def format_stats_json(stats: ContentStats) -> str:
    return stats.model_dump_json(indent=2, exclude_none=True)
