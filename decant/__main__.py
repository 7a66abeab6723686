"""CLI entry point: python -m decant {clean,extract,stats} [options]"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from decant import settings
from decant.budget import (
    format_section_breakdown,
    format_token_budget_error,
    format_token_budget_warning,
)
from decant.detect import detect_format
from decant.items import ContentStats, ProcessResult, TransformOptions
from decant.pipeline import process_html
from decant.stats import format_stats_json, format_stats_markdown

logger = logging.getLogger(__name__)


class InputError(RuntimeError):
    """Raised when the CLI cannot obtain usable HTML input."""


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _heading_level(value: str) -> int:
    try:
        level = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid heading level {value!r}") from exc
    if not 1 <= level <= 6:
        raise argparse.ArgumentTypeError("heading level must be between 1 and 6")
    return level


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid token count {value!r}") from exc
    if n < 1:
        raise argparse.ArgumentTypeError("token count must be a positive integer")
    return n


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-i", "--input", default=None, metavar="PATH",
                        help="Read HTML from a file (default: stdin)")
    common.add_argument("--strip-links", action="store_true", default=False,
                        help="Strip links and keep only their text")
    common.add_argument("--keep-images", action="store_true", default=settings.DEFAULT_KEEP_IMAGES,
                        help="Preserve images in markdown output")
    common.add_argument("--no-preserve-tables", dest="preserve_tables", action="store_false",
                        default=settings.DEFAULT_PRESERVE_TABLES,
                        help="Remove tables for smaller output")
    common.add_argument("--max-heading-level", type=_heading_level,
                        default=settings.DEFAULT_MAX_HEADING_LEVEL, metavar="N",
                        help="Maximum heading depth to keep in output, 1-6 (default: 6)")
    common.add_argument("--aggressive", action="store_true", default=False,
                        help="Apply stronger pruning heuristics")
    common.add_argument("--max-tokens", type=_positive_int, default=None, metavar="N",
                        help="Maximum token budget for output")
    common.add_argument("--summary", action="store_true", default=False,
                        help="Print a reduction summary to stderr")
    common.add_argument("--log-level", default=settings.LOG_LEVEL,
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                        metavar="{DEBUG,INFO,WARNING,ERROR}",
                        help=f"Logging level (default: {settings.LOG_LEVEL})")
    return common


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="decant",
        description=(
            "Convert noisy HTML into compact, LLM-ready Markdown.\n"
            "Deterministic cleaning, readability extraction and token budgets."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)
    common = _common_options()

    for name, help_text in (
        ("clean", "Strip page noise and convert the whole document"),
        ("extract", "Extract the primary article, then clean and convert it"),
    ):
        cmd = sub.add_parser(name, parents=[common], help=help_text)
        cmd.add_argument("--truncate", action="store_true", default=False,
                         help="Truncate to --max-tokens instead of failing when over budget")

    stats = sub.add_parser("stats", parents=[common], help="Report size and token reduction")
    stats.add_argument("--mode", choices=["clean", "extract"], default="clean",
                       help="Pipeline to measure (default: clean)")
    stats.add_argument("--format", dest="stats_format", choices=list(settings.STATS_FORMATS),
                       default=settings.DEFAULT_STATS_FORMAT,
                       help="Output format (default: md)")
    return parser


def _transform_options(args: argparse.Namespace) -> TransformOptions:
    return TransformOptions(
        keep_links=not args.strip_links,
        keep_images=args.keep_images,
        preserve_tables=args.preserve_tables,
        max_heading_level=args.max_heading_level,
        aggressive=args.aggressive,
    )


# ---------------------------------------------------------------------------
# Input / output
# ---------------------------------------------------------------------------

def _read_input(path: str | None) -> str:
    if path:
        input_path = Path(path)
        if not input_path.is_file():
            raise InputError(f"Input file not found: {path}")
        data = input_path.read_bytes()
    else:
        if sys.stdin.isatty():
            raise InputError("No input detected. Pipe HTML through stdin or pass --input PATH.")
        data = sys.stdin.buffer.read()

    fmt = detect_format(data)
    if fmt in ("doc", "docx", "rtf"):
        raise InputError(f"{fmt.upper()} input must be converted to HTML before running decant.")

    text = data.decode("utf-8", errors="replace")
    if not text.strip():
        raise InputError("Input is empty.")
    return text


def _write_stdout(text: str) -> None:
    sys.stdout.write(text if text.endswith("\n") else f"{text}\n")


def _print_summary(stats: ContentStats) -> None:
    from rich.console import Console
    from rich.panel import Panel

    console = Console(stderr=True)
    console.print(
        Panel.fit(
            f"Mode:            [cyan]{stats.mode}[/cyan]\n"
            f"Characters:      {stats.input_chars:,} -> [green]{stats.output_chars:,}[/green]"
            f"  ({stats.char_reduction_pct}% less)\n"
            f"Tokens (est.):   {stats.input_tokens_estimate:,} -> "
            f"[green]{stats.output_tokens_estimate:,}[/green]"
            f"  ({stats.token_reduction_pct}% less)",
            border_style="cyan",
            title="[bold]decant[/bold]",
        ),
    )


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _run_transform(args: argparse.Namespace, processed: ProcessResult) -> int:
    breakdown = processed.breakdown
    if breakdown is not None and breakdown.over_budget:
        if not args.truncate:
            print(format_token_budget_error(breakdown), file=sys.stderr)
            return 1
        truncation = processed.truncation
        assert truncation is not None  # over_budget implies a truncation result
        print(format_token_budget_warning(breakdown, truncation), file=sys.stderr)
        _write_stdout(truncation.markdown)
        return 0

    _write_stdout(processed.markdown)
    return 0


def _run_stats(args: argparse.Namespace, processed: ProcessResult) -> int:
    if args.stats_format == "json":
        _write_stdout(format_stats_json(processed.stats))
        return 0

    output = format_stats_markdown(processed.stats)
    if processed.breakdown is not None:
        output += f"\n\n{format_section_breakdown(processed.breakdown)}"
    _write_stdout(output)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format=settings.LOG_FORMAT, stream=sys.stderr)

    try:
        html = _read_input(args.input)
    except InputError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    mode = args.mode if args.command == "stats" else args.command
    processed = process_html(
        html,
        _transform_options(args),
        mode=mode,
        max_tokens=args.max_tokens,
    )

    if args.summary:
        _print_summary(processed.stats)

    if args.command == "stats":
        return _run_stats(args, processed)
    return _run_transform(args, processed)


if __name__ == "__main__":
    sys.exit(main())
