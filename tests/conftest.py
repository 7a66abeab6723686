"""Shared pytest fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from decant.items import MarkdownSection

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _read_fixture(name: str) -> str:
    return (FIXTURES_DIR / name).read_text(encoding="utf-8")


@pytest.fixture
def article_html() -> str:
    return _read_fixture("article_with_noise.html")


@pytest.fixture
def link_farm_html() -> str:
    return _read_fixture("link_farm.html")


@pytest.fixture
def docs_html() -> str:
    return _read_fixture("docs.html")


@pytest.fixture
def make_sections():
    """Build sections with fixed token counts."""

    def _make(token_counts: list[int]) -> list[MarkdownSection]:
        return [
            MarkdownSection(
                heading=f"# Section {i + 1}",
                level=1,
                content=f"# Section {i + 1}\nContent for section {i + 1}.\n",
                tokens=tokens,
            )
            for i, tokens in enumerate(token_counts)
        ]

    return _make
