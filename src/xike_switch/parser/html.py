"""Base HTML parsing utilities shared across all parsers."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag


def parse_html(html: str, parser: str = "lxml") -> BeautifulSoup:
    """Parse an HTML string and return a BeautifulSoup document.

    Args:
        html: Raw HTML content from the switch response.
        parser: Parser library to use (default: ``lxml``).

    Returns:
        Parsed BeautifulSoup document.
    """
    return BeautifulSoup(html, parser)


def normalize_text(s: str) -> str:
    """Strip surrounding whitespace and collapse internal runs.

    Args:
        s: Raw text extracted from an HTML element.

    Returns:
        Cleaned string with single spaces between words.
    """
    return re.sub(r"\s+", " ", s).strip()


def cell_texts(row: Tag) -> list[str]:
    """Return the normalized text of every ``<td>`` in *row*."""
    return [normalize_text(td.get_text()) for td in row.find_all("td")]
