"""Parsing helpers shared by the statement parsers: CSV grid, numbers and dates.

The credit card export writes amounts as ``"1.234,56"`` (period for
thousands, comma for decimals) while the bank account export writes them as
``"1234.56"``. :func:`parse_locale_number` accepts both.
"""

from __future__ import annotations

import csv
import io
from datetime import date
from decimal import Decimal, InvalidOperation

NAN = Decimal("NaN")


def read_rows(content: str) -> list[list[str]]:
    """Split CSV text into a grid of cells.

    Quoted fields keep their embedded commas. Blank lines are kept as empty
    rows so fixed row offsets stay valid.
    """
    # newline=None folds CR-only and CRLF line endings into "\n".
    return list(csv.reader(io.StringIO(content.lstrip("\ufeff"), newline=None)))


def cell(rows: list[list[str]], row: int, col: int, default: str = "") -> str:
    """Return ``rows[row][col]``, or *default* when missing or empty."""
    if row < 0 or row >= len(rows) or col >= len(rows[row]):
        return default
    return rows[row][col] or default


def parse_locale_number(raw: str | None) -> Decimal:
    """Parse an amount cell in either statement grammar.

    If the value contains a comma it is read as comma-decimal
    (``"58.259,16"`` -> ``58259.16``); otherwise it is already a
    dot-decimal number (``"174.65"`` -> ``174.65``).

    Args:
        raw: Cell text, possibly blank or ``None``.

    Returns:
        The parsed value. Blank input gives ``Decimal(0)``; text that is not
        a number gives ``Decimal("NaN")``.
    """
    if raw is None or not raw.strip():
        return Decimal(0)

    text = raw.strip()
    # Decimal also accepts digit-grouping underscores such as "1_000".
    if "_" in text:
        return NAN
    if "," in text:
        text = text.replace(".", "").replace(",", ".", 1)

    try:
        value = Decimal(text)
    except InvalidOperation:
        return NAN
    # Decimal accepts "Infinity" and "sNaN"; neither is a valid amount.
    if not value.is_finite():
        return NAN
    return value


def parse_locale_date(raw: str | None) -> date | None:
    """Parse a ``DD/MM/YYYY`` date cell.

    Returns:
        The calendar date, or ``None`` if the text is not a valid date.
    """
    if raw is None:
        return None
    parts = raw.strip().split("/")
    if len(parts) != 3:
        return None
    try:
        day, month, year = (int(p) for p in parts)
        return date(year, month, day)
    except ValueError:
        return None


def is_negative(value: Decimal) -> bool:
    """True for values strictly below zero; NaN is never negative."""
    return not value.is_nan() and value < 0


def is_nonzero(value: Decimal) -> bool:
    """True for values other than zero; NaN counts as zero."""
    return not value.is_nan() and value != 0
