"""Tests for the CSV grid, number and date helpers shared by the parsers."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from statement_tracker.parsers.utils import (
    cell,
    is_negative,
    is_nonzero,
    parse_locale_date,
    parse_locale_number,
    read_rows,
)


class TestParseLocaleNumber:
    """Both statement grammars: comma-decimal and dot-decimal."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("1.878,39", Decimal("1878.39")),
            ("270.000,00", Decimal("270000.00")),
            ("-1.463,54", Decimal("-1463.54")),
            ("10,37", Decimal("10.37")),
            ("0,00", Decimal("0")),
            ("174.65", Decimal("174.65")),
            ("-6820.00", Decimal("-6820.00")),
            ("6104.26", Decimal("6104.26")),
        ],
    )
    def test_known_values(self, raw, expected):
        assert parse_locale_number(raw) == expected

    def test_blank_is_zero(self):
        assert parse_locale_number("") == 0
        assert parse_locale_number("   ") == 0
        assert parse_locale_number(None) == 0

    def test_surrounding_whitespace_ignored(self):
        assert parse_locale_number("  58.259,16 ") == Decimal("58259.16")

    def test_non_numeric_is_nan(self):
        assert parse_locale_number("abc").is_nan()

    def test_infinity_is_nan(self):
        assert parse_locale_number("Infinity").is_nan()

    def test_never_raises_on_garbage(self):
        assert parse_locale_number("1,2,3").is_nan()

    def test_underscore_grouping_is_nan(self):
        assert parse_locale_number("1_000").is_nan()
        assert parse_locale_number("1_000,50").is_nan()


class TestParseLocaleDate:
    def test_day_month_year(self):
        assert parse_locale_date("27/11/2025") == date(2025, 11, 27)

    def test_single_digit_parts(self):
        assert parse_locale_date("4/1/2026") == date(2026, 1, 4)

    def test_invalid_day_is_none(self):
        assert parse_locale_date("31/02/2025") is None

    def test_wrong_shape_is_none(self):
        assert parse_locale_date("2025-11-27") is None
        assert parse_locale_date("") is None
        assert parse_locale_date(None) is None

    def test_non_numeric_is_none(self):
        assert parse_locale_date("aa/bb/cccc") is None


class TestReadRows:
    def test_quoted_commas_preserved(self):
        rows = read_rows('a,"b, c",d\n')
        assert rows == [["a", "b, c", "d"]]

    def test_blank_lines_kept_as_empty_rows(self):
        rows = read_rows("a,b\n\nc,d\n")
        assert rows == [["a", "b"], [], ["c", "d"]]

    def test_cr_only_and_crlf_line_endings(self):
        expected = [["a", "b"], [], ["c", "d"]]
        assert read_rows("a,b\r\rc,d\r") == expected
        assert read_rows("a,b\r\n\r\nc,d\r\n") == expected

    def test_bom_stripped(self):
        rows = read_rows("\ufeffCliente,X\n")
        assert rows[0][0] == "Cliente"


class TestCell:
    ROWS = [["a", "b"], [], ["c", ""]]

    def test_existing_cell(self):
        assert cell(self.ROWS, 0, 1) == "b"

    def test_missing_row_or_column_gives_default(self):
        assert cell(self.ROWS, 1, 0) == ""
        assert cell(self.ROWS, 9, 0, "x") == "x"
        assert cell(self.ROWS, 0, 5, "0,00") == "0,00"

    def test_empty_cell_gives_default(self):
        assert cell(self.ROWS, 2, 1, "0,00") == "0,00"


class TestSignHelpers:
    def test_is_negative(self):
        assert is_negative(Decimal("-1"))
        assert not is_negative(Decimal("0"))
        assert not is_negative(Decimal("NaN"))

    def test_is_nonzero(self):
        assert is_nonzero(Decimal("10.37"))
        assert is_nonzero(Decimal("-2238.54"))
        assert not is_nonzero(Decimal("0.00"))
        assert not is_nonzero(Decimal("NaN"))
