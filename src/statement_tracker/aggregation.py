"""Per-currency summaries, grouping, running balances and conversion.

Every summary keeps USD and UYU in separate buckets; amounts are never mixed
across currencies unless the caller converts them explicitly with
:func:`convert_amount` and a caller-supplied rate.

Credits count as income and debits as expense, and ``net = income -
expense`` per currency. The grouping functions and :func:`calculate_totals`
are memoized by the identity of the input list.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, InvalidOperation

from statement_tracker.memoize import memoize_by_reference
from statement_tracker.models import Category, Currency, Transaction, TransactionType

UNKNOWN_DATE_KEY = "unknown"


class ConversionRateError(ValueError):
    """Raised when a currency conversion is given an unusable rate."""


@dataclass
class CurrencyTotals:
    usd: Decimal = Decimal(0)
    uyu: Decimal = Decimal(0)

    def get(self, currency: Currency | str) -> Decimal:
        return self.usd if Currency(currency) is Currency.USD else self.uyu

    def add(self, currency: Currency | str, amount: Decimal) -> None:
        if Currency(currency) is Currency.USD:
            self.usd += amount
        else:
            self.uyu += amount


@dataclass
class SummaryTotals:
    """Income, expense and net per currency, plus a transaction count."""

    income: CurrencyTotals = field(default_factory=CurrencyTotals)
    expense: CurrencyTotals = field(default_factory=CurrencyTotals)
    net: CurrencyTotals = field(default_factory=CurrencyTotals)
    count: int = 0

    def apply(self, txn: Transaction) -> None:
        if txn.type == TransactionType.CREDIT:
            self.income.add(txn.currency, txn.amount)
            self.net.add(txn.currency, txn.amount)
        else:
            self.expense.add(txn.currency, txn.amount)
            self.net.add(txn.currency, -txn.amount)
        self.count += 1


@dataclass(frozen=True)
class BalancePoint:
    """Balance right after transaction *id* in a recomputed series."""

    id: str
    balance: Decimal


def _month_key(txn: Transaction) -> str:
    return txn.date.strftime("%Y-%m") if txn.date else UNKNOWN_DATE_KEY


def _date_key(txn: Transaction) -> str:
    return txn.date.isoformat() if txn.date else UNKNOWN_DATE_KEY


def _group(transactions: Sequence[Transaction], key_fn) -> dict[str, SummaryTotals]:
    grouped: dict[str, SummaryTotals] = {}
    for txn in transactions:
        key = key_fn(txn)
        if key not in grouped:
            grouped[key] = SummaryTotals()
        grouped[key].apply(txn)
    return grouped


@memoize_by_reference
def group_by_category(transactions: Sequence[Transaction]) -> dict[str, SummaryTotals]:
    """Summaries keyed by category; uncategorized rows go to "uncategorized"."""
    return _group(transactions, lambda txn: txn.category or Category.UNCATEGORIZED.value)


@memoize_by_reference
def group_by_month(transactions: Sequence[Transaction]) -> dict[str, SummaryTotals]:
    """Summaries keyed by ``YYYY-MM``."""
    return _group(transactions, _month_key)


@memoize_by_reference
def group_by_date(transactions: Sequence[Transaction]) -> dict[str, SummaryTotals]:
    """Summaries keyed by ISO date ``YYYY-MM-DD``."""
    return _group(transactions, _date_key)


@memoize_by_reference
def calculate_totals(transactions: Sequence[Transaction]) -> SummaryTotals:
    totals = SummaryTotals()
    for txn in transactions:
        totals.apply(txn)
    return totals


def calculate_running_balance(
    transactions: Sequence[Transaction],
    currency: Currency | str,
    starting_balance: Decimal = Decimal(0),
) -> list[BalancePoint]:
    """Recompute a balance series for one currency.

    Transactions in *currency* are walked in ascending date order (stable
    for equal dates, invalid dates first), adding credits and subtracting
    debits from *starting_balance*. Any ``balance`` stated on the rows is
    ignored.
    """
    currency = Currency(currency)
    ordered = sorted(
        (txn for txn in transactions if txn.currency == currency),
        key=lambda txn: (txn.date is not None, txn.date or date.min),
    )

    balance = Decimal(str(starting_balance))
    points: list[BalancePoint] = []
    for txn in ordered:
        balance += txn.amount if txn.type == TransactionType.CREDIT else -txn.amount
        points.append(BalancePoint(id=txn.id, balance=balance))
    return points


def convert_amount(
    amount: Decimal,
    from_currency: Currency | str,
    to_currency: Currency | str,
    rate: Decimal | float | int,
) -> Decimal:
    """Convert *amount* by multiplying with a caller-supplied *rate*.

    Same-currency conversions return *amount* unchanged without looking at
    the rate.

    Raises:
        ConversionRateError: If the currencies differ and *rate* is not a
            finite positive number.
    """
    if Currency(from_currency) is Currency(to_currency):
        return amount

    if isinstance(rate, bool) or not isinstance(rate, (Decimal, float, int)):
        raise ConversionRateError("Conversion rate must be a positive number.")
    if isinstance(rate, float) and not math.isfinite(rate):
        raise ConversionRateError("Conversion rate must be a positive number.")

    try:
        decimal_rate = Decimal(str(rate))
    except InvalidOperation:
        raise ConversionRateError("Conversion rate must be a positive number.") from None
    if not decimal_rate.is_finite() or decimal_rate <= 0:
        raise ConversionRateError("Conversion rate must be a positive number.")

    return Decimal(amount) * decimal_rate
