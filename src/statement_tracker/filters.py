"""Transaction filtering and sorting.

:func:`apply_filters` combines all given criteria with logical AND; a
criterion left as ``None`` (or an empty sequence) imposes no constraint.
Results are memoized by the identity of the input list together with the
serialized options (see :mod:`statement_tracker.memoize`).
"""

from __future__ import annotations

import unicodedata
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Literal

from statement_tracker.memoize import memoize_by_reference
from statement_tracker.merchants import normalize_merchant_name
from statement_tracker.models import Currency, Transaction, TransactionList

SortField = Literal["date", "amount", "description"]
SortDirection = Literal["asc", "desc"]


@dataclass(frozen=True)
class FilterOptions:
    """Filter criteria. Bounds are inclusive.

    Attributes:
        date_from: Earliest transaction date.
        date_to: Latest transaction date.
        categories: Allowed category values.
        amount_min: Minimum (non-negative) amount.
        amount_max: Maximum amount.
        query: Free text matched as a substring of the normalized
            description.
        currencies: Allowed currencies.
    """

    date_from: date | None = None
    date_to: date | None = None
    categories: tuple[str, ...] | None = None
    amount_min: Decimal | float | None = None
    amount_max: Decimal | float | None = None
    query: str | None = None
    currencies: tuple[Currency, ...] | None = None

    def __post_init__(self) -> None:
        # Accept lists for convenience; store tuples so options stay hashable.
        if self.categories is not None:
            object.__setattr__(
                self, "categories", tuple(str(getattr(c, "value", c)) for c in self.categories)
            )
        if self.currencies is not None:
            object.__setattr__(self, "currencies", tuple(Currency(c) for c in self.currencies))


@dataclass(frozen=True)
class SortOptions:
    field: SortField = "date"
    direction: SortDirection = "desc"


def matches_text(text: str, query: str | None) -> bool:
    """Case- and whitespace-insensitive substring match; empty query matches."""
    if not query:
        return True
    return normalize_merchant_name(query) in normalize_merchant_name(text)


def apply_filters(
    transactions: Sequence[Transaction],
    options: FilterOptions | None = None,
) -> list[Transaction]:
    """Return the transactions that satisfy every criterion in *options*.

    Repeated calls with the same list object and equal options return the
    very same result list. A different list object is always recomputed.
    """
    return _apply_filters(transactions, options or FilterOptions())


@memoize_by_reference
def _apply_filters(
    transactions: Sequence[Transaction],
    options: FilterOptions,
) -> list[Transaction]:
    return TransactionList(txn for txn in transactions if _matches(txn, options))


def _matches(txn: Transaction, options: FilterOptions) -> bool:
    if options.date_from is not None and (txn.date is None or txn.date < options.date_from):
        return False
    if options.date_to is not None and (txn.date is None or txn.date > options.date_to):
        return False
    if options.categories:
        if not txn.category or txn.category not in options.categories:
            return False
    if options.amount_min is not None or options.amount_max is not None:
        if txn.amount.is_nan():
            return False
        if options.amount_min is not None and txn.amount < options.amount_min:
            return False
        if options.amount_max is not None and txn.amount > options.amount_max:
            return False
    if options.query and not matches_text(txn.description, options.query):
        return False
    if options.currencies and txn.currency not in options.currencies:
        return False
    return True


def sort_transactions(
    transactions: Sequence[Transaction],
    options: SortOptions | None = None,
) -> list[Transaction]:
    """Return a new list sorted by date, amount or description.

    Defaults to date descending. The sort is stable, so equal keys keep
    their input order in both directions. Transactions with an invalid
    date sort as the earliest; NaN amounts sort as the smallest.
    """
    options = options or SortOptions()
    reverse = options.direction == "desc"

    if options.field == "amount":
        key = _amount_key
    elif options.field == "description":
        key = _description_key
    else:
        key = _date_key

    return TransactionList(sorted(transactions, key=key, reverse=reverse))


def _date_key(txn: Transaction) -> date:
    return txn.date or date.min


def _amount_key(txn: Transaction) -> tuple[int, Decimal]:
    if txn.amount.is_nan():
        return (0, Decimal(0))
    return (1, txn.amount)


def _description_key(txn: Transaction) -> tuple[str, str]:
    # Accent- and case-insensitive first, then the raw text for a stable order.
    decomposed = unicodedata.normalize("NFKD", txn.description)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return (base.casefold(), txn.description)
