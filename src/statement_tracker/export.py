"""CSV export writer and summary printer.

- :func:`build_csv` renders transactions with the fixed export columns.
- :func:`export` filters by date range and writes the CSV to disk.
- :func:`print_summary` prints per-currency totals and spending by category
  to stdout for the CLI.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from datetime import date
from decimal import Decimal
from pathlib import Path

from statement_tracker.aggregation import calculate_totals, group_by_category
from statement_tracker.categories import category_label
from statement_tracker.filters import FilterOptions, apply_filters
from statement_tracker.models import Category, Currency, PipelineResult, Transaction

CSV_COLUMNS = ["Date", "Description", "Amount", "Currency", "Type", "Category"]


# ---------------------------------------------------------------------------
# CSV export
# ---------------------------------------------------------------------------


def build_csv(transactions: Sequence[Transaction]) -> str:
    """Render *transactions* as CSV text with every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    for txn in transactions:
        writer.writerow(
            [
                txn.date.isoformat() if txn.date else "",
                txn.description,
                _format_amount(txn),
                txn.currency.value,
                txn.type.value,
                txn.category or Category.UNCATEGORIZED.value,
            ]
        )
    return buffer.getvalue().rstrip("\n")


def export(
    transactions: list[Transaction],
    output_path: str | Path,
    date_from: date | None = None,
    date_to: date | None = None,
) -> Path:
    """Write the transactions within ``[date_from, date_to]`` to a CSV file.

    Creates parent directories as needed and overwrites an existing file.

    Returns:
        The :class:`~pathlib.Path` of the written file.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    selected = apply_filters(transactions, FilterOptions(date_from=date_from, date_to=date_to))
    output_path.write_text(build_csv(selected) + "\n", encoding="utf-8")
    return output_path


def _format_amount(txn: Transaction) -> str:
    if txn.amount.is_nan():
        return "NaN"
    return f"{txn.amount:.2f}"


# ---------------------------------------------------------------------------
# Summary printer
# ---------------------------------------------------------------------------


def print_summary(transactions: list[Transaction], title: str = "Summary") -> None:
    """Print per-currency totals and spending by category to stdout."""
    totals = calculate_totals(transactions)
    by_category = group_by_category(transactions)

    print()
    print(f"== {title} ==")
    print(f"Transactions: {totals.count}")

    for currency in Currency:
        income = totals.income.get(currency)
        expense = totals.expense.get(currency)
        net = totals.net.get(currency)
        print(
            f"  {currency.value}: income {income:,.2f}  "
            f"expense {expense:,.2f}  net {net:,.2f}"
        )

    spending = [
        (cat, summary)
        for cat, summary in by_category.items()
        if any(summary.expense.get(c) for c in Currency)
    ]
    if spending:
        print()
        print("Spending by category:")
        spending.sort(
            key=lambda pair: (
                -_sortable(pair[1].expense.uyu), -_sortable(pair[1].expense.usd), pair[0]
            )
        )
        for cat, summary in spending:
            label = category_label(cat) + ":"
            print(
                f"  {label:<26} UYU {summary.expense.uyu:>12,.2f}   "
                f"USD {summary.expense.usd:>10,.2f}   ({summary.count} txns)"
            )

    print()


def _sortable(value: Decimal) -> Decimal:
    return Decimal(0) if value.is_nan() else value


def print_import_report(result: PipelineResult) -> None:
    """Print file counts, duplicates, warnings and errors of an import run."""
    print()
    print("== Import Summary ==")
    for parsed in result.parsed:
        print(
            f"  {parsed.file_name}: {parsed.file_type.value} "
            f"({len(parsed.transactions)} txns)"
        )
    print(f"Added:      {result.added}")
    print(f"Duplicates: {result.duplicates}")

    if result.warnings:
        print()
        print(f"Warnings: {len(result.warnings)}")
        for w in result.warnings:
            print(f"  - {w}")

    if result.errors:
        print()
        print(f"Errors: {len(result.errors)}")
        for e in result.errors:
            print(f"  - {e}")

    print()
