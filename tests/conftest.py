"""Shared pytest fixtures for Statement Tracker tests.

Provides reusable fixtures for:
- Paths to the sample statements under tests/fixtures/ (one credit card
  statement, one USD and one UYU bank account statement).
- The same statements as text, for tests that parse content directly.
- tmp_project_dir: a temporary directory initialized with config.toml,
  overrides.toml, input/ and output/, with the sample statements in input/.
- sample_transactions: a small list of realistic Transaction objects in
  both currencies, including an invalid date and a non-numeric amount.
"""

from __future__ import annotations

import shutil
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest

from statement_tracker.config import initialize
from statement_tracker.models import (
    Currency,
    Transaction,
    TransactionSource,
    TransactionType,
    generate_transaction_id,
)

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Fixture file paths and content
# ---------------------------------------------------------------------------


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to the tests/fixtures/ directory."""
    return FIXTURES_DIR


@pytest.fixture
def credit_card_csv_path() -> Path:
    return FIXTURES_DIR / "credit_card_sample.csv"


@pytest.fixture
def bank_usd_csv_path() -> Path:
    return FIXTURES_DIR / "bank_usd_sample.csv"


@pytest.fixture
def bank_uyu_csv_path() -> Path:
    return FIXTURES_DIR / "bank_uyu_sample.csv"


@pytest.fixture
def credit_card_csv(credit_card_csv_path: Path) -> str:
    """Credit card statement: 4 movements (Devoto, Jetbrains, two payments)."""
    return credit_card_csv_path.read_text(encoding="utf-8")


@pytest.fixture
def bank_usd_csv(bank_usd_csv_path: Path) -> str:
    """USD bank account statement: 2 debits followed by 2 credits."""
    return bank_usd_csv_path.read_text(encoding="utf-8")


@pytest.fixture
def bank_uyu_csv(bank_uyu_csv_path: Path) -> str:
    """UYU bank account statement, including quoted descriptions with commas."""
    return bank_uyu_csv_path.read_text(encoding="utf-8")


# ---------------------------------------------------------------------------
# tmp_project_dir -- temp directory with the standard project structure
# ---------------------------------------------------------------------------


@pytest.fixture
def tmp_project_dir(tmp_path: Path) -> Path:
    """Create an initialized project directory with the sample statements.

    The directory contains config.toml, overrides.toml, output/ and input/
    holding the three sample CSV files.
    """
    project = tmp_path / "statement-project"
    initialize(project)

    for name in ("credit_card_sample.csv", "bank_usd_sample.csv", "bank_uyu_sample.csv"):
        shutil.copy2(FIXTURES_DIR / name, project / "input" / name)

    return project


# ---------------------------------------------------------------------------
# sample_transactions
# ---------------------------------------------------------------------------


def _make_txn(
    txn_date: date | None,
    description: str,
    amount: Decimal,
    currency: Currency = Currency.UYU,
    txn_type: TransactionType = TransactionType.DEBIT,
    category: str | None = "uncategorized",
    index: int = 0,
    source: TransactionSource = TransactionSource.CREDIT_CARD,
) -> Transaction:
    """Helper to build a Transaction with a deterministic ID."""
    raw_date = txn_date.strftime("%d/%m/%Y") if txn_date else "??"
    return Transaction(
        id=generate_transaction_id(raw_date, description, str(amount), index),
        date=txn_date,
        description=description,
        amount=amount,
        currency=currency,
        type=txn_type,
        source=source,
        category=category,
        category_confidence=0.9 if category != "uncategorized" else 0.0,
    )


@pytest.fixture
def sample_transactions() -> list[Transaction]:
    """Eight transactions across November and December 2025.

    Includes:
    - UYU and USD debits and credits
    - a salary credit and a transfer
    - one row with an invalid date (``date=None``)
    - one row with a non-numeric amount (``Decimal("NaN")``)
    """
    return [
        _make_txn(date(2025, 11, 4), "Devoto Supermercado", Decimal("1878.39"),
                  category="groceries", index=0),
        _make_txn(date(2025, 11, 7), "Jetbrains Americas Inc", Decimal("10.37"),
                  currency=Currency.USD, category="software", index=1),
        _make_txn(date(2025, 11, 6), "CR. PAGO SUELDOS SETA WORKSHOP SRL", Decimal("6104.26"),
                  currency=Currency.USD, txn_type=TransactionType.CREDIT,
                  category="income", index=2, source=TransactionSource.BANK_ACCOUNT),
        _make_txn(date(2025, 11, 27), "TRANSFERENCIA ENVIADA", Decimal("1.90"),
                  currency=Currency.USD, category="transfer", index=3,
                  source=TransactionSource.BANK_ACCOUNT),
        _make_txn(date(2025, 12, 2), "PedidosYa", Decimal("470.00"),
                  category="restaurants", index=4),
        _make_txn(date(2025, 12, 15), "Devoto Supermercado", Decimal("250.50"),
                  category="groceries", index=5),
        _make_txn(None, "Farmashop", Decimal("320.00"), category="healthcare", index=6),
        _make_txn(date(2025, 12, 20), "Tienda Inglesa", Decimal("NaN"),
                  category="shopping", index=7),
    ]
