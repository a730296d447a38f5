"""Core data models for Statement Tracker.

This module defines the enums, dataclasses and the transaction ID helper
used throughout the package. It has zero internal imports -- everything
depends on it, but it depends on nothing within the package.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Union


class Currency(str, Enum):
    """Currencies that appear on the statements."""

    USD = "USD"
    UYU = "UYU"


class TransactionType(str, Enum):
    """Debit reduces the account (expense), credit increases it (income)."""

    DEBIT = "debit"
    CREDIT = "credit"


class TransactionSource(str, Enum):
    CREDIT_CARD = "credit_card"
    BANK_ACCOUNT = "bank_account"


class FileType(str, Enum):
    """Statement layout detected from the file content."""

    CREDIT_CARD = "credit_card"
    BANK_ACCOUNT_USD = "bank_account_usd"
    BANK_ACCOUNT_UYU = "bank_account_uyu"


class Category(str, Enum):
    """Spending categories, designed around Uruguayan expenses and income."""

    GROCERIES = "groceries"
    RESTAURANTS = "restaurants"
    TRANSPORT = "transport"
    UTILITIES = "utilities"
    HEALTHCARE = "healthcare"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    SOFTWARE = "software"
    EDUCATION = "education"
    AUTOMOTIVE = "automotive"
    HOUSING = "housing"
    PERSONAL = "personal"
    INSURANCE = "insurance"
    INCOME = "income"
    TRANSFER = "transfer"
    FEES = "fees"
    UNCATEGORIZED = "uncategorized"


def generate_transaction_id(
    txn_date: str,
    description: str,
    amount: str,
    index: int | None = None,
) -> str:
    """Generate a deterministic transaction ID from the raw row fields.

    The dash-joined ``date-description-amount`` string is folded through a
    32-bit rolling hash (``h * 31 + char``, wrapped to a signed 32-bit
    integer). The ID is ``txn_<abs(hash)>``, followed by ``-<index>`` when an
    index is given.

    This ensures that:
    - The same CSV row always produces the same ID (deterministic).
    - Two identical rows on one statement are distinguished by their index.

    The hash is not cryptographic; collisions between different rows are
    possible and tolerated.

    Args:
        txn_date: Raw date cell, e.g. ``"27/11/2025"``.
        description: Transaction description.
        amount: Raw amount string (unparsed cell text).
        index: Optional 0-based position of the row within the statement.

    Returns:
        An ID string such as ``"txn_1502938712-3"``.
    """
    base = f"{txn_date}-{description}-{amount}"
    suffix = f"-{index}" if index is not None else ""

    value = 0
    for char in base:
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000

    return f"txn_{abs(value)}{suffix}"


# ---------------------------------------------------------------------------
# Raw statement rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreditCardRow:
    """A credit card movement exactly as it appears on the statement.

    Amount cells use the comma-decimal grammar, e.g. ``"1.234,56"``.
    """

    fecha: str
    numero_tarjeta: str = ""
    numero_autorizacion: str = ""
    descripcion: str = ""
    importe_original: str = "0,00"
    pesos: str = "0,00"
    dolares: str = "0,00"


@dataclass(frozen=True)
class BankAccountRow:
    """A bank account movement exactly as it appears on the statement.

    Exactly one of ``debito`` / ``credito`` is filled in; the other is left
    blank (not ``0``). Amounts use the dot-decimal grammar, e.g. ``"-174.65"``.
    """

    fecha: str
    referencia: str = ""
    concepto: str = ""
    descripcion: str = ""
    debito: str = ""
    credito: str = ""
    saldos: str = ""


RawRow = Union[CreditCardRow, BankAccountRow]


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Transaction:
    """A single normalized transaction.

    Transactions are immutable; use :func:`dataclasses.replace` to derive an
    updated copy.

    Attributes:
        id: Deterministic ID from :func:`generate_transaction_id`.
        date: Transaction date, or ``None`` if the date cell was invalid.
        description: Merchant/description text. For bank rows, concept and
            description joined with a space.
        amount: Always non-negative; the direction lives in ``type``.
            ``Decimal("NaN")`` if the amount cell was not numeric.
        currency: Currency of the amount.
        type: Debit (expense) or credit (income/payment).
        source: Which statement layout produced the row.
        category: Category value, or ``None`` if never categorized.
        category_confidence: Confidence in ``[0, 1]``; manual overrides
            always report ``1``.
        balance: Running balance stated on the bank statement row. Never
            set for credit card rows.
        raw_data: The original row, kept for traceability.
    """

    id: str
    date: date | None
    description: str
    amount: Decimal
    currency: Currency
    type: TransactionType
    source: TransactionSource
    category: str | None = None
    category_confidence: float | None = None
    balance: Decimal | None = None
    raw_data: RawRow | None = None

    def to_dict(self) -> dict:
        """Return a flat, JSON-serializable record."""
        return {
            "id": self.id,
            "date": self.date.isoformat() if self.date else None,
            "description": self.description,
            "amount": str(self.amount),
            "currency": self.currency.value,
            "type": self.type.value,
            "source": self.source.value,
            "category": self.category,
            "category_confidence": self.category_confidence,
            "balance": str(self.balance) if self.balance is not None else None,
            "raw_data": asdict(self.raw_data) if self.raw_data is not None else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Transaction:
        """Rebuild a transaction from a record produced by :meth:`to_dict`."""
        source = TransactionSource(data["source"])
        raw = data.get("raw_data")
        raw_data: RawRow | None = None
        if raw is not None:
            row_cls = CreditCardRow if source is TransactionSource.CREDIT_CARD else BankAccountRow
            raw_data = row_cls(**raw)

        balance = data.get("balance")
        txn_date = data.get("date")
        return cls(
            id=data["id"],
            date=date.fromisoformat(txn_date) if txn_date else None,
            description=data["description"],
            amount=Decimal(data["amount"]),
            currency=Currency(data["currency"]),
            type=TransactionType(data["type"]),
            source=source,
            category=data.get("category"),
            category_confidence=data.get("category_confidence"),
            balance=Decimal(balance) if balance is not None else None,
            raw_data=raw_data,
        )


class TransactionList(list):
    """A list of transactions that supports weak references.

    Memoized helpers hold these weakly, so their cached results are released
    together with the list. Plain lists are cached until ``cache_clear()``.
    """

    __slots__ = ("__weakref__",)


# ---------------------------------------------------------------------------
# Statement metadata
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreditCardMetadata:
    """Header block of a credit card statement.

    Amount fields are kept as raw strings in the comma-decimal grammar.
    """

    cliente: str = ""
    numero_tarjeta: str = ""
    alias: str = ""
    tipo_producto: str = ""
    fecha_corte: str = ""
    fecha_vencimiento: str = ""
    limite_credito_usd: str = "0,00"
    limite_credito_uyu: str = "0,00"
    saldo_anterior_usd: str = "0,00"
    saldo_anterior_uyu: str = "0,00"
    pago_minimo_usd: str = "0,00"
    pago_minimo_uyu: str = "0,00"
    pago_contado_usd: str = "0,00"
    pago_contado_uyu: str = "0,00"
    monto_vencido_usd: str = "0,00"
    monto_vencido_uyu: str = "0,00"
    periodo_desde: str = ""
    periodo_hasta: str = ""
    kind: str = field(default="credit_card", init=False)


@dataclass(frozen=True)
class BankAccountMetadata:
    """Header block of a bank account statement."""

    cliente: str = ""
    cuenta: str = ""
    numero: str = ""
    moneda: str = ""
    sucursal: str = ""
    periodo_desde: str = ""
    periodo_hasta: str = ""
    kind: str = field(default="bank_account", init=False)


StatementMetadata = Union[CreditCardMetadata, BankAccountMetadata]


@dataclass
class ParsedData:
    """Result of parsing one statement file.

    ``file_type`` is the discriminant for ``metadata``: ``CREDIT_CARD``
    always carries :class:`CreditCardMetadata`, both bank account types
    carry :class:`BankAccountMetadata`.

    Attributes:
        file_type: Detected statement layout.
        transactions: Normalized transactions in statement order.
        metadata: Statement header values.
        file_name: Caller-supplied file name (cosmetic only).
        parsed_at: When the file was parsed.
        errors: Data-quality warnings for individual rows (non-numeric
            amounts, invalid dates). The rows are still included.
    """

    file_type: FileType
    transactions: list[Transaction]
    metadata: StatementMetadata
    file_name: str
    parsed_at: datetime = field(default_factory=datetime.now)
    errors: list[str] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Categorization
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MerchantPattern:
    """A static merchant pattern table entry.

    Attributes:
        patterns: Substrings matched against normalized merchant names.
        category: Category assigned on a match.
        confidence: Base confidence for an exact match.
    """

    patterns: tuple[str, ...]
    category: Category
    confidence: float


@dataclass(frozen=True)
class CategoryMatch:
    """Category assigned to a description, with its confidence score.

    ``matched_pattern`` is only set when the merchant pattern table produced
    the match.
    """

    category: str
    confidence: float
    matched_pattern: str | None = None


@dataclass
class CategoryOverride:
    """A user-asserted category for one normalized merchant name.

    Attributes:
        merchant_normalized: Key of the override (see
            :func:`~statement_tracker.merchants.normalize_merchant_name`).
        category: Category that always wins for this merchant.
        updated_at: ISO timestamp of the last write.
        merchant_original: The merchant name as the user typed it.
    """

    merchant_normalized: str
    category: str
    updated_at: str
    merchant_original: str = ""


# ---------------------------------------------------------------------------
# Pipeline and configuration
# ---------------------------------------------------------------------------


@dataclass
class PipelineResult:
    """Outcome of importing a batch of statement files.

    Attributes:
        transactions: Merged, de-duplicated transactions.
        parsed: One :class:`ParsedData` per successfully parsed file.
        added: Number of transactions new to the batch.
        duplicates: Number of transactions dropped because their ID was
            already present.
        warnings: Non-fatal issues (duplicates, data-quality rows).
        errors: Per-file failures such as undetectable formats.
    """

    transactions: list[Transaction] = field(default_factory=TransactionList)
    parsed: list[ParsedData] = field(default_factory=list)
    added: int = 0
    duplicates: int = 0
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class AppConfig:
    """Top-level application configuration loaded from config.toml.

    Attributes:
        output_dir: Directory for exported CSV files. Default: "output".
        overrides_file: Path of the category override TOML file, relative
            to the project root. Default: "overrides.toml".
        default_currency: Currency used when a command needs one and none
            was given. Default: "UYU".
        usd_to_uyu_rate: Caller-supplied exchange rate used for combined
            totals, or ``None`` to never convert.
    """

    output_dir: str = "output"
    overrides_file: str = "overrides.toml"
    default_currency: str = "UYU"
    usd_to_uyu_rate: Decimal | None = None
