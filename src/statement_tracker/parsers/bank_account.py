"""Bank account statement CSV parser (USD and UYU accounts).

Bank account CSV layout (0-indexed rows):
    Row 0: Cliente, <name>
    Row 1: Cuenta, <account type>
    Row 2: Numero, <account number>
    Row 3: Moneda, <USD|UYU>
    Row 4: Sucursal, <branch>
    Row 7: Desde:, <date>, Hasta:, <date>
    Header row "Fecha, Referencia, ..." followed by one row per movement:
    Fecha, Referencia, Concepto, Descripcion, Debito, Credito, Saldos

Sign convention:
    Exactly one of Debito / Credito is filled in; the other is blank. A
    non-blank Debito makes the row a debit, otherwise it is a credit. The
    amount is the absolute value of the filled cell. Saldos is the balance
    after the movement as stated by the bank.

Every row is in the single currency declared in the header. Amounts use the
dot-decimal grammar ("1234.56").
"""

from __future__ import annotations

import logging
from datetime import datetime

from statement_tracker.categorizer import Categorizer, make_categorizer
from statement_tracker.models import (
    BankAccountMetadata,
    BankAccountRow,
    Currency,
    FileType,
    ParsedData,
    Transaction,
    TransactionList,
    TransactionSource,
    TransactionType,
    generate_transaction_id,
)
from statement_tracker.parsers.utils import (
    cell,
    parse_locale_date,
    parse_locale_number,
    read_rows,
)

logger = logging.getLogger(__name__)

HEADER_FIRST_CELLS = ("Fecha", "Referencia")


def parse(content: str, file_name: str, categorize: Categorizer | None = None) -> ParsedData:
    """Parse a bank account statement into normalized transactions.

    The file type (USD or UYU account) and every row's currency come from
    the ``Moneda`` header value. An unrecognized currency value falls back
    to UYU and is reported in ``errors``.

    Args:
        content: Raw CSV text.
        file_name: Name of the source file (kept on the result only).
        categorize: ``(description, type) -> CategoryMatch`` callable.
            Defaults to the categorizer without overrides.

    Returns:
        A :class:`ParsedData` with ``file_type`` ``BANK_ACCOUNT_USD`` or
        ``BANK_ACCOUNT_UYU``.
    """
    if categorize is None:
        categorize = make_categorizer()

    rows = read_rows(content)
    metadata = extract_metadata(rows)
    errors: list[str] = []

    try:
        currency = Currency(metadata.moneda.strip())
    except ValueError:
        currency = Currency.UYU
        errors.append(f"{file_name}: unknown currency {metadata.moneda!r}, assuming UYU")
        logger.warning("%s: unknown currency %r, assuming UYU", file_name, metadata.moneda)

    file_type = (
        FileType.BANK_ACCOUNT_USD if currency is Currency.USD else FileType.BANK_ACCOUNT_UYU
    )

    start = find_transactions_start(rows)
    transactions, row_errors = _parse_transactions(rows, start, currency, categorize, file_name)
    errors.extend(row_errors)

    logger.debug(
        "%s: parsed %d %s bank account transaction(s)",
        file_name,
        len(transactions),
        currency.value,
    )
    return ParsedData(
        file_type=file_type,
        transactions=transactions,
        metadata=metadata,
        file_name=file_name,
        parsed_at=datetime.now(),
        errors=errors,
    )


def extract_metadata(rows: list[list[str]]) -> BankAccountMetadata:
    """Read the statement header from its fixed row/column offsets."""
    return BankAccountMetadata(
        cliente=cell(rows, 0, 1),
        cuenta=cell(rows, 1, 1),
        numero=cell(rows, 2, 1),
        moneda=cell(rows, 3, 1),
        sucursal=cell(rows, 4, 1),
        periodo_desde=cell(rows, 7, 1),
        periodo_hasta=cell(rows, 7, 3),
    )


def find_transactions_start(rows: list[list[str]]) -> int:
    """Index of the row after the ``Fecha, Referencia`` header, or -1."""
    for i, row in enumerate(rows):
        if tuple(row[:2]) == HEADER_FIRST_CELLS:
            return i + 1
    return -1


def _parse_transactions(
    rows: list[list[str]],
    start: int,
    currency: Currency,
    categorize: Categorizer,
    source: str,
) -> tuple[list[Transaction], list[str]]:
    transactions: list[Transaction] = TransactionList()
    errors: list[str] = []

    if start == -1 or start >= len(rows):
        return transactions, errors

    for i in range(start, len(rows)):
        row = rows[i]

        if not row or not row[0].strip():
            continue

        raw = BankAccountRow(
            fecha=row[0],
            referencia=cell(rows, i, 1),
            concepto=cell(rows, i, 2),
            descripcion=cell(rows, i, 3),
            debito=cell(rows, i, 4),
            credito=cell(rows, i, 5),
            saldos=cell(rows, i, 6),
        )

        # Blankness, not sign or zero, decides the side.
        if raw.debito.strip():
            amount = abs(parse_locale_number(raw.debito))
            txn_type = TransactionType.DEBIT
        else:
            amount = abs(parse_locale_number(raw.credito))
            txn_type = TransactionType.CREDIT

        balance = parse_locale_number(raw.saldos)
        description = " ".join(
            part for part in (raw.concepto, raw.descripcion) if part.strip()
        ).strip()
        txn_date = parse_locale_date(raw.fecha)

        if amount.is_nan():
            errors.append(f"{source}: row {i}: non-numeric amount {raw.debito or raw.credito!r}")
            logger.warning("%s: row %d has a non-numeric amount", source, i)
        if txn_date is None:
            errors.append(f"{source}: row {i}: invalid date {raw.fecha!r}")
            logger.warning("%s: row %d has an invalid date %r", source, i, raw.fecha)

        match = categorize(description, txn_type)

        transactions.append(
            Transaction(
                id=generate_transaction_id(
                    raw.fecha,
                    description,
                    raw.debito + raw.credito,
                    i - start,
                ),
                date=txn_date,
                description=description,
                amount=amount,
                currency=currency,
                type=txn_type,
                source=TransactionSource.BANK_ACCOUNT,
                category=match.category,
                category_confidence=match.confidence,
                balance=balance,
                raw_data=raw,
            )
        )

    return transactions, errors
