"""Credit card statement CSV parser.

Credit card CSV layout (0-indexed rows, fixed offsets):
    Row 1:  cliente, numero tarjeta, alias, tipo producto, fecha corte,
            fecha vencimiento, limite US$, limite $
    Row 4:  saldo anterior US$/$, pago minimo US$/$, pago contado US$/$
    Row 7:  monto vencido US$, monto vencido $
    Row 10: Desde:, <date>, Hasta:, <date>
    "Movimientos" marker row, then a column header row, then one row per
    movement: Fecha, Numero de tarjeta, Numero de autorizacion,
    Descripcion, Importe original, Pesos, Dolares

Sign convention:
    Each movement is either in pesos or in dollars. The dollar column wins
    when its value is non-zero. A negative value in the chosen column is a
    payment/refund (credit); positive is a charge (debit).

All amounts use the comma-decimal grammar ("1.234,56").
"""

from __future__ import annotations

import logging
from datetime import datetime

from statement_tracker.categorizer import Categorizer, make_categorizer
from statement_tracker.models import (
    CreditCardMetadata,
    CreditCardRow,
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
    is_negative,
    is_nonzero,
    parse_locale_date,
    parse_locale_number,
    read_rows,
)

logger = logging.getLogger(__name__)

MOVEMENTS_MARKER = "Movimientos"
ZERO = "0,00"


def parse(content: str, file_name: str, categorize: Categorizer | None = None) -> ParsedData:
    """Parse a credit card statement into normalized transactions.

    Args:
        content: Raw CSV text.
        file_name: Name of the source file (kept on the result only).
        categorize: ``(description, type) -> CategoryMatch`` callable.
            Defaults to the categorizer without overrides.

    Returns:
        A :class:`ParsedData` with ``file_type`` ``CREDIT_CARD``. Rows with
        non-numeric amounts or invalid dates are kept and reported in
        ``errors``.
    """
    if categorize is None:
        categorize = make_categorizer()

    rows = read_rows(content)
    metadata = extract_metadata(rows)
    start = find_transactions_start(rows)
    transactions, errors = _parse_transactions(rows, start, categorize, file_name)

    logger.debug("%s: parsed %d credit card transaction(s)", file_name, len(transactions))
    return ParsedData(
        file_type=FileType.CREDIT_CARD,
        transactions=transactions,
        metadata=metadata,
        file_name=file_name,
        parsed_at=datetime.now(),
        errors=errors,
    )


def extract_metadata(rows: list[list[str]]) -> CreditCardMetadata:
    """Read the statement header from its fixed row/column offsets."""
    return CreditCardMetadata(
        cliente=cell(rows, 1, 0),
        numero_tarjeta=cell(rows, 1, 1),
        alias=cell(rows, 1, 2),
        tipo_producto=cell(rows, 1, 3),
        fecha_corte=cell(rows, 1, 4),
        fecha_vencimiento=cell(rows, 1, 5),
        limite_credito_usd=cell(rows, 1, 6, ZERO),
        limite_credito_uyu=cell(rows, 1, 7, ZERO),
        saldo_anterior_usd=cell(rows, 4, 0, ZERO),
        saldo_anterior_uyu=cell(rows, 4, 1, ZERO),
        pago_minimo_usd=cell(rows, 4, 2, ZERO),
        pago_minimo_uyu=cell(rows, 4, 3, ZERO),
        pago_contado_usd=cell(rows, 4, 4, ZERO),
        pago_contado_uyu=cell(rows, 4, 5, ZERO),
        monto_vencido_usd=cell(rows, 7, 0, ZERO),
        monto_vencido_uyu=cell(rows, 7, 1, ZERO),
        periodo_desde=cell(rows, 10, 1),
        periodo_hasta=cell(rows, 10, 3),
    )


def find_transactions_start(rows: list[list[str]]) -> int:
    """Index of the first movement row, or -1 if there is no marker.

    Movements start two rows after the marker; the row in between is the
    column header.
    """
    for i, row in enumerate(rows):
        if row and row[0] == MOVEMENTS_MARKER:
            return i + 2
    return -1


def _parse_transactions(
    rows: list[list[str]],
    start: int,
    categorize: Categorizer,
    source: str,
) -> tuple[list[Transaction], list[str]]:
    transactions: list[Transaction] = TransactionList()
    errors: list[str] = []

    if start == -1 or start >= len(rows):
        return transactions, errors

    for i in range(start, len(rows)):
        row = rows[i]

        # Blank and separator lines have no date.
        if not row or not row[0].strip():
            continue

        raw = CreditCardRow(
            fecha=row[0],
            numero_tarjeta=cell(rows, i, 1),
            numero_autorizacion=cell(rows, i, 2),
            descripcion=cell(rows, i, 3),
            importe_original=cell(rows, i, 4, ZERO),
            pesos=cell(rows, i, 5, ZERO),
            dolares=cell(rows, i, 6, ZERO),
        )

        pesos = parse_locale_number(raw.pesos)
        dolares = parse_locale_number(raw.dolares)

        if is_nonzero(dolares):
            currency = Currency.USD
            signed = dolares
        else:
            currency = Currency.UYU
            signed = pesos

        txn_type = TransactionType.CREDIT if is_negative(signed) else TransactionType.DEBIT
        txn_date = parse_locale_date(raw.fecha)
        amount = abs(signed)

        if pesos.is_nan() or dolares.is_nan():
            errors.append(f"{source}: row {i}: non-numeric amount {raw.pesos!r}/{raw.dolares!r}")
            logger.warning("%s: row %d has a non-numeric amount", source, i)
        if txn_date is None:
            errors.append(f"{source}: row {i}: invalid date {raw.fecha!r}")
            logger.warning("%s: row %d has an invalid date %r", source, i, raw.fecha)

        match = categorize(raw.descripcion, txn_type)

        transactions.append(
            Transaction(
                id=generate_transaction_id(
                    raw.fecha,
                    raw.descripcion,
                    raw.pesos + raw.dolares,
                    i - start,
                ),
                date=txn_date,
                description=raw.descripcion,
                amount=amount,
                currency=currency,
                type=txn_type,
                source=TransactionSource.CREDIT_CARD,
                category=match.category,
                category_confidence=match.confidence,
                raw_data=raw,
            )
        )

    return transactions, errors
