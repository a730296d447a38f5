"""Transaction categorization: priority keyword rules over merchant patterns.

Rules are evaluated in a fixed order and the first one that fires wins:

1. **Override** -- an exact normalized-merchant entry in the override store.
   Always confidence ``1``.
2. **Fees** -- bank fee phrasing (``comision``, ``cargo``, ...). Checked
   before transfers so "COMISION TRANSFERENCIA" is a fee.
3. **Transfers** -- transfer and card-payment phrasing.
4. **Income** -- salary/deposit phrasing, only for credit transactions.
5. **Merchant patterns** -- :func:`~statement_tracker.merchants.get_merchant_category`.

A blank description is Uncategorized with confidence ``0``; a miss is never
an error.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass

from statement_tracker.merchants import get_merchant_category, normalize_merchant_name
from statement_tracker.models import (
    Category,
    CategoryMatch,
    Transaction,
    TransactionList,
    TransactionType,
)
from statement_tracker.overrides import OverrideLookup

FEE_KEYWORDS = (
    "comision",
    "cargo",
    "fee",
    "interes",
    "mantenimiento",
    "costo producto",
)

TRANSFER_KEYWORDS = (
    "transferencia",
    "trf",
    "transf",
    "pago supernet",
    "pago electronico tarjeta credito",
    "pago tarjeta credito",
)

INCOME_KEYWORDS = (
    "sueldo",
    "salario",
    "nomina",
    "haberes",
    "pago sueldos",
    "deposito",
)

Categorizer = Callable[[str, TransactionType], CategoryMatch]


@dataclass(frozen=True)
class KeywordRule:
    """Assign *category* when any keyword is a substring of the description.

    Attributes:
        keywords: Lowercase substrings matched against the normalized
            description.
        category: Category assigned when the rule fires.
        confidence: Confidence reported for the match.
        only_type: If set, the rule only applies to this transaction type.
    """

    keywords: tuple[str, ...]
    category: Category
    confidence: float
    only_type: TransactionType | None = None

    def matches(self, normalized: str, txn_type: TransactionType) -> bool:
        if self.only_type is not None and txn_type != self.only_type:
            return False
        return any(keyword in normalized for keyword in self.keywords)


KEYWORD_RULES: tuple[KeywordRule, ...] = (
    KeywordRule(FEE_KEYWORDS, Category.FEES, 0.95),
    KeywordRule(TRANSFER_KEYWORDS, Category.TRANSFER, 0.9),
    KeywordRule(INCOME_KEYWORDS, Category.INCOME, 0.9, only_type=TransactionType.CREDIT),
)


def categorize_transaction(
    description: str,
    txn_type: TransactionType | str,
    overrides: OverrideLookup | None = None,
) -> CategoryMatch:
    """Categorize one transaction description.

    Args:
        description: Raw description text.
        txn_type: ``debit`` or ``credit``; gates the income rule.
        overrides: Optional override lookup consulted before every other
            rule. ``None`` means no overrides.

    Returns:
        A :class:`CategoryMatch` with the category value and confidence.
    """
    normalized = normalize_merchant_name(description)
    if not normalized:
        return CategoryMatch(category=Category.UNCATEGORIZED.value, confidence=0.0)

    if overrides is not None:
        override = overrides.get(normalized)
        if override:
            return CategoryMatch(category=override, confidence=1.0)

    txn_type = TransactionType(txn_type)
    for rule in KEYWORD_RULES:
        if rule.matches(normalized, txn_type):
            return CategoryMatch(category=rule.category.value, confidence=rule.confidence)

    return get_merchant_category(description)


def make_categorizer(overrides: OverrideLookup | None = None) -> Categorizer:
    """Bind *overrides* into a ``(description, type) -> CategoryMatch`` callable.

    Parsers accept such a callable so they never reach for a global store.
    """

    def _categorize(description: str, txn_type: TransactionType) -> CategoryMatch:
        return categorize_transaction(description, txn_type, overrides)

    return _categorize


def recategorize(
    transactions: list[Transaction],
    overrides: OverrideLookup | None = None,
) -> list[Transaction]:
    """Recompute the category of every transaction.

    Used after the override store changes. Returns a new list of new
    transaction objects; *transactions* is left untouched so caches keyed on
    the old list are never served for the new one.
    """
    result: list[Transaction] = TransactionList()
    for txn in transactions:
        match = categorize_transaction(txn.description, txn.type, overrides)
        result.append(
            dataclasses.replace(
                txn,
                category=match.category,
                category_confidence=match.confidence,
            )
        )
    return result
