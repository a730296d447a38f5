"""Category taxonomy helpers: display labels and category groupings."""

from __future__ import annotations

from statement_tracker.models import Category

CATEGORY_LABELS: dict[Category, str] = {
    Category.GROCERIES: "Groceries",
    Category.RESTAURANTS: "Restaurants & Dining",
    Category.TRANSPORT: "Transport & Fuel",
    Category.UTILITIES: "Utilities",
    Category.HEALTHCARE: "Healthcare & Pharmacy",
    Category.SHOPPING: "Shopping",
    Category.ENTERTAINMENT: "Entertainment",
    Category.SOFTWARE: "Software & Subscriptions",
    Category.EDUCATION: "Education",
    Category.AUTOMOTIVE: "Automotive",
    Category.HOUSING: "Housing & Rent",
    Category.PERSONAL: "Personal Care",
    Category.INSURANCE: "Insurance",
    Category.INCOME: "Income",
    Category.TRANSFER: "Transfer",
    Category.FEES: "Fees & Charges",
    Category.UNCATEGORIZED: "Uncategorized",
}

_NON_EXPENSE = {Category.INCOME, Category.TRANSFER, Category.UNCATEGORIZED}


def get_all_categories() -> list[Category]:
    return list(Category)


def get_expense_categories() -> list[Category]:
    """All categories except Income, Transfer and Uncategorized."""
    return [c for c in Category if c not in _NON_EXPENSE]


def is_expense_category(category: Category | str) -> bool:
    return _coerce(category) not in _NON_EXPENSE


def is_income_category(category: Category | str) -> bool:
    return _coerce(category) is Category.INCOME


def is_transfer_category(category: Category | str) -> bool:
    return _coerce(category) is Category.TRANSFER


def category_label(category: Category | str | None) -> str:
    """Human-readable label for *category*.

    Unknown category strings (e.g. user-defined ones set through an
    override) are returned unchanged; ``None`` maps to "Uncategorized".
    """
    if category is None:
        return CATEGORY_LABELS[Category.UNCATEGORIZED]
    try:
        return CATEGORY_LABELS[Category(category)]
    except ValueError:
        return str(category)


def _coerce(category: Category | str) -> Category | str:
    try:
        return Category(category)
    except ValueError:
        return category
