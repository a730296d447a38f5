"""Merchant name normalization and the static merchant pattern table.

Matching strategy: the normalized merchant name must *contain* the
normalized pattern. A pattern that equals the whole name keeps the entry's
base confidence; a partial match is reduced by a 5% penalty. Among all
matching patterns the highest resulting confidence wins. Ties keep whichever
pattern was scanned first, so table order is significant.
"""

from __future__ import annotations

import re

from statement_tracker.models import Category, CategoryMatch, MerchantPattern

PARTIAL_MATCH_PENALTY = 0.95

_WHITESPACE_RE = re.compile(r"\s+")

# Ordered from most to least specific within each category group.
MERCHANT_PATTERNS: tuple[MerchantPattern, ...] = (
    # Groceries
    MerchantPattern(("devoto supermercado", "super sol", "provicentro"), Category.GROCERIES, 0.9),
    MerchantPattern(("devoto", "supermercado"), Category.GROCERIES, 0.85),
    MerchantPattern(("carniceria", "panaderia", "verduleria"), Category.GROCERIES, 0.85),
    # Restaurants & dining
    MerchantPattern(
        ("sopranos", "ondero", "cafe", "cultocafe", "restaurant"), Category.RESTAURANTS, 0.85
    ),
    MerchantPattern(("pedidosya", "rappi", "uber eats"), Category.RESTAURANTS, 0.9),
    # Utilities
    MerchantPattern(("antel", "ute", "ose"), Category.UTILITIES, 0.95),
    # Healthcare
    MerchantPattern(("farmashop", "farmacia"), Category.HEALTHCARE, 0.9),
    MerchantPattern(("summum", "medicina", "hospital", "clinica"), Category.HEALTHCARE, 0.85),
    # Software & subscriptions
    MerchantPattern(
        ("jetbrains", "atlassian", "amazon web services", "aws", "claude ai", "openai"),
        Category.SOFTWARE,
        0.95,
    ),
    MerchantPattern(("upwork", "fiverr", "github", "gitlab"), Category.SOFTWARE, 0.9),
    MerchantPattern(("bamboohr", "slack", "zoom", "microsoft"), Category.SOFTWARE, 0.9),
    MerchantPattern(("paypal  cloudflare", "cloudflare"), Category.SOFTWARE, 0.85),
    MerchantPattern(("linkedin",), Category.SOFTWARE, 0.8),
    # Entertainment
    MerchantPattern(
        ("spotify", "netflix", "disney", "hbo", "amazon prime"), Category.ENTERTAINMENT, 0.95
    ),
    MerchantPattern(("cine", "teatro", "concierto"), Category.ENTERTAINMENT, 0.85),
    # Shopping
    MerchantPattern(("sodimac", "shopping"), Category.SHOPPING, 0.9),
    MerchantPattern(("adidas", "nike", "vans", "puma", "rip curl"), Category.SHOPPING, 0.9),
    MerchantPattern(("harrington", "toto calzado", "calzado"), Category.SHOPPING, 0.85),
    MerchantPattern(("merpago prohygiene", "prohygiene"), Category.SHOPPING, 0.8),
    MerchantPattern(("tienda", "boutique"), Category.SHOPPING, 0.75),
    # Transport & fuel
    MerchantPattern(("ancap", "puesto", "combustible", "nafta"), Category.TRANSPORT, 0.9),
    MerchantPattern(("taxi", "uber", "cabify", "stm"), Category.TRANSPORT, 0.85),
    MerchantPattern(("colonia express",), Category.TRANSPORT, 0.95),
    MerchantPattern(("tintoreria",), Category.PERSONAL, 0.85),
    # Insurance
    MerchantPattern(("zurich", "automovil club", "seguro"), Category.INSURANCE, 0.9),
    # Personal care
    MerchantPattern(("peluqueria", "salon", "spa", "gym", "gimnasio"), Category.PERSONAL, 0.85),
    # Fees
    MerchantPattern(("comision", "cargo", "fee"), Category.FEES, 0.9),
)


def normalize_merchant_name(name: str | None) -> str:
    """Lowercase, trim and collapse whitespace runs to a single space.

    The same normalization keys the override store, so merchants spelled
    with different casing or spacing always resolve identically.
    """
    if not name:
        return ""
    return _WHITESPACE_RE.sub(" ", name.lower().strip())


def match_merchant_pattern(
    merchant_name: str,
    patterns: tuple[MerchantPattern, ...] = MERCHANT_PATTERNS,
) -> CategoryMatch | None:
    """Find the highest-confidence pattern contained in *merchant_name*.

    Args:
        merchant_name: Raw merchant or description text.
        patterns: Pattern table to scan, in order. Defaults to
            :data:`MERCHANT_PATTERNS`.

    Returns:
        The best :class:`CategoryMatch` (with ``matched_pattern`` set), or
        ``None`` if the name is blank or nothing matches.
    """
    normalized = normalize_merchant_name(merchant_name)
    if not normalized:
        return None

    best: CategoryMatch | None = None
    highest = 0.0

    for entry in patterns:
        for pattern in entry.patterns:
            normalized_pattern = normalize_merchant_name(pattern)
            if normalized_pattern not in normalized:
                continue

            confidence = entry.confidence
            if normalized != normalized_pattern:
                confidence = entry.confidence * PARTIAL_MATCH_PENALTY

            if confidence > highest:
                highest = confidence
                best = CategoryMatch(
                    category=entry.category.value,
                    confidence=confidence,
                    matched_pattern=pattern,
                )

    return best


def get_merchant_category(merchant_name: str) -> CategoryMatch:
    """Category for *merchant_name*, or Uncategorized with confidence 0."""
    match = match_merchant_pattern(merchant_name)
    if match is not None:
        return CategoryMatch(category=match.category, confidence=match.confidence)
    return CategoryMatch(category=Category.UNCATEGORIZED.value, confidence=0.0)
