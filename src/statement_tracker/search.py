"""Search helpers: description suggestions and match highlighting."""

from __future__ import annotations

import re
from collections.abc import Sequence

from statement_tracker.merchants import normalize_merchant_name
from statement_tracker.models import Transaction


def build_search_suggestions(transactions: Sequence[Transaction], limit: int = 6) -> list[str]:
    """Return the most frequent descriptions, most common first.

    Descriptions are counted by their normalized form; the label shown is
    the first spelling seen. Ties are broken alphabetically.
    """
    counts: dict[str, list] = {}
    for txn in transactions:
        normalized = normalize_merchant_name(txn.description)
        if not normalized:
            continue
        if normalized in counts:
            counts[normalized][0] += 1
        else:
            counts[normalized] = [1, txn.description.strip()]

    ranked = sorted(counts.values(), key=lambda entry: (-entry[0], entry[1]))
    return [label for _, label in ranked[:limit]]


def split_highlight(text: str, query: str | None) -> list[tuple[str, bool]]:
    """Split *text* into ``(segment, is_match)`` pairs for *query*.

    Matching is case-insensitive and literal. Without a query, or with no
    match, the whole text comes back as a single non-matching segment.
    """
    if not query:
        return [(text, False)]

    segments: list[tuple[str, bool]] = []
    last = 0
    for match in re.finditer(re.escape(query), text, flags=re.IGNORECASE):
        if match.start() > last:
            segments.append((text[last : match.start()], False))
        segments.append((match.group(0), True))
        last = match.end()

    if last < len(text):
        segments.append((text[last:], False))

    return segments or [(text, False)]
