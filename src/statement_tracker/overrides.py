"""Merchant category overrides: a user-maintained escape hatch.

An override maps a normalized merchant name to a category. Overrides always
win over keyword rules and merchant patterns, and always report confidence
``1``. Writes are last-write-wins; clearing removes the key entirely.

The store lives in memory and is persisted to a TOML file::

    [overrides."devoto supermercado"]
    category = "shopping"
    merchant_original = "DEVOTO Supermercado"
    updated_at = "2026-01-15T10:30:00"

Reads use stdlib ``tomllib`` and writes use ``tomli_w``.
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Protocol

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from statement_tracker.merchants import normalize_merchant_name
from statement_tracker.models import Category, CategoryOverride

logger = logging.getLogger(__name__)


class OverrideLookup(Protocol):
    """Anything the categorizer can consult for a manual category."""

    def get(self, merchant_name: str) -> str | None:
        ...


class OverrideStore:
    """In-memory map of normalized merchant name to :class:`CategoryOverride`.

    Single writer at a time is assumed; there is no internal locking.
    """

    def __init__(self, overrides: dict[str, CategoryOverride] | None = None) -> None:
        self._overrides: dict[str, CategoryOverride] = dict(overrides or {})

    def __len__(self) -> int:
        return len(self._overrides)

    def __contains__(self, merchant_name: object) -> bool:
        if not isinstance(merchant_name, str):
            return False
        return normalize_merchant_name(merchant_name) in self._overrides

    def get(self, merchant_name: str) -> str | None:
        """Return the override category for *merchant_name*, if any."""
        key = normalize_merchant_name(merchant_name)
        if not key:
            return None
        override = self._overrides.get(key)
        return override.category if override else None

    def set(self, merchant_name: str, category: Category | str) -> CategoryOverride | None:
        """Create or replace the override for *merchant_name*.

        Blank merchant names are ignored and return ``None``.
        """
        key = normalize_merchant_name(merchant_name)
        if not key:
            return None
        value = category.value if isinstance(category, Category) else str(category)
        override = CategoryOverride(
            merchant_normalized=key,
            category=value,
            updated_at=datetime.now().isoformat(timespec="seconds"),
            merchant_original=merchant_name.strip(),
        )
        self._overrides[key] = override
        logger.debug("Set override %r -> %s", key, value)
        return override

    def clear(self, merchant_name: str) -> bool:
        """Remove the override for *merchant_name*.

        Returns:
            True if an override was removed.
        """
        key = normalize_merchant_name(merchant_name)
        if key and key in self._overrides:
            del self._overrides[key]
            logger.debug("Cleared override %r", key)
            return True
        return False

    def clear_all(self) -> None:
        self._overrides.clear()

    def list(self) -> dict[str, CategoryOverride]:
        """Return a copy of all overrides keyed by normalized merchant."""
        return dict(self._overrides)


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def load_overrides(path: Path) -> OverrideStore:
    """Load an :class:`OverrideStore` from a TOML file.

    A missing file yields an empty store. Entries without a category are
    skipped with a warning.

    Raises:
        tomllib.TOMLDecodeError: If the file is not valid TOML.
    """
    path = Path(path)
    if not path.is_file():
        return OverrideStore()

    with open(path, "rb") as f:
        data = tomllib.load(f)

    overrides: dict[str, CategoryOverride] = {}
    for merchant, entry in data.get("overrides", {}).items():
        key = normalize_merchant_name(merchant)
        category = entry.get("category", "") if isinstance(entry, dict) else ""
        if not key or not category:
            logger.warning("Skipping invalid override entry %r in %s", merchant, path)
            continue
        overrides[key] = CategoryOverride(
            merchant_normalized=key,
            category=category,
            updated_at=entry.get("updated_at", ""),
            merchant_original=entry.get("merchant_original", ""),
        )

    logger.debug("Loaded %d override(s) from %s", len(overrides), path)
    return OverrideStore(overrides)


def save_overrides(path: Path, store: OverrideStore) -> None:
    """Write every override in *store* to *path*, replacing the file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    table = {
        key: {
            "category": override.category,
            "merchant_original": override.merchant_original,
            "updated_at": override.updated_at,
        }
        for key, override in sorted(store.list().items())
    }
    path.write_text(tomli_w.dumps({"overrides": table}), encoding="utf-8")
    logger.debug("Wrote %d override(s) to %s", len(table), path)
