"""Configuration loading and project initialization.

Reads ``config.toml`` using stdlib ``tomllib``. Depends only on
``models.py``.
"""

from __future__ import annotations

import sys
from decimal import Decimal, InvalidOperation
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

from statement_tracker.models import AppConfig, Currency

# ---------------------------------------------------------------------------
# Default file content
# ---------------------------------------------------------------------------

_DEFAULT_CONFIG_TOML = """\
# Statement Tracker configuration

[general]
output_dir = "output"
overrides_file = "overrides.toml"   # Merchant category overrides

[display]
default_currency = "UYU"            # "UYU" or "USD"
# Exchange rate used for combined totals. Never fetched; leave unset to
# keep currencies separate.
# usd_to_uyu_rate = 40.0
"""

_DEFAULT_OVERRIDES_TOML = """\
# Merchant category overrides.
# Managed by `statement override set/clear`. Keys are normalized merchant
# names (lowercase, single spaces). An override always wins over rules.

[overrides]
"""

# Directories that ``initialize`` creates.
_INIT_DIRS = [
    "input",
    "output",
]


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(root: Path) -> AppConfig:
    """Load ``config.toml`` from *root* and return an :class:`AppConfig`.

    Missing keys fall back to their defaults.

    Args:
        root: Project root directory containing ``config.toml``.

    Returns:
        A fully-populated :class:`AppConfig` instance.

    Raises:
        FileNotFoundError: If ``config.toml`` does not exist.
        ValueError: If ``default_currency`` or ``usd_to_uyu_rate`` is not
            valid.
    """
    data = _read_toml(Path(root) / "config.toml")

    general = data.get("general", {})
    display = data.get("display", {})

    default_currency = display.get("default_currency", "UYU")
    try:
        Currency(default_currency)
    except ValueError:
        raise ValueError(f"Unknown default_currency: {default_currency!r}") from None

    return AppConfig(
        output_dir=general.get("output_dir", "output"),
        overrides_file=general.get("overrides_file", "overrides.toml"),
        default_currency=default_currency,
        usd_to_uyu_rate=_parse_rate(display.get("usd_to_uyu_rate")),
    )


def initialize(target_dir: Path) -> None:
    """Create the standard directory structure and default config files.

    Idempotent: existing directories are left alone and existing files
    are **not** overwritten.

    Args:
        target_dir: The directory in which to create the project structure.
    """
    target_dir = Path(target_dir)
    target_dir.mkdir(parents=True, exist_ok=True)

    for d in _INIT_DIRS:
        (target_dir / d).mkdir(parents=True, exist_ok=True)

    _write_if_missing(target_dir / "config.toml", _DEFAULT_CONFIG_TOML)
    _write_if_missing(target_dir / "overrides.toml", _DEFAULT_OVERRIDES_TOML)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _read_toml(path: Path) -> dict:
    """Read and parse a TOML file."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _parse_rate(value: object) -> Decimal | None:
    """Validate an optional exchange rate from config."""
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"Invalid usd_to_uyu_rate: {value!r}")
    try:
        rate = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"Invalid usd_to_uyu_rate: {value!r}") from None
    if not rate.is_finite() or rate <= 0:
        raise ValueError(f"Invalid usd_to_uyu_rate: {value!r}")
    return rate


def _write_if_missing(path: Path, content: str) -> None:
    """Write *content* to *path* only if the file does not already exist."""
    if not path.exists():
        path.write_text(content, encoding="utf-8")
