"""Click CLI entry point for the statement command.

Handles argument parsing, config loading, and error display. All business
logic is delegated to ``parsers``, ``pipeline``, ``filters``,
``aggregation``, ``overrides``, ``config`` and ``export`` modules.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

import click

from statement_tracker import __version__
from statement_tracker.models import AppConfig, Category


def _parse_date(value: str | None) -> date | None:
    """Parse a ``YYYY-MM-DD`` or ``DD/MM/YYYY`` option value.

    Raises ``click.BadParameter`` on anything else.
    """
    if value is None:
        return None
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    raise click.BadParameter(
        f"Invalid date: {value!r}. Expected YYYY-MM-DD or DD/MM/YYYY."
    )


def _parse_decimal(value: str | None, name: str) -> Decimal | None:
    if value is None:
        return None
    try:
        result = Decimal(value)
    except InvalidOperation:
        raise click.BadParameter(f"Invalid {name}: {value!r}.") from None
    if not result.is_finite():
        raise click.BadParameter(f"Invalid {name}: {value!r}.")
    return result


def _configure_logging(verbose: bool, debug: bool) -> None:
    """Set up logging based on verbosity flags."""
    if debug:
        level = logging.DEBUG
    elif verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
        force=True,
    )


def _load_project(root: Path) -> AppConfig:
    """Load config.toml if present, otherwise fall back to defaults."""
    from statement_tracker.config import load_config

    if not (root / "config.toml").exists():
        return AppConfig()
    try:
        return load_config(root)
    except Exception as exc:
        click.echo(f"Error loading configuration: {exc}", err=True)
        sys.exit(1)


def _load_store(root: Path, config: AppConfig):
    from statement_tracker.overrides import load_overrides

    try:
        return load_overrides(root / config.overrides_file)
    except Exception as exc:
        click.echo(f"Error loading overrides: {exc}", err=True)
        sys.exit(1)


def _run_import(files: tuple[str, ...], root: Path, config: AppConfig):
    from statement_tracker.pipeline import run

    store = _load_store(root, config)
    try:
        return run([Path(f) for f in files], overrides=store)
    except Exception as exc:
        click.echo(f"Error running import: {exc}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="statement-tracker")
def cli() -> None:
    """Parse, categorize and summarize bank and credit card CSV statements."""


@cli.command("parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print transactions as JSON.")
@click.option("--verbose", is_flag=True, default=False, help="Detailed progress output.")
@click.option("--debug", is_flag=True, default=False, help="Developer-level diagnostics.")
def parse_command(file: str, as_json: bool, verbose: bool, debug: bool) -> None:
    """Parse a single statement file."""
    _configure_logging(verbose, debug)
    root = Path.cwd()
    config = _load_project(root)
    store = _load_store(root, config)

    from statement_tracker.export import print_summary
    from statement_tracker.parsers import parse

    path = Path(file)
    try:
        content = path.read_text(encoding="utf-8-sig")
        result = parse(content, path.name, overrides=store)
    except ValueError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except OSError as exc:
        click.echo(f"Error reading {path}: {exc}", err=True)
        sys.exit(1)

    if as_json:
        payload = {
            "file_type": result.file_type.value,
            "file_name": result.file_name,
            "parsed_at": result.parsed_at.isoformat(timespec="seconds"),
            "transactions": [txn.to_dict() for txn in result.transactions],
            "errors": result.errors,
        }
        click.echo(json.dumps(payload, indent=2, ensure_ascii=False))
        return

    click.echo(f"{result.file_name}: {result.file_type.value}")
    print_summary(result.transactions, title=result.file_name)
    for error in result.errors:
        click.echo(f"Warning: {error}", err=True)


@cli.command("import")
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--output", "output", default=None, type=click.Path(), help="CSV file to write.")
@click.option("--verbose", is_flag=True, default=False, help="Detailed progress output.")
@click.option("--debug", is_flag=True, default=False, help="Developer-level diagnostics.")
def import_command(
    files: tuple[str, ...], output: str | None, verbose: bool, debug: bool
) -> None:
    """Import statement files, de-duplicate, and export one merged CSV."""
    _configure_logging(verbose, debug)
    root = Path.cwd()
    config = _load_project(root)

    from statement_tracker.export import export, print_import_report

    result = _run_import(files, root, config)
    print_import_report(result)

    if not result.parsed:
        click.echo("Error: no statement could be imported.", err=True)
        sys.exit(1)

    output_path = Path(output) if output else root / config.output_dir / "transactions.csv"
    try:
        written = export(result.transactions, output_path)
    except Exception as exc:
        click.echo(f"Error writing output: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {len(result.transactions)} transaction(s) to {written}")


@cli.command("summary")
@click.argument("files", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--from", "date_from", default=None, help="Earliest date (YYYY-MM-DD).")
@click.option("--to", "date_to", default=None, help="Latest date (YYYY-MM-DD).")
@click.option("--category", "categories", multiple=True, help="Only these categories.")
@click.option("--currency", "currencies", multiple=True, type=click.Choice(["USD", "UYU"]))
@click.option("--min", "amount_min", default=None, help="Minimum amount.")
@click.option("--max", "amount_max", default=None, help="Maximum amount.")
@click.option("--query", default=None, help="Text to search in descriptions.")
def summary_command(
    files: tuple[str, ...],
    date_from: str | None,
    date_to: str | None,
    categories: tuple[str, ...],
    currencies: tuple[str, ...],
    amount_min: str | None,
    amount_max: str | None,
    query: str | None,
) -> None:
    """Filter imported transactions and print totals per currency and category."""
    _configure_logging(verbose=False, debug=False)
    try:
        options_kwargs = dict(
            date_from=_parse_date(date_from),
            date_to=_parse_date(date_to),
            amount_min=_parse_decimal(amount_min, "minimum amount"),
            amount_max=_parse_decimal(amount_max, "maximum amount"),
        )
    except click.BadParameter as exc:
        click.echo(f"Error: {exc.format_message()}", err=True)
        sys.exit(1)

    root = Path.cwd()
    config = _load_project(root)

    from statement_tracker.export import print_summary
    from statement_tracker.filters import FilterOptions, apply_filters

    result = _run_import(files, root, config)
    for error in result.errors:
        click.echo(f"Error: {error}", err=True)

    options = FilterOptions(
        categories=categories or None,
        currencies=currencies or None,
        query=query,
        **options_kwargs,
    )
    selected = apply_filters(result.transactions, options)
    print_summary(selected)

    if query and not selected:
        from statement_tracker.search import build_search_suggestions

        suggestions = build_search_suggestions(result.transactions)
        if suggestions:
            click.echo(f"No matches for {query!r}. Frequent descriptions:")
            for suggestion in suggestions:
                click.echo(f"  {suggestion}")

    if config.usd_to_uyu_rate is not None:
        from statement_tracker.aggregation import calculate_totals, convert_amount
        from statement_tracker.models import Currency

        totals = calculate_totals(selected)
        combined = totals.net.uyu + convert_amount(
            totals.net.usd, Currency.USD, Currency.UYU, config.usd_to_uyu_rate
        )
        click.echo(
            f"Combined net (UYU at {config.usd_to_uyu_rate} per USD): {combined:,.2f}"
        )


@cli.command("balance")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--currency", default=None, type=click.Choice(["USD", "UYU"]))
@click.option("--start", "starting_balance", default="0", help="Starting balance.")
def balance_command(file: str, currency: str | None, starting_balance: str) -> None:
    """Print the recomputed running balance of a statement."""
    _configure_logging(verbose=False, debug=False)
    try:
        start = _parse_decimal(starting_balance, "starting balance")
    except click.BadParameter as exc:
        click.echo(f"Error: {exc.format_message()}", err=True)
        sys.exit(1)

    root = Path.cwd()
    config = _load_project(root)

    from statement_tracker.aggregation import calculate_running_balance

    result = _run_import((file,), root, config)
    if result.errors:
        for error in result.errors:
            click.echo(f"Error: {error}", err=True)
        sys.exit(1)

    by_id = {txn.id: txn for txn in result.transactions}
    points = calculate_running_balance(
        result.transactions, currency or config.default_currency, start
    )
    for point in points:
        txn = by_id[point.id]
        day = txn.date.isoformat() if txn.date else "????-??-??"
        sign = "+" if txn.type.value == "credit" else "-"
        click.echo(f"{day}  {sign}{txn.amount:>12,.2f}  {point.balance:>14,.2f}  {txn.description}")


# ---------------------------------------------------------------------------
# Overrides
# ---------------------------------------------------------------------------


@cli.group()
def override() -> None:
    """Manage merchant category overrides."""


@override.command("set")
@click.argument("merchant")
@click.argument("category")
def override_set(merchant: str, category: str) -> None:
    """Always categorize MERCHANT as CATEGORY."""
    from statement_tracker.overrides import save_overrides

    valid = {c.value for c in Category}
    if category not in valid:
        click.echo(
            f"Error: unknown category {category!r}. Choose from: {', '.join(sorted(valid))}",
            err=True,
        )
        sys.exit(1)

    root = Path.cwd()
    config = _load_project(root)
    store = _load_store(root, config)

    if store.set(merchant, category) is None:
        click.echo("Error: merchant name must not be blank.", err=True)
        sys.exit(1)

    try:
        save_overrides(root / config.overrides_file, store)
    except Exception as exc:
        click.echo(f"Error saving overrides: {exc}", err=True)
        sys.exit(1)

    click.echo(f'Override set: "{merchant.strip()}" -> {category}')


@override.command("clear")
@click.argument("merchant")
def override_clear(merchant: str) -> None:
    """Remove the override for MERCHANT."""
    from statement_tracker.overrides import save_overrides

    root = Path.cwd()
    config = _load_project(root)
    store = _load_store(root, config)

    if not store.clear(merchant):
        click.echo(f'No override for "{merchant.strip()}".')
        return

    try:
        save_overrides(root / config.overrides_file, store)
    except Exception as exc:
        click.echo(f"Error saving overrides: {exc}", err=True)
        sys.exit(1)

    click.echo(f'Override cleared: "{merchant.strip()}"')


@override.command("list")
def override_list() -> None:
    """List all overrides."""
    root = Path.cwd()
    config = _load_project(root)
    store = _load_store(root, config)

    entries = store.list()
    if not entries:
        click.echo("No overrides.")
        return
    for key, entry in sorted(entries.items()):
        click.echo(f'  "{key}" -> {entry.category}')


@cli.command()
@click.option(
    "--dir", "target_dir", default=".", type=click.Path(), help="Directory to initialize."
)
def init(target_dir: str) -> None:
    """Initialize a new data directory with the standard structure."""
    from statement_tracker.config import initialize

    target = Path(target_dir).resolve()

    try:
        initialize(target)
    except Exception as exc:
        click.echo(f"Error initializing project: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Initialized statement tracker project in {target}")
