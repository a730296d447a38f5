"""Import pipeline: parse a batch of statement files and merge the results.

Stages, in order:

1. **Parse** -- read each file and run the auto-detecting parser. Files
   that cannot be read or detected are reported as errors; the rest of the
   batch continues.
2. **Merge** -- append the parsed transactions to the already-imported
   ones, dropping any whose ID is already present (first occurrence wins).

Both stages return new lists; inputs are never mutated.
"""

from __future__ import annotations

import csv
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from statement_tracker.models import ParsedData, PipelineResult, Transaction, TransactionList
from statement_tracker.overrides import OverrideLookup
from statement_tracker.parsers import parse

logger = logging.getLogger(__name__)


def run(
    paths: Iterable[Path],
    overrides: OverrideLookup | None = None,
    existing: Sequence[Transaction] = (),
) -> PipelineResult:
    """Import every file in *paths* on top of *existing* transactions.

    Args:
        paths: Statement CSV files, in import order.
        overrides: Optional category override lookup.
        existing: Transactions imported earlier; their IDs count as
            duplicates for this batch.

    Returns:
        A :class:`PipelineResult` with the merged transaction list, one
        :class:`ParsedData` per parsed file, and the accumulated warnings
        and errors.
    """
    parsed: list[ParsedData] = []
    warnings: list[str] = []
    errors: list[str] = []

    # -- Stage 1: Parse -------------------------------------------------------
    for path in paths:
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8-sig")
        except FileNotFoundError:
            errors.append(f"{path}: file not found")
            continue
        except (OSError, UnicodeDecodeError) as exc:
            errors.append(f"{path}: {exc}")
            continue

        try:
            result = parse(content, path.name, overrides=overrides)
        except (ValueError, csv.Error) as exc:
            logger.warning("%s: %s", path, exc)
            errors.append(f"{path}: {exc}")
            continue

        logger.info(
            "%s: %s, %d transaction(s)",
            path.name,
            result.file_type.value,
            len(result.transactions),
        )
        parsed.append(result)
        warnings.extend(result.errors)

    # -- Stage 2: Merge -------------------------------------------------------
    incoming = [txn for result in parsed for txn in result.transactions]
    merged, added, duplicates = merge_transactions(existing, incoming)

    if duplicates:
        warnings.append(f"Skipped {len(duplicates)} duplicate transaction(s)")

    return PipelineResult(
        transactions=merged,
        parsed=parsed,
        added=len(added),
        duplicates=len(duplicates),
        warnings=warnings,
        errors=errors,
    )


def merge_transactions(
    existing: Sequence[Transaction],
    incoming: Sequence[Transaction],
) -> tuple[list[Transaction], list[Transaction], list[Transaction]]:
    """Append *incoming* to *existing*, skipping IDs already present.

    Duplicates within *incoming* itself are skipped too; the first
    occurrence wins.

    Returns:
        ``(merged, added, duplicates)`` -- the new combined list, the
        transactions that were added, and the ones that were skipped.
    """
    seen = {txn.id for txn in existing}
    merged = TransactionList(existing)
    added: list[Transaction] = []
    duplicates: list[Transaction] = []

    for txn in incoming:
        if txn.id in seen:
            duplicates.append(txn)
            continue
        seen.add(txn.id)
        added.append(txn)
        merged.append(txn)

    return merged, added, duplicates
