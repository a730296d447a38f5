"""Statement parsers and the unified, auto-detecting entry point.

Each layout module exposes ``parse(content, file_name, categorize=None)``
returning a :class:`~statement_tracker.models.ParsedData`. The ``PARSERS``
dict maps detected file types to those functions; both bank account types
share one parser, which reads the currency from the statement header.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from statement_tracker.categorizer import make_categorizer
from statement_tracker.models import FileType, ParsedData
from statement_tracker.overrides import OverrideLookup
from statement_tracker.parsers import bank_account, credit_card
from statement_tracker.parsers.detector import FileTypeDetectionError, detect_file_type

logger = logging.getLogger(__name__)

PARSERS: dict[FileType, Callable[..., ParsedData]] = {
    FileType.CREDIT_CARD: credit_card.parse,
    FileType.BANK_ACCOUNT_USD: bank_account.parse,
    FileType.BANK_ACCOUNT_UYU: bank_account.parse,
}

__all__ = [
    "PARSERS",
    "EmptyStatementError",
    "FileTypeDetectionError",
    "detect_file_type",
    "get_parser",
    "parse",
]


class EmptyStatementError(ValueError):
    """Raised when the statement content is empty or only whitespace."""


def get_parser(file_type: FileType | str) -> Callable[..., ParsedData]:
    """Look up the parser for a detected file type.

    Raises:
        KeyError: If no parser is registered for *file_type*.
    """
    try:
        return PARSERS[FileType(file_type)]
    except ValueError:
        raise KeyError(file_type) from None


def parse(
    content: str,
    file_name: str,
    overrides: OverrideLookup | None = None,
) -> ParsedData:
    """Detect the statement layout of *content* and parse it.

    Args:
        content: Raw CSV text.
        file_name: Name of the source file. Cosmetic only; detection looks
            at the content.
        overrides: Optional category override lookup used while
            categorizing rows.

    Returns:
        The parsed statement.

    Raises:
        EmptyStatementError: If *content* is blank.
        FileTypeDetectionError: If the layout cannot be detected. No
            fallback parser is attempted.
    """
    if not content or not content.strip():
        raise EmptyStatementError(f"{file_name}: statement is empty")

    file_type = detect_file_type(content)
    logger.debug("%s: detected %s", file_name, file_type.value)

    parser_fn = get_parser(file_type)
    return parser_fn(content, file_name, categorize=make_categorizer(overrides))
