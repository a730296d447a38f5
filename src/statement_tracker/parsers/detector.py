"""Statement layout detection by content sniffing.

Only the first lines of the file are inspected. The file name is never
consulted.
"""

from __future__ import annotations

from statement_tracker.models import FileType

DETECTION_LINES = 10

DETECTION_ERROR_MESSAGE = (
    "Unable to detect CSV file type. "
    "Expected credit card or bank account statement format."
)

# Credit card headers contain "Numero de tarjeta de credito" (accented in
# the export); the unaccented prefix is matched so encoding damage to the
# accents does not break detection.
CREDIT_CARD_MARKER = "tarjeta de cr"
CREDIT_CARD_HEADER_PAIR = ("Tipo de producto", "Fecha de corte")
USD_ACCOUNT_MARKER = "Moneda,USD"
UYU_ACCOUNT_MARKER = "Moneda,UYU"


class FileTypeDetectionError(ValueError):
    """Raised when content matches none of the known statement layouts."""

    def __init__(self, message: str = DETECTION_ERROR_MESSAGE) -> None:
        super().__init__(message)


def detect_file_type(content: str) -> FileType:
    """Detect the statement layout of *content*.

    Signals are checked in order: credit card header phrases, then the
    ``Moneda,USD`` marker, then ``Moneda,UYU``.

    Raises:
        FileTypeDetectionError: If no signal matches.
    """
    head = "\n".join(content.lstrip("\ufeff").splitlines()[:DETECTION_LINES])

    if CREDIT_CARD_MARKER in head or all(phrase in head for phrase in CREDIT_CARD_HEADER_PAIR):
        return FileType.CREDIT_CARD
    if USD_ACCOUNT_MARKER in head:
        return FileType.BANK_ACCOUNT_USD
    if UYU_ACCOUNT_MARKER in head:
        return FileType.BANK_ACCOUNT_UYU

    raise FileTypeDetectionError()
