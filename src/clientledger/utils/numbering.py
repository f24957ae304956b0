"""Document number generation."""

from datetime import date
from typing import Iterable


def document_prefix(kind: str, on_date: date) -> str:
    """Return the numbering prefix for a document kind and date (e.g. ``INV-2401-``)."""
    return f"{kind}-{on_date:%y%m}-"


def next_document_number(kind: str, on_date: date, existing: Iterable[str]) -> str:
    """Return the next free number in a ``KIND-YYMM-NNNN`` series.

    The sequence restarts every month and continues after the highest
    number still on file.

    Args:
        kind: Series tag, e.g. "INV" or "TRX"
        on_date: Document date selecting the monthly series
        existing: Numbers already issued with this prefix

    Returns:
        Next document number
    """
    prefix = document_prefix(kind, on_date)
    highest = 0
    for number in existing:
        suffix = number[len(prefix):] if number.startswith(prefix) else ""
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{prefix}{highest + 1:04d}"
