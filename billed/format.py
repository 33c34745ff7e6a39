# billed/format.py
from __future__ import annotations

from datetime import datetime
from typing import Any

from .errors import FormatError

# French short month names, capitalized and cut to three letters
MONTHS_FR = ["Jan", "Fév", "Mar", "Avr", "Mai", "Jui", "Jui", "Aoû", "Sep", "Oct", "Nov", "Déc"]

STATUS_LABELS = {
    "pending": "En attente",
    "accepted": "Accepté",
}


def format_date(value: Any) -> str:
    """
    Render a stored ISO date as "d MMM. yy", e.g. "2022-12-31" -> "31 Déc. 22".
    Raises FormatError for anything that is not an ISO date.
    """
    if not isinstance(value, str):
        raise FormatError(value)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as e:
        raise FormatError(value) from e
    return f"{parsed.day} {MONTHS_FR[parsed.month - 1]}. {parsed.year % 100:02d}"


def format_status(status: Any) -> Any:
    """Unknown statuses (e.g. "refused") are returned unchanged."""
    return STATUS_LABELS.get(status, status)
