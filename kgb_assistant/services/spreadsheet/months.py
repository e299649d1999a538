"""
Month abbreviations used in personnel spreadsheets.

Sheets are filled in by hand, mostly in Indonesian, so both the Indonesian
abbreviations and the English ones that differ from them are accepted.
Exports always use the Indonesian form.
"""

from typing import Any, Optional


EXPORT_MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "Mei", "Jun",
    "Jul", "Agu", "Sep", "Okt", "Nov", "Des",
)

MONTH_TOKENS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "mei": 5,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "agu": 8,
    "ags": 8,
    "agt": 8,
    "aug": 8,
    "sep": 9,
    "okt": 10,
    "oct": 10,
    "nov": 11,
    "des": 12,
    "dec": 12,
}


def parse_month_token(value: Any) -> Optional[int]:
    """
    Month number (1-12) for a cell such as 'Mar', 'maret' or ' AGT '.

    Returns None for anything that does not start with a known
    abbreviation, including the '0' placeholder of empty years.
    """
    if value is None or isinstance(value, (int, float)):
        return None
    token = str(value).strip().lower()
    if len(token) < 3:
        return None
    return MONTH_TOKENS.get(token[:3])


def month_abbreviation(month: int) -> str:
    """Export abbreviation for a month number."""
    return EXPORT_MONTH_ABBREVIATIONS[month - 1]
