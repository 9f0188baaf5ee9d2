"""Display helpers for answer text."""

from datetime import datetime
from typing import Optional

NOT_AVAILABLE = "N/A"


def format_money(value: Optional[int]) -> str:
    """Render a dollar amount with thousands separators, or N/A."""
    if value is None:
        return NOT_AVAILABLE
    return f"${value:,}"


def format_date(value: Optional[datetime]) -> str:
    """Render a date as month/day/year."""
    if value is None:
        return NOT_AVAILABLE
    return f"{value.month}/{value.day}/{value.year}"


def display(value: Optional[object]) -> str:
    return NOT_AVAILABLE if value is None or value == "" else str(value)
