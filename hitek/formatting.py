"""Display helpers shared by the CLI and the web API."""

from __future__ import annotations

from datetime import date
from typing import Any

from hitek.integration.normalize import to_date, to_number
from hitek.reporting.kpi import DaysLeft, round_half_up

NOT_AVAILABLE = "N/A"


def format_date(value: Any) -> str:
    parsed = value if isinstance(value, date) else to_date(value)
    return parsed.isoformat() if parsed else NOT_AVAILABLE


def format_number(value: Any) -> str:
    """Whole number with Indian digit grouping: 1234567 -> 12,34,567."""
    number = round_half_up(to_number(value))
    sign = "-" if number < 0 else ""
    digits = str(abs(number))
    if len(digits) <= 3:
        return f"{sign}{digits}"
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return f"{sign}{','.join(groups)},{tail}"


def format_money(value: Any, symbol: str = "₹") -> str:
    return f"{symbol} {format_number(value)}"


def format_days_spent(days: int | None) -> str:
    return NOT_AVAILABLE if days is None else f"{days} days"


def format_days_left(days_left: DaysLeft | None) -> str:
    if days_left is None:
        return NOT_AVAILABLE
    if days_left.overdue:
        return "OVERDUE!"
    return f"{days_left.days} days left"
