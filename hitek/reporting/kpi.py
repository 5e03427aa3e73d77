"""Project KPI formulas.

Pure functions over records that have already been fetched. Nothing here
touches the network. Date KPIs report ``None`` (shown as "N/A") when the
project date is missing, while percentage KPIs fall back to 0.
"""

from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence

from hitek.models import Expense, Material, Task


@dataclass(frozen=True, slots=True)
class DaysLeft:
    """Days until the deadline, or days past it when ``overdue``."""

    days: int
    overdue: bool = False


@dataclass(frozen=True, slots=True)
class BudgetBreakdown:
    budget: float
    spent: float
    remaining: float

    @property
    def over_budget(self) -> bool:
        return self.remaining < 0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up, as the dashboard always has."""
    return int(math.floor(value + 0.5))


def _quantity(value: float | None) -> float:
    if value is None or not isinstance(value, (int, float)) or math.isnan(value):
        return 0.0
    return max(0.0, float(value))


def days_spent(start_date: date | None, today: date) -> int | None:
    if start_date is None:
        return None
    return max(0, (today - start_date).days)


def days_left(deadline: date | None, today: date) -> DaysLeft | None:
    if deadline is None:
        return None
    if today > deadline:
        return DaysLeft(days=(today - deadline).days, overdue=True)
    return DaysLeft(days=(deadline - today).days)


def task_progress_percent(tasks: Sequence[Task]) -> int:
    """Average task progress; an empty workflow counts as 0%."""
    if not tasks:
        return 0
    total = sum(_quantity(task.progress) for task in tasks)
    return round_half_up(total / len(tasks))


def material_progress(material: Material) -> int:
    required = _quantity(material.required)
    if required <= 0:
        return 0
    return round_half_up(_quantity(material.dispatched) / required * 100)


def material_balance(material: Material) -> float:
    return material.balance


def material_dispatch_percent(materials: Sequence[Material]) -> int:
    """Dispatched share of everything required across the project."""
    total_required = sum(_quantity(m.required) for m in materials)
    if total_required <= 0:
        return 0
    total_dispatched = sum(_quantity(m.dispatched) for m in materials)
    return round_half_up(total_dispatched / total_required * 100)


def total_expenses(expenses: Iterable[Expense]) -> float:
    return sum(_quantity(expense.amount) for expense in expenses)


def budget_remaining(budget: float, expenses: Iterable[Expense]) -> float:
    return _quantity(budget) - total_expenses(expenses)


def budget_breakdown(budget: float, expenses: Sequence[Expense]) -> BudgetBreakdown:
    spent = total_expenses(expenses)
    return BudgetBreakdown(
        budget=_quantity(budget),
        spent=spent,
        remaining=_quantity(budget) - spent,
    )


def expenses_by_category(expenses: Iterable[Expense]) -> dict[str, float]:
    """Spend per category, in first-seen order."""
    totals: dict[str, float] = defaultdict(float)
    for expense in expenses:
        totals[expense.category or "Uncategorised"] += _quantity(expense.amount)
    return dict(totals)


def recent_expenses(expenses: Iterable[Expense], limit: int = 10) -> list[Expense]:
    """Newest expenses first; undated entries go last."""
    ordered = sorted(
        expenses,
        key=lambda e: e.expense_date or date.min,
        reverse=True,
    )
    return ordered[:limit]
