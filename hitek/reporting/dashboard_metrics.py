"""Per-project dashboard metrics.

Combines the time, task, material and expense KPIs for one project into a
single view model for the CLI and the web API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Sequence

from hitek.models import Expense, Material, Project, Task
from hitek.reporting.kpi import (
    BudgetBreakdown,
    DaysLeft,
    budget_breakdown,
    days_left,
    days_spent,
    expenses_by_category,
    material_dispatch_percent,
    material_progress,
    recent_expenses,
    task_progress_percent,
)


@dataclass(frozen=True, slots=True)
class MaterialLine:
    name: str
    unit: str
    required: float
    dispatched: float
    balance: float
    progress: int


@dataclass
class DashboardMetrics:
    """Derived KPIs for one project; never persisted."""

    project_id: str

    # Schedule
    days_spent: int | None
    days_left: DaysLeft | None

    # Workflow
    task_progress: int
    completed_tasks: int
    total_tasks: int

    # Materials
    material_dispatch: int
    materials: list[MaterialLine]

    # Money
    budget: BudgetBreakdown
    expenses_by_category: dict[str, float]
    recent_expenses: list[Expense]

    computed_at: datetime = field(default_factory=datetime.now)

    @property
    def total_expenses(self) -> float:
        return self.budget.spent

    @property
    def budget_remaining(self) -> float:
        return self.budget.remaining


def compute_dashboard_metrics(
    project: Project,
    tasks: Sequence[Task],
    materials: Sequence[Material],
    expenses: Sequence[Expense],
    today: date | None = None,
    recent_limit: int = 10,
) -> DashboardMetrics:
    """Calculate every dashboard KPI for one project.

    Args:
        project: The selected project
        tasks: Its workflow tasks
        materials: Its tracked materials
        expenses: Its expense entries
        today: Reference date (defaults to the local date)
        recent_limit: How many expenses to keep in the recent list

    Returns:
        DashboardMetrics for the project
    """
    today = today or date.today()

    return DashboardMetrics(
        project_id=project.project_id,
        days_spent=days_spent(project.start_date, today),
        days_left=days_left(project.deadline, today),
        task_progress=task_progress_percent(tasks),
        completed_tasks=sum(1 for task in tasks if task.is_complete),
        total_tasks=len(tasks),
        material_dispatch=material_dispatch_percent(materials),
        materials=[
            MaterialLine(
                name=m.name,
                unit=m.unit or "Unit",
                required=m.required,
                dispatched=m.dispatched,
                balance=m.balance,
                progress=material_progress(m),
            )
            for m in materials
        ],
        budget=budget_breakdown(project.budget, expenses),
        expenses_by_category=expenses_by_category(expenses),
        recent_expenses=recent_expenses(expenses, recent_limit),
    )
