"""State owned by the dashboard controller."""

from __future__ import annotations

from dataclasses import dataclass

from hitek.models import Expense, Material, Project, Task
from hitek.reporting.dashboard_metrics import DashboardMetrics
from hitek.workflow import TaskOption, task_options


@dataclass(frozen=True, slots=True)
class ProjectSnapshot:
    """Everything loaded for the selected project, taken at one moment."""

    project: Project
    tasks: tuple[Task, ...]
    materials: tuple[Material, ...]
    expenses: tuple[Expense, ...]
    metrics: DashboardMetrics
    warnings: tuple[str, ...] = ()

    @property
    def task_options(self) -> list[TaskOption]:
        return task_options(self.tasks)

    def find_material(self, name: str) -> Material | None:
        return next((m for m in self.materials if m.name == name), None)


@dataclass(frozen=True, slots=True)
class DashboardState:
    """Immutable; the controller swaps in a new instance after each fetch."""

    selected_project_id: str | None = None
    projects: tuple[Project, ...] = ()
    snapshot: ProjectSnapshot | None = None

    def find_project(self, project_id: str) -> Project | None:
        return next((p for p in self.projects if p.project_id == project_id), None)
