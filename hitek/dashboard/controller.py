"""Dashboard controller.

Orchestrates the repositories for project selection and every mutation,
then feeds the fetched records to the KPI engine. The controller is the only
writer of ``DashboardState``; each refresh builds a complete snapshot first
and swaps it in with one assignment, so readers never see a half-updated
dashboard.

Selections are tagged with a generation number. If the user picks another
project while a fetch is in flight, the older response is dropped when it
lands instead of overwriting the newer selection.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable

import structlog

from hitek.config import AppConfig
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Expense, Material, Project, Task
from hitek.reporting.dashboard_metrics import compute_dashboard_metrics
from hitek.repositories import (
    BatchReport,
    ExpenseRepository,
    MaterialRepository,
    Outcome,
    ProjectRepository,
    TaskRepository,
)
from hitek.dashboard.state import DashboardState, ProjectSnapshot
from hitek.workflow import build_initial_tasks

logger = structlog.get_logger(__name__)

NO_PROJECT_SELECTED = "Please select a project first."


@dataclass(frozen=True, slots=True)
class ProjectCreation:
    project: Project
    tasks: BatchReport

    @property
    def message(self) -> str:
        if self.tasks.complete:
            return f"Project {self.project.name} created successfully!"
        return f"Project created, but {self.tasks.failed} tasks failed to save."


class DashboardController:
    """Owns the selected project and its last fetched records."""

    def __init__(
        self,
        client: SheetClient,
        config: AppConfig | None = None,
        today: Callable[[], date] = date.today,
    ):
        enforce_sequence = config.enforce_task_sequence if config else True
        self.recorded_by = config.recorded_by if config else "User (App)"
        self.recent_limit = config.display.recent_expenses_limit if config else 10
        self.today = today

        self.projects = ProjectRepository(client)
        self.tasks = TaskRepository(client, enforce_sequence=enforce_sequence)
        self.materials = MaterialRepository(client)
        self.expenses = ExpenseRepository(client)

        self.state = DashboardState()
        self._generation = 0

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def reset(self, keep_projects: bool = False) -> None:
        """Fall back to the empty dashboard."""
        self._generation += 1
        projects = self.state.projects if keep_projects else ()
        self.state = DashboardState(projects=projects)

    async def load_projects(self) -> Outcome[list[Project]]:
        """Reload the project list and re-select a project.

        The current selection is kept when it still exists, otherwise the
        first project is selected.
        """
        outcome = await self.projects.list()
        if not outcome.ok:
            logger.error("projects_load_failed", error=outcome.error)
            self.reset()
            return outcome

        projects = tuple(outcome.value)
        current = self.state.selected_project_id
        if current and any(p.project_id == current for p in projects):
            target = current
        elif projects:
            target = projects[0].project_id
        else:
            target = None

        self.state = replace(self.state, projects=projects)
        if target is None:
            self.reset(keep_projects=True)
            return outcome

        await self.select_project(target)
        return outcome

    async def select_project(self, project_id: str) -> Outcome[ProjectSnapshot]:
        self._generation += 1
        generation = self._generation

        try:
            return await self._load_snapshot(project_id, generation)
        except Exception:
            logger.exception("dashboard_refresh_crashed", project_id=project_id)
            self.reset(keep_projects=True)
            raise

    async def refresh(self) -> Outcome[ProjectSnapshot]:
        if not self.state.selected_project_id:
            return Outcome.invalid(NO_PROJECT_SELECTED)
        return await self.select_project(self.state.selected_project_id)

    async def _load_snapshot(
        self, project_id: str, generation: int
    ) -> Outcome[ProjectSnapshot]:
        project = self.state.find_project(project_id)
        if project is None:
            found = await self.projects.get(project_id)
            if not found.ok:
                if generation == self._generation:
                    self.reset(keep_projects=True)
                return Outcome.failure(found.error, found.kind)
            project = found.value

        tasks, materials, expenses = await asyncio.gather(
            self.tasks.list_by_project(project_id),
            self.materials.list_by_project(project_id),
            self.expenses.list_by_project(project_id),
        )

        if generation != self._generation:
            logger.info("stale_response_discarded", project_id=project_id)
            return Outcome.failure(
                "A newer selection replaced this request.", ErrorKind.STALE
            )

        warnings = []
        for label, outcome in (("tasks", tasks), ("materials", materials), ("expenses", expenses)):
            if not outcome.ok:
                logger.warning("dashboard_partial_load", project_id=project_id, resource=label, error=outcome.error)
                warnings.append(f"Failed to load {label}: {outcome.error}")

        task_rows = tuple(tasks.value or ())
        material_rows = tuple(materials.value or ())
        expense_rows = tuple(expenses.value or ())
        snapshot = ProjectSnapshot(
            project=project,
            tasks=task_rows,
            materials=material_rows,
            expenses=expense_rows,
            metrics=compute_dashboard_metrics(
                project,
                task_rows,
                material_rows,
                expense_rows,
                today=self.today(),
                recent_limit=self.recent_limit,
            ),
            warnings=tuple(warnings),
        )
        self.state = replace(self.state, selected_project_id=project_id, snapshot=snapshot)
        return Outcome.success(snapshot)

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def create_project_with_workflow(self, project: Project) -> Outcome[ProjectCreation]:
        """Create a project and seed its 23 workflow tasks.

        Task seeding is not transactional; the returned report says how many
        tasks failed to save.
        """
        if project.creation_date is None:
            project = project.model_copy(update={"creation_date": self.today()})

        created = await self.projects.create(project)
        if not created.ok:
            return Outcome.failure(created.error, created.kind)

        report = await self.tasks.create_batch(build_initial_tasks(project.project_id))
        self.state = replace(self.state, selected_project_id=project.project_id)
        await self.load_projects()
        return Outcome.success(ProjectCreation(project=project, tasks=report))

    async def update_project(self, project: Project) -> Outcome[Project]:
        outcome = await self.projects.update(project)
        if outcome.ok:
            await self.load_projects()
        return outcome

    async def delete_project(self, project_id: str) -> Outcome[None]:
        """Delete a project together with its tasks, materials and expenses."""
        if not project_id:
            return Outcome.invalid(NO_PROJECT_SELECTED)

        results = await asyncio.gather(
            self.projects.delete(project_id),
            self.tasks.delete_by_project(project_id),
            self.materials.delete_by_project(project_id),
            self.expenses.delete_by_project(project_id),
        )
        failures = [r for r in results if not r.ok]
        if failures:
            logger.error("project_delete_incomplete", project_id=project_id, failures=len(failures))
            return Outcome.failure(
                ", ".join(f.error or "Unknown error." for f in failures),
                failures[0].kind,
            )

        logger.info("project_deleted", project_id=project_id)
        if self.state.selected_project_id == project_id:
            self.state = replace(self.state, selected_project_id=None, snapshot=None)
        await self.load_projects()
        return Outcome.success()

    # ------------------------------------------------------------------
    # Tasks, materials, expenses
    # ------------------------------------------------------------------

    async def update_task(
        self, task_id: str, progress: int, due_date: date | None = None
    ) -> Outcome[Task]:
        snapshot = self.state.snapshot
        if snapshot is None:
            return Outcome.invalid(NO_PROJECT_SELECTED)

        outcome = await self.tasks.update(
            snapshot.project.project_id,
            task_id,
            progress,
            due_date,
            tasks=snapshot.tasks,
        )
        if outcome.ok:
            await self.refresh()
        return outcome

    async def add_material(
        self,
        name: str,
        required: float,
        dispatched: float = 0.0,
        unit: str | None = None,
    ) -> Outcome[Material]:
        snapshot = self.state.snapshot
        if snapshot is None:
            return Outcome.invalid(NO_PROJECT_SELECTED)

        outcome = await self.materials.create_new(
            snapshot.project.project_id,
            name,
            required,
            dispatched,
            unit,
            existing=snapshot.materials,
        )
        if outcome.ok:
            await self.refresh()
        return outcome

    async def record_dispatch(self, name: str, quantity: float) -> Outcome[Material]:
        snapshot = self.state.snapshot
        if snapshot is None:
            return Outcome.invalid(NO_PROJECT_SELECTED)

        outcome = await self.materials.record_dispatch(
            snapshot.project.project_id, name, quantity, snapshot.materials
        )
        if outcome.ok:
            await self.refresh()
        return outcome

    async def record_expense(
        self,
        expense_date: date | None,
        description: str,
        amount: float,
        category: str | None = None,
    ) -> Outcome[Expense]:
        snapshot = self.state.snapshot
        if snapshot is None:
            return Outcome.invalid(NO_PROJECT_SELECTED)

        expense = Expense(
            project_id=snapshot.project.project_id,
            expense_date=expense_date,
            description=description or "",
            amount=amount,
            category=category,
            recorded_by=self.recorded_by,
        )
        outcome = await self.expenses.create(expense)
        if outcome.ok:
            await self.refresh()
        return outcome
