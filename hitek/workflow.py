"""The Hi Tek 23-step project workflow.

Every new project is seeded with one task per step, in this order. Task ids
carry the 1-based step number (``{project_id}-T{n}``) and that number is the
only thing that orders tasks once they are stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from hitek.models import Task, TaskStatus, task_ordinal

PROGRESS_STEP = 25


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    name: str
    responsible: str


WORKFLOW_TEMPLATE: tuple[WorkflowStep, ...] = (
    WorkflowStep("1. Understanding the System", "Project Manager"),
    WorkflowStep("2. Identifying Scope", "Site Engineer/Project coordinator"),
    WorkflowStep("3. Measurement", "Surveyor/Field Engineer"),
    WorkflowStep("4. Cross-Check Scope", "Site Engineer/Quality Inspector"),
    WorkflowStep("5. Calculate Project Cost", "Estimation Engineer/Cost Analyst"),
    WorkflowStep("6. Review Payment Terms", "Accounts Manager/Contract Specialist"),
    WorkflowStep("7. Calculate BOQ", "Estimation Engineer/Procurement Manager"),
    WorkflowStep("8. Compare Costs", "Procurement Manager/Cost Analyst"),
    WorkflowStep("9. Manage Materials", "Procurement Manager/Warehouse Supervisor"),
    WorkflowStep("10. Prepare BOQ for Production", "Production Planner"),
    WorkflowStep("11. Approval from Director", "Director/General Manager"),
    WorkflowStep("12. Production", "Production Supervisor"),
    WorkflowStep("13. Post-Production Check", "Quality Inspector"),
    WorkflowStep("14. Dispatch", "Logistics Manager"),
    WorkflowStep("15. Installation", "Site Engineer/Contractor"),
    WorkflowStep("16. Handover Measurements", "Surveyor/Field Engineer"),
    WorkflowStep("17. Cross-Check Final Work", "Quality Inspector/Site Engineer"),
    WorkflowStep("18. Create Abstract Invoice", "Accounts Manager"),
    WorkflowStep("19. Approval from Director", "Director/General Manager"),
    WorkflowStep("20. Process Invoice", "Accounts Executive"),
    WorkflowStep("21. Submit Bill On-Site", "Accounts Executive/Project Manager"),
    WorkflowStep("22. Payment Follow-Up", "Accounts Manager"),
    WorkflowStep("23. Submit No-Objection Letter", "Project Manager"),
)


@dataclass(frozen=True, slots=True)
class TaskOption:
    """A task as offered for progress updates."""

    task: Task
    locked: bool
    suggested_progress: int


def make_task_id(project_id: str, ordinal: int) -> str:
    return f"{project_id}-T{ordinal}"


def status_for_progress(progress: float) -> TaskStatus:
    return TaskStatus.from_progress(progress)


def build_initial_tasks(project_id: str) -> list[Task]:
    """Seed tasks for a freshly created project, one per workflow step."""
    return [
        Task(
            project_id=project_id,
            task_id=make_task_id(project_id, index),
            name=step.name,
            responsible=step.responsible,
            progress=0,
        )
        for index, step in enumerate(WORKFLOW_TEMPLATE, start=1)
    ]


def sort_tasks(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks by workflow position; unparseable ids sort first."""
    return sorted(tasks, key=lambda task: task_ordinal(task.task_id))


def blocking_tasks(tasks: Sequence[Task], task_id: str) -> list[Task]:
    """Tasks ahead of ``task_id`` in the workflow that are not yet complete."""
    target = task_ordinal(task_id)
    return [
        task
        for task in sort_tasks(tasks)
        if task_ordinal(task.task_id) < target and not task.is_complete
    ]


def suggested_progress(progress: float) -> int:
    """Snap a stored progress value to the nearest selectable step."""
    # Half-up like the progress dropdown, so 12.5 -> 25
    steps = int(progress / PROGRESS_STEP + 0.5)
    return max(0, min(100, steps * PROGRESS_STEP))


def task_options(tasks: Iterable[Task]) -> list[TaskOption]:
    """Tasks in workflow order, with everything after the first unfinished one locked."""
    options = []
    previous_complete = True
    for task in sort_tasks(tasks):
        options.append(
            TaskOption(
                task=task,
                locked=not previous_complete,
                suggested_progress=suggested_progress(task.progress),
            )
        )
        if not task.is_complete:
            previous_complete = False
    return options
