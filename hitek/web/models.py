"""Request and response models for the Hi Tek web API.

Usage:
    from hitek.web.models import TaskUpdateRequest

    @router.put("/api/projects/{project_id}/tasks/{task_id}")
    async def update_task(project_id: str, task_id: str, request: TaskUpdateRequest):
        ...
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from hitek.dashboard import ProjectSnapshot
from hitek.formatting import format_days_left, format_days_spent


# ============================================================================
# Project Models
# ============================================================================


class ProjectRequest(BaseModel):
    """Body of POST /api/projects and PUT /api/projects/{id}.

    ``project_id`` is taken from the path on update.
    """

    project_id: Optional[str] = None
    name: str
    client_name: Optional[str] = None
    location: Optional[str] = None
    start_date: Optional[date] = None
    deadline: Optional[date] = None
    budget: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    project_type: Optional[str] = None
    contractor: Optional[str] = None
    engineers: Optional[str] = None
    contact1: Optional[str] = None
    contact2: Optional[str] = None

    @field_validator("start_date", "deadline", mode="before")
    @classmethod
    def empty_string_to_none(cls, v):
        if v == "":
            return None
        return v


class ProjectCreatedResponse(BaseModel):
    success: bool = True
    project_id: str
    message: str
    tasks_created: int
    tasks_failed: int


# ============================================================================
# Task, Material and Expense Models
# ============================================================================


class TaskUpdateRequest(BaseModel):
    progress: int = Field(ge=0, le=100)
    due_date: Optional[date] = None


class MaterialCreateRequest(BaseModel):
    name: str
    required: float = Field(ge=0, allow_inf_nan=False)
    dispatched: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    unit: Optional[str] = None


class DispatchRequest(BaseModel):
    quantity: float = Field(allow_inf_nan=False)


class ExpenseCreateRequest(BaseModel):
    expense_date: date
    description: str
    amount: float = Field(allow_inf_nan=False)
    category: Optional[str] = None


# ============================================================================
# Dashboard payload
# ============================================================================


def dashboard_payload(snapshot: ProjectSnapshot) -> dict[str, Any]:
    """Serialize one project snapshot for the dashboard view."""
    metrics = snapshot.metrics
    return {
        "project": snapshot.project.model_dump(mode="json"),
        "kpis": {
            "days_spent": metrics.days_spent,
            "days_spent_label": format_days_spent(metrics.days_spent),
            "days_left": metrics.days_left.days if metrics.days_left else None,
            "overdue": bool(metrics.days_left and metrics.days_left.overdue),
            "days_left_label": format_days_left(metrics.days_left),
            "task_progress": metrics.task_progress,
            "completed_tasks": metrics.completed_tasks,
            "total_tasks": metrics.total_tasks,
            "material_dispatch": metrics.material_dispatch,
            "total_expenses": metrics.total_expenses,
            "budget_remaining": metrics.budget_remaining,
            "over_budget": metrics.budget.over_budget,
        },
        "tasks": [
            {
                **option.task.model_dump(mode="json"),
                "status": option.task.status.value,
                "locked": option.locked,
                "suggested_progress": option.suggested_progress,
            }
            for option in snapshot.task_options
        ],
        "materials": [
            {
                "name": line.name,
                "unit": line.unit,
                "required": line.required,
                "dispatched": line.dispatched,
                "balance": line.balance,
                "progress": line.progress,
            }
            for line in metrics.materials
        ],
        "expenses_by_category": metrics.expenses_by_category,
        "recent_expenses": [e.model_dump(mode="json") for e in metrics.recent_expenses],
        "warnings": list(snapshot.warnings),
    }
