"""Dashboard routes: KPIs for one project and the writes made from it.

Every write selects the project first so the repositories work against the
latest task and material snapshot, then returns the refreshed dashboard.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hitek.dashboard import DashboardController
from hitek.web.auth import require_session
from hitek.web.dependencies import check_outcome, get_controller
from hitek.web.models import (
    DispatchRequest,
    ExpenseCreateRequest,
    MaterialCreateRequest,
    TaskUpdateRequest,
    dashboard_payload,
)
from hitek.workflow import WORKFLOW_TEMPLATE

router = APIRouter(tags=["dashboard"], dependencies=[Depends(require_session)])


async def _select(controller: DashboardController, project_id: str) -> None:
    check_outcome(await controller.select_project(project_id))


def _current(controller: DashboardController) -> dict:
    return dashboard_payload(controller.state.snapshot)


@router.get("/")
async def home(controller: DashboardController = Depends(get_controller)):
    """Landing page after login: the project list and the first dashboard."""
    projects = check_outcome(await controller.load_projects())
    snapshot = controller.state.snapshot
    return {
        "projects": [p.model_dump(mode="json") for p in projects],
        "selected_project_id": controller.state.selected_project_id,
        "dashboard": dashboard_payload(snapshot) if snapshot else None,
    }


@router.get("/api/projects/{project_id}/dashboard")
async def project_dashboard(
    project_id: str,
    controller: DashboardController = Depends(get_controller),
):
    await _select(controller, project_id)
    return _current(controller)


@router.put("/api/projects/{project_id}/tasks/{task_id}")
async def update_task(
    project_id: str,
    task_id: str,
    request: TaskUpdateRequest,
    controller: DashboardController = Depends(get_controller),
):
    await _select(controller, project_id)
    check_outcome(await controller.update_task(task_id, request.progress, request.due_date))
    return _current(controller)


@router.post("/api/projects/{project_id}/materials")
async def add_material(
    project_id: str,
    request: MaterialCreateRequest,
    controller: DashboardController = Depends(get_controller),
):
    await _select(controller, project_id)
    check_outcome(
        await controller.add_material(
            request.name, request.required, request.dispatched, request.unit
        )
    )
    return _current(controller)


@router.post("/api/projects/{project_id}/materials/{material_name}/dispatch")
async def record_dispatch(
    project_id: str,
    material_name: str,
    request: DispatchRequest,
    controller: DashboardController = Depends(get_controller),
):
    await _select(controller, project_id)
    check_outcome(await controller.record_dispatch(material_name, request.quantity))
    return _current(controller)


@router.post("/api/projects/{project_id}/expenses")
async def record_expense(
    project_id: str,
    request: ExpenseCreateRequest,
    controller: DashboardController = Depends(get_controller),
):
    await _select(controller, project_id)
    check_outcome(
        await controller.record_expense(
            request.expense_date, request.description, request.amount, request.category
        )
    )
    return _current(controller)


@router.get("/api/workflow")
async def workflow_template():
    return {
        "steps": [
            {"ordinal": index, "name": step.name, "responsible": step.responsible}
            for index, step in enumerate(WORKFLOW_TEMPLATE, start=1)
        ]
    }
