"""Project management routes.

Creating a project also seeds its workflow tasks; deleting one removes its
tasks, materials and expenses as well.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from hitek.dashboard import DashboardController
from hitek.models import Project
from hitek.repositories import Outcome
from hitek.web.auth import require_session
from hitek.web.dependencies import check_outcome, get_controller
from hitek.web.models import ProjectCreatedResponse, ProjectRequest

router = APIRouter(
    prefix="/api/projects",
    tags=["projects"],
    dependencies=[Depends(require_session)],
)


@router.get("")
async def list_projects(controller: DashboardController = Depends(get_controller)):
    projects = check_outcome(await controller.projects.list())
    return {"projects": [p.model_dump(mode="json") for p in projects]}


@router.post("", response_model=ProjectCreatedResponse)
async def create_project(
    request: ProjectRequest,
    controller: DashboardController = Depends(get_controller),
):
    """Create a project and its 23 workflow tasks."""
    project = Project(**request.model_dump(exclude={"project_id"}), project_id=request.project_id or "")
    creation = check_outcome(await controller.create_project_with_workflow(project))
    return ProjectCreatedResponse(
        project_id=creation.project.project_id,
        message=creation.message,
        tasks_created=creation.tasks.created,
        tasks_failed=creation.tasks.failed,
    )


@router.put("/{project_id}")
async def update_project(
    project_id: str,
    request: ProjectRequest,
    controller: DashboardController = Depends(get_controller),
):
    existing = check_outcome(await controller.projects.get(project_id))
    project = Project(
        **request.model_dump(exclude={"project_id"}),
        project_id=project_id,
        creation_date=existing.creation_date,
    )
    updated = check_outcome(await controller.update_project(project))
    return {"success": True, "project": updated.model_dump(mode="json")}


@router.delete("/{project_id}")
async def delete_project(
    project_id: str,
    controller: DashboardController = Depends(get_controller),
):
    outcome: Outcome[None] = await controller.delete_project(project_id)
    check_outcome(outcome)
    return {"success": True, "project_id": project_id}
