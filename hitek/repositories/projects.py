"""Project rows in the ``Projects`` sheet."""

from __future__ import annotations

import math

import structlog

from hitek.integration.normalize import project_to_record, records_from_payload
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Operation, Project, Resource
from hitek.repositories.results import Outcome

logger = structlog.get_logger(__name__)


class ProjectRepository:
    """CRUD for projects. Deleting a project does not touch its children."""

    def __init__(self, client: SheetClient):
        self.client = client

    async def list(self) -> Outcome[list[Project]]:
        result = await self.client.send(Resource.PROJECTS, Operation.GET)
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success(records_from_payload(Resource.PROJECTS, result.data))

    async def get(self, project_id: str) -> Outcome[Project]:
        result = await self.client.send(
            Resource.PROJECTS, Operation.GET, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)

        # The sheet may ignore the filter and return every row
        for project in records_from_payload(Resource.PROJECTS, result.data):
            if project.project_id == project_id:
                return Outcome.success(project)
        return Outcome.failure(f"Project {project_id} not found.", ErrorKind.NOT_FOUND)

    async def create(self, project: Project) -> Outcome[Project]:
        error = _validate(project)
        if error:
            return Outcome.invalid(error)

        result = await self.client.send(
            Resource.PROJECTS, Operation.POST, project_to_record(project)
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        logger.info("project_created", project_id=project.project_id)
        return Outcome.success(project)

    async def update(self, project: Project) -> Outcome[Project]:
        """Replace the whole row; the sheet has no partial update."""
        error = _validate(project)
        if error:
            return Outcome.invalid(error)

        result = await self.client.send(
            Resource.PROJECTS, Operation.PUT, project_to_record(project)
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        logger.info("project_updated", project_id=project.project_id)
        return Outcome.success(project)

    async def delete(self, project_id: str) -> Outcome[None]:
        if not project_id:
            return Outcome.invalid("Project ID cannot be empty.")
        result = await self.client.send(
            Resource.PROJECTS, Operation.DELETE, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success()


def _validate(project: Project) -> str | None:
    if not project.project_id.strip():
        return "Project ID cannot be empty."
    if not project.name.strip():
        return "Project name cannot be empty."
    if not math.isfinite(project.budget):
        return "Budget must be a finite number."
    return None
