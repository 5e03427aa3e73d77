"""Workflow task rows in the ``Tasks`` sheet."""

from __future__ import annotations

import asyncio
from datetime import date
from typing import Sequence

import structlog

from hitek.integration.normalize import records_from_payload, task_progress_record, task_to_record
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Operation, Resource, Task
from hitek.repositories.results import BatchReport, Outcome
from hitek.workflow import blocking_tasks, sort_tasks

logger = structlog.get_logger(__name__)


class TaskRepository:
    """Tasks are always returned in workflow order.

    With ``enforce_sequence`` on, a task cannot be advanced while any task
    before it is below 100%.
    """

    def __init__(self, client: SheetClient, enforce_sequence: bool = True):
        self.client = client
        self.enforce_sequence = enforce_sequence

    async def list_by_project(self, project_id: str) -> Outcome[list[Task]]:
        result = await self.client.send(
            Resource.TASKS, Operation.GET, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        tasks = [
            task
            for task in records_from_payload(Resource.TASKS, result.data)
            if task.project_id == project_id
        ]
        return Outcome.success(sort_tasks(tasks))

    async def create(self, task: Task) -> Outcome[Task]:
        if not task.project_id or not task.task_id:
            return Outcome.invalid("Task needs a project ID and a task ID.")
        result = await self.client.send(Resource.TASKS, Operation.POST, task_to_record(task))
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success(task)

    async def create_batch(self, tasks: Sequence[Task]) -> BatchReport:
        """Write many tasks concurrently and report how many made it.

        The sheet has no transactions, so a partial write stays partial.
        """
        results = await asyncio.gather(*(self.create(task) for task in tasks))
        report = BatchReport(total=len(tasks))
        for task, outcome in zip(tasks, results):
            if outcome.ok:
                report.created += 1
            else:
                report.errors.append(f"{task.task_id}: {outcome.error}")

        if not report.complete:
            logger.warning(
                "task_batch_partial_failure",
                total=report.total,
                failed=report.failed,
            )
        return report

    async def update(
        self,
        project_id: str,
        task_id: str,
        progress: int,
        due_date: date | None = None,
        *,
        tasks: Sequence[Task] | None = None,
    ) -> Outcome[Task]:
        """Set a task's progress; status is derived and written alongside it.

        Args:
            project_id: Owning project
            task_id: Task to update
            progress: New progress, 0-100
            due_date: New due date (the stored one is kept when omitted)
            tasks: Current task snapshot; fetched when not supplied
        """
        if isinstance(progress, bool) or not isinstance(progress, int):
            return Outcome.invalid("Progress must be a whole number.")
        if not 0 <= progress <= 100:
            return Outcome.invalid("Progress must be between 0 and 100.")

        if tasks is None:
            listed = await self.list_by_project(project_id)
            if not listed.ok:
                return Outcome.failure(listed.error, listed.kind)
            tasks = listed.value

        current = next((t for t in tasks if t.task_id == task_id), None)
        if current is None:
            return Outcome.failure(f"Task {task_id} not found.", ErrorKind.NOT_FOUND)

        if self.enforce_sequence and progress > current.progress:
            blockers = blocking_tasks(tasks, task_id)
            if blockers:
                logger.info(
                    "task_update_blocked",
                    task_id=task_id,
                    blocked_by=[t.task_id for t in blockers],
                )
                return Outcome.failure(
                    f"Complete '{blockers[0].name}' before updating '{current.name}'.",
                    ErrorKind.SEQUENCE,
                )

        new_due_date = due_date if due_date is not None else current.due_date
        result = await self.client.send(
            Resource.TASKS,
            Operation.PUT,
            task_progress_record(project_id, task_id, progress, new_due_date),
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)

        return Outcome.success(
            current.model_copy(update={"progress": progress, "due_date": new_due_date})
        )

    async def delete_by_project(self, project_id: str) -> Outcome[None]:
        result = await self.client.send(
            Resource.TASKS, Operation.DELETE, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success()
