"""Spreadsheet row <-> canonical model conversion.

The sheet columns were renamed several times over the life of the dashboard
(``Name`` vs ``ProjectName``, ``Budget`` vs ``ProjectValue`` ...). Every
alternate spelling is resolved here so nothing downstream ever sees a raw
row. Numbers follow the permissive "number or zero" policy the sheet has
always been read with.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Callable, Mapping

import structlog
from pydantic import ValidationError

from hitek.models import Expense, Material, Project, Resource, Task, TaskStatus
from hitek.reporting.kpi import round_half_up

logger = structlog.get_logger(__name__)

_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

PROJECT_NAME_KEYS = ("Name", "ProjectName")
BUDGET_KEYS = ("Budget", "ProjectValue", "Amount")
LOCATION_KEYS = ("ProjectLocation", "Location")
CLIENT_KEYS = ("ClientName", "Client")
TASK_NAME_KEYS = ("TaskName", "Name")
RESPONSIBLE_KEYS = ("Responsible", "ResponsibleRole")
MATERIAL_NAME_KEYS = ("MaterialName", "Name", "ItemName")
REQUIRED_KEYS = ("RequiredQuantity", "Required")
DISPATCHED_KEYS = ("DispatchedQuantity", "Dispatched")


def to_number(value: Any) -> float:
    """Coerce a cell value to a float, falling back to 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        match = _NUMBER_PREFIX.match(str(value))
        if not match:
            return 0.0
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


def to_date(value: Any) -> date | None:
    """Parse ``YYYY-MM-DD`` or an ISO timestamp into a calendar date."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _utc_date(value)
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        if len(text) == 10 and "-" in text:
            return date.fromisoformat(text)
        return _utc_date(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except ValueError:
        return None


def _utc_date(moment: datetime) -> date:
    # Sheets serialises dates as UTC timestamps
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.date()


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _pick(raw: Mapping[str, Any], keys: tuple[str, ...]) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return None


def _date_cell(value: date | None) -> str:
    return value.isoformat() if value else ""


def number_cell(value: float) -> int | float:
    return int(value) if float(value).is_integer() else value


# ---------------------------------------------------------------------------
# Rows -> models
# ---------------------------------------------------------------------------


def project_from_record(raw: Mapping[str, Any]) -> Project | None:
    project_id = _text(raw.get("ProjectID"))
    if not project_id:
        return None
    budget = to_number(_pick(raw, BUDGET_KEYS))
    if budget < 0:
        logger.warning("negative_budget_clamped", project_id=project_id, budget=budget)
        budget = 0.0
    return Project(
        project_id=project_id,
        name=_text(_pick(raw, PROJECT_NAME_KEYS)) or "",
        client_name=_text(_pick(raw, CLIENT_KEYS)),
        location=_text(_pick(raw, LOCATION_KEYS)),
        start_date=to_date(raw.get("StartDate")),
        deadline=to_date(raw.get("Deadline")),
        budget=budget,
        project_type=_text(raw.get("ProjectType")),
        contractor=_text(raw.get("Contractor")),
        engineers=_text(raw.get("Engineers")),
        contact1=_text(raw.get("Contact1")),
        contact2=_text(raw.get("Contact2")),
        creation_date=to_date(raw.get("CreationDate")),
    )


def task_from_record(raw: Mapping[str, Any]) -> Task | None:
    task_id = _text(raw.get("TaskID"))
    project_id = _text(raw.get("ProjectID"))
    if not task_id or not project_id:
        return None
    progress = round_half_up(min(100.0, max(0.0, to_number(raw.get("Progress")))))
    task = Task(
        project_id=project_id,
        task_id=task_id,
        name=_text(_pick(raw, TASK_NAME_KEYS)) or task_id,
        responsible=_text(_pick(raw, RESPONSIBLE_KEYS)),
        due_date=to_date(raw.get("DueDate")),
        progress=progress,
    )
    stored_status = _text(raw.get("Status"))
    if stored_status and stored_status != task.status.value:
        logger.warning(
            "task_status_inconsistent",
            task_id=task_id,
            stored_status=stored_status,
            derived_status=task.status.value,
            progress=progress,
        )
    return task


def material_from_record(raw: Mapping[str, Any]) -> Material | None:
    name = _text(_pick(raw, MATERIAL_NAME_KEYS))
    project_id = _text(raw.get("ProjectID"))
    if not name or not project_id:
        return None
    return Material(
        project_id=project_id,
        name=name,
        required=to_number(_pick(raw, REQUIRED_KEYS)),
        dispatched=to_number(_pick(raw, DISPATCHED_KEYS)),
        unit=_text(raw.get("Unit")),
    )


def expense_from_record(raw: Mapping[str, Any]) -> Expense | None:
    project_id = _text(raw.get("ProjectID"))
    if not project_id:
        return None
    return Expense(
        project_id=project_id,
        expense_date=to_date(raw.get("Date")),
        description=_text(raw.get("Description")) or "",
        amount=to_number(raw.get("Amount")),
        category=_text(raw.get("Category")),
        recorded_by=_text(raw.get("RecordedBy")),
    )


_READERS: dict[Resource, Callable[[Mapping[str, Any]], Any]] = {
    Resource.PROJECTS: project_from_record,
    Resource.TASKS: task_from_record,
    Resource.MATERIALS: material_from_record,
    Resource.EXPENSES: expense_from_record,
}


def records_from_payload(resource: Resource, data: Any) -> list[Any]:
    """Turn a ``data`` payload into models, skipping rows that cannot be read.

    A payload that is not a list is treated as empty.
    """
    if data is None:
        return []
    if not isinstance(data, list):
        logger.warning(
            "unexpected_payload_shape",
            resource=resource.value,
            payload_type=type(data).__name__,
        )
        return []

    reader = _READERS[resource]
    models = []
    for index, raw in enumerate(data):
        if not isinstance(raw, Mapping):
            logger.warning("record_skipped", resource=resource.value, index=index, reason="not a mapping")
            continue
        try:
            model = reader(raw)
        except ValidationError as exc:
            logger.warning("record_skipped", resource=resource.value, index=index, reason=str(exc))
            continue
        if model is None:
            logger.warning("record_skipped", resource=resource.value, index=index, reason="missing identity")
            continue
        models.append(model)
    return models


# ---------------------------------------------------------------------------
# Models -> rows
# ---------------------------------------------------------------------------


def project_to_record(project: Project) -> dict[str, Any]:
    return {
        "ProjectID": project.project_id,
        "Name": project.name,
        "ClientName": project.client_name or "",
        "ProjectLocation": project.location or "",
        "StartDate": _date_cell(project.start_date),
        "Deadline": _date_cell(project.deadline),
        "Budget": number_cell(project.budget),
        "ProjectType": project.project_type or "",
        "Contractor": project.contractor or "",
        "Engineers": project.engineers or "",
        "Contact1": project.contact1 or "",
        "Contact2": project.contact2 or "",
        "CreationDate": _date_cell(project.creation_date),
    }


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "ProjectID": task.project_id,
        "TaskID": task.task_id,
        "TaskName": task.name,
        "Responsible": task.responsible or "",
        "DueDate": _date_cell(task.due_date),
        "Progress": task.progress,
        "Status": task.status.value,
    }


def task_progress_record(
    project_id: str, task_id: str, progress: int, due_date: date | None
) -> dict[str, Any]:
    """Partial row for a progress edit; progress and status always travel together."""
    return {
        "ProjectID": project_id,
        "TaskID": task_id,
        "Progress": progress,
        "DueDate": _date_cell(due_date),
        "Status": TaskStatus.from_progress(progress).value,
    }


def material_to_record(material: Material) -> dict[str, Any]:
    return {
        "ProjectID": material.project_id,
        "MaterialName": material.name,
        "RequiredQuantity": number_cell(material.required),
        "DispatchedQuantity": number_cell(material.dispatched),
        "Unit": material.unit or "",
    }


def expense_to_record(expense: Expense) -> dict[str, Any]:
    return {
        "ProjectID": expense.project_id,
        "Date": _date_cell(expense.expense_date),
        "Description": expense.description,
        "Amount": number_cell(expense.amount),
        "Category": expense.category or "",
        "RecordedBy": expense.recorded_by or "",
    }
