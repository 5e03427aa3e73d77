"""Hi Tek Pydantic models for the four spreadsheet record kinds.

These are the canonical shapes used everywhere past the data-access
boundary. Alternate column names coming back from the proxy are resolved
in ``hitek.integration.normalize`` before a model is ever built.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

TASK_ORDINAL_PATTERN = re.compile(r"-T(\d+)$")


class Resource(str, Enum):
    """Spreadsheet tabs exposed by the proxy."""

    PROJECTS = "Projects"
    TASKS = "Tasks"
    MATERIALS = "Materials"
    EXPENSES = "Expenses"


class Operation(str, Enum):
    """Logical operations carried inside the request envelope."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class TaskStatus(str, Enum):
    """Workflow task status, always derived from progress."""

    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

    @classmethod
    def from_progress(cls, progress: float) -> TaskStatus:
        if progress >= 100:
            return cls.COMPLETED
        if progress <= 0:
            return cls.PENDING
        return cls.IN_PROGRESS


def task_ordinal(task_id: str | None) -> int:
    """Workflow position embedded in a task id (``P1-T7`` -> 7), 0 if absent."""
    if not task_id:
        return 0
    match = TASK_ORDINAL_PATTERN.search(task_id)
    return int(match.group(1)) if match else 0


class Project(BaseModel):
    """A construction/fabrication job, the aggregate root."""

    project_id: str
    name: str = ""
    client_name: str | None = None
    location: str | None = None
    start_date: date | None = None
    deadline: date | None = None
    budget: float = 0.0
    project_type: str | None = None
    contractor: str | None = None
    engineers: str | None = None
    contact1: str | None = None
    contact2: str | None = None
    creation_date: date | None = None

    @field_validator("budget")
    @classmethod
    def validate_budget(cls, v: float) -> float:
        if v < 0:
            raise ValueError("budget must be non-negative")
        return v

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_id": "HT-2024-01",
                "name": "Warehouse Roofing",
                "client_name": "Shree Logistics",
                "location": "Pune",
                "start_date": "2024-04-01",
                "deadline": "2024-09-30",
                "budget": 1500000,
                "project_type": "Industrial",
                "contractor": "Hi Tek Fabricators",
                "engineers": "R. Patil",
            }
        }
    )


class Task(BaseModel):
    """One step of the 23-step workflow attached to a project."""

    project_id: str
    task_id: str
    name: str
    responsible: str | None = None
    due_date: date | None = None
    progress: int = Field(default=0, ge=0, le=100)

    @property
    def status(self) -> TaskStatus:
        return TaskStatus.from_progress(self.progress)

    @property
    def ordinal(self) -> int:
        return task_ordinal(self.task_id)

    @property
    def is_complete(self) -> bool:
        return self.progress >= 100


class Material(BaseModel):
    """A supply item tracked by required versus dispatched quantity."""

    project_id: str
    name: str
    required: float = 0.0
    dispatched: float = 0.0
    unit: str | None = None

    @property
    def balance(self) -> float:
        # Not clamped; over-dispatch goes negative
        return self.required - self.dispatched

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "project_id": "HT-2024-01",
                "name": "Cement",
                "required": 1000,
                "dispatched": 200,
                "unit": "bags",
            }
        }
    )


class Expense(BaseModel):
    """A dated spend entry against a project budget."""

    project_id: str
    expense_date: date | None = None
    description: str = ""
    amount: float = 0.0
    category: str | None = None
    recorded_by: str | None = None


class ErrorKind(str, Enum):
    """Failure taxonomy shared by the proxy client and the repositories."""

    VALIDATION = "validation"
    TRANSPORT = "transport"
    REMOTE = "remote"
    DATA_SHAPE = "data_shape"
    NOT_FOUND = "not_found"
    SEQUENCE = "sequence"
    STALE = "stale"
