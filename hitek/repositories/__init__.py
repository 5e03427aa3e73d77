"""Sheet-backed repositories for the four record kinds."""

from hitek.repositories.expenses import ExpenseRepository
from hitek.repositories.materials import MaterialRepository
from hitek.repositories.projects import ProjectRepository
from hitek.repositories.results import BatchReport, Outcome
from hitek.repositories.tasks import TaskRepository

__all__ = [
    "BatchReport",
    "ExpenseRepository",
    "MaterialRepository",
    "Outcome",
    "ProjectRepository",
    "TaskRepository",
]
