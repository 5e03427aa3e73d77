"""Dashboard controller and its state."""

from hitek.dashboard.controller import DashboardController, ProjectCreation
from hitek.dashboard.state import DashboardState, ProjectSnapshot

__all__ = [
    "DashboardController",
    "DashboardState",
    "ProjectCreation",
    "ProjectSnapshot",
]
