"""Hi Tek reporting package.

Provides the KPI formulas and the per-project dashboard metrics built on them.
"""

from hitek.reporting.dashboard_metrics import DashboardMetrics, compute_dashboard_metrics
from hitek.reporting.kpi import BudgetBreakdown, DaysLeft

__all__ = [
    "BudgetBreakdown",
    "DashboardMetrics",
    "DaysLeft",
    "compute_dashboard_metrics",
]
