"""Hi Tek web route modules.

Each module exports a ``router`` (APIRouter instance) that
``hitek.web.app`` includes.
"""

from hitek.web.routes import auth, dashboard, health, projects

__all__ = [
    "auth",
    "dashboard",
    "health",
    "projects",
]
