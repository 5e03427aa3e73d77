"""Shared dependencies for Hi Tek web routes.

Dependencies are injected using FastAPI's Depends() system.

Usage:
    from fastapi import Depends
    from hitek.web.dependencies import get_controller

    @router.get("/api/projects")
    async def list_projects(controller = Depends(get_controller)):
        ...
"""

from __future__ import annotations

from fastapi import Depends, HTTPException

from hitek.config import get_config
from hitek.dashboard import DashboardController
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind
from hitek.repositories import Outcome

# Global singleton for the proxy client
_client: SheetClient | None = None

STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.SEQUENCE: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STALE: 409,
    ErrorKind.REMOTE: 502,
    ErrorKind.TRANSPORT: 502,
    ErrorKind.DATA_SHAPE: 502,
}


def get_sheet_client() -> SheetClient:
    """Get the shared SheetClient; the HTTP connection pool is reused across requests."""
    global _client
    if _client is None:
        _client = SheetClient.from_config(get_config())
    return _client


async def close_sheet_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None


def get_controller(client: SheetClient = Depends(get_sheet_client)) -> DashboardController:
    """A fresh controller per request; dashboard state is not shared between users."""
    return DashboardController(client, get_config())


def check_outcome(outcome: Outcome):
    """Return the outcome's value, or raise the HTTP error matching its kind."""
    if outcome.ok:
        return outcome.value
    raise HTTPException(
        status_code=STATUS_BY_KIND.get(outcome.kind, 500),
        detail={"error": outcome.error, "kind": outcome.kind.value if outcome.kind else None},
    )
