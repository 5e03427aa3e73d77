"""Pytest configuration and fixtures for Hi Tek tests.

The spreadsheet proxy is emulated by ``FakeSheetStore``: an in-memory set of
sheets served through ``httpx.MockTransport``, speaking the same
``{sheetName, method, ...}`` envelope as the real endpoint.
"""

from __future__ import annotations

import json
from datetime import date
from typing import Any

import httpx
import pytest

from hitek.config import AppConfig, get_config, reset_config
from hitek.dashboard import DashboardController
from hitek.integration.sheet_client import SheetClient
from hitek.web.auth import clear_sessions

PROXY_URL = "https://sheets.test/api"
TODAY = date(2024, 6, 1)

ROW_KEYS = {
    "Projects": ("ProjectID",),
    "Tasks": ("ProjectID", "TaskID"),
    "Materials": ("ProjectID", "MaterialName"),
    "Expenses": ("ProjectID", "Date", "Description"),
}


class FakeSheetStore:
    """In-memory stand-in for the spreadsheet proxy."""

    def __init__(self):
        self.sheets: dict[str, list[dict[str, Any]]] = {name: [] for name in ROW_KEYS}
        self.users = {"admin": "secret"}
        self.requests: list[dict[str, Any]] = []
        # (sheetName, method) -> [error message, remaining count or None]
        self.failures: dict[tuple[str, str], list] = {}

    def fail(self, sheet: str | None, method: str, message: str, times: int | None = None) -> None:
        """Answer (sheet, method) with a proxy error, forever or for the next ``times`` calls."""
        self.failures[(sheet, method)] = [message, times]

    def seed(self, sheet: str, *rows: dict[str, Any]) -> None:
        self.sheets[sheet].extend(dict(row) for row in rows)

    def rows(self, sheet: str, project_id: str | None = None) -> list[dict[str, Any]]:
        return [
            row
            for row in self.sheets[sheet]
            if project_id is None or row.get("ProjectID") == project_id
        ]

    def calls(self, sheet: str | None = None, method: str | None = None) -> list[dict[str, Any]]:
        return [
            envelope
            for envelope in self.requests
            if (sheet is None or envelope.get("sheetName") == sheet)
            and (method is None or envelope.get("method") == method)
        ]

    def handler(self, request: httpx.Request) -> httpx.Response:
        envelope = json.loads(request.content)
        self.requests.append(envelope)

        sheet = envelope.get("sheetName")
        method = envelope.get("method")
        failure = self.failures.get((sheet, method))
        if failure:
            message, remaining = failure
            if remaining is not None:
                failure[1] -= 1
                if failure[1] <= 0:
                    del self.failures[(sheet, method)]
            return httpx.Response(200, json={"status": "error", "message": message})

        if method == "LOGIN":
            if self.users.get(envelope.get("username")) == envelope.get("password"):
                return httpx.Response(200, json={"status": "success", "message": "Login successful"})
            return httpx.Response(
                200, json={"status": "error", "message": "Invalid username or password"}
            )

        if sheet not in self.sheets:
            return httpx.Response(200, json={"status": "error", "message": f"Unknown sheet {sheet}"})

        fields = {k: v for k, v in envelope.items() if k not in ("sheetName", "method")}
        rows = self.sheets[sheet]

        if method == "GET":
            return self._ok(self.rows(sheet, fields.get("ProjectID")))

        if method == "POST":
            rows.append(fields)
            return self._ok(None, "Row added")

        if method == "PUT":
            keys = ROW_KEYS[sheet]
            for row in rows:
                if all(row.get(key) == fields.get(key) for key in keys):
                    row.update(fields)
                    return self._ok(None, "Row updated")
            return httpx.Response(200, json={"status": "error", "message": "Row not found"})

        if method == "DELETE":
            project_id = fields.get("ProjectID")
            self.sheets[sheet] = [row for row in rows if row.get("ProjectID") != project_id]
            return self._ok(None, "Rows deleted")

        return httpx.Response(200, json={"status": "error", "message": f"Unsupported method {method}"})

    @staticmethod
    def _ok(data: Any, message: str | None = None) -> httpx.Response:
        body: dict[str, Any] = {"status": "success", "data": data}
        if message:
            body["message"] = message
        return httpx.Response(200, json=body)


@pytest.fixture(autouse=True)
def proxy_env(monkeypatch):
    """Point the configuration at the fake proxy and start from a clean slate."""
    monkeypatch.setenv("SHEET_API_URL", PROXY_URL)
    monkeypatch.delenv("AUTH_DISABLED", raising=False)
    monkeypatch.delenv("ENFORCE_TASK_SEQUENCE", raising=False)
    reset_config()
    clear_sessions()
    yield
    reset_config()
    clear_sessions()


@pytest.fixture
def config() -> AppConfig:
    return get_config()


@pytest.fixture
def sheet_store() -> FakeSheetStore:
    return FakeSheetStore()


@pytest.fixture
def sheet_client(sheet_store: FakeSheetStore) -> SheetClient:
    return SheetClient(PROXY_URL, transport=httpx.MockTransport(sheet_store.handler))


@pytest.fixture
def controller(sheet_client: SheetClient, config: AppConfig) -> DashboardController:
    return DashboardController(sheet_client, config, today=lambda: TODAY)


@pytest.fixture
def project_row() -> dict[str, Any]:
    return {
        "ProjectID": "P1",
        "Name": "Warehouse Roofing",
        "ClientName": "Shree Logistics",
        "ProjectLocation": "Pune",
        "StartDate": "2024-05-01",
        "Deadline": "2024-06-30",
        "Budget": 100000,
        "CreationDate": "2024-04-28",
    }


@pytest.fixture
def seeded_store(sheet_store: FakeSheetStore, project_row) -> FakeSheetStore:
    """One project with three tasks, one material and one expense."""
    sheet_store.seed("Projects", project_row)
    sheet_store.seed(
        "Tasks",
        {"ProjectID": "P1", "TaskID": "P1-T1", "TaskName": "1. Understanding the System",
         "Responsible": "Project Manager", "Progress": 100, "Status": "Completed"},
        {"ProjectID": "P1", "TaskID": "P1-T2", "TaskName": "2. Identifying Scope",
         "Responsible": "Site Engineer/Project coordinator", "Progress": 50, "Status": "In Progress"},
        {"ProjectID": "P1", "TaskID": "P1-T3", "TaskName": "3. Measurement",
         "Responsible": "Surveyor/Field Engineer", "Progress": 0, "Status": "Pending"},
    )
    sheet_store.seed(
        "Materials",
        {"ProjectID": "P1", "MaterialName": "Cement", "RequiredQuantity": 1000,
         "DispatchedQuantity": 200, "Unit": "bags"},
    )
    sheet_store.seed(
        "Expenses",
        {"ProjectID": "P1", "Date": "2024-05-10", "Description": "Steel advance",
         "Amount": 15000, "Category": "Materials", "RecordedBy": "User (App)"},
    )
    return sheet_store
