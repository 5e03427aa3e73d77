"""Tests for the sheet-backed repositories against the fake proxy."""

from __future__ import annotations

from datetime import date

import pytest

from hitek.models import ErrorKind, Expense, Project
from hitek.repositories import (
    ExpenseRepository,
    MaterialRepository,
    ProjectRepository,
    TaskRepository,
)
from hitek.workflow import build_initial_tasks


class TestProjectRepository:
    @pytest.mark.asyncio
    async def test_list_and_get(self, sheet_client, seeded_store):
        repo = ProjectRepository(sheet_client)

        listed = await repo.list()
        found = await repo.get("P1")

        assert listed.ok
        assert [p.project_id for p in listed.value] == ["P1"]
        assert found.value.name == "Warehouse Roofing"
        assert found.value.budget == 100000

    @pytest.mark.asyncio
    async def test_get_missing(self, sheet_client, seeded_store):
        outcome = await ProjectRepository(sheet_client).get("NOPE")

        assert outcome.kind is ErrorKind.NOT_FOUND
        assert outcome.error == "Project NOPE not found."

    @pytest.mark.asyncio
    async def test_create_validates_before_sending(self, sheet_client, sheet_store):
        repo = ProjectRepository(sheet_client)

        no_id = await repo.create(Project(project_id=" ", name="Roof"))
        no_name = await repo.create(Project(project_id="P1", name=""))
        no_budget = await repo.create(Project(project_id="P1", name="Roof", budget=float("inf")))

        assert no_id.error == "Project ID cannot be empty."
        assert no_name.error == "Project name cannot be empty."
        assert no_budget.error == "Budget must be a finite number."
        assert no_id.kind is ErrorKind.VALIDATION
        assert sheet_store.requests == []

    @pytest.mark.asyncio
    async def test_update_sends_full_row(self, sheet_client, seeded_store):
        repo = ProjectRepository(sheet_client)
        project = (await repo.get("P1")).value

        outcome = await repo.update(project.model_copy(update={"location": "Nashik"}))

        assert outcome.ok
        put = seeded_store.calls("Projects", "PUT")[0]
        assert put["ProjectLocation"] == "Nashik"
        assert put["Name"] == "Warehouse Roofing"
        assert put["Budget"] == 100000

    @pytest.mark.asyncio
    async def test_remote_error_is_tagged(self, sheet_client, sheet_store):
        sheet_store.fail("Projects", "GET", "Quota exceeded")

        outcome = await ProjectRepository(sheet_client).list()

        assert not outcome.ok
        assert outcome.kind is ErrorKind.REMOTE
        assert outcome.error == "Quota exceeded"


class TestTaskRepository:
    @pytest.mark.asyncio
    async def test_list_is_filtered_and_ordered(self, sheet_client, seeded_store):
        seeded_store.seed(
            "Tasks",
            {"ProjectID": "P2", "TaskID": "P2-T1", "TaskName": "Other", "Progress": 0},
            {"ProjectID": "P1", "TaskID": "P1-T10", "TaskName": "Tenth", "Progress": 0},
        )

        outcome = await TaskRepository(sheet_client).list_by_project("P1")

        assert [t.task_id for t in outcome.value] == ["P1-T1", "P1-T2", "P1-T3", "P1-T10"]

    @pytest.mark.asyncio
    async def test_create_batch(self, sheet_client, sheet_store):
        report = await TaskRepository(sheet_client).create_batch(build_initial_tasks("P5"))

        assert report.total == 23
        assert report.created == 23
        assert report.complete
        assert len(sheet_store.rows("Tasks", "P5")) == 23
        assert all(row["Status"] == "Pending" for row in sheet_store.rows("Tasks", "P5"))

    @pytest.mark.asyncio
    async def test_create_batch_reports_failures(self, sheet_client, sheet_store):
        sheet_store.fail("Tasks", "POST", "Sheet locked")

        report = await TaskRepository(sheet_client).create_batch(build_initial_tasks("P5"))

        assert report.created == 0
        assert report.failed == 23
        assert report.errors[0] == "P5-T1: Sheet locked"

    @pytest.mark.asyncio
    async def test_update_writes_progress_and_status(self, sheet_client, seeded_store):
        outcome = await TaskRepository(sheet_client).update("P1", "P1-T2", 100, date(2024, 6, 15))

        assert outcome.ok
        assert outcome.value.status.value == "Completed"
        row = next(r for r in seeded_store.rows("Tasks", "P1") if r["TaskID"] == "P1-T2")
        assert row["Progress"] == 100
        assert row["Status"] == "Completed"
        assert row["DueDate"] == "2024-06-15"

    @pytest.mark.asyncio
    async def test_update_blocked_by_unfinished_predecessor(self, sheet_client, seeded_store):
        outcome = await TaskRepository(sheet_client).update("P1", "P1-T3", 25)

        assert outcome.kind is ErrorKind.SEQUENCE
        assert outcome.error == "Complete '2. Identifying Scope' before updating '3. Measurement'."
        assert seeded_store.calls("Tasks", "PUT") == []

    @pytest.mark.asyncio
    async def test_lowering_progress_is_never_blocked(self, sheet_client, seeded_store):
        seeded_store.sheets["Tasks"][2]["Progress"] = 50

        outcome = await TaskRepository(sheet_client).update("P1", "P1-T3", 0)

        assert outcome.ok

    @pytest.mark.asyncio
    async def test_sequence_can_be_disabled(self, sheet_client, seeded_store):
        outcome = await TaskRepository(sheet_client, enforce_sequence=False).update("P1", "P1-T3", 25)

        assert outcome.ok

    @pytest.mark.asyncio
    async def test_update_keeps_due_date_when_omitted(self, sheet_client, seeded_store):
        seeded_store.sheets["Tasks"][1]["DueDate"] = "2024-07-01"

        await TaskRepository(sheet_client).update("P1", "P1-T2", 75)

        assert seeded_store.calls("Tasks", "PUT")[0]["DueDate"] == "2024-07-01"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("progress", [101, -1, 12.5])
    async def test_update_rejects_bad_progress(self, sheet_client, seeded_store, progress):
        outcome = await TaskRepository(sheet_client).update("P1", "P1-T2", progress)

        assert outcome.kind is ErrorKind.VALIDATION

    @pytest.mark.asyncio
    async def test_update_unknown_task(self, sheet_client, seeded_store):
        outcome = await TaskRepository(sheet_client).update("P1", "P1-T99", 10)

        assert outcome.kind is ErrorKind.NOT_FOUND


class TestMaterialRepository:
    @pytest.mark.asyncio
    async def test_dispatch_is_additive(self, sheet_client, seeded_store):
        repo = MaterialRepository(sheet_client)

        snapshot = (await repo.list_by_project("P1")).value
        first = await repo.record_dispatch("P1", "Cement", 30, snapshot)
        snapshot = (await repo.list_by_project("P1")).value
        second = await repo.record_dispatch("P1", "Cement", 20, snapshot)

        assert first.value.dispatched == 230
        assert second.value.dispatched == 250
        assert seeded_store.rows("Materials", "P1")[0]["DispatchedQuantity"] == 250

    @pytest.mark.asyncio
    async def test_dispatch_never_creates(self, sheet_client, seeded_store):
        outcome = await MaterialRepository(sheet_client).record_dispatch("P1", "Sand", 5, [])

        assert outcome.kind is ErrorKind.NOT_FOUND
        assert outcome.error == "Existing material 'Sand' not found."
        assert seeded_store.calls("Materials", "PUT") == []
        assert seeded_store.calls("Materials", "POST") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("quantity", [0, -5, float("nan"), float("inf"), float("-inf")])
    async def test_dispatch_requires_positive_quantity(self, sheet_client, seeded_store, quantity):
        snapshot = (await MaterialRepository(sheet_client).list_by_project("P1")).value

        outcome = await MaterialRepository(sheet_client).record_dispatch("P1", "Cement", quantity, snapshot)

        assert outcome.kind is ErrorKind.VALIDATION
        assert seeded_store.calls("Materials", "PUT") == []

    @pytest.mark.asyncio
    async def test_create_new(self, sheet_client, sheet_store):
        outcome = await MaterialRepository(sheet_client).create_new("P1", " Steel ", 40, unit="tonnes")

        assert outcome.ok
        assert sheet_store.rows("Materials", "P1") == [
            {
                "ProjectID": "P1",
                "MaterialName": "Steel",
                "RequiredQuantity": 40,
                "DispatchedQuantity": 0,
                "Unit": "tonnes",
            }
        ]

    @pytest.mark.asyncio
    async def test_create_new_validation(self, sheet_client, sheet_store):
        repo = MaterialRepository(sheet_client)

        assert (await repo.create_new("P1", "", 10)).error == "Material name cannot be empty."
        assert (await repo.create_new("P1", "Steel", -1)).error == "Quantities cannot be negative."
        assert sheet_store.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "required, dispatched",
        [(float("nan"), 0), (float("inf"), 0), (10, float("nan")), (10, float("inf"))],
    )
    async def test_create_new_rejects_non_finite_quantities(
        self, sheet_client, sheet_store, required, dispatched
    ):
        outcome = await MaterialRepository(sheet_client).create_new("P1", "Steel", required, dispatched)

        assert outcome.kind is ErrorKind.VALIDATION
        assert outcome.error == "Quantities must be finite numbers."
        assert sheet_store.requests == []

    @pytest.mark.asyncio
    async def test_create_new_rejects_existing_name(self, sheet_client, seeded_store):
        repo = MaterialRepository(sheet_client)
        existing = (await repo.list_by_project("P1")).value

        outcome = await repo.create_new("P1", " Cement ", 50, unit="bags", existing=existing)

        assert outcome.kind is ErrorKind.VALIDATION
        assert outcome.error == "Material 'Cement' already exists."
        assert seeded_store.calls("Materials", "POST") == []
        assert len(seeded_store.rows("Materials", "P1")) == 1


class TestExpenseRepository:
    @pytest.mark.asyncio
    async def test_create_and_list(self, sheet_client, sheet_store):
        repo = ExpenseRepository(sheet_client)
        expense = Expense(
            project_id="P1",
            expense_date=date(2024, 5, 20),
            description="Crane hire",
            amount=7500,
            category="Equipment",
            recorded_by="User (App)",
        )

        created = await repo.create(expense)
        listed = await repo.list_by_project("P1")

        assert created.ok
        assert listed.value == [expense]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [
            {"expense_date": None},
            {"description": "  "},
            {"amount": 0},
            {"amount": float("nan")},
            {"amount": float("inf")},
        ],
    )
    async def test_create_requires_fields(self, sheet_client, sheet_store, changes):
        expense = Expense(
            project_id="P1",
            expense_date=date(2024, 5, 20),
            description="Crane hire",
            amount=7500,
        ).model_copy(update=changes)

        outcome = await ExpenseRepository(sheet_client).create(expense)

        assert outcome.error == "Please fill in all required expense fields."
        assert sheet_store.requests == []
