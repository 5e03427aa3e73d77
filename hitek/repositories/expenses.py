"""Expense rows in the ``Expenses`` sheet. Entries are append-only."""

from __future__ import annotations

import math

from hitek.integration.normalize import expense_to_record, records_from_payload
from hitek.integration.sheet_client import SheetClient
from hitek.models import Expense, Operation, Resource
from hitek.repositories.results import Outcome

MISSING_FIELDS_MESSAGE = "Please fill in all required expense fields."


class ExpenseRepository:
    def __init__(self, client: SheetClient):
        self.client = client

    async def list_by_project(self, project_id: str) -> Outcome[list[Expense]]:
        result = await self.client.send(
            Resource.EXPENSES, Operation.GET, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success(
            [
                e
                for e in records_from_payload(Resource.EXPENSES, result.data)
                if e.project_id == project_id
            ]
        )

    async def create(self, expense: Expense) -> Outcome[Expense]:
        if (
            expense.expense_date is None
            or not expense.description.strip()
            or not math.isfinite(expense.amount)
            or expense.amount <= 0
        ):
            return Outcome.invalid(MISSING_FIELDS_MESSAGE)

        result = await self.client.send(
            Resource.EXPENSES, Operation.POST, expense_to_record(expense)
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success(expense)

    async def delete_by_project(self, project_id: str) -> Outcome[None]:
        result = await self.client.send(
            Resource.EXPENSES, Operation.DELETE, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success()
