"""Material rows in the ``Materials`` sheet.

Materials are keyed by name within a project. The sheet cannot increment a
cell, so a dispatch entry is applied by reading the current total from the
caller's snapshot and writing back the new absolute value.
"""

from __future__ import annotations

import math
from typing import Sequence

import structlog

from hitek.integration.normalize import material_to_record, number_cell, records_from_payload
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Material, Operation, Resource
from hitek.repositories.results import Outcome

logger = structlog.get_logger(__name__)


class MaterialRepository:
    def __init__(self, client: SheetClient):
        self.client = client

    async def list_by_project(self, project_id: str) -> Outcome[list[Material]]:
        result = await self.client.send(
            Resource.MATERIALS, Operation.GET, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success(
            [
                m
                for m in records_from_payload(Resource.MATERIALS, result.data)
                if m.project_id == project_id
            ]
        )

    async def create_new(
        self,
        project_id: str,
        name: str,
        required: float,
        dispatched: float = 0.0,
        unit: str | None = None,
        existing: Sequence[Material] = (),
    ) -> Outcome[Material]:
        """Start tracking a material; ``dispatched`` is an absolute starting value.

        Names are unique within a project, so a name already present in
        ``existing`` is rejected.
        """
        name = (name or "").strip()
        if not name:
            return Outcome.invalid("Material name cannot be empty.")
        if not (math.isfinite(required) and math.isfinite(dispatched)):
            return Outcome.invalid("Quantities must be finite numbers.")
        if required < 0 or dispatched < 0:
            return Outcome.invalid("Quantities cannot be negative.")
        if any(m.name == name and m.project_id == project_id for m in existing):
            return Outcome.invalid(f"Material '{name}' already exists.")

        material = Material(
            project_id=project_id,
            name=name,
            required=required,
            dispatched=dispatched,
            unit=unit or None,
        )
        result = await self.client.send(
            Resource.MATERIALS, Operation.POST, material_to_record(material)
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        logger.info("material_created", project_id=project_id, material=name)
        return Outcome.success(material)

    async def record_dispatch(
        self,
        project_id: str,
        name: str,
        additional: float,
        snapshot: Sequence[Material],
    ) -> Outcome[Material]:
        """Add ``additional`` to the dispatched total of an existing material.

        Never creates a material that is missing from ``snapshot``.
        """
        if not math.isfinite(additional) or additional <= 0:
            return Outcome.invalid("Dispatch quantity must be greater than zero.")

        existing = next(
            (m for m in snapshot if m.name == name and m.project_id == project_id),
            None,
        )
        if existing is None:
            return Outcome.failure(
                f"Existing material '{name}' not found.", ErrorKind.NOT_FOUND
            )

        new_total = existing.dispatched + additional
        result = await self.client.send(
            Resource.MATERIALS,
            Operation.PUT,
            {
                "ProjectID": project_id,
                "MaterialName": name,
                "DispatchedQuantity": number_cell(new_total),
            },
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)

        logger.info(
            "material_dispatched",
            project_id=project_id,
            material=name,
            added=additional,
            dispatched=new_total,
        )
        return Outcome.success(existing.model_copy(update={"dispatched": new_total}))

    async def delete_by_project(self, project_id: str) -> Outcome[None]:
        result = await self.client.send(
            Resource.MATERIALS, Operation.DELETE, {"ProjectID": project_id}
        )
        if not result.ok:
            return Outcome.from_proxy_error(result)
        return Outcome.success()
