"""Plan repository boundary.

Exactly one plan is active at a time. Repositories store the whole serialized
document; partial updates do not exist at this boundary.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

import psycopg
from psycopg.rows import dict_row
from psycopg.types.json import Json

from .errors import PersistenceError
from .models import MesocyclePlan
from .serialization import plan_from_document, plan_to_document

logger = logging.getLogger(__name__)


class PlanRepository(Protocol):
    async def fetch_active_plan(self) -> MesocyclePlan | None: ...

    async def save(self, plan: MesocyclePlan) -> None: ...

    async def delete(self, plan_id: uuid.UUID) -> None: ...


class InMemoryPlanRepository:
    """Keeps serialized documents in a dict, so reads exercise the codec like storage does."""

    def __init__(self) -> None:
        self._documents: dict[uuid.UUID, dict[str, Any]] = {}
        self._active_id: uuid.UUID | None = None
        self.save_count = 0

    async def fetch_active_plan(self) -> MesocyclePlan | None:
        if self._active_id is None:
            return None
        return plan_from_document(self._documents[self._active_id])

    async def save(self, plan: MesocyclePlan) -> None:
        self._documents[plan.id] = plan_to_document(plan)
        self._active_id = plan.id
        self.save_count += 1

    async def delete(self, plan_id: uuid.UUID) -> None:
        self._documents.pop(plan_id, None)
        if self._active_id == plan_id:
            self._active_id = None


_CREATE_TABLE = """
    CREATE TABLE IF NOT EXISTS mesocycle_plans (
        id UUID PRIMARY KEY,
        created_at TIMESTAMPTZ NOT NULL,
        is_active BOOLEAN NOT NULL DEFAULT FALSE,
        document JSONB NOT NULL
    )
"""

_CREATE_ACTIVE_INDEX = """
    CREATE UNIQUE INDEX IF NOT EXISTS mesocycle_plans_single_active
    ON mesocycle_plans (is_active) WHERE is_active
"""


async def ensure_schema(conn: psycopg.AsyncConnection[Any]) -> None:
    """Create the plan table and its single-active-plan index if missing."""
    async with conn.cursor() as cur:
        await cur.execute(_CREATE_TABLE)
        await cur.execute(_CREATE_ACTIVE_INDEX)


class PostgresPlanRepository:
    """Plan storage in ``mesocycle_plans``; the saved plan becomes the active one."""

    def __init__(self, conn: psycopg.AsyncConnection[Any]) -> None:
        self._conn = conn

    async def fetch_active_plan(self) -> MesocyclePlan | None:
        try:
            async with self._conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(
                    """
                    SELECT document
                    FROM mesocycle_plans
                    WHERE is_active
                    LIMIT 1
                    """
                )
                row = await cur.fetchone()
        except psycopg.Error as exc:
            raise PersistenceError(f"loading active plan failed: {exc}") from exc
        if row is None:
            return None
        return plan_from_document(row["document"])

    async def save(self, plan: MesocyclePlan) -> None:
        try:
            async with self._conn.transaction():
                async with self._conn.cursor() as cur:
                    await cur.execute(
                        "UPDATE mesocycle_plans SET is_active = FALSE WHERE is_active AND id <> %s",
                        (plan.id,),
                    )
                    await cur.execute(
                        """
                        INSERT INTO mesocycle_plans (id, created_at, is_active, document)
                        VALUES (%s, %s, TRUE, %s)
                        ON CONFLICT (id) DO UPDATE
                        SET is_active = TRUE, document = EXCLUDED.document
                        """,
                        (plan.id, plan.created_at, Json(plan_to_document(plan))),
                    )
        except psycopg.Error as exc:
            raise PersistenceError(f"saving plan {plan.id} failed: {exc}") from exc
        logger.info(
            "Saved plan %s (generation %d)",
            plan.id,
            plan.generation,
            extra={"mesoplan_plan_id": str(plan.id)},
        )

    async def delete(self, plan_id: uuid.UUID) -> None:
        try:
            async with self._conn.cursor() as cur:
                await cur.execute("DELETE FROM mesocycle_plans WHERE id = %s", (plan_id,))
        except psycopg.Error as exc:
            raise PersistenceError(f"deleting plan {plan_id} failed: {exc}") from exc
        logger.info("Deleted plan %s", plan_id, extra={"mesoplan_plan_id": str(plan_id)})
