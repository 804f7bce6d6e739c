"""Exercise catalog boundary.

The engine only reads the catalog. Lookups are coroutines so that a
database-backed catalog can suspend while the generator waits on it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

import psycopg
from psycopg.rows import dict_row

from .errors import PersistenceError
from .exercises import EXERCISES, Exercise

logger = logging.getLogger(__name__)


class ExerciseCatalog(Protocol):
    async def fetch(self, exercise_id: str) -> Exercise | None: ...

    async def fetch_all(self) -> list[Exercise]: ...

    async def fetch_all_targeting(self, muscle: str) -> list[Exercise]: ...


class InMemoryExerciseCatalog:
    """Catalog over a fixed snapshot of exercises (defaults to the built-in library)."""

    def __init__(self, exercises: Iterable[Exercise] | None = None) -> None:
        source = EXERCISES.values() if exercises is None else exercises
        self._exercises: dict[str, Exercise] = {}
        for exercise in source:
            if exercise.exercise_id in self._exercises:
                raise ValueError(f"duplicate exercise_id {exercise.exercise_id!r}")
            self._exercises[exercise.exercise_id] = exercise

    def __len__(self) -> int:
        return len(self._exercises)

    async def fetch(self, exercise_id: str) -> Exercise | None:
        return self._exercises.get(exercise_id)

    async def fetch_all(self) -> list[Exercise]:
        return sorted(self._exercises.values(), key=lambda ex: ex.exercise_id)

    async def fetch_all_targeting(self, muscle: str) -> list[Exercise]:
        return [ex for ex in await self.fetch_all() if ex.targets(muscle)]


_SELECT_EXERCISES = """
    SELECT exercise_id, name, primary_muscles, secondary_muscles,
           movement_pattern, equipment, is_unilateral
    FROM exercises
"""


def _exercise_from_row(row: dict[str, Any]) -> Exercise:
    return Exercise(
        exercise_id=row["exercise_id"],
        name=row["name"],
        primary_muscles=frozenset(row["primary_muscles"] or ()),
        secondary_muscles=frozenset(row["secondary_muscles"] or ()),
        movement_pattern=row["movement_pattern"],
        equipment=row["equipment"],
        is_unilateral=bool(row["is_unilateral"]),
    )


class PostgresExerciseCatalog:
    """Catalog backed by the ``exercises`` table."""

    def __init__(self, conn: psycopg.AsyncConnection[Any]) -> None:
        self._conn = conn

    async def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[Exercise]:
        try:
            async with self._conn.cursor(row_factory=dict_row) as cur:
                await cur.execute(sql, params)
                rows = await cur.fetchall()
        except psycopg.Error as exc:
            raise PersistenceError(f"exercise catalog query failed: {exc}") from exc
        try:
            return [_exercise_from_row(row) for row in rows]
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PersistenceError(f"exercise catalog row is invalid: {exc}") from exc

    async def fetch(self, exercise_id: str) -> Exercise | None:
        rows = await self._query(_SELECT_EXERCISES + " WHERE exercise_id = %s", (exercise_id,))
        return rows[0] if rows else None

    async def fetch_all(self) -> list[Exercise]:
        return await self._query(_SELECT_EXERCISES + " ORDER BY exercise_id")

    async def fetch_all_targeting(self, muscle: str) -> list[Exercise]:
        exercises = await self._query(
            _SELECT_EXERCISES + " WHERE %s = ANY(primary_muscles) ORDER BY exercise_id",
            (muscle,),
        )
        logger.debug("Catalog lookup for %s returned %d exercises", muscle, len(exercises))
        return exercises
