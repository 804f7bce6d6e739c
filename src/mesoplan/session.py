"""Single-writer plan session.

``PlanSession`` owns the one live plan. Each operation is a read-modify-write
performed under an ``asyncio.Lock`` and checked against the generation the
caller last read. Successful edits are persisted as a whole document and the
calendar is re-projected. Failures come back as ``MutationOutcome`` values.
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from .calendar_view import DayCell, project
from .catalog import ExerciseCatalog
from .errors import (
    ExerciseNotFoundError,
    MesoplanError,
    MutationError,
    PersistenceError,
    PlanDocumentError,
    StaleGenerationError,
)
from .generator import GenerationWarning
from .models import MesocyclePlan, PlanInput
from .mutations import (
    PrescriptionDefaults,
    add_exercise,
    ensure_day,
    move_workout,
    regenerate,
    remove_exercise,
    reorder_exercises,
)
from .repository import PlanRepository
from .validator import ValidationResult, Violation, validate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MutationOutcome:
    ok: bool
    plan: MesocyclePlan | None
    calendar: tuple[DayCell, ...] = ()
    error: MesoplanError | None = None
    warnings: tuple[GenerationWarning, ...] = ()
    violations: tuple[Violation, ...] = ()

    @property
    def error_code(self) -> str | None:
        return self.error.code if self.error is not None else None


class PlanSession:
    def __init__(self, repository: PlanRepository, catalog: ExerciseCatalog) -> None:
        self._repository = repository
        self._catalog = catalog
        self._lock = asyncio.Lock()
        self._plan: MesocyclePlan | None = None
        self._generation = 0

    @property
    def plan(self) -> MesocyclePlan | None:
        return self._plan

    @property
    def generation(self) -> int:
        """Generation a caller must quote to edit the current plan."""
        return self._generation

    def calendar(self) -> tuple[DayCell, ...]:
        return tuple(project(self._plan)) if self._plan is not None else ()

    def _outcome(self, **kwargs) -> MutationOutcome:
        return MutationOutcome(ok=True, plan=self._plan, calendar=self.calendar(), **kwargs)

    def _failure(self, error: MesoplanError, **kwargs) -> MutationOutcome:
        return MutationOutcome(
            ok=False, plan=self._plan, calendar=self.calendar(), error=error, **kwargs
        )

    async def _commit(self, plan: MesocyclePlan) -> None:
        """Persist ``plan`` and make it the live plan; the live plan is untouched on failure."""
        await self._repository.save(plan)
        self._plan = plan
        self._generation = max(self._generation, plan.generation)

    # --- Loading ---

    async def load(self) -> MutationOutcome:
        """Replace the live plan with the repository's active plan."""
        async with self._lock:
            try:
                plan = await self._repository.fetch_active_plan()
            except MesoplanError as exc:
                logger.error("Loading active plan failed: %s", exc.message)
                return self._failure(exc)
            self._plan = plan
            self._generation = plan.generation if plan is not None else 0
            return self._outcome()

    async def adopt(self, plan: MesocyclePlan) -> MutationOutcome:
        """Accept an externally built plan after it passes validation."""
        async with self._lock:
            result = validate(plan)
            if not result.valid:
                return self._failure(
                    PlanDocumentError(
                        f"plan {plan.id} violates {len(result.violations)} invariant(s)"
                    ),
                    violations=tuple(result.violations),
                )
            if self._plan is not None:
                plan = plan.model_copy(update={"generation": self._generation + 1})
            try:
                await self._commit(plan)
            except PersistenceError as exc:
                self._log_persistence_failure(plan, exc)
                return self._failure(exc)
            return self._outcome()

    # --- Edits ---

    async def _apply(
        self,
        operation: str,
        expected_generation: int,
        edit: Callable[[MesocyclePlan], MesocyclePlan],
    ) -> MutationOutcome:
        async with self._lock:
            if self._plan is None:
                return self._failure(
                    MutationError(f"{operation}: no active plan", code="no_active_plan")
                )
            if expected_generation != self._generation:
                logger.warning(
                    "Rejected stale %s (expected generation %d, current %d)",
                    operation,
                    expected_generation,
                    self._generation,
                    extra={"mesoplan_plan_id": str(self._plan.id)},
                )
                return self._failure(
                    StaleGenerationError(expected=expected_generation, current=self._generation)
                )
            try:
                updated = edit(self._plan)
            except MutationError as exc:
                return self._failure(exc)
            try:
                await self._commit(updated)
            except PersistenceError as exc:
                self._log_persistence_failure(updated, exc)
                return self._failure(exc)
            return self._outcome()

    async def ensure_day(self, day: dt.date, *, generation: int) -> MutationOutcome:
        return await self._apply("ensure_day", generation, lambda plan: ensure_day(plan, day)[0])

    async def add_exercise(
        self,
        day: dt.date,
        exercise_id: str,
        *,
        generation: int,
        defaults: PrescriptionDefaults | None = None,
    ) -> MutationOutcome:
        try:
            exercise = await self._catalog.fetch(exercise_id)
        except MesoplanError as exc:
            logger.error("Catalog lookup for %s failed: %s", exercise_id, exc.message)
            return self._failure(exc)
        if exercise is None:
            return self._failure(
                ExerciseNotFoundError(
                    f"exercise {exercise_id!r} is not in the catalog", field="exercise_id"
                )
            )
        return await self._apply(
            "add_exercise",
            generation,
            lambda plan: add_exercise(plan, day, exercise, defaults),
        )

    async def remove_exercise(
        self, prescription_id: uuid.UUID, *, generation: int
    ) -> MutationOutcome:
        return await self._apply(
            "remove_exercise", generation, lambda plan: remove_exercise(plan, prescription_id)
        )

    async def reorder_exercises(
        self, day: dt.date, from_index: int, to_index: int, *, generation: int
    ) -> MutationOutcome:
        return await self._apply(
            "reorder_exercises",
            generation,
            lambda plan: reorder_exercises(plan, day, from_index, to_index),
        )

    async def move_workout(
        self, source: dt.date, destination: dt.date, *, generation: int
    ) -> MutationOutcome:
        return await self._apply(
            "move_workout", generation, lambda plan: move_workout(plan, source, destination)
        )

    async def regenerate(
        self, plan_input: PlanInput, *, start_date: dt.date | None = None
    ) -> MutationOutcome:
        """Replace the plan with a fresh one.

        The generation is reserved before waiting on the lock, so edits queued
        against the old plan are rejected as stale.
        """
        self._generation += 1
        reserved = self._generation
        committed = False
        async with self._lock:
            try:
                result = await regenerate(
                    self._plan,
                    plan_input,
                    self._catalog,
                    start_date=start_date,
                    generation=reserved,
                )
                await self._commit(result.plan)
                committed = True
            except MesoplanError as exc:
                logger.error(
                    "Regenerating plan failed: %s",
                    exc.message,
                    extra={"mesoplan_error_code": exc.code},
                )
                return self._failure(exc)
            finally:
                # Release the reservation unless a later regenerate took a newer one.
                if not committed and self._generation == reserved:
                    self._generation = self._plan.generation if self._plan is not None else 0
            return self._outcome(warnings=result.warnings)

    def validate(self) -> ValidationResult | None:
        return validate(self._plan) if self._plan is not None else None

    @staticmethod
    def _log_persistence_failure(plan: MesocyclePlan | None, exc: PersistenceError) -> None:
        logger.error(
            "Persisting plan failed: %s",
            exc.message,
            extra={"mesoplan_plan_id": str(plan.id) if plan is not None else None},
        )
