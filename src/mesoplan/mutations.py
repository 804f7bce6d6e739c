"""Plan edits as pure functions: each takes a plan and returns a new one.

Edits keep exercise ids unique per workout and every prescription inside the
rep/effort windows. They do not re-run the full validator; callers that need
the escalation and deload guarantees after editing call ``validate`` themselves.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections import defaultdict

from pydantic import BaseModel, ConfigDict, Field

from .catalog import ExerciseCatalog
from .errors import DayNotFoundError, ExerciseNotFoundError, InvalidReorderError
from .exercises import Exercise
from .generator import GenerationResult, generate
from .models import (
    RPE_CEILING,
    RPE_FLOOR,
    ExercisePrescription,
    MesocyclePlan,
    PlanInput,
    ProgressionRule,
    RepRange,
    WeekPlan,
    WorkoutPlan,
    merge_duplicate_prescriptions,
    workout_name,
)
from .periodization import DEFAULT_TARGET_RPE, manual_progression


class PrescriptionDefaults(BaseModel):
    """Prescription values applied when an exercise is added by hand."""

    model_config = ConfigDict(frozen=True)

    sets: int = Field(default=3, ge=1)
    rep_range: RepRange = RepRange(min=8, max=12)
    target_rpe: float = Field(default=DEFAULT_TARGET_RPE, ge=RPE_FLOOR, le=RPE_CEILING)
    progression: ProgressionRule | None = None


def _rebuild(plan: MesocyclePlan, workouts: list[WorkoutPlan]) -> MesocyclePlan:
    """Regroup workouts into their weeks, ordered by weekday within each week."""
    by_week: dict[int, list[WorkoutPlan]] = defaultdict(list)
    for workout in workouts:
        by_week[workout.week].append(workout)
    weeks = tuple(
        WeekPlan(
            index=week.index,
            workouts=tuple(sorted(by_week[week.index], key=lambda w: w.day_of_week)),
        )
        for week in plan.weeks
    )
    return plan.model_copy(update={"weeks": weeks})


def _replace_workout(plan: MesocyclePlan, updated: WorkoutPlan) -> MesocyclePlan:
    return _rebuild(plan, [updated if w.id == updated.id else w for w in plan.workouts()])


def _require_in_window(plan: MesocyclePlan, day: dt.date) -> None:
    if not plan.contains(day):
        raise DayNotFoundError(
            f"{day.isoformat()} is outside the mesocycle "
            f"({plan.start_date.isoformat()} to {plan.end_date.isoformat()})",
            field="date",
        )


def _require_workout(plan: MesocyclePlan, day: dt.date) -> WorkoutPlan:
    workout = plan.workout_on(day)
    if workout is None:
        raise DayNotFoundError(f"no workout scheduled on {day.isoformat()}", field="date")
    return workout


def ensure_day(plan: MesocyclePlan, day: dt.date) -> tuple[MesocyclePlan, WorkoutPlan]:
    """Return the workout on ``day``, inserting an empty one if none exists."""
    existing = plan.workout_on(day)
    if existing is not None:
        return plan, existing

    _require_in_window(plan, day)
    week = plan.week_index_for(day)
    earlier = sum(1 for w in plan.weeks[week].workouts if w.day_of_week < day.weekday())
    # Fresh id: a date can be emptied by a move and filled again.
    workout = WorkoutPlan(
        id=uuid.uuid4(),
        name=workout_name(week, earlier),
        week=week,
        day_of_week=day.weekday(),
        date=day,
    )
    return _rebuild(plan, [*plan.workouts(), workout]), workout


def add_exercise(
    plan: MesocyclePlan,
    day: dt.date,
    exercise: Exercise,
    defaults: PrescriptionDefaults | None = None,
) -> MesocyclePlan:
    """Add ``exercise`` to the workout on ``day``.

    An exercise already present on that day is updated in place (sets and rep
    range take the new values) instead of being listed twice.
    """
    defaults = defaults or PrescriptionDefaults()
    plan, workout = ensure_day(plan, day)

    existing = workout.prescription_for(exercise.exercise_id)
    if existing is not None:
        updated = existing.model_copy(
            update={"sets": defaults.sets, "rep_range": defaults.rep_range}
        )
        prescriptions = tuple(updated if p.id == existing.id else p for p in workout.prescriptions)
    else:
        prescriptions = (
            *workout.prescriptions,
            ExercisePrescription(
                exercise_id=exercise.exercise_id,
                sets=defaults.sets,
                rep_range=defaults.rep_range,
                target_rpe=defaults.target_rpe,
                progression=defaults.progression or manual_progression(defaults.rep_range),
            ),
        )

    updated_workout = workout.model_copy(
        update={"prescriptions": merge_duplicate_prescriptions(prescriptions)}
    )
    return _replace_workout(plan, updated_workout)


def remove_exercise(plan: MesocyclePlan, prescription_id: uuid.UUID) -> MesocyclePlan:
    """Remove one prescription; the workout stays even when it becomes empty."""
    for workout in plan.workouts():
        remaining = tuple(p for p in workout.prescriptions if p.id != prescription_id)
        if len(remaining) != len(workout.prescriptions):
            return _replace_workout(plan, workout.model_copy(update={"prescriptions": remaining}))
    raise ExerciseNotFoundError(
        f"no prescription {prescription_id} in plan {plan.id}",
        field="prescription_id",
    )


def reorder_exercises(
    plan: MesocyclePlan,
    day: dt.date,
    from_index: int,
    to_index: int,
) -> MesocyclePlan:
    workout = _require_workout(plan, day)
    items = list(workout.prescriptions)
    for name, index in (("from_index", from_index), ("to_index", to_index)):
        if not 0 <= index < len(items):
            raise InvalidReorderError(
                f"{name} {index} out of range for {len(items)} prescriptions on {day.isoformat()}",
                field=name,
            )
    if from_index == to_index:
        return plan
    items.insert(to_index, items.pop(from_index))
    return _replace_workout(plan, workout.model_copy(update={"prescriptions": tuple(items)}))


def _reschedule(plan: MesocyclePlan, workout: WorkoutPlan, day: dt.date) -> WorkoutPlan:
    return workout.model_copy(
        update={"date": day, "week": plan.week_index_for(day), "day_of_week": day.weekday()}
    )


def move_workout(plan: MesocyclePlan, source: dt.date, destination: dt.date) -> MesocyclePlan:
    """Drag-and-drop a workout to another day.

    An occupied destination swaps dates with the source; an empty one simply
    receives the source workout, leaving the source day empty.
    """
    moving = _require_workout(plan, source)
    _require_in_window(plan, destination)
    if source == destination:
        return plan

    occupant = plan.workout_on(destination)
    replacements = {moving.id: _reschedule(plan, moving, destination)}
    if occupant is not None:
        replacements[occupant.id] = _reschedule(plan, occupant, source)
    return _rebuild(plan, [replacements.get(w.id, w) for w in plan.workouts()])


async def regenerate(
    plan: MesocyclePlan | None,
    plan_input: PlanInput,
    catalog: ExerciseCatalog,
    *,
    start_date: dt.date | None = None,
    generation: int | None = None,
) -> GenerationResult:
    """Discard ``plan`` and generate a fresh one under the next generation number.

    ``generation`` overrides the number when the caller already reserved one.
    """
    if generation is None:
        generation = 0 if plan is None else plan.generation + 1
    if start_date is None and plan is not None:
        start_date = plan.start_date
    return await generate(plan_input, catalog, start_date=start_date, generation=generation)
