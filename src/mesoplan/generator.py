"""Mesocycle generator: PlanInput + exercise catalog → MesocyclePlan.

For every week the base weekly target of each muscle group is scaled by the
week factor and split evenly across the training days. Each training day then
gets one prescription per muscle group with a non-zero target, using a seeded
selection from the catalog so identical inputs yield identical plans.

Targets the catalog cannot serve are reported as warnings next to the plan
instead of disappearing silently.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Literal

from .catalog import ExerciseCatalog
from .exercises import Exercise
from .models import (
    ExercisePrescription,
    MesocyclePlan,
    PlanInput,
    WeekPlan,
    WorkoutPlan,
    merge_duplicate_prescriptions,
    monday_of,
    stable_uuid,
    workout_name,
)
from .periodization import strategy_profile, training_days, weekly_day_targets
from .selection import choose_exercise

logger = logging.getLogger(__name__)

WarningCode = Literal["catalog_gap", "zero_volume"]


@dataclass(frozen=True)
class GenerationWarning:
    code: WarningCode
    muscle: str
    message: str
    unmet_weekly_sets: int


@dataclass(frozen=True)
class GenerationResult:
    plan: MesocyclePlan
    warnings: tuple[GenerationWarning, ...] = ()

    @property
    def targets_met(self) -> bool:
        return not self.warnings


def _ordered_muscles(plan_input: PlanInput) -> list[str]:
    """Focus muscle first, then the caller's target order; zero targets dropped."""
    muscles = [m for m, sets in plan_input.weekly_volume_targets.items() if sets > 0]
    if plan_input.focus in muscles:
        muscles.remove(plan_input.focus)
        muscles.insert(0, plan_input.focus)
    return muscles


async def generate(
    plan_input: PlanInput,
    catalog: ExerciseCatalog,
    *,
    start_date: date | None = None,
    plan_id: uuid.UUID | None = None,
    created_at: datetime | None = None,
    generation: int = 0,
) -> GenerationResult:
    """Build a complete mesocycle for ``plan_input``.

    ``start_date`` is moved back to its Monday; it defaults to the current week.
    Workout and prescription ids derive from ``plan_id``, so passing the same
    id reproduces the same plan exactly.
    """
    start = monday_of(start_date or date.today())
    plan_id = plan_id or uuid.uuid4()
    created_at = created_at or datetime.now(tz=UTC)
    profile = strategy_profile(plan_input.strategy)
    layout = training_days(plan_input.days_per_week)
    muscles = _ordered_muscles(plan_input)

    candidates: dict[str, list[Exercise]] = {}
    warnings: list[GenerationWarning] = []
    for muscle in muscles:
        candidates[muscle] = await catalog.fetch_all_targeting(muscle)
        if not candidates[muscle]:
            unmet = plan_input.weekly_volume_targets[muscle]
            logger.warning(
                "No catalog exercise targets %s; %d weekly sets unassigned",
                muscle,
                unmet,
                extra={"mesoplan_plan_id": str(plan_id), "mesoplan_muscle": muscle},
            )
            warnings.append(
                GenerationWarning(
                    code="catalog_gap",
                    muscle=muscle,
                    message=f"no exercise in the catalog targets {muscle}",
                    unmet_weekly_sets=unmet,
                )
            )

    weeks: list[WeekPlan] = []
    scheduled: dict[str, int] = {muscle: 0 for muscle in muscles}
    for week in range(plan_input.weeks):
        day_targets = weekly_day_targets(
            plan_input.weekly_volume_targets,
            week,
            plan_input.weeks,
            plan_input.days_per_week,
            plan_input.weekly_volume_ramp,
            plan_input.deload,
        )
        workouts: list[WorkoutPlan] = []
        for day_index, weekday in enumerate(layout):
            prescriptions: list[ExercisePrescription] = []
            for muscle in muscles:
                sets = day_targets[muscle]
                if sets <= 0:
                    continue
                scheduled[muscle] += sets
                exercise = choose_exercise(
                    candidates[muscle],
                    seed=plan_input.seed,
                    muscle=muscle,
                    day_index=day_index,
                )
                if exercise is None:
                    continue
                prescriptions.append(
                    ExercisePrescription(
                        id=stable_uuid(plan_id, week, day_index, exercise.exercise_id),
                        exercise_id=exercise.exercise_id,
                        sets=sets,
                        rep_range=plan_input.default_rep_range,
                        target_rpe=profile.target_rpe(day_index),
                        progression=profile.progression,
                    )
                )
            if not prescriptions:
                continue
            workouts.append(
                WorkoutPlan(
                    id=stable_uuid(plan_id, week, day_index),
                    name=workout_name(week, day_index),
                    week=week,
                    day_of_week=weekday,
                    date=start + timedelta(days=7 * week + weekday),
                    prescriptions=merge_duplicate_prescriptions(prescriptions),
                )
            )
        weeks.append(WeekPlan(index=week, workouts=tuple(workouts)))

    for muscle in muscles:
        if scheduled[muscle] == 0:
            target = plan_input.weekly_volume_targets[muscle]
            warnings.append(
                GenerationWarning(
                    code="zero_volume",
                    muscle=muscle,
                    message=(
                        f"{target} weekly sets for {muscle} round to 0 per day "
                        f"across {plan_input.days_per_week} days"
                    ),
                    unmet_weekly_sets=target,
                )
            )

    plan = MesocyclePlan(
        id=plan_id,
        created_at=created_at,
        start_date=start,
        weeks=tuple(weeks),
        focus=plan_input.focus,
        strategy=plan_input.strategy,
        deload=plan_input.deload,
        seed=plan_input.seed,
        generation=generation,
    )
    logger.info(
        "Generated %d-week %s plan (%d days/week, weekly sets %s, %d warnings)",
        plan_input.weeks,
        plan_input.strategy,
        plan_input.days_per_week,
        plan.weekly_sets(),
        len(warnings),
        extra={"mesoplan_plan_id": str(plan_id)},
    )
    return GenerationResult(plan=plan, warnings=tuple(warnings))
