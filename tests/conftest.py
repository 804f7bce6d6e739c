"""Shared plan builders for the mesoplan tests."""

from __future__ import annotations

import uuid
from datetime import UTC, date, datetime, timedelta

import pytest

from mesoplan.catalog import InMemoryExerciseCatalog
from mesoplan.exercises import EXERCISES
from mesoplan.models import (
    ExercisePrescription,
    LinearProgression,
    MesocyclePlan,
    RepRange,
    WeekPlan,
    WorkoutPlan,
)

# A Monday
START = date(2026, 3, 2)
PLAN_ID = uuid.UUID("0f6c5a52-1e9b-4d1c-8b7e-3c2a9d4e5f60")
CREATED_AT = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def prescription(exercise_id: str, sets: int = 4, rpe: float = 9.0, **kwargs) -> ExercisePrescription:
    return ExercisePrescription(
        exercise_id=exercise_id,
        sets=sets,
        rep_range=kwargs.pop("rep_range", RepRange(min=8, max=12)),
        target_rpe=rpe,
        progression=kwargs.pop("progression", LinearProgression(increment=2.5)),
        **kwargs,
    )


def workout(week: int, day_of_week: int, *prescriptions: ExercisePrescription) -> WorkoutPlan:
    return WorkoutPlan(
        name=f"Week {week + 1} Day {day_of_week + 1}",
        week=week,
        day_of_week=day_of_week,
        date=START + timedelta(days=7 * week + day_of_week),
        prescriptions=prescriptions,
    )


def plan_of(weeks: list[list[WorkoutPlan]], **fields) -> MesocyclePlan:
    return MesocyclePlan(
        id=fields.pop("id", PLAN_ID),
        created_at=fields.pop("created_at", CREATED_AT),
        start_date=fields.pop("start_date", START),
        weeks=tuple(
            WeekPlan(index=i, workouts=tuple(workouts)) for i, workouts in enumerate(weeks)
        ),
        **fields,
    )


@pytest.fixture
def sample_plan() -> MesocyclePlan:
    """Two weeks, Monday/Wednesday/Friday, bench + row every day."""
    return plan_of(
        [
            [
                workout(week, day, prescription("barbell_bench_press"), prescription("barbell_row"))
                for day in (0, 2, 4)
            ]
            for week in range(2)
        ]
    )


@pytest.fixture
def library_catalog() -> InMemoryExerciseCatalog:
    return InMemoryExerciseCatalog()


@pytest.fixture
def chest_catalog() -> InMemoryExerciseCatalog:
    """Exactly one chest exercise."""
    return InMemoryExerciseCatalog([EXERCISES["cable_fly"]])
