"""Dense Monday-to-Sunday calendar projection of a plan's dated workouts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from .models import MesocyclePlan, WorkoutPlan, monday_of


@dataclass(frozen=True)
class DayCell:
    date: date
    workout: WorkoutPlan | None = None

    @property
    def is_rest_day(self) -> bool:
        return self.workout is None


def project(plan: MesocyclePlan) -> list[DayCell]:
    """One cell per day from the first workout's Monday to the last workout's Sunday.

    Workouts without a date are not placed. A plan with no dated workouts
    projects to an empty list.
    """
    by_date: dict[date, WorkoutPlan] = {}
    for workout in plan.workouts():
        if workout.date is not None:
            by_date.setdefault(workout.date, workout)
    if not by_date:
        return []

    first = monday_of(min(by_date))
    last = monday_of(max(by_date)) + timedelta(days=6)
    return [
        DayCell(date=day, workout=by_date.get(day))
        for day in (first + timedelta(days=offset) for offset in range((last - first).days + 1))
    ]


def weeks_of(cells: list[DayCell]) -> list[list[DayCell]]:
    """Chunk a projection into rows of seven days."""
    return [cells[i : i + 7] for i in range(0, len(cells), 7)]
