"""Plan validator: reports every invariant violation, never mutates, never raises.

Safe on partially edited plans and on instances built with ``model_construct``
(which skips field validation), so range checks are repeated here.
"""

from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field

from .models import REP_CEILING, REP_FLOOR, RPE_CEILING, RPE_FLOOR, MesocyclePlan
from .periodization import MAX_DELOAD_RATIO

Invariant = Literal[
    "volume_escalation",
    "deload",
    "exercise_uniqueness",
    "rep_range",
    "effort_window",
]

INVARIANTS: tuple[str, ...] = (
    "volume_escalation",
    "deload",
    "exercise_uniqueness",
    "rep_range",
    "effort_window",
)


class Violation(BaseModel):
    invariant: Invariant
    week: int
    day: dt.date | None = None
    exercise_id: str | None = None
    message: str


class ValidationResult(BaseModel):
    valid: bool
    violations: list[Violation] = Field(default_factory=list)

    def by_invariant(self, invariant: str) -> list[Violation]:
        return [v for v in self.violations if v.invariant == invariant]


def _check_escalation(plan: MesocyclePlan) -> list[Violation]:
    violations: list[Violation] = []
    totals = plan.weekly_sets()
    last = len(totals) - 1
    for week in range(last):
        if plan.deload and week + 1 == last:
            continue
        if totals[week + 1] < totals[week]:
            violations.append(
                Violation(
                    invariant="volume_escalation",
                    week=week + 1,
                    message=(
                        f"week {week + 2} prescribes {totals[week + 1]} sets, "
                        f"fewer than week {week + 1} ({totals[week]})"
                    ),
                )
            )
    return violations


def _check_deload(plan: MesocyclePlan) -> list[Violation]:
    if not plan.deload or len(plan.weeks) < 2:
        return []
    totals = plan.weekly_sets()
    deload_sets, prior_sets = totals[-1], totals[-2]
    if deload_sets <= MAX_DELOAD_RATIO * prior_sets:
        return []
    return [
        Violation(
            invariant="deload",
            week=len(totals) - 1,
            message=(
                f"deload week prescribes {deload_sets} sets; at most "
                f"{MAX_DELOAD_RATIO:.0%} of the prior week's {prior_sets} allowed"
            ),
        )
    ]


def _check_workouts(plan: MesocyclePlan) -> list[Violation]:
    violations: list[Violation] = []
    for week in plan.weeks:
        for workout in week.workouts:
            seen: set[str] = set()
            for p in workout.prescriptions:
                if p.exercise_id in seen:
                    violations.append(
                        Violation(
                            invariant="exercise_uniqueness",
                            week=week.index,
                            day=workout.date,
                            exercise_id=p.exercise_id,
                            message=f"{p.exercise_id} appears more than once in {workout.name}",
                        )
                    )
                seen.add(p.exercise_id)

                low, high = p.rep_range.min, p.rep_range.max
                if not REP_FLOOR <= low <= high <= REP_CEILING:
                    violations.append(
                        Violation(
                            invariant="rep_range",
                            week=week.index,
                            day=workout.date,
                            exercise_id=p.exercise_id,
                            message=(
                                f"rep range {low}-{high} outside "
                                f"{REP_FLOOR} <= min <= max <= {REP_CEILING}"
                            ),
                        )
                    )

                if not RPE_FLOOR <= p.target_rpe <= RPE_CEILING:
                    violations.append(
                        Violation(
                            invariant="effort_window",
                            week=week.index,
                            day=workout.date,
                            exercise_id=p.exercise_id,
                            message=f"target RPE {p.target_rpe} outside {RPE_FLOOR}-{RPE_CEILING:g}",
                        )
                    )
    return violations


def validate(plan: MesocyclePlan) -> ValidationResult:
    violations = _check_escalation(plan) + _check_deload(plan) + _check_workouts(plan)
    return ValidationResult(valid=not violations, violations=violations)
