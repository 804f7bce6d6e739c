"""Plan model: mesocycle → weeks → workouts → exercise prescriptions.

All models are frozen. Edits go through ``model_copy(update=...)`` so every
mutation yields a new plan value and no two holders ever alias one instance.
Range checks on rep ranges and effort targets happen at construction; the
cross-entity invariants (escalation, deload, uniqueness) are reported by
``mesoplan.validator``.
"""

from __future__ import annotations

import datetime as dt
import uuid
from collections.abc import Iterator
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .errors import PlanInputError
from .muscles import MuscleGroup, normalize_muscle

REP_FLOOR = 1
REP_CEILING = 30
RPE_FLOOR = 5.5
RPE_CEILING = 10.0

Strategy = Literal["linear", "undulating", "strength_focused"]
STRATEGIES: tuple[str, ...] = ("linear", "undulating", "strength_focused")

_PLAN_NAMESPACE = uuid.UUID("5b0d3c1e-8f5a-4c61-9a83-2f6e0d7b4a19")


def stable_uuid(*parts: object) -> uuid.UUID:
    """Deterministic identifier derived from the given parts."""
    return uuid.uuid5(_PLAN_NAMESPACE, "|".join(str(part) for part in parts))


def monday_of(day: dt.date) -> dt.date:
    return day - dt.timedelta(days=day.weekday())


def workout_name(week: int, day_index: int) -> str:
    """Display name shared by generated, inserted, and migrated workouts."""
    return f"Week {week + 1} Day {day_index + 1}"


class RepRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: int = Field(ge=REP_FLOOR, le=REP_CEILING)
    max: int = Field(ge=REP_FLOOR, le=REP_CEILING)

    @model_validator(mode="after")
    def validate_order(self) -> "RepRange":
        if self.min > self.max:
            raise ValueError(f"rep range min ({self.min}) must be <= max ({self.max})")
        return self

    @classmethod
    def parse(cls, value: str) -> "RepRange":
        """Parse ``"8-12"`` or ``"5"`` into a range."""
        low, sep, high = value.strip().partition("-")
        try:
            low_reps = int(low)
            high_reps = int(high) if sep else low_reps
        except ValueError as exc:
            raise ValueError(f"rep range must look like '8-12', got {value!r}") from exc
        return cls(min=low_reps, max=high_reps)

    def __str__(self) -> str:
        return f"{self.min}-{self.max}"


# --- Progression rules (tagged variant) ---


class LinearProgression(BaseModel):
    """Load rises by ``increment`` every week from ``start``."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["linear"] = "linear"
    start: float = Field(default=0.0, ge=0)
    increment: float = Field(ge=0)


class DoubleProgression(BaseModel):
    """Reps climb from ``start_reps`` to ``end_reps`` before load steps up."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["double_progression"] = "double_progression"
    start_reps: int = Field(ge=REP_FLOOR, le=REP_CEILING)
    end_reps: int = Field(ge=REP_FLOOR, le=REP_CEILING)
    load_increment: float = Field(ge=0)

    @model_validator(mode="after")
    def validate_rep_window(self) -> "DoubleProgression":
        if self.start_reps > self.end_reps:
            raise ValueError("start_reps must be <= end_reps")
        return self


class WaveProgression(BaseModel):
    """Load climbs within each wave of ``wave_size`` weeks, then resets one step higher."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["wave"] = "wave"
    wave_size: int = Field(ge=1)
    increment: float = Field(ge=0)


ProgressionRule = Annotated[
    Union[LinearProgression, DoubleProgression, WaveProgression],
    Field(discriminator="kind"),
]


# --- Plan entities ---


class ExercisePrescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    exercise_id: str
    sets: int = Field(ge=1)
    rep_range: RepRange
    target_rpe: float = Field(ge=RPE_FLOOR, le=RPE_CEILING)
    progression: ProgressionRule
    notes: str | None = None

    @field_validator("exercise_id")
    @classmethod
    def validate_exercise_id(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("exercise_id must not be empty")
        return cleaned

    @property
    def target_rir(self) -> float:
        return round(10.0 - self.target_rpe, 2)


class WorkoutPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    week: int = Field(ge=0)
    day_of_week: int = Field(ge=0, le=6)
    date: dt.date | None = None
    prescriptions: tuple[ExercisePrescription, ...] = ()

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("workout name must not be empty")
        return cleaned

    @model_validator(mode="after")
    def validate_date_matches_weekday(self) -> "WorkoutPlan":
        if self.date is not None and self.date.weekday() != self.day_of_week:
            raise ValueError(
                f"date {self.date.isoformat()} falls on weekday {self.date.weekday()}, "
                f"not day_of_week {self.day_of_week}"
            )
        return self

    @property
    def total_sets(self) -> int:
        return sum(p.sets for p in self.prescriptions)

    @property
    def exercise_ids(self) -> list[str]:
        return [p.exercise_id for p in self.prescriptions]

    def prescription_for(self, exercise_id: str) -> ExercisePrescription | None:
        for prescription in self.prescriptions:
            if prescription.exercise_id == exercise_id:
                return prescription
        return None


class WeekPlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    index: int = Field(ge=0)
    workouts: tuple[WorkoutPlan, ...] = ()

    @property
    def total_sets(self) -> int:
        return sum(w.total_sets for w in self.workouts)


class MesocyclePlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    created_at: dt.datetime
    start_date: dt.date
    weeks: tuple[WeekPlan, ...] = Field(min_length=1)
    focus: MuscleGroup | None = None
    strategy: Strategy = "linear"
    deload: bool = False
    seed: int = 0
    generation: int = Field(default=0, ge=0)

    @field_validator("start_date")
    @classmethod
    def validate_start_is_monday(cls, value: dt.date) -> dt.date:
        if value.weekday() != 0:
            raise ValueError(f"start_date must be a Monday, got {value.isoformat()}")
        return value

    @model_validator(mode="after")
    def validate_week_indexes(self) -> "MesocyclePlan":
        indexes = [week.index for week in self.weeks]
        if indexes != list(range(len(self.weeks))):
            raise ValueError(f"week indexes must run 0..{len(self.weeks) - 1}, got {indexes}")
        return self

    @property
    def end_date(self) -> dt.date:
        """Sunday of the final week."""
        return self.start_date + dt.timedelta(days=7 * len(self.weeks) - 1)

    def weekly_sets(self) -> list[int]:
        return [week.total_sets for week in self.weeks]

    def workouts(self) -> Iterator[WorkoutPlan]:
        for week in self.weeks:
            yield from week.workouts

    def workout_on(self, day: dt.date) -> WorkoutPlan | None:
        for workout in self.workouts():
            if workout.date == day:
                return workout
        return None

    def exercise_ids(self) -> set[str]:
        return {p.exercise_id for w in self.workouts() for p in w.prescriptions}

    def contains(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date

    def date_for(self, week: int, day_of_week: int) -> dt.date:
        return self.start_date + dt.timedelta(days=7 * week + day_of_week)

    def week_index_for(self, day: dt.date) -> int:
        return (day - self.start_date).days // 7


# --- Generation request ---


class PlanInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    weeks: int = Field(ge=1, le=12)
    days_per_week: int = Field(ge=1, le=7)
    weekly_volume_targets: dict[str, int]
    default_rep_range: RepRange
    weekly_volume_ramp: float = Field(default=0.05, ge=0.0, le=1.0)
    strategy: Strategy = "linear"
    deload: bool = False
    focus: MuscleGroup | None = None
    seed: int = 0

    @field_validator("weekly_volume_targets")
    @classmethod
    def validate_targets(cls, value: dict[str, int]) -> dict[str, int]:
        normalized: dict[str, int] = {}
        for muscle, sets in value.items():
            key = normalize_muscle(muscle)
            if sets < 0:
                raise ValueError(f"weekly volume target for {key} must be >= 0")
            normalized[key] = normalized.get(key, 0) + sets
        return normalized

    @field_validator("focus", mode="before")
    @classmethod
    def normalize_focus(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_muscle(value)
        return value

    @classmethod
    def create(cls, **fields: Any) -> "PlanInput":
        """Construct an input, translating validation failures into ``PlanInputError``."""
        try:
            return cls.model_validate(fields)
        except ValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            raise PlanInputError(
                f"invalid plan input: {first.get('msg', 'invalid value')}",
                field=location or None,
                docs_hint="weeks 1-12, days_per_week 1-7, reps 1-30 with min <= max, ramp 0-1.",
            ) from exc


def merge_duplicate_prescriptions(
    prescriptions: tuple[ExercisePrescription, ...] | list[ExercisePrescription],
) -> tuple[ExercisePrescription, ...]:
    """Fold repeated exercise ids into their first occurrence, summing sets."""
    merged: dict[str, ExercisePrescription] = {}
    for prescription in prescriptions:
        existing = merged.get(prescription.exercise_id)
        if existing is None:
            merged[prescription.exercise_id] = prescription
        else:
            merged[prescription.exercise_id] = existing.model_copy(
                update={"sets": existing.sets + prescription.sets}
            )
    return tuple(merged.values())
