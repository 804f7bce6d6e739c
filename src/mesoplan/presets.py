"""Training split templates for quick plan generation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from .models import PlanInput, RepRange

Experience = Literal["novice", "intermediate", "advanced"]

EXPERIENCE_VOLUME: dict[str, int] = {
    "novice": 10,
    "intermediate": 14,
    "advanced": 18,
}

PRESET_REP_RANGE = RepRange(min=8, max=12)
PRESET_RAMP = 0.05


@dataclass(frozen=True)
class SplitPreset:
    name: str
    description: str
    days_per_week: int
    muscles: tuple[str, ...]


FULL_BODY = SplitPreset(
    name="full_body",
    description="Two whole-body sessions per week",
    days_per_week=2,
    muscles=("quads", "hamstrings", "glutes", "chest", "upper_back", "lats", "front_delts"),
)

PUSH_PULL_LEGS = SplitPreset(
    name="push_pull_legs",
    description="Three sessions rotating pushing, pulling and leg work",
    days_per_week=3,
    muscles=(
        "chest", "front_delts", "lateral_delts", "triceps",
        "upper_back", "lats", "rear_delts", "biceps",
        "quads", "hamstrings", "glutes", "calves",
    ),
)

UPPER_LOWER = SplitPreset(
    name="upper_lower",
    description="Four sessions alternating upper and lower body",
    days_per_week=4,
    muscles=(
        "chest", "upper_back", "lats", "lateral_delts", "biceps", "triceps",
        "quads", "hamstrings", "glutes", "calves", "abs",
    ),
)

PRESETS: dict[str, SplitPreset] = {
    "full_body": FULL_BODY,
    "push_pull_legs": PUSH_PULL_LEGS,
    "upper_lower": UPPER_LOWER,
}


def preset_input(
    split: str,
    weeks: int,
    experience: str = "intermediate",
    **overrides: Any,
) -> PlanInput:
    """Build a ``PlanInput`` from a split template.

    Every muscle in the split gets the experience level's weekly set target.
    ``overrides`` replace any other ``PlanInput`` field (strategy, deload, seed, ...).
    """
    if split not in PRESETS:
        raise KeyError(f"unknown preset {split!r}; choose from {', '.join(PRESETS)}")
    if experience not in EXPERIENCE_VOLUME:
        raise KeyError(
            f"unknown experience level {experience!r}; choose from {', '.join(EXPERIENCE_VOLUME)}"
        )
    preset = PRESETS[split]
    fields: dict[str, Any] = {
        "weeks": weeks,
        "days_per_week": preset.days_per_week,
        "weekly_volume_targets": {m: EXPERIENCE_VOLUME[experience] for m in preset.muscles},
        "default_rep_range": PRESET_REP_RANGE,
        "weekly_volume_ramp": PRESET_RAMP,
    }
    fields.update(overrides)
    return PlanInput.create(**fields)
