"""Muscle-group vocabulary shared by the catalog, plan model, and generator."""

from __future__ import annotations

from typing import Literal

MuscleGroup = Literal[
    "chest",
    "upper_back",
    "lats",
    "traps",
    "front_delts",
    "lateral_delts",
    "rear_delts",
    "biceps",
    "triceps",
    "forearms",
    "abs",
    "obliques",
    "lower_back",
    "glutes",
    "quads",
    "hamstrings",
    "calves",
    "hip_adductors",
    "hip_abductors",
]

MUSCLE_GROUPS: tuple[str, ...] = (
    "chest",
    "upper_back",
    "lats",
    "traps",
    "front_delts",
    "lateral_delts",
    "rear_delts",
    "biceps",
    "triceps",
    "forearms",
    "abs",
    "obliques",
    "lower_back",
    "glutes",
    "quads",
    "hamstrings",
    "calves",
    "hip_adductors",
    "hip_abductors",
)

UPPER_BODY: frozenset[str] = frozenset(MUSCLE_GROUPS[:10])

_DISPLAY_OVERRIDES = {
    "upper_back": "Upper Back",
    "front_delts": "Front Delts",
    "lateral_delts": "Lateral Delts",
    "rear_delts": "Rear Delts",
    "lower_back": "Lower Back",
    "hip_adductors": "Hip Adductors",
    "hip_abductors": "Hip Abductors",
}


def normalize_muscle(value: str) -> str:
    """Canonicalize a user-supplied muscle name ("Front Delts" → "front_delts").

    Raises ValueError for names outside the vocabulary.
    """
    normalized = value.strip().lower().replace("-", "_").replace(" ", "_")
    if normalized not in MUSCLE_GROUPS:
        allowed = ", ".join(MUSCLE_GROUPS)
        raise ValueError(f"unknown muscle group {value!r}; expected one of: {allowed}")
    return normalized


def is_upper_body(muscle: str) -> bool:
    return muscle in UPPER_BODY


def display_name(muscle: str) -> str:
    return _DISPLAY_OVERRIDES.get(muscle, muscle.capitalize())
