"""Exercise descriptors and the built-in exercise library."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .muscles import MUSCLE_GROUPS

MovementPattern = Literal[
    "horizontal_push",
    "horizontal_pull",
    "vertical_push",
    "vertical_pull",
    "squat",
    "hinge",
    "carry",
    "core_anti_extension",
    "core_anti_rotation",
    "isolation",
]

MOVEMENT_PATTERNS: tuple[str, ...] = (
    "horizontal_push",
    "horizontal_pull",
    "vertical_push",
    "vertical_pull",
    "squat",
    "hinge",
    "carry",
    "core_anti_extension",
    "core_anti_rotation",
    "isolation",
)

Equipment = Literal[
    "barbell",
    "dumbbell",
    "kettlebell",
    "cable",
    "machine",
    "smith_machine",
    "bodyweight",
    "band",
    "other",
]

EQUIPMENT: tuple[str, ...] = (
    "barbell",
    "dumbbell",
    "kettlebell",
    "cable",
    "machine",
    "smith_machine",
    "bodyweight",
    "band",
    "other",
)


@dataclass(frozen=True)
class Exercise:
    exercise_id: str
    name: str
    primary_muscles: frozenset[str]
    movement_pattern: str
    equipment: str
    secondary_muscles: frozenset[str] = frozenset()
    is_unilateral: bool = False

    def __post_init__(self) -> None:
        if not self.exercise_id.strip():
            raise ValueError("exercise_id must not be empty")
        if not self.name.strip():
            raise ValueError("name must not be empty")
        if not self.primary_muscles:
            raise ValueError(f"{self.exercise_id}: at least one primary muscle is required")
        unknown = (self.primary_muscles | self.secondary_muscles) - set(MUSCLE_GROUPS)
        if unknown:
            raise ValueError(f"{self.exercise_id}: unknown muscle groups {sorted(unknown)}")
        if self.primary_muscles & self.secondary_muscles:
            raise ValueError(
                f"{self.exercise_id}: primary and secondary muscles must be disjoint"
            )
        if self.movement_pattern not in MOVEMENT_PATTERNS:
            raise ValueError(f"{self.exercise_id}: unknown movement pattern {self.movement_pattern!r}")
        if self.equipment not in EQUIPMENT:
            raise ValueError(f"{self.exercise_id}: unknown equipment {self.equipment!r}")

    @property
    def targeted_muscles(self) -> frozenset[str]:
        """Union of primary and secondary muscles."""
        return self.primary_muscles | self.secondary_muscles

    def targets(self, muscle: str) -> bool:
        """True when ``muscle`` receives the primary stimulus."""
        return muscle in self.primary_muscles


def _ex(
    exercise_id: str,
    name: str,
    primary: tuple[str, ...],
    pattern: str,
    equipment: str,
    secondary: tuple[str, ...] = (),
    unilateral: bool = False,
) -> Exercise:
    return Exercise(
        exercise_id=exercise_id,
        name=name,
        primary_muscles=frozenset(primary),
        secondary_muscles=frozenset(secondary),
        movement_pattern=pattern,
        equipment=equipment,
        is_unilateral=unilateral,
    )


_LIBRARY: tuple[Exercise, ...] = (
    _ex("barbell_bench_press", "Barbell Bench Press", ("chest",), "horizontal_push", "barbell",
        secondary=("triceps", "front_delts")),
    _ex("incline_dumbbell_press", "Incline Dumbbell Press", ("chest", "front_delts"), "horizontal_push",
        "dumbbell", secondary=("triceps",)),
    _ex("cable_fly", "Cable Fly", ("chest",), "isolation", "cable"),
    _ex("barbell_row", "Barbell Row", ("upper_back", "lats"), "horizontal_pull", "barbell",
        secondary=("biceps", "rear_delts")),
    _ex("chest_supported_row", "Chest Supported Row", ("upper_back",), "horizontal_pull", "machine",
        secondary=("rear_delts", "biceps")),
    _ex("pull_up", "Pull-Up", ("lats",), "vertical_pull", "bodyweight", secondary=("biceps",)),
    _ex("lat_pulldown", "Lat Pulldown", ("lats",), "vertical_pull", "cable", secondary=("biceps",)),
    _ex("barbell_shrug", "Barbell Shrug", ("traps",), "isolation", "barbell"),
    _ex("overhead_press", "Overhead Press", ("front_delts",), "vertical_push", "barbell",
        secondary=("triceps", "lateral_delts")),
    _ex("lateral_raise", "Dumbbell Lateral Raise", ("lateral_delts",), "isolation", "dumbbell"),
    _ex("reverse_pec_deck", "Reverse Pec Deck", ("rear_delts",), "isolation", "machine"),
    _ex("barbell_curl", "Barbell Curl", ("biceps",), "isolation", "barbell", secondary=("forearms",)),
    _ex("incline_dumbbell_curl", "Incline Dumbbell Curl", ("biceps",), "isolation", "dumbbell",
        unilateral=True),
    _ex("tricep_pushdown", "Cable Tricep Pushdown", ("triceps",), "isolation", "cable"),
    _ex("dip", "Dip", ("triceps", "chest"), "vertical_push", "bodyweight", secondary=("front_delts",)),
    _ex("wrist_curl", "Wrist Curl", ("forearms",), "isolation", "dumbbell"),
    _ex("ab_wheel_rollout", "Ab Wheel Rollout", ("abs",), "core_anti_extension", "other"),
    _ex("pallof_press", "Pallof Press", ("obliques",), "core_anti_rotation", "cable",
        secondary=("abs",)),
    _ex("back_extension", "Back Extension", ("lower_back",), "hinge", "bodyweight",
        secondary=("glutes", "hamstrings")),
    _ex("barbell_back_squat", "Barbell Back Squat", ("quads", "glutes"), "squat", "barbell",
        secondary=("lower_back",)),
    _ex("leg_press", "Leg Press", ("quads",), "squat", "machine", secondary=("glutes",)),
    _ex("bulgarian_split_squat", "Bulgarian Split Squat", ("quads", "glutes"), "squat", "dumbbell",
        unilateral=True),
    _ex("romanian_deadlift", "Romanian Deadlift", ("hamstrings", "glutes"), "hinge", "barbell",
        secondary=("lower_back",)),
    _ex("lying_leg_curl", "Lying Leg Curl", ("hamstrings",), "isolation", "machine"),
    _ex("hip_thrust", "Barbell Hip Thrust", ("glutes",), "hinge", "barbell", secondary=("hamstrings",)),
    _ex("standing_calf_raise", "Standing Calf Raise", ("calves",), "isolation", "machine"),
    _ex("hip_adduction_machine", "Hip Adduction", ("hip_adductors",), "isolation", "machine"),
    _ex("hip_abduction_machine", "Hip Abduction", ("hip_abductors",), "isolation", "machine"),
    _ex("farmers_carry", "Farmer's Carry", ("forearms", "traps"), "carry", "dumbbell",
        secondary=("obliques",)),
)

EXERCISES: dict[str, Exercise] = {ex.exercise_id: ex for ex in _LIBRARY}


def get_exercise(exercise_id: str) -> Exercise:
    """Get exercise by ID, raises KeyError if not found."""
    return EXERCISES[exercise_id]


def exercises_targeting(muscle: str, exercises: dict[str, Exercise] | None = None) -> list[Exercise]:
    """Exercises whose primary muscles include ``muscle``, sorted by id."""
    pool = EXERCISES if exercises is None else exercises
    return sorted(
        (ex for ex in pool.values() if ex.targets(muscle)),
        key=lambda ex: ex.exercise_id,
    )


def muscle_groups_for_exercises(exercise_ids: list[str]) -> set[str]:
    """Return all primary muscle groups trained by the given exercises."""
    groups: set[str] = set()
    for ex_id in exercise_ids:
        ex = EXERCISES.get(ex_id)
        if ex:
            groups.update(ex.primary_muscles)
    return groups
