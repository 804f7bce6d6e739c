"""Periodization rules: weekly volume curve, deload, and per-strategy effort/progression.

Volume ramps linearly from the base target (week factor ``1 + ramp × w``);
an optional final deload week drops to ``DELOAD_FACTOR`` of the base. The
strategy set is closed: ``strategy_profile`` dispatches exhaustively over
``STRATEGIES`` and raises for anything else.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .models import (
    STRATEGIES,
    DoubleProgression,
    LinearProgression,
    ProgressionRule,
    RepRange,
    WaveProgression,
)

DELOAD_FACTOR = 0.6
# Upper bound the validator enforces for the deload week relative to the prior week.
MAX_DELOAD_RATIO = 0.65

# 1 rep in reserve
DEFAULT_TARGET_RPE = 9.0

# Heavy / moderate / light rotation for daily undulating periodization
UNDULATING_RPE_CYCLE: tuple[float, ...] = (9.0, 8.0, 7.0)

LINEAR_LOAD_INCREMENT = 2.5
STRENGTH_LOAD_INCREMENT = 5.0
WAVE_SIZE = 3

# Weekday offsets (0 = Monday) for each training frequency
TRAINING_DAY_LAYOUTS: dict[int, tuple[int, ...]] = {
    1: (0,),
    2: (0, 3),
    3: (0, 2, 4),
    4: (0, 1, 3, 4),
    5: (0, 1, 2, 3, 4),
    6: (0, 1, 2, 3, 4, 5),
    7: (0, 1, 2, 3, 4, 5, 6),
}


@dataclass(frozen=True)
class StrategyProfile:
    name: str
    description: str
    progression: ProgressionRule
    rpe_cycle: tuple[float, ...]

    def target_rpe(self, day_index: int) -> float:
        return self.rpe_cycle[day_index % len(self.rpe_cycle)]


def strategy_profile(strategy: str) -> StrategyProfile:
    """Effort and progression defaults for one of the known strategies."""
    if strategy == "linear":
        return StrategyProfile(
            name="linear",
            description="Same effort every session; load climbs every week.",
            progression=LinearProgression(start=0.0, increment=LINEAR_LOAD_INCREMENT),
            rpe_cycle=(DEFAULT_TARGET_RPE,),
        )
    if strategy == "undulating":
        return StrategyProfile(
            name="undulating",
            description="Daily heavy/moderate/light effort rotation with wave loading.",
            progression=WaveProgression(wave_size=WAVE_SIZE, increment=LINEAR_LOAD_INCREMENT),
            rpe_cycle=UNDULATING_RPE_CYCLE,
        )
    if strategy == "strength_focused":
        return StrategyProfile(
            name="strength_focused",
            description="Top-end effort with larger weekly load jumps.",
            progression=LinearProgression(start=0.0, increment=STRENGTH_LOAD_INCREMENT),
            rpe_cycle=(DEFAULT_TARGET_RPE,),
        )
    allowed = ", ".join(STRATEGIES)
    raise ValueError(f"unknown strategy {strategy!r}; expected one of: {allowed}")


def manual_progression(rep_range: RepRange) -> DoubleProgression:
    """Default rule for exercises added by hand: fill the rep range, then add load."""
    return DoubleProgression(
        start_reps=rep_range.min,
        end_reps=rep_range.max,
        load_increment=LINEAR_LOAD_INCREMENT,
    )


def is_deload_week(week: int, total_weeks: int, deload: bool) -> bool:
    return deload and week == total_weeks - 1


def week_factor(week: int, total_weeks: int, ramp: float, deload: bool) -> float:
    """Volume multiplier applied to the base weekly target for ``week`` (0-based)."""
    if is_deload_week(week, total_weeks, deload):
        return DELOAD_FACTOR
    return 1.0 + ramp * week


def per_day_sets(base_sets: int, factor: float, days_per_week: int) -> int:
    return round(base_sets * factor / days_per_week)


def deload_ceiling(prior_sets: int) -> int:
    """Largest per-day set count that stays within ``MAX_DELOAD_RATIO`` of the prior week."""
    return math.floor(prior_sets * MAX_DELOAD_RATIO)


def weekly_day_targets(
    targets: dict[str, int],
    week: int,
    total_weeks: int,
    days_per_week: int,
    ramp: float,
    deload: bool,
) -> dict[str, int]:
    """Per-day set target for every muscle group in ``week``."""
    factor = week_factor(week, total_weeks, ramp, deload)
    result: dict[str, int] = {}
    for muscle, base_sets in targets.items():
        sets = per_day_sets(base_sets, factor, days_per_week)
        if is_deload_week(week, total_weeks, deload) and week > 0:
            prior_factor = week_factor(week - 1, total_weeks, ramp, deload)
            prior = per_day_sets(base_sets, prior_factor, days_per_week)
            sets = min(sets, deload_ceiling(prior))
        result[muscle] = sets
    return result


def training_days(days_per_week: int) -> tuple[int, ...]:
    try:
        return TRAINING_DAY_LAYOUTS[days_per_week]
    except KeyError:
        raise ValueError(f"days_per_week must be 1-7, got {days_per_week}") from None
