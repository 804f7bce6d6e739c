"""Week-by-week evaluation of progression rules.

Loads are offsets in kilograms on top of the athlete's working weight for the
exercise; the plan never stores absolute loads.
"""

from __future__ import annotations

from dataclasses import dataclass

from .models import DoubleProgression, LinearProgression, ProgressionRule, WaveProgression


@dataclass(frozen=True)
class WeekTarget:
    week: int
    load_offset: float
    reps: int | None  # None when the rule leaves reps to the prescription's range


def load_offset_for_week(rule: ProgressionRule, week: int) -> float:
    return target_for_week(rule, week).load_offset


def target_for_week(rule: ProgressionRule, week: int) -> WeekTarget:
    """Load offset (and rep target where the rule sets one) for 0-based ``week``."""
    if week < 0:
        raise ValueError("week must be >= 0")

    if isinstance(rule, LinearProgression):
        return WeekTarget(week=week, load_offset=rule.start + rule.increment * week, reps=None)

    if isinstance(rule, DoubleProgression):
        # Each cycle spends one week per rep count, then load steps up and reps reset.
        span = rule.end_reps - rule.start_reps + 1
        cycle, position = divmod(week, span)
        return WeekTarget(
            week=week,
            load_offset=rule.load_increment * cycle,
            reps=rule.start_reps + position,
        )

    if isinstance(rule, WaveProgression):
        wave, position = divmod(week, rule.wave_size)
        return WeekTarget(week=week, load_offset=rule.increment * (wave + position), reps=None)

    raise TypeError(f"unsupported progression rule: {type(rule).__name__}")


def progression_schedule(rule: ProgressionRule, weeks: int) -> list[WeekTarget]:
    return [target_for_week(rule, week) for week in range(weeks)]


def describe(rule: ProgressionRule) -> str:
    if isinstance(rule, LinearProgression):
        return f"linear +{rule.increment:g} kg/week from {rule.start:g}"
    if isinstance(rule, DoubleProgression):
        return (
            f"double progression {rule.start_reps}-{rule.end_reps} reps, "
            f"+{rule.load_increment:g} kg"
        )
    if isinstance(rule, WaveProgression):
        return f"wave every {rule.wave_size} weeks, +{rule.increment:g} kg"
    raise TypeError(f"unsupported progression rule: {type(rule).__name__}")
