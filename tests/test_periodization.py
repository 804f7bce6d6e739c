"""Tests for the periodization rules."""

import pytest

from mesoplan.models import DoubleProgression, LinearProgression, RepRange, WaveProgression
from mesoplan.periodization import (
    DELOAD_FACTOR,
    deload_ceiling,
    is_deload_week,
    manual_progression,
    per_day_sets,
    strategy_profile,
    training_days,
    week_factor,
    weekly_day_targets,
)


def test_week_factor_ramps_linearly():
    assert week_factor(0, 4, 0.1, False) == 1.0
    assert week_factor(3, 4, 0.1, False) == pytest.approx(1.3)


def test_deload_only_when_requested():
    assert week_factor(3, 4, 0.1, True) == DELOAD_FACTOR
    assert is_deload_week(3, 4, True)
    assert not is_deload_week(3, 4, False)
    assert not is_deload_week(2, 4, True)


def test_single_week_deload_uses_factor_alone():
    assert weekly_day_targets({"chest": 10}, 0, 1, 1, 0.05, True) == {"chest": 6}


def test_per_day_sets_rounds():
    assert per_day_sets(12, 1.0, 3) == 4
    assert per_day_sets(10, 1.0, 3) == 3
    assert per_day_sets(1, 1.0, 3) == 0


def test_deload_ceiling():
    assert deload_ceiling(4) == 2
    assert deload_ceiling(3) == 1
    assert deload_ceiling(0) == 0


def test_weekly_day_targets_example():
    # 12 weekly sets over 3 days, no ramp: 4 per day in every week
    for week in range(2):
        assert weekly_day_targets({"chest": 12}, week, 2, 3, 0.0, False) == {"chest": 4}


def test_deload_week_capped_by_prior_week():
    # round(3 * 0.6) = 2 would exceed 65% of the prior week's 3
    assert weekly_day_targets({"quads": 3}, 1, 2, 1, 0.0, True) == {"quads": 1}


def test_training_day_layouts():
    assert training_days(1) == (0,)
    assert training_days(3) == (0, 2, 4)
    assert training_days(4) == (0, 1, 3, 4)
    assert training_days(7) == tuple(range(7))


def test_training_days_out_of_range():
    with pytest.raises(ValueError):
        training_days(0)


class TestStrategyProfiles:
    def test_linear(self):
        profile = strategy_profile("linear")
        assert profile.progression == LinearProgression(start=0.0, increment=2.5)
        assert {profile.target_rpe(day) for day in range(5)} == {9.0}

    def test_undulating_rotates_effort(self):
        profile = strategy_profile("undulating")
        assert [profile.target_rpe(day) for day in range(4)] == [9.0, 8.0, 7.0, 9.0]
        assert isinstance(profile.progression, WaveProgression)

    def test_strength_focused(self):
        profile = strategy_profile("strength_focused")
        assert profile.progression.increment == 5.0

    def test_unknown_strategy(self):
        with pytest.raises(ValueError, match="unknown strategy"):
            strategy_profile("conjugate")


def test_manual_progression_spans_rep_range():
    assert manual_progression(RepRange(min=8, max=12)) == DoubleProgression(
        start_reps=8, end_reps=12, load_increment=2.5
    )
