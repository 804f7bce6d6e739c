"""Tests for mesocycle generation."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from conftest import CREATED_AT, PLAN_ID, START
from mesoplan.catalog import InMemoryExerciseCatalog
from mesoplan.exercises import EXERCISES, exercises_targeting
from mesoplan.generator import generate
from mesoplan.models import PlanInput, RepRange, WaveProgression
from mesoplan.validator import validate


def _input(**overrides) -> PlanInput:
    fields = {
        "weeks": 2,
        "days_per_week": 3,
        "weekly_volume_targets": {"chest": 12},
        "default_rep_range": RepRange(min=8, max=12),
        "weekly_volume_ramp": 0.0,
    }
    fields.update(overrides)
    return PlanInput.create(**fields)


@pytest.mark.asyncio
async def test_single_chest_exercise_example(chest_catalog):
    result = await generate(_input(), chest_catalog, start_date=START)
    plan = result.plan

    assert result.targets_met
    assert len(plan.weeks) == 2
    for week in plan.weeks:
        assert len(week.workouts) == 3
        for w in week.workouts:
            assert len(w.prescriptions) == 1
            p = w.prescriptions[0]
            assert p.exercise_id == "cable_fly"
            assert p.sets == 4
            assert p.rep_range == RepRange(min=8, max=12)


@pytest.mark.asyncio
async def test_training_days_and_dates(chest_catalog):
    plan = (await generate(_input(), chest_catalog, start_date=START)).plan
    assert [w.date for w in plan.weeks[0].workouts] == [
        date(2026, 3, 2),
        date(2026, 3, 4),
        date(2026, 3, 6),
    ]
    assert [w.name for w in plan.weeks[1].workouts] == ["Week 2 Day 1", "Week 2 Day 2", "Week 2 Day 3"]
    assert all(w.week == 1 for w in plan.weeks[1].workouts)


@pytest.mark.asyncio
async def test_start_date_moved_to_monday(chest_catalog):
    plan = (await generate(_input(), chest_catalog, start_date=date(2026, 3, 5))).plan
    assert plan.start_date == START


@pytest.mark.asyncio
async def test_identical_inputs_give_identical_plans(library_catalog):
    plan_input = _input(
        weeks=4,
        days_per_week=4,
        weekly_volume_targets={"chest": 12, "lats": 10, "quads": 12, "biceps": 6},
        weekly_volume_ramp=0.1,
    )
    first = await generate(
        plan_input, library_catalog, start_date=START, plan_id=PLAN_ID, created_at=CREATED_AT
    )
    second = await generate(
        plan_input, library_catalog, start_date=START, plan_id=PLAN_ID, created_at=CREATED_AT
    )
    assert first.plan == second.plan


@pytest.mark.asyncio
async def test_structure_identical_without_fixed_ids(library_catalog):
    plan_input = _input(weekly_volume_targets={"chest": 9, "hamstrings": 9})

    def shape(plan):
        return [[(p.exercise_id, p.sets) for p in w.prescriptions] for w in plan.workouts()]

    first = await generate(plan_input, library_catalog, start_date=START)
    second = await generate(plan_input, library_catalog, start_date=START)
    assert first.plan.id != second.plan.id
    assert shape(first.plan) == shape(second.plan)


@pytest.mark.asyncio
async def test_same_movements_every_week(library_catalog):
    plan = (
        await generate(_input(weeks=3, weekly_volume_targets={"chest": 6, "lats": 6}), library_catalog)
    ).plan
    per_week = [[w.exercise_ids for w in week.workouts] for week in plan.weeks]
    assert per_week[0] == per_week[1] == per_week[2]


@pytest.mark.asyncio
async def test_catalog_gap_reported_not_dropped(chest_catalog, caplog):
    with caplog.at_level(logging.WARNING, logger="mesoplan.generator"):
        result = await generate(
            _input(weekly_volume_targets={"chest": 12, "calves": 6}), chest_catalog
        )

    assert not result.targets_met
    [warning] = result.warnings
    assert warning.code == "catalog_gap"
    assert warning.muscle == "calves"
    assert warning.unmet_weekly_sets == 6
    assert result.plan.exercise_ids() == {"cable_fly"}
    assert "calves" in caplog.text


@pytest.mark.asyncio
async def test_zero_volume_warning(chest_catalog):
    result = await generate(_input(weekly_volume_targets={"chest": 1}), chest_catalog)
    assert [w.code for w in result.warnings] == ["zero_volume"]
    assert result.plan.weekly_sets() == [0, 0]
    assert all(not week.workouts for week in result.plan.weeks)


@pytest.mark.asyncio
async def test_zero_targets_are_skipped_silently(chest_catalog):
    result = await generate(_input(weekly_volume_targets={"chest": 12, "calves": 0}), chest_catalog)
    assert result.targets_met


@pytest.mark.asyncio
async def test_focus_muscle_scheduled_first(library_catalog):
    plan = (
        await generate(
            _input(days_per_week=1, weekly_volume_targets={"chest": 6, "quads": 6}, focus="quads"),
            library_catalog,
        )
    ).plan
    quad_ids = {ex.exercise_id for ex in exercises_targeting("quads")}
    for w in plan.workouts():
        assert w.prescriptions[0].exercise_id in quad_ids
    assert plan.focus == "quads"


@pytest.mark.asyncio
async def test_shared_exercise_merged_within_day():
    catalog = InMemoryExerciseCatalog([EXERCISES["barbell_back_squat"]])
    plan = (
        await generate(
            _input(days_per_week=2, weekly_volume_targets={"quads": 6, "glutes": 6}), catalog
        )
    ).plan
    for w in plan.workouts():
        assert w.exercise_ids == ["barbell_back_squat"]
        assert w.prescriptions[0].sets == 6


@pytest.mark.asyncio
async def test_ramp_escalates_volume(chest_catalog):
    plan = (
        await generate(_input(weeks=4, weekly_volume_targets={"chest": 12}, weekly_volume_ramp=0.25), chest_catalog)
    ).plan
    assert plan.weekly_sets() == [12, 15, 18, 21]
    assert validate(plan).valid


@pytest.mark.asyncio
async def test_deload_week(library_catalog):
    plan = (
        await generate(
            _input(weeks=4, weekly_volume_targets={"chest": 12, "lats": 12}, weekly_volume_ramp=0.1, deload=True),
            library_catalog,
        )
    ).plan
    totals = plan.weekly_sets()
    assert plan.deload
    assert totals[3] <= 0.65 * totals[2]
    assert totals[0] <= totals[1] <= totals[2]
    assert validate(plan).valid


@pytest.mark.asyncio
async def test_undulating_strategy(chest_catalog):
    plan = (await generate(_input(strategy="undulating"), chest_catalog)).plan
    rpes = [w.prescriptions[0].target_rpe for w in plan.weeks[0].workouts]
    assert rpes == [9.0, 8.0, 7.0]
    assert isinstance(plan.weeks[0].workouts[0].prescriptions[0].progression, WaveProgression)
    assert plan.strategy == "undulating"


@pytest.mark.asyncio
async def test_generation_and_seed_recorded(chest_catalog):
    plan = (await generate(_input(seed=11), chest_catalog, generation=3)).plan
    assert plan.generation == 3
    assert plan.seed == 11
