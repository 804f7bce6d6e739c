"""Tests for the JSON plan document codec and schema migration."""

from __future__ import annotations

import json
from datetime import date

import pytest

from conftest import plan_of, prescription, workout
from mesoplan.errors import PlanDocumentError
from mesoplan.generator import generate
from mesoplan.models import DoubleProgression, LinearProgression, PlanInput, RepRange, WaveProgression
from mesoplan.serialization import (
    SCHEMA_VERSION,
    dumps,
    loads,
    migrate_document,
    plan_from_document,
    plan_to_document,
)

V1_DOCUMENT = {
    "id": "4b7f9d3e-2a61-4c8e-9f0b-7d5e3a1c2b90",
    "createdAt": "2026-03-04T10:00:00Z",
    "weeks": [
        {
            "index": 0,
            "sessions": [
                {
                    "day": "monday",
                    "blocks": [
                        {
                            "exercise": "barbell_bench_press",
                            "sets": 4,
                            "reps": [8, 12],
                            "rpe": 8,
                            "progression": {"linear": {"start": 100, "increment": 2.5}},
                        }
                    ],
                },
                {
                    "day": "thursday",
                    "blocks": [
                        {
                            "exercise": "cable_fly",
                            "sets": 2,
                            "reps": [10, 15],
                            "rpe": 8,
                            "progression": {"doubleProgression": {"startReps": 10, "endReps": 15, "loadIncrement": 2.5}},
                        },
                        {
                            "exercise": "cable_fly",
                            "sets": 1,
                            "reps": [10, 15],
                            "rpe": 8,
                            "progression": {"doubleProgression": {"startReps": 10, "endReps": 15, "loadIncrement": 2.5}},
                        },
                    ],
                },
            ],
        }
    ],
    "focus": "chest",
    "strategy": "linear",
}


class TestRoundTrip:
    def test_sample_plan(self, sample_plan):
        assert loads(dumps(sample_plan)) == sample_plan

    def test_every_progression_kind_and_notes(self):
        plan = plan_of(
            [
                [
                    workout(
                        0,
                        0,
                        prescription("barbell_bench_press", progression=LinearProgression(start=60, increment=2.5)),
                        prescription(
                            "cable_fly",
                            progression=DoubleProgression(start_reps=10, end_reps=15, load_increment=1.25),
                            notes="slow eccentric",
                        ),
                        prescription("dip", rpe=7.5, progression=WaveProgression(wave_size=3, increment=5)),
                    )
                ]
            ],
            focus="chest",
            strategy="undulating",
            deload=True,
            seed=9,
            generation=4,
        )
        assert loads(dumps(plan)) == plan

    @pytest.mark.asyncio
    async def test_generated_plan(self, library_catalog):
        plan_input = PlanInput.create(
            weeks=3,
            days_per_week=4,
            weekly_volume_targets={"chest": 10, "lats": 10, "quads": 8},
            default_rep_range=RepRange(min=6, max=10),
            deload=True,
        )
        plan = (await generate(plan_input, library_catalog)).plan
        assert loads(dumps(plan)) == plan


def test_document_layout(sample_plan):
    doc = plan_to_document(sample_plan)
    assert doc["_schemaVersion"] == SCHEMA_VERSION
    assert doc["startDate"] == "2026-03-02"
    session = doc["weeks"][0]["sessions"][1]
    assert session["day"] == "wednesday"
    assert session["date"] == "2026-03-04"
    block = session["blocks"][0]
    assert block["exercise"] == "barbell_bench_press"
    assert block["reps"] == [8, 12]
    assert block["progression"] == {"linear": {"start": 0.0, "increment": 2.5}}
    assert "notes" not in block
    json.dumps(doc)


class TestMigration:
    def test_v1_document_upgraded(self):
        doc = migrate_document(V1_DOCUMENT)
        assert doc["_schemaVersion"] == SCHEMA_VERSION
        assert doc["startDate"] == "2026-03-02"
        assert doc["weeks"][0]["sessions"][1]["date"] == "2026-03-05"
        assert "_schemaVersion" not in V1_DOCUMENT

    def test_v1_document_decodes(self):
        plan = plan_from_document(V1_DOCUMENT)
        assert plan.start_date == date(2026, 3, 2)
        monday = plan.workout_on(date(2026, 3, 2))
        assert monday.name == "Week 1 Day 1"
        bench = monday.prescriptions[0]
        assert bench.target_rpe == 8.0
        assert bench.progression == LinearProgression(start=100, increment=2.5)
        assert plan.focus == "chest"
        assert plan.generation == 0
        assert plan.deload is False

    def test_v1_duplicate_blocks_merged(self):
        plan = plan_from_document(V1_DOCUMENT)
        thursday = plan.workout_on(date(2026, 3, 5))
        assert thursday.exercise_ids == ["cable_fly"]
        assert thursday.prescriptions[0].sets == 3

    def test_v1_ids_stable_across_reads(self):
        assert plan_from_document(V1_DOCUMENT) == plan_from_document(V1_DOCUMENT)

    def test_v1_requires_created_at(self):
        doc = {k: v for k, v in V1_DOCUMENT.items() if k != "createdAt"}
        with pytest.raises(PlanDocumentError) as exc_info:
            migrate_document(doc)
        assert exc_info.value.field == "createdAt"

    def test_future_version_rejected(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["_schemaVersion"] = SCHEMA_VERSION + 1
        with pytest.raises(PlanDocumentError) as exc_info:
            plan_from_document(doc)
        assert exc_info.value.code == "unsupported_schema_version"


class TestMalformedDocuments:
    def test_not_json(self):
        with pytest.raises(PlanDocumentError, match="not valid JSON"):
            loads("{weeks: nope")

    def test_not_an_object(self):
        with pytest.raises(PlanDocumentError):
            loads("[1, 2, 3]")

    def test_bad_reps(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["weeks"][0]["sessions"][0]["blocks"][0]["reps"] = [8]
        with pytest.raises(PlanDocumentError, match="reps"):
            plan_from_document(doc)

    def test_unknown_progression(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["weeks"][0]["sessions"][0]["blocks"][0]["progression"] = {"percentage": {"step": 2}}
        with pytest.raises(PlanDocumentError, match="percentage"):
            plan_from_document(doc)

    def test_unknown_day(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["weeks"][0]["sessions"][0]["day"] = "someday"
        with pytest.raises(PlanDocumentError, match="weekday"):
            plan_from_document(doc)

    def test_out_of_range_values_rejected(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["weeks"][0]["sessions"][0]["blocks"][0]["rpe"] = 11
        with pytest.raises(PlanDocumentError) as exc_info:
            plan_from_document(doc)
        assert exc_info.value.code == "invalid_document"

    def test_missing_field(self, sample_plan):
        doc = plan_to_document(sample_plan)
        del doc["startDate"]
        with pytest.raises(PlanDocumentError, match="startDate"):
            plan_from_document(doc)

    @pytest.mark.parametrize(
        "path,value,field",
        [
            ((), ["not-a-week"], "weeks[0]"),
            ((0,), {"index": 0, "sessions": "monday"}, "weeks[0].sessions"),
            ((0, "sessions"), [42], "weeks[0].sessions[0]"),
            ((0, "sessions", 0, "blocks"), ["bench"], "weeks[0].sessions[0].blocks[0]"),
        ],
    )
    def test_nested_values_must_be_objects(self, sample_plan, path, value, field):
        doc = plan_to_document(sample_plan)
        target = doc["weeks"]
        if path:
            *parents, last = path
            for key in parents:
                target = target[key]
            target[last] = value
        else:
            doc["weeks"] = value
        with pytest.raises(PlanDocumentError) as exc_info:
            plan_from_document(doc)
        assert exc_info.value.field == field

    def test_week_index_must_be_integer(self, sample_plan):
        doc = plan_to_document(sample_plan)
        doc["weeks"][0]["index"] = "first"
        with pytest.raises(PlanDocumentError) as exc_info:
            plan_from_document(doc)
        assert exc_info.value.field == "weeks[0].index"

    @pytest.mark.parametrize(
        "weeks",
        [
            "every week",
            [["monday"]],
            [{"index": "0", "sessions": []}],
            [{"index": 0, "sessions": [{"day": "monday", "blocks": ["bench"]}]}],
        ],
    )
    def test_malformed_v1_document(self, weeks):
        doc = {**V1_DOCUMENT, "weeks": weeks}
        with pytest.raises(PlanDocumentError):
            migrate_document(doc)
