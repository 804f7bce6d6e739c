"""JSON plan documents used at the storage and sync boundaries.

Document layout (current schema)::

    {
      "_schemaVersion": 2,
      "id": "...", "createdAt": "...", "startDate": "2026-03-02",
      "weeks": [{"index": 0, "sessions": [
        {"id": "...", "name": "Week 1 Day 1", "day": "monday", "date": "2026-03-02",
         "blocks": [{"id": "...", "exercise": "barbell_bench_press", "sets": 4,
                     "reps": [8, 12], "rpe": 9.0,
                     "progression": {"linear": {"start": 0.0, "increment": 2.5}}}]}]}],
      "focus": "chest", "strategy": "linear", "deload": false, "seed": 0, "generation": 0
    }

Documents without ``_schemaVersion`` are version 1: no start date, no
session/block ids, names, or dates. ``migrate_document`` upgrades them before
they are decoded.
"""

from __future__ import annotations

import copy
import json
import uuid
from datetime import date, datetime, timedelta
from typing import Any

from pydantic import ValidationError

from .errors import PlanDocumentError
from .models import (
    DoubleProgression,
    ExercisePrescription,
    LinearProgression,
    MesocyclePlan,
    ProgressionRule,
    WaveProgression,
    WeekPlan,
    WorkoutPlan,
    merge_duplicate_prescriptions,
    monday_of,
    stable_uuid,
    workout_name,
)

SCHEMA_VERSION = 2
SCHEMA_VERSION_KEY = "_schemaVersion"

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


# --- Encoding ---


def _encode_progression(rule: ProgressionRule) -> dict[str, Any]:
    if isinstance(rule, LinearProgression):
        return {"linear": {"start": rule.start, "increment": rule.increment}}
    if isinstance(rule, DoubleProgression):
        return {
            "doubleProgression": {
                "startReps": rule.start_reps,
                "endReps": rule.end_reps,
                "loadIncrement": rule.load_increment,
            }
        }
    if isinstance(rule, WaveProgression):
        return {"wave": {"waveSize": rule.wave_size, "increment": rule.increment}}
    raise TypeError(f"unsupported progression rule: {type(rule).__name__}")


def _encode_block(prescription: ExercisePrescription) -> dict[str, Any]:
    block: dict[str, Any] = {
        "id": str(prescription.id),
        "exercise": prescription.exercise_id,
        "sets": prescription.sets,
        "reps": [prescription.rep_range.min, prescription.rep_range.max],
        "rpe": prescription.target_rpe,
        "progression": _encode_progression(prescription.progression),
    }
    if prescription.notes is not None:
        block["notes"] = prescription.notes
    return block


def _encode_session(workout: WorkoutPlan) -> dict[str, Any]:
    return {
        "id": str(workout.id),
        "name": workout.name,
        "day": WEEKDAYS[workout.day_of_week],
        "date": workout.date.isoformat() if workout.date else None,
        "blocks": [_encode_block(p) for p in workout.prescriptions],
    }


def plan_to_document(plan: MesocyclePlan) -> dict[str, Any]:
    return {
        SCHEMA_VERSION_KEY: SCHEMA_VERSION,
        "id": str(plan.id),
        "createdAt": plan.created_at.isoformat(),
        "startDate": plan.start_date.isoformat(),
        "weeks": [
            {"index": week.index, "sessions": [_encode_session(w) for w in week.workouts]}
            for week in plan.weeks
        ],
        "focus": plan.focus,
        "strategy": plan.strategy,
        "deload": plan.deload,
        "seed": plan.seed,
        "generation": plan.generation,
    }


def dumps(plan: MesocyclePlan, *, indent: int | None = 2) -> str:
    return json.dumps(plan_to_document(plan), indent=indent, ensure_ascii=False)


# --- Migration ---


def _weekday_index(day: Any, *, where: str) -> int:
    if not isinstance(day, str) or day.strip().lower() not in WEEKDAYS:
        raise PlanDocumentError(f"{where}: day must be a weekday name, got {day!r}", field=where)
    return WEEKDAYS.index(day.strip().lower())


def _object(value: Any, *, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise PlanDocumentError(f"{where} must be an object, got {type(value).__name__}", field=where)
    return value


def _items(value: Any, *, where: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PlanDocumentError(f"{where} must be a list, got {type(value).__name__}", field=where)
    return value


def _week_index(week: dict[str, Any], position: int, *, where: str) -> int:
    index = week.get("index", position)
    if isinstance(index, bool) or not isinstance(index, int) or index < 0:
        raise PlanDocumentError(
            f"{where}.index must be a non-negative integer, got {index!r}", field=f"{where}.index"
        )
    return index


def _migrate_v1(doc: dict[str, Any]) -> dict[str, Any]:
    """v1 → v2: anchor the plan on the Monday of its creation week and derive ids/dates."""
    try:
        created = datetime.fromisoformat(str(doc["createdAt"]).replace("Z", "+00:00"))
    except (KeyError, ValueError) as exc:
        raise PlanDocumentError("v1 document needs a valid createdAt", field="createdAt") from exc

    plan_id = doc.get("id") or str(stable_uuid("v1", doc["createdAt"]))
    start = monday_of(created.date())
    doc["id"] = plan_id
    doc["startDate"] = start.isoformat()
    for week_pos, raw_week in enumerate(_items(doc.get("weeks"), where="weeks")):
        week_where = f"weeks[{week_pos}]"
        week = _object(raw_week, where=week_where)
        week_index = _week_index(week, week_pos, where=week_where)
        sessions = _items(week.get("sessions"), where=f"{week_where}.sessions")
        for session_pos, raw_session in enumerate(sessions):
            where = f"{week_where}.sessions[{session_pos}]"
            session = _object(raw_session, where=where)
            weekday = _weekday_index(session.get("day"), where=f"{where}.day")
            session.setdefault("id", str(stable_uuid(plan_id, week_index, weekday)))
            session.setdefault("name", workout_name(week_index, session_pos))
            session.setdefault(
                "date", (start + timedelta(days=7 * week_index + weekday)).isoformat()
            )
            for block_pos, raw_block in enumerate(_items(session.get("blocks"), where=f"{where}.blocks")):
                block = _object(raw_block, where=f"{where}.blocks[{block_pos}]")
                block.setdefault(
                    "id",
                    str(stable_uuid(plan_id, week_index, weekday, block.get("exercise"))),
                )
    doc.setdefault("deload", False)
    doc.setdefault("seed", 0)
    doc.setdefault("generation", 0)
    doc[SCHEMA_VERSION_KEY] = 2
    return doc


_MIGRATIONS = {1: _migrate_v1}


def migrate_document(doc: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of ``doc`` upgraded to ``SCHEMA_VERSION``."""
    if not isinstance(doc, dict):
        raise PlanDocumentError("plan document must be a JSON object")
    migrated = copy.deepcopy(doc)
    version = migrated.get(SCHEMA_VERSION_KEY, 1)
    if not isinstance(version, int) or version < 1 or version > SCHEMA_VERSION:
        raise PlanDocumentError(
            f"unsupported schema version {version!r} (reader supports up to {SCHEMA_VERSION})",
            code="unsupported_schema_version",
            field=SCHEMA_VERSION_KEY,
        )
    while version < SCHEMA_VERSION:
        try:
            migrated = _MIGRATIONS[version](migrated)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise PlanDocumentError(f"migrating schema version {version} failed: {exc}") from exc
        version = migrated[SCHEMA_VERSION_KEY]
    return migrated


# --- Decoding ---


def _decode_progression(raw: Any) -> dict[str, Any]:
    if not isinstance(raw, dict) or len(raw) != 1:
        raise PlanDocumentError(f"progression must hold exactly one rule, got {raw!r}")
    ((kind, params),) = raw.items()
    if not isinstance(params, dict):
        raise PlanDocumentError(f"progression {kind!r} parameters must be an object")
    if kind == "linear":
        return {"kind": "linear", "start": params.get("start", 0.0), "increment": params.get("increment")}
    if kind == "doubleProgression":
        return {
            "kind": "double_progression",
            "start_reps": params.get("startReps"),
            "end_reps": params.get("endReps"),
            "load_increment": params.get("loadIncrement"),
        }
    if kind == "wave":
        return {"kind": "wave", "wave_size": params.get("waveSize"), "increment": params.get("increment")}
    raise PlanDocumentError(f"unknown progression rule {kind!r}", field="progression")


def _decode_block(raw: Any, *, where: str) -> dict[str, Any]:
    block = _object(raw, where=where)
    reps = block.get("reps")
    if not isinstance(reps, list) or len(reps) != 2:
        raise PlanDocumentError(f"reps must be [min, max], got {reps!r}", field="reps")
    return {
        "id": block.get("id"),
        "exercise_id": block.get("exercise"),
        "sets": block.get("sets"),
        "rep_range": {"min": reps[0], "max": reps[1]},
        "target_rpe": block.get("rpe"),
        "progression": _decode_progression(block.get("progression")),
        "notes": block.get("notes"),
    }


def plan_from_document(doc: dict[str, Any]) -> MesocyclePlan:
    """Migrate and decode a plan document; duplicate blocks in a session are merged."""
    current = migrate_document(doc)
    try:
        weeks: list[WeekPlan] = []
        for week_pos, raw_week in enumerate(_items(current.get("weeks"), where="weeks")):
            week_where = f"weeks[{week_pos}]"
            week = _object(raw_week, where=week_where)
            week_index = _week_index(week, week_pos, where=week_where)
            workouts = []
            sessions = _items(week.get("sessions"), where=f"{week_where}.sessions")
            for session_pos, raw_session in enumerate(sessions):
                where = f"{week_where}.sessions[{session_pos}]"
                session = _object(raw_session, where=where)
                blocks = _items(session.get("blocks"), where=f"{where}.blocks")
                prescriptions = [
                    ExercisePrescription.model_validate(
                        _decode_block(block, where=f"{where}.blocks[{block_pos}]")
                    )
                    for block_pos, block in enumerate(blocks)
                ]
                workouts.append(
                    WorkoutPlan(
                        id=uuid.UUID(str(session["id"])),
                        name=session["name"],
                        week=week_index,
                        day_of_week=_weekday_index(session.get("day"), where=f"{where}.day"),
                        date=date.fromisoformat(session["date"]) if session.get("date") else None,
                        prescriptions=merge_duplicate_prescriptions(prescriptions),
                    )
                )
            weeks.append(WeekPlan(index=week_index, workouts=tuple(workouts)))

        return MesocyclePlan(
            id=uuid.UUID(str(current["id"])),
            created_at=datetime.fromisoformat(str(current["createdAt"]).replace("Z", "+00:00")),
            start_date=date.fromisoformat(current["startDate"]),
            weeks=tuple(weeks),
            focus=current.get("focus"),
            strategy=current.get("strategy", "linear"),
            deload=current.get("deload", False),
            seed=current.get("seed", 0),
            generation=current.get("generation", 0),
        )
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        raise PlanDocumentError(
            f"plan document failed validation: {first.get('msg', 'invalid value')}",
            field=location or None,
        ) from exc
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise PlanDocumentError(f"malformed plan document: {exc}") from exc


def loads(text: str) -> MesocyclePlan:
    try:
        doc = json.loads(text)
    except json.JSONDecodeError as exc:
        raise PlanDocumentError(f"plan document is not valid JSON: {exc}") from exc
    return plan_from_document(doc)
