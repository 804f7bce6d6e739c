"""CLI interface for the mesoplan periodization engine."""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path

import click

from mesoplan.calendar_view import project, weeks_of
from mesoplan.catalog import InMemoryExerciseCatalog
from mesoplan.config import Config
from mesoplan.errors import MesoplanError, PlanInputError
from mesoplan.exercises import EXERCISES, exercises_targeting, muscle_groups_for_exercises
from mesoplan.generator import generate as generate_plan
from mesoplan.logging import setup_logging
from mesoplan.models import STRATEGIES, MesocyclePlan, PlanInput, RepRange
from mesoplan.muscles import display_name, normalize_muscle
from mesoplan.mutations import move_workout
from mesoplan.presets import EXPERIENCE_VOLUME, PRESETS, preset_input
from mesoplan.progression import describe
from mesoplan.serialization import dumps, loads
from mesoplan.sync import HttpPlanRepository
from mesoplan.validator import validate


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _read_plan(path: Path) -> MesocyclePlan:
    try:
        return loads(path.read_text())
    except MesoplanError as exc:
        _fail(f"{path}: {exc.message}")


def _write_plan(plan: MesocyclePlan, output: Path | None) -> None:
    if output is None:
        click.echo(dumps(plan))
        return
    output.write_text(dumps(plan) + "\n")
    click.echo(f"Wrote plan {plan.id} to {output}", err=True)


def _parse_targets(targets: tuple[str, ...]) -> dict[str, int]:
    parsed: dict[str, int] = {}
    for item in targets:
        muscle, sep, sets = item.partition("=")
        if not sep:
            raise click.BadParameter(f"expected muscle=sets, got {item!r}", param_hint="--target")
        try:
            key = normalize_muscle(muscle)
            parsed[key] = parsed.get(key, 0) + int(sets)
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--target") from exc
    return parsed


@click.group()
def main():
    """Mesocycle planning and periodization engine."""
    try:
        config = Config.from_env()
    except RuntimeError as exc:
        _fail(str(exc))
    setup_logging(config.log_format, config.log_level)


@main.command()
@click.option("--preset", type=click.Choice(list(PRESETS)), help="Use a split template.")
@click.option(
    "--experience",
    type=click.Choice(list(EXPERIENCE_VOLUME)),
    default="intermediate",
    show_default=True,
    help="Experience level for --preset volume.",
)
@click.option("--weeks", type=int, default=4, show_default=True, help="Mesocycle length in weeks.")
@click.option("--days", type=int, help="Training days per week (ignored with --preset).")
@click.option("--target", "targets", multiple=True, help="Weekly sets, e.g. chest=12. Repeatable.")
@click.option("--reps", default="8-12", show_default=True, help="Default rep range.")
@click.option("--ramp", type=float, default=0.05, show_default=True, help="Weekly volume ramp.")
@click.option("--strategy", type=click.Choice(STRATEGIES), default="linear", show_default=True)
@click.option("--deload/--no-deload", default=False, show_default=True, help="Deload the final week.")
@click.option("--focus", type=str, help="Muscle group scheduled first each day.")
@click.option("--seed", type=int, help="Exercise selection seed (default: MESOPLAN_DEFAULT_SEED).")
@click.option("--start-date", type=click.DateTime(formats=["%Y-%m-%d"]), help="First week (moved to Monday).")
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Write the plan JSON to a file.")
def generate(
    preset: str | None,
    experience: str,
    weeks: int,
    days: int | None,
    targets: tuple[str, ...],
    reps: str,
    ramp: float,
    strategy: str,
    deload: bool,
    focus: str | None,
    seed: int | None,
    start_date,
    output: Path | None,
):
    """Generate a mesocycle plan from the built-in exercise library."""
    if preset and targets:
        _fail("Specify either --preset or --target, not both.")
    if not preset and not targets:
        _fail("Specify --preset or at least one --target.")
    if not preset and days is None:
        _fail("--days is required with --target.")

    seed = Config.from_env().default_seed if seed is None else seed
    try:
        rep_range = RepRange.parse(reps)
        common = dict(
            weeks=weeks,
            default_rep_range=rep_range,
            weekly_volume_ramp=ramp,
            strategy=strategy,
            deload=deload,
            focus=focus,
            seed=seed,
        )
        if preset:
            plan_input = preset_input(preset, experience=experience, **common)
        else:
            plan_input = PlanInput.create(
                days_per_week=days, weekly_volume_targets=_parse_targets(targets), **common
            )
    except PlanInputError as exc:
        _fail(f"{exc.message}" + (f" (field: {exc.field})" if exc.field else ""))
    except ValueError as exc:
        _fail(str(exc))

    result = asyncio.run(
        generate_plan(
            plan_input,
            InMemoryExerciseCatalog(),
            start_date=start_date.date() if start_date else None,
        )
    )
    plan = result.plan

    click.echo(
        f"Generated {len(plan.weeks)}-week {plan.strategy} plan starting {plan.start_date}.",
        err=True,
    )
    click.echo(f"  Weekly sets: {plan.weekly_sets()}", err=True)
    covered = sorted(muscle_groups_for_exercises(sorted(plan.exercise_ids())))
    click.echo(f"  Muscles covered: {', '.join(display_name(m) for m in covered)}", err=True)
    for warning in result.warnings:
        click.echo(f"  Warning [{warning.code}]: {warning.message}", err=True)

    _write_plan(plan, output)


@main.command("validate")
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def validate_command(plan_file: Path):
    """Check a plan file against the periodization invariants."""
    plan = _read_plan(plan_file)
    result = validate(plan)
    if result.valid:
        click.echo(f"{plan_file}: valid ({len(plan.weeks)} weeks, sets {plan.weekly_sets()})")
        return
    click.echo(f"{plan_file}: {len(result.violations)} violation(s)", err=True)
    for violation in result.violations:
        where = f"week {violation.week + 1}"
        if violation.day:
            where += f", {violation.day.isoformat()}"
        click.echo(f"  [{violation.invariant}] {where}: {violation.message}", err=True)
    sys.exit(1)


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--details/--no-details", default=True, show_default=True, help="List prescriptions.")
def calendar(plan_file: Path, details: bool):
    """Print the plan as Monday-to-Sunday calendar weeks."""
    plan = _read_plan(plan_file)
    cells = project(plan)
    if not cells:
        click.echo("No scheduled workouts.")
        return
    for row in weeks_of(cells):
        click.echo(f"Week of {row[0].date.isoformat()}")
        for cell in row:
            label = cell.date.strftime("%a %Y-%m-%d")
            if cell.is_rest_day:
                click.echo(f"  {label}  rest")
                continue
            click.echo(f"  {label}  {cell.workout.name} ({cell.workout.total_sets} sets)")
            if details:
                for p in cell.workout.prescriptions:
                    click.echo(
                        f"      {p.exercise_id} {p.sets}x{p.rep_range} @RPE {p.target_rpe:g}"
                        f" [{describe(p.progression)}]"
                    )


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("source", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.argument("destination", type=click.DateTime(formats=["%Y-%m-%d"]))
@click.option("--output", "-o", type=click.Path(path_type=Path), help="Write the edited plan here.")
def move(plan_file: Path, source, destination, output: Path | None):
    """Move the workout on SOURCE to DESTINATION, swapping if DESTINATION is taken."""
    plan = _read_plan(plan_file)
    try:
        plan = move_workout(plan, source.date(), destination.date())
    except MesoplanError as exc:
        _fail(exc.message)
    _write_plan(plan, output)


@main.command()
@click.argument("plan_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def push(plan_file: Path):
    """Upload a plan to the sync service as the active plan."""
    config = Config.from_env()
    if not config.sync_enabled:
        _fail("MESOPLAN_SYNC_URL and MESOPLAN_SYNC_API_KEY must be set.")
    plan = _read_plan(plan_file)
    result = validate(plan)
    if not result.valid:
        _fail(f"{plan_file} has {len(result.violations)} violation(s); run 'mesoplan validate'.")

    async def _push() -> None:
        async with HttpPlanRepository(
            config.sync_url, config.sync_api_key, timeout=config.sync_timeout_seconds
        ) as repository:
            await repository.save(plan)

    try:
        asyncio.run(_push())
    except MesoplanError as exc:
        _fail(exc.message)
    click.echo(f"Pushed plan {plan.id} to {config.sync_url}")


@main.command("list-presets")
def list_presets():
    """List available split templates."""
    for name, preset in PRESETS.items():
        click.echo(f"{name}:")
        click.echo(f"  {preset.description}")
        click.echo(f"  Training: {preset.days_per_week}x/week")
        click.echo(f"  Muscles: {', '.join(display_name(m) for m in preset.muscles)}")
        click.echo(
            "  Weekly sets per muscle: "
            + ", ".join(f"{level} {sets}" for level, sets in EXPERIENCE_VOLUME.items())
        )
        click.echo()


@main.command()
@click.option("--muscle", type=str, help="Only exercises whose primary muscles include this group.")
def exercises(muscle: str | None):
    """List the built-in exercise library."""
    if muscle:
        try:
            pool = exercises_targeting(normalize_muscle(muscle))
        except ValueError as exc:
            _fail(str(exc))
    else:
        pool = sorted(EXERCISES.values(), key=lambda ex: ex.exercise_id)
    for ex in pool:
        muscles = ", ".join(sorted(ex.primary_muscles))
        click.echo(f"{ex.exercise_id:<26} {ex.name:<28} {ex.equipment:<10} {muscles}")
