"""CLI interface using Typer."""

from __future__ import annotations

import json
from datetime import date
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from metatrace.config import get_settings
from metatrace.db import get_db

app = typer.Typer(
    help="Daily execution scoring and body-composition trajectory simulation",
    no_args_is_help=True,
)
console = Console()

# Subcommand groups
protocol_app = typer.Typer(help="Manage goal protocol (goal weight / body fat)")
target_app = typer.Typer(help="Manage daily calorie, protein and hydration targets")

app.add_typer(protocol_app, name="protocol")
app.add_typer(target_app, name="target")

DEFAULT_USER = "local"

LABEL_STYLES = {
    "OPTIMAL": "green",
    "ON_TRACK": "blue",
    "AT_RISK": "yellow",
    "OFF_TRACK": "red",
}

BAND_STYLES = {
    "strong": "green",
    "moderate": "blue",
    "weak": "red",
}


# ============================================================================
# Helpers
# ============================================================================


def output_json(response: dict, file=None) -> None:
    """Output JSON response to stdout or file."""
    json_str = json.dumps(response, indent=2, default=str)
    if file:
        file.write(json_str)
    else:
        print(json_str)


def ensure_tables() -> None:
    """Create the tracking tables on first use."""
    get_db().ensure_schema()


def parse_date(date_str: Optional[str]) -> date:
    """Parse YYYY-MM-DD, defaulting to today."""
    if not date_str:
        return date.today()
    try:
        return date.fromisoformat(date_str)
    except ValueError:
        console.print(f"[red]Invalid date '{date_str}', expected YYYY-MM-DD[/red]")
        raise typer.Exit(1)


def fail(command: str, message: str, json_output: bool, suggestion: Optional[str] = None) -> NoReturn:
    """Report an error and exit with status 1."""
    if json_output:
        response = {"success": False, "command": command, "errors": [message]}
        if suggestion:
            response["suggestions"] = [suggestion]
        output_json(response)
    else:
        console.print(f"[red]{message}[/red]")
        if suggestion:
            console.print(suggestion)
    raise typer.Exit(1)


def styled_label(label: str) -> str:
    style = LABEL_STYLES.get(label, "white")
    return f"[{style}]{label.replace('_', ' ')}[/{style}]"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Configure logging before any command runs."""
    from metatrace.logging_setup import configure_logging

    configure_logging(get_settings().logging.level, verbose=verbose)


@protocol_app.callback()
def protocol_callback() -> None:
    """Ensure tracking tables exist before any protocol command."""
    ensure_tables()


@target_app.callback()
def target_callback() -> None:
    """Ensure tracking tables exist before any target command."""
    ensure_tables()


# ============================================================================
# Engine Commands (no storage)
# ============================================================================


@app.command("score")
def score_cmd(
    weight: float = typer.Option(..., "--weight", "-w", help="Weight in kg"),
    calories: int = typer.Option(..., "--calories", "-c", help="Calories consumed"),
    protein: int = typer.Option(..., "--protein", "-p", help="Protein consumed (g)"),
    hydration: float = typer.Option(..., "--hydration", help="Fluid intake (L)"),
    activity: int = typer.Option(0, "--activity", "-a", help="Active calories burned"),
    training: bool = typer.Option(False, "--training/--no-training", help="Training completed"),
    sleep: bool = typer.Option(False, "--sleep/--no-sleep", help="Sleep was adequate"),
    target_calories: Optional[float] = typer.Option(
        None, "--target-calories", help="Calorie target (default from config)"
    ),
    target_protein: Optional[float] = typer.Option(
        None, "--target-protein", help="Protein target in g (default from config)"
    ),
    target_hydration: Optional[float] = typer.Option(
        None, "--target-hydration", help="Hydration target in L (default from config)"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Score a single day against a target without storing anything."""
    from metatrace.engine.models import DailyLog, Target
    from metatrace.engine.scoring import score, score_details

    defaults = get_settings().scoring_defaults

    try:
        log = DailyLog(
            log_date=date.today(),
            weight_kg=weight,
            calories_consumed=calories,
            protein_consumed_g=protein,
            hydration_liters=hydration,
            active_calories_burned=activity,
            training_completed=training,
            sleep_adequate=sleep,
        )
        target = Target(
            daily_calories_target=target_calories if target_calories is not None else defaults.calories,
            daily_protein_target=target_protein if target_protein is not None else defaults.protein,
            hydration_target_l=target_hydration if target_hydration is not None else defaults.hydration_l,
        )
        result = score(log, target)
    except ValueError as e:
        fail("score", str(e), json_output)

    details = score_details(log, target, result)

    if json_output:
        output_json({
            "success": True,
            "command": "score",
            "data": {
                "score": result.score,
                "label": result.label.value,
                "breakdown": result.breakdown(),
                "deficit_adherence_pct": round(result.deficit_adherence_pct, 1),
                **details,
            },
            "human_summary": f"Score {result.score} ({result.label.display}), TDEE {result.calculated_tdee} kcal",
        })
    else:
        console.print(f"[bold]Execution score: {result.score}[/bold] {styled_label(result.label.value)}")
        table = Table(show_header=True)
        table.add_column("Component", style="cyan")
        table.add_column("Points", justify="right")
        for name, points in result.breakdown().items():
            table.add_row(name.capitalize(), str(points))
        console.print(table)
        console.print(f"  TDEE: {result.calculated_tdee} kcal/day")
        console.print(f"  Net deficit: {result.net_deficit:+d} kcal")
        console.print(f"  Deficit attainment: {result.deficit_adherence_pct:.0f}%")
        console.print(
            f"  Calories: {details['cal_achievement_pct']}% of target, "
            f"protein: {details['protein_achievement_pct']}% of target"
        )


@app.command("simulate")
def simulate_cmd(
    weight: Optional[float] = typer.Option(None, "--weight", "-w", help="Starting weight in kg"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", "-b", help="Starting body fat %"),
    calories: Optional[float] = typer.Option(None, "--calories", "-c", help="Daily calories"),
    activity: Optional[float] = typer.Option(None, "--activity", "-a", help="Daily sports burn (kcal)"),
    weeks: Optional[int] = typer.Option(None, "--weeks", help="Horizon in weeks (4-52)"),
    goal_weight: Optional[float] = typer.Option(None, "--goal-weight", help="Report week goal is reached"),
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID for stored defaults"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Project weight and body fat under a sustained intake and activity plan.

    Missing inputs are filled from the latest stored log and target.
    """
    from metatrace.engine.simulation import simulate, summarize_trajectory, weeks_to_goal_weight
    from metatrace.tracking.ledger import simulation_defaults

    settings = get_settings()

    if weight is None or body_fat is None or calories is None:
        ensure_tables()
        with get_db().get_connection() as conn:
            defaults = simulation_defaults(
                conn,
                user_id,
                activity_kcal=settings.simulation.activity_kcal,
                weeks=settings.simulation.weeks,
                fallback_calories=settings.scoring_defaults.calories,
            )
        weight = weight if weight is not None else defaults.start_weight_kg
        body_fat = body_fat if body_fat is not None else defaults.start_bf_pct
        calories = calories if calories is not None else defaults.daily_calories

    if weight is None:
        fail("simulate", "Starting weight unknown", json_output, "Pass --weight or log a day first")
    if body_fat is None:
        fail("simulate", "Starting body fat unknown", json_output, "Pass --body-fat")

    activity = activity if activity is not None else settings.simulation.activity_kcal
    weeks = weeks if weeks is not None else settings.simulation.weeks

    try:
        points = simulate(weight, body_fat, calories, activity, weeks)  # type: ignore
    except ValueError as e:
        fail("simulate", str(e), json_output)

    summary = summarize_trajectory(points)
    goal_week = weeks_to_goal_weight(points, goal_weight) if goal_weight is not None else None

    if json_output:
        output_json({
            "success": True,
            "command": "simulate",
            "data": {
                "inputs": {
                    "start_weight_kg": weight,
                    "start_bf_pct": body_fat,
                    "daily_calories": calories,
                    "daily_activity_burn_kcal": activity,
                    "weeks": weeks,
                },
                "points": [
                    {
                        "day": p.day,
                        "date": p.point_date.isoformat(),
                        "weight_kg": round(p.weight_kg, 1),
                        "body_fat_pct": round(p.body_fat_pct, 1),
                        "lean_mass_kg": round(p.lean_mass_kg, 1),
                    }
                    for p in points
                ],
                "weight_lost_kg": round(summary.weight_lost_kg, 1),
                "body_fat_lost_pct": round(summary.body_fat_lost_pct, 1),
                "weekly_rate_kg": round(summary.weekly_rate_kg, 2),
                "goal_weight_kg": goal_weight,
                "weeks_to_goal": goal_week,
            },
            "human_summary": (
                f"{summary.weight_lost_kg:.1f} kg and {summary.body_fat_lost_pct:.1f} "
                f"body-fat points over {weeks} weeks"
            ),
        })
        return

    table = Table(title=f"Projected Trajectory ({weeks} weeks)")
    table.add_column("Week", justify="right", style="cyan")
    table.add_column("Date")
    table.add_column("Weight (kg)", justify="right")
    table.add_column("Body Fat (%)", justify="right")
    table.add_column("Lean (kg)", justify="right")

    for p in points:
        table.add_row(
            str(p.day // 7),
            p.point_date.strftime("%b %d"),
            f"{p.weight_kg:.1f}",
            f"{p.body_fat_pct:.1f}",
            f"{p.lean_mass_kg:.1f}",
        )

    console.print(table)
    console.print(f"[bold]Projected loss:[/bold] {summary.weight_lost_kg:.1f} kg")
    console.print(f"[bold]Body fat change:[/bold] {-summary.body_fat_lost_pct:+.1f} points")
    if goal_weight is not None:
        if goal_week is None:
            console.print(f"[yellow]Goal of {goal_weight:.1f} kg not reached within {weeks} weeks[/yellow]")
        else:
            console.print(f"[green]Goal of {goal_weight:.1f} kg reached by week {goal_week}[/green]")
    console.print("[dim]Assumes an 80/20 fat-to-lean loss ratio; BMR adapts as weight falls.[/dim]")


# ============================================================================
# Daily Logging Commands
# ============================================================================


@app.command("log")
def log_cmd(
    weight: float = typer.Option(..., "--weight", "-w", help="Weight in kg"),
    calories: int = typer.Option(..., "--calories", "-c", help="Calories consumed"),
    protein: int = typer.Option(..., "--protein", "-p", help="Protein consumed (g)"),
    hydration: float = typer.Option(..., "--hydration", help="Fluid intake (L)"),
    activity: int = typer.Option(0, "--activity", "-a", help="Active calories burned"),
    training: bool = typer.Option(False, "--training/--no-training", help="Training completed"),
    sleep: bool = typer.Option(False, "--sleep/--no-sleep", help="Sleep was adequate"),
    body_fat: Optional[float] = typer.Option(None, "--body-fat", "-b", help="Body fat %"),
    date_str: Optional[str] = typer.Option(
        None, "--date", "-d", help="Date (YYYY-MM-DD, default: today)"
    ),
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Log a day's metrics and store its execution score."""
    from metatrace.engine.models import DailyLog
    from metatrace.tracking.ledger import log_daily_metrics

    ensure_tables()
    settings = get_settings()
    log_date = parse_date(date_str)

    try:
        log = DailyLog(
            log_date=log_date,
            weight_kg=weight,
            body_fat_pct=body_fat,
            calories_consumed=calories,
            protein_consumed_g=protein,
            hydration_liters=hydration,
            active_calories_burned=activity,
            training_completed=training,
            sleep_adequate=sleep,
        )
        with get_db().get_connection() as conn:
            outcome = log_daily_metrics(
                conn,
                user_id,
                log,
                scoring_defaults=settings.scoring_defaults.to_defaults(),
                creation_defaults=settings.new_user_target.to_defaults(),
            )
    except ValueError as e:
        fail("log", str(e), json_output)

    if not outcome.success:
        fail("log", outcome.message or "Failed to log", json_output)

    details = outcome.details
    if json_output:
        output_json({
            "success": True,
            "command": "log",
            "data": {"date": log_date.isoformat(), **outcome.to_dict()},
            "human_summary": f"Logged {log_date}: score {outcome.score} ({outcome.label})",
        })
    else:
        console.print(f"[green]Logged:[/green] {log_date}")
        console.print(f"[bold]Score: {outcome.score}[/bold] {styled_label(outcome.label or '')}")
        console.print(f"  TDEE: {details['tdee']} kcal, deficit: {details['deficit']:+d} kcal")
        console.print(
            f"  Calories: {details['cal_achievement_pct']}% of {details['goal_calories']:.0f}, "
            f"protein: {details['protein_achievement_pct']}% of {details['goal_protein']:.0f} g"
        )


@app.command("history")
def history_cmd(
    days: int = typer.Option(30, "--days", "-d", min=1, help="Number of entries to show"),
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List stored daily scores, newest first."""
    from metatrace.engine.scoring import adherence_band
    from metatrace.tracking.queries import LedgerQueries

    ensure_tables()
    with get_db().get_connection() as conn:
        history = LedgerQueries.get_history(conn, user_id, days=days)

    if not history:
        if json_output:
            output_json({"success": True, "command": "history", "data": {"entries": []}, "human_summary": "No entries"})
        else:
            console.print("No metabolic data recorded in history.")
        return

    if json_output:
        output_json({
            "success": True,
            "command": "history",
            "data": {
                "entries": [
                    {
                        "date": e.date.isoformat(),
                        "weight_kg": e.weight_kg,
                        "calories": e.calories_consumed,
                        "protein": e.protein_consumed,
                        "tdee": e.calculated_tdee,
                        "net_deficit": e.net_deficit,
                        "deficit_adherence_pct": round(e.deficit_adherence_pct),
                        "score": e.execution_score,
                        "label": e.execution_label,
                    }
                    for e in history
                ]
            },
            "human_summary": f"{len(history)} entries",
        })
        return

    table = Table(title=f"History (last {days} entries)")
    table.add_column("Date", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Deficit", justify="right")
    table.add_column("Attainment", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Label")

    for entry in history:
        band_style = BAND_STYLES[adherence_band(entry.deficit_adherence_pct)]
        weight = f"{entry.weight_kg:.1f}" if entry.weight_kg is not None else "-"
        deficit = (
            f"[green]-{entry.net_deficit}[/green]" if entry.net_deficit > 0
            else f"[red]+{abs(entry.net_deficit)}[/red]"
        )
        table.add_row(
            entry.date.strftime("%b %d, %Y"),
            weight,
            deficit,
            f"[{band_style}]{round(entry.deficit_adherence_pct)}%[/{band_style}]",
            str(entry.execution_score),
            styled_label(entry.execution_label),
        )

    console.print(table)


@app.command("status")
def status_cmd(
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show latest score, weight progress and current targets."""
    from metatrace.tracking.diagnostics import format_status_report, generate_status_report

    ensure_tables()
    with get_db().get_connection() as conn:
        report = generate_status_report(conn, user_id)

    if report is None:
        fail(
            "status",
            "No active protocol found",
            json_output,
            "Set one with: metatrace protocol set --goal-weight 75",
        )

    if json_output:
        entry = report.latest_entry
        output_json({
            "success": True,
            "command": "status",
            "data": {
                "label": entry.execution_label if entry else None,
                "score": entry.execution_score if entry else 0,
                "start_weight_kg": report.start_weight_kg,
                "current_weight_kg": report.current_weight_kg,
                "goal_weight_kg": report.goal_weight_kg,
                "weight_progress_pct": round(report.weight_progress_pct, 1),
                "current_bodyfat_pct": report.current_bodyfat_pct,
                "target_deficit": report.target_deficit,
                "target_protein": entry.target_protein if entry else None,
                "has_goal": report.protocol.has_goal,
            },
            "human_summary": (
                f"{entry.execution_label} ({entry.execution_score})" if entry else "No data"
            ),
        })
    else:
        console.print(format_status_report(report))


# ============================================================================
# Protocol Commands
# ============================================================================


@protocol_app.command("show")
def protocol_show(
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show the active protocol."""
    from metatrace.tracking.queries import ProtocolQueries

    with get_db().get_connection() as conn:
        protocol = ProtocolQueries.get_active(conn, user_id)

    if protocol is None:
        fail("protocol show", "No active protocol found", json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "protocol show",
            "data": {
                "protocol_id": protocol.protocol_id,
                "status": protocol.status,
                "goal_type": protocol.goal_type,
                "start_date": protocol.start_date.isoformat(),
                "initial_weight_kg": protocol.initial_weight_kg,
                "initial_bodyfat_pct": protocol.initial_bodyfat_pct,
                "goal_weight_kg": protocol.goal_weight_kg,
                "goal_bodyfat_pct": protocol.goal_bodyfat_pct,
            },
            "human_summary": f"{protocol.goal_type} protocol since {protocol.start_date}",
        })
    else:
        console.print(f"[bold]Protocol (ID: {protocol.protocol_id})[/bold]")
        console.print(f"  Status: {protocol.status}")
        console.print(f"  Goal: {protocol.goal_type}")
        console.print(f"  Started: {protocol.start_date}")
        if protocol.initial_weight_kg is not None:
            console.print(f"  Start weight: {protocol.initial_weight_kg} kg")
        if protocol.initial_bodyfat_pct is not None:
            console.print(f"  Start body fat: {protocol.initial_bodyfat_pct}%")
        if protocol.goal_weight_kg is not None:
            console.print(f"  Goal weight: {protocol.goal_weight_kg} kg")
        if protocol.goal_bodyfat_pct is not None:
            console.print(f"  Goal body fat: {protocol.goal_bodyfat_pct}%")


@protocol_app.command("set")
def protocol_set(
    goal_type: str = typer.Option("FAT_LOSS", "--goal-type", help="FAT_LOSS, RECOMP or GAIN"),
    goal_weight: Optional[float] = typer.Option(None, "--goal-weight", help="Goal weight in kg"),
    goal_body_fat: Optional[float] = typer.Option(None, "--goal-body-fat", help="Goal body fat %"),
    start_weight: Optional[float] = typer.Option(None, "--start-weight", help="Starting weight in kg"),
    start_body_fat: Optional[float] = typer.Option(None, "--start-body-fat", help="Starting body fat %"),
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Create or update the active protocol's goals."""
    from metatrace.tracking.ledger import update_protocol

    try:
        with get_db().get_connection() as conn:
            protocol = update_protocol(
                conn,
                user_id,
                goal_type=goal_type.upper(),
                goal_weight_kg=goal_weight,
                goal_bodyfat_pct=goal_body_fat,
                initial_weight_kg=start_weight,
                initial_bodyfat_pct=start_body_fat,
            )
    except ValueError as e:
        fail("protocol set", str(e), json_output)

    if json_output:
        output_json({
            "success": True,
            "command": "protocol set",
            "data": {"protocol_id": protocol.protocol_id, "goal_type": protocol.goal_type},
            "human_summary": "Protocol updated",
        })
    else:
        console.print("[green]Protocol updated[/green]")


# ============================================================================
# Target Commands
# ============================================================================


@target_app.command("add")
def target_add(
    calories: float = typer.Option(..., "--calories", "-c", help="Daily calorie target"),
    protein: float = typer.Option(..., "--protein", "-p", help="Daily protein target (g)"),
    hydration: float = typer.Option(3.0, "--hydration", help="Daily hydration target (L)"),
    start_str: Optional[str] = typer.Option(None, "--start", help="Start date (default: today)"),
    days: int = typer.Option(7, "--days", min=1, help="Number of days the target covers"),
    week: Optional[int] = typer.Option(None, "--week", help="Week number (default: next)"),
    steps: Optional[int] = typer.Option(None, "--steps", help="Daily steps target"),
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Add a target to the active protocol."""
    from metatrace.tracking.ledger import issue_target

    start = parse_date(start_str)

    try:
        with get_db().get_connection() as conn:
            target = issue_target(
                conn,
                user_id,
                calories=calories,
                protein=protein,
                hydration_l=hydration,
                start=start,
                days=days,
                week_number=week,
                steps=steps,
            )
    except ValueError as e:
        fail(
            "target add",
            str(e),
            json_output,
            "Create a protocol first: metatrace protocol set --goal-weight <kg>",
        )

    if json_output:
        output_json({
            "success": True,
            "command": "target add",
            "data": {
                "week_number": target.week_number,
                "start_date": target.start_date,
                "end_date": target.end_date,
                "daily_calories_target": target.daily_calories_target,
                "daily_protein_target": target.daily_protein_target,
                "hydration_target_l": target.hydration_target_l,
            },
            "human_summary": f"Week {target.week_number}: {calories:.0f} kcal, {protein:.0f} g protein",
        })
    else:
        console.print(
            f"[green]Added week {target.week_number}:[/green] {calories:.0f} kcal, "
            f"{protein:.0f} g protein, {hydration:.1f} L ({target.start_date} to {target.end_date})"
        )


@target_app.command("list")
def target_list(
    user_id: str = typer.Option(DEFAULT_USER, "--user", help="User ID"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """List targets of the active protocol."""
    from metatrace.tracking.queries import ProtocolQueries, TargetQueries

    with get_db().get_connection() as conn:
        protocol = ProtocolQueries.get_active(conn, user_id)
        targets = TargetQueries.get_targets(conn, protocol.protocol_id) if protocol else []  # type: ignore

    if json_output:
        output_json({
            "success": True,
            "command": "target list",
            "data": {
                "targets": [
                    {
                        "week_number": t.week_number,
                        "start_date": t.start_date,
                        "end_date": t.end_date,
                        "daily_calories_target": t.daily_calories_target,
                        "daily_protein_target": t.daily_protein_target,
                        "hydration_target_l": t.hydration_target_l,
                        "daily_steps_target": t.daily_steps_target,
                    }
                    for t in targets
                ]
            },
            "human_summary": f"{len(targets)} targets",
        })
        return

    if not targets:
        console.print("No targets found")
        return

    table = Table(title="Targets")
    table.add_column("Week", justify="right", style="cyan")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Calories", justify="right")
    table.add_column("Protein (g)", justify="right")
    table.add_column("Hydration (L)", justify="right")

    for t in targets:
        table.add_row(
            str(t.week_number),
            str(t.start_date),
            str(t.end_date),
            f"{t.daily_calories_target:.0f}",
            f"{t.daily_protein_target:.0f}",
            f"{t.hydration_target_l:.1f}",
        )

    console.print(table)


if __name__ == "__main__":
    app()
