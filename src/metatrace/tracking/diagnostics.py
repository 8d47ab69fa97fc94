"""Status summaries built from stored protocols, logs and scores."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Optional

from metatrace.tracking.models import LedgerEntry, Protocol
from metatrace.tracking.queries import (
    DailyInputQueries,
    LedgerQueries,
    ProtocolQueries,
)


@dataclass
class StatusReport:
    """Dashboard summary for one user."""

    protocol: Protocol
    latest_entry: Optional[LedgerEntry]
    start_weight_kg: Optional[float]
    current_weight_kg: Optional[float]
    goal_weight_kg: Optional[float]
    weight_progress_pct: float
    current_bodyfat_pct: Optional[float]
    target_deficit: Optional[int]   # TDEE - target calories on the latest day


def weight_progress_pct(start: float, current: float, goal: float) -> float:
    """
    Share of the start-to-goal distance covered so far.

    Returns |(start - current) / (start - goal)| × 100, or 0 when the
    start already equals the goal. Not capped; callers clamp for display.
    """
    if start == goal:
        return 0.0
    return abs((start - current) / (start - goal) * 100)


def generate_status_report(
    conn: sqlite3.Connection,
    user_id: str,
) -> Optional[StatusReport]:
    """Generate a status report, or None if the user has no active protocol."""
    protocol = ProtocolQueries.get_active(conn, user_id)
    if protocol is None:
        return None

    latest_log = DailyInputQueries.get_latest_input(conn, user_id)
    latest_entry = LedgerQueries.get_latest_entry(conn, user_id)

    start_weight = protocol.initial_weight_kg
    current_weight = latest_log.weight_kg if latest_log else start_weight
    goal_weight = protocol.goal_weight_kg

    progress = 0.0
    if start_weight is not None and current_weight is not None and goal_weight is not None:
        progress = weight_progress_pct(start_weight, current_weight, goal_weight)

    current_bf = latest_log.body_fat_pct if latest_log else None
    if current_bf is None:
        current_bf = protocol.initial_bodyfat_pct

    target_deficit = None
    if latest_entry is not None:
        target_deficit = int(latest_entry.calculated_tdee - latest_entry.target_calories)

    return StatusReport(
        protocol=protocol,
        latest_entry=latest_entry,
        start_weight_kg=start_weight,
        current_weight_kg=current_weight,
        goal_weight_kg=goal_weight,
        weight_progress_pct=progress,
        current_bodyfat_pct=current_bf,
        target_deficit=target_deficit,
    )


def format_status_report(report: StatusReport) -> str:
    """Format a status report for terminal display."""
    lines = []

    entry = report.latest_entry
    if entry is not None:
        label = entry.execution_label.replace("_", " ")
        lines.append(f"[bold]Execution:[/bold] {label} (score {entry.execution_score})")
        lines.append(f"  Last logged: {entry.date.isoformat()}")
    else:
        lines.append("[bold]Execution:[/bold] No Data")

    lines.append("")
    lines.append(f"[bold]Protocol:[/bold] {report.protocol.goal_type or 'unset'}")
    if report.current_weight_kg is not None:
        lines.append(f"  Current weight: {report.current_weight_kg:.1f} kg")
    if report.start_weight_kg is not None:
        lines.append(f"  Start weight: {report.start_weight_kg:.1f} kg")
    if report.goal_weight_kg is not None:
        lines.append(f"  Goal weight: {report.goal_weight_kg:.1f} kg")
        lines.append(f"  Progress: {min(report.weight_progress_pct, 100):.0f}%")
    if report.current_bodyfat_pct is not None:
        lines.append(f"  Body fat: {report.current_bodyfat_pct:.1f}%")
        if report.protocol.initial_bodyfat_pct is not None:
            lines.append(f"    (started at {report.protocol.initial_bodyfat_pct:.1f}%)")

    if entry is not None:
        lines.append("")
        lines.append("[bold]Daily targets:[/bold]")
        lines.append(f"  Deficit target: {report.target_deficit} kcal")
        lines.append(f"  Protein target: {entry.target_protein:.0f} g")

    if not report.protocol.has_goal:
        lines.append("")
        lines.append("[yellow]No goal set. Run: metatrace protocol set --goal-weight <kg>[/yellow]")

    return "\n".join(lines)
