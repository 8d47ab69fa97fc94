"""Logging a day: store the input, resolve its target, score it, store the score.

This is the glue between storage and the pure engine. The engine never sees
the connection; it only receives the DailyLog and the resolved Target.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, timedelta
from typing import Optional

from metatrace.db.connection import savepoint
from metatrace.engine.models import DailyLog, Target
from metatrace.engine.scoring import score, score_details
from metatrace.engine.targets import (
    NEW_USER_DEFAULTS,
    SCORER_DEFAULTS,
    NeedsCreation,
    TargetDefaults,
    build_first_target,
    resolve_target,
)
from metatrace.tracking.models import LogOutcome, Protocol, SimulationDefaults
from metatrace.tracking.queries import (
    DailyInputQueries,
    LedgerQueries,
    ProtocolQueries,
    TargetQueries,
)

logger = logging.getLogger(__name__)

_SAVEPOINT = "log_daily_metrics"


def ensure_active_protocol(
    conn: sqlite3.Connection,
    user_id: str,
    initial_weight_kg: Optional[float],
    today: date,
) -> Protocol:
    """Return the user's ACTIVE protocol, creating a FAT_LOSS one if missing."""
    protocol = ProtocolQueries.get_active(conn, user_id)
    if protocol is not None:
        return protocol

    protocol = ProtocolQueries.create(
        conn,
        Protocol(
            protocol_id=None,
            user_id=user_id,
            start_date=today,
            status="ACTIVE",
            goal_type="FAT_LOSS",
            initial_weight_kg=initial_weight_kg,
        ),
    )
    logger.info("Created protocol %s for user %s", protocol.protocol_id, user_id)
    return protocol


def log_daily_metrics(
    conn: sqlite3.Connection,
    user_id: str,
    log: DailyLog,
    *,
    scoring_defaults: TargetDefaults = SCORER_DEFAULTS,
    creation_defaults: TargetDefaults = NEW_USER_DEFAULTS,
    today: Optional[date] = None,
) -> LogOutcome:
    """Store a day's log and its score.

    Re-logging a date replaces both the input and its score. A user without
    a protocol gets a FAT_LOSS protocol, and a protocol without targets gets
    a week-1 target starting today.

    Args:
        conn: Open database connection
        user_id: Identity supplied by the caller
        log: The day's metrics
        scoring_defaults: Target values used if nothing can be resolved
        creation_defaults: Values for an auto-created first target
        today: Date used for auto-created records (default: today)

    Returns:
        LogOutcome with score, label and detail payload, or a failure
        message if storage failed. Nothing is written on failure.

    Raises:
        InvalidTargetError: If the resolved target has a zero goal
    """
    if today is None:
        today = date.today()

    try:
        with savepoint(conn, _SAVEPOINT):
            input_id = DailyInputQueries.upsert_input(conn, user_id, log)
            protocol = ensure_active_protocol(conn, user_id, log.weight_kg, today)

            resolution = resolve_target(
                TargetQueries.get_targets(conn, protocol.protocol_id),  # type: ignore
                log.log_date,
                defaults=scoring_defaults,
                creation_defaults=creation_defaults,
            )
            if isinstance(resolution, NeedsCreation):
                first = build_first_target(today, resolution.defaults)
                TargetQueries.add_target(conn, protocol.protocol_id, first)  # type: ignore
                logger.info("Created week 1 target for protocol %s", protocol.protocol_id)
                resolution = resolve_target([first], log.log_date, defaults=scoring_defaults)

            target = resolution.target
            result = score(log, target)

            LedgerQueries.upsert_entry(conn, input_id, log.log_date, result)
    except sqlite3.Error as e:
        logger.error("Failed to log %s for user %s: %s", log.log_date, user_id, e)
        return LogOutcome(success=False, message=str(e) or "Failed to log")

    logger.debug(
        "Scored %s for user %s: %d (%s)",
        log.log_date,
        user_id,
        result.score,
        result.label.value,
    )

    return LogOutcome(
        success=True,
        score=result.score,
        label=result.label.value,
        details=score_details(log, target, result),
    )


def update_protocol(
    conn: sqlite3.Connection,
    user_id: str,
    goal_type: str,
    goal_weight_kg: Optional[float] = None,
    goal_bodyfat_pct: Optional[float] = None,
    initial_weight_kg: Optional[float] = None,
    initial_bodyfat_pct: Optional[float] = None,
    today: Optional[date] = None,
) -> Protocol:
    """Set goals on the user's ACTIVE protocol, creating it if needed."""
    protocol = ProtocolQueries.get_active(conn, user_id)

    if protocol is None:
        protocol = Protocol(
            protocol_id=None,
            user_id=user_id,
            start_date=today or date.today(),
            goal_type=goal_type,
            goal_weight_kg=goal_weight_kg,
            goal_bodyfat_pct=goal_bodyfat_pct,
            initial_weight_kg=initial_weight_kg,
            initial_bodyfat_pct=initial_bodyfat_pct,
        )
        return ProtocolQueries.create(conn, protocol)

    updated = Protocol(
        protocol_id=protocol.protocol_id,
        user_id=protocol.user_id,
        start_date=protocol.start_date,
        status=protocol.status,
        goal_type=goal_type,
        goal_weight_kg=goal_weight_kg,
        goal_bodyfat_pct=goal_bodyfat_pct,
        initial_weight_kg=initial_weight_kg,
        initial_bodyfat_pct=initial_bodyfat_pct,
        target_end_date=protocol.target_end_date,
    )
    ProtocolQueries.update(conn, updated)
    return updated


def issue_target(
    conn: sqlite3.Connection,
    user_id: str,
    calories: float,
    protein: float,
    hydration_l: float,
    start: date,
    days: int = 7,
    week_number: Optional[int] = None,
    steps: Optional[int] = None,
) -> Target:
    """Add a target to the user's ACTIVE protocol.

    The target covers `days` dates starting at `start`, both ends inclusive,
    so consecutive 7-day weeks do not overlap. The week number defaults to
    one past the latest stored week.

    Raises:
        ValueError: If days is less than 1 or the user has no active protocol
    """
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")

    protocol = ProtocolQueries.get_active(conn, user_id)
    if protocol is None:
        raise ValueError(f"No active protocol for user '{user_id}'")

    if week_number is None:
        latest = TargetQueries.get_latest_target(conn, protocol.protocol_id)  # type: ignore
        week_number = latest.week_number + 1 if latest else 1

    target = Target(
        daily_calories_target=calories,
        daily_protein_target=protein,
        hydration_target_l=hydration_l,
        start_date=start,
        end_date=start + timedelta(days=days - 1),
        week_number=week_number,
        daily_steps_target=steps,
    )
    target.validate()
    TargetQueries.add_target(conn, protocol.protocol_id, target)  # type: ignore
    return target


def simulation_defaults(
    conn: sqlite3.Connection,
    user_id: str,
    activity_kcal: float,
    weeks: int,
    fallback_calories: float = SCORER_DEFAULTS.daily_calories_target,
) -> SimulationDefaults:
    """Starting values for a simulation from the user's stored data.

    Weight and body fat come from the latest log, falling back to the
    protocol's initial values. Calories come from the latest target.
    """
    latest_log = DailyInputQueries.get_latest_input(conn, user_id)
    protocol = ProtocolQueries.get_active(conn, user_id)

    weight = latest_log.weight_kg if latest_log else None
    body_fat = latest_log.body_fat_pct if latest_log else None
    if protocol is not None:
        if weight is None:
            weight = protocol.initial_weight_kg
        if body_fat is None:
            body_fat = protocol.initial_bodyfat_pct

    calories = fallback_calories
    if protocol is not None:
        latest = TargetQueries.get_latest_target(conn, protocol.protocol_id)  # type: ignore
        if latest is not None:
            calories = latest.daily_calories_target

    return SimulationDefaults(
        start_weight_kg=weight,
        start_bf_pct=body_fat,
        daily_calories=calories,
        daily_activity_burn_kcal=activity_kcal,
        weeks=weeks,
    )
