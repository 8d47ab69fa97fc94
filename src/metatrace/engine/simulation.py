"""Forward simulation of weight and body composition under a fixed plan.

The simulation steps one day at a time for `weeks * 7` days. On every 7th day
it records the current state, then applies a week of loss at that day's rate:

    TDEE      = 22 × weight + 10% × intake + 300 + activity
    loss/day  = (TDEE - intake) / 7700
    week loss = 7 × loss/day, split 80% fat / 20% lean

TDEE is recomputed from the simulated weight, so the deficit shrinks as
weight falls. Weight is floored at MIN_WEIGHT_KG and body fat is kept
within [0, 100].
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional, Sequence

from metatrace.engine.energy import calculate_tdee, daily_weight_change_kg
from metatrace.engine.models import SimulationPoint

logger = logging.getLogger(__name__)

DAYS_PER_WEEK = 7
FAT_FRACTION_OF_LOSS = 0.8
LEAN_FRACTION_OF_LOSS = 0.2
MIN_WEIGHT_KG = 0.1

# Horizon the UI offers; other positive values are accepted with a warning
MIN_RECOMMENDED_WEEKS = 4
MAX_RECOMMENDED_WEEKS = 52


@dataclass(frozen=True)
class TrajectorySummary:
    """Headline numbers for a simulated trajectory."""

    weeks: int
    start_weight_kg: float
    final_weight_kg: float
    start_body_fat_pct: float
    final_body_fat_pct: float
    final_lean_mass_kg: float
    weight_lost_kg: float       # positive = loss
    body_fat_lost_pct: float    # percentage points, positive = loss
    weekly_rate_kg: float       # negative = losing


def lean_mass(weight_kg: float, body_fat_pct: float) -> float:
    """Fat-free mass in kg."""
    return weight_kg * (1 - body_fat_pct / 100)


def simulate(
    start_weight_kg: float,
    start_bf_pct: float,
    daily_calories: float,
    daily_activity_burn_kcal: float,
    weeks: int,
    *,
    start_date: Optional[date] = None,
) -> list[SimulationPoint]:
    """Project weight and body fat forward, sampled weekly.

    Args:
        start_weight_kg: Starting weight in kg
        start_bf_pct: Starting body fat percentage
        daily_calories: Sustained daily intake
        daily_activity_burn_kcal: Sustained daily exercise burn
        weeks: Horizon in weeks (4-52 recommended)
        start_date: Calendar date of day 0 (default: today)

    Returns:
        weeks + 1 points ordered by day; the first is the unmodified start

    Raises:
        ValueError: If weeks is not a positive integer, the start weight is
            not positive or the start body fat is outside [0, 100]
    """
    if isinstance(weeks, bool) or not isinstance(weeks, int) or weeks <= 0:
        raise ValueError(f"weeks must be a positive integer, got {weeks!r}")
    if start_weight_kg <= 0:
        raise ValueError(f"start_weight_kg must be positive, got {start_weight_kg}")
    if not 0 <= start_bf_pct <= 100:
        raise ValueError(f"start_bf_pct must be between 0 and 100, got {start_bf_pct}")
    if not MIN_RECOMMENDED_WEEKS <= weeks <= MAX_RECOMMENDED_WEEKS:
        logger.warning(
            "Simulation horizon of %d weeks is outside the recommended %d-%d",
            weeks,
            MIN_RECOMMENDED_WEEKS,
            MAX_RECOMMENDED_WEEKS,
        )

    if start_date is None:
        start_date = date.today()

    weight = start_weight_kg
    body_fat = start_bf_pct
    points: list[SimulationPoint] = []

    for day in range(weeks * DAYS_PER_WEEK + 1):
        if day % DAYS_PER_WEEK != 0:
            continue

        tdee = calculate_tdee(weight, daily_calories, daily_activity_burn_kcal)
        loss_per_day = daily_weight_change_kg(tdee - daily_calories)

        fat_mass = weight * (body_fat / 100)
        points.append(
            SimulationPoint(
                day=day,
                point_date=start_date + timedelta(days=day),
                weight_kg=weight,
                body_fat_pct=body_fat,
                lean_mass_kg=lean_mass(weight, body_fat),
            )
        )

        fat_loss = loss_per_day * FAT_FRACTION_OF_LOSS * DAYS_PER_WEEK
        lean_loss = loss_per_day * LEAN_FRACTION_OF_LOSS * DAYS_PER_WEEK

        weight = max(MIN_WEIGHT_KG, weight - (fat_loss + lean_loss))
        new_fat_mass = max(0.0, fat_mass - fat_loss)
        body_fat = min(100.0, new_fat_mass / weight * 100)

    logger.debug(
        "Simulated %d weeks: %.1f kg -> %.1f kg",
        weeks,
        points[0].weight_kg,
        points[-1].weight_kg,
    )
    return points


def summarize_trajectory(points: Sequence[SimulationPoint]) -> TrajectorySummary:
    """Summarize a simulated trajectory.

    Raises:
        ValueError: If points is empty
    """
    if not points:
        raise ValueError("Cannot summarize an empty trajectory")

    first = points[0]
    last = points[-1]
    weeks = (last.day - first.day) // DAYS_PER_WEEK

    return TrajectorySummary(
        weeks=weeks,
        start_weight_kg=first.weight_kg,
        final_weight_kg=last.weight_kg,
        start_body_fat_pct=first.body_fat_pct,
        final_body_fat_pct=last.body_fat_pct,
        final_lean_mass_kg=last.lean_mass_kg,
        weight_lost_kg=first.weight_kg - last.weight_kg,
        body_fat_lost_pct=first.body_fat_pct - last.body_fat_pct,
        weekly_rate_kg=(last.weight_kg - first.weight_kg) / weeks if weeks else 0.0,
    )


def weeks_to_goal_weight(
    points: Sequence[SimulationPoint],
    goal_weight_kg: float,
) -> Optional[int]:
    """First sampled week at which weight reaches the goal, or None.

    Works in either direction: a goal below the start weight is reached when
    weight falls to it, a goal above when weight rises to it.
    """
    if not points:
        return None

    losing = goal_weight_kg <= points[0].weight_kg
    for point in points:
        reached = (
            point.weight_kg <= goal_weight_kg if losing
            else point.weight_kg >= goal_weight_kg
        )
        if reached:
            return point.day // DAYS_PER_WEEK
    return None
