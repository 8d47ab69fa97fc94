"""Daily execution scoring.

Turns one day's log and the target in force into a 0-100 execution score,
a label, an estimated TDEE and the day's energy ledger. The score is a sum
of independent step-function components:

    Energy     0-35   intake within 5/15/25% of the calorie target
    Protein    0-20   within 10g (20) or 30g (10) of the protein target
    Recovery   0-20   adequate sleep
    Training   0-10   session completed
    Hydration  0-10   within 0.5 L of the hydration target
    Signals    5      flat baseline
"""

from __future__ import annotations

from metatrace.engine.energy import calculate_tdee, round_half_up
from metatrace.engine.models import DailyLog, ExecutionLabel, ScoreResult, Target

# (max relative calorie error, points), checked in order
ENERGY_BRACKETS = (
    (0.05, 35),
    (0.15, 25),
    (0.25, 10),
)

# (grams below target allowed, points), checked in order
PROTEIN_BRACKETS = (
    (10, 20),
    (30, 10),
)

RECOVERY_POINTS = 20
TRAINING_POINTS = 10
HYDRATION_POINTS = 10
HYDRATION_TOLERANCE_L = 0.5
SIGNALS_BASELINE = 5

# Lower bound (inclusive) of each label bracket
LABEL_THRESHOLDS = (
    (90, ExecutionLabel.OPTIMAL),
    (75, ExecutionLabel.ON_TRACK),
    (60, ExecutionLabel.AT_RISK),
)

MAX_DEFICIT_ATTAINMENT = 150.0


def energy_score(calories_consumed: float, target_calories: float) -> int:
    """Score intake against the calorie target (0, 10, 25 or 35)."""
    error = abs(calories_consumed - target_calories) / target_calories
    for max_error, points in ENERGY_BRACKETS:
        if error <= max_error:
            return points
    return 0


def protein_score(protein_consumed: float, target_protein: float) -> int:
    """Score protein intake against the protein target (0, 10 or 20)."""
    for shortfall, points in PROTEIN_BRACKETS:
        if protein_consumed >= target_protein - shortfall:
            return points
    return 0


def hydration_score(hydration_liters: float, hydration_target: float) -> int:
    """Score fluid intake against the hydration target (0 or 10)."""
    if hydration_liters >= hydration_target - HYDRATION_TOLERANCE_L:
        return HYDRATION_POINTS
    return 0


def label_for_score(score: int) -> ExecutionLabel:
    """Map a total score to its label."""
    for threshold, label in LABEL_THRESHOLDS:
        if score >= threshold:
            return label
    return ExecutionLabel.OFF_TRACK


def deficit_attainment(tdee: float, calories_consumed: float, target_calories: float) -> float:
    """Actual deficit as a percentage of the deficit the target implies.

    Args:
        tdee: Estimated TDEE for the day
        calories_consumed: Actual intake
        target_calories: Calorie target in force

    Returns:
        Percentage, capped at 150. A target at maintenance scores 100 when
        intake did not exceed TDEE. A target above TDEE (surplus plan) scores 0.
    """
    net_deficit = tdee - calories_consumed
    target_deficit = tdee - target_calories

    if target_deficit > 0:
        return min(net_deficit / target_deficit * 100, MAX_DEFICIT_ATTAINMENT)
    if target_deficit == 0 and net_deficit >= 0:
        return 100.0
    return 0.0


def score(log: DailyLog, target: Target) -> ScoreResult:
    """Score one day's log against the target in force.

    Args:
        log: The day's logged metrics
        target: The resolved target for log.log_date

    Returns:
        ScoreResult with total score, label, TDEE and net deficit

    Raises:
        InvalidTargetError: If the calorie or protein target is not positive
    """
    target.validate()

    target_calories = target.daily_calories_target
    target_protein = target.daily_protein_target

    tdee = round_half_up(
        calculate_tdee(
            log.weight_kg,
            log.calories_consumed,
            log.active_calories_burned,
        )
    )
    net_deficit = tdee - log.calories_consumed

    energy = energy_score(log.calories_consumed, target_calories)
    protein = protein_score(log.protein_consumed_g, target_protein)
    recovery = RECOVERY_POINTS if log.sleep_adequate else 0
    training = TRAINING_POINTS if log.training_completed else 0
    hydration = hydration_score(log.hydration_liters, target.hydration_target_l)

    total = energy + protein + recovery + training + hydration + SIGNALS_BASELINE

    return ScoreResult(
        score=total,
        label=label_for_score(total),
        calculated_tdee=tdee,
        net_deficit=net_deficit,
        deficit_adherence_pct=deficit_attainment(
            tdee, log.calories_consumed, target_calories
        ),
        target_calories=target_calories,
        target_protein=target_protein,
        energy=energy,
        protein=protein,
        recovery=recovery,
        training=training,
        hydration=hydration,
        signals=SIGNALS_BASELINE,
    )


def score_details(log: DailyLog, target: Target, result: ScoreResult) -> dict:
    """Build the user-facing detail payload for a scored day."""
    return {
        "tdee": result.calculated_tdee,
        "deficit": result.net_deficit,
        "cal_achievement_pct": round_half_up(
            log.calories_consumed / target.daily_calories_target * 100
        ),
        "protein_achievement_pct": round_half_up(
            log.protein_consumed_g / target.daily_protein_target * 100
        ),
        "goal_calories": target.daily_calories_target,
        "goal_protein": target.daily_protein_target,
    }


def adherence_band(deficit_adherence_pct: float) -> str:
    """Bucket a deficit attainment percentage for history display."""
    if deficit_adherence_pct >= 90:
        return "strong"
    if deficit_adherence_pct >= 70:
        return "moderate"
    return "weak"
