"""Energy expenditure estimates shared by the scorer and the simulator.

Uses a flat 22 kcal/kg/day basal rate. Height, age and sex are not inputs.

    TDEE = BMR + TEF + NEAT + active burn
    BMR  = 22 × weight_kg
    TEF  = 10% of intake
    NEAT = 300 kcal/day
"""

from __future__ import annotations

import math

BMR_KCAL_PER_KG = 22.0
TEF_FRACTION = 0.10
NEAT_KCAL = 300.0

# 7700 kcal ≈ 1 kg of adipose tissue
KCAL_PER_KG_FAT = 7700.0


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


def calculate_bmr(weight_kg: float) -> float:
    """Basal metabolic rate in kcal/day."""
    return BMR_KCAL_PER_KG * weight_kg


def calculate_tef(calories_consumed: float) -> float:
    """Thermic effect of feeding in kcal/day."""
    return TEF_FRACTION * calories_consumed


def calculate_tdee(
    weight_kg: float,
    calories_consumed: float,
    active_calories_burned: float = 0.0,
) -> float:
    """Calculate unrounded Total Daily Energy Expenditure.

    Args:
        weight_kg: Body weight in kg
        calories_consumed: Intake for the day (drives TEF)
        active_calories_burned: Exercise calories on top of NEAT

    Returns:
        TDEE in kcal/day
    """
    return (
        calculate_bmr(weight_kg)
        + calculate_tef(calories_consumed)
        + NEAT_KCAL
        + active_calories_burned
    )


def daily_weight_change_kg(deficit_kcal: float) -> float:
    """Convert a daily energy deficit to kg lost per day (negative = gain)."""
    return deficit_kcal / KCAL_PER_KG_FAT


def maintenance_calories(weight_kg: float, active_calories_burned: float = 0.0) -> float:
    """Intake at which TDEE equals intake for the given weight and activity.

    Solves intake = 22w + 0.1·intake + 300 + active for intake.
    """
    return (
        calculate_bmr(weight_kg) + NEAT_KCAL + active_calories_burned
    ) / (1 - TEF_FRACTION)
