"""Value objects consumed and produced by the scoring and simulation engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class InvalidTargetError(ValueError):
    """Raised when a target cannot be scored against (zero or negative goals)."""


class ExecutionLabel(Enum):
    """Categorical grade attached to an execution score."""
    OPTIMAL = "OPTIMAL"          # 90-100
    ON_TRACK = "ON_TRACK"        # 75-89
    AT_RISK = "AT_RISK"          # 60-74
    OFF_TRACK = "OFF_TRACK"      # below 60

    @property
    def display(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class DailyLog:
    """One day of logged biometrics and behaviours."""

    log_date: date
    weight_kg: float
    calories_consumed: int
    protein_consumed_g: int
    hydration_liters: float
    training_completed: bool
    sleep_adequate: bool
    active_calories_burned: int = 0
    body_fat_pct: Optional[float] = None

    def __post_init__(self) -> None:
        if self.weight_kg <= 0:
            raise ValueError(f"weight_kg must be positive, got {self.weight_kg}")
        if self.body_fat_pct is not None and not 0 <= self.body_fat_pct <= 100:
            raise ValueError(
                f"body_fat_pct must be between 0 and 100, got {self.body_fat_pct}"
            )
        for name in (
            "calories_consumed",
            "protein_consumed_g",
            "hydration_liters",
            "active_calories_burned",
        ):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"{name} must not be negative, got {value}")

    @property
    def sleep_quality_score(self) -> int:
        """Coarse 1-5 sleep rating stored alongside the log."""
        return 4 if self.sleep_adequate else 2


@dataclass(frozen=True)
class Target:
    """Calorie, protein and hydration goals in force for a date range."""

    daily_calories_target: float
    daily_protein_target: float
    hydration_target_l: float
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    week_number: int = 1
    daily_steps_target: Optional[int] = None

    def covers(self, on_date: date) -> bool:
        """Return True if on_date falls inside [start_date, end_date]."""
        if self.start_date is None or self.end_date is None:
            return False
        return self.start_date <= on_date <= self.end_date

    def validate(self) -> None:
        """Raise InvalidTargetError if this target would divide by zero."""
        if self.daily_calories_target <= 0:
            raise InvalidTargetError(
                f"daily_calories_target must be positive, got {self.daily_calories_target}"
            )
        if self.daily_protein_target <= 0:
            raise InvalidTargetError(
                f"daily_protein_target must be positive, got {self.daily_protein_target}"
            )


@dataclass(frozen=True)
class ScoreResult:
    """Execution score and energy ledger derived from a (DailyLog, Target) pair."""

    score: int
    label: ExecutionLabel
    calculated_tdee: int
    net_deficit: int             # positive = deficit, negative = surplus
    deficit_adherence_pct: float
    target_calories: float
    target_protein: float

    # Sub-scores (sum to score)
    energy: int
    protein: int
    recovery: int
    training: int
    hydration: int
    signals: int

    def breakdown(self) -> dict[str, int]:
        """Sub-scores keyed by component name."""
        return {
            "energy": self.energy,
            "protein": self.protein,
            "recovery": self.recovery,
            "training": self.training,
            "hydration": self.hydration,
            "signals": self.signals,
        }


@dataclass(frozen=True)
class SimulationPoint:
    """A weekly sample of a simulated trajectory."""

    day: int
    point_date: date
    weight_kg: float
    body_fat_pct: float
    lean_mass_kg: float
