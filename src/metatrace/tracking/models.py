"""Data models for protocols, stored scores and logging outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Optional

VALID_GOAL_TYPES = ("FAT_LOSS", "RECOMP", "GAIN")
VALID_STATUSES = ("ACTIVE", "COMPLETED", "PAUSED")


@dataclass
class Protocol:
    """A user's goal definition, under which weekly targets are issued."""

    protocol_id: Optional[int]
    user_id: str
    start_date: date
    status: str = "ACTIVE"
    goal_type: Optional[str] = "FAT_LOSS"
    initial_weight_kg: Optional[float] = None
    initial_bodyfat_pct: Optional[float] = None
    goal_weight_kg: Optional[float] = None
    goal_bodyfat_pct: Optional[float] = None
    target_end_date: Optional[date] = None

    def __post_init__(self) -> None:
        if self.status not in VALID_STATUSES:
            raise ValueError(
                f"status must be one of {VALID_STATUSES}, got '{self.status}'"
            )
        if self.goal_type is not None and self.goal_type not in VALID_GOAL_TYPES:
            raise ValueError(
                f"goal_type must be one of {VALID_GOAL_TYPES}, got '{self.goal_type}'"
            )

    @property
    def has_goal(self) -> bool:
        """True once a goal weight or goal body fat has been set."""
        return bool(self.goal_weight_kg or self.goal_bodyfat_pct)


@dataclass
class LedgerEntry:
    """A stored score joined with the input it was derived from."""

    ledger_id: Optional[int]
    input_id: int
    date: date
    target_calories: float
    target_protein: float
    calculated_tdee: int
    net_deficit: int
    deficit_adherence_pct: float
    execution_score: int
    execution_label: str
    weight_kg: Optional[float] = None
    calories_consumed: Optional[int] = None
    protein_consumed: Optional[int] = None


@dataclass
class LogOutcome:
    """Result of logging and scoring one day."""

    success: bool
    score: Optional[int] = None
    label: Optional[str] = None
    details: dict = field(default_factory=dict)
    message: Optional[str] = None

    def to_dict(self) -> dict:
        if not self.success:
            return {"success": False, "message": self.message}
        return {
            "success": True,
            "score": self.score,
            "label": self.label,
            "details": self.details,
        }


@dataclass
class SimulationDefaults:
    """Starting values for a trajectory simulation, taken from stored data."""

    start_weight_kg: Optional[float]
    start_bf_pct: Optional[float]
    daily_calories: float
    daily_activity_burn_kcal: float
    weeks: int
