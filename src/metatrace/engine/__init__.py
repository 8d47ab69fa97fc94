"""Metabolic scoring and trajectory simulation engine.

Pure functions only: no storage, settings or session state is read here.

Key components:
- score: daily execution score, TDEE and net deficit
- resolve_target: which target applies to a date
- simulate: weekly-sampled weight and body-fat projection
"""

from __future__ import annotations

from metatrace.engine.models import (
    DailyLog,
    ExecutionLabel,
    InvalidTargetError,
    ScoreResult,
    SimulationPoint,
    Target,
)
from metatrace.engine.scoring import score, score_details
from metatrace.engine.simulation import simulate, summarize_trajectory
from metatrace.engine.targets import (
    NeedsCreation,
    Resolved,
    TargetDefaults,
    UsedDefault,
    resolve_target,
)

__all__ = [
    "DailyLog",
    "ExecutionLabel",
    "InvalidTargetError",
    "NeedsCreation",
    "Resolved",
    "ScoreResult",
    "SimulationPoint",
    "Target",
    "TargetDefaults",
    "UsedDefault",
    "resolve_target",
    "score",
    "score_details",
    "simulate",
    "summarize_trajectory",
]
