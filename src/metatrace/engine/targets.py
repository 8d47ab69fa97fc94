"""Selection of the target in force for a given date.

Resolution order:
1. the target whose [start_date, end_date] contains the date
2. the most recent target by week number
3. hard-coded defaults

The result is tagged so callers can tell which branch was taken. Writing a
first target for a new user is left to the caller (see NeedsCreation).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Union

from metatrace.engine.models import Target


@dataclass(frozen=True)
class TargetDefaults:
    """Fallback goal values used when no stored target applies."""

    daily_calories_target: float
    daily_protein_target: float
    hydration_target_l: float
    window_days: int = 14
    daily_steps_target: Optional[int] = None

    def as_target(self) -> Target:
        """Undated target carrying these values."""
        return Target(
            daily_calories_target=self.daily_calories_target,
            daily_protein_target=self.daily_protein_target,
            hydration_target_l=self.hydration_target_l,
            daily_steps_target=self.daily_steps_target,
        )


# Used by the scorer when a user has no target at all
SCORER_DEFAULTS = TargetDefaults(
    daily_calories_target=2000,
    daily_protein_target=150,
    hydration_target_l=3.0,
)

# Written as week 1 when a brand-new user logs for the first time
NEW_USER_DEFAULTS = TargetDefaults(
    daily_calories_target=2200,
    daily_protein_target=180,
    hydration_target_l=3.5,
    window_days=14,
    daily_steps_target=10000,
)


@dataclass(frozen=True)
class Resolved:
    """A stored target applies (by date range, or as latest-week fallback)."""

    target: Target
    fallback: bool = False


@dataclass(frozen=True)
class UsedDefault:
    """No stored target exists; score against defaults and write nothing."""

    defaults: TargetDefaults

    @property
    def target(self) -> Target:
        return self.defaults.as_target()


@dataclass(frozen=True)
class NeedsCreation:
    """No stored target exists; the caller may persist a first target.

    Until it does, the scorer uses scoring_defaults.
    """

    defaults: TargetDefaults
    scoring_defaults: TargetDefaults

    @property
    def target(self) -> Target:
        return self.scoring_defaults.as_target()


TargetResolution = Union[Resolved, UsedDefault, NeedsCreation]


def latest_target(targets: Iterable[Target]) -> Optional[Target]:
    """Return the target with the highest week number, or None."""
    latest: Optional[Target] = None
    for target in targets:
        if latest is None or target.week_number > latest.week_number:
            latest = target
    return latest


def resolve_target(
    targets: Iterable[Target],
    on_date: date,
    *,
    defaults: TargetDefaults = SCORER_DEFAULTS,
    creation_defaults: TargetDefaults = NEW_USER_DEFAULTS,
    allow_creation: bool = True,
) -> TargetResolution:
    """Pick the target in force on a date.

    Args:
        targets: All targets of the user's active protocol
        on_date: Date being scored
        defaults: Values the scorer uses when nothing is stored
        creation_defaults: Values for an auto-created first target
        allow_creation: If False, an empty history yields UsedDefault
            instead of NeedsCreation

    Returns:
        Resolved, UsedDefault or NeedsCreation
    """
    targets = list(targets)

    covering = latest_target(t for t in targets if t.covers(on_date))
    if covering is not None:
        return Resolved(target=covering)

    fallback = latest_target(targets)
    if fallback is not None:
        return Resolved(target=fallback, fallback=True)

    if allow_creation:
        return NeedsCreation(defaults=creation_defaults, scoring_defaults=defaults)
    return UsedDefault(defaults=defaults)


def build_first_target(
    start: date,
    defaults: TargetDefaults = NEW_USER_DEFAULTS,
) -> Target:
    """Build the week-1 target written for a new user."""
    return Target(
        daily_calories_target=defaults.daily_calories_target,
        daily_protein_target=defaults.daily_protein_target,
        hydration_target_l=defaults.hydration_target_l,
        start_date=start,
        end_date=start + timedelta(days=defaults.window_days),
        week_number=1,
        daily_steps_target=defaults.daily_steps_target,
    )
