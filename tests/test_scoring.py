"""Tests for daily execution scoring."""

from __future__ import annotations

from dataclasses import replace

import pytest

from metatrace.engine.models import ExecutionLabel, InvalidTargetError, Target
from metatrace.engine.scoring import (
    MAX_DEFICIT_ATTAINMENT,
    adherence_band,
    deficit_attainment,
    energy_score,
    hydration_score,
    label_for_score,
    protein_score,
    score,
    score_details,
)


class TestOnPlanDay:
    """An 80 kg day eaten exactly to plan."""

    def test_tdee_and_deficit(self, on_plan_log, standard_target) -> None:
        """TDEE = 1760 BMR + 220 TEF + 300 NEAT + 400 active."""
        result = score(on_plan_log, standard_target)

        assert result.calculated_tdee == 2680
        assert result.net_deficit == 480

    def test_full_marks(self, on_plan_log, standard_target) -> None:
        """Every component at its maximum gives 100 and OPTIMAL."""
        result = score(on_plan_log, standard_target)

        assert result.score == 100
        assert result.label == ExecutionLabel.OPTIMAL
        assert result.deficit_adherence_pct == pytest.approx(100.0)

    def test_breakdown_sums_to_score(self, on_plan_log, standard_target) -> None:
        """Sub-scores add up to the total."""
        result = score(on_plan_log, standard_target)
        breakdown = result.breakdown()

        assert breakdown == {
            "energy": 35,
            "protein": 20,
            "recovery": 20,
            "training": 10,
            "hydration": 10,
            "signals": 5,
        }
        assert sum(breakdown.values()) == result.score

    def test_targets_echoed(self, on_plan_log, standard_target) -> None:
        """The target values used are carried on the result."""
        result = score(on_plan_log, standard_target)

        assert result.target_calories == 2200
        assert result.target_protein == 180


class TestOverEating:
    """Intake far above the calorie target."""

    def test_energy_zeroed(self, on_plan_log, standard_target) -> None:
        """35% over target scores no energy points."""
        log = replace(on_plan_log, calories_consumed=2970)
        result = score(log, standard_target)

        assert result.energy == 0
        assert result.score == 65
        assert result.label == ExecutionLabel.AT_RISK

    def test_tdee_includes_extra_tef(self, on_plan_log, standard_target) -> None:
        """Eating more raises TEF and therefore TDEE."""
        log = replace(on_plan_log, calories_consumed=2970)
        result = score(log, standard_target)

        assert result.calculated_tdee == 2757
        assert result.net_deficit == -213
        assert result.deficit_adherence_pct < 0


class TestScoreRange:
    """Bounds of the total score."""

    def test_minimum_is_signals_baseline(self, on_plan_log, standard_target) -> None:
        """A day with nothing right still gets the flat signals points."""
        log = replace(
            on_plan_log,
            calories_consumed=5000,
            protein_consumed_g=0,
            hydration_liters=0.0,
            training_completed=False,
            sleep_adequate=False,
        )
        result = score(log, standard_target)

        assert result.score == 5
        assert result.label == ExecutionLabel.OFF_TRACK

    @pytest.mark.parametrize("calories", [0, 1000, 2000, 2200, 2600, 4000])
    def test_score_within_bounds(self, on_plan_log, standard_target, calories) -> None:
        """Score is always between 5 and 100."""
        log = replace(on_plan_log, calories_consumed=calories)
        result = score(log, standard_target)

        assert 5 <= result.score <= 100

    def test_deterministic(self, on_plan_log, standard_target) -> None:
        """Scoring the same pair twice gives identical results."""
        assert score(on_plan_log, standard_target) == score(on_plan_log, standard_target)


class TestComponentScores:
    """Bracket edges of the individual components."""

    @pytest.mark.parametrize(
        "calories,expected",
        [
            (2000, 35),
            (2100, 35),   # exactly 5% over
            (2101, 25),
            (2300, 25),   # exactly 15% over
            (2500, 10),   # exactly 25% over
            (2501, 0),
            (1500, 10),   # 25% under
            (1499, 0),
        ],
    )
    def test_energy_brackets(self, calories, expected) -> None:
        """Energy points step down at 5, 15 and 25 percent error."""
        assert energy_score(calories, 2000) == expected

    @pytest.mark.parametrize(
        "protein,expected",
        [(200, 20), (150, 20), (140, 20), (139, 10), (120, 10), (119, 0)],
    )
    def test_protein_brackets(self, protein, expected) -> None:
        """Protein points depend only on the shortfall below target."""
        assert protein_score(protein, 150) == expected

    def test_hydration_tolerance(self) -> None:
        """Within half a litre of target earns the hydration points."""
        assert hydration_score(2.5, 3.0) == 10
        assert hydration_score(4.0, 3.0) == 10
        assert hydration_score(2.4, 3.0) == 0

    def test_no_sleep_no_training(self, on_plan_log, standard_target) -> None:
        """Recovery and training points are all-or-nothing."""
        log = replace(on_plan_log, sleep_adequate=False, training_completed=False)
        result = score(log, standard_target)

        assert result.recovery == 0
        assert result.training == 0
        assert result.score == 70


class TestLabels:
    """Label bracket boundaries."""

    @pytest.mark.parametrize(
        "total,expected",
        [
            (100, ExecutionLabel.OPTIMAL),
            (90, ExecutionLabel.OPTIMAL),
            (89, ExecutionLabel.ON_TRACK),
            (75, ExecutionLabel.ON_TRACK),
            (74, ExecutionLabel.AT_RISK),
            (60, ExecutionLabel.AT_RISK),
            (59, ExecutionLabel.OFF_TRACK),
            (5, ExecutionLabel.OFF_TRACK),
        ],
    )
    def test_boundaries(self, total, expected) -> None:
        """Each lower bound belongs to its own bracket."""
        assert label_for_score(total) == expected

    def test_display(self) -> None:
        """Display form replaces underscores."""
        assert ExecutionLabel.ON_TRACK.display == "ON TRACK"


class TestDeficitAttainment:
    """Deficit achieved relative to the deficit the target implies."""

    def test_half_of_planned_deficit(self) -> None:
        """240 kcal achieved against a planned 480 is 50%."""
        assert deficit_attainment(2680, 2440, 2200) == pytest.approx(50.0)

    def test_capped(self) -> None:
        """Overshooting the planned deficit is capped."""
        assert deficit_attainment(2680, 1720, 2200) == MAX_DEFICIT_ATTAINMENT

    def test_maintenance_target_met(self) -> None:
        """A maintenance target is fully met when intake stays at or below TDEE."""
        assert deficit_attainment(2200, 2100, 2200) == 100.0
        assert deficit_attainment(2200, 2200, 2200) == 100.0

    def test_maintenance_target_missed(self) -> None:
        """A maintenance target is missed by eating above TDEE."""
        assert deficit_attainment(2200, 2300, 2200) == 0.0

    def test_surplus_target(self) -> None:
        """A target above TDEE never credits a deficit."""
        assert deficit_attainment(2000, 1800, 2500) == 0.0

    def test_monotonic_in_intake(self) -> None:
        """Eating less never lowers attainment for a deficit target."""
        values = [
            deficit_attainment(2680, intake, 2200)
            for intake in range(3000, 1000, -100)
        ]
        assert values == sorted(values)


class TestInvalidTarget:
    """Targets that cannot be scored against."""

    def test_zero_calorie_target(self, on_plan_log) -> None:
        """A zero calorie target is rejected before any division."""
        target = Target(daily_calories_target=0, daily_protein_target=150, hydration_target_l=3.0)
        with pytest.raises(InvalidTargetError):
            score(on_plan_log, target)

    def test_zero_protein_target(self, on_plan_log) -> None:
        """A zero protein target is rejected."""
        target = Target(daily_calories_target=2000, daily_protein_target=0, hydration_target_l=3.0)
        with pytest.raises(InvalidTargetError):
            score(on_plan_log, target)

    def test_is_value_error(self) -> None:
        """Callers catching ValueError also catch invalid targets."""
        assert issubclass(InvalidTargetError, ValueError)


class TestScoreDetails:
    """User-facing detail payload."""

    def test_on_plan_details(self, on_plan_log, standard_target) -> None:
        """Details mirror the result and the achievement ratios."""
        result = score(on_plan_log, standard_target)
        details = score_details(on_plan_log, standard_target, result)

        assert details == {
            "tdee": 2680,
            "deficit": 480,
            "cal_achievement_pct": 100,
            "protein_achievement_pct": 100,
            "goal_calories": 2200,
            "goal_protein": 180,
        }

    def test_partial_protein(self, on_plan_log, standard_target) -> None:
        """Achievement percentages are rounded to whole numbers."""
        log = replace(on_plan_log, protein_consumed_g=120)
        result = score(log, standard_target)
        details = score_details(log, standard_target, result)

        assert details["protein_achievement_pct"] == 67


class TestAdherenceBand:
    """History colouring buckets."""

    def test_bands(self) -> None:
        """Bands split at 90 and 70."""
        assert adherence_band(150) == "strong"
        assert adherence_band(90) == "strong"
        assert adherence_band(89.9) == "moderate"
        assert adherence_band(70) == "moderate"
        assert adherence_band(69.9) == "weak"
        assert adherence_band(-20) == "weak"
