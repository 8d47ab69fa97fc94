"""Tests for CLI commands."""

from __future__ import annotations

import json

import pytest

from typer.testing import CliRunner

from metatrace.cli import app

runner = CliRunner()

ON_PLAN = [
    "-w", "80", "-c", "2200", "-p", "180", "--hydration", "3.5",
    "-a", "400", "--training", "--sleep",
]


def invoke_json(args: list[str]) -> tuple[int, dict]:
    result = runner.invoke(app, args + ["--json"])
    return result.exit_code, json.loads(result.output)


class TestMainCommands:
    """Tests for main CLI commands."""

    def test_help(self) -> None:
        """Test that --help works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "score" in result.output.lower()

    def test_score_requires_inputs(self) -> None:
        """Test that score command requires the day's metrics."""
        result = runner.invoke(app, ["score"])
        assert result.exit_code != 0

    def test_protocol_help(self, cli_env) -> None:
        """Test that protocol --help works."""
        result = runner.invoke(app, ["protocol", "--help"])
        assert result.exit_code == 0

    def test_target_help(self, cli_env) -> None:
        """Test that target --help works."""
        result = runner.invoke(app, ["target", "--help"])
        assert result.exit_code == 0


class TestScoreCommand:
    """Scoring a day without storage."""

    def test_on_plan_day(self, cli_env) -> None:
        """Explicit targets met exactly give full marks."""
        code, payload = invoke_json(
            ["score"] + ON_PLAN
            + ["--target-calories", "2200", "--target-protein", "180", "--target-hydration", "3.5"]
        )

        assert code == 0
        assert payload["success"] is True
        assert payload["command"] == "score"
        assert payload["data"]["score"] == 100
        assert payload["data"]["label"] == "OPTIMAL"
        assert payload["data"]["tdee"] == 2680
        assert payload["data"]["deficit"] == 480
        assert payload["data"]["breakdown"]["energy"] == 35

    def test_configured_defaults(self, cli_env) -> None:
        """Without explicit targets the configured defaults apply."""
        code, payload = invoke_json(
            ["score", "-w", "80", "-c", "2000", "-p", "150", "--hydration", "3.0"]
        )

        assert code == 0
        assert payload["data"]["goal_calories"] == 2000
        assert payload["data"]["goal_protein"] == 150
        assert payload["data"]["score"] == 70
        assert payload["data"]["label"] == "AT_RISK"

    def test_zero_target_rejected(self, cli_env) -> None:
        """A zero calorie target is an error, not a crash."""
        code, payload = invoke_json(["score"] + ON_PLAN + ["--target-calories", "0"])

        assert code == 1
        assert payload["success"] is False
        assert "daily_calories_target" in payload["errors"][0]

    def test_negative_intake_rejected(self, cli_env) -> None:
        """Negative intake fails validation."""
        result = runner.invoke(
            app, ["score", "-w", "80", "-c", "-5", "-p", "150", "--hydration", "3.0"]
        )
        assert result.exit_code == 1

    def test_human_output(self, cli_env) -> None:
        """Plain output shows the score and the TDEE."""
        result = runner.invoke(app, ["score"] + ON_PLAN)

        assert result.exit_code == 0
        assert "Execution score" in result.output
        assert "2680" in result.output


class TestSimulateCommand:
    """Trajectory projection."""

    def test_explicit_inputs(self, cli_env) -> None:
        """All inputs given on the command line."""
        code, payload = invoke_json(
            ["simulate", "-w", "80", "-b", "20", "-c", "2200", "-a", "400",
             "--weeks", "12", "--goal-weight", "79.6"]
        )

        data = payload["data"]
        assert code == 0
        assert len(data["points"]) == 13
        assert data["points"][0]["weight_kg"] == 80.0
        assert data["points"][0]["lean_mass_kg"] == 64.0
        assert data["weight_lost_kg"] > 0
        assert data["weekly_rate_kg"] < 0
        assert data["weeks_to_goal"] == 1

    def test_missing_weight(self, cli_env) -> None:
        """Without a weight or a stored log the command fails."""
        code, payload = invoke_json(["simulate"])

        assert code == 1
        assert payload["errors"] == ["Starting weight unknown"]

    def test_invalid_weeks(self, cli_env) -> None:
        """A non-positive horizon is rejected."""
        code, payload = invoke_json(
            ["simulate", "-w", "80", "-b", "20", "-c", "2200", "--weeks", "0"]
        )

        assert code == 1
        assert payload["success"] is False

    def test_body_fat_out_of_range(self, cli_env) -> None:
        """An impossible body fat is an error, not a trajectory."""
        code, payload = invoke_json(
            ["simulate", "-w", "80", "-b", "150", "-c", "2200", "--weeks", "12"]
        )

        assert code == 1
        assert "start_bf_pct" in payload["errors"][0]

    def test_non_positive_weight(self, cli_env) -> None:
        """A zero start weight is rejected."""
        result = runner.invoke(
            app, ["simulate", "-w", "0", "-b", "20", "-c", "2200", "--weeks", "12"]
        )
        assert result.exit_code == 1

    def test_defaults_from_stored_log(self, cli_env) -> None:
        """Weight, body fat and calories come from stored data."""
        runner.invoke(app, ["log"] + ON_PLAN + ["-b", "22", "--date", "2025-03-10"])

        code, payload = invoke_json(["simulate", "--weeks", "8"])

        inputs = payload["data"]["inputs"]
        assert code == 0
        assert inputs["start_weight_kg"] == 80.0
        assert inputs["start_bf_pct"] == 22.0
        assert inputs["daily_calories"] == 2200
        assert inputs["daily_activity_burn_kcal"] == 400.0
        assert len(payload["data"]["points"]) == 9


class TestLogAndHistory:
    """Storing days and reading them back."""

    def test_log_scores_day(self, cli_env) -> None:
        """A first log is scored against the new-user target."""
        code, payload = invoke_json(["log"] + ON_PLAN + ["--date", "2025-03-10"])

        assert code == 0
        assert payload["data"]["date"] == "2025-03-10"
        assert payload["data"]["score"] == 100
        assert payload["data"]["details"]["goal_calories"] == 2200

    def test_invalid_date(self, cli_env) -> None:
        """Dates must be ISO formatted."""
        result = runner.invoke(app, ["log"] + ON_PLAN + ["--date", "10/03/2025"])
        assert result.exit_code == 1

    def test_history(self, cli_env) -> None:
        """History lists stored days newest first."""
        runner.invoke(app, ["log"] + ON_PLAN + ["--date", "2025-03-10"])
        runner.invoke(app, ["log"] + ON_PLAN + ["-c", "2970", "--date", "2025-03-11"])

        code, payload = invoke_json(["history"])

        entries = payload["data"]["entries"]
        assert code == 0
        assert [e["date"] for e in entries] == ["2025-03-11", "2025-03-10"]
        assert [e["score"] for e in entries] == [65, 100]

    def test_empty_history(self, cli_env) -> None:
        """No logs gives an empty list."""
        code, payload = invoke_json(["history"])

        assert code == 0
        assert payload["data"]["entries"] == []

    @pytest.mark.parametrize("days", ["0", "-3"])
    def test_history_rejects_non_positive_days(self, cli_env, days) -> None:
        """--days must be at least 1."""
        runner.invoke(app, ["log"] + ON_PLAN + ["--date", "2025-03-10"])
        result = runner.invoke(app, ["history", "--days", days])

        assert result.exit_code == 2

    def test_history_table(self, cli_env) -> None:
        """Plain history renders a table."""
        runner.invoke(app, ["log"] + ON_PLAN + ["--date", "2025-03-10"])
        result = runner.invoke(app, ["history"])

        assert result.exit_code == 0
        assert "OPTIMAL" in result.output


class TestStatusCommand:
    """Dashboard summary."""

    def test_without_protocol(self, cli_env) -> None:
        """No protocol is an error with a suggestion."""
        code, payload = invoke_json(["status"])

        assert code == 1
        assert payload["suggestions"]

    def test_after_logging(self, cli_env) -> None:
        """Status reflects the latest scored day."""
        runner.invoke(app, ["protocol", "set", "--goal-weight", "70", "--start-weight", "90"])
        runner.invoke(app, ["log"] + ON_PLAN + ["--date", "2025-03-10"])

        code, payload = invoke_json(["status"])

        data = payload["data"]
        assert code == 0
        assert data["label"] == "OPTIMAL"
        assert data["weight_progress_pct"] == 50.0
        assert data["target_deficit"] == 480
        assert data["has_goal"] is True


class TestProtocolCommands:
    """Tests for protocol subcommands."""

    def test_set_and_show(self, cli_env) -> None:
        """A protocol set from the CLI can be shown."""
        code, _ = invoke_json(["protocol", "set", "--goal-type", "recomp", "--goal-weight", "75"])
        assert code == 0

        code, payload = invoke_json(["protocol", "show"])

        assert code == 0
        assert payload["data"]["goal_type"] == "RECOMP"
        assert payload["data"]["goal_weight_kg"] == 75.0

    def test_show_without_protocol(self, cli_env) -> None:
        """Showing a missing protocol fails."""
        result = runner.invoke(app, ["protocol", "show"])
        assert result.exit_code == 1

    def test_invalid_goal_type(self, cli_env) -> None:
        """Unknown goal types are rejected."""
        result = runner.invoke(app, ["protocol", "set", "--goal-type", "bulk"])
        assert result.exit_code == 1


class TestTargetCommands:
    """Tests for target subcommands."""

    def test_add_requires_args(self, cli_env) -> None:
        """Test that target add requires calories and protein."""
        result = runner.invoke(app, ["target", "add"])
        assert result.exit_code != 0

    def test_add_without_protocol(self, cli_env) -> None:
        """Targets need a protocol."""
        code, payload = invoke_json(["target", "add", "-c", "2000", "-p", "160"])

        assert code == 1
        assert "No active protocol" in payload["errors"][0]

    def test_add_and_list(self, cli_env) -> None:
        """Added targets are numbered and listed in week order."""
        runner.invoke(app, ["protocol", "set", "--goal-weight", "75"])
        invoke_json(["target", "add", "-c", "2200", "-p", "180", "--start", "2025-03-03"])
        code, added = invoke_json(
            ["target", "add", "-c", "2100", "-p", "180", "--start", "2025-03-10", "--steps", "9000"]
        )

        assert code == 0
        assert added["data"]["week_number"] == 2
        assert added["data"]["end_date"] == "2025-03-16"

        code, listed = invoke_json(["target", "list"])

        targets = listed["data"]["targets"]
        assert [t["week_number"] for t in targets] == [1, 2]
        assert targets[1]["daily_steps_target"] == 9000

    def test_add_rejects_zero_days(self, cli_env) -> None:
        """--days must be at least 1."""
        runner.invoke(app, ["protocol", "set", "--goal-weight", "75"])
        result = runner.invoke(app, ["target", "add", "-c", "2000", "-p", "160", "--days", "0"])

        assert result.exit_code == 2

    def test_list_empty(self, cli_env) -> None:
        """Listing with no protocol prints a notice."""
        result = runner.invoke(app, ["target", "list"])

        assert result.exit_code == 0
        assert "No targets" in result.output
