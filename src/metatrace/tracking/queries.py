"""Database queries for protocols, targets, daily inputs and scores."""

from __future__ import annotations

import sqlite3
from datetime import date
from typing import Optional

from metatrace.engine.models import DailyLog, ScoreResult, Target
from metatrace.tracking.models import LedgerEntry, Protocol


def _parse_date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class ProtocolQueries:
    """Database queries for protocols."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Protocol:
        return Protocol(
            protocol_id=row["protocol_id"],
            user_id=row["user_id"],
            start_date=date.fromisoformat(row["start_date"]),
            status=row["status"],
            goal_type=row["goal_type"],
            initial_weight_kg=row["initial_weight_kg"],
            initial_bodyfat_pct=row["initial_bodyfat_pct"],
            goal_weight_kg=row["goal_weight_kg"],
            goal_bodyfat_pct=row["goal_bodyfat_pct"],
            target_end_date=_parse_date(row["target_end_date"]),
        )

    @staticmethod
    def get_active(conn: sqlite3.Connection, user_id: str) -> Optional[Protocol]:
        """Get the user's ACTIVE protocol, if any."""
        row = conn.execute(
            """
            SELECT * FROM protocols
            WHERE user_id = ? AND status = 'ACTIVE'
            ORDER BY protocol_id DESC LIMIT 1
            """,
            (user_id,),
        ).fetchone()

        if row is None:
            return None
        return ProtocolQueries._from_row(row)

    @staticmethod
    def create(conn: sqlite3.Connection, protocol: Protocol) -> Protocol:
        """Insert a protocol and return it with its new ID."""
        cursor = conn.execute(
            """
            INSERT INTO protocols (user_id, status, goal_type, start_date,
                                   initial_weight_kg, initial_bodyfat_pct,
                                   goal_weight_kg, goal_bodyfat_pct, target_end_date)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                protocol.user_id,
                protocol.status,
                protocol.goal_type,
                protocol.start_date.isoformat(),
                protocol.initial_weight_kg,
                protocol.initial_bodyfat_pct,
                protocol.goal_weight_kg,
                protocol.goal_bodyfat_pct,
                _iso(protocol.target_end_date),
            ),
        )
        protocol.protocol_id = cursor.lastrowid
        return protocol

    @staticmethod
    def update(conn: sqlite3.Connection, protocol: Protocol) -> None:
        """Update an existing protocol."""
        if protocol.protocol_id is None:
            raise ValueError("Cannot update protocol without protocol_id")

        conn.execute(
            """
            UPDATE protocols
            SET status = ?, goal_type = ?, initial_weight_kg = ?,
                initial_bodyfat_pct = ?, goal_weight_kg = ?, goal_bodyfat_pct = ?,
                target_end_date = ?
            WHERE protocol_id = ?
            """,
            (
                protocol.status,
                protocol.goal_type,
                protocol.initial_weight_kg,
                protocol.initial_bodyfat_pct,
                protocol.goal_weight_kg,
                protocol.goal_bodyfat_pct,
                _iso(protocol.target_end_date),
                protocol.protocol_id,
            ),
        )


class TargetQueries:
    """Database queries for weekly targets."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> Target:
        return Target(
            daily_calories_target=row["daily_calories_target"],
            daily_protein_target=row["daily_protein_target"],
            hydration_target_l=row["hydration_target_l"] or 0.0,
            start_date=date.fromisoformat(row["start_date"]),
            end_date=date.fromisoformat(row["end_date"]),
            week_number=row["week_number"],
            daily_steps_target=row["daily_steps_target"],
        )

    @staticmethod
    def add_target(conn: sqlite3.Connection, protocol_id: int, target: Target) -> int:
        """Insert a target under a protocol and return its ID."""
        if target.start_date is None or target.end_date is None:
            raise ValueError("Stored targets need both start_date and end_date")

        cursor = conn.execute(
            """
            INSERT INTO weekly_targets (protocol_id, week_number, start_date, end_date,
                                        daily_calories_target, daily_protein_target,
                                        hydration_target_l, daily_steps_target)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                protocol_id,
                target.week_number,
                target.start_date.isoformat(),
                target.end_date.isoformat(),
                target.daily_calories_target,
                target.daily_protein_target,
                target.hydration_target_l,
                target.daily_steps_target,
            ),
        )
        return cursor.lastrowid or 0

    @staticmethod
    def get_targets(conn: sqlite3.Connection, protocol_id: int) -> list[Target]:
        """Get all targets of a protocol, ordered by week number."""
        rows = conn.execute(
            """
            SELECT * FROM weekly_targets
            WHERE protocol_id = ?
            ORDER BY week_number, target_id
            """,
            (protocol_id,),
        ).fetchall()
        return [TargetQueries._from_row(row) for row in rows]

    @staticmethod
    def get_latest_target(conn: sqlite3.Connection, protocol_id: int) -> Optional[Target]:
        """Get the target with the highest week number."""
        row = conn.execute(
            """
            SELECT * FROM weekly_targets
            WHERE protocol_id = ?
            ORDER BY week_number DESC, target_id DESC LIMIT 1
            """,
            (protocol_id,),
        ).fetchone()

        if row is None:
            return None
        return TargetQueries._from_row(row)


class DailyInputQueries:
    """Database queries for daily inputs."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> DailyLog:
        return DailyLog(
            log_date=date.fromisoformat(row["date"]),
            weight_kg=row["weight_kg"],
            body_fat_pct=row["body_fat_pct"],
            calories_consumed=row["calories_consumed"],
            protein_consumed_g=row["protein_consumed"],
            hydration_liters=row["hydration_liters"],
            active_calories_burned=row["active_calories_burned"],
            training_completed=bool(row["training_completed"]),
            sleep_adequate=bool(row["is_sleep_adequate"]),
        )

    @staticmethod
    def upsert_input(conn: sqlite3.Connection, user_id: str, log: DailyLog) -> int:
        """
        Insert or update the log for (user_id, log_date).

        The row keeps its input_id on update so its score stays linked.

        Returns:
            input_id of the stored row
        """
        conn.execute(
            """
            INSERT INTO daily_inputs (user_id, date, weight_kg, body_fat_pct,
                                      calories_consumed, protein_consumed,
                                      hydration_liters, active_calories_burned,
                                      training_completed, is_sleep_adequate,
                                      sleep_quality_score)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id, date) DO UPDATE SET
                weight_kg = excluded.weight_kg,
                body_fat_pct = excluded.body_fat_pct,
                calories_consumed = excluded.calories_consumed,
                protein_consumed = excluded.protein_consumed,
                hydration_liters = excluded.hydration_liters,
                active_calories_burned = excluded.active_calories_burned,
                training_completed = excluded.training_completed,
                is_sleep_adequate = excluded.is_sleep_adequate,
                sleep_quality_score = excluded.sleep_quality_score
            """,
            (
                user_id,
                log.log_date.isoformat(),
                log.weight_kg,
                log.body_fat_pct,
                log.calories_consumed,
                log.protein_consumed_g,
                log.hydration_liters,
                log.active_calories_burned,
                log.training_completed,
                log.sleep_adequate,
                log.sleep_quality_score,
            ),
        )
        row = conn.execute(
            "SELECT input_id FROM daily_inputs WHERE user_id = ? AND date = ?",
            (user_id, log.log_date.isoformat()),
        ).fetchone()
        return row["input_id"]

    @staticmethod
    def get_latest_input(conn: sqlite3.Connection, user_id: str) -> Optional[DailyLog]:
        """Get the most recent log for a user."""
        row = conn.execute(
            """
            SELECT * FROM daily_inputs
            WHERE user_id = ?
            ORDER BY date DESC LIMIT 1
            """,
            (user_id,),
        ).fetchone()

        if row is None:
            return None
        return DailyInputQueries._from_row(row)

    @staticmethod
    def get_input(
        conn: sqlite3.Connection, user_id: str, log_date: date
    ) -> Optional[DailyLog]:
        """Get the log for a specific date."""
        row = conn.execute(
            "SELECT * FROM daily_inputs WHERE user_id = ? AND date = ?",
            (user_id, log_date.isoformat()),
        ).fetchone()

        if row is None:
            return None
        return DailyInputQueries._from_row(row)


class LedgerQueries:
    """Database queries for stored scores."""

    @staticmethod
    def _from_row(row: sqlite3.Row) -> LedgerEntry:
        return LedgerEntry(
            ledger_id=row["ledger_id"],
            input_id=row["input_id"],
            date=date.fromisoformat(row["date"]),
            target_calories=row["target_calories"],
            target_protein=row["target_protein"],
            calculated_tdee=row["calculated_tdee"],
            net_deficit=row["net_deficit"],
            deficit_adherence_pct=row["deficit_adherence_pct"],
            execution_score=row["execution_score"],
            execution_label=row["execution_label"],
            weight_kg=row["weight_kg"],
            calories_consumed=row["calories_consumed"],
            protein_consumed=row["protein_consumed"],
        )

    @staticmethod
    def upsert_entry(
        conn: sqlite3.Connection,
        input_id: int,
        log_date: date,
        result: ScoreResult,
    ) -> None:
        """Insert or replace the score for a daily input."""
        conn.execute(
            """
            INSERT INTO daily_ledger (input_id, date, target_calories, target_protein,
                                      calculated_tdee, net_deficit, deficit_adherence_pct,
                                      execution_score, execution_label)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(input_id) DO UPDATE SET
                date = excluded.date,
                target_calories = excluded.target_calories,
                target_protein = excluded.target_protein,
                calculated_tdee = excluded.calculated_tdee,
                net_deficit = excluded.net_deficit,
                deficit_adherence_pct = excluded.deficit_adherence_pct,
                execution_score = excluded.execution_score,
                execution_label = excluded.execution_label
            """,
            (
                input_id,
                log_date.isoformat(),
                result.target_calories,
                result.target_protein,
                result.calculated_tdee,
                result.net_deficit,
                result.deficit_adherence_pct,
                result.score,
                result.label.value,
            ),
        )

    @staticmethod
    def get_history(
        conn: sqlite3.Connection,
        user_id: str,
        days: Optional[int] = None,
    ) -> list[LedgerEntry]:
        """
        Get stored scores for a user, newest first.

        Args:
            user_id: User ID
            days: If set, return only the last N entries

        Raises:
            ValueError: If days is less than 1
        """
        query = """
            SELECT l.*, i.weight_kg, i.calories_consumed, i.protein_consumed
            FROM daily_ledger l
            JOIN daily_inputs i ON i.input_id = l.input_id
            WHERE i.user_id = ?
            ORDER BY l.date DESC
        """
        params: list = [user_id]

        if days is not None:
            if days < 1:
                raise ValueError(f"days must be at least 1, got {days}")
            query += " LIMIT ?"
            params.append(days)

        rows = conn.execute(query, params).fetchall()
        return [LedgerQueries._from_row(row) for row in rows]

    @staticmethod
    def get_latest_entry(conn: sqlite3.Connection, user_id: str) -> Optional[LedgerEntry]:
        """Get the most recent stored score for a user."""
        history = LedgerQueries.get_history(conn, user_id, days=1)
        return history[0] if history else None
