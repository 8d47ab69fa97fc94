"""Pytest fixtures for metatrace tests."""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest

from metatrace.config.settings import DatabaseConfig, Settings, set_settings
from metatrace.db.connection import DatabaseConnection, set_db
from metatrace.engine.models import DailyLog, Target


@pytest.fixture
def temp_db():
    """Create a temporary database with schema."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    db = DatabaseConnection(db_path)
    db.initialize_schema()

    yield db

    # Cleanup
    db_path.unlink(missing_ok=True)


@pytest.fixture
def cli_env(temp_db):
    """Point the global settings and database at the temporary database."""
    set_settings(Settings(database=DatabaseConfig(path=temp_db.db_path)))
    set_db(temp_db)

    yield temp_db

    set_db(None)
    set_settings(None)


@pytest.fixture
def on_plan_log():
    """80 kg, 2200 kcal, 180 g protein, 3.5 L, 400 kcal training, slept well."""
    return DailyLog(
        log_date=date(2025, 3, 10),
        weight_kg=80.0,
        body_fat_pct=20.0,
        calories_consumed=2200,
        protein_consumed_g=180,
        hydration_liters=3.5,
        active_calories_burned=400,
        training_completed=True,
        sleep_adequate=True,
    )


@pytest.fixture
def standard_target():
    """2200 kcal / 180 g / 3.5 L, week 1 covering early March 2025."""
    return Target(
        daily_calories_target=2200,
        daily_protein_target=180,
        hydration_target_l=3.5,
        start_date=date(2025, 3, 3),
        end_date=date(2025, 3, 17),
        week_number=1,
    )
