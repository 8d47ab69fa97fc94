"""SQLite database schema definitions."""

# Stored in PRAGMA user_version once the script below has run
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Goal definitions; at most one ACTIVE protocol per user
CREATE TABLE IF NOT EXISTS protocols (
    protocol_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'ACTIVE' CHECK(status IN ('ACTIVE', 'COMPLETED', 'PAUSED')),
    goal_type TEXT CHECK(goal_type IN ('FAT_LOSS', 'RECOMP', 'GAIN') OR goal_type IS NULL),
    start_date DATE NOT NULL,
    initial_weight_kg REAL,
    initial_bodyfat_pct REAL,
    goal_weight_kg REAL,
    goal_bodyfat_pct REAL,
    target_end_date DATE,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_protocols_user_status ON protocols(user_id, status);

-- Calorie/protein/hydration targets issued under a protocol
CREATE TABLE IF NOT EXISTS weekly_targets (
    target_id INTEGER PRIMARY KEY AUTOINCREMENT,
    protocol_id INTEGER NOT NULL,
    week_number INTEGER NOT NULL,
    start_date DATE NOT NULL,
    end_date DATE NOT NULL,
    daily_calories_target REAL NOT NULL CHECK(daily_calories_target > 0),
    daily_protein_target REAL NOT NULL CHECK(daily_protein_target > 0),
    hydration_target_l REAL,
    daily_steps_target INTEGER,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    FOREIGN KEY (protocol_id) REFERENCES protocols(protocol_id)
);

CREATE INDEX IF NOT EXISTS idx_weekly_targets_protocol ON weekly_targets(protocol_id, week_number);

-- One log per user per date
CREATE TABLE IF NOT EXISTS daily_inputs (
    input_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    date DATE NOT NULL,
    weight_kg REAL NOT NULL,
    body_fat_pct REAL,
    calories_consumed INTEGER NOT NULL,
    protein_consumed INTEGER NOT NULL,
    hydration_liters REAL NOT NULL,
    active_calories_burned INTEGER NOT NULL DEFAULT 0,
    training_completed BOOLEAN NOT NULL,
    is_sleep_adequate BOOLEAN NOT NULL,
    sleep_quality_score INTEGER,
    UNIQUE(user_id, date)
);

CREATE INDEX IF NOT EXISTS idx_daily_inputs_user_date ON daily_inputs(user_id, date);

-- Score derived from each daily input (1:1)
CREATE TABLE IF NOT EXISTS daily_ledger (
    ledger_id INTEGER PRIMARY KEY AUTOINCREMENT,
    input_id INTEGER NOT NULL UNIQUE,
    date DATE NOT NULL,
    target_calories REAL NOT NULL,
    target_protein REAL NOT NULL,
    calculated_tdee INTEGER NOT NULL,
    net_deficit INTEGER NOT NULL,
    deficit_adherence_pct REAL NOT NULL,
    execution_score INTEGER NOT NULL,
    execution_label TEXT NOT NULL CHECK(execution_label IN ('OPTIMAL', 'ON_TRACK', 'AT_RISK', 'OFF_TRACK')),
    FOREIGN KEY (input_id) REFERENCES daily_inputs(input_id)
);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
