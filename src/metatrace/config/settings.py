"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from metatrace.engine.targets import TargetDefaults


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".metatrace"


def _default_db_path() -> Path:
    """Return the default database path."""
    return _default_config_dir() / "metatrace.db"


@dataclass
class DatabaseConfig:
    """Database configuration."""

    path: Path = field(default_factory=_default_db_path)


@dataclass
class TargetConfig:
    """Goal values used when no stored target applies."""

    calories: float = 2000
    protein: float = 150
    hydration_l: float = 3.0
    window_days: int = 14
    steps: Optional[int] = None

    def to_defaults(self) -> TargetDefaults:
        return TargetDefaults(
            daily_calories_target=self.calories,
            daily_protein_target=self.protein,
            hydration_target_l=self.hydration_l,
            window_days=self.window_days,
            daily_steps_target=self.steps,
        )


def _new_user_target() -> TargetConfig:
    return TargetConfig(
        calories=2200, protein=180, hydration_l=3.5, window_days=14, steps=10000
    )


@dataclass
class SimulationConfig:
    """Default trajectory simulation inputs."""

    activity_kcal: float = 400.0
    weeks: int = 12


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"


@dataclass
class Settings:
    """Main application settings."""

    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    scoring_defaults: TargetConfig = field(default_factory=TargetConfig)
    new_user_target: TargetConfig = field(default_factory=_new_user_target)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.metatrace/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse database config
        if "database" in data:
            db_data = data["database"]
            if "path" in db_data:
                settings.database.path = Path(db_data["path"]).expanduser()

        # Parse target defaults
        if "scoring_defaults" in data:
            _apply_target_config(settings.scoring_defaults, data["scoring_defaults"])
        if "new_user_target" in data:
            _apply_target_config(settings.new_user_target, data["new_user_target"])

        # Parse simulation config
        if "simulation" in data:
            sim_data = data["simulation"]
            if "activity_kcal" in sim_data:
                settings.simulation.activity_kcal = float(sim_data["activity_kcal"])
            if "weeks" in sim_data:
                settings.simulation.weeks = int(sim_data["weeks"])

        # Parse logging config
        if "logging" in data:
            log_data = data["logging"]
            if "level" in log_data:
                settings.logging.level = str(log_data["level"]).upper()

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.metatrace/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "database": {
                "path": str(self.database.path),
            },
            "scoring_defaults": _target_config_dict(self.scoring_defaults),
            "new_user_target": _target_config_dict(self.new_user_target),
            "simulation": {
                "activity_kcal": self.simulation.activity_kcal,
                "weeks": self.simulation.weeks,
            },
            "logging": {
                "level": self.logging.level,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def _apply_target_config(config: TargetConfig, data: dict) -> None:
    if "calories" in data:
        config.calories = float(data["calories"])
    if "protein" in data:
        config.protein = float(data["protein"])
    if "hydration_l" in data:
        config.hydration_l = float(data["hydration_l"])
    if "window_days" in data:
        config.window_days = int(data["window_days"])
    if "steps" in data:
        config.steps = int(data["steps"]) if data["steps"] is not None else None


def _target_config_dict(config: TargetConfig) -> dict:
    return {
        "calories": config.calories,
        "protein": config.protein,
        "hydration_l": config.hydration_l,
        "window_days": config.window_days,
        "steps": config.steps,
    }


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings


def set_settings(settings: Optional[Settings]) -> None:
    """Replace the global settings instance (None resets to lazy loading)."""
    global _settings
    _settings = settings
