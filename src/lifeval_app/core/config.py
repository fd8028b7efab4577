"""Configuration loader for database, logging and valuation settings."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from lifeval_app.core.validation import validate_percentage


@dataclass(frozen=True)
class DatabaseConfig:
    path: str


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    retention_days: int


@dataclass(frozen=True)
class ValuationConfig:
    loan_capacity_percentage: Decimal
    day_count_basis: int
    clamp_above_highest_tier: bool


@dataclass(frozen=True)
class AppConfig:
    database: DatabaseConfig
    logging: LoggingConfig
    valuation: ValuationConfig


DEFAULT_CONFIG_REL_PATH = Path("config/engine.yaml")
CONFIG_PATH_ENV = "LIFEVAL_CONFIG_PATH"
DEFAULT_DB_PATH = "lifeval.db"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_RETENTION_DAYS = 1095
DEFAULT_CAPACITY_PERCENTAGE = "90"
DEFAULT_DAY_COUNT_BASIS = 365


def resolve_default_config_path() -> Path:
    """Resolve configuration path for source and packaged execution."""
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        return Path(env_path)

    candidates: list[Path] = []

    if getattr(sys, "frozen", False):
        exe_dir = Path(sys.executable).resolve().parent
        candidates.append(exe_dir / DEFAULT_CONFIG_REL_PATH)

    candidates.append(Path.cwd() / DEFAULT_CONFIG_REL_PATH)
    candidates.append(Path(__file__).resolve().parents[3] / DEFAULT_CONFIG_REL_PATH)

    for candidate in candidates:
        if candidate.exists():
            return candidate

    return candidates[0] if candidates else DEFAULT_CONFIG_REL_PATH


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping.")
    return value


def parse_config(raw: dict[str, Any] | None) -> AppConfig:
    """Build AppConfig from a parsed YAML mapping, filling defaults."""
    raw = raw or {}
    db = _section(raw, "db")
    logging_section = _section(raw, "logging")
    valuation = _section(raw, "valuation")

    day_count_basis = int(valuation.get("day_count_basis", DEFAULT_DAY_COUNT_BASIS))
    if day_count_basis not in (360, 365):
        raise ValueError("valuation.day_count_basis must be 360 or 365.")

    return AppConfig(
        database=DatabaseConfig(path=str(db.get("path", DEFAULT_DB_PATH))),
        logging=LoggingConfig(
            level=str(logging_section.get("level", DEFAULT_LOG_LEVEL)).upper(),
            retention_days=int(logging_section.get("retention_days", DEFAULT_RETENTION_DAYS)),
        ),
        valuation=ValuationConfig(
            loan_capacity_percentage=validate_percentage(
                str(valuation.get("loan_capacity_percentage", DEFAULT_CAPACITY_PERCENTAGE)),
                "valuation.loan_capacity_percentage",
            ),
            day_count_basis=day_count_basis,
            clamp_above_highest_tier=bool(valuation.get("clamp_above_highest_tier", True)),
        ),
    )


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the app configuration from YAML; a missing file yields defaults."""
    path = config_path or resolve_default_config_path()
    if not path.exists():
        return parse_config(None)
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file)
    return parse_config(raw)
