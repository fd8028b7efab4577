from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from lifeval_app.core import config as app_config


def test_load_config_reads_yaml(tmp_path: Path) -> None:
    config_file = tmp_path / "engine.yaml"
    config_file.write_text(
        "db:\n"
        "  path: data/test.db\n"
        "logging:\n"
        "  level: debug\n"
        "  retention_days: 30\n"
        "valuation:\n"
        "  loan_capacity_percentage: 80\n"
        "  day_count_basis: 360\n"
        "  clamp_above_highest_tier: false\n",
        encoding="utf-8",
    )

    config = app_config.load_config(config_file)

    assert config.database.path == "data/test.db"
    assert config.logging.level == "DEBUG"
    assert config.logging.retention_days == 30
    assert config.valuation.loan_capacity_percentage == Decimal("80")
    assert config.valuation.day_count_basis == 360
    assert config.valuation.clamp_above_highest_tier is False


def test_missing_config_file_uses_defaults(tmp_path: Path) -> None:
    config = app_config.load_config(tmp_path / "absent.yaml")

    assert config.database.path == app_config.DEFAULT_DB_PATH
    assert config.valuation.loan_capacity_percentage == Decimal("90")
    assert config.valuation.day_count_basis == 365
    assert config.valuation.clamp_above_highest_tier is True


def test_invalid_day_count_basis() -> None:
    with pytest.raises(ValueError):
        app_config.parse_config({"valuation": {"day_count_basis": 364}})


def test_section_must_be_mapping() -> None:
    with pytest.raises(ValueError):
        app_config.parse_config({"db": "lifeval.db"})


def test_config_path_from_env(monkeypatch, tmp_path: Path) -> None:
    target = tmp_path / "custom.yaml"
    monkeypatch.setenv(app_config.CONFIG_PATH_ENV, str(target))

    assert app_config.resolve_default_config_path() == target
