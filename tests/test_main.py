from __future__ import annotations

import logging
from pathlib import Path

import pytest

from lifeval_app.main import EXIT_NOT_FOUND, EXIT_REJECTED, run

EXAMPLE_CATALOG = Path(__file__).resolve().parents[1] / "config" / "catalog.example.yaml"


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logging.getLogger("lifeval_app").handlers.clear()


def write_config(tmp_path: Path) -> str:
    config_file = tmp_path / "engine.yaml"
    config_file.write_text(f"db:\n  path: {tmp_path / 'cli.db'}\n", encoding="utf-8")
    return str(config_file)


def test_cli_report_flow(tmp_path, capsys) -> None:
    config = write_config(tmp_path)

    assert run(["--config", config, "load-catalog", str(EXAMPLE_CATALOG)]) == 0
    assert run(["--config", config, "report", "1751451440001", "--as-of", "2023-01-15"]) == 0

    output = capsys.readouterr().out
    assert "Registered 1 policies and 1 policy holders" in output
    assert "350000.00" in output
    assert "315000.00" in output


def test_cli_exit_codes(tmp_path, capsys) -> None:
    config = write_config(tmp_path)
    run(["--config", config, "load-catalog", str(EXAMPLE_CATALOG)])

    assert run(["--config", config, "report", "missing", "--as-of", "2023-01-15"]) == EXIT_NOT_FOUND
    assert (
        run(["--config", config, "open-loan", "1751451440001", "400000", "--rate", "0.1", "--date", "2023-01-15"])
        == EXIT_REJECTED
    )
    assert "exceeds" in capsys.readouterr().err.lower()


def test_cli_rejects_non_finite_rate(tmp_path, capsys) -> None:
    config = write_config(tmp_path)
    run(["--config", config, "load-catalog", str(EXAMPLE_CATALOG)])

    exit_code = run(
        ["--config", config, "open-loan", "1751451440001", "1000", "--rate", "NaN", "--date", "2023-01-15"]
    )

    assert exit_code == EXIT_REJECTED
    assert "Interest rate" in capsys.readouterr().err
