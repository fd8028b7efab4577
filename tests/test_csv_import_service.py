"""Tests for CSV import service."""

from __future__ import annotations

import csv
from decimal import Decimal

import pytest

from lifeval_app.core.errors import ValidationError
from lifeval_app.models.rates import RateKind, SsvRow, mortality_rate
from lifeval_app.services.csv_import_service import CsvImportService


class FakePolicyService:
    def __init__(self):
        self.tables = []

    def replace_rate_table(self, policy_code, table):
        self.tables.append((policy_code, table))
        return len(table)


def write_csv(path, header, rows):
    with path.open("w", encoding="utf-8", newline="") as file:
        writer = csv.writer(file)
        writer.writerow(header)
        writer.writerows(rows)
    return str(path)


def test_import_gsv_rates(tmp_path) -> None:
    csv_path = write_csv(
        tmp_path / "gsv.csv",
        ["min_duration", "max_duration", "rate"],
        [["6", "10", "50"], ["2", "5", "35"]],
    )
    policy_service = FakePolicyService()

    result = CsvImportService(policy_service).import_rates("END-20", csv_path, RateKind.GSV)

    assert result.created_count == 2
    assert result.failed_count == 0
    code, table = policy_service.tables[0]
    assert code == "END-20"
    assert table.lookup(7) == Decimal("50")
    assert table.rows[0].min_duration == 2


def test_import_ssv_rates_with_eligibility(tmp_path) -> None:
    csv_path = write_csv(
        tmp_path / "ssv.csv",
        ["min_duration", "max_duration", "rate", "eligibility_years"],
        [["3", "10", "30", "3"]],
    )

    result = CsvImportService(FakePolicyService()).read_table(csv_path, RateKind.SSV)

    row = result.table.rows[0]
    assert isinstance(row, SsvRow)
    assert row.eligibility_years == 3


def test_invalid_row_rejects_whole_file(tmp_path) -> None:
    csv_path = write_csv(
        tmp_path / "gsv.csv",
        ["min_duration", "max_duration", "rate"],
        [["2", "5", "35"], ["6", "ten", "50"], ["11", "20", "abc"]],
    )
    policy_service = FakePolicyService()

    result = CsvImportService(policy_service).import_rates("END-20", csv_path, RateKind.GSV)

    assert result.created_count == 0
    assert result.failed_count == 2
    assert result.table is None
    assert result.error_messages[0].startswith("row 3:")
    assert policy_service.tables == []


def test_overlapping_rows_are_rejected(tmp_path) -> None:
    csv_path = write_csv(
        tmp_path / "gsv.csv",
        ["min_duration", "max_duration", "rate"],
        [["2", "5", "35"], ["4", "8", "50"]],
    )

    result = CsvImportService(FakePolicyService()).read_table(csv_path, RateKind.GSV)

    assert result.table is None
    assert result.created_count == 0
    assert len(result.error_messages) == 1


def test_missing_headers(tmp_path) -> None:
    csv_path = write_csv(tmp_path / "ssv.csv", ["min_duration", "max_duration", "rate"], [])

    with pytest.raises(ValidationError):
        CsvImportService(FakePolicyService()).read_table(csv_path, RateKind.SSV)


def test_mortality_table_is_read_but_not_imported(tmp_path) -> None:
    csv_path = write_csv(
        tmp_path / "mortality.csv",
        ["age_start", "age_end", "rate"],
        [["0", "39", "0.0012"], ["40", "120", "0.0041"]],
    )
    service = CsvImportService(FakePolicyService())

    result = service.read_table(csv_path, RateKind.MORTALITY)
    assert mortality_rate(result.table, 45) == Decimal("0.0041")

    with pytest.raises(ValidationError):
        service.import_rates("END-20", csv_path, RateKind.MORTALITY)
