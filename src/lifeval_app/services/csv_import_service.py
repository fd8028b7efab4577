"""CSV import service for rate tables."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from lifeval_app.core.errors import ValidationError
from lifeval_app.models.rates import AnyRow, RateKind, RateRow, RateTable, SsvRow
from lifeval_app.services.policy_service import PolicyService

logger = logging.getLogger(__name__)

DURATION_CSV_HEADERS = ["min_duration", "max_duration", "rate"]
SSV_CSV_HEADERS = [*DURATION_CSV_HEADERS, "eligibility_years"]
MORTALITY_CSV_HEADERS = ["age_start", "age_end", "rate"]
MAX_ERROR_MESSAGES = 10


@dataclass
class CsvImportResult:
    """Result summary for CSV imports."""

    created_count: int
    failed_count: int
    error_messages: list[str] = field(default_factory=list)
    table: RateTable | None = None


def required_headers(kind: RateKind) -> list[str]:
    if kind is RateKind.SSV:
        return SSV_CSV_HEADERS
    if kind is RateKind.MORTALITY:
        return MORTALITY_CSV_HEADERS
    return DURATION_CSV_HEADERS


def _parse_row(kind: RateKind, row: dict[str, str]) -> AnyRow:
    if kind is RateKind.MORTALITY:
        low, high = int(row["age_start"]), int(row["age_end"])
    else:
        low, high = int(row["min_duration"]), int(row["max_duration"])
    rate = Decimal(row["rate"].strip())

    if kind is RateKind.SSV:
        return SsvRow(
            min_duration=low,
            max_duration=high,
            rate=rate,
            eligibility_years=int(row["eligibility_years"]),
        )
    return RateRow(min_duration=low, max_duration=high, rate=rate)


class CsvImportService:
    """Reads rate rows from CSV and hands complete tables to the policy service."""

    def __init__(self, policy_service: PolicyService, clamp_above: bool = True):
        self._policy_service = policy_service
        self._clamp_above = clamp_above

    @staticmethod
    def _validate_headers(fieldnames: list[str] | None, required: list[str]) -> None:
        if fieldnames is None:
            raise ValidationError("CSV header row is missing.")
        missing = [header for header in required if header not in fieldnames]
        if missing:
            raise ValidationError(f"CSV headers missing: {', '.join(missing)}")

    def read_table(self, file_path: str, kind: RateKind) -> CsvImportResult:
        """Parse a rate CSV; the table is built only when every row is valid."""
        rows: list[AnyRow] = []
        failed_count = 0
        errors: list[str] = []

        with open(file_path, "r", encoding="utf-8-sig", newline="") as csv_file:
            reader = csv.DictReader(csv_file)
            self._validate_headers(reader.fieldnames, required_headers(kind))

            for row_index, row in enumerate(reader, start=2):
                try:
                    rows.append(_parse_row(kind, row))
                except (InvalidOperation, ValueError, KeyError, TypeError, AttributeError) as error:
                    failed_count += 1
                    if len(errors) < MAX_ERROR_MESSAGES:
                        errors.append(f"row {row_index}: {error}")

        if failed_count:
            return CsvImportResult(created_count=0, failed_count=failed_count, error_messages=errors)

        try:
            table = RateTable.build(kind, rows, clamp_above=self._clamp_above)
        except ValidationError as error:
            return CsvImportResult(created_count=0, failed_count=len(rows), error_messages=[str(error)])

        return CsvImportResult(created_count=len(rows), failed_count=0, table=table)

    def import_rates(self, policy_code: str, file_path: str, kind: RateKind) -> CsvImportResult:
        """Replace a policy's GSV or SSV table with the rows of a CSV file."""
        if kind is RateKind.MORTALITY:
            raise ValidationError("Mortality tables are read with read_table, not stored per policy.")

        result = self.read_table(file_path, kind)
        if result.table is None:
            logger.warning(
                "Rate import for %s rejected: %d invalid rows", policy_code, result.failed_count
            )
            return result

        self._policy_service.replace_rate_table(policy_code, result.table)
        logger.info("Imported %d %s tiers for %s", result.created_count, kind.value, policy_code)
        return result
