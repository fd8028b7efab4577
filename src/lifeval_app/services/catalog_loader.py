"""Load policy definitions and issued policies from a YAML catalog."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from lifeval_app.core.errors import ValidationError
from lifeval_app.models.policy import Policy, PolicyHolder, PolicyHolderStatus
from lifeval_app.models.rates import RateKind, RateRow, RateTable, SsvRow


def _as_date(value: Any) -> date:
    # PyYAML already turns unquoted ISO dates into date objects.
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))


def _parse_policy(raw: dict[str, Any], clamp_above: bool) -> Policy:
    gsv_rows = [
        RateRow(
            min_duration=int(row["min_year"]),
            max_duration=int(row["max_year"]),
            rate=Decimal(str(row["rate"])),
        )
        for row in raw.get("gsv_rates") or []
    ]
    ssv_rows = [
        SsvRow(
            min_duration=int(row["min_year"]),
            max_duration=int(row["max_year"]),
            rate=Decimal(str(row["rate"])),
            eligibility_years=int(row.get("eligibility_years", 0)),
        )
        for row in raw.get("ssv_configs") or []
    ]
    return Policy(
        policy_code=str(raw["policy_code"]),
        policy_type=str(raw.get("policy_type", "endowment")),
        name=str(raw.get("name", raw["policy_code"])),
        min_sum_assured=Decimal(str(raw["min_sum_assured"])),
        max_sum_assured=Decimal(str(raw["max_sum_assured"])),
        base_multiplier=Decimal(str(raw.get("base_multiplier", "1"))),
        guaranteed_interest_rate=Decimal(str(raw.get("guaranteed_interest_rate", "0"))),
        terminal_bonus_rate=Decimal(str(raw.get("terminal_bonus_rate", "0"))),
        include_adb=bool(raw.get("include_adb", False)),
        adb_percentage=Decimal(str(raw.get("adb_percentage", "0"))),
        include_ptd=bool(raw.get("include_ptd", False)),
        ptd_percentage=Decimal(str(raw.get("ptd_percentage", "0"))),
        gsv_rates=RateTable.build(RateKind.GSV, gsv_rows, clamp_above=clamp_above),
        ssv_configs=RateTable.build(RateKind.SSV, ssv_rows, clamp_above=clamp_above),
    )


def _parse_holder(raw: dict[str, Any]) -> PolicyHolder:
    birth = raw.get("date_of_birth")
    return PolicyHolder(
        policy_number=str(raw["policy_number"]),
        customer_ref=str(raw["customer_ref"]),
        policy_ref=str(raw["policy_code"]),
        sum_assured=Decimal(str(raw["sum_assured"])),
        issue_date=_as_date(raw["issue_date"]),
        status=PolicyHolderStatus(raw.get("status", "active")),
        date_of_birth=_as_date(birth) if birth else None,
    )


def parse_catalog(
    raw: dict[str, Any] | None,
    clamp_above: bool = True,
) -> tuple[list[Policy], list[PolicyHolder]]:
    """Turn a parsed catalog mapping into policies and holders."""
    raw = raw or {}
    try:
        policies = [_parse_policy(item, clamp_above) for item in raw.get("policies") or []]
        holders = [_parse_holder(item) for item in raw.get("policy_holders") or []]
    except (KeyError, TypeError, ValueError, ArithmeticError) as error:
        raise ValidationError(f"Invalid catalog entry: {error}") from error
    return policies, holders


def load_catalog(path: Path, clamp_above: bool = True) -> tuple[list[Policy], list[PolicyHolder]]:
    """Read a YAML catalog file."""
    with path.open("r", encoding="utf-8") as file:
        raw = yaml.safe_load(file)
    return parse_catalog(raw, clamp_above=clamp_above)
