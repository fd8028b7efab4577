"""Computed valuation results."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class GsvResult:
    elapsed_years: int
    rate: Decimal
    gsv: Decimal


@dataclass(frozen=True)
class SsvResult:
    elapsed_years: int
    rate: Decimal
    eligibility_years: int
    ssv: Decimal


@dataclass(frozen=True)
class NetValue:
    """Surrender value after loan offset, never negative."""

    gross: Decimal
    loan_outstanding: Decimal
    net_value: Decimal
    loan_exceeds_surrender_value: bool


@dataclass(frozen=True)
class ValuationReport:
    """Figures displayed for one policy holder at a point in time."""

    policy_number: str
    as_of_date: date
    gsv: Decimal
    ssv: Decimal
    net_value: Decimal
    available_loan_capacity: Decimal
    loan_exceeds_surrender_value: bool
