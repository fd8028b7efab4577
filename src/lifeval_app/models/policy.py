"""Policy definition and policy holder models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from lifeval_app.models.rates import RateKind, RateTable


class PolicyHolderStatus(str, Enum):
    ACTIVE = "active"
    LAPSED = "lapsed"
    SURRENDERED = "surrendered"
    MATURED = "matured"


@dataclass(frozen=True)
class Policy:
    """Configured insurance product, read-only to the valuation engine."""

    policy_code: str
    policy_type: str
    name: str
    min_sum_assured: Decimal
    max_sum_assured: Decimal
    base_multiplier: Decimal = Decimal("1")
    guaranteed_interest_rate: Decimal = Decimal("0")
    terminal_bonus_rate: Decimal = Decimal("0")
    include_adb: bool = False
    adb_percentage: Decimal = Decimal("0")
    include_ptd: bool = False
    ptd_percentage: Decimal = Decimal("0")
    gsv_rates: RateTable = field(default_factory=lambda: RateTable.empty(RateKind.GSV))
    ssv_configs: RateTable = field(default_factory=lambda: RateTable.empty(RateKind.SSV))


@dataclass(frozen=True)
class PolicyHolder:
    """One issued policy."""

    policy_number: str
    customer_ref: str
    policy_ref: str
    sum_assured: Decimal
    issue_date: date
    status: PolicyHolderStatus = PolicyHolderStatus.ACTIVE
    date_of_birth: date | None = None
