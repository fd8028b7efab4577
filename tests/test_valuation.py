"""Tests for surrender value computation."""

from __future__ import annotations

from dataclasses import replace
from datetime import date
from decimal import Decimal

import pytest

from factories import make_holder, make_loan, make_policy
from lifeval_app.core.errors import InvalidDateError, NoApplicableRateError, NotEligibleError, ValidationError
from lifeval_app.models.rates import RateKind, RateRow, RateTable, SsvRow
from lifeval_app.services.valuation_service import (
    check_sum_assured,
    compute_gsv,
    compute_net_value,
    compute_ssv,
    holder_mortality_rate,
    net_value_from_figures,
    policy_years,
    surrender_value,
)


def test_gsv_for_three_year_old_policy(policy, holder) -> None:
    result = compute_gsv(policy, holder, date(2023, 1, 15))

    assert result.elapsed_years == 3
    assert result.rate == Decimal("35.00")
    assert result.gsv == Decimal("350000")


def test_elapsed_years_are_floored(holder) -> None:
    assert policy_years(holder, date(2023, 1, 14)) == 2
    assert policy_years(holder, date(2023, 1, 15)) == 3


def test_leap_day_issue_anniversary_falls_on_february_28() -> None:
    leap_holder = make_holder(issue_date=date(2020, 2, 29))
    assert policy_years(leap_holder, date(2021, 2, 27)) == 0
    assert policy_years(leap_holder, date(2021, 2, 28)) == 1


def test_gsv_rejects_date_before_issue(policy, holder) -> None:
    with pytest.raises(InvalidDateError):
        compute_gsv(policy, holder, date(2019, 12, 31))


def test_gsv_before_vesting_has_no_rate(policy, holder) -> None:
    with pytest.raises(NoApplicableRateError) as info:
        compute_gsv(policy, holder, date(2021, 6, 1))
    assert info.value.is_business_state


def test_gsv_beyond_last_tier_clamps(policy, holder) -> None:
    assert compute_gsv(policy, holder, date(2050, 1, 15)).rate == Decimal("70.00")


def test_ssv_within_eligible_tier(policy, holder) -> None:
    result = compute_ssv(policy, holder, date(2023, 6, 1))

    assert result.elapsed_years == 3
    assert result.eligibility_years == 3
    assert result.ssv == Decimal("300000")


def test_ssv_not_eligible_is_distinct_from_no_rate(holder) -> None:
    gated = replace(
        make_policy(),
        ssv_configs=RateTable.build(
            RateKind.SSV,
            [SsvRow(2, 10, Decimal("30.00"), eligibility_years=4)],
        ),
    )
    with pytest.raises(NotEligibleError) as info:
        compute_ssv(gated, holder, date(2023, 1, 15))
    assert info.value.eligibility_years == 4
    assert info.value.elapsed_years == 3


def test_ssv_without_tier_has_no_rate(policy, holder) -> None:
    with pytest.raises(NoApplicableRateError):
        compute_ssv(policy, holder, date(2022, 1, 15))


def test_surrender_value_is_greater_component(policy, holder) -> None:
    assert surrender_value(policy, holder, date(2023, 1, 15)) == Decimal("350000")
    assert surrender_value(policy, holder, date(2032, 1, 15)) == Decimal("800000")
    assert surrender_value(policy, holder, date(2021, 1, 15)) == Decimal("0")


def test_net_value_floors_at_zero_when_loan_exceeds_value() -> None:
    loan = make_loan(remaining_balance="400000", accrued_interest="10000", loan_amount="400000")
    net = net_value_from_figures(Decimal("350000"), Decimal("300000"), loan)

    assert net.net_value == Decimal("0")
    assert net.loan_exceeds_surrender_value is True
    assert net.loan_outstanding == Decimal("410000")


def test_net_value_without_loan(policy, holder) -> None:
    net = compute_net_value(policy, holder, date(2023, 1, 15))

    assert net.net_value == Decimal("350000")
    assert net.loan_exceeds_surrender_value is False


def test_net_value_with_loan(policy, holder) -> None:
    loan = make_loan(remaining_balance="100000", accrued_interest="2500", loan_amount="100000")
    net = compute_net_value(policy, holder, date(2023, 1, 15), loan)

    assert net.net_value == Decimal("247500")
    assert net.loan_exceeds_surrender_value is False


def test_sum_assured_band(policy) -> None:
    assert check_sum_assured(policy, make_holder("100000")).sum_assured == Decimal("100000")
    with pytest.raises(ValidationError):
        check_sum_assured(policy, make_holder("99999"))
    with pytest.raises(ValidationError):
        check_sum_assured(policy, make_holder("5000001"))


def test_holder_mortality_rate_uses_attained_age() -> None:
    table = RateTable.build(
        RateKind.MORTALITY,
        [RateRow(18, 37, Decimal("0.0012")), RateRow(38, 60, Decimal("0.0041"))],
    )
    holder = replace(make_holder(), date_of_birth=date(1985, 6, 1))

    assert holder_mortality_rate(table, holder, date(2023, 5, 31)) == Decimal("0.0012")
    assert holder_mortality_rate(table, holder, date(2023, 6, 1)) == Decimal("0.0041")
    with pytest.raises(ValidationError):
        holder_mortality_rate(table, make_holder(), date(2023, 6, 1))
