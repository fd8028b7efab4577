"""Builders for engine test data."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from lifeval_app.models.loan import Loan
from lifeval_app.models.policy import Policy, PolicyHolder
from lifeval_app.models.rates import RateKind, RateRow, RateTable, SsvRow


def make_policy(clamp_above: bool = True) -> Policy:
    return Policy(
        policy_code="END-20",
        policy_type="endowment",
        name="Endowment 20",
        min_sum_assured=Decimal("100000"),
        max_sum_assured=Decimal("5000000"),
        gsv_rates=RateTable.build(
            RateKind.GSV,
            [
                RateRow(2, 5, Decimal("35.00")),
                RateRow(6, 10, Decimal("50.00")),
                RateRow(11, 20, Decimal("70.00")),
            ],
            clamp_above=clamp_above,
        ),
        ssv_configs=RateTable.build(
            RateKind.SSV,
            [
                SsvRow(3, 10, Decimal("30.00"), eligibility_years=3),
                SsvRow(11, 20, Decimal("80.00"), eligibility_years=3),
            ],
            clamp_above=clamp_above,
        ),
    )


def make_holder(sum_assured: str = "1000000", issue_date: date = date(2020, 1, 15)) -> PolicyHolder:
    return PolicyHolder(
        policy_number="1751451440001",
        customer_ref="CUST-1",
        policy_ref="END-20",
        sum_assured=Decimal(sum_assured),
        issue_date=issue_date,
    )


def make_loan(
    remaining_balance: str = "50000",
    accrued_interest: str = "5000",
    loan_amount: str = "50000",
    interest_rate: str = "0.10",
    last_interest_date: date = date(2024, 1, 1),
) -> Loan:
    return Loan(
        loan_id="LN-1",
        policy_holder_ref="1751451440001",
        loan_amount=Decimal(loan_amount),
        interest_rate=Decimal(interest_rate),
        disbursement_date=date(2023, 1, 1),
        last_interest_date=last_interest_date,
        accrued_interest=Decimal(accrued_interest),
        remaining_balance=Decimal(remaining_balance),
    )
