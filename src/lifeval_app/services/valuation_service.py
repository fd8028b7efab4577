"""Guaranteed and special surrender value computation."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal

from lifeval_app.core.dates import age_on, elapsed_years
from lifeval_app.core.errors import NoApplicableRateError, NotEligibleError, ValidationError
from lifeval_app.core.money import ZERO, percent_of
from lifeval_app.core.validation import validate_not_before, validate_sum_assured
from lifeval_app.models.loan import Loan
from lifeval_app.models.policy import Policy, PolicyHolder
from lifeval_app.models.rates import RateTable, SsvRow, mortality_rate
from lifeval_app.models.valuation import GsvResult, NetValue, SsvResult

logger = logging.getLogger(__name__)


def policy_years(holder: PolicyHolder, as_of_date: date) -> int:
    """Whole years in force; as_of_date must not precede issue_date."""
    validate_not_before(as_of_date, holder.issue_date, "issue date")
    return elapsed_years(holder.issue_date, as_of_date)


def compute_gsv(policy: Policy, holder: PolicyHolder, as_of_date: date) -> GsvResult:
    """Guaranteed surrender value from the policy's GSV tiers."""
    years = policy_years(holder, as_of_date)
    rate = policy.gsv_rates.lookup(years)
    if rate is None:
        raise NoApplicableRateError(
            f"No GSV tier for {years} policy years on {policy.policy_code}."
        )
    return GsvResult(
        elapsed_years=years,
        rate=rate,
        gsv=percent_of(holder.sum_assured, rate),
    )


def compute_ssv(policy: Policy, holder: PolicyHolder, as_of_date: date) -> SsvResult:
    """Special surrender value, gated by the matched tier's eligibility years."""
    years = policy_years(holder, as_of_date)
    row = policy.ssv_configs.find_row(years)
    if row is None:
        raise NoApplicableRateError(
            f"No SSV tier for {years} policy years on {policy.policy_code}."
        )

    eligibility = row.eligibility_years if isinstance(row, SsvRow) else 0
    if years < eligibility:
        raise NotEligibleError(years, eligibility)

    return SsvResult(
        elapsed_years=years,
        rate=row.rate,
        eligibility_years=eligibility,
        ssv=percent_of(holder.sum_assured, row.rate),
    )


def _gsv_or_zero(policy: Policy, holder: PolicyHolder, as_of_date: date) -> Decimal:
    try:
        return compute_gsv(policy, holder, as_of_date).gsv
    except NoApplicableRateError as error:
        logger.debug("GSV unavailable for %s: %s", holder.policy_number, error)
        return ZERO


def _ssv_or_zero(policy: Policy, holder: PolicyHolder, as_of_date: date) -> Decimal:
    try:
        return compute_ssv(policy, holder, as_of_date).ssv
    except (NoApplicableRateError, NotEligibleError) as error:
        logger.debug("SSV unavailable for %s: %s", holder.policy_number, error)
        return ZERO


def surrender_values(
    policy: Policy,
    holder: PolicyHolder,
    as_of_date: date,
) -> tuple[Decimal, Decimal]:
    """Return (gsv, ssv) with unavailable components reported as zero."""
    return (
        _gsv_or_zero(policy, holder, as_of_date),
        _ssv_or_zero(policy, holder, as_of_date),
    )


def surrender_value(policy: Policy, holder: PolicyHolder, as_of_date: date) -> Decimal:
    """Greater of GSV and SSV."""
    return max(surrender_values(policy, holder, as_of_date))


def net_value_from_figures(gsv: Decimal, ssv: Decimal, loan: Loan | None = None) -> NetValue:
    """Offset the better surrender value by the loan's outstanding amount."""
    gross = max(gsv, ssv)
    outstanding = loan.outstanding if loan is not None else ZERO
    raw = gross - outstanding
    if raw < 0:
        return NetValue(
            gross=gross,
            loan_outstanding=outstanding,
            net_value=ZERO,
            loan_exceeds_surrender_value=True,
        )
    return NetValue(
        gross=gross,
        loan_outstanding=outstanding,
        net_value=raw,
        loan_exceeds_surrender_value=False,
    )


def compute_net_value(
    policy: Policy,
    holder: PolicyHolder,
    as_of_date: date,
    loan: Loan | None = None,
) -> NetValue:
    """Net surrender value after loan offset."""
    gsv, ssv = surrender_values(policy, holder, as_of_date)
    return net_value_from_figures(gsv, ssv, loan)


def check_sum_assured(policy: Policy, holder: PolicyHolder) -> PolicyHolder:
    """Ensure the holder's sum assured lies within the policy's band."""
    validate_sum_assured(holder.sum_assured, policy.min_sum_assured, policy.max_sum_assured)
    return holder


def holder_mortality_rate(table: RateTable, holder: PolicyHolder, on_date: date) -> Decimal | None:
    """Mortality rate for the holder's attained age on on_date."""
    if holder.date_of_birth is None:
        raise ValidationError(f"Policy {holder.policy_number} has no date of birth.")
    validate_not_before(on_date, holder.date_of_birth, "date of birth")
    return mortality_rate(table, age_on(holder.date_of_birth, on_date))
