"""Loan interest accrual and repayment allocation.

Every function here is pure: it takes a `Loan` snapshot and returns a new one
(or a `RepaymentResult` carrying the new snapshot and its ledger entry). The
caller persists results and must serialize calls for a given loan.

Interest is simple and never capitalized:

    interest = remaining_balance * interest_rate * days / day_count_basis

Each accrual books whole cents into accrued_interest and keeps the sub-cent
remainder in interest_carry for the next period.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from datetime import date
from decimal import Decimal

from lifeval_app.core.dates import days_between
from lifeval_app.core.errors import (
    ExceedsBalanceError,
    ExceedsCapacityError,
    ExceedsInterestDueError,
    LoanSettledError,
)
from lifeval_app.core.money import ZERO, percent_of, quantize_money
from lifeval_app.core.validation import (
    validate_interest_rate,
    validate_not_before,
    validate_percentage,
    validate_positive_amount,
)
from lifeval_app.models.loan import Loan, LoanRepayment, LoanStatus, RepaymentResult, RepaymentType
from lifeval_app.models.policy import Policy, PolicyHolder
from lifeval_app.services.valuation_service import surrender_value

logger = logging.getLogger(__name__)

DEFAULT_DAY_COUNT_BASIS = 365


def period_interest(
    balance: Decimal,
    annual_rate: Decimal,
    days: int,
    day_count_basis: int = DEFAULT_DAY_COUNT_BASIS,
) -> Decimal:
    """Unrounded simple interest for a number of days."""
    if days <= 0 or balance <= 0:
        return ZERO
    return balance * annual_rate * Decimal(days) / Decimal(day_count_basis)


def interest_for_period(
    balance: Decimal,
    annual_rate: Decimal,
    days: int,
    day_count_basis: int = DEFAULT_DAY_COUNT_BASIS,
) -> Decimal:
    """Simple interest for a number of days, rounded to cents."""
    return quantize_money(period_interest(balance, annual_rate, days, day_count_basis))


def accrue_interest(
    loan: Loan,
    as_of_date: date,
    day_count_basis: int = DEFAULT_DAY_COUNT_BASIS,
) -> Loan:
    """Accrue interest from last_interest_date up to as_of_date."""
    if loan.is_settled:
        return loan
    validate_not_before(as_of_date, loan.last_interest_date, "last interest date")

    days = days_between(loan.last_interest_date, as_of_date)
    if days == 0:
        return loan

    unbooked = loan.interest_carry + period_interest(
        loan.remaining_balance,
        loan.interest_rate,
        days,
        day_count_basis,
    )
    booked = quantize_money(unbooked) if unbooked > 0 else ZERO
    logger.debug("Loan %s accrued %s over %d days", loan.loan_id, booked, days)
    return replace(
        loan,
        accrued_interest=loan.accrued_interest + booked,
        interest_carry=unbooked - booked,
        last_interest_date=as_of_date,
    )


def _allocate(loan: Loan, amount: Decimal, repayment_type: RepaymentType) -> tuple[Decimal, Decimal]:
    """Split amount into (interest_paid, principal_paid) or raise."""
    if repayment_type is RepaymentType.INTEREST:
        if amount > loan.accrued_interest:
            raise ExceedsInterestDueError(amount, loan.accrued_interest)
        return amount, ZERO

    if repayment_type is RepaymentType.PRINCIPAL:
        if amount > loan.remaining_balance:
            raise ExceedsBalanceError(amount, loan.remaining_balance)
        return ZERO, amount

    interest_paid = min(amount, loan.accrued_interest)
    return interest_paid, amount - interest_paid


def apply_repayment(
    loan: Loan,
    amount: Decimal | int | str,
    repayment_type: RepaymentType | str,
    on_date: date,
    repayment_id: str | None = None,
) -> RepaymentResult:
    """Validate and apply one repayment, returning the new loan and ledger entry."""
    if loan.is_settled:
        raise LoanSettledError(f"Loan {loan.loan_id} is already settled.")

    value = validate_positive_amount(amount, "Repayment amount")
    kind = RepaymentType(repayment_type)

    ceiling = loan.outstanding
    if value > ceiling:
        raise ExceedsBalanceError(value, ceiling)

    interest_paid, principal_paid = _allocate(loan, value, kind)
    accrued = loan.accrued_interest - interest_paid
    balance = loan.remaining_balance - principal_paid
    status = LoanStatus.SETTLED if balance == 0 and accrued == 0 else LoanStatus.ACTIVE

    updated = replace(
        loan,
        accrued_interest=accrued,
        remaining_balance=balance,
        status=status,
    )
    repayment = LoanRepayment(
        repayment_id=repayment_id or uuid.uuid4().hex,
        loan_ref=loan.loan_id,
        date=on_date,
        amount=value,
        type=kind,
        interest_paid=interest_paid,
        principal_paid=principal_paid,
        resulting_balance=balance,
        resulting_accrued_interest=accrued,
    )
    if status is LoanStatus.SETTLED:
        logger.info("Loan %s settled by repayment %s", loan.loan_id, repayment.repayment_id)
    return RepaymentResult(loan=updated, repayment=repayment)


def outstanding(loan: Loan | None) -> Decimal:
    """Principal plus accrued interest, zero without a loan."""
    return loan.outstanding if loan is not None else ZERO


def max_loan_capacity(
    policy: Policy,
    holder: PolicyHolder,
    percentage: Decimal | int | str,
    as_of_date: date,
) -> Decimal:
    """Largest loan the policy's surrender value supports."""
    share = validate_percentage(percentage, "Loan capacity percentage")
    return percent_of(surrender_value(policy, holder, as_of_date), share)


def open_loan(
    policy: Policy,
    holder: PolicyHolder,
    amount: Decimal | int | str,
    interest_rate: Decimal | int | str,
    disbursement_date: date,
    percentage: Decimal | int | str,
    loan_id: str | None = None,
) -> Loan:
    """Create a new active loan bounded by the policy's loan capacity."""
    value = validate_positive_amount(amount, "Loan amount")
    rate = validate_interest_rate(interest_rate)
    capacity = max_loan_capacity(policy, holder, percentage, disbursement_date)
    if value > capacity:
        raise ExceedsCapacityError(value, capacity)

    return Loan(
        loan_id=loan_id or uuid.uuid4().hex,
        policy_holder_ref=holder.policy_number,
        loan_amount=value,
        interest_rate=rate,
        disbursement_date=disbursement_date,
        last_interest_date=disbursement_date,
        accrued_interest=ZERO,
        remaining_balance=value,
    )
