"""Policy loan and repayment ledger models."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from lifeval_app.core.errors import ValidationError
from lifeval_app.core.money import CENT, ZERO, to_decimal


class LoanStatus(str, Enum):
    ACTIVE = "active"
    SETTLED = "settled"


class RepaymentType(str, Enum):
    PRINCIPAL = "Principal"
    INTEREST = "Interest"
    BOTH = "Both"


_LOAN_AMOUNT_FIELDS = ("loan_amount", "interest_rate", "accrued_interest", "remaining_balance")


@dataclass(frozen=True)
class Loan:
    """Loan snapshot; interest_rate is an annual fraction (0.10 for 10%).

    interest_carry holds the sub-cent interest not yet booked into
    accrued_interest, so accrual totals do not depend on how often it runs.
    """

    loan_id: str
    policy_holder_ref: str
    loan_amount: Decimal
    interest_rate: Decimal
    disbursement_date: date
    last_interest_date: date
    accrued_interest: Decimal
    remaining_balance: Decimal
    status: LoanStatus = LoanStatus.ACTIVE
    interest_carry: Decimal = ZERO

    def __post_init__(self):
        for name in _LOAN_AMOUNT_FIELDS:
            value = to_decimal(getattr(self, name))
            if not value.is_finite() or value < 0:
                raise ValidationError(f"Loan {self.loan_id}: {name} must be a non-negative amount, got {value}.")
            object.__setattr__(self, name, value)

        carry = to_decimal(self.interest_carry)
        if not carry.is_finite() or abs(carry) >= CENT:
            raise ValidationError(f"Loan {self.loan_id}: interest carry must stay below one cent.")
        object.__setattr__(self, "interest_carry", carry)

    @property
    def outstanding(self) -> Decimal:
        return self.remaining_balance + self.accrued_interest

    @property
    def is_settled(self) -> bool:
        return self.status is LoanStatus.SETTLED


@dataclass(frozen=True)
class LoanRepayment:
    """Append-only ledger entry for one repayment event."""

    repayment_id: str
    loan_ref: str
    date: date
    amount: Decimal
    type: RepaymentType
    interest_paid: Decimal
    principal_paid: Decimal
    resulting_balance: Decimal
    resulting_accrued_interest: Decimal


@dataclass(frozen=True)
class RepaymentResult:
    loan: Loan
    repayment: LoanRepayment
