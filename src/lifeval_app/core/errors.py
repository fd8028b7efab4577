"""Error kinds raised by the valuation and loan engine."""

from __future__ import annotations

from decimal import Decimal


class EngineError(ValueError):
    """Base class for deterministic engine failures."""

    is_business_state = False


class ValidationError(EngineError):
    """Malformed input such as an overlapping rate table."""


class InvalidDateError(EngineError):
    """A valuation or accrual date precedes the reference date."""


class NoApplicableRateError(EngineError):
    """No rate tier covers the elapsed duration."""

    is_business_state = True


class NotEligibleError(EngineError):
    """A tier matched but its eligibility period has not been served."""

    is_business_state = True

    def __init__(self, elapsed_years: int, eligibility_years: int):
        super().__init__(
            f"SSV requires {eligibility_years} policy years, {elapsed_years} elapsed."
        )
        self.elapsed_years = elapsed_years
        self.eligibility_years = eligibility_years


class RepaymentError(EngineError):
    """A repayment was rejected; carries the attempted amount and the ceiling."""

    label = "Repayment rejected"

    def __init__(self, attempted: Decimal, ceiling: Decimal):
        super().__init__(f"{self.label}: attempted {attempted}, allowed at most {ceiling}.")
        self.attempted = attempted
        self.ceiling = ceiling


class ExceedsBalanceError(RepaymentError):
    label = "Repayment exceeds outstanding balance"


class ExceedsInterestDueError(RepaymentError):
    label = "Repayment exceeds accrued interest"


class LoanSettledError(EngineError):
    """The loan is settled and accepts no further activity."""


class ExceedsCapacityError(EngineError):
    """Requested loan amount is above the policy's loan capacity."""

    def __init__(self, attempted: Decimal, ceiling: Decimal):
        super().__init__(f"Loan amount {attempted} exceeds capacity {ceiling}.")
        self.attempted = attempted
        self.ceiling = ceiling


class NotFoundError(ValueError):
    """A referenced record does not exist in the host store."""
