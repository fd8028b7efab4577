"""Read-side composition of valuation and loan figures."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from lifeval_app.core.money import ZERO, percent_of
from lifeval_app.core.validation import validate_percentage
from lifeval_app.models.loan import Loan
from lifeval_app.models.policy import Policy, PolicyHolder
from lifeval_app.models.valuation import ValuationReport
from lifeval_app.services.loan_ledger import outstanding
from lifeval_app.services.valuation_service import net_value_from_figures, surrender_values

DEFAULT_CAPACITY_PERCENTAGE = Decimal("90")


def build_report(
    policy: Policy,
    holder: PolicyHolder,
    as_of_date: date,
    loan: Loan | None = None,
    capacity_percentage: Decimal = DEFAULT_CAPACITY_PERCENTAGE,
) -> ValuationReport:
    """Recompute the display figures from current snapshots."""
    share = validate_percentage(capacity_percentage, "Loan capacity percentage")
    gsv, ssv = surrender_values(policy, holder, as_of_date)
    net = net_value_from_figures(gsv, ssv, loan)
    capacity = percent_of(net.gross, share)

    return ValuationReport(
        policy_number=holder.policy_number,
        as_of_date=as_of_date,
        gsv=gsv,
        ssv=ssv,
        net_value=net.net_value,
        available_loan_capacity=max(capacity - outstanding(loan), ZERO),
        loan_exceeds_surrender_value=net.loan_exceeds_surrender_value,
    )
