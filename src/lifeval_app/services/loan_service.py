"""Loan service: serialized accrual and repayment with persistence and audit."""

from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Iterator

from lifeval_app.core.config import ValuationConfig
from lifeval_app.core.errors import EngineError, NotFoundError, ValidationError
from lifeval_app.models.loan import Loan, LoanRepayment, LoanStatus, RepaymentType
from lifeval_app.models.valuation import ValuationReport
from lifeval_app.repositories.audit_repository import AuditRepository
from lifeval_app.repositories.loan_repository import LoanRepository
from lifeval_app.services import loan_ledger
from lifeval_app.services.policy_service import PolicyService

logger = logging.getLogger(__name__)


class _KeyedLock:
    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class LoanService:
    """Coordinates loan use cases; one writer at a time per loan id."""

    def __init__(
        self,
        loan_repo: LoanRepository,
        policy_service: PolicyService,
        audit_repo: AuditRepository,
        valuation_config: ValuationConfig,
    ):
        self._loan_repo = loan_repo
        self._policy_service = policy_service
        self._audit_repo = audit_repo
        self._config = valuation_config
        self._locks: dict[str, _KeyedLock] = {}
        self._registry_lock = threading.Lock()

    @contextmanager
    def _locked(self, key: str) -> Iterator[None]:
        """Hold the lock for key; the registry entry is dropped with its last user."""
        with self._registry_lock:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyedLock()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._registry_lock:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[key]

    @staticmethod
    def _to_loan(row: dict) -> Loan:
        return Loan(
            loan_id=row["loan_id"],
            policy_holder_ref=row["policy_number"],
            loan_amount=Decimal(row["loan_amount"]),
            interest_rate=Decimal(row["interest_rate"]),
            disbursement_date=date.fromisoformat(row["disbursement_date"]),
            last_interest_date=date.fromisoformat(row["last_interest_date"]),
            accrued_interest=Decimal(row["accrued_interest"]),
            remaining_balance=Decimal(row["remaining_balance"]),
            status=LoanStatus(row["status"]),
            interest_carry=Decimal(row["interest_carry"]),
        )

    @staticmethod
    def _to_repayment(row: dict) -> LoanRepayment:
        return LoanRepayment(
            repayment_id=row["repayment_id"],
            loan_ref=row["loan_id"],
            date=date.fromisoformat(row["repayment_date"]),
            amount=Decimal(row["amount"]),
            type=RepaymentType(row["repayment_type"]),
            interest_paid=Decimal(row["interest_paid"]),
            principal_paid=Decimal(row["principal_paid"]),
            resulting_balance=Decimal(row["resulting_balance"]),
            resulting_accrued_interest=Decimal(row["resulting_accrued_interest"]),
        )

    def get_loan(self, loan_id: str) -> Loan:
        """Fetch one loan snapshot."""
        row = self._loan_repo.get_loan(loan_id)
        if not row:
            raise NotFoundError(f"Loan not found: {loan_id}")
        return self._to_loan(row)

    def find_open_loan(self, policy_number: str) -> Loan | None:
        """Return the active loan of a policy, if any."""
        row = self._loan_repo.find_open_loan(policy_number)
        return self._to_loan(row) if row else None

    def list_repayments(self, loan_id: str) -> list[LoanRepayment]:
        """Return the repayment ledger of one loan, oldest first."""
        return [self._to_repayment(row) for row in self._loan_repo.list_repayments(loan_id)]

    def open_loan(
        self,
        policy_number: str,
        amount: Decimal,
        interest_rate: Decimal,
        disbursement_date: date,
        loan_id: str | None = None,
    ) -> Loan:
        """Issue a loan within the policy's capacity and persist it."""
        with self._locked(f"policy:{policy_number}"):
            if self.find_open_loan(policy_number) is not None:
                raise ValidationError(f"Policy {policy_number} already has an active loan.")

            holder = self._policy_service.get_holder(policy_number)
            policy = self._policy_service.get_policy(holder.policy_ref)
            loan = loan_ledger.open_loan(
                policy,
                holder,
                amount,
                interest_rate,
                disbursement_date,
                self._config.loan_capacity_percentage,
                loan_id=loan_id,
            )
            self._loan_repo.create_loan(loan)

        self._audit_repo.add_log(
            "CREATE",
            "loan",
            loan.loan_id,
            json.dumps(
                {
                    "event": "loan opened",
                    "policy_number": policy_number,
                    "amount": str(loan.loan_amount),
                    "interest_rate": str(loan.interest_rate),
                }
            ),
        )
        logger.info("Opened loan %s on policy %s for %s", loan.loan_id, policy_number, amount)
        return loan

    def accrue(self, loan_id: str, as_of_date: date) -> Loan:
        """Accrue interest up to as_of_date and persist the snapshot."""
        with self._locked(loan_id):
            before = self.get_loan(loan_id)
            after = loan_ledger.accrue_interest(
                before,
                as_of_date,
                day_count_basis=self._config.day_count_basis,
            )
            if after == before:
                return after

            self._loan_repo.update_loan(after)
            self._audit_repo.add_log(
                "UPDATE",
                "loan",
                loan_id,
                json.dumps(
                    {
                        "event": "interest accrued",
                        "as_of": as_of_date.isoformat(),
                        "interest": str(after.accrued_interest - before.accrued_interest),
                    }
                ),
            )
            return after

    def repay(
        self,
        loan_id: str,
        amount: Decimal,
        repayment_type: RepaymentType,
        on_date: date,
    ) -> LoanRepayment:
        """Accrue to on_date, apply the repayment and store both atomically."""
        with self._locked(loan_id):
            loan = loan_ledger.accrue_interest(
                self.get_loan(loan_id),
                on_date,
                day_count_basis=self._config.day_count_basis,
            )
            try:
                result = loan_ledger.apply_repayment(loan, amount, repayment_type, on_date)
            except EngineError as error:
                logger.info("Repayment on loan %s rejected: %s", loan_id, error)
                raise

            self._loan_repo.record_repayment(result.loan, result.repayment)
            self._audit_repo.add_log(
                "CREATE",
                "loan_repayment",
                result.repayment.repayment_id,
                json.dumps(
                    {
                        "event": "repayment applied",
                        "loan_id": loan_id,
                        "amount": str(result.repayment.amount),
                        "type": result.repayment.type.value,
                        "status": result.loan.status.value,
                    }
                ),
            )
            return result.repayment

    def report(self, policy_number: str, as_of_date: date) -> ValuationReport:
        """Valuation report offset by the policy's active loan, accrued to as_of_date."""
        loan = self.find_open_loan(policy_number)
        if loan is not None and as_of_date >= loan.last_interest_date:
            loan = loan_ledger.accrue_interest(
                loan,
                as_of_date,
                day_count_basis=self._config.day_count_basis,
            )
        return self._policy_service.report(policy_number, as_of_date, loan=loan)
