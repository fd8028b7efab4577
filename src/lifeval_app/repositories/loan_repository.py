"""Loan and repayment ledger repository."""

from __future__ import annotations

import sqlite3
from typing import Any

from lifeval_app.core.errors import ValidationError
from lifeval_app.models.loan import Loan, LoanRepayment
from lifeval_app.repositories.db_pool import ThreadLocalConnection

LOAN_COLUMNS = """
    loan_id,
    policy_number,
    loan_amount,
    interest_rate,
    disbursement_date,
    last_interest_date,
    accrued_interest,
    remaining_balance,
    status,
    interest_carry
"""


def _loan_params(loan: Loan) -> tuple[Any, ...]:
    return (
        str(loan.loan_amount),
        str(loan.interest_rate),
        loan.disbursement_date.isoformat(),
        loan.last_interest_date.isoformat(),
        str(loan.accrued_interest),
        str(loan.remaining_balance),
        loan.status.value,
        str(loan.interest_carry),
    )


class LoanRepository:
    """Handles loan snapshots and the append-only repayment log."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def create_loan(self, loan: Loan) -> None:
        """Insert a new loan; a policy holds at most one active loan."""
        try:
            with self._pool.transaction() as cursor:
                cursor.execute(
                    f"""
                    INSERT INTO loans ({LOAN_COLUMNS})
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (loan.loan_id, loan.policy_holder_ref, *_loan_params(loan)),
                )
        except sqlite3.IntegrityError as error:
            if "loans.policy_number" not in str(error):
                raise
            raise ValidationError(
                f"Policy {loan.policy_holder_ref} already has an active loan."
            ) from error

    def get_loan(self, loan_id: str) -> dict[str, Any] | None:
        """Fetch one loan row."""
        row = self._pool.fetchone(
            f"SELECT {LOAN_COLUMNS} FROM loans WHERE loan_id = ?",
            (loan_id,),
        )
        return dict(row) if row else None

    def find_open_loan(self, policy_number: str) -> dict[str, Any] | None:
        """Fetch the most recent active loan for a policy."""
        row = self._pool.fetchone(
            f"""
            SELECT {LOAN_COLUMNS}
            FROM loans
            WHERE policy_number = ? AND status = 'active'
            ORDER BY disbursement_date DESC
            LIMIT 1
            """,
            (policy_number,),
        )
        return dict(row) if row else None

    @staticmethod
    def _update_loan(cursor: sqlite3.Cursor, loan: Loan) -> int:
        cursor.execute(
            """
            UPDATE loans
            SET
                loan_amount = ?,
                interest_rate = ?,
                disbursement_date = ?,
                last_interest_date = ?,
                accrued_interest = ?,
                remaining_balance = ?,
                status = ?,
                interest_carry = ?,
                updated_at = CURRENT_TIMESTAMP
            WHERE loan_id = ?
            """,
            (*_loan_params(loan), loan.loan_id),
        )
        return cursor.rowcount

    def update_loan(self, loan: Loan) -> int:
        """Persist a loan snapshot and return affected row count."""
        with self._pool.transaction() as cursor:
            return self._update_loan(cursor, loan)

    def record_repayment(self, loan: Loan, repayment: LoanRepayment) -> int:
        """Store the updated loan and its ledger entry in one transaction."""
        with self._pool.transaction() as cursor:
            updated = self._update_loan(cursor, loan)
            cursor.execute(
                """
                INSERT INTO loan_repayments (
                    repayment_id,
                    loan_id,
                    repayment_date,
                    amount,
                    repayment_type,
                    interest_paid,
                    principal_paid,
                    resulting_balance,
                    resulting_accrued_interest
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    repayment.repayment_id,
                    repayment.loan_ref,
                    repayment.date.isoformat(),
                    str(repayment.amount),
                    repayment.type.value,
                    str(repayment.interest_paid),
                    str(repayment.principal_paid),
                    str(repayment.resulting_balance),
                    str(repayment.resulting_accrued_interest),
                ),
            )
        return updated

    def list_repayments(self, loan_id: str) -> list[dict[str, Any]]:
        """List ledger entries for a loan in insertion order."""
        rows = self._pool.fetchall(
            """
            SELECT
                repayment_id,
                loan_id,
                repayment_date,
                amount,
                repayment_type,
                interest_paid,
                principal_paid,
                resulting_balance,
                resulting_accrued_interest
            FROM loan_repayments
            WHERE loan_id = ?
            ORDER BY rowid
            """,
            (loan_id,),
        )
        return [dict(row) for row in rows]
