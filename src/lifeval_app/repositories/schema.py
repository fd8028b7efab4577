"""Database schema management."""

from __future__ import annotations

from lifeval_app.repositories.db_pool import ThreadLocalConnection


def initialize_schema(pool: ThreadLocalConnection) -> None:
    """Create required tables and indexes if they do not exist."""
    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS policies (
            policy_code TEXT PRIMARY KEY,
            policy_type TEXT NOT NULL,
            name TEXT NOT NULL,
            min_sum_assured TEXT NOT NULL,
            max_sum_assured TEXT NOT NULL,
            base_multiplier TEXT NOT NULL,
            guaranteed_interest_rate TEXT NOT NULL,
            terminal_bonus_rate TEXT NOT NULL,
            include_adb INTEGER NOT NULL DEFAULT 0,
            adb_percentage TEXT NOT NULL,
            include_ptd INTEGER NOT NULL DEFAULT 0,
            ptd_percentage TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS rate_rows (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            policy_code TEXT NOT NULL,
            kind TEXT NOT NULL,
            min_duration INTEGER NOT NULL,
            max_duration INTEGER NOT NULL,
            rate TEXT NOT NULL,
            eligibility_years INTEGER,
            FOREIGN KEY (policy_code) REFERENCES policies(policy_code) ON DELETE CASCADE
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS policy_holders (
            policy_number TEXT PRIMARY KEY,
            customer_ref TEXT NOT NULL,
            policy_code TEXT NOT NULL,
            sum_assured TEXT NOT NULL,
            issue_date TEXT NOT NULL,
            status TEXT NOT NULL,
            date_of_birth TEXT,
            FOREIGN KEY (policy_code) REFERENCES policies(policy_code) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS loans (
            loan_id TEXT PRIMARY KEY,
            policy_number TEXT NOT NULL,
            loan_amount TEXT NOT NULL,
            interest_rate TEXT NOT NULL,
            disbursement_date TEXT NOT NULL,
            last_interest_date TEXT NOT NULL,
            accrued_interest TEXT NOT NULL,
            remaining_balance TEXT NOT NULL,
            status TEXT NOT NULL,
            interest_carry TEXT NOT NULL DEFAULT '0',
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (policy_number) REFERENCES policy_holders(policy_number) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS loan_repayments (
            repayment_id TEXT PRIMARY KEY,
            loan_id TEXT NOT NULL,
            repayment_date TEXT NOT NULL,
            amount TEXT NOT NULL,
            repayment_type TEXT NOT NULL,
            interest_paid TEXT NOT NULL,
            principal_paid TEXT NOT NULL,
            resulting_balance TEXT NOT NULL,
            resulting_accrued_interest TEXT NOT NULL,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (loan_id) REFERENCES loans(loan_id) ON DELETE RESTRICT
        )
        """
    )

    pool.execute(
        """
        CREATE TABLE IF NOT EXISTS audit_logs (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            action TEXT NOT NULL,
            entity TEXT NOT NULL,
            entity_id TEXT,
            detail TEXT,
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        )
        """
    )

    pool.execute("CREATE INDEX IF NOT EXISTS idx_rate_rows_policy ON rate_rows(policy_code, kind)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_holders_policy ON policy_holders(policy_code)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_loans_holder ON loans(policy_number)")
    pool.execute(
        """
        CREATE UNIQUE INDEX IF NOT EXISTS idx_loans_one_active
        ON loans(policy_number) WHERE status = 'active'
        """
    )
    pool.execute("CREATE INDEX IF NOT EXISTS idx_repayments_loan ON loan_repayments(loan_id)")
    pool.execute("CREATE INDEX IF NOT EXISTS idx_audit_logs_created_at ON audit_logs(created_at)")
