"""Policy, rate row and policy holder repository."""

from __future__ import annotations

import sqlite3
from typing import Any, Iterable

from lifeval_app.models.policy import Policy, PolicyHolder
from lifeval_app.models.rates import AnyRow, RateKind, SsvRow
from lifeval_app.repositories.db_pool import ThreadLocalConnection


class PolicyRepository:
    """Handles policy definitions, their rate rows and issued policies."""

    def __init__(self, pool: ThreadLocalConnection):
        self._pool = pool

    def save_policy(self, policy: Policy) -> None:
        """Store a policy definition and both of its rate tables in one transaction."""
        with self._pool.transaction() as cursor:
            self._upsert_policy(cursor, policy)
            self._replace_rate_rows(cursor, policy.policy_code, RateKind.GSV, policy.gsv_rates.rows)
            self._replace_rate_rows(cursor, policy.policy_code, RateKind.SSV, policy.ssv_configs.rows)

    @staticmethod
    def _upsert_policy(cursor: sqlite3.Cursor, policy: Policy) -> None:
        cursor.execute(
            """
            INSERT INTO policies (
                policy_code,
                policy_type,
                name,
                min_sum_assured,
                max_sum_assured,
                base_multiplier,
                guaranteed_interest_rate,
                terminal_bonus_rate,
                include_adb,
                adb_percentage,
                include_ptd,
                ptd_percentage
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(policy_code) DO UPDATE SET
                policy_type = excluded.policy_type,
                name = excluded.name,
                min_sum_assured = excluded.min_sum_assured,
                max_sum_assured = excluded.max_sum_assured,
                base_multiplier = excluded.base_multiplier,
                guaranteed_interest_rate = excluded.guaranteed_interest_rate,
                terminal_bonus_rate = excluded.terminal_bonus_rate,
                include_adb = excluded.include_adb,
                adb_percentage = excluded.adb_percentage,
                include_ptd = excluded.include_ptd,
                ptd_percentage = excluded.ptd_percentage,
                updated_at = CURRENT_TIMESTAMP
            """,
            (
                policy.policy_code,
                policy.policy_type,
                policy.name,
                str(policy.min_sum_assured),
                str(policy.max_sum_assured),
                str(policy.base_multiplier),
                str(policy.guaranteed_interest_rate),
                str(policy.terminal_bonus_rate),
                int(policy.include_adb),
                str(policy.adb_percentage),
                int(policy.include_ptd),
                str(policy.ptd_percentage),
            ),
        )

    def get_policy(self, policy_code: str) -> dict[str, Any] | None:
        """Fetch one policy definition row."""
        row = self._pool.fetchone(
            """
            SELECT
                policy_code,
                policy_type,
                name,
                min_sum_assured,
                max_sum_assured,
                base_multiplier,
                guaranteed_interest_rate,
                terminal_bonus_rate,
                include_adb,
                adb_percentage,
                include_ptd,
                ptd_percentage
            FROM policies
            WHERE policy_code = ?
            """,
            (policy_code,),
        )
        return dict(row) if row else None

    def replace_rate_rows(self, policy_code: str, kind: RateKind, rows: Iterable[AnyRow]) -> int:
        """Swap the stored rows of one table atomically; returns the new row count."""
        with self._pool.transaction() as cursor:
            return self._replace_rate_rows(cursor, policy_code, kind, rows)

    @staticmethod
    def _replace_rate_rows(
        cursor: sqlite3.Cursor,
        policy_code: str,
        kind: RateKind,
        rows: Iterable[AnyRow],
    ) -> int:
        cursor.execute(
            "DELETE FROM rate_rows WHERE policy_code = ? AND kind = ?",
            (policy_code, kind.value),
        )
        count = 0
        for row in rows:
            cursor.execute(
                """
                INSERT INTO rate_rows (
                    policy_code,
                    kind,
                    min_duration,
                    max_duration,
                    rate,
                    eligibility_years
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    policy_code,
                    kind.value,
                    row.min_duration,
                    row.max_duration,
                    str(row.rate),
                    row.eligibility_years if isinstance(row, SsvRow) else None,
                ),
            )
            count += 1
        return count

    def list_rate_rows(self, policy_code: str, kind: RateKind) -> list[dict[str, Any]]:
        """List stored rows for one table ordered by lower bound."""
        rows = self._pool.fetchall(
            """
            SELECT min_duration, max_duration, rate, eligibility_years
            FROM rate_rows
            WHERE policy_code = ? AND kind = ?
            ORDER BY min_duration
            """,
            (policy_code, kind.value),
        )
        return [dict(row) for row in rows]

    def upsert_holder(self, holder: PolicyHolder) -> None:
        """Insert or update an issued policy."""
        self._pool.execute(
            """
            INSERT INTO policy_holders (
                policy_number,
                customer_ref,
                policy_code,
                sum_assured,
                issue_date,
                status,
                date_of_birth
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(policy_number) DO UPDATE SET
                customer_ref = excluded.customer_ref,
                policy_code = excluded.policy_code,
                sum_assured = excluded.sum_assured,
                issue_date = excluded.issue_date,
                status = excluded.status,
                date_of_birth = excluded.date_of_birth
            """,
            (
                holder.policy_number,
                holder.customer_ref,
                holder.policy_ref,
                str(holder.sum_assured),
                holder.issue_date.isoformat(),
                holder.status.value,
                holder.date_of_birth.isoformat() if holder.date_of_birth else None,
            ),
        )

    def get_holder(self, policy_number: str) -> dict[str, Any] | None:
        """Fetch one issued policy row."""
        row = self._pool.fetchone(
            """
            SELECT
                policy_number,
                customer_ref,
                policy_code,
                sum_assured,
                issue_date,
                status,
                date_of_birth
            FROM policy_holders
            WHERE policy_number = ?
            """,
            (policy_number,),
        )
        return dict(row) if row else None
