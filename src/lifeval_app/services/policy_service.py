"""Policy catalog and issued-policy service."""

from __future__ import annotations

import json
import logging
from datetime import date
from decimal import Decimal

from lifeval_app.core.config import ValuationConfig
from lifeval_app.core.errors import NotFoundError, ValidationError
from lifeval_app.core.validation import validate_positive_amount, validate_required_text
from lifeval_app.models.loan import Loan
from lifeval_app.models.policy import Policy, PolicyHolder, PolicyHolderStatus
from lifeval_app.models.rates import AnyRow, RateKind, RateRow, RateTable, SsvRow
from lifeval_app.models.valuation import ValuationReport
from lifeval_app.repositories.audit_repository import AuditRepository
from lifeval_app.repositories.policy_repository import PolicyRepository
from lifeval_app.services.report_service import build_report
from lifeval_app.services.valuation_service import check_sum_assured

logger = logging.getLogger(__name__)


class PolicyService:
    """Coordinates policy definitions, rate tables and issued policies."""

    def __init__(
        self,
        policy_repo: PolicyRepository,
        audit_repo: AuditRepository,
        valuation_config: ValuationConfig,
    ):
        self._policy_repo = policy_repo
        self._audit_repo = audit_repo
        self._config = valuation_config

    @staticmethod
    def _to_row(kind: RateKind, raw: dict) -> AnyRow:
        if kind is RateKind.SSV:
            return SsvRow(
                min_duration=int(raw["min_duration"]),
                max_duration=int(raw["max_duration"]),
                rate=Decimal(raw["rate"]),
                eligibility_years=int(raw["eligibility_years"] or 0),
            )
        return RateRow(
            min_duration=int(raw["min_duration"]),
            max_duration=int(raw["max_duration"]),
            rate=Decimal(raw["rate"]),
        )

    def _load_table(self, policy_code: str, kind: RateKind) -> RateTable:
        rows = [self._to_row(kind, raw) for raw in self._policy_repo.list_rate_rows(policy_code, kind)]
        return RateTable.build(kind, rows, clamp_above=self._config.clamp_above_highest_tier)

    @staticmethod
    def _to_holder(row: dict) -> PolicyHolder:
        return PolicyHolder(
            policy_number=row["policy_number"],
            customer_ref=row["customer_ref"],
            policy_ref=row["policy_code"],
            sum_assured=Decimal(row["sum_assured"]),
            issue_date=date.fromisoformat(row["issue_date"]),
            status=PolicyHolderStatus(row["status"]),
            date_of_birth=date.fromisoformat(row["date_of_birth"]) if row["date_of_birth"] else None,
        )

    def register_policy(self, policy: Policy) -> None:
        """Persist a policy definition together with its GSV and SSV tables."""
        validate_required_text(policy.policy_code, "Policy code")
        if policy.min_sum_assured > policy.max_sum_assured:
            raise ValidationError("Minimum sum assured exceeds maximum sum assured.")

        self._policy_repo.save_policy(policy)
        self._audit_repo.add_log(
            "UPDATE",
            "policy",
            policy.policy_code,
            json.dumps(
                {
                    "event": "policy registered",
                    "gsv_tiers": len(policy.gsv_rates),
                    "ssv_tiers": len(policy.ssv_configs),
                }
            ),
        )
        logger.info("Registered policy %s", policy.policy_code)

    def replace_rate_table(self, policy_code: str, table: RateTable) -> int:
        """Swap one rate table of an existing policy for an already validated one."""
        if table.kind is RateKind.MORTALITY:
            raise ValidationError("Mortality tables are not stored per policy.")
        if not self._policy_repo.get_policy(policy_code):
            raise NotFoundError(f"Policy not found: {policy_code}")

        count = self._policy_repo.replace_rate_rows(policy_code, table.kind, table.rows)
        self._audit_repo.add_log(
            "UPDATE",
            "rate_table",
            policy_code,
            json.dumps({"event": "rate table replaced", "kind": table.kind.value, "tiers": count}),
        )
        return count

    def get_policy(self, policy_code: str) -> Policy:
        """Load a policy with freshly built rate tables."""
        row = self._policy_repo.get_policy(policy_code)
        if not row:
            raise NotFoundError(f"Policy not found: {policy_code}")
        return Policy(
            policy_code=row["policy_code"],
            policy_type=row["policy_type"],
            name=row["name"],
            min_sum_assured=Decimal(row["min_sum_assured"]),
            max_sum_assured=Decimal(row["max_sum_assured"]),
            base_multiplier=Decimal(row["base_multiplier"]),
            guaranteed_interest_rate=Decimal(row["guaranteed_interest_rate"]),
            terminal_bonus_rate=Decimal(row["terminal_bonus_rate"]),
            include_adb=bool(row["include_adb"]),
            adb_percentage=Decimal(row["adb_percentage"]),
            include_ptd=bool(row["include_ptd"]),
            ptd_percentage=Decimal(row["ptd_percentage"]),
            gsv_rates=self._load_table(policy_code, RateKind.GSV),
            ssv_configs=self._load_table(policy_code, RateKind.SSV),
        )

    def register_holder(self, holder: PolicyHolder) -> None:
        """Validate sum assured against the policy band and persist the holder."""
        validate_required_text(holder.policy_number, "Policy number")
        validate_positive_amount(holder.sum_assured, "Sum assured")
        policy = self.get_policy(holder.policy_ref)
        check_sum_assured(policy, holder)

        self._policy_repo.upsert_holder(holder)
        self._audit_repo.add_log(
            "UPDATE",
            "policy_holder",
            holder.policy_number,
            json.dumps(
                {
                    "event": "policy holder registered",
                    "policy_code": holder.policy_ref,
                    "sum_assured": str(holder.sum_assured),
                }
            ),
        )

    def get_holder(self, policy_number: str) -> PolicyHolder:
        """Fetch one issued policy."""
        row = self._policy_repo.get_holder(policy_number)
        if not row:
            raise NotFoundError(f"Policy holder not found: {policy_number}")
        return self._to_holder(row)

    def report(
        self,
        policy_number: str,
        as_of_date: date,
        loan: Loan | None = None,
    ) -> ValuationReport:
        """Build the valuation report for one issued policy."""
        holder = self.get_holder(policy_number)
        policy = self.get_policy(holder.policy_ref)
        return build_report(
            policy,
            holder,
            as_of_date,
            loan=loan,
            capacity_percentage=self._config.loan_capacity_percentage,
        )
