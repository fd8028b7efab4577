"""Application dependency container."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lifeval_app.core.config import AppConfig, load_config
from lifeval_app.repositories.audit_repository import AuditRepository
from lifeval_app.repositories.db_pool import ThreadLocalConnection
from lifeval_app.repositories.loan_repository import LoanRepository
from lifeval_app.repositories.policy_repository import PolicyRepository
from lifeval_app.repositories.schema import initialize_schema
from lifeval_app.services.csv_import_service import CsvImportService
from lifeval_app.services.loan_service import LoanService
from lifeval_app.services.policy_service import PolicyService


@dataclass
class ServiceContainer:
    """Wires repositories and services."""

    config: AppConfig
    policy_service: PolicyService
    loan_service: LoanService
    csv_import_service: CsvImportService
    audit_repo: AuditRepository


def build_services(config: AppConfig) -> ServiceContainer:
    """Build dependencies for a given configuration and initialize schema."""
    pool = ThreadLocalConnection(config)
    initialize_schema(pool)

    audit_repo = AuditRepository(pool)
    policy_repo = PolicyRepository(pool)
    loan_repo = LoanRepository(pool)

    policy_service = PolicyService(policy_repo, audit_repo, config.valuation)
    loan_service = LoanService(loan_repo, policy_service, audit_repo, config.valuation)

    return ServiceContainer(
        config=config,
        policy_service=policy_service,
        loan_service=loan_service,
        csv_import_service=CsvImportService(
            policy_service,
            clamp_above=config.valuation.clamp_above_highest_tier,
        ),
        audit_repo=audit_repo,
    )


def build_container(config_path: Path | None = None) -> ServiceContainer:
    """Load configuration and build dependencies."""
    return build_services(load_config(config_path))
