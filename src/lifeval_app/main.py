"""Command line entry point."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from decimal import Decimal, InvalidOperation
from pathlib import Path

from lifeval_app.core.container import ServiceContainer, build_container
from lifeval_app.core.errors import EngineError, NotFoundError
from lifeval_app.core.log import configure_logging
from lifeval_app.models.loan import RepaymentType
from lifeval_app.models.rates import RateKind
from lifeval_app.services.catalog_loader import load_catalog

EXIT_NOT_FOUND = 1
EXIT_REJECTED = 2


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"invalid date: {value}") from error


def _parse_amount(value: str) -> Decimal:
    try:
        return Decimal(value)
    except InvalidOperation as error:
        raise argparse.ArgumentTypeError(f"invalid amount: {value}") from error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lifeval", description="Policy valuation and loan ledger.")
    parser.add_argument("--config", type=Path, default=None, help="Path to engine.yaml.")
    commands = parser.add_subparsers(dest="command", required=True)

    catalog = commands.add_parser("load-catalog", help="Register policies and holders from YAML.")
    catalog.add_argument("path", type=Path)

    rates = commands.add_parser("import-rates", help="Replace a policy rate table from CSV.")
    rates.add_argument("policy_code")
    rates.add_argument("path")
    rates.add_argument("--kind", choices=[RateKind.GSV.value, RateKind.SSV.value], default="gsv")

    report = commands.add_parser("report", help="Print the valuation report of a policy.")
    report.add_argument("policy_number")
    report.add_argument("--as-of", type=_parse_date, default=date.today())

    loan = commands.add_parser("open-loan", help="Issue a loan against a policy.")
    loan.add_argument("policy_number")
    loan.add_argument("amount", type=_parse_amount)
    loan.add_argument("--rate", type=_parse_amount, required=True, help="Annual rate as a fraction.")
    loan.add_argument("--date", type=_parse_date, default=date.today())

    accrue = commands.add_parser("accrue", help="Accrue interest on a loan.")
    accrue.add_argument("loan_id")
    accrue.add_argument("--as-of", type=_parse_date, default=date.today())

    repay = commands.add_parser("repay", help="Apply a repayment to a loan.")
    repay.add_argument("loan_id")
    repay.add_argument("amount", type=_parse_amount)
    repay.add_argument("--type", choices=[item.value for item in RepaymentType], default="Both")
    repay.add_argument("--date", type=_parse_date, default=date.today())

    commands.add_parser("cleanup-logs", help="Delete audit logs past retention.")
    return parser


def _dispatch(container: ServiceContainer, args: argparse.Namespace) -> None:
    if args.command == "load-catalog":
        policies, holders = load_catalog(
            args.path,
            clamp_above=container.config.valuation.clamp_above_highest_tier,
        )
        for policy in policies:
            container.policy_service.register_policy(policy)
        for holder in holders:
            container.policy_service.register_holder(holder)
        print(f"Registered {len(policies)} policies and {len(holders)} policy holders")
    elif args.command == "import-rates":
        result = container.csv_import_service.import_rates(
            args.policy_code,
            args.path,
            RateKind(args.kind),
        )
        print(f"Imported {result.created_count} tiers, {result.failed_count} failed")
        for message in result.error_messages:
            print(f"  {message}")
    elif args.command == "report":
        report = container.loan_service.report(args.policy_number, args.as_of)
        print(f"Policy {report.policy_number} as of {report.as_of_date.isoformat()}")
        print(f"  GSV:                     {report.gsv}")
        print(f"  SSV:                     {report.ssv}")
        print(f"  Net surrender value:     {report.net_value}")
        print(f"  Available loan capacity: {report.available_loan_capacity}")
        if report.loan_exceeds_surrender_value:
            print("  Loan exceeds surrender value")
    elif args.command == "open-loan":
        loan = container.loan_service.open_loan(args.policy_number, args.amount, args.rate, args.date)
        print(f"Opened loan {loan.loan_id} for {loan.loan_amount}")
    elif args.command == "accrue":
        loan = container.loan_service.accrue(args.loan_id, args.as_of)
        print(f"Accrued interest: {loan.accrued_interest}")
    elif args.command == "repay":
        repayment = container.loan_service.repay(
            args.loan_id,
            args.amount,
            RepaymentType(args.type),
            args.date,
        )
        print(
            f"Repayment {repayment.repayment_id}: balance {repayment.resulting_balance}, "
            f"interest due {repayment.resulting_accrued_interest}"
        )
    elif args.command == "cleanup-logs":
        removed = container.audit_repo.cleanup_old_logs(container.config.logging.retention_days)
        print(f"Cleaned old logs: {removed}")


def run(argv: list[str] | None = None) -> int:
    """Parse arguments, run one command and return the exit code."""
    args = build_parser().parse_args(argv)
    container = build_container(args.config)
    configure_logging(container.config.logging)

    try:
        _dispatch(container, args)
    except NotFoundError as error:
        print(str(error), file=sys.stderr)
        return EXIT_NOT_FOUND
    except EngineError as error:
        print(str(error), file=sys.stderr)
        return EXIT_REJECTED
    return 0


if __name__ == "__main__":
    sys.exit(run())
