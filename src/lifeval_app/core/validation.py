"""Input validation rules for policies, holders and loans."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from lifeval_app.core.errors import InvalidDateError, ValidationError
from lifeval_app.core.money import HUNDRED, to_decimal

MAX_ANNUAL_INTEREST_RATE = Decimal("1")


def validate_positive_amount(amount: Decimal | int | str, field_name: str) -> Decimal:
    """Validate a strictly positive monetary amount."""
    value = to_decimal(amount)
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"{field_name} must be a positive amount.")
    return value


def validate_percentage(percentage: Decimal | int | str, field_name: str) -> Decimal:
    """Validate a percentage in the 0-100 range."""
    value = to_decimal(percentage)
    if not value.is_finite() or value < 0 or value > HUNDRED:
        raise ValidationError(f"{field_name} must be between 0 and 100.")
    return value


def validate_interest_rate(rate: Decimal | int | str) -> Decimal:
    """Validate an annual interest rate given as a fraction."""
    value = to_decimal(rate)
    if not value.is_finite() or value < 0 or value > MAX_ANNUAL_INTEREST_RATE:
        raise ValidationError("Interest rate must be a fraction between 0 and 1.")
    return value


def validate_required_text(value: str, field_name: str) -> str:
    """Validate non-empty text fields."""
    normalized = value.strip()
    if not normalized:
        raise ValidationError(f"{field_name} is required.")
    return normalized


def validate_not_before(as_of_date: date, reference: date, reference_name: str) -> date:
    """Reject dates earlier than a reference date."""
    if as_of_date < reference:
        raise InvalidDateError(
            f"Date {as_of_date.isoformat()} precedes {reference_name} {reference.isoformat()}."
        )
    return as_of_date


def validate_sum_assured(
    sum_assured: Decimal,
    min_sum_assured: Decimal,
    max_sum_assured: Decimal,
) -> Decimal:
    """Check sum assured against the policy's allowed band."""
    if sum_assured < min_sum_assured or sum_assured > max_sum_assured:
        raise ValidationError(
            f"Sum assured {sum_assured} is outside {min_sum_assured}-{max_sum_assured}."
        )
    return sum_assured
