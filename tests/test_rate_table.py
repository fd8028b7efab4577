"""Tests for tiered rate tables."""

from __future__ import annotations

from decimal import Decimal

import pytest

from lifeval_app.core.errors import ValidationError
from lifeval_app.models.rates import RateKind, RateRow, RateTable, SsvRow, mortality_rate


def build_gsv_table(clamp_above: bool = True) -> RateTable:
    return RateTable.build(
        RateKind.GSV,
        [
            RateRow(2, 5, Decimal("35.00")),
            RateRow(6, 10, Decimal("50.00")),
            RateRow(13, 20, Decimal("70.00")),
        ],
        clamp_above=clamp_above,
    )


def test_lookup_returns_rate_of_containing_tier() -> None:
    table = build_gsv_table()
    assert table.lookup(2) == Decimal("35.00")
    assert table.lookup(5) == Decimal("35.00")
    assert table.lookup(6) == Decimal("50.00")
    assert table.lookup(20) == Decimal("70.00")


def test_lookup_below_first_tier_has_no_rate() -> None:
    table = build_gsv_table()
    assert table.lookup(0) is None
    assert table.lookup(1) is None


def test_lookup_above_last_tier_clamps_by_default() -> None:
    assert build_gsv_table().lookup(45) == Decimal("70.00")


def test_lookup_above_last_tier_without_clamp() -> None:
    assert build_gsv_table(clamp_above=False).lookup(21) is None


def test_lookup_in_gap_between_tiers_has_no_rate() -> None:
    table = build_gsv_table()
    assert table.lookup(11) is None
    assert table.lookup(12) is None


def test_empty_table_has_no_rates() -> None:
    table = RateTable.empty(RateKind.GSV)
    assert len(table) == 0
    assert table.lookup(3) is None


def test_overlapping_rows_are_rejected() -> None:
    with pytest.raises(ValidationError):
        RateTable.build(
            RateKind.GSV,
            [RateRow(2, 5, Decimal("35")), RateRow(4, 8, Decimal("40"))],
        )


def test_rows_sharing_a_boundary_overlap() -> None:
    with pytest.raises(ValidationError):
        RateTable.build(
            RateKind.GSV,
            [RateRow(2, 5, Decimal("35")), RateRow(5, 8, Decimal("40"))],
        )


def test_inverted_and_negative_rows_are_rejected() -> None:
    with pytest.raises(ValidationError):
        RateTable.build(RateKind.GSV, [RateRow(6, 5, Decimal("35"))])
    with pytest.raises(ValidationError):
        RateTable.build(RateKind.GSV, [RateRow(1, 5, Decimal("-1"))])
    with pytest.raises(ValidationError):
        RateTable.build(RateKind.GSV, [RateRow(-1, 5, Decimal("10"))])


def test_unordered_rows_are_sorted() -> None:
    table = RateTable.build(
        RateKind.GSV,
        [RateRow(6, 10, Decimal("50")), RateRow(2, 5, Decimal("35"))],
    )
    assert [row.min_duration for row in table.rows] == [2, 6]
    assert table.lookup(3) == Decimal("35")


def test_rate_strings_are_coerced_to_decimal() -> None:
    row = RateRow(2, 5, "35.00")
    assert row.rate == Decimal("35.00")


def test_ssv_table_requires_eligibility_rows() -> None:
    with pytest.raises(ValidationError):
        RateTable.build(RateKind.SSV, [RateRow(2, 5, Decimal("30"))])

    table = RateTable.build(RateKind.SSV, [SsvRow(2, 5, Decimal("30"), eligibility_years=3)])
    row = table.find_row(4)
    assert isinstance(row, SsvRow)
    assert row.eligibility_years == 3


def test_with_row_returns_new_table() -> None:
    table = build_gsv_table()
    extended = table.with_row(RateRow(11, 12, Decimal("60")))

    assert table.lookup(11) is None
    assert extended.lookup(11) == Decimal("60")
    with pytest.raises(ValidationError):
        table.with_row(RateRow(4, 7, Decimal("60")))


def test_mortality_lookup_by_age() -> None:
    table = RateTable.build(
        RateKind.MORTALITY,
        [RateRow(18, 25, Decimal("0.25")), RateRow(26, 35, Decimal("0.40"))],
    )
    assert mortality_rate(table, 30) == Decimal("0.40")
    assert table.rows[0].age_start == 18
    assert table.rows[0].age_end == 25
    assert mortality_rate(table, 10) is None

    with pytest.raises(ValidationError):
        mortality_rate(build_gsv_table(), 30)
