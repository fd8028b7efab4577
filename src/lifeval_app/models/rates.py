"""Tiered rate tables for surrender values and mortality."""

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Iterable, Union

from lifeval_app.core.errors import ValidationError
from lifeval_app.core.money import to_decimal


class RateKind(str, Enum):
    GSV = "gsv"
    SSV = "ssv"
    MORTALITY = "mortality"


@dataclass(frozen=True)
class RateRow:
    """A `[min_duration, max_duration] -> rate` band, rate in percent."""

    min_duration: int
    max_duration: int
    rate: Decimal

    def __post_init__(self):
        object.__setattr__(self, "rate", to_decimal(self.rate))

    @property
    def age_start(self) -> int:
        return self.min_duration

    @property
    def age_end(self) -> int:
        return self.max_duration

    def contains(self, key: int) -> bool:
        return self.min_duration <= key <= self.max_duration


@dataclass(frozen=True)
class SsvRow(RateRow):
    """SSV band gated by a minimum number of elapsed policy years."""

    eligibility_years: int = 0


AnyRow = Union[RateRow, SsvRow]


@dataclass(frozen=True)
class RateTable:
    """Immutable, validated collection of non-overlapping rate rows.

    Build instances with `RateTable.build`; rows are kept sorted by their lower
    bound so lookups can bisect. Keys above the last tier resolve to the last
    tier's rate when `clamp_above` is set, keys below the first tier and keys
    falling into a gap between tiers have no rate.
    """

    kind: RateKind
    rows: tuple[AnyRow, ...] = ()
    clamp_above: bool = True
    _mins: tuple[int, ...] = field(default=(), init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_mins", tuple(row.min_duration for row in self.rows))

    @classmethod
    def build(
        cls,
        kind: RateKind,
        rows: Iterable[AnyRow],
        clamp_above: bool = True,
    ) -> "RateTable":
        """Validate rows and return a new table."""
        ordered = sorted(rows, key=lambda row: (row.min_duration, row.max_duration))
        for row in ordered:
            _validate_row(kind, row)

        for previous, current in zip(ordered, ordered[1:]):
            if current.min_duration <= previous.max_duration:
                raise ValidationError(
                    "Rate rows overlap: "
                    f"[{previous.min_duration}, {previous.max_duration}] and "
                    f"[{current.min_duration}, {current.max_duration}]."
                )

        return cls(kind=kind, rows=tuple(ordered), clamp_above=clamp_above)

    @classmethod
    def empty(cls, kind: RateKind, clamp_above: bool = True) -> "RateTable":
        return cls.build(kind, [], clamp_above=clamp_above)

    def find_row(self, key: int) -> AnyRow | None:
        """Return the tier covering key, honoring the clamp policy."""
        if not self.rows:
            return None

        index = bisect_right(self._mins, key) - 1
        if index < 0:
            return None

        row = self.rows[index]
        if row.contains(key):
            return row
        if index == len(self.rows) - 1 and self.clamp_above:
            return row
        return None

    def lookup(self, key: int) -> Decimal | None:
        """Return the rate for key, or None when no tier applies."""
        row = self.find_row(key)
        return row.rate if row is not None else None

    def with_row(self, row: AnyRow) -> "RateTable":
        """Return a new table with row added; the original is unchanged."""
        return RateTable.build(self.kind, [*self.rows, row], clamp_above=self.clamp_above)

    def __len__(self) -> int:
        return len(self.rows)


def _validate_row(kind: RateKind, row: AnyRow) -> None:
    if kind is RateKind.SSV and not isinstance(row, SsvRow):
        raise ValidationError("SSV tables require rows with eligibility years.")
    if row.min_duration < 0:
        raise ValidationError(f"Tier lower bound must not be negative: {row.min_duration}.")
    if row.min_duration > row.max_duration:
        raise ValidationError(
            f"Tier lower bound {row.min_duration} exceeds upper bound {row.max_duration}."
        )
    if row.rate < 0:
        raise ValidationError(f"Rate must not be negative: {row.rate}.")
    if isinstance(row, SsvRow) and row.eligibility_years < 0:
        raise ValidationError("Eligibility years must not be negative.")


def mortality_rate(table: RateTable, age: int) -> Decimal | None:
    """Look up the mortality rate for an attained age."""
    if table.kind is not RateKind.MORTALITY:
        raise ValidationError(f"Expected a mortality table, got {table.kind.value}.")
    return table.lookup(age)
