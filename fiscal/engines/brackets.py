"""Simples Nacional bracket schedule and warning thresholds.

Anexo III (services): six cumulative revenue bands over the trailing
12-month gross revenue (RBT12), each with a nominal rate and a deduction
constant. Source: LC 123/2006, Anexo III, as amended by LC 155/2016.

Schedules are immutable module-level constants handed to the engines;
computation functions never hardcode bracket values.
"""

from decimal import Decimal
from typing import NamedTuple

from fiscal.exceptions import BracketTableError
from fiscal.models.tax import TaxBracket

# Bands are contiguous: next.min == prev.max + CENT
CENT = Decimal("0.01")

# Maximum trailing revenue the regime supports
SIMPLES_CEILING = Decimal("4800000")


class BracketTable:
    """Ordered, immutable sequence of tax brackets with a clamped lookup."""

    def __init__(self, brackets: list[TaxBracket] | tuple[TaxBracket, ...]):
        self._brackets = tuple(brackets)
        self._validate()

    def _validate(self) -> None:
        if not self._brackets:
            raise BracketTableError("at least one bracket is required")
        if self._brackets[0].min_revenue != 0:
            raise BracketTableError("first bracket must start at zero")
        for prev, curr in zip(self._brackets, self._brackets[1:]):
            if curr.min_revenue != prev.max_revenue + CENT:
                raise BracketTableError(
                    f"gap between {prev.max_revenue} and {curr.min_revenue}"
                )
            if curr.nominal_rate <= prev.nominal_rate:
                raise BracketTableError(
                    f"nominal rate {curr.nominal_rate} does not exceed {prev.nominal_rate}"
                )

    def __len__(self) -> int:
        return len(self._brackets)

    def __iter__(self):
        return iter(self._brackets)

    def __getitem__(self, index: int) -> TaxBracket:
        return self._brackets[index]

    @property
    def ceiling(self) -> Decimal:
        return self._brackets[-1].max_revenue

    @property
    def last_index(self) -> int:
        """1-based index of the terminal bracket."""
        return len(self._brackets)

    def bracket(self, index: int) -> TaxBracket:
        """Return the bracket for a 1-based index."""
        return self._brackets[index - 1]

    def is_valid_index(self, index: int) -> bool:
        return 1 <= index <= len(self._brackets)

    def find(self, revenue: Decimal) -> int:
        """Return the 1-based bracket index containing ``revenue``.

        Revenue above the ceiling clamps to the last bracket. Revenue inside
        the one-cent seam between two bands belongs to the upper band.
        Non-positive revenue resolves to the first bracket.
        """
        if revenue > self.ceiling:
            return self.last_index
        for i, b in enumerate(self._brackets, start=1):
            if revenue <= b.max_revenue:
                return i
        return self.last_index


class WarningThresholds(NamedTuple):
    """Percent of the current band traversed that triggers each warning level."""

    low: Decimal = Decimal("70")
    medium: Decimal = Decimal("85")
    high: Decimal = Decimal("95")


DEFAULT_THRESHOLDS = WarningThresholds()

ANEXO_III = BracketTable([
    TaxBracket(
        min_revenue=Decimal("0"),
        max_revenue=Decimal("180000"),
        nominal_rate=Decimal("0.06"),
        deduction=Decimal("0"),
    ),
    TaxBracket(
        min_revenue=Decimal("180000.01"),
        max_revenue=Decimal("360000"),
        nominal_rate=Decimal("0.112"),
        deduction=Decimal("9360"),
    ),
    TaxBracket(
        min_revenue=Decimal("360000.01"),
        max_revenue=Decimal("720000"),
        nominal_rate=Decimal("0.135"),
        deduction=Decimal("17640"),
    ),
    TaxBracket(
        min_revenue=Decimal("720000.01"),
        max_revenue=Decimal("1800000"),
        nominal_rate=Decimal("0.16"),
        deduction=Decimal("35640"),
    ),
    TaxBracket(
        min_revenue=Decimal("1800000.01"),
        max_revenue=Decimal("3600000"),
        nominal_rate=Decimal("0.21"),
        deduction=Decimal("125640"),
    ),
    TaxBracket(
        min_revenue=Decimal("3600000.01"),
        max_revenue=SIMPLES_CEILING,
        nominal_rate=Decimal("0.33"),
        deduction=Decimal("648000"),
    ),
])
