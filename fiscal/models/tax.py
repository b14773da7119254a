"""Tax schedule, calculation, and configuration models."""

from decimal import Decimal
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field


class TaxBracket(BaseModel):
    """One revenue band of the schedule. Bounds are inclusive."""

    model_config = ConfigDict(frozen=True)

    min_revenue: Decimal = Field(ge=0)
    max_revenue: Decimal
    nominal_rate: Decimal  # fraction, e.g. 0.112
    deduction: Decimal = Decimal("0")

    @property
    def midpoint(self) -> Decimal:
        """Representative revenue used when a bracket is forced manually."""
        if self.min_revenue == 0:
            return self.max_revenue / 2
        return (self.min_revenue + self.max_revenue) / 2

    def contains(self, revenue: Decimal) -> bool:
        return self.min_revenue <= revenue <= self.max_revenue

    def effective_rate(self, revenue: Decimal) -> Decimal:
        """(RBT12 x nominal - deduction) / RBT12, zero when revenue is not positive."""
        if revenue <= 0:
            return Decimal("0")
        return (revenue * self.nominal_rate - self.deduction) / revenue


class BracketInfo(NamedTuple):
    bracket: int
    rate_percent: Decimal
    next_threshold: Decimal


class ContributionConfig(BaseModel):
    """Monthly social-contribution (INSS) parameters."""

    base_amount: Decimal  # monthly pro-labore
    ceiling: Decimal
    rate: Decimal  # fraction, e.g. 0.11


class TaxCalculation(BaseModel):
    gross_amount: Decimal
    revenue_12m: Decimal
    effective_rate: Decimal = Decimal("0")
    tax_amount: Decimal = Decimal("0")
    net_amount: Decimal = Decimal("0")
    contribution_amount: Decimal | None = None
    bracket_applied: int = 1
    # Revenue the effective rate was computed from (may differ from revenue_12m)
    revenue_basis: Decimal = Decimal("0")
    manual_override: int | None = None

    @property
    def total_tax(self) -> Decimal:
        return self.tax_amount + (self.contribution_amount or Decimal("0"))
