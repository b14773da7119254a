"""Projection, warning, and report output models."""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from fiscal.models.enums import BracketStatus, WarningLevel
from fiscal.models.settings import FiscalSettings


class BracketWarning(BaseModel):
    is_approaching: bool = False
    amount_until_next: Decimal = Decimal("0")
    percent_to_next: Decimal = Decimal("0")  # 0-100
    level: WarningLevel = WarningLevel.NONE
    message: str = ""
    next_bracket_rate: Decimal = Decimal("0")  # nominal, percent
    projected_bracket: int = 1


class TaxProjection(BaseModel):
    year: int
    calculated_at: datetime
    months_elapsed: int = 0
    # Year-to-date
    ytd_income: Decimal = Decimal("0")
    ytd_tax: Decimal = Decimal("0")
    ytd_contribution: Decimal = Decimal("0")
    ytd_net_income: Decimal = Decimal("0")
    # Full-year projection
    projected_annual_income: Decimal = Decimal("0")
    projected_annual_tax: Decimal = Decimal("0")
    projected_annual_contribution: Decimal = Decimal("0")
    projected_net_income: Decimal = Decimal("0")
    # Bracket
    revenue_12m: Decimal = Decimal("0")
    current_bracket: int = 0
    effective_rate: Decimal = Decimal("0")  # percent
    next_bracket_at: Decimal = Decimal("0")
    bracket_warning: BracketWarning | None = None


class MonthlyTaxBreakdown(BaseModel):
    month: int = Field(ge=1, le=12)
    month_name: str
    gross_income: Decimal = Decimal("0")
    tax_paid: Decimal = Decimal("0")
    net_income: Decimal = Decimal("0")
    contribution_paid: Decimal = Decimal("0")


class Income(BaseModel):
    """A received payment with its tax split, as stored by the repository."""

    id: str | None = None
    account_id: int
    income_date: date
    amount_usd: Decimal = Decimal("0")
    exchange_rate: Decimal = Decimal("1")
    gross_amount: Decimal
    tax_amount: Decimal
    net_amount: Decimal
    description: str = ""


class AuditEntry(BaseModel):
    timestamp: datetime
    engine: str
    operation: str
    inputs: dict
    output: dict
    notes: str | None = None


class MonthlyTotals(BaseModel):
    gross_income: Decimal
    tax_paid: Decimal
    net_income: Decimal
    contribution_paid: Decimal


class BracketRow(BaseModel):
    bracket: int
    max_revenue: Decimal
    nominal_rate: Decimal  # percent
    deduction: Decimal
    status: BracketStatus


class TaxReport(BaseModel):
    """Everything a yearly fiscal report shows, assembled in one place."""

    year: int
    generated_at: datetime
    projection: TaxProjection
    monthly_breakdown: list[MonthlyTaxBreakdown]
    revenue_12m: Decimal
    current_bracket: int
    effective_rate: Decimal  # percent
    next_bracket_at: Decimal
    amount_to_next_bracket: Decimal
    bracket_rows: list[BracketRow]
    settings: FiscalSettings
    monthly_contribution: Decimal = Decimal("0")

    @property
    def has_bracket_position(self) -> bool:
        return self.current_bracket > 0

    @property
    def totals(self) -> MonthlyTotals:
        return MonthlyTotals(
            gross_income=sum((m.gross_income for m in self.monthly_breakdown), Decimal("0")),
            tax_paid=sum((m.tax_paid for m in self.monthly_breakdown), Decimal("0")),
            net_income=sum((m.net_income for m in self.monthly_breakdown), Decimal("0")),
            contribution_paid=sum(
                (m.contribution_paid for m in self.monthly_breakdown), Decimal("0")
            ),
        )
