"""Year-to-date tracking and full-year projection.

Projection is a straight-line extrapolation of the monthly average:

    projected_annual_income = (ytd_income / months_elapsed) x 12

The rate comes from trailing 12-month revenue (falling back to the projected
income when there is no history) and is applied to the projected income,
answering "what if this pace continues". Seasonality is not modelled.

Year scoping:
  - future year:  nothing to project, all-zero result
  - past year:    12 months elapsed, projection equals the realised figures
  - current year: months elapsed = calendar month, bracket warning attached
"""

import calendar
import logging
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal

from fiscal.db.aggregator import IncomeAggregator
from fiscal.engines.bracket_warning import BracketWarningEngine
from fiscal.engines.calculator import TaxCalculator, calculate_contribution, ytd_contribution
from fiscal.formatting import month_name
from fiscal.models.reports import MonthlyTaxBreakdown, TaxProjection
from fiscal.models.tax import ContributionConfig

logger = logging.getLogger(__name__)


def months_elapsed(as_of: date) -> int:
    """Whole months elapsed in the year; the running month counts as elapsed."""
    return as_of.month


class TaxProjectionEngine:
    """Builds YTD figures, annual projections, and monthly breakdowns."""

    def __init__(
        self,
        aggregator: IncomeAggregator,
        calculator: TaxCalculator | None = None,
        warning_engine: BracketWarningEngine | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.calculator = calculator or TaxCalculator()
        self.warning_engine = warning_engine or BracketWarningEngine(self.calculator.table)

    def tax_projection(
        self,
        account_ids: Sequence[int],
        contribution: ContributionConfig | None = None,
        as_of: datetime | None = None,
    ) -> TaxProjection:
        """Projection for the calendar year containing ``as_of`` (default: now)."""
        now = as_of or datetime.now()
        return self.tax_projection_for_year(now.year, account_ids, contribution, as_of=now)

    def tax_projection_for_year(
        self,
        year: int,
        account_ids: Sequence[int],
        contribution: ContributionConfig | None = None,
        as_of: datetime | None = None,
    ) -> TaxProjection:
        now = as_of or datetime.now()

        if year > now.year:
            logger.info("Projection requested for future year %d; returning empty projection", year)
            return TaxProjection(year=year, calculated_at=now)

        is_current = year == now.year
        months = months_elapsed(now) if is_current else 12
        start = date(year, 1, 1)
        end = now.date() if is_current else date(year, 12, 31)

        projection = TaxProjection(year=year, calculated_at=now, months_elapsed=months)

        projection.ytd_income = self.aggregator.sum_gross(start, end, account_ids)
        projection.ytd_tax = self.aggregator.sum_tax(start, end, account_ids)
        projection.ytd_net_income = self.aggregator.sum_net(start, end, account_ids)

        if contribution is not None:
            projection.ytd_contribution = ytd_contribution(months, contribution)
            projection.projected_annual_contribution = calculate_contribution(contribution) * 12

        if months > 0:
            projection.projected_annual_income = projection.ytd_income / months * 12

        if not is_current:
            # Closed year: realised figures are final
            projection.projected_annual_income = projection.ytd_income
            projection.projected_annual_tax = projection.ytd_tax
            projection.projected_net_income = projection.ytd_net_income

        revenue_12m = self.aggregator.trailing_12_month_revenue(account_ids, end)
        if revenue_12m <= 0:
            revenue_12m = projection.projected_annual_income
        projection.revenue_12m = revenue_12m

        info = self.calculator.bracket_info(revenue_12m)
        projection.current_bracket = info.bracket
        projection.effective_rate = info.rate_percent
        projection.next_bracket_at = info.next_threshold

        if is_current:
            if projection.projected_annual_income > 0 and revenue_12m > 0:
                calc = self.calculator.calculate_tax(revenue_12m, projection.projected_annual_income)
                projection.projected_annual_tax = calc.tax_amount
                projection.projected_net_income = (
                    projection.projected_annual_income
                    - projection.projected_annual_tax
                    - projection.projected_annual_contribution
                )
            projection.bracket_warning = self.warning_engine.evaluate(
                revenue_12m, projection.projected_annual_income, info.bracket
            )

        logger.info(
            "Projection %d: %d month(s), YTD income %s, projected %s, bracket %d",
            year, months, projection.ytd_income,
            projection.projected_annual_income, projection.current_bracket,
        )
        return projection

    def monthly_breakdown(
        self,
        year: int,
        account_ids: Sequence[int],
        contribution: ContributionConfig | None = None,
    ) -> list[MonthlyTaxBreakdown]:
        """Twelve independent calendar-month slots for ``year``."""
        monthly_contribution = (
            calculate_contribution(contribution) if contribution is not None else Decimal("0")
        )

        breakdown: list[MonthlyTaxBreakdown] = []
        for month in range(1, 13):
            start = date(year, month, 1)
            end = date(year, month, calendar.monthrange(year, month)[1])
            logger.debug("Aggregating %s to %s for %d account(s)", start, end, len(account_ids))
            breakdown.append(MonthlyTaxBreakdown(
                month=month,
                month_name=month_name(month),
                gross_income=self.aggregator.sum_gross(start, end, account_ids),
                tax_paid=self.aggregator.sum_tax(start, end, account_ids),
                net_income=self.aggregator.sum_net(start, end, account_ids),
                contribution_paid=monthly_contribution,
            ))
        return breakdown
