"""Yearly fiscal report: assembly and plain-text rendering."""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from fiscal.engines.calculator import calculate_contribution
from fiscal.engines.projection import TaxProjectionEngine
from fiscal.formatting import format_bracket_ordinal, format_currency, format_percent
from fiscal.models.reports import TaxReport
from fiscal.models.settings import FiscalSettings
from fiscal.reports.bracket_status import bracket_rows

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class TaxReportGenerator:
    """Builds a TaxReport from stored income and renders it as text."""

    def __init__(self, engine: TaxProjectionEngine) -> None:
        self.engine = engine
        self.env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)))
        self.env.filters["currency"] = format_currency
        self.env.filters["percent"] = format_percent
        self.env.filters["ordinal"] = format_bracket_ordinal

    def build(
        self,
        year: int,
        account_ids: Sequence[int],
        settings: FiscalSettings,
        as_of: datetime | None = None,
    ) -> TaxReport:
        """Gather projection, breakdown, and bracket position for ``year``.

        The bracket section honours the manual bracket setting; the
        projection itself always uses the automatic lookup. A year that has
        not started yet has no bracket position, so the section is left
        empty (``current_bracket`` 0, no schedule rows) and renderers omit it.
        """
        now = as_of or datetime.now()
        contribution = settings.contribution_config()
        logger.info("Building tax report for %d over %d account(s)", year, len(account_ids))

        projection = self.engine.tax_projection_for_year(year, account_ids, contribution, as_of=now)
        breakdown = self.engine.monthly_breakdown(year, account_ids, contribution)
        monthly_contribution = (
            calculate_contribution(contribution) if contribution is not None else Decimal("0")
        )

        if year > now.year:
            logger.info("Report year %d has not started; omitting the bracket section", year)
            return TaxReport(
                year=year,
                generated_at=now,
                projection=projection,
                monthly_breakdown=breakdown,
                revenue_12m=Decimal("0"),
                current_bracket=0,
                effective_rate=Decimal("0"),
                next_bracket_at=Decimal("0"),
                amount_to_next_bracket=Decimal("0"),
                bracket_rows=[],
                settings=settings,
                monthly_contribution=monthly_contribution,
            )

        reference = min(now.date(), date(year, 12, 31))
        revenue_12m = self.engine.aggregator.trailing_12_month_revenue(account_ids, reference)
        info = self.engine.calculator.bracket_info_manual(revenue_12m, settings.manual_bracket)

        return TaxReport(
            year=year,
            generated_at=now,
            projection=projection,
            monthly_breakdown=breakdown,
            revenue_12m=revenue_12m,
            current_bracket=info.bracket,
            effective_rate=info.rate_percent,
            next_bracket_at=info.next_threshold,
            amount_to_next_bracket=max(info.next_threshold - revenue_12m, Decimal("0")),
            bracket_rows=bracket_rows(revenue_12m, self.engine.calculator.table),
            settings=settings,
            monthly_contribution=monthly_contribution,
        )

    def render(self, report: TaxReport) -> str:
        """Render the report using the Jinja2 text template."""
        template = self.env.get_template("tax_report.txt")
        return template.render(report=report, totals=report.totals)
