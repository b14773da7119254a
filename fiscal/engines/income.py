"""Income recording: splits a received payment into tax and net amounts."""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal

from fiscal.db.repository import IncomeRepository
from fiscal.engines.calculator import TaxCalculator
from fiscal.models.reports import AuditEntry, Income
from fiscal.models.settings import FiscalSettings

logger = logging.getLogger(__name__)


class IncomeRecorder:
    """Taxes and stores incoming payments, honouring the manual bracket setting."""

    def __init__(self, repo: IncomeRepository, calculator: TaxCalculator | None = None):
        self.repo = repo
        self.calculator = calculator or TaxCalculator()

    def record_income(
        self,
        account_id: int,
        income_date: date,
        amount_usd: Decimal,
        exchange_rate: Decimal,
        entity_account_ids: Sequence[int],
        settings: FiscalSettings,
        description: str = "",
    ) -> Income:
        """Convert, tax, and persist a payment.

        Trailing revenue is taken over all of the entity's accounts, since
        the bracket applies to the entity as a whole rather than one account.
        """
        gross = amount_usd * exchange_rate
        revenue_12m = self.repo.trailing_12_month_revenue(entity_account_ids, income_date)
        logger.info(
            "Recording income: manual bracket %d, revenue 12M %s, gross %s",
            settings.manual_bracket, revenue_12m, gross,
        )
        calc = self.calculator.calculate_tax_manual(revenue_12m, gross, settings.manual_bracket)

        income = Income(
            account_id=account_id,
            income_date=income_date,
            amount_usd=amount_usd,
            exchange_rate=exchange_rate,
            gross_amount=gross,
            tax_amount=calc.tax_amount,
            net_amount=calc.net_amount,
            description=description,
        )
        income.id = self.repo.save_income(income)

        actual = revenue_12m if revenue_12m > 0 else gross
        if calc.manual_override is not None:
            self.repo.save_audit_entry(AuditEntry(
                timestamp=datetime.now(),
                engine="TaxCalculator",
                operation="manual_bracket",
                inputs={
                    "income_id": income.id,
                    "revenue_12m": revenue_12m,
                    "gross_amount": gross,
                    "bracket_override": calc.manual_override,
                },
                output={
                    "revenue_basis": calc.revenue_basis,
                    "effective_rate": calc.effective_rate,
                    "tax_amount": calc.tax_amount,
                },
                notes=(
                    None if calc.revenue_basis == actual
                    else "Effective rate computed from bracket midpoint"
                ),
            ))
        return income
