"""Simples Nacional tax calculator.

Effective rate over trailing 12-month revenue (RBT12):

    effective_rate = (RBT12 x nominal_rate - deduction) / RBT12

The deduction keeps the effective burden continuous across band boundaries.
Tax on a payment is always ``gross x effective_rate``; no other path in the
package computes tax.
"""

import logging
from decimal import Decimal

from fiscal.engines.brackets import ANEXO_III, BracketTable
from fiscal.models.tax import BracketInfo, ContributionConfig, TaxCalculation

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def calculate_contribution(config: ContributionConfig) -> Decimal:
    """Monthly contribution: min(base, ceiling) x rate. Zero when there is no base."""
    if config.base_amount <= 0:
        return Decimal("0")
    base = min(config.base_amount, config.ceiling)
    return base * config.rate


def ytd_contribution(months: int, config: ContributionConfig) -> Decimal:
    """Contribution accumulated over ``months`` whole months, capped at a year."""
    if months <= 0:
        return Decimal("0")
    months = min(months, 12)
    return calculate_contribution(config) * months


class TaxCalculator:
    """Computes effective rates and tax splits against a bracket table."""

    def __init__(self, table: BracketTable = ANEXO_III) -> None:
        self.table = table

    def calculate_tax(
        self,
        revenue_12m: Decimal,
        gross_amount: Decimal,
        contribution: ContributionConfig | None = None,
    ) -> TaxCalculation:
        """Compute tax for a payment using the automatic bracket lookup.

        With no trailing revenue (new entity) the payment itself is the
        lookup basis, so it still resolves to the first bracket.
        """
        basis = revenue_12m if revenue_12m > 0 else gross_amount
        if basis > self.table.ceiling:
            logger.warning(
                "Revenue %s exceeds the regime ceiling %s; clamping to bracket %d",
                basis, self.table.ceiling, self.table.last_index,
            )
        index = self.table.find(basis)
        return self._build(
            revenue_12m, gross_amount, index, basis, contribution, manual_override=None
        )

    def calculate_tax_manual(
        self,
        revenue_12m: Decimal,
        gross_amount: Decimal,
        bracket_override: int,
        contribution: ContributionConfig | None = None,
    ) -> TaxCalculation:
        """Compute tax with a caller-forced bracket.

        When the actual revenue lies outside the forced band, the band's
        midpoint revenue is used so the reported rate is representative of
        that band. An override of 0 or out of range means automatic lookup.
        """
        if not self.table.is_valid_index(bracket_override):
            return self.calculate_tax(revenue_12m, gross_amount, contribution)

        actual = revenue_12m if revenue_12m > 0 else gross_amount
        basis = self._manual_basis(bracket_override, actual)
        logger.info(
            "Manual bracket %d applied: revenue basis %s (actual revenue %s)",
            bracket_override, basis, revenue_12m,
        )
        if basis != actual:
            logger.warning(
                "Revenue %s is outside forced bracket %d; using midpoint %s",
                actual, bracket_override, basis,
            )
        return self._build(
            revenue_12m, gross_amount, bracket_override, basis, contribution,
            manual_override=bracket_override,
        )

    def bracket_info(self, revenue_12m: Decimal) -> BracketInfo:
        """Return (bracket, effective rate percent, next-bracket threshold).

        Without revenue the first bracket is reported with its nominal rate
        and its own ceiling as the threshold.
        """
        if revenue_12m <= 0:
            first = self.table.bracket(1)
            return BracketInfo(1, first.nominal_rate * HUNDRED, first.max_revenue)

        index = self.table.find(revenue_12m)
        rate = self.table.bracket(index).effective_rate(revenue_12m) * HUNDRED
        return BracketInfo(index, rate, self._next_threshold(index))

    def bracket_info_manual(self, revenue_12m: Decimal, bracket_override: int) -> BracketInfo:
        """Bracket info for a forced bracket, using the same basis as the tax path."""
        if not self.table.is_valid_index(bracket_override):
            return self.bracket_info(revenue_12m)

        basis = self._manual_basis(bracket_override, revenue_12m)
        rate = self.table.bracket(bracket_override).effective_rate(basis) * HUNDRED
        return BracketInfo(bracket_override, rate, self._next_threshold(bracket_override))

    def _manual_basis(self, index: int, revenue: Decimal) -> Decimal:
        bracket = self.table.bracket(index)
        if revenue > 0 and bracket.contains(revenue):
            return revenue
        return bracket.midpoint

    def _next_threshold(self, index: int) -> Decimal:
        if index < self.table.last_index:
            return self.table.bracket(index + 1).min_revenue
        return self.table.bracket(index).max_revenue

    def _build(
        self,
        revenue_12m: Decimal,
        gross_amount: Decimal,
        index: int,
        basis: Decimal,
        contribution: ContributionConfig | None,
        manual_override: int | None,
    ) -> TaxCalculation:
        effective_rate = self.table.bracket(index).effective_rate(basis)
        tax_amount = gross_amount * effective_rate
        return TaxCalculation(
            gross_amount=gross_amount,
            revenue_12m=revenue_12m,
            effective_rate=effective_rate,
            tax_amount=tax_amount,
            net_amount=gross_amount - tax_amount,
            contribution_amount=(
                calculate_contribution(contribution) if contribution is not None else None
            ),
            bracket_applied=index,
            revenue_basis=basis,
            manual_override=manual_override,
        )
