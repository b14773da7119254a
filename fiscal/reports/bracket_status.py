"""Classifies each bracket of the schedule against trailing revenue."""

from decimal import Decimal

from fiscal.engines.brackets import ANEXO_III, BracketTable
from fiscal.models.enums import BracketStatus
from fiscal.models.reports import BracketRow

HUNDRED = Decimal("100")


def bracket_rows(revenue_12m: Decimal, table: BracketTable = ANEXO_III) -> list[BracketRow]:
    """One row per bracket: exceeded below the current band, upcoming above it."""
    current = table.find(revenue_12m)
    rows: list[BracketRow] = []
    for index, bracket in enumerate(table, start=1):
        if index < current:
            status = BracketStatus.EXCEEDED
        elif index == current:
            status = BracketStatus.CURRENT
        else:
            status = BracketStatus.UPCOMING
        rows.append(BracketRow(
            bracket=index,
            max_revenue=bracket.max_revenue,
            nominal_rate=bracket.nominal_rate * HUNDRED,
            deduction=bracket.deduction,
            status=status,
        ))
    return rows
