"""Brazilian-locale display helpers for money, percentages, and month names."""

from decimal import ROUND_HALF_UP, Decimal

MONTH_NAMES = (
    "Janeiro", "Fevereiro", "Março", "Abril",
    "Maio", "Junho", "Julho", "Agosto",
    "Setembro", "Outubro", "Novembro", "Dezembro",
)

_TO_BR = str.maketrans({",": ".", ".": ","})


def month_name(month: int) -> str:
    return MONTH_NAMES[month - 1]


def format_currency(value: Decimal | int | float) -> str:
    """Format as ``1.234,56`` (dot thousands separator, comma decimal)."""
    return f"{Decimal(str(value)):,.2f}".translate(_TO_BR)


def format_percent(value: Decimal | int | float) -> str:
    """Format a 0-100 percentage with at most one decimal: ``6%``, ``11,2%``."""
    q = Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    if q == q.to_integral_value():
        return f"{int(q)}%"
    return f"{q:.1f}".translate(_TO_BR) + "%"


def format_bracket_ordinal(bracket: int) -> str:
    """Feminine ordinal used for 'faixa': ``1ª``, ``2ª``."""
    return f"{bracket}ª"
