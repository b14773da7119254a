"""Early warning for an approaching tax bracket change.

Classifies how far the trailing revenue has travelled through the current
band, and whether the full-year projection lands in a higher band:

    projection crosses into a higher band  -> CRITICAL
    >= 95% of the band traversed           -> HIGH
    >= 85%                                 -> MEDIUM
    >= 70%                                 -> LOW
    otherwise                              -> NONE

A projected crossing outranks the percentage levels even when little of the
band has been traversed: a revenue spike carried forward is more urgent than
slow drift. The evaluation is stateless and recomputed on every call.
"""

from decimal import Decimal

from fiscal.engines.brackets import ANEXO_III, DEFAULT_THRESHOLDS, BracketTable, WarningThresholds
from fiscal.formatting import format_bracket_ordinal, format_currency, format_percent
from fiscal.models.enums import WarningLevel
from fiscal.models.reports import BracketWarning

HUNDRED = Decimal("100")

LAST_BRACKET_MESSAGE = "Você já está na última faixa do Simples Nacional."


class BracketWarningEngine:
    """Computes BracketWarning values from current and projected revenue."""

    def __init__(
        self,
        table: BracketTable = ANEXO_III,
        thresholds: WarningThresholds = DEFAULT_THRESHOLDS,
    ) -> None:
        self.table = table
        self.thresholds = thresholds

    def evaluate(
        self,
        current_revenue: Decimal,
        projected_revenue: Decimal,
        current_bracket: int,
    ) -> BracketWarning:
        current_bracket = max(current_bracket, 1)

        if current_bracket >= self.table.last_index:
            return BracketWarning(
                is_approaching=False,
                amount_until_next=Decimal("0"),
                percent_to_next=HUNDRED,
                level=WarningLevel.NONE,
                message=LAST_BRACKET_MESSAGE,
                projected_bracket=current_bracket,
            )

        band = self.table.bracket(current_bracket)
        next_band = self.table.bracket(current_bracket + 1)

        amount_until_next = max(band.max_revenue - current_revenue, Decimal("0"))
        next_rate = next_band.nominal_rate * HUNDRED

        percent = Decimal("0")
        band_width = band.max_revenue - band.min_revenue
        if band_width > 0:
            percent = (current_revenue - band.min_revenue) * HUNDRED / band_width
            percent = min(max(percent, Decimal("0")), HUNDRED)

        projected_bracket = current_bracket
        if projected_revenue > 0:
            projected_bracket = self.table.find(projected_revenue)

        crosses = projected_bracket > current_bracket
        level = self._classify(percent, crosses)

        return BracketWarning(
            is_approaching=crosses or percent >= self.thresholds.low,
            amount_until_next=amount_until_next,
            percent_to_next=percent,
            level=level,
            message=self._message(level, projected_bracket, amount_until_next, next_rate),
            next_bracket_rate=next_rate,
            projected_bracket=projected_bracket,
        )

    def _classify(self, percent: Decimal, crosses: bool) -> WarningLevel:
        if crosses:
            return WarningLevel.CRITICAL
        if percent >= self.thresholds.high:
            return WarningLevel.HIGH
        if percent >= self.thresholds.medium:
            return WarningLevel.MEDIUM
        if percent >= self.thresholds.low:
            return WarningLevel.LOW
        return WarningLevel.NONE

    @staticmethod
    def _message(
        level: WarningLevel,
        projected_bracket: int,
        amount_until: Decimal,
        next_rate: Decimal,
    ) -> str:
        amount = format_currency(amount_until)
        rate = format_percent(next_rate)

        if level == WarningLevel.CRITICAL:
            destination = format_bracket_ordinal(projected_bracket)
            if amount_until <= 0:
                return (
                    f"Atenção! Sua projeção indica mudança para a faixa {destination} "
                    f"com alíquota nominal de {rate}."
                )
            return (
                f"Atenção! Faltam apenas R$ {amount} para a próxima faixa "
                f"(alíquota nominal de {rate}). Sua projeção indica que você "
                f"passará para a faixa {destination}."
            )
        if level == WarningLevel.HIGH:
            return (
                f"Alerta: Você está muito próximo da próxima faixa! Faltam R$ {amount} "
                f"para a faixa com alíquota nominal de {rate}."
            )
        if level == WarningLevel.MEDIUM:
            return (
                f"Aviso: Você está se aproximando da próxima faixa. Faltam R$ {amount} "
                f"para a faixa com alíquota nominal de {rate}."
            )
        if level == WarningLevel.LOW:
            return (
                f"Informativo: Faltam R$ {amount} para a próxima faixa de tributação "
                f"(alíquota nominal de {rate})."
            )
        return ""
