"""PDF export of the yearly fiscal report."""

import logging
from pathlib import Path

from fpdf import FPDF

from fiscal.formatting import format_bracket_ordinal, format_currency, format_percent
from fiscal.models.enums import BracketStatus
from fiscal.models.reports import TaxReport

logger = logging.getLogger(__name__)

MONTH_COLUMNS = (("Mês", 30), ("Receita Bruta", 40), ("Imposto", 35), ("INSS", 35), ("Receita Líquida", 40))
BRACKET_COLUMNS = (("Faixa", 20), ("Receita Anual (até)", 50), ("Alíquota", 35), ("Dedução", 30), ("Status", 45))


def _money(value) -> str:
    return f"R$ {format_currency(value)}"


class TaxReportPDFGenerator:
    """Lays out a TaxReport on A4 pages with the core Helvetica font."""

    def render(self, report: TaxReport) -> bytes:
        pdf = FPDF(orientation="P", unit="mm", format="A4")
        pdf.set_margins(15, 15, 15)
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.set_title(f"Relatório Fiscal {report.year}")
        pdf.add_page()

        pdf.set_font("Helvetica", style="B", size=18)
        pdf.set_text_color(44, 62, 80)
        pdf.cell(0, 12, f"Relatório Fiscal - {report.year}", align="C", new_x="LMARGIN", new_y="NEXT")
        pdf.set_font("Helvetica", size=10)
        pdf.set_text_color(128, 128, 128)
        pdf.cell(
            0, 6, f"Gerado em: {report.generated_at.strftime('%d/%m/%Y %H:%M')}",
            align="C", new_x="LMARGIN", new_y="NEXT",
        )
        pdf.ln(8)

        p = report.projection
        self._section(pdf, "Acumulado no Ano")
        self._pairs(pdf, [
            ("Receita Bruta", _money(p.ytd_income)),
            ("Imposto Pago", _money(p.ytd_tax)),
            ("INSS Pago", _money(p.ytd_contribution)),
            ("Receita Líquida", _money(p.ytd_net_income)),
        ])

        self._section(pdf, "Projeção Anual")
        self._pairs(pdf, [
            ("Receita Bruta Projetada", _money(p.projected_annual_income)),
            ("Imposto Projetado", _money(p.projected_annual_tax)),
            ("INSS Projetado", _money(p.projected_annual_contribution)),
            ("Receita Líquida Projetada", _money(p.projected_net_income)),
        ])

        if report.has_bracket_position:
            self._section(pdf, "Informações da Faixa")
            bracket_pairs = [
                ("Faturamento 12 Meses", _money(report.revenue_12m)),
                ("Faixa Atual", format_bracket_ordinal(report.current_bracket)),
                ("Alíquota Efetiva", format_percent(report.effective_rate)),
                ("Próxima Faixa em", _money(report.next_bracket_at)),
                ("Valor até Próxima Faixa", _money(report.amount_to_next_bracket)),
            ]
            if p.bracket_warning is not None and p.bracket_warning.message:
                bracket_pairs.append(("Alerta", p.bracket_warning.message))
            self._pairs(pdf, bracket_pairs)

        self._section(pdf, "Configuração INSS")
        self._pairs(pdf, [
            ("Pró-Labore", _money(report.settings.pro_labore)),
            ("Alíquota INSS", format_percent(report.settings.contribution_rate)),
            ("Teto INSS", _money(report.settings.contribution_ceiling)),
            ("INSS Mensal", _money(report.monthly_contribution)),
        ])

        pdf.add_page()
        self._section(pdf, "Impostos Mensais")
        self._header_row(pdf, MONTH_COLUMNS)
        pdf.set_font("Helvetica", size=9)
        for i, m in enumerate(report.monthly_breakdown):
            shade = 240 if i % 2 else 255
            pdf.set_fill_color(shade, shade, shade)
            self._row(pdf, MONTH_COLUMNS, [
                m.month_name,
                format_currency(m.gross_income),
                format_currency(m.tax_paid),
                format_currency(m.contribution_paid),
                format_currency(m.net_income),
            ])
        totals = report.totals
        pdf.set_font("Helvetica", style="B", size=9)
        pdf.set_fill_color(226, 239, 218)
        self._row(pdf, MONTH_COLUMNS, [
            "TOTAL",
            format_currency(totals.gross_income),
            format_currency(totals.tax_paid),
            format_currency(totals.contribution_paid),
            format_currency(totals.net_income),
        ])
        pdf.ln(10)

        if report.bracket_rows:
            self._section(pdf, "Faixas Simples Nacional")
            self._header_row(pdf, BRACKET_COLUMNS)
            pdf.set_font("Helvetica", size=9)
            for row in report.bracket_rows:
                if row.status == BracketStatus.CURRENT:
                    pdf.set_fill_color(255, 242, 204)
                else:
                    pdf.set_fill_color(255, 255, 255)
                self._row(pdf, BRACKET_COLUMNS, [
                    format_bracket_ordinal(row.bracket),
                    format_currency(row.max_revenue),
                    format_percent(row.nominal_rate),
                    format_currency(row.deduction),
                    row.status.value,
                ])

        logger.info("Rendered PDF report for %d (%d page(s))", report.year, pdf.page_no())
        return bytes(pdf.output())

    def write(self, report: TaxReport, path: Path) -> Path:
        """Render and write the PDF to ``path``."""
        path.write_bytes(self.render(report))
        return path

    @staticmethod
    def _section(pdf: FPDF, title: str) -> None:
        pdf.set_font("Helvetica", style="B", size=12)
        pdf.set_fill_color(47, 84, 150)
        pdf.set_text_color(255, 255, 255)
        pdf.cell(0, 8, title, fill=True, new_x="LMARGIN", new_y="NEXT")
        pdf.set_text_color(0, 0, 0)
        pdf.ln(2)

    @staticmethod
    def _pairs(pdf: FPDF, pairs: list[tuple[str, str]]) -> None:
        for label, value in pairs:
            pdf.set_font("Helvetica", style="B", size=10)
            pdf.cell(70, 7, label, border=1)
            pdf.set_font("Helvetica", size=10)
            pdf.multi_cell(0, 7, value, border=1, new_x="LMARGIN", new_y="NEXT")
        pdf.ln(6)

    @staticmethod
    def _header_row(pdf: FPDF, columns) -> None:
        pdf.set_font("Helvetica", style="B", size=9)
        pdf.set_fill_color(70, 130, 180)
        pdf.set_text_color(255, 255, 255)
        for title, width in columns:
            pdf.cell(width, 8, title, border=1, align="C", fill=True)
        pdf.ln()
        pdf.set_text_color(0, 0, 0)

    @staticmethod
    def _row(pdf: FPDF, columns, values: list[str]) -> None:
        for i, ((_, width), value) in enumerate(zip(columns, values)):
            pdf.cell(width, 7, value, border=1, align="L" if i == 0 else "R", fill=True)
        pdf.ln()
