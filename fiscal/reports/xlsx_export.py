"""Excel export of the yearly fiscal report."""

import logging
from io import BytesIO
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.worksheet.worksheet import Worksheet

from fiscal.formatting import format_bracket_ordinal
from fiscal.models.enums import BracketStatus
from fiscal.models.reports import TaxReport

logger = logging.getLogger(__name__)

SUMMARY_SHEET = "Resumo Fiscal"
MONTHLY_SHEET = "Impostos Mensais"
BRACKETS_SHEET = "Faixas Simples Nacional"

MONTH_HEADERS = ("Mês", "Receita Bruta", "Imposto", "INSS", "Receita Líquida")
BRACKET_HEADERS = ("Faixa", "Receita Anual (até)", "Alíquota", "Dedução", "Status")

MONEY_FORMAT = '"R$" #,##0.00'
PERCENT_FORMAT = "0.00%"

TITLE_FONT = Font(bold=True, size=14, color="2C3E50")
SECTION_FONT = Font(bold=True, color="FFFFFF")
SECTION_FILL = PatternFill("solid", fgColor="2F5496")
HEADER_FONT = Font(bold=True, color="FFFFFF")
HEADER_FILL = PatternFill("solid", fgColor="4682B4")
TOTAL_FONT = Font(bold=True)
TOTAL_FILL = PatternFill("solid", fgColor="E2EFDA")
CURRENT_FILL = PatternFill("solid", fgColor="FFF2CC")


class TaxReportXLSXGenerator:
    """Writes a TaxReport as a workbook: summary, monthly taxes, bracket schedule."""

    def render(self, report: TaxReport) -> bytes:
        wb = Workbook()
        summary = wb.active
        summary.title = SUMMARY_SHEET
        self._summary_sheet(summary, report)
        self._monthly_sheet(wb.create_sheet(MONTHLY_SHEET), report)
        if report.bracket_rows:
            self._brackets_sheet(wb.create_sheet(BRACKETS_SHEET), report)

        buffer = BytesIO()
        wb.save(buffer)
        logger.info("Rendered Excel report for %d (%d sheet(s))", report.year, len(wb.sheetnames))
        return buffer.getvalue()

    def write(self, report: TaxReport, path: Path) -> Path:
        """Render and write the workbook to ``path``."""
        path.write_bytes(self.render(report))
        return path

    def _summary_sheet(self, ws: Worksheet, report: TaxReport) -> None:
        ws.column_dimensions["A"].width = 30
        ws.column_dimensions["B"].width = 60
        ws.append([f"Relatório Fiscal - {report.year}"])
        ws["A1"].font = TITLE_FONT
        ws.append([f"Gerado em: {report.generated_at.strftime('%d/%m/%Y %H:%M')}"])

        p = report.projection
        self._section(ws, "Acumulado no Ano")
        self._money_pairs(ws, [
            ("Receita Bruta", p.ytd_income),
            ("Imposto Pago", p.ytd_tax),
            ("INSS Pago", p.ytd_contribution),
            ("Receita Líquida", p.ytd_net_income),
        ])

        self._section(ws, "Projeção Anual")
        self._money_pairs(ws, [
            ("Receita Bruta Projetada", p.projected_annual_income),
            ("Imposto Projetado", p.projected_annual_tax),
            ("INSS Projetado", p.projected_annual_contribution),
            ("Receita Líquida Projetada", p.projected_net_income),
        ])

        if report.has_bracket_position:
            self._section(ws, "Informações da Faixa")
            self._money_pairs(ws, [("Faturamento 12 Meses", report.revenue_12m)])
            bracket = format_bracket_ordinal(report.current_bracket)
            if report.settings.manual_bracket:
                bracket += " (manual)"
            ws.append(["Faixa Atual", bracket])
            ws.append(["Alíquota Efetiva", report.effective_rate / 100])
            ws.cell(row=ws.max_row, column=2).number_format = PERCENT_FORMAT
            self._money_pairs(ws, [
                ("Próxima Faixa em", report.next_bracket_at),
                ("Valor até Próxima Faixa", report.amount_to_next_bracket),
            ])
            if p.bracket_warning is not None and p.bracket_warning.message:
                ws.append(["Alerta", p.bracket_warning.message])
                ws.cell(row=ws.max_row, column=2).alignment = Alignment(wrap_text=True)

        self._section(ws, "Configuração INSS")
        self._money_pairs(ws, [("Pró-Labore", report.settings.pro_labore)])
        ws.append(["Alíquota INSS", report.settings.contribution_rate / 100])
        ws.cell(row=ws.max_row, column=2).number_format = PERCENT_FORMAT
        self._money_pairs(ws, [
            ("Teto INSS", report.settings.contribution_ceiling),
            ("INSS Mensal", report.monthly_contribution),
        ])

    def _monthly_sheet(self, ws: Worksheet, report: TaxReport) -> None:
        self._header(ws, MONTH_HEADERS)
        for m in report.monthly_breakdown:
            ws.append([m.month_name, m.gross_income, m.tax_paid, m.contribution_paid, m.net_income])
            self._money_columns(ws, 2, 5)

        totals = report.totals
        ws.append([
            "TOTAL", totals.gross_income, totals.tax_paid, totals.contribution_paid, totals.net_income,
        ])
        self._money_columns(ws, 2, 5)
        for cell in ws[ws.max_row]:
            cell.font = TOTAL_FONT
            cell.fill = TOTAL_FILL
        ws.column_dimensions["A"].width = 14
        for column in "BCDE":
            ws.column_dimensions[column].width = 20

    def _brackets_sheet(self, ws: Worksheet, report: TaxReport) -> None:
        self._header(ws, BRACKET_HEADERS)
        for row in report.bracket_rows:
            ws.append([
                format_bracket_ordinal(row.bracket),
                row.max_revenue,
                row.nominal_rate / 100,
                row.deduction,
                row.status.value,
            ])
            line = ws[ws.max_row]
            line[1].number_format = MONEY_FORMAT
            line[2].number_format = PERCENT_FORMAT
            line[3].number_format = MONEY_FORMAT
            if row.status == BracketStatus.CURRENT:
                for cell in line:
                    cell.fill = CURRENT_FILL
        ws.column_dimensions["A"].width = 8
        for column in "BCDE":
            ws.column_dimensions[column].width = 22

    @staticmethod
    def _section(ws: Worksheet, title: str) -> None:
        ws.append([])
        ws.append([title, None])
        for cell in ws[ws.max_row]:
            cell.font = SECTION_FONT
            cell.fill = SECTION_FILL

    @staticmethod
    def _money_pairs(ws: Worksheet, pairs) -> None:
        for label, value in pairs:
            ws.append([label, value])
            ws.cell(row=ws.max_row, column=1).font = TOTAL_FONT
            ws.cell(row=ws.max_row, column=2).number_format = MONEY_FORMAT

    @staticmethod
    def _header(ws: Worksheet, headers) -> None:
        ws.append(list(headers))
        for cell in ws[1]:
            cell.font = HEADER_FONT
            cell.fill = HEADER_FILL
            cell.alignment = Alignment(horizontal="center")
        ws.freeze_panes = "A2"

    @staticmethod
    def _money_columns(ws: Worksheet, first: int, last: int) -> None:
        for column in range(first, last + 1):
            ws.cell(row=ws.max_row, column=column).number_format = MONEY_FORMAT
