"""Report generation for the fiscal tax core."""

from fiscal.reports.bracket_status import bracket_rows
from fiscal.reports.pdf_export import TaxReportPDFGenerator
from fiscal.reports.tax_report import TaxReportGenerator
from fiscal.reports.xlsx_export import TaxReportXLSXGenerator

__all__ = [
    "TaxReportGenerator",
    "TaxReportPDFGenerator",
    "TaxReportXLSXGenerator",
    "bracket_rows",
]
