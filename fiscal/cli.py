"""Typer CLI for the Simples Nacional tax core."""

import logging
import sqlite3
from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from pathlib import Path
from typing import Any, NoReturn

import typer
from rich.console import Console
from rich.table import Table

from fiscal.db.repository import IncomeRepository
from fiscal.db.schema import create_schema
from fiscal.engines.bracket_warning import BracketWarningEngine
from fiscal.engines.calculator import TaxCalculator
from fiscal.engines.income import IncomeRecorder
from fiscal.engines.projection import TaxProjectionEngine
from fiscal.exceptions import FiscalError
from fiscal.formatting import format_bracket_ordinal, format_currency, format_percent
from fiscal.models.tax import ContributionConfig
from fiscal.reports.pdf_export import TaxReportPDFGenerator
from fiscal.reports.tax_report import TaxReportGenerator
from fiscal.reports.xlsx_export import TaxReportXLSXGenerator

DEFAULT_DB = Path.home() / ".fiscal" / "fiscal.db"

console = Console()

app = typer.Typer(
    name="fiscal",
    help="Simples Nacional tax calculation, projection, and bracket alerts.",
)
income_app = typer.Typer(help="Record, list, and delete received income.")
settings_app = typer.Typer(help="Show and change persisted fiscal settings.")
app.add_typer(income_app, name="income")
app.add_typer(settings_app, name="settings")


class ReportFormat(StrEnum):
    TEXT = "text"
    PDF = "pdf"
    XLSX = "xlsx"


def _db_option() -> Any:
    return typer.Option(DEFAULT_DB, "--db", help="Path to the SQLite database file")


def _accounts_option() -> Any:
    return typer.Option([1], "--account", "-a", help="Account ID to include (repeatable)")


def _connect(db: Path) -> sqlite3.Connection:
    db.parent.mkdir(parents=True, exist_ok=True)
    return create_schema(db)


def _fail(exc: FiscalError) -> NoReturn:
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(1)


def _money(value: Decimal) -> str:
    return f"R$ {format_currency(value)}"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Simples Nacional tax calculation, projection, and bracket alerts."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def calc(
    revenue_12m: float = typer.Argument(..., help="Trailing 12-month gross revenue (RBT12)"),
    gross: float = typer.Argument(..., help="Gross amount of the payment"),
    bracket: int = typer.Option(0, "--bracket", "-b", help="Force a bracket (1-6); 0 is automatic"),
    pro_labore: float = typer.Option(0, "--pro-labore", help="Monthly pro-labore for the contribution"),
    ceiling: float = typer.Option(7786.02, "--ceiling", help="Contribution ceiling"),
    rate: float = typer.Option(11, "--rate", help="Contribution rate in percent"),
) -> None:
    """Compute the Simples Nacional tax on a single payment."""
    contribution = None
    if pro_labore > 0:
        contribution = ContributionConfig(
            base_amount=Decimal(str(pro_labore)),
            ceiling=Decimal(str(ceiling)),
            rate=Decimal(str(rate)) / 100,
        )
    calculator = TaxCalculator()
    calc_result = calculator.calculate_tax_manual(
        Decimal(str(revenue_12m)), Decimal(str(gross)), bracket, contribution
    )

    table = Table(title="Cálculo do Simples Nacional", show_header=True)
    table.add_column("Campo", style="cyan")
    table.add_column("Valor", style="green", justify="right")
    table.add_row("Faixa aplicada", format_bracket_ordinal(calc_result.bracket_applied))
    table.add_row("Alíquota efetiva", format_percent(calc_result.effective_rate * 100))
    table.add_row("Receita bruta", _money(calc_result.gross_amount))
    table.add_row("Imposto", _money(calc_result.tax_amount))
    table.add_row("Receita líquida", _money(calc_result.net_amount))
    if calc_result.contribution_amount is not None:
        table.add_row("INSS mensal", _money(calc_result.contribution_amount))
        table.add_row("Total de tributos", _money(calc_result.total_tax))
    console.print(table)
    actual = calc_result.revenue_12m if calc_result.revenue_12m > 0 else calc_result.gross_amount
    if calc_result.manual_override is not None and calc_result.revenue_basis != actual:
        typer.echo(f"Faixa manual: alíquota calculada sobre {_money(calc_result.revenue_basis)}")


@app.command(name="bracket")
def bracket_cmd(
    revenue_12m: float = typer.Argument(..., help="Trailing 12-month gross revenue (RBT12)"),
    bracket: int = typer.Option(0, "--bracket", "-b", help="Force a bracket (1-6); 0 is automatic"),
) -> None:
    """Show the bracket, effective rate, and next threshold for a revenue."""
    revenue = Decimal(str(revenue_12m))
    info = TaxCalculator().bracket_info_manual(revenue, bracket)
    typer.echo(f"Faixa: {format_bracket_ordinal(info.bracket)}")
    typer.echo(f"Alíquota efetiva: {format_percent(info.rate_percent)}")
    typer.echo(f"Próxima faixa em: {_money(info.next_threshold)}")
    typer.echo(f"Valor até a próxima faixa: {_money(max(info.next_threshold - revenue, Decimal('0')))}")


@app.command()
def warning(
    current_revenue: float = typer.Argument(..., help="Trailing 12-month revenue"),
    projected_revenue: float = typer.Argument(0, help="Projected annual revenue"),
) -> None:
    """Evaluate how close a revenue is to the next bracket."""
    calculator = TaxCalculator()
    current = Decimal(str(current_revenue))
    info = calculator.bracket_info(current)
    result = BracketWarningEngine(calculator.table).evaluate(
        current, Decimal(str(projected_revenue)), info.bracket
    )
    typer.echo(f"Nível: {result.level.value}")
    typer.echo(f"Progresso na faixa: {format_percent(result.percent_to_next)}")
    typer.echo(f"Faixa projetada: {format_bracket_ordinal(result.projected_bracket)}")
    if result.message:
        typer.echo(result.message)


@income_app.command("add")
def income_add(
    amount_usd: float = typer.Argument(..., help="Amount received, in the payment currency"),
    exchange_rate: float = typer.Option(1, "--rate", "-r", help="Exchange rate to BRL"),
    income_date: datetime | None = typer.Option(
        None, "--date", "-d", formats=["%Y-%m-%d"], help="Date received (default: today)"
    ),
    account: int = typer.Option(1, "--account", "-a", help="Account receiving the payment"),
    entity: list[int] | None = typer.Option(
        None, "--entity", "-e", help="Accounts forming the taxed entity (default: --account)"
    ),
    description: str = typer.Option("", "--description", help="Free-text description"),
    db: Path = _db_option(),
) -> None:
    """Record a payment, taxing it at the entity's current rate."""
    conn = _connect(db)
    try:
        repo = IncomeRepository(conn)
        income = IncomeRecorder(repo).record_income(
            account_id=account,
            income_date=(income_date or datetime.now()).date(),
            amount_usd=Decimal(str(amount_usd)),
            exchange_rate=Decimal(str(exchange_rate)),
            entity_account_ids=entity or [account],
            settings=repo.get_settings(),
            description=description,
        )
    except FiscalError as exc:
        _fail(exc)
    finally:
        conn.close()

    typer.echo(f"Recorded {income.id}")
    typer.echo(f"  Receita bruta: {_money(income.gross_amount)}")
    typer.echo(f"  Imposto: {_money(income.tax_amount)}")
    typer.echo(f"  Receita líquida: {_money(income.net_amount)}")


@income_app.command("list")
def income_list(
    year: int | None = typer.Option(None, "--year", "-y", help="Only show this calendar year"),
    accounts: list[int] = _accounts_option(),
    db: Path = _db_option(),
) -> None:
    """List recorded income, newest first."""
    conn = _connect(db)
    try:
        repo = IncomeRepository(conn)
        if year is not None:
            incomes = repo.get_incomes(accounts, date(year, 1, 1), date(year, 12, 31))
        else:
            incomes = repo.get_incomes(accounts)
    finally:
        conn.close()

    if not incomes:
        typer.echo("No income recorded.")
        return

    table = Table(title="Receitas", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Data")
    table.add_column("Conta", justify="right")
    table.add_column("Bruto", justify="right", style="green")
    table.add_column("Imposto", justify="right", style="red")
    table.add_column("Líquido", justify="right")
    for income in incomes:
        table.add_row(
            income.id[:8],
            income.income_date.strftime("%d/%m/%Y"),
            str(income.account_id),
            format_currency(income.gross_amount),
            format_currency(income.tax_amount),
            format_currency(income.net_amount),
        )
    console.print(table)


@income_app.command("delete")
def income_delete(
    income_id: str = typer.Argument(..., help="ID of the income record"),
    db: Path = _db_option(),
) -> None:
    """Delete a recorded income."""
    conn = _connect(db)
    try:
        removed = IncomeRepository(conn).delete_income(income_id)
    finally:
        conn.close()
    if not removed:
        typer.echo(f"Error: Income not found: {income_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Deleted {income_id}")


@settings_app.command("show")
def settings_show(db: Path = _db_option()) -> None:
    """Show the current fiscal settings."""
    conn = _connect(db)
    try:
        settings = IncomeRepository(conn).get_settings()
    finally:
        conn.close()

    typer.echo(f"pro_labore: {_money(settings.pro_labore)}")
    typer.echo(f"contribution_ceiling: {_money(settings.contribution_ceiling)}")
    typer.echo(f"contribution_rate: {format_percent(settings.contribution_rate)}")
    manual = settings.manual_bracket
    typer.echo(f"manual_bracket: {format_bracket_ordinal(manual) if manual else 'automática'}")


@settings_app.command("set")
def settings_set(
    key: str = typer.Argument(..., help="Setting name"),
    value: str = typer.Argument(..., help="New value"),
    db: Path = _db_option(),
) -> None:
    """Change a fiscal setting."""
    conn = _connect(db)
    try:
        IncomeRepository(conn).save_setting(key, value)
    except FiscalError as exc:
        _fail(exc)
    finally:
        conn.close()
    typer.echo(f"{key} = {value}")


@app.command()
def projection(
    year: int | None = typer.Option(None, "--year", "-y", help="Year to project (default: current)"),
    accounts: list[int] = _accounts_option(),
    db: Path = _db_option(),
) -> None:
    """Year-to-date figures and straight-line annual projection."""
    conn = _connect(db)
    try:
        repo = IncomeRepository(conn)
        contribution = repo.get_settings().contribution_config()
        engine = TaxProjectionEngine(repo)
        now = datetime.now()
        result = engine.tax_projection_for_year(year or now.year, accounts, contribution, as_of=now)
    finally:
        conn.close()

    table = Table(title=f"Projeção {result.year}", show_header=True)
    table.add_column("", style="cyan")
    table.add_column("Acumulado", justify="right")
    table.add_column("Projetado", justify="right")
    table.add_row("Receita bruta", format_currency(result.ytd_income), format_currency(result.projected_annual_income))
    table.add_row("Imposto", format_currency(result.ytd_tax), format_currency(result.projected_annual_tax))
    table.add_row(
        "INSS", format_currency(result.ytd_contribution), format_currency(result.projected_annual_contribution)
    )
    table.add_row(
        "Receita líquida", format_currency(result.ytd_net_income), format_currency(result.projected_net_income)
    )
    console.print(table)
    typer.echo(f"Meses decorridos: {result.months_elapsed}")
    if result.current_bracket:
        typer.echo(f"Faturamento 12 meses: {_money(result.revenue_12m)}")
        typer.echo(
            f"Faixa: {format_bracket_ordinal(result.current_bracket)} "
            f"({format_percent(result.effective_rate)})"
        )
    if result.bracket_warning is not None and result.bracket_warning.message:
        typer.echo(f"Alerta [{result.bracket_warning.level.value}]: {result.bracket_warning.message}")


@app.command()
def breakdown(
    year: int = typer.Argument(..., help="Calendar year"),
    accounts: list[int] = _accounts_option(),
    db: Path = _db_option(),
) -> None:
    """Per-month gross, tax, contribution, and net for a year."""
    conn = _connect(db)
    try:
        repo = IncomeRepository(conn)
        contribution = repo.get_settings().contribution_config()
        months = TaxProjectionEngine(repo).monthly_breakdown(year, accounts, contribution)
    finally:
        conn.close()

    table = Table(title=f"Impostos Mensais {year}", show_header=True)
    table.add_column("Mês", style="cyan")
    table.add_column("Bruto", justify="right")
    table.add_column("Imposto", justify="right")
    table.add_column("INSS", justify="right")
    table.add_column("Líquido", justify="right")
    for m in months:
        table.add_row(
            m.month_name,
            format_currency(m.gross_income),
            format_currency(m.tax_paid),
            format_currency(m.contribution_paid),
            format_currency(m.net_income),
        )
    console.print(table)


@app.command()
def report(
    year: int = typer.Argument(..., help="Calendar year of the report"),
    output_format: ReportFormat = typer.Option(ReportFormat.TEXT, "--format", "-f", help="text, pdf or xlsx"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write the report to this file"),
    accounts: list[int] = _accounts_option(),
    db: Path = _db_option(),
) -> None:
    """Generate the yearly fiscal report as text, PDF, or an Excel workbook."""
    conn = _connect(db)
    try:
        repo = IncomeRepository(conn)
        generator = TaxReportGenerator(TaxProjectionEngine(repo))
        tax_report = generator.build(year, accounts, repo.get_settings())
    finally:
        conn.close()

    if output_format == ReportFormat.PDF:
        path = output or Path(f"relatorio_fiscal_{year}.pdf")
        TaxReportPDFGenerator().write(tax_report, path)
        typer.echo(f"PDF report written to {path}")
        return
    if output_format == ReportFormat.XLSX:
        path = output or Path(f"relatorio_fiscal_{year}.xlsx")
        TaxReportXLSXGenerator().write(tax_report, path)
        typer.echo(f"Excel report written to {path}")
        return

    text = generator.render(tax_report)
    if output is not None:
        output.write_text(text, encoding="utf-8")
        typer.echo(f"Report written to {output}")
    else:
        typer.echo(text)


if __name__ == "__main__":
    app()
