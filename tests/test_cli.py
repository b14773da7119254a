"""Tests for CLI commands."""

from pathlib import Path

import pytest
from openpyxl import load_workbook
from typer.testing import CliRunner

from fiscal.cli import app

runner = CliRunner()


@pytest.fixture
def db(tmp_path: Path) -> str:
    return str(tmp_path / "cli.db")


class TestHelp:
    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Simples Nacional" in result.output

    @pytest.mark.parametrize(
        "command",
        [["calc"], ["bracket"], ["warning"], ["projection"], ["breakdown"], ["report"],
         ["income", "add"], ["income", "list"], ["settings", "set"]],
    )
    def test_command_help(self, command):
        result = runner.invoke(app, [*command, "--help"])
        assert result.exit_code == 0


class TestCalculatorCommands:
    def test_calc(self):
        result = runner.invoke(app, ["calc", "270000", "10000"])
        assert result.exit_code == 0
        assert "2ª" in result.output
        assert "773,33" in result.output
        assert "9.226,67" in result.output

    def test_calc_with_contribution(self):
        result = runner.invoke(app, ["calc", "0", "10000", "--pro-labore", "15000"])
        assert result.exit_code == 0
        assert "600,00" in result.output
        assert "856,46" in result.output

    def test_calc_manual_bracket_midpoint(self):
        result = runner.invoke(app, ["calc", "100000", "10000", "--bracket", "3"])
        assert result.exit_code == 0
        assert "Faixa manual" in result.output
        assert "3ª" in result.output

    def test_calc_manual_bracket_without_revenue_uses_payment(self):
        result = runner.invoke(app, ["calc", "0", "10000", "--bracket", "1"])
        assert result.exit_code == 0
        assert "Faixa manual" not in result.output
        assert "600,00" in result.output

    def test_bracket(self):
        result = runner.invoke(app, ["bracket", "270000"])
        assert result.exit_code == 0
        assert "Faixa: 2ª" in result.output
        assert "Próxima faixa em: R$ 360.000,01" in result.output
        assert "Valor até a próxima faixa: R$ 90.000,01" in result.output

    def test_bracket_above_ceiling(self):
        result = runner.invoke(app, ["bracket", "5000000"])
        assert "Faixa: 6ª" in result.output
        assert "Valor até a próxima faixa: R$ 0,00" in result.output

    def test_warning_low(self):
        result = runner.invoke(app, ["warning", "126000", "150000"])
        assert result.exit_code == 0
        assert "Nível: low" in result.output
        assert "Informativo" in result.output

    def test_warning_critical(self):
        result = runner.invoke(app, ["warning", "150000", "200000"])
        assert "Nível: critical" in result.output
        assert "Faixa projetada: 2ª" in result.output

    def test_warning_last_bracket(self):
        result = runner.invoke(app, ["warning", "4000000", "5000000"])
        assert "Nível: none" in result.output
        assert "última faixa" in result.output


class TestIncomeCommands:
    def test_add_and_list(self, db):
        result = runner.invoke(
            app, ["income", "add", "2000", "--rate", "5", "--date", "2025-03-01", "--db", db]
        )
        assert result.exit_code == 0, result.output
        assert "Recorded" in result.output
        assert "R$ 10.000,00" in result.output
        assert "R$ 600,00" in result.output

        result = runner.invoke(app, ["income", "list", "--db", db])
        assert result.exit_code == 0
        assert "01/03/2025" in result.output
        assert "9.400,00" in result.output

    def test_list_empty(self, db):
        result = runner.invoke(app, ["income", "list", "--db", db])
        assert result.exit_code == 0
        assert "No income recorded." in result.output

    def test_list_year_filter(self, db):
        runner.invoke(app, ["income", "add", "100", "--date", "2024-03-01", "--db", db])
        result = runner.invoke(app, ["income", "list", "--year", "2025", "--db", db])
        assert "No income recorded." in result.output

    def test_add_uses_manual_bracket_setting(self, db):
        runner.invoke(app, ["settings", "set", "manual_bracket", "1", "--db", db])
        result = runner.invoke(
            app, ["income", "add", "10000", "--date", "2025-03-01", "--db", db]
        )
        assert "R$ 600,00" in result.output

    def test_delete_missing(self, db):
        result = runner.invoke(app, ["income", "delete", "nope", "--db", db])
        assert result.exit_code == 1
        assert "Income not found" in result.output


class TestSettingsCommands:
    def test_show_defaults(self, db):
        result = runner.invoke(app, ["settings", "show", "--db", db])
        assert result.exit_code == 0
        assert "contribution_ceiling: R$ 7.786,02" in result.output
        assert "contribution_rate: 11%" in result.output
        assert "manual_bracket: automática" in result.output

    def test_set_and_show(self, db):
        result = runner.invoke(app, ["settings", "set", "pro_labore", "15000", "--db", db])
        assert result.exit_code == 0
        result = runner.invoke(app, ["settings", "show", "--db", db])
        assert "pro_labore: R$ 15.000,00" in result.output

    def test_set_invalid(self, db):
        result = runner.invoke(app, ["settings", "set", "manual_bracket", "9", "--db", db])
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_set_non_finite(self, db):
        result = runner.invoke(app, ["settings", "set", "pro_labore", "NaN", "--db", db])
        assert result.exit_code == 1
        assert "finite" in result.output


class TestProjectionCommands:
    @pytest.fixture
    def populated(self, db):
        for day, amount in [("2024-02-10", "10000"), ("2024-07-10", "20000")]:
            runner.invoke(app, ["income", "add", amount, "--date", day, "--db", db])
        return db

    def test_projection_past_year(self, populated):
        result = runner.invoke(app, ["projection", "--year", "2024", "--db", populated])
        assert result.exit_code == 0
        assert "Meses decorridos: 12" in result.output
        assert "30.000,00" in result.output

    def test_breakdown(self, populated):
        result = runner.invoke(app, ["breakdown", "2024", "--db", populated])
        assert result.exit_code == 0
        assert "Fevereiro" in result.output
        assert "10.000,00" in result.output

    def test_text_report(self, populated):
        result = runner.invoke(app, ["report", "2024", "--db", populated])
        assert result.exit_code == 0
        assert "RELATÓRIO FISCAL 2024" in result.output

    def test_text_report_to_file(self, populated, tmp_path):
        out = tmp_path / "relatorio.txt"
        result = runner.invoke(app, ["report", "2024", "--output", str(out), "--db", populated])
        assert result.exit_code == 0
        assert "IMPOSTOS MENSAIS" in out.read_text(encoding="utf-8")

    def test_pdf_report(self, populated, tmp_path):
        out = tmp_path / "relatorio.pdf"
        result = runner.invoke(
            app, ["report", "2024", "--format", "pdf", "--output", str(out), "--db", populated]
        )
        assert result.exit_code == 0
        assert out.read_bytes().startswith(b"%PDF")

    def test_xlsx_report(self, populated, tmp_path):
        out = tmp_path / "relatorio.xlsx"
        result = runner.invoke(
            app, ["report", "2024", "--format", "xlsx", "--output", str(out), "--db", populated]
        )
        assert result.exit_code == 0
        assert "Excel report written to" in result.output
        assert load_workbook(out)["Impostos Mensais"]["B3"].value == 10000

    def test_verbose_flag(self, populated):
        result = runner.invoke(app, ["--verbose", "projection", "--year", "2024", "--db", populated])
        assert result.exit_code == 0
