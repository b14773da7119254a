"""Tests for the SQLite income repository and schema."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from fiscal.db.schema import SCHEMA_VERSION, create_schema
from fiscal.exceptions import DataValidationError, FiscalError
from fiscal.models.reports import AuditEntry
from fiscal.models.settings import DEFAULT_CONTRIBUTION_CEILING, DEFAULT_CONTRIBUTION_RATE


class TestSchema:
    def test_tables_created(self, db_path):
        conn = create_schema(db_path)
        tables = {
            row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }
        conn.close()
        assert {"schema_version", "incomes", "settings", "audit_log"} <= tables

    def test_version_recorded_once(self, db_path):
        create_schema(db_path).close()
        conn = create_schema(db_path)
        versions = conn.execute("SELECT version FROM schema_version").fetchall()
        conn.close()
        assert versions == [(SCHEMA_VERSION,)]


class TestIncomes:
    def test_save_and_get(self, repo, make_income):
        income_id = repo.save_income(make_income(date(2025, 3, 1), "1234.56", "74.07"))
        incomes = repo.get_incomes([1])
        assert len(incomes) == 1
        assert incomes[0].id == income_id
        assert incomes[0].gross_amount == Decimal("1234.56")
        assert incomes[0].net_amount == Decimal("1160.49")

    def test_decimal_precision_preserved(self, repo, make_income):
        repo.save_income(make_income(date(2025, 3, 1), "0.1", "0.0000001"))
        stored = repo.get_incomes([1])[0]
        assert stored.tax_amount == Decimal("0.0000001")

    def test_newest_first(self, repo, make_income):
        repo.save_income(make_income(date(2025, 1, 1), "1"))
        repo.save_income(make_income(date(2025, 5, 1), "2"))
        repo.save_income(make_income(date(2025, 3, 1), "3"))
        dates = [i.income_date for i in repo.get_incomes([1])]
        assert dates == [date(2025, 5, 1), date(2025, 3, 1), date(2025, 1, 1)]

    def test_date_filter_inclusive(self, repo, make_income):
        repo.save_income(make_income(date(2025, 1, 1), "1"))
        repo.save_income(make_income(date(2025, 1, 31), "2"))
        repo.save_income(make_income(date(2025, 2, 1), "3"))
        incomes = repo.get_incomes([1], date(2025, 1, 1), date(2025, 1, 31))
        assert len(incomes) == 2

    def test_account_filter(self, repo, make_income):
        repo.save_income(make_income(date(2025, 1, 1), "1", account_id=1))
        repo.save_income(make_income(date(2025, 1, 1), "2", account_id=2))
        assert len(repo.get_incomes([2])) == 1
        assert len(repo.get_incomes([1, 2])) == 2
        assert repo.get_incomes([]) == []

    def test_delete(self, repo, make_income):
        income_id = repo.save_income(make_income(date(2025, 1, 1), "1"))
        assert repo.delete_income(income_id) is True
        assert repo.get_incomes([1]) == []
        assert repo.delete_income(income_id) is False


class TestAggregation:
    @pytest.fixture
    def populated(self, repo, make_income):
        repo.save_income(make_income(date(2024, 3, 15), "50000", "3000"))
        repo.save_income(make_income(date(2025, 1, 10), "10000", "600"))
        repo.save_income(make_income(date(2025, 1, 31), "5000", "300"))
        repo.save_income(make_income(date(2025, 2, 1), "20000", "1200", account_id=2))
        return repo

    def test_sums(self, populated):
        start, end = date(2025, 1, 1), date(2025, 1, 31)
        assert populated.sum_gross(start, end, [1]) == Decimal("15000")
        assert populated.sum_tax(start, end, [1]) == Decimal("900")
        assert populated.sum_net(start, end, [1]) == Decimal("14100")

    def test_sums_across_accounts(self, populated):
        assert populated.sum_gross(date(2025, 1, 1), date(2025, 12, 31), [1, 2]) == Decimal("35000")

    def test_empty_account_set_is_zero(self, populated):
        assert populated.sum_gross(date(2000, 1, 1), date(2100, 1, 1), []) == Decimal("0")
        assert populated.trailing_12_month_revenue([], date(2025, 6, 1)) == Decimal("0")

    def test_trailing_12_months(self, populated):
        assert populated.trailing_12_month_revenue([1], date(2025, 3, 15)) == Decimal("65000")
        assert populated.trailing_12_month_revenue([1], date(2025, 3, 16)) == Decimal("15000")

    def test_trailing_from_leap_day(self, repo, make_income):
        repo.save_income(make_income(date(2023, 2, 28), "100"))
        assert repo.trailing_12_month_revenue([1], date(2024, 2, 29)) == Decimal("100")

    def test_rejects_unknown_column(self, repo):
        with pytest.raises(ValueError):
            repo._sum("description", date(2025, 1, 1), date(2025, 1, 31), [1])


class TestSettings:
    def test_defaults(self, repo):
        settings = repo.get_settings()
        assert settings.pro_labore == Decimal("0")
        assert settings.contribution_ceiling == DEFAULT_CONTRIBUTION_CEILING
        assert settings.contribution_rate == DEFAULT_CONTRIBUTION_RATE
        assert settings.manual_bracket == 0
        assert settings.contribution_config() is None

    def test_save_and_load(self, repo):
        repo.save_setting("pro_labore", "15000")
        repo.save_setting("manual_bracket", "3")
        settings = repo.get_settings()
        assert settings.pro_labore == Decimal("15000")
        assert settings.manual_bracket == 3

    def test_contribution_config_from_settings(self, repo):
        repo.save_setting("pro_labore", "15000")
        config = repo.get_settings().contribution_config()
        assert config.base_amount == Decimal("15000")
        assert config.rate == Decimal("0.11")

    def test_overwrite(self, repo):
        repo.save_setting("pro_labore", "1000")
        repo.save_setting("pro_labore", "2000")
        assert repo.get_settings().pro_labore == Decimal("2000")

    def test_unknown_key(self, repo):
        with pytest.raises(DataValidationError, match="unknown setting"):
            repo.save_setting("inss_magic", "1")

    @pytest.mark.parametrize("value", ["abc", "", "1.5.2"])
    def test_not_a_number(self, repo, value):
        with pytest.raises(DataValidationError, match="not a number"):
            repo.save_setting("pro_labore", value)

    @pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", "-Infinity"])
    def test_non_finite_rejected(self, repo, value):
        with pytest.raises(DataValidationError, match="finite"):
            repo.save_setting("contribution_ceiling", value)
        assert repo.get_settings().contribution_ceiling == DEFAULT_CONTRIBUTION_CEILING

    def test_negative(self, repo):
        with pytest.raises(DataValidationError, match="negative"):
            repo.save_setting("contribution_rate", "-1")

    @pytest.mark.parametrize("value", ["7", "2.5"])
    def test_manual_bracket_range(self, repo, value):
        with pytest.raises(FiscalError):
            repo.save_setting("manual_bracket", value)

    def test_error_names_field(self, repo):
        with pytest.raises(DataValidationError) as exc_info:
            repo.save_setting("manual_bracket", "9")
        assert exc_info.value.field == "manual_bracket"


class TestAuditLog:
    def test_round_trip(self, repo):
        repo.save_audit_entry(AuditEntry(
            timestamp=datetime(2025, 6, 1, 10, 0),
            engine="TaxCalculator",
            operation="manual_bracket",
            inputs={"gross_amount": Decimal("10000"), "bracket_override": 2},
            output={"tax_amount": Decimal("600")},
            notes="note",
        ))
        entries = repo.get_audit_entries()
        assert len(entries) == 1
        assert entries[0]["inputs"] == {"gross_amount": "10000", "bracket_override": 2}
        assert entries[0]["output"] == {"tax_amount": "600"}
        assert entries[0]["notes"] == "note"

    def test_filter_by_operation(self, repo):
        for op in ("manual_bracket", "other"):
            repo.save_audit_entry(AuditEntry(
                timestamp=datetime(2025, 6, 1), engine="E", operation=op, inputs={}, output={},
            ))
        assert len(repo.get_audit_entries("other")) == 1
        assert len(repo.get_audit_entries()) == 2
