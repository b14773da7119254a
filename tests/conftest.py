"""Shared test fixtures for the fiscal tax core."""

from collections.abc import Sequence
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path

import pytest

from fiscal.db.aggregator import IncomeAggregator
from fiscal.db.repository import IncomeRepository
from fiscal.db.schema import create_schema
from fiscal.models.reports import Income
from fiscal.models.tax import ContributionConfig


class FakeAggregator(IncomeAggregator):
    """In-memory aggregator over (account_id, date, gross, tax, net) rows."""

    def __init__(self, rows: list[tuple[int, date, Decimal, Decimal, Decimal]] | None = None):
        self.rows = rows or []
        self.calls: list[tuple[str, date, date]] = []

    def add(self, account_id: int, day: date, gross: str, tax: str = "0", net: str | None = None) -> None:
        g, t = Decimal(gross), Decimal(tax)
        self.rows.append((account_id, day, g, t, Decimal(net) if net is not None else g - t))

    def _sum(self, column: int, start: date, end: date, account_ids: Sequence[int]) -> Decimal:
        return sum(
            (r[column] for r in self.rows if r[0] in account_ids and start <= r[1] <= end),
            Decimal("0"),
        )

    def sum_gross(self, start, end, account_ids):
        self.calls.append(("gross", start, end))
        return self._sum(2, start, end, account_ids)

    def sum_tax(self, start, end, account_ids):
        self.calls.append(("tax", start, end))
        return self._sum(3, start, end, account_ids)

    def sum_net(self, start, end, account_ids):
        self.calls.append(("net", start, end))
        return self._sum(4, start, end, account_ids)

    def trailing_12_month_revenue(self, account_ids, as_of):
        start = as_of.replace(year=as_of.year - 1)
        return self._sum(2, start, as_of, account_ids)


class FailingAggregator(IncomeAggregator):
    """Aggregator whose store is unavailable."""

    def sum_gross(self, start, end, account_ids):
        raise ConnectionError("store unavailable")

    def sum_tax(self, start, end, account_ids):
        raise ConnectionError("store unavailable")

    def sum_net(self, start, end, account_ids):
        raise ConnectionError("store unavailable")

    def trailing_12_month_revenue(self, account_ids, as_of):
        raise ConnectionError("store unavailable")


@pytest.fixture
def fake_aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest.fixture
def frozen_now() -> datetime:
    """Evaluation instant used by projection tests: mid-June 2025."""
    return datetime(2025, 6, 15, 12, 0, 0)


@pytest.fixture
def contribution_config() -> ContributionConfig:
    return ContributionConfig(
        base_amount=Decimal("15000"),
        ceiling=Decimal("7786.02"),
        rate=Decimal("0.11"),
    )


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    """Create a temporary database with schema."""
    path = tmp_path / "test_fiscal.db"
    conn = create_schema(path)
    conn.close()
    return path


@pytest.fixture
def repo(db_path: Path):
    conn = create_schema(db_path)
    yield IncomeRepository(conn)
    conn.close()


@pytest.fixture
def make_income():
    """Factory for stored income records with net = gross - tax."""

    def _make(day: date, gross: str, tax: str = "0", account_id: int = 1, description: str = "") -> Income:
        g, t = Decimal(gross), Decimal(tax)
        return Income(
            account_id=account_id,
            income_date=day,
            amount_usd=g,
            exchange_rate=Decimal("1"),
            gross_amount=g,
            tax_amount=t,
            net_amount=g - t,
            description=description,
        )

    return _make


@pytest.fixture
def failing_aggregator() -> FailingAggregator:
    return FailingAggregator()
